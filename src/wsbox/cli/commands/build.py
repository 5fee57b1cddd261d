"""wsbox build command - (Re)build the workspace image."""

from pathlib import Path
from typing import Optional, Sequence

from ...core.decision import BuildDecision, BuildDecisionEngine
from ...core.exceptions import EngineError
from ...core.tools import ToolSpec, format_tool_list, parse_tool_list
from ..utils import console, fail, get_engine, load_settings, workspace_state


def prepare_workspace_image(
    decider: BuildDecisionEngine,
    force: bool = False,
    no_cache: bool = False,
    tools: Sequence[ToolSpec] = (),
    rebuild_base: bool = False,
) -> BuildDecision:
    """
    Run the build decision and build whatever it asks for.

    The base image is only touched when a workspace build is about to happen
    (and it is missing) or when ``rebuild_base`` is set. A rebuilt base always
    forces a workspace rebuild so the container picks up the new layers.

    Raises:
        EngineError: If a build fails
    """
    decision = decider.decide(
        force=force or rebuild_base, no_cache=no_cache, tools=tools
    )

    if decision.rebuild:
        if decider.ensure_base_image(force=rebuild_base):
            console.print(
                f"[green]✓[/green] Built base image [cyan]{decider.settings.base_image}[/cyan]"
            )

    if not decision.rebuild:
        console.print(f"[green]✓[/green] {decision.describe()}")
        return decision

    console.print(f"🔨 {decision.describe()}")
    if decision.tools:
        source = " (from tool manifest)" if decision.tools_from_manifest else ""
        console.print(f"   Tools: {format_tool_list(decision.tools)}{source}")
    if not decision.use_cache:
        console.print("   Cache: disabled")

    decider.execute(decision)
    console.print(
        f"[green]✓[/green] Built [cyan]{decision.image_name}[/cyan] "
        f"(fingerprint {decision.fingerprint})"
    )
    return decision


def build_command(
    workspace: Optional[Path] = None,
    no_cache: bool = False,
    install: Optional[str] = None,
    rebuild_base: bool = False,
):
    """
    Force a rebuild of the workspace image.

    Examples:
      wsbox build                              # Rebuild with cache
      wsbox build --no-cache                   # Rebuild from scratch
      wsbox build --install python@3.12.8,jq   # Rebuild with extra tools
    """
    settings = load_settings()
    state = workspace_state(workspace, settings)
    tools = parse_tool_list(install)

    decider = BuildDecisionEngine(state, get_engine(settings), settings)
    try:
        prepare_workspace_image(
            decider,
            force=True,
            no_cache=no_cache,
            tools=tools,
            rebuild_base=rebuild_base,
        )
    except EngineError as e:
        fail(f"{e}. The previous fingerprint was kept; the next run will retry.")
