"""wsbox status command - Show the workspace's image record."""

from pathlib import Path
from typing import Optional

from rich.panel import Panel
from rich.table import Table

from ...core.decision import BuildDecisionEngine
from ...core.exceptions import EngineError
from ..utils import console, fail, get_engine, load_settings, workspace_state


def status_command(workspace: Optional[Path] = None):
    """Show image name, fingerprint state and tool manifest for a workspace."""
    settings = load_settings()
    state = workspace_state(workspace, settings)
    record = state.load_record()

    if record is None:
        console.print(
            Panel(
                "No image assigned yet\n\n"
                "Run [bold]wsbox build[/bold] or [bold]wsbox run[/bold] to create one.",
                title=str(state.workspace_dir),
                expand=False,
            )
        )
        return

    engine = get_engine(settings)
    decider = BuildDecisionEngine(state, engine, settings)
    current = decider.current_fingerprint()
    try:
        exists = engine.image_exists(record.image_name)
    except EngineError as e:
        fail(str(e))

    if not exists:
        drift = "[yellow]image missing[/yellow]"
    elif record.fingerprint is None:
        drift = "[dim]unknown[/dim]"
    elif record.fingerprint == current:
        drift = "[green]up to date[/green]"
    else:
        drift = "[yellow]changed[/yellow]"

    table = Table(show_header=False, box=None)
    table.add_column(style="bold")
    table.add_column()
    table.add_row("Image", record.image_name)
    table.add_row("Present", "yes" if exists else "no")
    table.add_row("Built fingerprint", record.fingerprint or "-")
    table.add_row("Current fingerprint", current)
    table.add_row("Status", drift)
    table.add_row(
        "Tool manifest",
        str(state.tool_manifest) if state.tool_manifest.is_file() else "-",
    )
    table.add_row("Base image", settings.base_image)

    console.print(Panel(table, title=str(state.workspace_dir), expand=False))
