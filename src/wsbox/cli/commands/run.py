"""wsbox run command - Ensure the workspace image is current and start it."""

from pathlib import Path
from typing import List, Optional

import typer

from ...core.decision import BuildDecisionEngine
from ...core.exceptions import ConfigError, EngineError
from ...core.tools import parse_tool_list
from ..utils import console, fail, get_engine, load_settings, workspace_state
from .build import prepare_workspace_image


def container_command(shell: bool, command: Optional[str]) -> Optional[List[str]]:
    """Command to run inside the container; None keeps the image default."""
    if shell:
        return ["bash", "-l"]
    if command:
        return ["bash", "-lc", command]
    return None


def validate_run_options(
    build: bool, install: Optional[str], shell: bool, command: Optional[str]
) -> None:
    """
    Reject invalid flag combinations before anything touches the engine.

    Raises:
        ConfigError: On an invalid combination
    """
    if install and not build:
        raise ConfigError("--install requires --build")
    if shell and command:
        raise ConfigError("--shell and --command cannot be used together")


def run_command(
    workspace: Optional[Path] = None,
    build: bool = False,
    no_cache: bool = False,
    install: Optional[str] = None,
    shell: bool = False,
    command: Optional[str] = None,
    docker_socket: bool = False,
    rebuild_base: bool = False,
):
    """Build the workspace image if needed, then launch a container from it."""
    try:
        validate_run_options(build, install, shell, command)
    except ConfigError as e:
        fail(str(e))

    settings = load_settings()
    state = workspace_state(workspace, settings)
    engine = get_engine(settings)
    decider = BuildDecisionEngine(state, engine, settings)

    try:
        decision = prepare_workspace_image(
            decider,
            force=build,
            no_cache=no_cache,
            tools=parse_tool_list(install),
            rebuild_base=rebuild_base,
        )
        exit_code = engine.run_container(
            decision.image_name,
            state.workspace_dir,
            command=container_command(shell, command),
            interactive=not command,
            mount_engine_socket=docker_socket,
        )
    except EngineError as e:
        fail(str(e))

    if exit_code:
        console.print(f"[yellow]Container exited with status {exit_code}[/yellow]")
        raise typer.Exit(exit_code)
