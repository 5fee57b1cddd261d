"""Helpers shared by the wsbox commands."""

from pathlib import Path
from typing import NoReturn, Optional

import typer
from rich.console import Console

from ..config import WsboxSettings, get_settings
from ..core.engine import ContainerEngine, DockerEngine
from ..core.exceptions import ConfigError
from ..core.state import WorkspaceState

console = Console()


def fail(message: str, code: int = 1) -> NoReturn:
    """Print an error and exit with ``code``."""
    console.print(f"[red]Error:[/red] {message}")
    raise typer.Exit(code)


def load_settings() -> WsboxSettings:
    try:
        return get_settings()
    except ConfigError as e:
        fail(str(e))


def get_engine(settings: WsboxSettings) -> ContainerEngine:
    """Engine factory; patched in tests."""
    return DockerEngine(settings.engine)


def resolve_workspace(workspace: Optional[Path]) -> Path:
    workspace_dir = (workspace or Path.cwd()).resolve()
    if not workspace_dir.is_dir():
        fail(f"Workspace directory does not exist: {workspace_dir}")
    return workspace_dir


def workspace_state(workspace: Optional[Path], settings: WsboxSettings) -> WorkspaceState:
    return WorkspaceState(resolve_workspace(workspace), settings)
