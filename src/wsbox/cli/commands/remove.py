"""wsbox remove command - Delete the workspace image and its state files."""

from pathlib import Path
from typing import Optional

from ...core.exceptions import EngineError, NotFoundError
from ...core.remover import ImageRemover
from ..utils import console, fail, get_engine, load_settings, workspace_state


def remove_command(workspace: Optional[Path] = None):
    """Remove this workspace's image. A fresh name is assigned on the next build."""
    settings = load_settings()
    state = workspace_state(workspace, settings)
    remover = ImageRemover(state, get_engine(settings))

    try:
        result = remover.remove_workspace()
    except NotFoundError as e:
        console.print(f"[yellow]Nothing to remove:[/yellow] {e}")
        return
    except EngineError as e:
        console.print("[yellow]Workspace state was cleared, but the image is still present.[/yellow]")
        fail(f"{e} (is a container still using it?)")

    if result.image_removed:
        console.print(f"[green]✓[/green] Removed image [cyan]{result.image_name}[/cyan]")
    else:
        console.print(
            f"[yellow]⚠[/yellow] Image [cyan]{result.image_name}[/cyan] was not found"
        )
    for path in result.cleared_files:
        console.print(f"[green]✓[/green] Deleted {path.name}")
