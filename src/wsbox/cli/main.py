"""Main CLI entry point for wsbox."""

from importlib import metadata
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.panel import Panel


def get_version() -> str:
    """Get the package version from metadata."""
    try:
        return metadata.version("wsbox")
    except metadata.PackageNotFoundError:
        return "unknown"


console = Console()

WORKSPACE_OPTION = typer.Option(
    None,
    "--workspace",
    "-w",
    help="Workspace directory (defaults to current directory)",
    file_okay=False,
)

# command: wsbox
app = typer.Typer(
    name="wsbox",
    help="wsbox - per-workspace sandbox images with drift detection and cleanup",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


@app.command("run")
def run_cmd(
    workspace: Optional[Path] = WORKSPACE_OPTION,
    build: bool = typer.Option(False, "--build", "-b", help="Force a rebuild first"),
    no_cache: bool = typer.Option(False, "--no-cache", help="Build without layer cache"),
    install: Optional[str] = typer.Option(
        None,
        "--install",
        "-i",
        help="Tools to install, e.g. python@3.12.8,nodejs (requires --build)",
    ),
    shell: bool = typer.Option(False, "--shell", "-s", help="Open a login shell"),
    command: Optional[str] = typer.Option(
        None, "--command", "-c", help="Run a command non-interactively"
    ),
    docker_socket: bool = typer.Option(
        False, "--docker-socket", "-d", help="Mount the host engine socket"
    ),
    rebuild_base: bool = typer.Option(
        False, "--rebuild-base", help="Rebuild the shared base image"
    ),
):
    """Build the workspace image if needed and start a container."""
    from .commands.run import run_command

    return run_command(
        workspace, build, no_cache, install, shell, command, docker_socket, rebuild_base
    )


@app.command("build")
def build_cmd(
    workspace: Optional[Path] = WORKSPACE_OPTION,
    no_cache: bool = typer.Option(False, "--no-cache", help="Build without layer cache"),
    install: Optional[str] = typer.Option(
        None, "--install", "-i", help="Tools to install, e.g. python@3.12.8,nodejs"
    ),
    rebuild_base: bool = typer.Option(
        False, "--rebuild-base", help="Rebuild the shared base image"
    ),
):
    """Rebuild the workspace image."""
    from .commands.build import build_command

    return build_command(workspace, no_cache, install, rebuild_base)


@app.command("cleanup")
def cleanup_cmd(
    workspace: Optional[Path] = WORKSPACE_OPTION,
    older_than: Optional[int] = typer.Option(
        None,
        "--older-than",
        help="Remove images at least DAYS old (default: WSBOX_CLEANUP_DAYS or 7)",
        metavar="DAYS",
    ),
    dry_run: bool = typer.Option(False, "--dry-run", help="Only show the plan"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation prompt"),
    strict: bool = typer.Option(
        False, "--strict", help="Exit with status 1 if any removal fails"
    ),
):
    """Remove stale workspace images."""
    from .commands.cleanup import cleanup_command

    return cleanup_command(workspace, older_than, dry_run, yes, strict)


@app.command("remove")
def remove_cmd(workspace: Optional[Path] = WORKSPACE_OPTION):
    """Remove this workspace's image and state files."""
    from .commands.remove import remove_command

    return remove_command(workspace)


@app.command("status")
def status_cmd(workspace: Optional[Path] = WORKSPACE_OPTION):
    """Show this workspace's image and fingerprint state."""
    from .commands.status import status_command

    return status_command(workspace)


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    version: bool = typer.Option(False, "--version", "-v", help="Show version"),
):
    """wsbox - per-workspace sandbox images with drift detection and cleanup."""
    if version:
        console.print(f"wsbox v{get_version()}")
        raise typer.Exit()

    if ctx.invoked_subcommand is None:
        console.print(
            Panel(
                "[bold blue]wsbox[/bold blue]\n\n"
                "Per-workspace sandbox images, rebuilt only when they drift.\n\n"
                "Use [bold]wsbox --help[/bold] to see available commands.",
                title="Welcome",
                expand=False,
            )
        )


if __name__ == "__main__":
    app()
