"""wsbox cleanup command - Remove stale workspace images."""

from pathlib import Path
from typing import Optional

import questionary
from rich.panel import Panel
from rich.table import Table

from ...core.cleanup import CleanupPlan, ImageCleanupPlanner, ImageStatus
from ...core.exceptions import ConfigError, EngineError, PartialFailure
from ..utils import console, fail, get_engine, load_settings, workspace_state

STATUS_STYLES = {
    ImageStatus.CURRENT: "[green]current[/green]",
    ImageStatus.RECENT: "[blue]recent[/blue]",
    ImageStatus.STALE: "[yellow]stale[/yellow]",
}


def generate_plan_table(plan: CleanupPlan) -> Table:
    """Render every classified image, removals first."""
    table = Table(title=f"Workspace images (stale after {plan.max_age_days} days)")
    table.add_column("Image", style="cyan", no_wrap=True)
    table.add_column("Created")
    table.add_column("Age (days)", justify="right")
    table.add_column("Size", justify="right")
    table.add_column("Status", justify="center")

    for item in [*plan.remove, *plan.keep]:
        table.add_row(
            item.image.reference,
            item.image.created_at.strftime("%Y-%m-%d %H:%M"),
            f"{item.age_days:.1f}",
            item.image.size,
            STATUS_STYLES[item.status],
        )
    return table


def cleanup_command(
    workspace: Optional[Path] = None,
    older_than: Optional[int] = None,
    dry_run: bool = False,
    yes: bool = False,
    strict: bool = False,
):
    """Remove workspace images older than the threshold, keeping this workspace's image."""
    settings = load_settings()
    state = workspace_state(workspace, settings)
    max_age_days = settings.cleanup_days if older_than is None else older_than

    planner = ImageCleanupPlanner(
        get_engine(settings), settings, current_image=state.load_image_name()
    )
    try:
        plan = planner.plan(max_age_days)
    except (ConfigError, EngineError) as e:
        fail(str(e))

    if not plan.remove and not plan.keep:
        console.print("🧹 No workspace images found")
        return

    console.print(generate_plan_table(plan))

    if not plan.remove:
        console.print("🧹 No stale images to remove")
        return

    console.print(
        f"\n{len(plan.remove)} image(s) to remove, ~{plan.reclaimable_size} reclaimable"
    )

    if dry_run:
        console.print("[yellow]Dry run:[/yellow] no images were removed")
        return

    if not yes:
        try:
            confirmed = questionary.confirm(
                f"Remove {len(plan.remove)} stale image(s)?", default=False
            ).ask()
        except KeyboardInterrupt:
            confirmed = False
        if not confirmed:
            console.print("Cleanup cancelled")
            return

    try:
        result = planner.execute(plan, strict=strict)
    except PartialFailure as e:
        result = e.result
        _print_result(result)
        fail(str(e))

    _print_result(result)


def _print_result(result) -> None:
    for reference in result.removed:
        console.print(f"[green]✓[/green] Removed [cyan]{reference}[/cyan]")
    for reference, reason in result.failed.items():
        console.print(f"[red]✗[/red] {reference}: {reason}")

    summary = f"Removed {len(result.removed)} image(s)"
    if result.failed:
        summary += f", {len(result.failed)} failed"
    console.print(Panel(summary, title="Cleanup Summary", expand=False))
