from __future__ import annotations

from typing import Optional

from rich import box
from rich.console import Console
from rich.table import Table

from bezelgen.database.serializer import device_sort_key, format_number
from bezelgen.lifecycle.abstract import BatchResult, GroupOutcome


def _outcome_cells(outcome: GroupOutcome) -> tuple[str, str]:
    if outcome.succeeded and outcome.group.metric is not None:
        return "[green]measured[/green]", format_number(outcome.group.metric)
    reason = outcome.reason.value if outcome.reason else "Unknown"
    return f"[red]{reason}[/red]", "N/A"


def build_summary_table(result: BatchResult) -> Table:
    """
    Render one row per work group, in model-number order.

    Failed groups show their failure reason and the last lifecycle stage
    they reached.
    """
    processed = len(result.processed)
    failed = len(result.failed)
    table = Table(
        title="Bezel Measurement Results",
        box=box.ROUNDED,
        caption=f"{processed} measured │ {failed} failed",
    )

    table.add_column("Simulator", style="cyan", no_wrap=True)
    table.add_column("Identifiers", style="magenta")
    table.add_column("Outcome")
    table.add_column("Bezel", justify="right", style="bold green")
    table.add_column("Stage Reached", style="blue")
    table.add_column("Duration (s)", justify="right", style="yellow")

    ordered = sorted(
        result.outcomes,
        key=lambda outcome: (
            device_sort_key(outcome.group.identifiers[0]),
            outcome.group.identifiers[0],
        ),
    )
    for outcome in ordered:
        status, metric = _outcome_cells(outcome)
        table.add_row(
            outcome.group.display_name,
            ", ".join(outcome.group.identifiers),
            status,
            metric,
            outcome.stage.value,
            f"{outcome.duration_seconds:.1f}",
        )
    return table


def print_batch_summary(result: BatchResult, console: Optional[Console] = None) -> None:
    """
    Render batch results as a rich table.
    """
    console = console or Console()

    if not result.outcomes:
        console.print("[yellow]No simulators were run.[/yellow]")
        return

    console.print(build_summary_table(result))
