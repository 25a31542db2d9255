"""CLI commands for checking, computing and persisting weekly scores."""

import logging

import typer
from rich.console import Console
from rich.table import Table

from wildcard.database.connection import get_session_context
from wildcard.exceptions import PreconditionFailedError
from wildcard.scoring.service import can_compute_scores, compute_team_scores, persist_team_scores

app = typer.Typer(help="Weekly score commands")
console = Console()
logger = logging.getLogger(__name__)


def _print_errors(errors: list[str]) -> None:
    for error in errors:
        console.print(f"  • {error}", style="red")


@app.command("check")
def check(week: int = typer.Argument(..., min=1, help="League week")) -> None:
    """Report every missing prerequisite for computing a week."""
    with get_session_context() as session:
        result = can_compute_scores(session, week)

    if result.can_compute:
        console.print(f"✅ Week {week} is ready to score.")
        return

    console.print(f"❌ Week {week} cannot be scored yet:", style="red")
    _print_errors(result.errors)
    raise typer.Exit(1)


@app.command("compute")
def compute(
    week: int = typer.Argument(..., min=1, help="League week"),
    persist: bool = typer.Option(False, "--persist", help="Write results to the score tables"),
) -> None:
    """Compute team scores for a week and print them.

    Examples:
        wildcard scores compute 3
        wildcard scores compute 3 --persist
    """
    try:
        with get_session_context() as session:
            results = compute_team_scores(session, week)
            if persist:
                persist_team_scores(session, week)
    except PreconditionFailedError as e:
        console.print(f"❌ {e.message}:", style="red")
        _print_errors(e.details)
        raise typer.Exit(1) from e

    table = Table(title=f"Week {week} Scores")
    table.add_column("Team", style="cyan")
    table.add_column("Starters", justify="right", style="green")
    table.add_column("Bench", justify="right")
    table.add_column("Total", justify="right")
    for result in sorted(results, key=lambda r: (r.starter_points, r.bench_points), reverse=True):
        table.add_row(result.team_name, f"{result.starter_points}", f"{result.bench_points}", f"{result.total_points}")
    console.print(table)

    if persist:
        console.print(f"✅ Persisted scores for {len(results)} teams.")
