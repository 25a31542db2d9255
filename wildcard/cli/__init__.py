"""CLI interface for the Wildcard league."""

import json
import logging
from pathlib import Path

import typer
from pydantic import ValidationError
from rich.console import Console

from wildcard.config import configure_logging, settings
from wildcard.database.connection import get_session_context
from wildcard.database.init_db import create_database, reset_database
from wildcard.ingest.manual import IngestData, process_manual_ingest
from wildcard.lineup.locks import LockPolicy

from .rules import app as rules_app
from .scores import app as scores_app

main = typer.Typer(help="Wildcard fantasy league CLI")
console = Console()
logger = logging.getLogger(__name__)

main.add_typer(rules_app, name="rules", help="Scoring rule set commands")
main.add_typer(scores_app, name="scores", help="Weekly score commands")


@main.callback()
def setup(log_level: str | None = typer.Option(None, "--log-level", help="Override LOG_LEVEL")) -> None:
    configure_logging(log_level)


@main.command("init-db")
def init_db() -> None:
    """Create the database schema and default league settings."""
    typer.echo("Initializing database...")
    try:
        create_database()
    except Exception as e:
        console.print(f"❌ Database initialization failed: {e}", style="red")
        raise typer.Exit(1) from e
    console.print("✅ Database initialized successfully!")


@main.command("reset-db")
def reset_db(yes: bool = typer.Option(False, "--yes", "-y", help="Skip the confirmation prompt")) -> None:
    """Drop every table and recreate an empty league. All data is lost."""
    if not yes:
        typer.confirm("This deletes every team, lineup, stat, rule set and score. Continue?", abort=True)
    try:
        reset_database()
    except Exception as e:
        console.print(f"❌ Database reset failed: {e}", style="red")
        raise typer.Exit(1) from e
    console.print("✅ Database reset complete")


@main.command("ingest")
def ingest(file: Path = typer.Argument(..., exists=True, dir_okay=False, help="Normalized ingest JSON")) -> None:
    """Load games, stats and events from a normalized JSON batch."""
    try:
        data = IngestData.model_validate(json.loads(file.read_text()))
    except (json.JSONDecodeError, ValidationError) as e:
        console.print(f"❌ Invalid ingest file: {e}", style="red")
        raise typer.Exit(1) from e

    with get_session_context() as session:
        summary = process_manual_ingest(session, data)

    console.print(
        f"✅ Games: {summary.games_created} created, {summary.games_updated} updated | "
        f"Player stats: {summary.player_stats_upserted} | Defense stats: {summary.defense_stats_upserted} | "
        f"Events: {summary.events_created} | Skipped: {summary.rows_skipped}"
    )


@main.command("lock")
def lock(
    team: str = typer.Argument(..., help="NFL team abbreviation, e.g. KC"),
    week: int = typer.Argument(..., min=1),
) -> None:
    """Show whether a team's players are locked for a week."""
    with get_session_context() as session:
        status = LockPolicy.for_league(session).is_locked(team, week)

    if status.locked:
        console.print(f"🔒 {team} week {week}: locked ({status.reason})", style="yellow")
    else:
        console.print(f"🔓 {team} week {week}: unlocked", style="green")


@main.command("serve")
def serve() -> None:
    """Run the API server."""
    import uvicorn

    uvicorn.run(
        "wildcard.api.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_reload,
    )


if __name__ == "__main__":
    main()
