"""CLI commands for scoring rule sets."""

import json
import logging
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from wildcard.database.connection import get_session_context
from wildcard.exceptions import WildcardError
from wildcard.scoring.service import list_rule_sets, upload_rule_set

app = typer.Typer(help="Scoring rule set commands")
console = Console()
logger = logging.getLogger(__name__)


@app.command("upload")
def upload(
    file: Path = typer.Argument(..., exists=True, dir_okay=False, help="Rule set JSON file"),
    inactive: bool = typer.Option(False, "--inactive", help="Store without activating"),
) -> None:
    """Upload a rule set from a JSON file.

    Examples:
        wildcard rules upload rules/2025.json
        wildcard rules upload draft.json --inactive
    """
    try:
        payload = json.loads(file.read_text())
    except json.JSONDecodeError as e:
        console.print(f"❌ {file} is not valid JSON: {e}", style="red")
        raise typer.Exit(1) from e

    if inactive and isinstance(payload, dict):
        payload["active"] = False

    try:
        with get_session_context() as session:
            rule_set = upload_rule_set(session, payload)
            name, active = rule_set.name, rule_set.is_active
    except WildcardError as e:
        console.print(f"❌ {e}", style="red")
        raise typer.Exit(1) from e

    console.print(f"✅ Uploaded rule set '{name}'" + (" (active)" if active else ""))


@app.command("list")
def list_command() -> None:
    """List stored rule sets."""
    with get_session_context() as session:
        rows = [(r.name, r.is_active, r.created_at) for r in list_rule_sets(session)]

    if not rows:
        console.print("No rule sets uploaded yet.")
        return

    table = Table(title="Scoring Rule Sets")
    table.add_column("Name", style="cyan")
    table.add_column("Active", justify="center")
    table.add_column("Uploaded")
    for name, active, created_at in rows:
        table.add_row(name, "✅" if active else "", str(created_at or ""))
    console.print(table)
