"""History command for viewing past runs.

This module provides the `tidyctl history` command for viewing
the record of completed maintenance runs.
"""

import json
from datetime import datetime
from typing import Annotated

import typer
from rich.table import Table

from tidyctl.core.state import StateManager
from tidyctl.models.history import RunRecord
from tidyctl.utils.formatting import console, print_info

app = typer.Typer(
    name="history",
    help="View history of maintenance runs.",
    invoke_without_command=True,
)


@app.callback(invoke_without_command=True)
def history(
    ctx: typer.Context,
    limit: Annotated[
        int,
        typer.Option(
            "--limit",
            "-n",
            help="Maximum number of runs to show.",
        ),
    ] = 20,
    failed: Annotated[
        bool,
        typer.Option(
            "--failed",
            help="Show only failed runs.",
        ),
    ] = False,
    json_output: Annotated[
        bool,
        typer.Option(
            "--json",
            help="Output as JSON.",
        ),
    ] = False,
) -> None:
    """Show history of maintenance runs.

    Examples:
        tidyctl history              # Show last 20 runs
        tidyctl history -n 50        # Show last 50 runs
        tidyctl history --failed     # Only runs that failed
        tidyctl history --json       # JSON output for scripting
    """
    if ctx.invoked_subcommand is not None:
        return

    records = StateManager().get_history()
    if failed:
        records = [record for record in records if not record.success]
    records = records[:limit]

    if not records:
        print_info("No history entries found.")
        return

    if json_output:
        console.print_json(json.dumps([record.to_dict() for record in records]))
    else:
        _print_table(records)


def _print_table(records: list[RunRecord]) -> None:
    """Print history as Rich table."""
    table = Table(title="Run History", header_style="bold_header")
    table.add_column("ID", style="dim")
    table.add_column("Timestamp")
    table.add_column("Manifest")
    table.add_column("Rules", justify="right")
    table.add_column("Succeeded", justify="right")
    table.add_column("Failed", justify="right")
    table.add_column("Result")

    for record in records:
        table.add_row(
            record.id[:8],
            _format_timestamp(record.timestamp),
            record.manifest,
            str(record.rule_count),
            str(record.counts.get("success", 0)),
            str(len(record.failures)),
            "[success]ok[/]" if record.success else "[error]failed[/]",
        )

    console.print(table)


def _format_timestamp(iso_timestamp: str) -> str:
    """Format an ISO 8601 timestamp as YYYY-MM-DD HH:MM."""
    dt = datetime.fromisoformat(iso_timestamp.replace("Z", "+00:00"))
    return dt.strftime("%Y-%m-%d %H:%M")
