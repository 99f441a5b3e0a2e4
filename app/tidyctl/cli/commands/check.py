"""Check command implementation.

Loads the manifest and shows how each rule will be interpreted,
without touching any file.
"""

from pathlib import Path
from typing import Annotated

import typer
from rich.table import Table

from tidyctl.core.config import require_config, resolve_manifest_path
from tidyctl.core.manifest import require_rules
from tidyctl.models.rule import OperationKind, Rule
from tidyctl.utils.formatting import console, print_error, print_info, print_success

app = typer.Typer(
    help="Validate the manifest and show its rules.",
    invoke_without_command=True,
)


@app.callback(invoke_without_command=True)
def check_manifest(
    ctx: typer.Context,
    manifest: Annotated[
        Path | None,
        typer.Option(
            "--manifest",
            "-m",
            help="Manifest file (TOML or CSV).",
        ),
    ] = None,
    config_path: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="Settings file.",
        ),
    ] = None,
) -> None:
    """Validate the manifest and list its rules.

    Exits with status 1 if any rule has an unknown operation or lacks a
    required source or destination. Missing directories are only
    reported, since they may exist by the time the scheduled run starts.
    """
    if ctx.invoked_subcommand is not None:
        return

    settings = require_config(config_path)
    manifest_path = resolve_manifest_path(settings, manifest)
    rules = require_rules(manifest_path)

    if not rules:
        print_info(f"No rules in manifest: {manifest_path}")
        return

    problems = 0
    table = Table(title=f"Rules in {manifest_path}", header_style="bold_header")
    table.add_column("#", justify="right")
    table.add_column("Operation")
    table.add_column("Description")
    table.add_column("Source")
    table.add_column("Destination")
    table.add_column("Days", justify="right")
    table.add_column("Filter")
    table.add_column("Status")

    for rule in rules:
        status, is_error = _rule_status(rule)
        problems += is_error
        table.add_row(
            str(rule.index),
            rule.operation.value,
            rule.description or "-",
            rule.source or "-",
            rule.destination or "-",
            str(rule.age_days),
            rule.name_pattern,
            status,
        )

    console.print(table)

    if problems:
        print_error(f"{problems} rule(s) will fail")
        raise typer.Exit(code=1)
    print_success(f"All {len(rules)} rule(s) are valid.")


def _rule_status(rule: Rule) -> tuple[str, bool]:
    """Describe a rule's readiness.

    Returns:
        Tuple of (Rich-markup status text, whether it is an error).
    """
    if rule.operation == OperationKind.UNKNOWN:
        return f"[error]operation not defined: {rule.raw_operation!r}[/]", True

    missing = rule.missing_fields()
    if missing:
        return f"[error]missing {', '.join(missing)}[/]", True

    if rule.operation == OperationKind.NOOP:
        return "[skipped]no operation[/]", False

    warnings: list[str] = []
    if not Path(rule.source).expanduser().is_dir():
        warnings.append("source not found")
    destination = Path(rule.destination).expanduser()
    if rule.operation == OperationKind.RELOCATE and not destination.is_dir():
        warnings.append("destination not found")
    if warnings:
        return f"[warning]{', '.join(warnings)}[/]", False

    return "[success]ok[/]", False
