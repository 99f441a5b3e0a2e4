"""Run command implementation.

Loads the manifest rules, dispatches them against the filesystem,
renders the results, records the run to history and raises the
completion notification. The exit code reflects the run result.
"""

import contextlib
import json
from enum import Enum
from pathlib import Path
from typing import Annotated

import typer

from tidyctl.core.config import require_config, resolve_manifest_path
from tidyctl.core.lock import RunLock
from tidyctl.core.logsetup import configure_logging
from tidyctl.core.manifest import require_rules
from tidyctl.core.notify import Notifier
from tidyctl.core.report import build_table, log_result, result_to_dict
from tidyctl.core.state import StateManager
from tidyctl.engine.dispatcher import RuleDispatcher
from tidyctl.errors import RunLockError
from tidyctl.models.history import create_run_record
from tidyctl.models.outcome import ResultKind, RunResult
from tidyctl.utils.formatting import (
    console,
    print_error,
    print_info,
    print_success,
    print_warning,
)

app = typer.Typer(
    help="Run the manifest rules.",
    invoke_without_command=True,
)


class SeverityChoice(str, Enum):
    """Notification urgency for failed runs."""

    LOW = "low"
    NORMAL = "normal"
    CRITICAL = "critical"


@app.callback(invoke_without_command=True)
def run_rules(
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
    dry_run: Annotated[
        bool,
        typer.Option(
            "--dry-run",
            "-n",
            help="Show what would be done without copying or erasing.",
        ),
    ] = False,
    severity: Annotated[
        SeverityChoice | None,
        typer.Option(
            "--severity",
            "-s",
            help="Notification urgency if the run fails.",
            case_sensitive=False,
        ),
    ] = None,
    no_notify: Annotated[
        bool,
        typer.Option("--no-notify", help="Do not send a completion notification."),
    ] = False,
    no_lock: Annotated[
        bool,
        typer.Option("--no-lock", help="Do not take the per-manifest run lock."),
    ] = False,
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Output results as JSON."),
    ] = False,
) -> None:
    """Run every rule in the manifest, in order.

    Exits with status 0 when every rule succeeded, 1 when any file failed
    verification or I/O, or any rule has an unknown operation.

    Examples:
        tidyctl run                          # Run the default manifest
        tidyctl run -m /etc/tidy/rules.csv   # Run a CSV manifest
        tidyctl run --dry-run                # Preview without touching files
        tidyctl run --severity normal        # Lower urgency for failure notices
    """
    if ctx.invoked_subcommand is not None:
        return

    settings = require_config(config_path)
    options = ctx.obj or {}
    if settings.log_file is not None:
        configure_logging(
            verbose=options.get("verbose", False),
            quiet=options.get("quiet", False),
            log_file=settings.log_file.expanduser(),
        )

    manifest_path = resolve_manifest_path(settings, manifest)
    rules = require_rules(manifest_path)
    if not rules:
        print_info(f"No rules in manifest: {manifest_path}")
        return

    dispatcher = RuleDispatcher(dry_run=dry_run, chunk_size=settings.hash_chunk_size)
    use_lock = settings.lock and not no_lock and not dry_run
    lock = RunLock(manifest_path) if use_lock else contextlib.nullcontext()

    try:
        with lock:
            result = dispatcher.run(rules)
    except RunLockError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    log_result(result)

    if json_output:
        console.print_json(json.dumps(result_to_dict(result)))
    else:
        _print_results(result, dry_run)

    if not dry_run:
        if settings.history:
            _record_history(result, manifest_path)

        if settings.notify and not no_notify:
            failure_severity = severity.value if severity else settings.failure_severity
            Notifier(failure_severity=failure_severity).notify_result(result)

    if result.exit_code != 0:
        raise typer.Exit(code=result.exit_code)


def _print_results(result: RunResult, dry_run: bool) -> None:
    """Print the results table and a summary line."""
    title = "Run Results (dry-run)" if dry_run else "Run Results"
    console.print(build_table(result, title=title))

    counts = result.counts()
    failed = len(result.failures)
    summary = (
        f"{len(result.rules)} rule(s): {counts[ResultKind.SUCCESS]} succeeded, "
        f"{counts[ResultKind.SKIPPED]} skipped, {failed} failed"
    )
    if result.success:
        print_success(summary)
    else:
        print_error(summary)


def _record_history(result: RunResult, manifest_path: Path) -> None:
    """Append the run to history, warning instead of failing on error."""
    try:
        StateManager().record_run(create_run_record(result, str(manifest_path)))
    except OSError as e:
        print_warning(f"Could not record run to history: {e}")
