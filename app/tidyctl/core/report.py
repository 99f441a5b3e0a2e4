"""Rendering of run results.

Turns a RunResult into log lines, a Rich table, or a JSON-ready
dictionary. The engine never logs results itself beyond progress
messages; this module is the place outcomes become human-readable.
"""

import logging
from typing import Any

from rich.table import Table

from tidyctl.models.outcome import OperationOutcome, ResultKind, RunResult

logger = logging.getLogger(__name__)

_STATUS_STYLES: dict[ResultKind, str] = {
    ResultKind.SUCCESS: "success",
    ResultKind.SKIPPED: "skipped",
    ResultKind.IO_FAILURE: "error",
    ResultKind.VERIFICATION_MISMATCH: "mismatch",
}


def format_outcome(outcome: OperationOutcome) -> str:
    """Format one outcome as a single log line.

    Args:
        outcome: Outcome to format.

    Returns:
        Line such as "[#1 tmp cleanup] success /data/tmp/a.tmp: Erased".
    """
    prefix = "dry-run " if outcome.dry_run else ""
    target = f" {outcome.path}" if outcome.path else ""
    detail = f": {outcome.detail}" if outcome.detail else ""
    return f"[{outcome.rule.label}] {prefix}{outcome.result.value}{target}{detail}"


def log_result(result: RunResult, log: logging.Logger | None = None) -> None:
    """Write one log line per outcome plus a summary line.

    Failures are logged at ERROR, everything else at INFO.

    Args:
        result: Completed run.
        log: Logger to write to. Defaults to this module's logger.
    """
    log = log or logger
    for outcome in result.outcomes:
        level = logging.ERROR if outcome.failed else logging.INFO
        log.log(level, "%s", format_outcome(outcome))

    counts = result.counts()
    log.log(
        logging.INFO if result.success else logging.ERROR,
        "Run %s: %d success, %d skipped, %d io_failure, %d verification_mismatch",
        "succeeded" if result.success else "failed",
        counts[ResultKind.SUCCESS],
        counts[ResultKind.SKIPPED],
        counts[ResultKind.IO_FAILURE],
        counts[ResultKind.VERIFICATION_MISMATCH],
    )


def build_table(result: RunResult, title: str = "Run Results") -> Table:
    """Build a Rich table with one row per outcome.

    Args:
        result: Completed run.
        title: Table title.

    Returns:
        Rich Table ready for printing.
    """
    table = Table(title=title, header_style="bold_header", border_style="border")
    table.add_column("Rule", style="bold")
    table.add_column("Path")
    table.add_column("Result", width=22)
    table.add_column("Details", style="dim")

    for outcome in result.outcomes:
        style = _STATUS_STYLES[outcome.result]
        label = outcome.result.value
        if outcome.dry_run:
            label = f"{label} (dry-run)"
        table.add_row(
            outcome.rule.label,
            outcome.path or "-",
            f"[{style}]{label}[/]",
            outcome.detail,
        )

    return table


def result_to_dict(result: RunResult) -> dict[str, Any]:
    """Convert a RunResult to a JSON-serializable dictionary."""
    return {
        "success": result.success,
        "exit_code": result.exit_code,
        "counts": {kind.value: count for kind, count in result.counts().items()},
        "outcomes": [
            {
                "rule": outcome.rule.index,
                "rule_label": outcome.rule.label,
                "operation": outcome.rule.operation.value,
                "path": outcome.path,
                "result": outcome.result.value,
                "detail": outcome.detail,
                "dry_run": outcome.dry_run,
            }
            for outcome in result.outcomes
        ],
    }
