"""Unit tests for result rendering."""

import logging

import pytest
from rich.console import Console

from tidyctl.core.report import build_table, format_outcome, log_result, result_to_dict
from tidyctl.models.outcome import OperationOutcome, ResultKind, RunResult
from tidyctl.models.rule import OperationKind, Rule

RULE = Rule(OperationKind.PURGE, description="tmp cleanup", source="/data/tmp", index=1)


def _run() -> RunResult:
    return RunResult(
        outcomes=[
            OperationOutcome(RULE, "/data/tmp/a.tmp", ResultKind.SUCCESS, "Erased"),
            OperationOutcome(RULE, "/data/tmp/b.tmp", ResultKind.IO_FAILURE, "Overwrite failed"),
        ],
        rules=[RULE],
    )


class TestFormatOutcome:
    """Tests for single-line outcome formatting."""

    def test_file_outcome(self) -> None:
        """File outcomes include label, result, path and detail."""
        outcome = OperationOutcome(RULE, "/data/tmp/a.tmp", ResultKind.SUCCESS, "Erased")

        assert format_outcome(outcome) == "[#1 tmp cleanup] success /data/tmp/a.tmp: Erased"

    def test_rule_outcome_and_dry_run(self) -> None:
        """Rule-level outcomes omit the path; dry-run is marked."""
        outcome = OperationOutcome(RULE, None, ResultKind.SKIPPED, "No files matched", True)

        assert format_outcome(outcome) == "[#1 tmp cleanup] dry-run skipped: No files matched"


class TestLogResult:
    """Tests for logging a run."""

    def test_failures_logged_at_error(self, caplog: pytest.LogCaptureFixture) -> None:
        """Failures use ERROR, successes INFO, plus a summary line."""
        with caplog.at_level(logging.INFO, logger="tidyctl"):
            log_result(_run())

        levels = [record.levelno for record in caplog.records]
        assert levels == [logging.INFO, logging.ERROR, logging.ERROR]
        assert "Run failed: 1 success" in caplog.records[-1].getMessage()


class TestBuildTable:
    """Tests for the Rich results table."""

    def test_one_row_per_outcome(self) -> None:
        """Every outcome becomes a table row."""
        table = build_table(_run(), title="Results")

        assert table.row_count == 2
        assert table.title == "Results"

    def test_renders(self) -> None:
        """The table renders with the application theme."""
        from tidyctl.core.theme import get_theme

        console = Console(theme=get_theme(), width=160, record=True)
        console.print(build_table(_run()))

        text = console.export_text()
        assert "/data/tmp/a.tmp" in text
        assert "io_failure" in text


class TestResultToDict:
    """Tests for JSON conversion."""

    def test_shape(self) -> None:
        """The dictionary carries flag, exit code, counts and outcomes."""
        data = result_to_dict(_run())

        assert data["success"] is False
        assert data["exit_code"] == 1
        assert data["counts"]["io_failure"] == 1
        assert data["outcomes"][0]["rule"] == 1
        assert data["outcomes"][0]["operation"] == "purge"
        assert data["outcomes"][1]["path"] == "/data/tmp/b.tmp"
