"""Run history model.

This module defines the record written to the history file after each
completed run, so past maintenance runs can be audited later.
"""

from __future__ import annotations

import json
import uuid
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from tidyctl.models.outcome import ResultKind, RunResult


@dataclass(frozen=True, slots=True)
class FailureItem:
    """A failed outcome as stored in history.

    Attributes:
        rule: Rule label (index and description).
        result: Failure kind.
        path: File involved, None for rule-level failures.
        detail: Failure detail message.
    """

    rule: str
    result: ResultKind
    path: str | None = None
    detail: str = ""

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for JSON storage."""
        result: dict[str, Any] = {"rule": self.rule, "result": self.result.value}
        if self.path is not None:
            result["path"] = self.path
        if self.detail:
            result["detail"] = self.detail
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> FailureItem:
        """Deserialize from dictionary.

        Raises:
            KeyError: If required fields are missing.
            ValueError: If result is invalid.
        """
        return cls(
            rule=data["rule"],
            result=ResultKind(data["result"]),
            path=data.get("path"),
            detail=data.get("detail", ""),
        )


@dataclass(frozen=True, slots=True)
class RunRecord:
    """One completed run, as stored in history.jsonl.

    Attributes:
        id: Unique identifier (12 hex chars).
        timestamp: ISO 8601 timestamp of run completion (UTC).
        manifest: Manifest path the run was driven by.
        success: Overall run flag.
        rule_count: Number of rules dispatched.
        counts: Outcome count per result kind value.
        failures: Failed outcomes.
    """

    id: str
    timestamp: str
    manifest: str
    success: bool
    rule_count: int = 0
    counts: dict[str, int] = field(default_factory=dict)
    failures: tuple[FailureItem, ...] = ()

    def __post_init__(self) -> None:
        """Validate record data after initialization."""
        if not self.id:
            msg = "Run record ID cannot be empty"
            raise ValueError(msg)
        if not self.timestamp:
            msg = "Timestamp cannot be empty"
            raise ValueError(msg)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for JSON storage."""
        return {
            "id": self.id,
            "timestamp": self.timestamp,
            "manifest": self.manifest,
            "success": self.success,
            "rule_count": self.rule_count,
            "counts": self.counts,
            "failures": [item.to_dict() for item in self.failures],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RunRecord:
        """Deserialize from dictionary.

        Raises:
            KeyError: If required fields are missing.
            ValueError: If data is invalid.
        """
        return cls(
            id=data["id"],
            timestamp=data["timestamp"],
            manifest=data["manifest"],
            success=bool(data["success"]),
            rule_count=data.get("rule_count", 0),
            counts=dict(data.get("counts", {})),
            failures=tuple(FailureItem.from_dict(item) for item in data.get("failures", [])),
        )

    def to_json_line(self) -> str:
        """Serialize to JSON line (no trailing newline)."""
        return json.dumps(self.to_dict(), separators=(",", ":"))

    @classmethod
    def from_json_line(cls, line: str) -> RunRecord:
        """Deserialize from JSON line.

        Raises:
            json.JSONDecodeError: If line is not valid JSON.
            KeyError: If required fields are missing.
            ValueError: If data is invalid.
        """
        return cls.from_dict(json.loads(line.strip()))


def create_run_record(result: RunResult, manifest: str) -> RunRecord:
    """Build a RunRecord from a finished run.

    Generates a unique ID and the current timestamp.

    Args:
        result: The completed run result.
        manifest: Path of the manifest that drove the run.

    Returns:
        New RunRecord summarising the run.
    """
    return RunRecord(
        id=uuid.uuid4().hex[:12],
        timestamp=datetime.now(UTC).isoformat(),
        manifest=manifest,
        success=result.success,
        rule_count=len(result.rules),
        counts={kind.value: count for kind, count in result.counts().items()},
        failures=tuple(
            FailureItem(
                rule=outcome.rule.label,
                result=outcome.result,
                path=outcome.path,
                detail=outcome.detail,
            )
            for outcome in result.failures
        ),
    )
