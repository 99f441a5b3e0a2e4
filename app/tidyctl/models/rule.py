"""Rule model and operation kinds.

A Rule is the engine's view of one manifest row. Its operation kind is
resolved once, when the Rule is built from its raw record, so the
protocols never branch on operation text.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from tidyctl.models.manifest import RuleRecord


class OperationKind(str, Enum):
    """Kind of maintenance a rule performs.

    Attributes:
        PURGE: Securely erase matching files.
        RELOCATE: Copy matching files, verify, then erase the originals.
        NOOP: Do nothing (informational row).
        UNKNOWN: Operation text was not recognised.
    """

    PURGE = "purge"
    RELOCATE = "relocate"
    NOOP = "noop"
    UNKNOWN = "unknown"


# Accepted operation spellings (compared lowercased and stripped)
OPERATION_ALIASES: dict[str, OperationKind] = {
    "purge": OperationKind.PURGE,
    "delete": OperationKind.PURGE,
    "relocate": OperationKind.RELOCATE,
    "move": OperationKind.RELOCATE,
    "archive": OperationKind.RELOCATE,
    "noop": OperationKind.NOOP,
    "none": OperationKind.NOOP,
    "skip": OperationKind.NOOP,
}


def parse_operation(text: str) -> OperationKind:
    """Resolve operation text to an OperationKind.

    Args:
        text: Operation name as written in the manifest.

    Returns:
        The matching OperationKind, or UNKNOWN if not recognised. Empty
        text is UNKNOWN: a no-op row must say so explicitly.
    """
    return OPERATION_ALIASES.get(text.strip().lower(), OperationKind.UNKNOWN)


@dataclass(frozen=True, slots=True)
class Rule:
    """Immutable maintenance rule.

    Attributes:
        operation: Resolved operation kind.
        description: Free text for logs and reports.
        source: Root directory to select files from.
        destination: Target directory (RELOCATE only, may be empty).
        age_days: Files newer than now minus this many days are excluded.
        name_pattern: Glob matched against file base names.
        recursive: Whether selection descends into subdirectories.
        raw_operation: Operation text as written in the manifest.
        index: 1-based position of the rule in the manifest.
    """

    operation: OperationKind
    description: str = ""
    source: str = ""
    destination: str = ""
    age_days: int = 0
    name_pattern: str = "*"
    recursive: bool = True
    raw_operation: str = ""
    index: int = 0

    def __post_init__(self) -> None:
        """Validate rule data after initialization."""
        if self.age_days < 0:
            msg = f"age_days must be non-negative, got {self.age_days}"
            raise ValueError(msg)

    @classmethod
    def from_record(cls, record: RuleRecord, index: int = 0) -> Rule:
        """Build a Rule from a validated manifest row.

        Args:
            record: Raw manifest row.
            index: 1-based manifest position.

        Returns:
            Rule with its operation kind resolved.
        """
        return cls(
            operation=parse_operation(record.operation),
            description=record.description,
            source=record.source,
            destination=record.destination,
            age_days=record.ndays,
            name_pattern=record.filter or "*",
            recursive=record.recursive,
            raw_operation=record.operation,
            index=index,
        )

    @property
    def label(self) -> str:
        """Short human-readable label used in reports."""
        name = self.description or self.raw_operation or self.operation.value
        return f"#{self.index} {name}"

    def missing_fields(self) -> list[str]:
        """Return the names of fields this rule needs but does not have.

        Returns:
            List of missing field names (empty if the rule is complete).
        """
        missing: list[str] = []
        if self.operation in (OperationKind.PURGE, OperationKind.RELOCATE) and not self.source:
            missing.append("source")
        if self.operation == OperationKind.RELOCATE and not self.destination:
            missing.append("destination")
        return missing
