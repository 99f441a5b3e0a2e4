"""Operation outcomes and the run result accumulator.

Every protocol step reports what happened as an OperationOutcome value.
The dispatcher collects them, in order, into a RunResult from which the
caller derives the exit status and notification severity.
"""

from collections import Counter
from dataclasses import dataclass, field
from enum import Enum

from tidyctl.models.rule import OperationKind, Rule


class ResultKind(str, Enum):
    """Result of one file operation or rule-level check.

    Attributes:
        SUCCESS: Operation completed (or would complete, in dry-run).
        VERIFICATION_MISMATCH: Copied file's digest differs from the source.
        IO_FAILURE: A read, write, copy, erase or lookup failed.
        SKIPPED: Nothing to do (no matches, no-op rule, excluded file).
    """

    SUCCESS = "success"
    VERIFICATION_MISMATCH = "verification_mismatch"
    IO_FAILURE = "io_failure"
    SKIPPED = "skipped"


FAILURE_KINDS: frozenset[ResultKind] = frozenset(
    {ResultKind.VERIFICATION_MISMATCH, ResultKind.IO_FAILURE}
)


@dataclass(frozen=True, slots=True)
class OperationOutcome:
    """Outcome of one processed file, or of a whole rule.

    Attributes:
        rule: Rule that produced this outcome.
        path: File the outcome refers to, None for rule-level outcomes.
        result: Result classification.
        detail: Human-readable detail message.
        dry_run: Whether the operation was only simulated.
    """

    rule: Rule
    path: str | None
    result: ResultKind
    detail: str = ""
    dry_run: bool = False

    @property
    def failed(self) -> bool:
        """Check if this outcome counts toward run failure."""
        return self.result in FAILURE_KINDS


@dataclass
class RunResult:
    """Ordered, append-only record of a run.

    Attributes:
        outcomes: Outcomes in the order they were produced.
        rules: Rules dispatched during the run, in manifest order.
    """

    outcomes: list[OperationOutcome] = field(default_factory=list)
    rules: list[Rule] = field(default_factory=list)

    def add(self, outcome: OperationOutcome) -> None:
        """Append a single outcome."""
        self.outcomes.append(outcome)

    def extend(self, outcomes: list[OperationOutcome]) -> None:
        """Append several outcomes, preserving their order."""
        self.outcomes.extend(outcomes)

    @property
    def success(self) -> bool:
        """Overall flag: False on any mismatch, I/O failure or unknown rule."""
        if any(outcome.failed for outcome in self.outcomes):
            return False
        return not any(rule.operation == OperationKind.UNKNOWN for rule in self.rules)

    @property
    def exit_code(self) -> int:
        """Process exit status derived from the overall flag."""
        return 0 if self.success else 1

    @property
    def failures(self) -> list[OperationOutcome]:
        """Outcomes that count toward run failure."""
        return [outcome for outcome in self.outcomes if outcome.failed]

    def counts(self) -> dict[ResultKind, int]:
        """Count outcomes per result kind (every kind present, zero-filled)."""
        tally = Counter(outcome.result for outcome in self.outcomes)
        return {kind: tally.get(kind, 0) for kind in ResultKind}

    def for_rule(self, rule: Rule) -> list[OperationOutcome]:
        """Outcomes produced by a given rule."""
        return [outcome for outcome in self.outcomes if outcome.rule is rule]
