"""Rule dispatch and run aggregation.

Routes each rule, in manifest order, to the protocol for its operation
kind and collects every outcome into a RunResult. A failing rule never
prevents the next rule from running.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Iterator
from datetime import datetime

from tidyctl.engine.eraser import DEFAULT_CHUNK_SIZE, SecureEraser
from tidyctl.engine.purge import PurgeProtocol
from tidyctl.engine.relocate import RelocationProtocol
from tidyctl.engine.selector import FileSelector
from tidyctl.engine.verifier import IntegrityVerifier
from tidyctl.errors import NotFoundError, TidyError
from tidyctl.models.outcome import OperationOutcome, ResultKind, RunResult
from tidyctl.models.rule import OperationKind, Rule

logger = logging.getLogger(__name__)


class RuleDispatcher:
    """Runs rules against the filesystem.

    One dispatcher corresponds to one run: its eraser remembers which
    files were erased so that no file is processed twice.

    Args:
        dry_run: If True, select files but do not copy or erase anything.
        chunk_size: Read/write chunk size for hashing and erasing.
        clock: Callable returning the current aware datetime.
    """

    def __init__(
        self,
        *,
        dry_run: bool = False,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._dry_run = dry_run
        self._eraser = SecureEraser(dry_run=dry_run, chunk_size=chunk_size)
        self._selector = FileSelector(clock=clock, exclude=self._eraser.erased)
        self._purge = PurgeProtocol(self._selector, self._eraser)
        self._relocation = RelocationProtocol(
            self._selector,
            self._eraser,
            IntegrityVerifier(chunk_size=chunk_size),
            dry_run=dry_run,
        )

    @property
    def dry_run(self) -> bool:
        """Whether this dispatcher only simulates operations."""
        return self._dry_run

    def run(self, rules: Iterable[Rule]) -> RunResult:
        """Dispatch every rule in order and aggregate the outcomes.

        Args:
            rules: Rules in manifest order.

        Returns:
            RunResult with all outcomes and the dispatched rules.
        """
        result = RunResult()
        for rule in rules:
            result.rules.append(rule)
            result.extend(self.dispatch(rule))

        counts = result.counts()
        logger.info(
            "Run finished: %d rule(s), %d succeeded, %d skipped, %d failed",
            len(result.rules),
            counts[ResultKind.SUCCESS],
            counts[ResultKind.SKIPPED],
            len(result.failures),
        )
        return result

    def dispatch(self, rule: Rule) -> list[OperationOutcome]:
        """Run a single rule and return its outcomes.

        Rule-level errors (missing directories, unexpected I/O errors) are
        turned into an IO_FAILURE outcome; outcomes produced before the
        error are kept.

        Args:
            rule: Rule to run.

        Returns:
            Outcomes in the order they were produced.
        """
        logger.info("Dispatching rule %s (%s)", rule.label, rule.operation.value)
        outcomes: list[OperationOutcome] = []
        try:
            for outcome in self._handle(rule):
                outcomes.append(outcome)
        except NotFoundError as e:
            logger.error("Rule %s skipped: %s", rule.label, e)
            outcomes.append(OperationOutcome(rule, e.path, ResultKind.IO_FAILURE, str(e)))
        except (TidyError, OSError) as e:
            logger.exception("Rule %s aborted", rule.label)
            outcomes.append(
                OperationOutcome(rule, None, ResultKind.IO_FAILURE, f"Rule aborted: {e}")
            )
        return outcomes

    def _handle(self, rule: Rule) -> Iterator[OperationOutcome]:
        """Route a rule to the protocol for its operation kind."""
        if rule.operation == OperationKind.PURGE:
            if not rule.source:
                yield _missing_field(rule, "source")
                return
            yield from self._purge.purge(rule)

        elif rule.operation == OperationKind.RELOCATE:
            for name in rule.missing_fields():
                yield _missing_field(rule, name)
            if rule.missing_fields():
                return
            yield from self._relocation.run(rule)

        elif rule.operation == OperationKind.NOOP:
            yield OperationOutcome(rule, None, ResultKind.SKIPPED, "No operation")

        else:
            logger.error("Rule %s: operation not defined: %r", rule.label, rule.raw_operation)
            yield OperationOutcome(
                rule,
                None,
                ResultKind.IO_FAILURE,
                f"Operation not defined: {rule.raw_operation!r}",
            )


def _missing_field(rule: Rule, name: str) -> OperationOutcome:
    """Build the IO_FAILURE outcome for a rule missing a required field."""
    logger.error("Rule %s skipped: %s not specified", rule.label, name)
    return OperationOutcome(rule, None, ResultKind.IO_FAILURE, f"{name.capitalize()} not specified")
