"""Age-based purge protocol.

Purging is best-effort per file: a failure on one file is reported and
the remaining candidates are still processed.
"""

import logging
from collections.abc import Iterator

from tidyctl.engine.eraser import EraseResult, SecureEraser
from tidyctl.engine.selector import FileSelector, UnreadableEntry
from tidyctl.models.outcome import OperationOutcome, ResultKind
from tidyctl.models.rule import Rule

logger = logging.getLogger(__name__)


class PurgeProtocol:
    """Securely erases the candidate files of PURGE rules.

    Args:
        selector: Candidate selector shared by the run.
        eraser: Secure eraser shared by the run.
    """

    def __init__(self, selector: FileSelector, eraser: SecureEraser) -> None:
        self._selector = selector
        self._eraser = eraser

    def purge(self, rule: Rule) -> Iterator[OperationOutcome]:
        """Erase every file selected by a rule.

        Args:
            rule: PURGE rule with a source directory.

        Yields:
            One OperationOutcome per candidate, or a single SKIPPED outcome
            when nothing matched.

        Raises:
            NotFoundError: If the source directory is missing.
        """
        selection = self._selector.select(
            rule.source,
            rule.name_pattern,
            rule.age_days,
            recursive=rule.recursive,
        )

        matched = 0
        for entry in selection:
            if isinstance(entry, UnreadableEntry):
                yield OperationOutcome(rule, entry.path, ResultKind.IO_FAILURE, entry.error)
                continue

            matched += 1
            yield self._to_outcome(rule, self._eraser.erase(entry.path))

        if not matched:
            logger.info("Rule %s: no files matched", rule.label)
            yield OperationOutcome(rule, None, ResultKind.SKIPPED, "No files matched")

    @staticmethod
    def _to_outcome(rule: Rule, result: EraseResult) -> OperationOutcome:
        """Translate an EraseResult into an OperationOutcome."""
        if result.dry_run:
            return OperationOutcome(
                rule, result.path, ResultKind.SUCCESS, "Would erase", dry_run=True
            )
        if result.success:
            return OperationOutcome(rule, result.path, ResultKind.SUCCESS, "Erased")
        return OperationOutcome(
            rule, result.path, ResultKind.IO_FAILURE, result.error or "Erase failed"
        )
