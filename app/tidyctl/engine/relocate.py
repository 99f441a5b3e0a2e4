"""Verified relocation protocol.

Each file is copied to the destination directory, both copies are
hashed, and the source is erased only when the digests match. Every
step gates the next: a failure anywhere before the erase leaves the
source exactly as it was.
"""

import logging
import os
import shutil
from collections.abc import Iterator
from pathlib import Path

from tidyctl.engine.eraser import SecureEraser
from tidyctl.engine.selector import CandidateFile, FileSelector, UnreadableEntry
from tidyctl.engine.verifier import IntegrityVerifier, VerifyStatus
from tidyctl.errors import NotFoundError
from tidyctl.models.outcome import OperationOutcome, ResultKind
from tidyctl.models.rule import Rule

logger = logging.getLogger(__name__)


class RelocationProtocol:
    """Copies, verifies and erases files for RELOCATE rules.

    Args:
        selector: Candidate selector shared by the run.
        eraser: Secure eraser shared by the run.
        verifier: Digest verifier.
        dry_run: If True, report planned relocations without copying.
    """

    def __init__(
        self,
        selector: FileSelector,
        eraser: SecureEraser,
        verifier: IntegrityVerifier,
        *,
        dry_run: bool = False,
    ) -> None:
        self._selector = selector
        self._eraser = eraser
        self._verifier = verifier
        self._dry_run = dry_run
        # Destination files written (or planned, in dry-run) during this run
        self._targets: set[str] = set()

    def run(self, rule: Rule) -> Iterator[OperationOutcome]:
        """Relocate every candidate file of a rule.

        The destination is checked before anything is selected or copied.
        A verification mismatch stops the rule: remaining candidates are
        left untouched.

        Args:
            rule: RELOCATE rule with source and destination set.

        Yields:
            One OperationOutcome per processed file, or a single SKIPPED
            outcome when no file matched.

        Raises:
            NotFoundError: If the destination or source directory is missing.
        """
        destination = Path(rule.destination).expanduser()
        if not destination.is_dir():
            raise NotFoundError(str(destination), f"Destination missing: {destination}")
        destination = destination.resolve()

        matched = False
        selection = self._selector.select(
            rule.source,
            rule.name_pattern,
            rule.age_days,
            recursive=rule.recursive,
        )
        for entry in selection:
            if isinstance(entry, UnreadableEntry):
                yield OperationOutcome(rule, entry.path, ResultKind.IO_FAILURE, entry.error)
                continue

            # A destination nested in the source tree must not be re-relocated
            if entry.path.is_relative_to(destination):
                logger.debug("Skipping %s: already inside destination", entry.path)
                continue

            matched = True
            outcome = self.relocate(entry, destination, rule)
            yield outcome

            if outcome.result == ResultKind.VERIFICATION_MISMATCH:
                logger.error(
                    "Verification mismatch in rule %s; remaining files not processed",
                    rule.label,
                )
                return

        if not matched:
            yield OperationOutcome(rule, None, ResultKind.SKIPPED, "No files matched")

    def relocate(
        self,
        candidate: CandidateFile,
        destination_dir: str | Path,
        rule: Rule,
    ) -> OperationOutcome:
        """Copy one file into destination_dir, verify it, then erase the source.

        Args:
            candidate: File to relocate.
            destination_dir: Existing directory to copy into.
            rule: Rule the file belongs to.

        Returns:
            SUCCESS when the source was erased after a verified copy;
            VERIFICATION_MISMATCH when the digests differ (both copies kept);
            IO_FAILURE for any copy, read or erase failure, and when an
            earlier file of this run already took the same destination name.
        """
        source = candidate.path
        destination_dir = Path(destination_dir)

        if not destination_dir.is_dir():
            return OperationOutcome(
                rule, str(source), ResultKind.IO_FAILURE, f"Destination missing: {destination_dir}"
            )

        target = destination_dir / source.name

        if _is_same_file(source, target):
            return OperationOutcome(
                rule,
                str(source),
                ResultKind.IO_FAILURE,
                f"Destination is the source file itself: {target}",
            )

        # Files from different subdirectories share one flat destination
        if str(target) in self._targets:
            logger.error("Destination name collision for %s at %s", source, target)
            return OperationOutcome(
                rule,
                str(source),
                ResultKind.IO_FAILURE,
                f"Destination name collision, source kept: {target} was written in this run",
            )

        if self._dry_run:
            self._targets.add(str(target))
            logger.info("Dry-run: would relocate %s to %s", source, target)
            return OperationOutcome(
                rule, str(source), ResultKind.SUCCESS, f"Would relocate to {target}", dry_run=True
            )

        try:
            shutil.copy2(source, target)
        except OSError as e:
            logger.error("Copy of %s to %s failed: %s", source, target, e)
            return OperationOutcome(
                rule, str(source), ResultKind.IO_FAILURE, f"Copy failed, source kept: {e}"
            )
        self._targets.add(str(target))

        verification = self._verifier.verify(source, target)

        if verification.status == VerifyStatus.IO_FAILURE:
            return OperationOutcome(
                rule,
                str(source),
                ResultKind.IO_FAILURE,
                f"Could not verify copy, source kept: {verification.error}",
            )

        if verification.status == VerifyStatus.MISMATCH:
            logger.error(
                "Digest mismatch for %s (source %s, destination %s)",
                source,
                verification.source_digest,
                verification.destination_digest,
            )
            return OperationOutcome(
                rule,
                str(source),
                ResultKind.VERIFICATION_MISMATCH,
                f"Digest mismatch, source and copy at {target} kept for inspection",
            )

        erased = self._eraser.erase(source)
        if not erased.success:
            return OperationOutcome(
                rule,
                str(source),
                ResultKind.IO_FAILURE,
                f"Verified copy at {target}, but source erase failed: {erased.error}",
            )

        logger.info("Relocated %s to %s", source, target)
        return OperationOutcome(rule, str(source), ResultKind.SUCCESS, f"Relocated to {target}")


def _is_same_file(source: Path, target: Path) -> bool:
    """Check if target already refers to the same file as source."""
    try:
        return target.exists() and os.path.samefile(source, target)
    except OSError:
        return False
