"""Secure file erasure.

Overwrites a file's current content with zeros, forces it to stable
storage, and only then removes the directory entry. A file whose
overwrite fails is never removed.
"""

import logging
import os
from collections.abc import Set
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 1024 * 1024


@dataclass(frozen=True, slots=True)
class EraseResult:
    """Result of a single erase operation.

    Attributes:
        path: Path that was operated on.
        success: Whether the file was zeroed and removed.
        error: Error message if the operation failed, None otherwise.
        zeroed_but_present: Content was destroyed but the name still exists.
        dry_run: Whether this was a dry-run (nothing touched).
    """

    path: str
    success: bool
    error: str | None = None
    zeroed_but_present: bool = False
    dry_run: bool = False


class SecureEraser:
    """Zero-fills and removes files, remembering what it erased.

    One eraser is shared by every rule in a run; its ``erased`` set is
    what keeps a file from being selected and erased a second time.

    Attributes:
        _dry_run: If True, report what would be erased without touching files.
        _chunk_size: Size of each zero write in bytes.
    """

    def __init__(self, dry_run: bool = False, chunk_size: int = DEFAULT_CHUNK_SIZE) -> None:
        """Initialize the SecureEraser.

        Args:
            dry_run: If True, report what would be erased without erasing.
            chunk_size: Size of each zero write in bytes.
        """
        if chunk_size <= 0:
            msg = f"chunk_size must be positive, got {chunk_size}"
            raise ValueError(msg)
        self._dry_run = dry_run
        self._chunk_size = chunk_size
        self._erased: set[str] = set()

    @property
    def erased(self) -> Set[str]:
        """Paths whose content has been destroyed during this run."""
        return self._erased

    def erase(self, path: str | Path) -> EraseResult:
        """Overwrite a file with zeros, flush it to disk, then remove it.

        Args:
            path: File to erase.

        Returns:
            EraseResult indicating success or which step failed.
        """
        key = str(path)
        if key in self._erased:
            return EraseResult(path=key, success=False, error="File already erased in this run")

        if self._dry_run:
            logger.info("Dry-run: would erase %s", key)
            return EraseResult(path=key, success=True, dry_run=True)

        target = Path(path)
        try:
            self._overwrite(target)
        except OSError as e:
            logger.error("Overwrite of %s failed, file left in place: %s", key, e)
            return EraseResult(
                path=key,
                success=False,
                error=f"Overwrite failed, file left in place: {e}",
            )

        # From here on the content is gone whether or not the unlink succeeds
        self._erased.add(key)

        try:
            target.unlink()
        except OSError as e:
            logger.error("File %s was zeroed but could not be removed: %s", key, e)
            return EraseResult(
                path=key,
                success=False,
                error=f"File zeroed but still present: {e}",
                zeroed_but_present=True,
            )

        logger.info("Erased %s", key)
        return EraseResult(path=key, success=True)

    def _overwrite(self, target: Path) -> None:
        """Write zeros over the full current length of a file.

        Args:
            target: File to overwrite in place.

        Raises:
            OSError: If the file cannot be opened, written or synced.
        """
        with target.open("r+b") as f:
            remaining = os.fstat(f.fileno()).st_size
            zeros = bytes(min(self._chunk_size, remaining))
            while remaining > 0:
                count = min(len(zeros), remaining)
                f.write(zeros[:count])
                remaining -= count
            f.flush()
            os.fsync(f.fileno())
