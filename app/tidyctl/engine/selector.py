"""Candidate file selection by age and name pattern.

Walks a rule's source tree and yields the regular files that are older
than the rule's age threshold and whose base name matches its glob.
Entries that cannot be listed or stat'ed are yielded as UnreadableEntry
so that a single bad entry never aborts the scan.
"""

import fnmatch
import logging
import stat
from collections.abc import Callable, Collection, Iterator
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from pathlib import Path

from tidyctl.errors import NotFoundError

logger = logging.getLogger(__name__)

_EPOCH = datetime(1970, 1, 1, tzinfo=UTC)
_NS_PER_DAY = 86_400 * 1_000_000_000


@dataclass(frozen=True, slots=True)
class CandidateFile:
    """A file selected for processing.

    Attributes:
        path: Absolute path of the file.
        mtime: Last modification time (UTC).
        size: Size in bytes at selection time.
    """

    path: Path
    mtime: datetime
    size: int

    @property
    def name(self) -> str:
        """Base name of the file."""
        return self.path.name


@dataclass(frozen=True, slots=True)
class UnreadableEntry:
    """A directory entry that could not be inspected during selection.

    Attributes:
        path: Path of the entry.
        error: Error message from the failed listing or stat call.
    """

    path: str
    error: str


Selection = CandidateFile | UnreadableEntry


def to_epoch_ns(moment: datetime) -> int:
    """Convert an aware datetime to integer nanoseconds since the epoch.

    Integer arithmetic keeps the age cutoff exact, so a file modified at
    precisely the cutoff instant compares equal rather than drifting
    through float rounding.

    Args:
        moment: Timezone-aware datetime.

    Returns:
        Nanoseconds since 1970-01-01T00:00:00Z.
    """
    return (moment - _EPOCH) // timedelta(microseconds=1) * 1000


class FileSelector:
    """Selects candidate files under a root directory.

    Args:
        clock: Callable returning the current aware datetime. Defaults to
            ``datetime.now(UTC)``; injectable for deterministic tests.
        exclude: Live collection of paths to skip (files already erased
            during this run).
    """

    def __init__(
        self,
        *,
        clock: Callable[[], datetime] | None = None,
        exclude: Collection[str] | None = None,
    ) -> None:
        self._clock = clock or (lambda: datetime.now(UTC))
        self._exclude: Collection[str] = exclude if exclude is not None else frozenset()

    def select(
        self,
        root: str | Path,
        name_pattern: str = "*",
        age_days: int = 0,
        *,
        recursive: bool = True,
    ) -> Iterator[Selection]:
        """Select files under root that are old enough and match the pattern.

        The root is checked immediately; the walk itself is lazy.

        Args:
            root: Directory to scan.
            name_pattern: Glob matched against base names (empty means "*").
            age_days: Files modified at or after now minus this many days
                are excluded. 0 selects every file.
            recursive: Descend into subdirectories (symlinks not followed).

        Returns:
            Iterator of CandidateFile and UnreadableEntry items.

        Raises:
            NotFoundError: If root does not exist or is not a directory.
            ValueError: If age_days is negative.
        """
        if age_days < 0:
            msg = f"age_days must be non-negative, got {age_days}"
            raise ValueError(msg)

        root_path = Path(root).expanduser()
        if not root_path.is_dir():
            raise NotFoundError(str(root_path), f"Source directory not found: {root_path}")

        cutoff_ns: int | None = None
        if age_days > 0:
            cutoff_ns = to_epoch_ns(self._clock()) - age_days * _NS_PER_DAY

        logger.debug(
            "Selecting under %s (pattern=%r, age_days=%d, recursive=%s)",
            root_path,
            name_pattern,
            age_days,
            recursive,
        )
        return self._walk(root_path.resolve(), name_pattern or "*", cutoff_ns, recursive)

    def _walk(
        self,
        directory: Path,
        pattern: str,
        cutoff_ns: int | None,
        recursive: bool,
    ) -> Iterator[Selection]:
        """Walk one directory depth-first in sorted order."""
        try:
            entries = sorted(directory.iterdir())
        except OSError as e:
            logger.warning("Cannot list directory %s: %s", directory, e)
            yield UnreadableEntry(path=str(directory), error=f"Cannot list directory: {e}")
            return

        for entry in entries:
            if str(entry) in self._exclude:
                continue

            try:
                info = entry.lstat()
            except OSError as e:
                logger.warning("Cannot stat %s: %s", entry, e)
                yield UnreadableEntry(path=str(entry), error=f"Cannot read file status: {e}")
                continue

            if stat.S_ISDIR(info.st_mode):
                if recursive:
                    yield from self._walk(entry, pattern, cutoff_ns, recursive)
                continue

            # Symlinks, sockets, devices and FIFOs are never candidates
            if not stat.S_ISREG(info.st_mode):
                continue

            if not fnmatch.fnmatch(entry.name, pattern):
                continue

            if cutoff_ns is not None and info.st_mtime_ns >= cutoff_ns:
                continue

            yield CandidateFile(
                path=entry,
                mtime=datetime.fromtimestamp(info.st_mtime, tz=UTC),
                size=info.st_size,
            )
