"""Per-manifest run lock.

A scheduler may start a new run while the previous one against the same
manifest is still going. The lock is an exclusively created file under
the state directory, keyed by the manifest's absolute path. It records the
holder's pid so a lock left by a killed run can be reclaimed.
"""

from __future__ import annotations

import hashlib
import logging
import os
from pathlib import Path
from types import TracebackType

from tidyctl.core.paths import get_lock_dir
from tidyctl.errors import RunLockError

logger = logging.getLogger(__name__)


def lock_path_for(manifest: Path, lock_dir: Path | None = None) -> Path:
    """Return the lock file path for a manifest.

    Args:
        manifest: Manifest path (resolved before hashing).
        lock_dir: Directory for lock files. Default: ~/.local/state/tidyctl/locks

    Returns:
        Path of the lock file.
    """
    key = hashlib.sha256(str(manifest.resolve()).encode()).hexdigest()[:16]
    return (lock_dir or get_lock_dir()) / f"{key}.lock"


class RunLock:
    """Context manager holding the run lock for one manifest.

    Example:
        with RunLock(manifest_path):
            dispatcher.run(rules)
    """

    def __init__(self, manifest: Path, lock_dir: Path | None = None) -> None:
        self._path = lock_path_for(manifest, lock_dir)
        self._manifest = manifest
        self._held = False

    @property
    def path(self) -> Path:
        """Lock file path."""
        return self._path

    def acquire(self) -> None:
        """Create the lock file, failing if a live process already holds it.

        A lock left behind by a process that no longer exists is removed
        and the exclusive create is retried once.

        Raises:
            RunLockError: If another run holds the lock or it cannot be created.
        """
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd = self._create()
        except FileExistsError as e:
            pid = _read_pid(self._path)
            if pid is None or _pid_alive(pid):
                owner = f", pid {pid}" if pid is not None else ""
                raise RunLockError(
                    f"Another run holds the lock for {self._manifest} ({self._path}{owner})"
                ) from e
            logger.warning("Removing stale lock %s left by exited process %d", self._path, pid)
            fd = self._retry_after_stale(pid)
        except OSError as e:
            raise RunLockError(f"Cannot create lock file {self._path}: {e}") from e

        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(f"{os.getpid()}\n")
        self._held = True
        logger.debug("Acquired run lock %s", self._path)

    def _create(self) -> int:
        """Exclusively create the lock file and return its descriptor."""
        return os.open(self._path, os.O_CREAT | os.O_EXCL | os.O_WRONLY, 0o644)

    def _retry_after_stale(self, pid: int) -> int:
        """Remove a stale lock file and create it again.

        Raises:
            RunLockError: If another run created the lock in the meantime.
        """
        try:
            self._path.unlink(missing_ok=True)
            return self._create()
        except FileExistsError as e:
            raise RunLockError(
                f"Another run took over the stale lock for {self._manifest} ({self._path})"
            ) from e
        except OSError as e:
            raise RunLockError(
                f"Cannot replace stale lock file {self._path} (pid {pid}): {e}"
            ) from e

    def release(self) -> None:
        """Remove the lock file if this instance holds it."""
        if not self._held:
            return
        try:
            self._path.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning("Could not remove lock file %s: %s", self._path, e)
        self._held = False
        logger.debug("Released run lock %s", self._path)

    def __enter__(self) -> RunLock:
        self.acquire()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.release()


def _read_pid(path: Path) -> int | None:
    """Return the pid recorded in an existing lock file, if readable."""
    try:
        text = path.read_text(encoding="utf-8").strip()
    except OSError:
        return None
    try:
        return int(text)
    except ValueError:
        return None


def _pid_alive(pid: int) -> bool:
    """Check if a process with the given pid exists."""
    if pid <= 0:
        return False
    try:
        os.kill(pid, 0)
    except ProcessLookupError:
        return False
    except PermissionError:
        # Exists but belongs to another user
        return True
    return True
