"""Content integrity verification with SHA-256."""

import hashlib
import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 1024 * 1024


class VerifyStatus(str, Enum):
    """Outcome of comparing two files.

    Attributes:
        MATCH: Both digests are equal.
        MISMATCH: Digests differ.
        IO_FAILURE: One of the files could not be read.
    """

    MATCH = "match"
    MISMATCH = "mismatch"
    IO_FAILURE = "io_failure"


@dataclass(frozen=True, slots=True)
class Verification:
    """Result of a two-file comparison.

    Attributes:
        status: Comparison outcome.
        source_digest: Hex digest of the first file, if read.
        destination_digest: Hex digest of the second file, if read.
        error: Read error message for IO_FAILURE.
    """

    status: VerifyStatus
    source_digest: str | None = None
    destination_digest: str | None = None
    error: str | None = None

    @property
    def matched(self) -> bool:
        """Check if both files have identical content."""
        return self.status == VerifyStatus.MATCH


class IntegrityVerifier:
    """Computes and compares full-content SHA-256 digests.

    Digests are always computed fresh; nothing is cached between calls.
    """

    def __init__(self, chunk_size: int = DEFAULT_CHUNK_SIZE) -> None:
        if chunk_size <= 0:
            msg = f"chunk_size must be positive, got {chunk_size}"
            raise ValueError(msg)
        self._chunk_size = chunk_size

    def digest(self, path: str | Path) -> str:
        """Compute the SHA-256 hex digest of a file.

        Args:
            path: File to hash.

        Returns:
            64-character hex digest.

        Raises:
            OSError: If the file cannot be read.
        """
        hasher = hashlib.sha256()
        with open(path, "rb") as f:
            for chunk in iter(lambda: f.read(self._chunk_size), b""):
                hasher.update(chunk)
        return hasher.hexdigest()

    def verify(self, source: str | Path, destination: str | Path) -> Verification:
        """Compare the content of two files.

        A read error on either side is reported as IO_FAILURE, never as
        a mismatch.

        Args:
            source: First file.
            destination: Second file.

        Returns:
            Verification with both digests when they could be computed.
        """
        try:
            source_digest = self.digest(source)
            destination_digest = self.digest(destination)
        except OSError as e:
            logger.warning("Cannot hash %s / %s: %s", source, destination, e)
            return Verification(status=VerifyStatus.IO_FAILURE, error=str(e))

        matched = source_digest == destination_digest
        status = VerifyStatus.MATCH if matched else VerifyStatus.MISMATCH
        return Verification(
            status=status,
            source_digest=source_digest,
            destination_digest=destination_digest,
        )
