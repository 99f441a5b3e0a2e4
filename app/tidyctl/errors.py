"""Exception hierarchy for tidyctl.

Per-file failures during a run are reported as outcome values, not
exceptions. The exceptions here signal conditions that stop a whole
rule (missing directories) or prevent a run from starting at all
(unreadable manifest or configuration, held run lock).
"""


class TidyError(Exception):
    """Base exception for all tidyctl errors."""


class NotFoundError(TidyError):
    """Raised when a rule's source or destination directory is absent."""

    def __init__(self, path: str, message: str | None = None) -> None:
        self.path = path
        super().__init__(message or f"Directory not found: {path}")


class ManifestError(TidyError):
    """Base exception for manifest-related errors."""


class ManifestNotFoundError(ManifestError):
    """Raised when manifest file is not found."""


class ManifestParseError(ManifestError):
    """Raised when manifest file cannot be parsed."""


class ManifestValidationError(ManifestError):
    """Raised when manifest content is invalid."""


class ConfigError(TidyError):
    """Raised when the configuration file cannot be loaded or saved."""


class RunLockError(TidyError):
    """Raised when another run already holds the lock for a manifest."""
