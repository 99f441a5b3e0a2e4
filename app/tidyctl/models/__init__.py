"""Data models for tidyctl.

This module exports the core data structures used throughout the application.
"""

from tidyctl.models.history import RunRecord
from tidyctl.models.manifest import Manifest, ManifestMeta, RuleRecord
from tidyctl.models.outcome import FAILURE_KINDS, OperationOutcome, ResultKind, RunResult
from tidyctl.models.rule import OperationKind, Rule, parse_operation

__all__ = [
    "FAILURE_KINDS",
    "Manifest",
    "ManifestMeta",
    "OperationKind",
    "OperationOutcome",
    "ResultKind",
    "Rule",
    "RuleRecord",
    "RunRecord",
    "RunResult",
    "parse_operation",
]
