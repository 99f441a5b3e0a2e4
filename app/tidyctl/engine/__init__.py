"""File-operation engine.

This package provides candidate selection, secure erasure, integrity
verification, the purge and relocation protocols, and the dispatcher
that routes manifest rules to them.
"""

from tidyctl.engine.dispatcher import RuleDispatcher
from tidyctl.engine.eraser import EraseResult, SecureEraser
from tidyctl.engine.purge import PurgeProtocol
from tidyctl.engine.relocate import RelocationProtocol
from tidyctl.engine.selector import CandidateFile, FileSelector, UnreadableEntry
from tidyctl.engine.verifier import IntegrityVerifier, Verification, VerifyStatus

__all__ = [
    "CandidateFile",
    "EraseResult",
    "FileSelector",
    "IntegrityVerifier",
    "PurgeProtocol",
    "RelocationProtocol",
    "RuleDispatcher",
    "SecureEraser",
    "UnreadableEntry",
    "Verification",
    "VerifyStatus",
]
