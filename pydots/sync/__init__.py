"""Sync engine for pydots - deploy and pull operations."""

from .comparator import FileComparator, SyncAction, SyncDecision
from .diff import ChangeTag, DiffChange, DiffRenderer, compute_diff
from .engine import SyncEngine
from .exclude import ExcludeMatcher, ExcludeRule
from .operations import SyncOperations
from .prompt import ConfirmationGate
from .scanner import DirectoryScanner, LocalFile

__all__ = [
    "SyncEngine",
    "SyncOperations",
    "DirectoryScanner",
    "LocalFile",
    "ExcludeMatcher",
    "ExcludeRule",
    "FileComparator",
    "SyncAction",
    "SyncDecision",
    "ChangeTag",
    "DiffChange",
    "DiffRenderer",
    "compute_diff",
    "ConfirmationGate",
]
