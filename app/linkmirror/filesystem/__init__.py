"""Filesystem inspection, primitives, and junction lifecycle.

This module provides entry-state inspection, the dry-run aware
filesystem operator, the junction manager, and the subtree scanner.
"""

from linkmirror.filesystem.junction import JunctionManager
from linkmirror.filesystem.models import (
    EntryState,
    FilesystemActionResult,
    RemovalResult,
    RemovalState,
    SyncDecision,
)
from linkmirror.filesystem.operator import FilesystemOperator, entry_state, is_reparse_point
from linkmirror.filesystem.scanner import SubtreeScanner, is_subtree_excluded

__all__ = [
    "EntryState",
    "FilesystemActionResult",
    "FilesystemOperator",
    "JunctionManager",
    "RemovalResult",
    "RemovalState",
    "SubtreeScanner",
    "SyncDecision",
    "entry_state",
    "is_reparse_point",
    "is_subtree_excluded",
]
