"""Filesystem domain models for mirroring.

This module defines the data structures describing destination entries,
per-directory sync decisions, and the outcome of filesystem operations
and junction removals.
"""

from dataclasses import dataclass
from enum import Enum


class EntryState(str, Enum):
    """Observed state of a filesystem entry.

    Attributes:
        ABSENT: Nothing exists at the path (not even a dangling link).
        DIRECTORY: Real directory (not a reparse point).
        FILE: Regular file or any other non-directory entry.
        JUNCTION: Directory junction or directory symbolic link.
    """

    ABSENT = "absent"
    DIRECTORY = "directory"
    FILE = "file"
    JUNCTION = "junction"


class SyncDecision(str, Enum):
    """How a source directory is mirrored.

    Attributes:
        LINK_WHOLE_SUBTREE: Subtree is clean; mirror it as one junction.
        MATERIALIZE_AND_DESCEND: Subtree holds excluded content; create a
            real directory and reconcile its children.
    """

    LINK_WHOLE_SUBTREE = "link"
    MATERIALIZE_AND_DESCEND = "materialize"


class RemovalState(str, Enum):
    """States of the junction removal state machine.

    Attributes:
        REMOVING: Issuing the removal primitive(s).
        POLLING: Waiting for the entry to disappear.
        RENAMING: Moving a stuck entry aside.
        DONE: Path is absent.
        RENAMED_ASIDE: Path is free; the entry lives on under another name.
        FAILED: Path is still occupied.
    """

    REMOVING = "removing"
    POLLING = "polling"
    RENAMING = "renaming"
    DONE = "done"
    RENAMED_ASIDE = "renamed_aside"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        """Check if the state ends the machine."""
        return self in (RemovalState.DONE, RemovalState.RENAMED_ASIDE, RemovalState.FAILED)


@dataclass(frozen=True, slots=True)
class FilesystemActionResult:
    """Result of a single mutating filesystem operation.

    Attributes:
        path: Absolute path that was operated on.
        success: Whether the operation completed successfully.
        error: Error message if the operation failed, None otherwise.
        dry_run: Whether this was a dry-run (no actual mutation).
    """

    path: str
    success: bool
    error: str | None = None
    dry_run: bool = False


@dataclass(frozen=True, slots=True)
class RemovalResult:
    """Terminal outcome of a junction removal.

    Attributes:
        path: Path that was to be freed.
        state: Terminal RemovalState (DONE, RENAMED_ASIDE, or FAILED).
        renamed_to: New location of the entry when renamed aside.
        polls: Number of absence checks performed while polling.
        error: Last error reported by a removal or rename primitive.
    """

    path: str
    state: RemovalState
    renamed_to: str | None = None
    polls: int = 0
    error: str | None = None

    def __post_init__(self) -> None:
        """Validate that the result carries a terminal state."""
        if not self.state.is_terminal:
            msg = f"Removal result needs a terminal state, got {self.state.value}"
            raise ValueError(msg)

    @property
    def success(self) -> bool:
        """Check if the original path is free for reuse."""
        return self.state in (RemovalState.DONE, RemovalState.RENAMED_ASIDE)
