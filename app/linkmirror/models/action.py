"""Action log models for mirror runs.

Every decision taken during reconciliation and pruning is recorded as a
SyncAction, whether or not it mutates the filesystem. The log is what
the CLI prints, and it is identical between a dry-run and a real run
over the same filesystem state.
"""

from collections.abc import Callable, Iterator
from dataclasses import dataclass
from enum import Enum
from pathlib import Path


class ActionType(Enum):
    """Type of a recorded sync decision.

    Attributes:
        LINK: Create a junction for a clean subtree.
        LINK_EXISTS: Junction already present; nothing to do.
        CONFLICT: A real entry occupies a path that should be a junction
            (or a file occupies a path that should be a directory); left untouched.
        MKDIR: Create a real directory for a mixed subtree.
        UNLINK: Remove a junction so a mixed subtree can be materialized.
        DESCEND: Subtree is mixed; its children are reconciled.
        COPY: Copy a small file that is missing at the destination.
        COPY_EXISTS: File already present at the destination; never refreshed.
        SKIP_EXCLUDED: Entry matches an exclude rule.
        SKIP_TOO_LARGE: File exceeds the copy size threshold.
        SKIP_LINK: Source entry is a reparse point and is not followed.
        DELETE: Remove an orphaned destination entry.
        PROTECTED: Orphan kept because a protect rule matches.
        WARNING: Degraded outcome; the run continues.
        ERROR: Per-item failure; the run continues.
    """

    LINK = "link"
    LINK_EXISTS = "linked"
    CONFLICT = "conflict"
    MKDIR = "mkdir"
    UNLINK = "unlink"
    DESCEND = "descend"
    COPY = "copy"
    COPY_EXISTS = "present"
    SKIP_EXCLUDED = "excluded"
    SKIP_TOO_LARGE = "too-large"
    SKIP_LINK = "skip-link"
    DELETE = "delete"
    PROTECTED = "protected"
    WARNING = "warning"
    ERROR = "error"


MUTATING_ACTIONS: frozenset[ActionType] = frozenset(
    {ActionType.LINK, ActionType.MKDIR, ActionType.UNLINK, ActionType.COPY, ActionType.DELETE}
)

NOOP_ACTIONS: frozenset[ActionType] = frozenset(
    {ActionType.LINK_EXISTS, ActionType.COPY_EXISTS, ActionType.DESCEND}
)


@dataclass(frozen=True, slots=True)
class SyncAction:
    """A single recorded decision.

    Attributes:
        action_type: What was decided.
        path: Path the decision applies to (destination side unless the
            decision is about a source entry).
        detail: Optional human-readable context (reason, size, error).
    """

    action_type: ActionType
    path: str
    detail: str | None = None

    def __post_init__(self) -> None:
        """Validate action data after initialization."""
        if not self.path:
            msg = "Action path cannot be empty"
            raise ValueError(msg)

    @property
    def is_mutating(self) -> bool:
        """Check if the decision changes the filesystem."""
        return self.action_type in MUTATING_ACTIONS

    @property
    def is_noop(self) -> bool:
        """Check if the decision confirms an already satisfied state."""
        return self.action_type in NOOP_ACTIONS

    @property
    def is_failure(self) -> bool:
        """Check if the decision reports a per-item failure."""
        return self.action_type == ActionType.ERROR

    @property
    def is_warning(self) -> bool:
        """Check if the decision reports a degraded or conflicting state."""
        return self.action_type in (ActionType.WARNING, ActionType.CONFLICT)


ActionListener = Callable[[SyncAction], None]


class ActionLog:
    """Ordered log of the decisions of one run.

    Args:
        listener: Optional callback invoked for each recorded action,
            used to stream the log to the console while the run progresses.
    """

    def __init__(self, listener: ActionListener | None = None) -> None:
        self._actions: list[SyncAction] = []
        self._listener = listener

    def record(
        self,
        action_type: ActionType,
        path: Path | str,
        detail: str | None = None,
    ) -> SyncAction:
        """Append a decision to the log.

        Args:
            action_type: What was decided.
            path: Path the decision applies to.
            detail: Optional context.

        Returns:
            The recorded SyncAction.
        """
        action = SyncAction(action_type=action_type, path=str(path), detail=detail)
        self._actions.append(action)
        if self._listener is not None:
            self._listener(action)
        return action

    @property
    def actions(self) -> list[SyncAction]:
        """All recorded actions in order."""
        return list(self._actions)

    @property
    def mutations(self) -> list[SyncAction]:
        """Recorded actions that change the filesystem."""
        return [a for a in self._actions if a.is_mutating]

    @property
    def failures(self) -> list[SyncAction]:
        """Recorded per-item failures."""
        return [a for a in self._actions if a.is_failure]

    @property
    def warnings(self) -> list[SyncAction]:
        """Recorded warnings and conflicts."""
        return [a for a in self._actions if a.is_warning]

    def counts(self) -> dict[ActionType, int]:
        """Count recorded actions per type, in ActionType order."""
        counts: dict[ActionType, int] = {}
        for action_type in ActionType:
            n = sum(1 for a in self._actions if a.action_type == action_type)
            if n:
                counts[action_type] = n
        return counts

    def __len__(self) -> int:
        return len(self._actions)

    def __iter__(self) -> Iterator[SyncAction]:
        return iter(list(self._actions))
