"""Directory junction lifecycle.

Detects, creates, and removes directory junctions. Removal has to cope
with a cloud-sync client that may hold handles inside the destination
tree for a short while, so it is modelled as a bounded state machine:

    REMOVING -> POLLING -> DONE
                        -> RENAMING -> RENAMED_ASIDE
                                    -> FAILED

A stuck entry is renamed aside rather than destroyed, so the original
path becomes free without losing whatever the entry still holds.
"""

import logging
import os
import time
from collections.abc import Callable
from datetime import datetime
from pathlib import Path

from linkmirror.filesystem.models import (
    EntryState,
    FilesystemActionResult,
    RemovalResult,
    RemovalState,
)
from linkmirror.filesystem.operator import FilesystemOperator, entry_state, is_reparse_point

logger = logging.getLogger(__name__)

DEFAULT_POLL_ATTEMPTS = 10
DEFAULT_POLL_INTERVAL = 0.1
STALE_SUFFIX = "stale"


class JunctionManager:
    """Creates and removes directory junctions through a FilesystemOperator.

    Args:
        operator: Operator executing (or simulating) the mutations.
        poll_attempts: Absence checks after a removal before renaming aside.
        poll_interval: Seconds between absence checks.
        sleep: Sleep function, replaceable in tests.
        clock: Clock used for rename-aside timestamps.

    Attributes:
        set_aside: Entries renamed aside by this manager, in order.
    """

    def __init__(
        self,
        operator: FilesystemOperator,
        *,
        poll_attempts: int = DEFAULT_POLL_ATTEMPTS,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        if poll_attempts < 1:
            msg = f"poll_attempts must be at least 1, got {poll_attempts}"
            raise ValueError(msg)
        self._operator = operator
        self._poll_attempts = poll_attempts
        self._poll_interval = poll_interval
        self._sleep = sleep
        self._clock = clock
        self.set_aside: list[Path] = []

    def is_junction(self, path: Path) -> bool:
        """Check if a path currently is a junction (reparse point).

        Returns False for absent paths and when inspection fails.
        """
        return is_reparse_point(path)

    def entry_state(self, path: Path) -> EntryState:
        """Inspect the current state of a destination entry."""
        return entry_state(path)

    def create_junction(self, dest: Path, src: Path) -> FilesystemActionResult:
        """Create a junction at ``dest`` resolving to ``src``.

        Nothing is changed when any entry already exists at ``dest``. In
        dry-run the path is not probed: its parent may still be a junction
        that a real run would have replaced.

        Args:
            dest: Junction path; must be absent.
            src: Source directory the junction presents.

        Returns:
            FilesystemActionResult; a skipped creation is reported as a
            failure naming the existing entry.
        """
        if not self._operator.dry_run and os.path.lexists(dest):
            logger.info("Junction not created, path already exists: %s", dest)
            return FilesystemActionResult(
                path=str(dest),
                success=False,
                error=f"Path already exists: {dest}",
            )
        return self._operator.create_link(dest, src)

    def remove_junction(self, path: Path) -> RemovalResult:
        """Remove a junction (or any entry) so its path can be reused.

        Args:
            path: Entry to remove.

        Returns:
            RemovalResult with DONE, RENAMED_ASIDE, or FAILED.
        """
        if not os.path.lexists(path):
            return RemovalResult(path=str(path), state=RemovalState.DONE)

        state = RemovalState.REMOVING
        polls = 0
        error: str | None = None
        renamed_to: str | None = None

        while not state.is_terminal:
            if state is RemovalState.REMOVING:
                result = self._remove_once(path)
                error = result.error
                if result.dry_run:
                    state = RemovalState.DONE
                else:
                    state = RemovalState.POLLING

            elif state is RemovalState.POLLING:
                state = RemovalState.RENAMING
                for _ in range(self._poll_attempts):
                    polls += 1
                    if not os.path.lexists(path):
                        state = RemovalState.DONE
                        break
                    self._sleep(self._poll_interval)

            elif state is RemovalState.RENAMING:
                aside = self._aside_path(path)
                result = self._operator.rename(path, aside)
                if result.success:
                    logger.warning("Entry still locked, renamed aside: %s -> %s", path, aside)
                    renamed_to = str(aside)
                    self.set_aside.append(aside)
                    state = RemovalState.RENAMED_ASIDE
                else:
                    logger.warning("Cannot remove or rename %s: %s", path, result.error)
                    error = result.error or error
                    state = RemovalState.FAILED

        return RemovalResult(
            path=str(path),
            state=state,
            renamed_to=renamed_to,
            polls=polls,
            error=None if state is RemovalState.DONE else error,
        )

    def _remove_once(self, path: Path) -> FilesystemActionResult:
        """Issue the removal primitive, falling back to a generic delete."""
        if self.is_junction(path):
            result = self._operator.remove_link(path)
            if result.success:
                return result
            logger.debug("Link removal failed for %s, deleting: %s", path, result.error)
        return self._operator.delete(path)

    def _aside_path(self, path: Path) -> Path:
        stamp = self._clock().strftime("%Y%m%d%H%M%S")
        return path.with_name(f"{path.name}.{STALE_SUFFIX}-{stamp}")
