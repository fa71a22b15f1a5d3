"""Orphan pruning.

Walks the destination tree and deletes entries whose mirrored source
path no longer exists. Junctions are never entered: their content is the
live source and cannot hold orphans. Entries matching a protect rule are
kept regardless of anything else. Entries renamed aside earlier in the
same run are left for a later run, when their lock has likely cleared.
"""

import logging
import os
from collections.abc import Iterable
from pathlib import Path

from linkmirror.core.patterns import PatternSet
from linkmirror.filesystem.operator import FilesystemOperator, is_reparse_point
from linkmirror.models.action import ActionLog, ActionType

logger = logging.getLogger(__name__)


class Pruner:
    """Deletes orphaned destination entries.

    Only deletions, protect skips, and failures are recorded; entries
    that need no action leave no trace in the log.

    Args:
        patterns: Rule families of the run; only ``protect`` is used here.
        operator: Operator performing (or simulating) deletions.
        log: Action log receiving the decisions.
        keep: Destination entries never pruned in this pass.
    """

    def __init__(
        self,
        patterns: PatternSet,
        operator: FilesystemOperator,
        log: ActionLog,
        *,
        keep: Iterable[Path] = (),
    ) -> None:
        self._protect = patterns.protect
        self._operator = operator
        self._log = log
        self._keep = frozenset(keep)

    def prune(self, dest: Path, src: Path) -> None:
        """Prune ``dest`` against its source counterpart ``src``.

        Args:
            dest: Real destination directory to walk.
            src: Source directory mirrored at ``dest``.
        """
        try:
            entries = sorted(dest.iterdir(), key=lambda p: p.name)
        except OSError as e:
            self._log.record(ActionType.ERROR, dest, f"cannot list directory: {e}")
            return

        for entry in entries:
            expected = src / entry.name
            try:
                self._prune_entry(entry, expected)
            except OSError as e:
                self._log.record(ActionType.ERROR, entry, str(e))

    def is_protected(self, entry: Path) -> bool:
        """Check if a destination entry matches a protect rule.

        Directories and junctions (even dangling ones) are matched against
        folder-name rules, everything else against file patterns.
        """
        is_dir = is_reparse_point(entry) or entry.is_dir()
        return self._protect.matches(entry.name, is_dir=is_dir)

    def _prune_entry(self, entry: Path, expected: Path) -> None:
        if entry in self._keep:
            logger.info("Leaving entry set aside in this run: %s", entry)
            return

        if not os.path.lexists(expected):
            self._remove_orphan(entry)
            return

        if is_reparse_point(entry):
            return

        if entry.is_dir():
            self.prune(entry, expected)

    def _remove_orphan(self, entry: Path) -> None:
        if self.is_protected(entry):
            self._log.record(ActionType.PROTECTED, entry)
            return

        self._log.record(ActionType.DELETE, entry)
        result = self._operator.delete(entry)
        if not result.success:
            self._log.record(ActionType.ERROR, entry, f"delete failed: {result.error}")
        else:
            logger.debug("Deleted orphan %s", entry)
