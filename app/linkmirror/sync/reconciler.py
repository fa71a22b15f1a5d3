"""Directory reconciliation.

For each source directory the reconciler decides between linking the
whole subtree with one junction and materializing a real directory whose
children are reconciled one by one. Small files of materialized
directories are copied once and never refreshed.

Traversal is depth-first and sequential. Failures on one child are
recorded in the action log and never stop its siblings.
"""

import logging
import os
from pathlib import Path

from linkmirror.core.patterns import PatternSet
from linkmirror.filesystem.junction import JunctionManager
from linkmirror.filesystem.models import EntryState, RemovalState, SyncDecision
from linkmirror.filesystem.operator import FilesystemOperator, is_reparse_point
from linkmirror.filesystem.scanner import SubtreeScanner
from linkmirror.models.action import ActionLog, ActionType
from linkmirror.utils.formatting import format_size

logger = logging.getLogger(__name__)


class Reconciler:
    """Mirrors source directories into the destination tree.

    Args:
        patterns: Rule families of the run; only ``exclude`` is used here.
        junctions: Junction manager used to create and replace links.
        operator: Operator for directory creation and file copies.
        log: Action log receiving every decision.
        max_copy_bytes: Largest file size copied into materialized directories.
    """

    def __init__(
        self,
        patterns: PatternSet,
        junctions: JunctionManager,
        operator: FilesystemOperator,
        log: ActionLog,
        *,
        max_copy_bytes: int,
    ) -> None:
        self._exclude = patterns.exclude
        self._scanner = SubtreeScanner(patterns.exclude)
        self._junctions = junctions
        self._operator = operator
        self._log = log
        self._max_copy_bytes = max_copy_bytes

    def decide(self, src: Path) -> tuple[SyncDecision, Path | None]:
        """Decide how a source directory is mirrored.

        Args:
            src: Source directory.

        Returns:
            Tuple of the decision and the first excluded descendant that
            forced materialization (None for a clean subtree).
        """
        match = self._scanner.find_first_match(src)
        if match is None:
            return SyncDecision.LINK_WHOLE_SUBTREE, None
        return SyncDecision.MATERIALIZE_AND_DESCEND, match

    def reconcile(self, src: Path, dest: Path, *, dest_absent: bool = False) -> None:
        """Reconcile one source directory with its destination path.

        A directory whose own name matches an exclude folder rule is
        skipped entirely, whatever it contains.

        Args:
            src: Source directory.
            dest: Mirrored destination path.
            dest_absent: True when the caller knows nothing exists at
                ``dest`` (its parent was just created), so the destination
                is not probed.
        """
        if self._exclude.matches_folder(src.name):
            self._log.record(ActionType.SKIP_EXCLUDED, src, "folder rule")
            return
        self._reconcile_directory(src, dest, dest_absent)

    def _reconcile_directory(self, src: Path, dest: Path, dest_absent: bool) -> None:
        decision, match = self.decide(src)
        state = EntryState.ABSENT if dest_absent else self._junctions.entry_state(dest)
        logger.debug("%s: %s (destination %s)", src, decision.value, state.value)

        if decision is SyncDecision.LINK_WHOLE_SUBTREE:
            self._ensure_junction(src, dest, state)
            return

        reason = f"contains {match.relative_to(src)}" if match is not None else None
        self._log.record(ActionType.DESCEND, dest, reason)

        children_absent = self._ensure_directory(dest, state)
        if children_absent is None:
            return
        self._descend(src, dest, children_absent)

    def _ensure_junction(self, src: Path, dest: Path, state: EntryState) -> None:
        if state is EntryState.JUNCTION:
            self._log.record(ActionType.LINK_EXISTS, dest)
            return

        if state is not EntryState.ABSENT:
            self._log.record(
                ActionType.CONFLICT,
                dest,
                f"real {state.value} present, not replaced with a junction",
            )
            return

        self._log.record(ActionType.LINK, dest, f"-> {src}")
        result = self._junctions.create_junction(dest, src)
        if not result.success:
            self._log.record(ActionType.ERROR, dest, f"junction not created: {result.error}")

    def _ensure_directory(self, dest: Path, state: EntryState) -> bool | None:
        """Make ``dest`` a real directory.

        Returns:
            True if the directory is new (its children are known absent),
            False if an existing directory is kept, None if the subtree
            must not be descended.
        """
        if state is EntryState.DIRECTORY:
            return False

        if state is EntryState.FILE:
            self._log.record(ActionType.CONFLICT, dest, "file present where a directory is needed")
            return None

        if state is EntryState.JUNCTION:
            self._log.record(ActionType.UNLINK, dest, "junction replaced by a real directory")
            removal = self._junctions.remove_junction(dest)
            if not removal.success:
                self._log.record(
                    ActionType.WARNING,
                    dest,
                    f"junction could not be removed, subtree skipped: {removal.error}",
                )
                return None
            if removal.state is RemovalState.RENAMED_ASIDE:
                self._log.record(
                    ActionType.WARNING, dest, f"locked junction moved to {removal.renamed_to}"
                )

        self._log.record(ActionType.MKDIR, dest)
        result = self._operator.make_directory(dest)
        if not result.success:
            self._log.record(ActionType.ERROR, dest, f"directory not created: {result.error}")
            return None
        return True

    def _descend(self, src: Path, dest: Path, children_absent: bool) -> None:
        try:
            children = sorted(src.iterdir(), key=lambda p: p.name)
        except OSError as e:
            self._log.record(ActionType.ERROR, src, f"cannot list directory: {e}")
            return

        for child in children:
            target = dest / child.name
            try:
                self._reconcile_child(child, target, children_absent)
            except OSError as e:
                self._log.record(ActionType.ERROR, child, str(e))

    def _reconcile_child(self, child: Path, target: Path, target_absent: bool) -> None:
        if is_reparse_point(child):
            self._log.record(ActionType.SKIP_LINK, child)
            return

        if child.is_dir():
            if self._exclude.matches_folder(child.name):
                self._log.record(ActionType.SKIP_EXCLUDED, child, "folder rule")
                return
            self._reconcile_directory(child, target, target_absent)
            return

        if child.is_file():
            self._sync_file(child, target, target_absent)
            return

        logger.debug("Skipping special file: %s", child)

    def _sync_file(self, src: Path, dest: Path, dest_absent: bool) -> None:
        if self._exclude.matches_file(src.name):
            self._log.record(ActionType.SKIP_EXCLUDED, src, "file pattern")
            return

        size = src.stat().st_size
        if size > self._max_copy_bytes:
            self._log.record(ActionType.SKIP_TOO_LARGE, src, format_size(size))
            return

        if not dest_absent and os.path.lexists(dest):
            self._log.record(ActionType.COPY_EXISTS, dest)
            return

        self._log.record(ActionType.COPY, dest, format_size(size))
        result = self._operator.copy_file(src, dest)
        if not result.success:
            self._log.record(ActionType.ERROR, dest, f"copy failed: {result.error}")
