"""Run orchestration.

One run mirrors a source root into a destination root: every top-level
source directory is reconciled, then the whole destination root is
pruned once. Batches run independent root pairs concurrently, one run
per worker thread; runs share nothing but the console.
"""

import logging
from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from functools import partial
from pathlib import Path

from linkmirror.core.config import MirrorConfig
from linkmirror.core.errors import DestinationRootError, MirrorError, SourceRootMissingError
from linkmirror.core.patterns import PatternSet, load_pattern_set
from linkmirror.filesystem.junction import JunctionManager
from linkmirror.filesystem.models import EntryState
from linkmirror.filesystem.operator import FilesystemOperator, entry_state, is_reparse_point
from linkmirror.models.action import ActionListener, ActionLog, ActionType, SyncAction
from linkmirror.sync.pruner import Pruner
from linkmirror.sync.reconciler import Reconciler

logger = logging.getLogger(__name__)

MAX_DEFAULT_JOBS = 4

BatchListener = Callable[[str, SyncAction], None]


@dataclass(frozen=True, slots=True)
class RunReport:
    """Outcome of one mirror run.

    Attributes:
        source_root: Mirrored source root.
        dest_root: Destination root.
        dry_run: Whether mutations were simulated.
        actions: Every recorded decision, in order.
        label: Display name (batch pair name), if any.
        error: Fatal error that stopped the run before reconciliation.
    """

    source_root: Path
    dest_root: Path
    dry_run: bool
    actions: list[SyncAction] = field(default_factory=list)
    label: str | None = None
    error: str | None = None

    @property
    def mutations(self) -> list[SyncAction]:
        """Decisions that change (or would change) the filesystem."""
        return [a for a in self.actions if a.is_mutating]

    @property
    def failures(self) -> list[SyncAction]:
        """Per-item failures."""
        return [a for a in self.actions if a.is_failure]

    @property
    def warnings(self) -> list[SyncAction]:
        """Warnings and conflicts."""
        return [a for a in self.actions if a.is_warning]

    @property
    def succeeded(self) -> bool:
        """Check if the run completed without fatal error or item failure."""
        return self.error is None and not self.failures

    def counts(self) -> dict[ActionType, int]:
        """Count actions per type, in ActionType order."""
        counts: dict[ActionType, int] = {}
        for action_type in ActionType:
            n = sum(1 for a in self.actions if a.action_type == action_type)
            if n:
                counts[action_type] = n
        return counts


def run_mirror(
    config: MirrorConfig,
    *,
    patterns: PatternSet | None = None,
    listener: ActionListener | None = None,
    label: str | None = None,
) -> RunReport:
    """Mirror ``config.source_root`` into ``config.dest_root``.

    Args:
        config: Run configuration.
        patterns: Rule families; loaded from the configured pattern files if None.
        listener: Callback receiving each decision as it is recorded.
        label: Display name stored in the report.

    Returns:
        RunReport with every decision of the run.

    Raises:
        SourceRootMissingError: If the source root does not exist.
        DestinationRootError: If the destination root cannot be used or created.
        MirrorError: If the source root cannot be listed.
    """
    source = config.source_root
    dest = config.dest_root

    if not source.is_dir():
        raise SourceRootMissingError(f"Source root does not exist: {source}")

    if patterns is None:
        patterns = load_pattern_set(config.exclude_file, config.protect_file)

    try:
        top_level = sorted(source.iterdir(), key=lambda p: p.name)
    except OSError as e:
        raise MirrorError(f"Cannot list source root {source}: {e}") from e

    log = ActionLog(listener)
    operator = FilesystemOperator(dry_run=config.dry_run)

    dest_absent = _prepare_dest_root(dest, operator, log)

    junctions = JunctionManager(operator)
    reconciler = Reconciler(
        patterns,
        junctions,
        operator,
        log,
        max_copy_bytes=config.max_copy_bytes,
    )

    for child in top_level:
        if is_reparse_point(child):
            log.record(ActionType.SKIP_LINK, child)
            continue
        if not child.is_dir():
            logger.debug("Top-level file not mirrored: %s", child)
            continue
        try:
            reconciler.reconcile(child, dest / child.name, dest_absent=dest_absent)
        except OSError as e:
            log.record(ActionType.ERROR, child, str(e))

    # A destination root created by this run holds nothing to prune
    if config.prune and not dest_absent:
        Pruner(patterns, operator, log, keep=junctions.set_aside).prune(dest, source)

    report = RunReport(
        source_root=source,
        dest_root=dest,
        dry_run=config.dry_run,
        actions=log.actions,
        label=label,
    )
    logger.info(
        "Run %s -> %s finished: %d mutation(s), %d failure(s)",
        source,
        dest,
        len(report.mutations),
        len(report.failures),
    )
    return report


def _prepare_dest_root(dest: Path, operator: FilesystemOperator, log: ActionLog) -> bool:
    """Ensure the destination root is a real directory.

    Returns:
        True if the root was created by this run (it is known empty).

    Raises:
        DestinationRootError: If the root is a link or file, or cannot be created.
    """
    state = entry_state(dest)
    if state is EntryState.DIRECTORY:
        return False
    if state is not EntryState.ABSENT:
        raise DestinationRootError(f"Destination root is not a real directory: {dest}")

    log.record(ActionType.MKDIR, dest, "destination root")
    result = operator.make_directory(dest)
    if not result.success:
        raise DestinationRootError(f"Cannot create destination root {dest}: {result.error}")
    return True


def run_batch(
    runs: Sequence[tuple[str, MirrorConfig]],
    *,
    jobs: int | None = None,
    listener: BatchListener | None = None,
) -> list[RunReport]:
    """Run independent mirror runs concurrently.

    A fatal error of one run is reported in its RunReport and does not
    affect the others.

    Args:
        runs: (label, config) pairs; roots must be pairwise disjoint.
        jobs: Worker threads. Defaults to one per run, at most MAX_DEFAULT_JOBS.
        listener: Callback receiving (label, action) for each decision.

    Returns:
        One RunReport per run, in input order.
    """
    if not runs:
        return []

    workers = jobs or min(len(runs), MAX_DEFAULT_JOBS)
    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="linkmirror") as pool:
        futures = [pool.submit(_run_labelled, label, config, listener) for label, config in runs]
        return [future.result() for future in futures]


def _run_labelled(label: str, config: MirrorConfig, listener: BatchListener | None) -> RunReport:
    on_action = partial(listener, label) if listener is not None else None
    try:
        return run_mirror(config, listener=on_action, label=label)
    except MirrorError as e:
        logger.error("Run '%s' aborted: %s", label, e)
        return RunReport(
            source_root=config.source_root,
            dest_root=config.dest_root,
            dry_run=config.dry_run,
            label=label,
            error=str(e),
        )
