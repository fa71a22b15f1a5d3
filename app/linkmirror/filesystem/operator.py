"""Filesystem primitives for mirroring.

Every mutating operation of a run goes through FilesystemOperator, which
consults its dry-run switch immediately before touching the filesystem.
Operations never raise: failures are returned as FilesystemActionResult.

Directory links are NTFS junctions on Windows (created with ``mklink /J``)
and directory symbolic links elsewhere. Both carry a reparse point in
the sense used throughout linkmirror.
"""

import logging
import os
import shutil
import stat
import subprocess
import sys
from pathlib import Path

from linkmirror.filesystem.models import EntryState, FilesystemActionResult
from linkmirror.utils.shell import run_command

logger = logging.getLogger(__name__)

IS_WINDOWS = sys.platform == "win32"

# Windows stat constants; absent from the stat module on POSIX
_FILE_ATTRIBUTE_REPARSE_POINT = getattr(stat, "FILE_ATTRIBUTE_REPARSE_POINT", 0x400)
# Only junctions and symbolic links count as links; other reparse points
# (cloud file placeholders, dedup) are ordinary entries
_LINK_REPARSE_TAGS = frozenset(
    {
        getattr(stat, "IO_REPARSE_TAG_MOUNT_POINT", 0xA0000003),
        getattr(stat, "IO_REPARSE_TAG_SYMLINK", 0xA000000C),
    }
)


def is_reparse_point(path: Path) -> bool:
    """Check if a path is a reparse point (junction or symbolic link).

    Inspects the entry itself, never its target. On Windows the reparse
    tag must name a junction or symbolic link, so OneDrive placeholders
    are not mistaken for links. Absent paths and inspection errors
    yield False.

    Args:
        path: Path to inspect.

    Returns:
        True if the entry exists and is a reparse point.
    """
    try:
        st = os.lstat(path)
    except (OSError, ValueError):
        return False
    if IS_WINDOWS:
        if not getattr(st, "st_file_attributes", 0) & _FILE_ATTRIBUTE_REPARSE_POINT:
            return False
        return getattr(st, "st_reparse_tag", 0) in _LINK_REPARSE_TAGS
    return stat.S_ISLNK(st.st_mode)


def entry_state(path: Path) -> EntryState:
    """Inspect the current state of a filesystem entry.

    The state is read from the filesystem on every call; it is never cached
    because an external process may change it at any time.

    Args:
        path: Path to inspect.

    Returns:
        EntryState of the entry.
    """
    if not os.path.lexists(path):
        return EntryState.ABSENT
    if is_reparse_point(path):
        return EntryState.JUNCTION
    if path.is_dir():
        return EntryState.DIRECTORY
    return EntryState.FILE


class FilesystemOperator:
    """Executes mutating filesystem operations with dry-run support.

    Attributes:
        _dry_run: If True, simulate operations without modifying the filesystem.
    """

    def __init__(self, dry_run: bool = False) -> None:
        """Initialize the FilesystemOperator.

        Args:
            dry_run: If True, report what would change without changing it.
        """
        self._dry_run = dry_run

    @property
    def dry_run(self) -> bool:
        """Whether mutations are simulated."""
        return self._dry_run

    def make_directory(self, path: Path) -> FilesystemActionResult:
        """Create a real directory, including missing parents.

        Args:
            path: Directory to create. Must not exist yet.

        Returns:
            FilesystemActionResult indicating success or failure.
        """
        if self._dry_run:
            logger.info("Dry-run: would create directory %s", path)
            return self._simulated(path)

        try:
            path.mkdir(parents=True, exist_ok=False)
        except OSError as e:
            return self._failed(path, e)
        return FilesystemActionResult(path=str(path), success=True)

    def copy_file(self, src: Path, dest: Path) -> FilesystemActionResult:
        """Copy a file to a destination that does not exist yet.

        Missing destination parents are created. An existing destination
        is never overwritten.

        Args:
            src: Source file.
            dest: Destination file path.

        Returns:
            FilesystemActionResult indicating success or failure.
        """
        if self._dry_run:
            logger.info("Dry-run: would copy %s -> %s", src, dest)
            return self._simulated(dest)

        if os.path.lexists(dest):
            return FilesystemActionResult(
                path=str(dest),
                success=False,
                error=f"Destination already exists: {dest}",
            )

        try:
            dest.parent.mkdir(parents=True, exist_ok=True)
            shutil.copy2(src, dest)
        except OSError as e:
            return self._failed(dest, e)
        return FilesystemActionResult(path=str(dest), success=True)

    def create_link(self, dest: Path, src: Path) -> FilesystemActionResult:
        """Create a directory link at ``dest`` resolving to ``src``.

        Uses ``mklink /J`` on Windows and a directory symlink elsewhere.

        Args:
            dest: Link path to create.
            src: Directory the link resolves to.

        Returns:
            FilesystemActionResult indicating success or failure.
        """
        if self._dry_run:
            logger.info("Dry-run: would link %s -> %s", dest, src)
            return self._simulated(dest)

        if IS_WINDOWS:
            try:
                result = run_command(["cmd", "/c", "mklink", "/J", str(dest), str(src)])
            except (OSError, subprocess.SubprocessError) as e:
                return self._failed(dest, e)
            if not result.success:
                return FilesystemActionResult(
                    path=str(dest),
                    success=False,
                    error=result.message or "mklink failed",
                )
            return FilesystemActionResult(path=str(dest), success=True)

        try:
            os.symlink(src, dest, target_is_directory=True)
        except OSError as e:
            return self._failed(dest, e)
        return FilesystemActionResult(path=str(dest), success=True)

    def remove_link(self, path: Path) -> FilesystemActionResult:
        """Remove a directory link without touching its target.

        Args:
            path: Junction or directory symlink to remove.

        Returns:
            FilesystemActionResult indicating success or failure.
        """
        if self._dry_run:
            logger.info("Dry-run: would remove link %s", path)
            return self._simulated(path)

        try:
            if IS_WINDOWS:
                os.rmdir(path)
            else:
                os.unlink(path)
        except OSError as e:
            return self._failed(path, e)
        return FilesystemActionResult(path=str(path), success=True)

    def delete(self, path: Path) -> FilesystemActionResult:
        """Delete an entry recursively.

        Dispatches on the entry type:
        - Reparse points: unlinked, the link target is never traversed
        - Directories: shutil.rmtree
        - Files: Path.unlink

        Args:
            path: Entry to delete.

        Returns:
            FilesystemActionResult indicating success or failure.
        """
        if self._dry_run:
            logger.info("Dry-run: would delete %s", path)
            return self._simulated(path)

        try:
            if is_reparse_point(path):
                os.unlink(path)
                return FilesystemActionResult(path=str(path), success=True)

            if path.is_dir():
                shutil.rmtree(path)
                return FilesystemActionResult(path=str(path), success=True)

            if os.path.lexists(path):
                path.unlink()
                return FilesystemActionResult(path=str(path), success=True)

            return FilesystemActionResult(
                path=str(path),
                success=False,
                error=f"Path does not exist: {path}",
            )

        except OSError as e:
            return self._failed(path, e)

    def rename(self, path: Path, new_path: Path) -> FilesystemActionResult:
        """Rename an entry without replacing anything at the new path.

        Args:
            path: Entry to rename.
            new_path: New name; must not exist.

        Returns:
            FilesystemActionResult for the original path.
        """
        if self._dry_run:
            logger.info("Dry-run: would rename %s -> %s", path, new_path)
            return self._simulated(path)

        if os.path.lexists(new_path):
            return FilesystemActionResult(
                path=str(path),
                success=False,
                error=f"Rename target already exists: {new_path}",
            )

        try:
            os.rename(path, new_path)
        except OSError as e:
            return self._failed(path, e)
        return FilesystemActionResult(path=str(path), success=True)

    def _simulated(self, path: Path) -> FilesystemActionResult:
        return FilesystemActionResult(path=str(path), success=True, dry_run=True)

    def _failed(self, path: Path, error: Exception) -> FilesystemActionResult:
        logger.debug("Filesystem operation failed on %s: %s", path, error)
        return FilesystemActionResult(path=str(path), success=False, error=str(error))
