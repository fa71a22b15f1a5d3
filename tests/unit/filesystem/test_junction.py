"""Unit tests for JunctionManager.

Tests junction creation and the removal state machine, including
polling, renaming a locked entry aside, and dry-run behavior.
"""

import os
from datetime import datetime
from pathlib import Path
from unittest.mock import patch

import pytest
from linkmirror.filesystem.junction import DEFAULT_POLL_ATTEMPTS, JunctionManager
from linkmirror.filesystem.models import EntryState, FilesystemActionResult, RemovalState
from linkmirror.filesystem.operator import FilesystemOperator

FIXED_NOW = datetime(2026, 10, 19, 12, 30, 45)


def _manager(operator: FilesystemOperator, sleeps: list[float] | None = None) -> JunctionManager:
    recorded = sleeps if sleeps is not None else []
    return JunctionManager(operator, sleep=recorded.append, clock=lambda: FIXED_NOW)


def _ignored(path: Path) -> FilesystemActionResult:
    """Removal primitive that reports success but leaves the entry in place."""
    return FilesystemActionResult(path=str(path), success=True)


@pytest.fixture
def target(tmp_path: Path) -> Path:
    """Source directory with one file."""
    src = tmp_path / "src"
    src.mkdir()
    (src / "data.txt").write_text("data")
    return src


@pytest.fixture
def link(tmp_path: Path, target: Path) -> Path:
    """Existing junction resolving to the target directory."""
    path = tmp_path / "link"
    path.symlink_to(target, target_is_directory=True)
    return path


class TestJunctionManagerInit:
    """Tests for JunctionManager construction."""

    def test_rejects_zero_polls(self) -> None:
        """At least one absence check is required."""
        with pytest.raises(ValueError, match="poll_attempts"):
            JunctionManager(FilesystemOperator(), poll_attempts=0)


class TestCreateJunction:
    """Tests for JunctionManager.create_junction."""

    def test_creates_junction(self, tmp_path: Path, target: Path) -> None:
        """The junction presents the source content."""
        manager = _manager(FilesystemOperator())
        dest = tmp_path / "dest"

        result = manager.create_junction(dest, target)

        assert result.success is True
        assert manager.is_junction(dest) is True
        assert (dest / "data.txt").read_text() == "data"

    def test_existing_entry_untouched(self, tmp_path: Path, target: Path) -> None:
        """Creation is refused when anything exists at the path."""
        dest = tmp_path / "dest"
        dest.mkdir()
        (dest / "mine.txt").write_text("mine")
        manager = _manager(FilesystemOperator())

        result = manager.create_junction(dest, target)

        assert result.success is False
        assert result.error is not None
        assert "already exists" in result.error
        assert manager.entry_state(dest) is EntryState.DIRECTORY
        assert (dest / "mine.txt").exists()

    def test_dry_run(self, tmp_path: Path, target: Path) -> None:
        """Dry-run creates nothing."""
        dest = tmp_path / "dest"

        result = _manager(FilesystemOperator(dry_run=True)).create_junction(dest, target)

        assert result.success is True
        assert result.dry_run is True
        assert not os.path.lexists(dest)


class TestIsJunction:
    """Tests for JunctionManager.is_junction."""

    def test_detects_link(self, link: Path, target: Path) -> None:
        """Links are junctions, real directories are not."""
        manager = _manager(FilesystemOperator())

        assert manager.is_junction(link) is True
        assert manager.is_junction(target) is False

    def test_missing_path(self, tmp_path: Path) -> None:
        """A missing path is not a junction."""
        assert _manager(FilesystemOperator()).is_junction(tmp_path / "missing") is False


class TestRemoveJunction:
    """Tests for the removal state machine."""

    def test_absent_path_is_done(self, tmp_path: Path) -> None:
        """Nothing to remove means DONE without polling."""
        result = _manager(FilesystemOperator()).remove_junction(tmp_path / "missing")

        assert result.state is RemovalState.DONE
        assert result.polls == 0

    def test_removes_link_keeps_target(self, link: Path, target: Path) -> None:
        """Removing a junction never touches the source content."""
        sleeps: list[float] = []

        result = _manager(FilesystemOperator(), sleeps).remove_junction(link)

        assert result.state is RemovalState.DONE
        assert result.success is True
        assert result.polls == 1
        assert result.error is None
        assert sleeps == []
        assert not os.path.lexists(link)
        assert (target / "data.txt").read_text() == "data"

    def test_removes_real_directory(self, tmp_path: Path) -> None:
        """A real directory falls back to a recursive delete."""
        occupied = tmp_path / "occupied"
        occupied.mkdir()
        (occupied / "a.txt").write_text("a")

        result = _manager(FilesystemOperator()).remove_junction(occupied)

        assert result.state is RemovalState.DONE
        assert not occupied.exists()

    def test_dry_run_reports_done(self, link: Path) -> None:
        """Dry-run ends in DONE without polling and leaves the link."""
        result = _manager(FilesystemOperator(dry_run=True)).remove_junction(link)

        assert result.state is RemovalState.DONE
        assert result.polls == 0
        assert os.path.lexists(link)

    def test_delayed_disappearance(self, link: Path) -> None:
        """Polling waits until a lingering entry disappears."""
        operator = FilesystemOperator()
        calls: list[float] = []

        def _sleep(seconds: float) -> None:
            calls.append(seconds)
            if len(calls) == 2:
                os.unlink(link)

        manager = JunctionManager(operator, sleep=_sleep, clock=lambda: FIXED_NOW)
        with patch.object(operator, "remove_link", side_effect=_ignored):
            result = manager.remove_junction(link)

        assert result.state is RemovalState.DONE
        assert result.polls == 3
        assert calls == [0.1, 0.1]

    def test_locked_entry_renamed_aside(self, tmp_path: Path, link: Path, target: Path) -> None:
        """A stuck entry is renamed aside after polling gives up."""
        operator = FilesystemOperator()
        sleeps: list[float] = []
        manager = _manager(operator, sleeps)

        with (
            patch.object(operator, "remove_link", side_effect=_ignored),
            patch.object(operator, "delete", side_effect=_ignored),
        ):
            result = manager.remove_junction(link)

        aside = tmp_path / "link.stale-20261019123045"
        assert result.state is RemovalState.RENAMED_ASIDE
        assert result.success is True
        assert result.renamed_to == str(aside)
        assert result.polls == DEFAULT_POLL_ATTEMPTS
        assert len(sleeps) == DEFAULT_POLL_ATTEMPTS
        assert not os.path.lexists(link)
        assert os.path.lexists(aside)
        assert (target / "data.txt").exists()
        assert manager.set_aside == [aside]

    def test_rename_failure_is_failed(self, tmp_path: Path, link: Path) -> None:
        """When the entry cannot be renamed either, the removal fails."""
        (tmp_path / "link.stale-20261019123045").mkdir()
        operator = FilesystemOperator()

        with patch.object(operator, "remove_link", side_effect=_ignored):
            result = JunctionManager(
                operator, poll_attempts=2, sleep=lambda _: None, clock=lambda: FIXED_NOW
            ).remove_junction(link)

        assert result.state is RemovalState.FAILED
        assert result.success is False
        assert result.polls == 2
        assert result.error is not None
        assert "already exists" in result.error
        assert os.path.lexists(link)

    def test_link_removal_error_falls_back_to_delete(self, link: Path) -> None:
        """A failing link primitive is followed by a generic delete."""
        operator = FilesystemOperator()
        failed = FilesystemActionResult(path=str(link), success=False, error="in use")

        with patch.object(operator, "remove_link", return_value=failed):
            result = _manager(operator).remove_junction(link)

        assert result.state is RemovalState.DONE
        assert not os.path.lexists(link)
