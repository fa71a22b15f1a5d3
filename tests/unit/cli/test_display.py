"""Unit tests for cli/display.py.

Tests for the action log lines and run summaries.
"""

import io
from pathlib import Path

import pytest
from linkmirror.cli.display import (
    create_batch_table,
    create_counts_table,
    format_action,
    print_run_summary,
    should_print,
)
from linkmirror.core.runner import RunReport
from linkmirror.core.theme import build_theme
from linkmirror.models.action import ActionType, SyncAction
from rich.console import Console


def _render(renderable: object) -> str:
    buf = io.StringIO()
    Console(theme=build_theme(), file=buf, color_system=None, width=120).print(renderable)
    return buf.getvalue()


def _capture_console_output(func: object, *args: object, **kwargs: object) -> str:
    """Capture Rich console output by temporarily replacing the consoles."""
    import linkmirror.cli.display as display_mod
    import linkmirror.utils.formatting as fmt_mod

    buf = io.StringIO()
    test_console = Console(theme=build_theme(), file=buf, color_system=None, width=120)

    original_display_console = display_mod.console
    original_console = fmt_mod.console
    original_err_console = fmt_mod.err_console
    display_mod.console = test_console
    fmt_mod.console = test_console
    fmt_mod.err_console = test_console
    try:
        func(*args, **kwargs)  # type: ignore[operator]
    finally:
        display_mod.console = original_display_console
        fmt_mod.console = original_console
        fmt_mod.err_console = original_err_console

    return buf.getvalue()


def _report(*actions: SyncAction, dry_run: bool = False, **kwargs: object) -> RunReport:
    return RunReport(
        source_root=Path("/src"),
        dest_root=Path("/dest"),
        dry_run=dry_run,
        actions=list(actions),
        **kwargs,  # type: ignore[arg-type]
    )


@pytest.fixture
def link_action() -> SyncAction:
    """A junction creation."""
    return SyncAction(ActionType.LINK, "/dest/docs", "-> /src/docs")


class TestFormatAction:
    """Tests for format_action."""

    def test_plain_line(self, link_action: SyncAction) -> None:
        """The line holds label, path, and detail."""
        output = _render(format_action(link_action))

        assert "link" in output
        assert "/dest/docs" in output
        assert "(-> /src/docs)" in output

    def test_dry_run_prefix(self, link_action: SyncAction) -> None:
        """Dry-run lines start with a marker."""
        output = _render(format_action(link_action, dry_run=True))

        assert output.startswith("[dry-run]")

    def test_batch_label(self, link_action: SyncAction) -> None:
        """Batch lines name the pair."""
        assert "work:" in _render(format_action(link_action, label="work"))

    def test_markup_in_path_escaped(self) -> None:
        """Brackets in paths are printed literally."""
        action = SyncAction(ActionType.COPY, "/dest/[draft] notes.txt")

        assert "[draft] notes.txt" in _render(format_action(action))

    def test_every_type_has_style(self) -> None:
        """Every action type can be formatted."""
        for action_type in ActionType:
            format_action(SyncAction(action_type, "/dest/x"))


class TestShouldPrint:
    """Tests for should_print."""

    def test_verbose_prints_everything(self) -> None:
        """Without quiet mode, every action is shown."""
        assert should_print(SyncAction(ActionType.LINK_EXISTS, "/d")) is True

    def test_quiet_hides_noops(self) -> None:
        """Quiet mode shows only changes, warnings, and failures."""
        assert should_print(SyncAction(ActionType.LINK_EXISTS, "/d"), quiet=True) is False
        assert should_print(SyncAction(ActionType.SKIP_EXCLUDED, "/d"), quiet=True) is False
        assert should_print(SyncAction(ActionType.COPY, "/d"), quiet=True) is True
        assert should_print(SyncAction(ActionType.CONFLICT, "/d"), quiet=True) is True
        assert should_print(SyncAction(ActionType.ERROR, "/d"), quiet=True) is True


class TestSummaries:
    """Tests for run and batch summaries."""

    def test_counts_table(self, link_action: SyncAction) -> None:
        """The counts table has one row per action type."""
        table = create_counts_table(_report(link_action, link_action))

        assert table.row_count == 1
        assert "2" in _render(table)

    def test_up_to_date(self) -> None:
        """A run without mutations reports an up-to-date destination."""
        output = _capture_console_output(
            print_run_summary, _report(SyncAction(ActionType.LINK_EXISTS, "/dest/docs"))
        )

        assert "Destination is up to date." in output

    def test_dry_run_summary(self, link_action: SyncAction) -> None:
        """Dry-run summaries say what would be applied."""
        output = _capture_console_output(print_run_summary, _report(link_action, dry_run=True))

        assert "1 change(s) would be applied." in output

    def test_failure_summary(self, link_action: SyncAction) -> None:
        """Failures are reported as a warning."""
        error = SyncAction(ActionType.ERROR, "/dest/docs", "junction not created")

        output = _capture_console_output(print_run_summary, _report(link_action, error))

        assert "1 item(s) failed" in output

    def test_batch_table(self, link_action: SyncAction) -> None:
        """Batch rows show OK, PARTIAL, and FAIL statuses."""
        reports = [
            _report(link_action, label="ok"),
            _report(link_action, SyncAction(ActionType.ERROR, "/dest/x"), label="partial"),
            _report(label="broken", error="Source root does not exist: /src"),
        ]

        output = _render(create_batch_table(reports))

        assert "OK" in output
        assert "PARTIAL" in output
        assert "FAIL" in output
        assert "Source root does not exist" in output
