"""Unit tests for config CLI commands.

Tests for the linkmirror config init and linkmirror config path commands.
"""

from pathlib import Path

from linkmirror.cli.main import app
from linkmirror.core.config import load_batch_config
from linkmirror.core.patterns import DEFAULT_EXCLUDE_PATTERNS, parse_pattern_lines
from typer.testing import CliRunner

runner = CliRunner()


class TestConfigInit:
    """Tests for linkmirror config init command."""

    def test_creates_files(self, isolated_config_home: Path) -> None:
        """Init writes a starter batch config and exclude file."""
        result = runner.invoke(app, ["config", "init"])

        base = isolated_config_home / "linkmirror"
        assert result.exit_code == 0
        config = load_batch_config(base / "pairs.toml")
        assert config.pairs[0].label == "projects"
        assert config.pairs[0].source == Path.home() / "Projects"
        exclude = (base / "exclude.txt").read_text()
        assert parse_pattern_lines(exclude) == list(DEFAULT_EXCLUDE_PATTERNS)

    def test_keeps_existing_files(self, isolated_config_home: Path) -> None:
        """Existing files are not overwritten without --force."""
        base = isolated_config_home / "linkmirror"
        base.mkdir()
        (base / "exclude.txt").write_text("vendor\n")

        result = runner.invoke(app, ["config", "init"])

        assert result.exit_code == 0
        assert "already exists" in result.output
        assert (base / "exclude.txt").read_text() == "vendor\n"
        assert (base / "pairs.toml").exists()

    def test_force_overwrites(self, isolated_config_home: Path) -> None:
        """--force replaces existing files."""
        base = isolated_config_home / "linkmirror"
        base.mkdir()
        (base / "exclude.txt").write_text("vendor\n")

        result = runner.invoke(app, ["config", "init", "--force"])

        assert result.exit_code == 0
        assert "node_modules" in (base / "exclude.txt").read_text()


class TestConfigPath:
    """Tests for linkmirror config path command."""

    def test_lists_files(self) -> None:
        """Every configuration file is listed."""
        result = runner.invoke(app, ["config", "path"])

        assert result.exit_code == 0
        assert "Configuration Files" in result.output
        for name in ("batch", "exclude", "protect", "theme"):
            assert name in result.output
