"""Unit tests for theme module.

Tests for color validation, theme loading with user overrides, and Rich
theme generation.
"""

from pathlib import Path

import pytest
from linkmirror.core.theme import ThemeColors, build_theme, load_theme_colors
from pydantic import ValidationError
from rich.theme import Theme


class TestThemeColors:
    """Tests for ThemeColors Pydantic model."""

    def test_default_values(self) -> None:
        """ThemeColors has sensible defaults."""
        colors = ThemeColors()
        assert colors.text == "#ffffff"
        assert colors.linked == "#c1ff62"
        assert colors.dry_run == "#faf870"

    def test_valid_short_hex(self) -> None:
        """ThemeColors accepts #RGB codes."""
        assert ThemeColors(copied="#abc").copied == "#abc"

    def test_surrounding_whitespace_stripped(self) -> None:
        assert ThemeColors(copied=" #abcdef ").copied == "#abcdef"

    def test_invalid_hex_no_hash(self) -> None:
        """ThemeColors rejects colors without # prefix."""
        with pytest.raises(ValidationError, match="must start with '#'"):
            ThemeColors(text="ffffff")

    def test_invalid_hex_length(self) -> None:
        """ThemeColors rejects colors of the wrong length."""
        with pytest.raises(ValidationError, match="#RGB or #RRGGBB"):
            ThemeColors(text="#abcd")

    def test_invalid_hex_digits(self) -> None:
        """ThemeColors rejects non-hex digits."""
        with pytest.raises(ValidationError, match="invalid hex color"):
            ThemeColors(text="#gggggg")

    def test_unknown_color_rejected(self) -> None:
        """Unknown color names are rejected."""
        with pytest.raises(ValidationError):
            ThemeColors.model_validate({"sparkle": "#ffffff"})

    def test_styles(self) -> None:
        """Error and conflict styles are bold, the rest are plain colors."""
        styles = ThemeColors().styles()

        assert styles["linked"] == "#c1ff62"
        assert styles["conflict"] == "bold #d44ebc"
        assert styles["error"] == "bold #f53263"
        assert styles["bold_header"] == "bold #69B9A1"


class TestLoadThemeColors:
    """Tests for theme file loading."""

    def test_bundled_theme_only(self, tmp_path: Path) -> None:
        """Without a user theme the bundled colors are used."""
        assert load_theme_colors(tmp_path / "missing.toml") == ThemeColors()

    def test_user_override(self, isolated_config_home: Path) -> None:
        """User colors override bundled ones."""
        theme_dir = isolated_config_home / "linkmirror"
        theme_dir.mkdir()
        (theme_dir / "theme.toml").write_text('[colors]\nlinked = "#010203"\n')

        colors = load_theme_colors()

        assert colors.linked == "#010203"
        assert colors.copied == ThemeColors().copied

    def test_broken_toml_ignored(self, tmp_path: Path) -> None:
        """A user theme with broken TOML is ignored."""
        path = tmp_path / "theme.toml"
        path.write_text("[colors\n")

        assert load_theme_colors(path) == ThemeColors()

    def test_colors_not_a_table(self, tmp_path: Path) -> None:
        path = tmp_path / "theme.toml"
        path.write_text('colors = "red"\n')

        assert load_theme_colors(path) == ThemeColors()

    def test_invalid_user_color_falls_back(self, tmp_path: Path) -> None:
        """An invalid user color falls back to the defaults."""
        path = tmp_path / "theme.toml"
        path.write_text('[colors]\nlinked = "green"\n')

        assert load_theme_colors(path) == ThemeColors()


class TestBuildTheme:
    """Tests for Rich theme generation."""

    def test_contains_action_styles(self) -> None:
        """Every style used by the action log is defined."""
        theme = build_theme(ThemeColors())

        assert isinstance(theme, Theme)
        for name in ("linked", "copied", "removed", "skipped", "conflict", "dry_run"):
            assert name in theme.styles
        assert "bold_header" in theme.styles

    def test_loads_colors_when_none_given(self, isolated_config_home: Path) -> None:
        theme_dir = isolated_config_home / "linkmirror"
        theme_dir.mkdir()
        (theme_dir / "theme.toml").write_text('[colors]\nskipped = "#123456"\n')

        theme = build_theme()

        assert theme.styles["skipped"].color is not None
        assert theme.styles["skipped"].color.triplet.hex == "#123456"
