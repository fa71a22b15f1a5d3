"""Console styles for the action log.

The bundled ``data/theme.toml`` defines every color; a user theme in the
config directory may override any subset of them. Colors feed one Rich
style per name, used as markup tags by the action log and summaries.
"""

import logging
import tomllib
from importlib import resources
from pathlib import Path
from typing import Annotated

from pydantic import AfterValidator, BaseModel, ConfigDict, ValidationError
from rich.theme import Theme

from linkmirror.core.paths import get_user_theme_path

logger = logging.getLogger(__name__)

# Styles rendered bold on top of their color
BOLD_STYLES = frozenset({"error", "conflict"})


def _check_hex(value: str) -> str:
    color = value.strip()
    digits = color.removeprefix("#")
    if digits == color:
        raise ValueError(f"color must start with '#': {value!r}")
    if len(digits) not in (3, 6):
        raise ValueError(f"color must be #RGB or #RRGGBB format: {value!r}")
    try:
        int(digits, 16)
    except ValueError:
        raise ValueError(f"invalid hex color {value!r}") from None
    return color


HexColor = Annotated[str, AfterValidator(_check_hex)]


class ThemeColors(BaseModel):
    """One color per console style.

    Field names are the markup tags used in output, e.g. ``[linked]``.
    """

    model_config = ConfigDict(extra="forbid")

    text: HexColor = "#ffffff"
    muted: HexColor = "#b2bec3"
    header: HexColor = "#69B9A1"
    border: HexColor = "#29526d"

    success: HexColor = "#03b971"
    warning: HexColor = "#f5b332"
    error: HexColor = "#f53263"
    info: HexColor = "#0ec1c8"

    # Action log
    linked: HexColor = "#c1ff62"
    copied: HexColor = "#0e8ac8"
    removed: HexColor = "#f53263"
    skipped: HexColor = "#7f8c8d"
    conflict: HexColor = "#d44ebc"
    dry_run: HexColor = "#faf870"

    def styles(self) -> dict[str, str]:
        """Map every style name to its Rich style definition."""
        styles = {
            name: f"bold {color}" if name in BOLD_STYLES else color
            for name, color in self.model_dump().items()
        }
        styles["bold_header"] = f"bold {self.header}"
        return styles


def _read_colors(text: str, origin: str) -> dict[str, object]:
    """Extract the ``[colors]`` table of a theme file.

    Raises:
        ValueError: If the TOML is invalid or ``colors`` is not a table.
    """
    try:
        data = tomllib.loads(text)
    except tomllib.TOMLDecodeError as e:
        raise ValueError(f"invalid TOML in {origin}: {e}") from e
    colors = data.get("colors", {})
    if not isinstance(colors, dict):
        raise ValueError(f"'colors' in {origin} is not a table")
    return colors


def load_theme_colors(user_theme: Path | None = None) -> ThemeColors:
    """Load the bundled colors merged with the user overrides.

    A missing user theme is normal. An unreadable or invalid one is
    logged and ignored, so output always has a usable theme.

    Args:
        user_theme: User theme file. Defaults to the config dir theme.toml.

    Returns:
        Validated ThemeColors.
    """
    bundled = resources.files("linkmirror.data").joinpath("theme.toml").read_text("utf-8")
    colors = _read_colors(bundled, "bundled theme")

    path = user_theme or get_user_theme_path()
    try:
        overrides = _read_colors(path.read_text(encoding="utf-8"), str(path))
    except FileNotFoundError:
        overrides = {}
    except (OSError, UnicodeDecodeError, ValueError) as e:
        logger.warning("Ignoring user theme %s: %s", path, e)
        overrides = {}

    try:
        return ThemeColors.model_validate({**colors, **overrides})
    except ValidationError as e:
        logger.warning("Invalid theme colors in %s, using defaults: %s", path, e)
        return ThemeColors()


def build_theme(colors: ThemeColors | None = None) -> Theme:
    """Build the Rich theme for the consoles.

    Args:
        colors: Colors to use. Loaded with load_theme_colors() if None.
    """
    return Theme((colors or load_theme_colors()).styles())
