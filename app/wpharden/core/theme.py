"""Console colour theme.

The bundled ``data/theme.toml`` supplies every colour; a ``[colors]``
table in ~/.config/wpharden/theme.toml may override any subset of them.
"""

import logging
import re
import tomllib
from functools import cache
from importlib import resources
from pathlib import Path

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator
from rich.theme import Theme

from wpharden.core.paths import get_user_theme_path

logger = logging.getLogger(__name__)

_HEX_COLOR = re.compile(r"#(?:[0-9a-fA-F]{3}){1,2}")


class ThemeColors(BaseModel):
    """Named colours used by console output, as #RGB or #RRGGBB."""

    model_config = ConfigDict(extra="forbid")

    text: str = "#ffffff"
    muted: str = "#b2bec3"
    header: str = "#69B9A1"
    border: str = "#29526d"

    success: str = "#03b971"
    warning: str = "#f5b332"
    error: str = "#f53263"
    info: str = "#0ec1c8"
    debug: str = "#d44ebc"

    # Permission triads in the results table
    mode: str = "#faf870"

    @field_validator("*", mode="before")
    @classmethod
    def check_hex(cls, value: object) -> str:
        if not isinstance(value, str):
            raise ValueError("color must be a string")
        color = value.strip()
        if not color.startswith("#"):
            raise ValueError(f"color {color!r} must start with '#'")
        if not _HEX_COLOR.fullmatch(color):
            raise ValueError(f"color {color!r} is not in #RGB or #RRGGBB hex format")
        return color


def bundled_theme_path() -> Path:
    """Path of the theme shipped with the package."""
    return Path(str(resources.files("wpharden.data").joinpath("theme.toml")))


def read_colors(path: Path) -> dict[str, str]:
    """Read the ``[colors]`` table of a theme file.

    Non-string values are ignored. A missing, unreadable or malformed
    file yields an empty mapping and a logged warning (missing files are
    silent).
    """
    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except FileNotFoundError:
        return {}
    except (OSError, tomllib.TOMLDecodeError) as e:
        logger.warning("Ignoring theme file %s: %s", path, e)
        return {}

    table = data.get("colors", {})
    if not isinstance(table, dict):
        logger.warning("Ignoring theme file %s: [colors] is not a table", path)
        return {}
    return {name: value for name, value in table.items() if isinstance(value, str)}


def load_theme(user_path: Path | None = None) -> ThemeColors:
    """Merge user overrides onto the bundled colours.

    Args:
        user_path: User theme file. Defaults to the XDG config location.

    Returns:
        Validated colours; the built-in defaults if validation fails.
    """
    colors = read_colors(bundled_theme_path())
    overrides = read_colors(user_path or get_user_theme_path())
    if overrides:
        logger.debug("Applying %d user theme override(s)", len(overrides))
    colors.update(overrides)

    try:
        return ThemeColors.model_validate(colors)
    except ValidationError as e:
        logger.warning("Invalid theme, falling back to defaults: %s", e)
        return ThemeColors()


def get_rich_theme(colors: ThemeColors | None = None) -> Theme:
    """Build the Rich theme with the style names used across the CLI."""
    c = colors or load_theme()
    return Theme(
        {
            "text": c.text,
            "muted": c.muted,
            "dim": c.muted,
            "header": c.header,
            "bold_header": f"bold {c.header}",
            "border": c.border,
            "success": c.success,
            "warning": c.warning,
            "error": f"bold {c.error}",
            "info": c.info,
            "debug": c.debug,
            "mode": c.mode,
            "step.name": f"bold {c.text}",
        }
    )


@cache
def get_theme() -> Theme:
    """Rich theme for the shared consoles, built once per process."""
    return get_rich_theme()


def reload_theme() -> Theme:
    """Drop the cached theme and build it again from the theme files."""
    get_theme.cache_clear()
    return get_theme()
