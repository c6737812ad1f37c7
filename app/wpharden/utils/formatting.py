"""Rich console formatting utilities.

Provides consistent formatting for CLI output using Rich.
"""

import stat
import sys

from rich.console import Console

from wpharden.core.theme import get_theme


def _detect_color_system() -> str | None:
    """Detect the best color system for the current terminal.

    Returns "truecolor" for interactive terminals to enable full hex color support,
    None otherwise to let Rich auto-detect.
    """
    if sys.stdout.isatty():
        return "truecolor"
    return None


# Shared console instances (theme loaded once at import)
console = Console(theme=get_theme(), color_system=_detect_color_system())
err_console = Console(theme=get_theme(), stderr=True, color_system=_detect_color_system())


def format_mode(mode: int | None) -> str:
    """Render permission bits as an ls-style triad string.

    Args:
        mode: Permission bits (e.g. 0o750), or None for "not applicable".

    Returns:
        String such as "rwxr-x---", or "n/a".
    """
    if mode is None:
        return "n/a"
    # filemode() prefixes a file-type character which is meaningless here
    return stat.filemode(mode)[1:]


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[info]{message}[/]")


def print_debug(message: str) -> None:
    """Print a debug-styled (diagnostic) message."""
    console.print(f"[debug]{message}[/]")


def print_warning(message: str) -> None:
    """Print a warning message."""
    err_console.print(f"[warning]Warning:[/] {message}")


def print_error(message: str) -> None:
    """Print an error message."""
    err_console.print(f"[error]Error:[/] {message}")


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[success]{message}[/]")
