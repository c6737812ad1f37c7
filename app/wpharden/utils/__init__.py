"""Utility modules for wpharden.

This module exports commonly used utility functions.
"""

from wpharden.utils.formatting import (
    console,
    err_console,
    format_mode,
    print_debug,
    print_error,
    print_info,
    print_success,
    print_warning,
)
from wpharden.utils.shell import CommandResult, command_exists, run_command

__all__ = [
    "CommandResult",
    "command_exists",
    "console",
    "err_console",
    "format_mode",
    "print_debug",
    "print_error",
    "print_info",
    "print_success",
    "print_warning",
    "run_command",
]
