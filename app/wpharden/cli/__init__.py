"""CLI package for wpharden.

This package contains the Typer application and its display helpers.
"""

from wpharden.cli.main import app

__all__ = ["app"]
