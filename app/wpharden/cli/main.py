"""Main CLI application entry point.

Defines the Typer application: a single command that validates its
inputs and hardens a WordPress installation in place.
"""

import logging
import os
from pathlib import Path
from typing import Annotated

import typer
from rich.logging import RichHandler

from wpharden import __version__
from wpharden.cli.display import (
    create_results_table,
    print_results_summary,
    print_step_status,
)
from wpharden.core.config import ConfigError, HardenConfig, load_config
from wpharden.hardening.defaults import (
    ChainedDefaults,
    ConfiguredDefaults,
    DefaultsProvider,
    WebServerDefaults,
)
from wpharden.hardening.errors import HardenError
from wpharden.hardening.runner import harden
from wpharden.hardening.validator import require_superuser, validate
from wpharden.hardening.version import detect_wordpress_version
from wpharden.utils.formatting import (
    console,
    err_console,
    print_debug,
    print_error,
    print_info,
    print_warning,
)

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="wpharden",
    help="Secure the filesystem permissions of a WordPress installation.",
    rich_markup_mode="rich",
    add_completion=False,
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"wpharden version {__version__}")
        raise typer.Exit()


def _configure_logging(verbose: bool) -> None:
    """Route log records to the stderr console."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False, markup=False)],
        force=True,
    )


def _build_defaults(config: HardenConfig) -> DefaultsProvider:
    """Build the fallback user/group provider from configuration.

    Configured names take precedence over web server detection.
    """
    providers: list[DefaultsProvider] = [ConfiguredDefaults(config.user, config.group)]
    if config.detect_web_server:
        providers.append(WebServerDefaults(config.web_server_commands))
    return ChainedDefaults(*providers)


@app.command(
    context_settings={
        "help_option_names": ["-h", "--help"],
        "ignore_unknown_options": True,
        "allow_extra_args": True,
    },
)
def main(
    ctx: typer.Context,
    path: Annotated[
        str | None,
        typer.Option(
            "--path",
            "-p",
            help="WordPress installation root (defaults to the current directory).",
        ),
    ] = None,
    user: Annotated[
        str | None,
        typer.Option("--user", "-u", help="User that will own files and directories."),
    ] = None,
    group: Annotated[
        str | None,
        typer.Option("--group", "-g", help="Web server group (defaults to the detected one)."),
    ] = None,
    config_path: Annotated[
        Path | None,
        typer.Option("--config", "-c", help="Path to config.toml."),
    ] = None,
    dry_run: Annotated[
        bool,
        typer.Option("--dry-run", help="Show what would change without changing it."),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable verbose output."),
    ] = False,
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = None,
) -> None:
    """Fix ownership and permissions of a WordPress installation.

    Example: [bold]sudo wpharden --path=/var/www/html --user=john --group=apache[/bold]
    """
    _configure_logging(verbose)

    if ctx.args:
        print_warning(f"Invalid argument {ctx.args[0]!r}, run --help for valid arguments.")
        raise typer.Exit(code=1)

    try:
        require_superuser()
    except HardenError as e:
        print_warning(str(e))
        raise typer.Exit(code=1) from e

    try:
        config = load_config(config_path)
    except ConfigError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    defaults = _build_defaults(config)
    detected = defaults.detect()
    print_debug(f"Default user: {detected.user or '-'}")
    print_debug(f"Default group: {detected.group or '-'}")

    try:
        root_path = path if path is not None else os.getcwd()
        root, principal = validate(root_path, user, group, defaults)
    except HardenError as e:
        print_warning(str(e))
        print_info("Run with --help for usage.")
        raise typer.Exit(code=1) from e

    print_debug(f"WordPress detected: {detect_wordpress_version(root)}")
    print_info(f"Hardening {root.path} for {principal}")

    results = harden(
        root,
        principal,
        htaccess_append_once=config.htaccess_append_once,
        dry_run=dry_run,
        on_step=print_step_status,
    )

    console.print()
    console.print(create_results_table(results))
    print_results_summary(results)


def run() -> None:
    """Console script entry point."""
    app()


if __name__ == "__main__":
    run()
