"""Shared Rich display functions for hardening steps and results.

Provides the live per-step status line, the final results table and
the closing summary.
"""

from rich.markup import escape
from rich.table import Table

from wpharden.hardening.models import StepResult
from wpharden.utils.formatting import console, format_mode, print_info, print_success


def print_step_status(result: StepResult) -> None:
    """Print a one-line status for a finished step.

    Args:
        result: Result of the step that just completed.
    """
    if result.dry_run:
        status = "[info]dry-run[/info]"
    elif result.success:
        status = "[success]ok[/success]"
    else:
        status = "[error]error[/error]"

    console.print(f"[step.name]{escape(result.step)}[/step.name] ... {status}")
    if result.failed:
        for failure in result.failures:
            console.print(f"  [muted]{escape(failure.path)}: {escape(failure.error)}[/muted]")


def create_results_table(results: list[StepResult]) -> Table:
    """Create a Rich table displaying step results.

    Builds a formatted table with Status, Step, Dirs, Files, Changed and
    Message columns. Failed steps show "FAIL" with the error message.

    Args:
        results: List of step results to display.

    Returns:
        Rich Table configured for results display.
    """
    dry_run = any(r.dry_run for r in results)
    table = Table(
        title="Results (Dry Run)" if dry_run else "Results",
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("Status", width=6, justify="center")
    table.add_column("Step", no_wrap=True)
    table.add_column("Dirs", style="mode", no_wrap=True)
    table.add_column("Files", style="mode", no_wrap=True)
    table.add_column("Changed", justify="right")
    table.add_column("Message")

    for result in results:
        if result.success:
            status = "[success]OK[/success]"
            message = result.message or ""
        else:
            status = "[error]FAIL[/error]"
            message = result.error or "Unknown error"

        has_modes = result.file_mode is not None
        table.add_row(
            status,
            escape(result.step),
            format_mode(result.dir_mode) if has_modes else "",
            format_mode(result.file_mode) if has_modes else "",
            str(result.changed),
            f"[muted]{escape(message)}[/muted]",
        )

    return table


def print_results_summary(results: list[StepResult]) -> None:
    """Print a summary of step results.

    Args:
        results: List of step results.
    """
    success_count = sum(1 for r in results if r.success)
    fail_count = sum(1 for r in results if r.failed)
    changed = sum(r.changed for r in results)

    if any(r.dry_run for r in results):
        print_info(f"Dry-run: {changed} change(s) would be made across {len(results)} step(s).")
    elif fail_count == 0:
        print_success(f"All {success_count} step(s) completed successfully.")
    else:
        console.print(
            f"\n[success]{success_count} succeeded[/success], [error]{fail_count} failed[/error]"
        )
