"""Full hardening run orchestration.

Runs the preparatory steps (uploads guard, .htaccess restriction) and
then the policy engine, collecting one StepResult per step. Each step is
isolated: an error in one is recorded and the next step still runs.
"""

import logging
import os
from collections.abc import Callable

from wpharden.hardening.engine import PolicyEngine
from wpharden.hardening.errors import HardenError
from wpharden.hardening.htaccess import append_access_restriction, htaccess_path
from wpharden.hardening.models import InstallationRoot, Principal, StepResult
from wpharden.hardening.uploads import ensure_uploads_index, uploads_index_path

logger = logging.getLogger(__name__)

UPLOADS_STEP = "uploads-index"
HTACCESS_STEP = "htaccess-restrict"


def _run_step(
    step: str,
    action: Callable[[], bool],
    *,
    done: str,
    skipped: str,
    dry_run: bool,
) -> StepResult:
    """Run a single-action step and convert its outcome to a StepResult.

    Args:
        step: Step label.
        action: Callable returning True if it changed something.
        done: Message when the action changed something.
        skipped: Message when there was nothing to do.
        dry_run: Whether the action runs in dry-run mode.

    Returns:
        StepResult for the step.
    """
    try:
        changed = action()
    except (HardenError, OSError) as e:
        logger.warning("Step %s failed: %s", step, e)
        return StepResult(step=step, success=False, error=str(e), dry_run=dry_run)

    return StepResult(
        step=step,
        success=True,
        changed=int(changed),
        message=done if changed else skipped,
        dry_run=dry_run,
    )


def harden(
    root: InstallationRoot,
    principal: Principal,
    *,
    htaccess_append_once: bool = True,
    dry_run: bool = False,
    on_step: Callable[[StepResult], None] | None = None,
) -> list[StepResult]:
    """Harden an installation and return per-step results.

    Order: uploads guard, .htaccess restriction, ownership, policy rules.
    The uploads file is created first so the policy pass sets its mode.

    Args:
        root: Validated installation root.
        principal: Validated owner and group.
        htaccess_append_once: Skip the .htaccess block if already present.
        dry_run: If True, report changes without applying them.
        on_step: Optional callback invoked with each result as it completes.

    Returns:
        List of StepResult in execution order.
    """
    results: list[StepResult] = []
    engine = PolicyEngine(root, principal, dry_run=dry_run)
    index = uploads_index_path(root)
    htaccess = htaccess_path(root)
    htaccess_missing = not os.path.lexists(htaccess)

    def record(result: StepResult) -> None:
        results.append(result)
        if on_step is not None:
            on_step(result)

    record(
        _run_step(
            UPLOADS_STEP,
            lambda: ensure_uploads_index(root, dry_run=dry_run),
            done="created index.php",
            skipped="index.php already present",
            dry_run=dry_run,
        )
    )
    if dry_run and results[-1].changed:
        engine.expect_new_file(index)

    record(
        _run_step(
            HTACCESS_STEP,
            lambda: append_access_restriction(
                root,
                append_once=htaccess_append_once,
                dry_run=dry_run,
            ),
            done="restriction block appended",
            skipped="restriction block already present",
            dry_run=dry_run,
        )
    )
    if dry_run and htaccess_missing and results[-1].changed:
        engine.expect_new_file(htaccess)

    record(engine.apply_ownership())
    for rule in engine.rules:
        record(engine.apply_rule(rule))

    return results
