"""Policy engine: ordered application of the permission policy.

The engine sets ownership once over the whole installation, then
applies each rule of the policy table strictly in order. Rules are never
reordered or parallelised: nested subtrees rely on later rules
overwriting the modes written by earlier, broader ones.
"""

import logging
from collections.abc import Sequence
from pathlib import Path

from wpharden.hardening.models import (
    InstallationRoot,
    NameRule,
    PolicyRule,
    Principal,
    StepResult,
    SubtreeRule,
)
from wpharden.hardening.policy import POLICY_TABLE
from wpharden.hardening.walker import TreeWalker, WalkOutcome

logger = logging.getLogger(__name__)

OWNERSHIP_STEP = "ownership"


class PolicyEngine:
    """Applies ownership and the policy table to an installation.

    Every step is attempted regardless of how earlier steps went; there
    is no rollback. Re-running the engine is idempotent.

    Example:
        >>> engine = PolicyEngine(root, principal)
        >>> for result in engine.run():
        ...     print(result.step, result.success)
    """

    def __init__(
        self,
        root: InstallationRoot,
        principal: Principal,
        *,
        rules: Sequence[PolicyRule] = POLICY_TABLE,
        dry_run: bool = False,
    ) -> None:
        """Initialize the engine.

        Args:
            root: Validated installation root.
            principal: Validated owner and group.
            rules: Ordered policy rules. Defaults to the WordPress policy.
            dry_run: If True, report changes without applying them.
        """
        self._root = root
        self._principal = principal
        self._rules = tuple(rules)
        self._walker = TreeWalker(dry_run=dry_run)

    @property
    def dry_run(self) -> bool:
        """Check if engine is in dry-run mode."""
        return self._walker.dry_run

    @property
    def rules(self) -> tuple[PolicyRule, ...]:
        """Rules applied by this engine, in order."""
        return self._rules

    def expect_new_file(self, path: Path) -> None:
        """Include a file an earlier dry-run step would have created."""
        self._walker.expect_new_file(path)

    def run(self) -> list[StepResult]:
        """Apply ownership followed by every rule in order.

        Returns:
            One StepResult for the ownership pass, then one per rule.
        """
        results = [self.apply_ownership()]
        results.extend(self.apply_rule(rule) for rule in self._rules)
        return results

    def apply_ownership(self) -> StepResult:
        """Set user and group on the entire installation."""
        logger.info("Changing ownership of %s to %s", self._root.path, self._principal)
        outcome = self._walker.apply_ownership(
            self._root.path,
            self._principal.uid,
            self._principal.gid,
        )
        return self._to_result(OWNERSHIP_STEP, outcome, message=f"owner {self._principal}")

    def apply_rule(self, rule: PolicyRule) -> StepResult:
        """Apply a single policy rule.

        Subtree rules set the directory and file modes over their whole
        subtree; name rules set the file mode on matching files only.

        Args:
            rule: Rule to apply.

        Returns:
            StepResult for the rule.
        """
        if isinstance(rule, SubtreeRule):
            target = self._root.join(rule.subpath)
            logger.info("Applying %o/%o to %s", rule.dir_mode, rule.file_mode, target)
            outcome = self._walker.apply_modes(target, rule.dir_mode, rule.file_mode)
        elif isinstance(rule, NameRule):
            logger.info("Applying %o to files named %s", rule.file_mode, rule.filename)
            outcome = self._walker.apply_file_mode_by_name(
                self._root.path,
                rule.filename,
                rule.file_mode,
                recursive=rule.recursive,
            )
        else:
            msg = f"Unsupported policy rule: {rule!r}"
            raise TypeError(msg)

        return self._to_result(
            rule.label,
            outcome,
            dir_mode=rule.dir_mode,
            file_mode=rule.file_mode,
            message=rule.description or None,
        )

    def _to_result(
        self,
        step: str,
        outcome: WalkOutcome,
        *,
        dir_mode: int | None = None,
        file_mode: int | None = None,
        message: str | None = None,
    ) -> StepResult:
        error = None
        if outcome.failures:
            count = len(outcome.failures)
            noun = "entry" if count == 1 else "entries"
            error = f"{count} {noun} could not be changed"
        return StepResult(
            step=step,
            success=not outcome.failures,
            changed=outcome.changed,
            dir_mode=dir_mode,
            file_mode=file_mode,
            message=message,
            error=error,
            failures=tuple(outcome.failures),
            dry_run=self.dry_run,
        )
