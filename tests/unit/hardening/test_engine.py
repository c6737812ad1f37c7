"""Unit tests for PolicyEngine.

Tests the final permission state of a WordPress tree after a full pass,
rule ordering and override behaviour, idempotence and continue-on-error.
"""

import os
import stat
from pathlib import Path
from unittest.mock import patch

from wpharden.hardening.engine import OWNERSHIP_STEP, PolicyEngine
from wpharden.hardening.models import InstallationRoot, NameRule, Principal, SubtreeRule
from wpharden.hardening.policy import POLICY_TABLE


def _mode(path: Path) -> int:
    return stat.S_IMODE(os.lstat(path).st_mode)


def _snapshot(root: Path) -> dict[str, tuple[int, int, int]]:
    """Map every entry to (mode, uid, gid)."""
    state: dict[str, tuple[int, int, int]] = {}
    for dirpath, dirnames, filenames in os.walk(root):
        for name in [".", *dirnames, *filenames]:
            path = os.path.join(dirpath, name)
            st = os.lstat(path)
            state[os.path.normpath(path)] = (stat.S_IMODE(st.st_mode), st.st_uid, st.st_gid)
    return state


def _entries_under(root: Path) -> tuple[list[Path], list[Path]]:
    dirs: list[Path] = [root]
    files: list[Path] = []
    for dirpath, dirnames, filenames in os.walk(root):
        dirs.extend(Path(dirpath) / d for d in dirnames)
        files.extend(Path(dirpath) / f for f in filenames)
    return dirs, files


class TestPolicyEngineRun:
    """Tests for a full PolicyEngine.run()."""

    def test_returns_ownership_then_one_result_per_rule(
        self, installation: InstallationRoot, current_principal: Principal
    ) -> None:
        """Results are ordered: ownership first, then the table."""
        results = PolicyEngine(installation, current_principal).run()

        assert [r.step for r in results] == [
            OWNERSHIP_STEP,
            "(root)",
            "wp-admin",
            "wp-includes",
            "wp-content",
            "wp-content/plugins",
            "wp-content/themes",
            "**/.htaccess",
            "wp-config.php",
        ]
        assert all(r.success for r in results)

    def test_wp_admin_is_read_only_to_group(
        self, installation: InstallationRoot, current_principal: Principal
    ) -> None:
        """wp-admin: dirs rwxr-x---, files rw-r-----."""
        PolicyEngine(installation, current_principal).run()

        dirs, files = _entries_under(installation.join("wp-admin"))
        assert all(_mode(d) == 0o750 for d in dirs)
        assert all(_mode(f) == 0o640 for f in files)

    def test_wp_includes_is_read_only_to_group(
        self, installation: InstallationRoot, current_principal: Principal
    ) -> None:
        """wp-includes: dirs rwxr-x---, files rw-r-----."""
        PolicyEngine(installation, current_principal).run()

        dirs, files = _entries_under(installation.join("wp-includes"))
        assert all(_mode(d) == 0o750 for d in dirs)
        assert all(_mode(f) == 0o640 for f in files)

    def test_wp_content_allows_group_write(
        self, installation: InstallationRoot, current_principal: Principal
    ) -> None:
        """wp-content outside plugins/themes is group-writable."""
        PolicyEngine(installation, current_principal).run()

        content = installation.join("wp-content")
        assert _mode(content) == 0o770
        assert _mode(content / "index.php") == 0o660
        assert _mode(content / "uploads") == 0o770
        assert _mode(content / "uploads" / "2024" / "01") == 0o770
        assert _mode(content / "uploads" / "2024" / "01" / "photo.jpg") == 0o660

    def test_plugins_and_themes_override_wp_content(
        self, installation: InstallationRoot, current_principal: Principal
    ) -> None:
        """The later plugins/themes rules remove group write set by wp-content."""
        PolicyEngine(installation, current_principal).run()

        for subtree in ("wp-content/plugins", "wp-content/themes"):
            dirs, files = _entries_under(installation.join(subtree))
            assert all(_mode(d) == 0o750 for d in dirs), subtree
            assert all(_mode(f) == 0o640 for f in files), subtree

    def test_htaccess_and_wp_config_end_read_only(
        self, installation: InstallationRoot, current_principal: Principal
    ) -> None:
        """Every .htaccess and the root wp-config.php end rw-r-----."""
        extra = installation.join("wp-content/uploads/.htaccess")
        extra.write_text("Options -Indexes\n")
        os.chmod(extra, 0o666)

        PolicyEngine(installation, current_principal).run()

        assert _mode(installation.join("wp-config.php")) == 0o640
        assert _mode(installation.join(".htaccess")) == 0o640
        assert _mode(installation.join("wp-content/plugins/akismet/.htaccess")) == 0o640
        # Inside wp-content, which otherwise grants group write
        assert _mode(extra) == 0o640

    def test_root_files_use_baseline(
        self, installation: InstallationRoot, current_principal: Principal
    ) -> None:
        """Entries only covered by the root rule get the baseline modes."""
        PolicyEngine(installation, current_principal).run()

        assert _mode(installation.path) == 0o750
        assert _mode(installation.join("index.php")) == 0o640

    def test_no_entry_grants_other_access(
        self, installation: InstallationRoot, current_principal: Principal
    ) -> None:
        """After a run nothing is accessible to others."""
        PolicyEngine(installation, current_principal).run()

        for mode, _uid, _gid in _snapshot(installation.path).values():
            assert mode & 0o007 == 0

    def test_idempotent(
        self, installation: InstallationRoot, current_principal: Principal
    ) -> None:
        """A second run leaves the tree identical and changes nothing."""
        PolicyEngine(installation, current_principal).run()
        first = _snapshot(installation.path)

        results = PolicyEngine(installation, current_principal).run()
        second = _snapshot(installation.path)

        assert first == second
        assert results[0].changed == 0

    def test_dry_run_leaves_tree_untouched(
        self, installation: InstallationRoot, current_principal: Principal
    ) -> None:
        """Dry-run reports changes but modifies nothing."""
        before = _snapshot(installation.path)

        results = PolicyEngine(installation, current_principal, dry_run=True).run()

        assert _snapshot(installation.path) == before
        assert all(r.dry_run for r in results)
        assert results[1].changed > 0


class TestPolicyEngineFailures:
    """Tests for continue-on-error behaviour."""

    def test_missing_subtree_fails_only_its_step(
        self, installation: InstallationRoot, current_principal: Principal
    ) -> None:
        """A missing wp-includes fails its own step; later steps still run."""
        for dirpath, dirnames, filenames in os.walk(installation.join("wp-includes"), False):
            for name in filenames:
                os.unlink(os.path.join(dirpath, name))
            os.rmdir(dirpath)

        results = {r.step: r for r in PolicyEngine(installation, current_principal).run()}

        assert results["wp-includes"].success is False
        assert results["wp-includes"].error == "1 entry could not be changed"
        assert results["wp-content/themes"].success is True
        assert _mode(installation.join("wp-content/themes")) == 0o750

    def test_ownership_failure_does_not_stop_modes(
        self, installation: InstallationRoot, current_principal: Principal
    ) -> None:
        """A failed ownership pass is reported and the mode rules still apply."""
        stranger = Principal(user="nobody", group="nogroup", uid=4242, gid=4343)
        with patch(
            "wpharden.hardening.walker.os.chown",
            side_effect=PermissionError(1, "Operation not permitted"),
        ):
            results = PolicyEngine(installation, stranger).run()

        assert results[0].step == OWNERSHIP_STEP
        assert results[0].success is False
        assert results[0].failures
        assert all(r.success for r in results[1:])
        assert _mode(installation.join("wp-admin")) == 0o750


class TestApplyRule:
    """Tests for PolicyEngine.apply_rule() dispatch."""

    def test_subtree_rule_result_carries_modes(
        self, installation: InstallationRoot, current_principal: Principal
    ) -> None:
        """Subtree results report both modes."""
        engine = PolicyEngine(installation, current_principal)
        result = engine.apply_rule(SubtreeRule("wp-admin", 0o750, 0o640, description="Admin"))

        assert result.step == "wp-admin"
        assert result.dir_mode == 0o750
        assert result.file_mode == 0o640
        assert result.message == "Admin"

    def test_name_rule_result_has_no_dir_mode(
        self, installation: InstallationRoot, current_principal: Principal
    ) -> None:
        """Name rule results report only a file mode."""
        engine = PolicyEngine(installation, current_principal)
        result = engine.apply_rule(NameRule(".htaccess", 0o640))

        assert result.dir_mode is None
        assert result.file_mode == 0o640
        assert result.changed == 2

    def test_custom_rules(
        self, installation: InstallationRoot, current_principal: Principal
    ) -> None:
        """An engine can be built with a different rule sequence."""
        engine = PolicyEngine(
            installation,
            current_principal,
            rules=[SubtreeRule("wp-admin", 0o700, 0o600)],
        )
        results = engine.run()

        assert len(results) == 2
        assert _mode(installation.join("wp-admin")) == 0o700
        assert _mode(installation.join("index.php")) == 0o666

    def test_default_rules_are_policy_table(
        self, installation: InstallationRoot, current_principal: Principal
    ) -> None:
        """Without explicit rules the engine uses POLICY_TABLE."""
        assert PolicyEngine(installation, current_principal).rules == POLICY_TABLE
