"""Unit tests for the fixed WordPress permission policy."""

from wpharden.hardening.models import NameRule, SubtreeRule
from wpharden.hardening.policy import POLICY_TABLE


class TestPolicyTable:
    """Tests for POLICY_TABLE ordering and modes."""

    def test_has_eight_rules(self) -> None:
        """The policy covers eight path categories."""
        assert len(POLICY_TABLE) == 8

    def test_subtree_order(self) -> None:
        """Subtree rules run broad-to-specific."""
        subpaths = [r.subpath for r in POLICY_TABLE if isinstance(r, SubtreeRule)]
        assert subpaths == [
            ".",
            "wp-admin",
            "wp-includes",
            "wp-content",
            "wp-content/plugins",
            "wp-content/themes",
        ]

    def test_name_rules_run_last(self) -> None:
        """Both name rules come after every subtree rule."""
        assert all(isinstance(r, SubtreeRule) for r in POLICY_TABLE[:6])
        assert all(isinstance(r, NameRule) for r in POLICY_TABLE[6:])
        names = [r.filename for r in POLICY_TABLE[6:]]  # type: ignore[union-attr]
        assert names == [".htaccess", "wp-config.php"]

    def test_htaccess_rule_is_recursive_and_config_rule_is_not(self) -> None:
        """.htaccess matches anywhere; wp-config.php only at the root."""
        htaccess, config = POLICY_TABLE[6], POLICY_TABLE[7]
        assert isinstance(htaccess, NameRule) and htaccess.recursive
        assert isinstance(config, NameRule) and not config.recursive

    def test_only_wp_content_grants_group_write(self) -> None:
        """Group write is granted on wp-content alone."""
        for rule in POLICY_TABLE:
            group_write = bool(rule.file_mode & 0o020)
            if isinstance(rule, SubtreeRule) and rule.subpath == "wp-content":
                assert group_write
                assert rule.dir_mode == 0o770
                assert rule.file_mode == 0o660
            else:
                assert not group_write

    def test_other_never_has_access(self) -> None:
        """No rule grants any permission to others."""
        for rule in POLICY_TABLE:
            assert rule.file_mode & 0o007 == 0
            if rule.dir_mode is not None:
                assert rule.dir_mode & 0o007 == 0

    def test_files_never_executable(self) -> None:
        """No rule sets an execute bit on files."""
        for rule in POLICY_TABLE:
            assert rule.file_mode & 0o111 == 0
