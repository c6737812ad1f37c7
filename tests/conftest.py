"""Pytest configuration and shared fixtures.

This module contains fixtures used across all test modules.
"""

import grp
import os
import pwd
from pathlib import Path

import pytest
from wpharden.hardening.models import InstallationRoot, Principal

# Relative path -> file content for a miniature WordPress tree.
WORDPRESS_FILES: dict[str, str] = {
    "index.php": "<?php\nrequire __DIR__ . '/wp-blog-header.php';\n",
    "wp-config.php": "<?php\ndefine('DB_NAME', 'wordpress');\n",
    ".htaccess": "# BEGIN WordPress\nRewriteEngine On\n# END WordPress\n",
    "wp-admin/admin.php": "<?php\n",
    "wp-admin/css/admin.css": "body {}\n",
    "wp-includes/version.php": "<?php\n$wp_version = '6.4.2';\n$wp_db_version = 56657;\n",
    "wp-includes/js/jquery.js": "/* jquery */\n",
    "wp-content/index.php": "<?php\n// Silence is golden.\n",
    "wp-content/uploads/2024/01/photo.jpg": "jpeg",
    "wp-content/plugins/akismet/akismet.php": "<?php\n",
    "wp-content/plugins/akismet/.htaccess": "Deny from all\n",
    "wp-content/themes/twentyone/style.css": "/* theme */\n",
}


def _loosen(root: Path) -> None:
    """Make every entry world-writable so hardening has work to do."""
    for dirpath, dirnames, filenames in os.walk(root):
        os.chmod(dirpath, 0o777)
        for name in filenames:
            os.chmod(os.path.join(dirpath, name), 0o666)


@pytest.fixture
def wp_root(tmp_path: Path) -> Path:
    """A miniature WordPress installation with loose permissions."""
    root = tmp_path / "wordpress"
    for relative, content in WORDPRESS_FILES.items():
        target = root / relative
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content)
    _loosen(root)
    return root


@pytest.fixture
def installation(wp_root: Path) -> InstallationRoot:
    """InstallationRoot wrapping the wp_root fixture."""
    return InstallationRoot(path=wp_root)


@pytest.fixture
def current_principal() -> Principal:
    """Principal for the user and group running the tests.

    Ownership changes to the current uid/gid succeed without privileges.
    """
    uid = os.getuid()
    gid = os.getgid()
    return Principal(
        user=pwd.getpwuid(uid).pw_name,
        group=grp.getgrgid(gid).gr_name,
        uid=uid,
        gid=gid,
    )
