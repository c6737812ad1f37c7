"""Access restriction block for the root .htaccess file.

Restricts xmlrpc.php and wp-cron.php to requests from the local host,
using mod_authz_core when available and the legacy Order/Allow/Deny
directives otherwise.
"""

import logging
from pathlib import Path

from wpharden.hardening.models import InstallationRoot

logger = logging.getLogger(__name__)

HTACCESS_NAME = ".htaccess"

# First line of the block; used to detect a previous append.
BLOCK_MARKER = "# Block WordPress sensible files from outside"

ACCESS_RESTRICTION_BLOCK = rf"""
{BLOCK_MARKER}
<FilesMatch "(xmlrpc|wp\-cron)\.php$">
  <IfModule mod_authz_core.c>
    Require local
  </IfModule>
  <IfModule !mod_authz_core.c>
    Order Deny,Allow
    Deny from all
    Allow from 127.0.0.1
    Allow from ::1
    Allow from localhost
  </IfModule>
</FilesMatch>
"""


def htaccess_path(root: InstallationRoot) -> Path:
    """Return the path of the root .htaccess file."""
    return root.join(HTACCESS_NAME)


def has_access_restriction(path: Path) -> bool:
    """Check whether the restriction block is already present in a file.

    Args:
        path: .htaccess file to inspect.

    Returns:
        True if the block marker appears on its own line.
    """
    try:
        content = path.read_text(encoding="utf-8", errors="replace")
    except FileNotFoundError:
        return False
    return any(line.strip() == BLOCK_MARKER for line in content.splitlines())


def append_access_restriction(
    root: InstallationRoot,
    *,
    append_once: bool = True,
    dry_run: bool = False,
) -> bool:
    """Append the access restriction block to the root .htaccess.

    The file is created if it does not exist.

    Args:
        root: Validated installation root.
        append_once: Skip the append if the block is already present.
        dry_run: If True, report without writing.

    Returns:
        True if the block was (or would be) appended, False if skipped.

    Raises:
        OSError: If the file cannot be read or written.
    """
    path = htaccess_path(root)

    if append_once and has_access_restriction(path):
        logger.debug("Access restriction already present in %s", path)
        return False

    if not dry_run:
        with open(path, "a", encoding="utf-8") as f:
            f.write(ACCESS_RESTRICTION_BLOCK)
        logger.info("Appended access restriction to %s", path)
    return True
