"""WordPress version detection (informational only)."""

import logging
import re

from wpharden.hardening.models import InstallationRoot

logger = logging.getLogger(__name__)

VERSION_FILE = "wp-includes/version.php"
UNKNOWN_VERSION = "unknown"

_VERSION_PATTERN = re.compile(r"""^\$wp_version\s*=\s*['"]([^'"]*)['"]""", re.MULTILINE)


def detect_wordpress_version(root: InstallationRoot) -> str:
    """Read the WordPress version from wp-includes/version.php.

    Never fails: a missing, unreadable or unparseable file yields "unknown".

    Args:
        root: Installation root.

    Returns:
        Version string such as "6.4.2", or "unknown".
    """
    path = root.join(VERSION_FILE)
    try:
        content = path.read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        logger.debug("Cannot read %s: %s", path, e)
        return UNKNOWN_VERSION

    match = _VERSION_PATTERN.search(content)
    if match is None or not match.group(1):
        return UNKNOWN_VERSION
    return match.group(1)
