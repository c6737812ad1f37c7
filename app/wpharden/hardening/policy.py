"""The fixed WordPress permission policy.

Rules are applied strictly in list order. Every subtree rule targets a
directory nested inside the subtree of an earlier rule, so later, more
specific rules overwrite the modes set by broader ones. The two name
rules run last and re-tighten individual files.

See https://wordpress.org/support/article/hardening-wordpress/
"""

from wpharden.hardening.models import (
    DIR_OWNER_RWX_GROUP_RWX,
    DIR_OWNER_RWX_GROUP_RX,
    FILE_OWNER_RW_GROUP_R,
    FILE_OWNER_RW_GROUP_RW,
    NameRule,
    PolicyRule,
    SubtreeRule,
)

# Paths that must exist for a directory to count as an installation root.
REQUIRED_DIRECTORY = "wp-admin"
REQUIRED_FILE = "wp-config.php"

UPLOADS_DIRECTORY = "wp-content/uploads"
UPLOADS_INDEX = "index.php"

POLICY_TABLE: tuple[PolicyRule, ...] = (
    # Baseline: writable only by the owner, readable by the web server group
    SubtreeRule(
        ".",
        DIR_OWNER_RWX_GROUP_RX,
        FILE_OWNER_RW_GROUP_R,
        description="WordPress root",
    ),
    SubtreeRule(
        "wp-admin",
        DIR_OWNER_RWX_GROUP_RX,
        FILE_OWNER_RW_GROUP_R,
        description="Administration area",
    ),
    SubtreeRule(
        "wp-includes",
        DIR_OWNER_RWX_GROUP_RX,
        FILE_OWNER_RW_GROUP_R,
        description="Application logic",
    ),
    # User-supplied content is writable by the web server group
    SubtreeRule(
        "wp-content",
        DIR_OWNER_RWX_GROUP_RWX,
        FILE_OWNER_RW_GROUP_RW,
        description="User-supplied content",
    ),
    SubtreeRule(
        "wp-content/plugins",
        DIR_OWNER_RWX_GROUP_RX,
        FILE_OWNER_RW_GROUP_R,
        description="Plugin files",
    ),
    SubtreeRule(
        "wp-content/themes",
        DIR_OWNER_RWX_GROUP_RX,
        FILE_OWNER_RW_GROUP_R,
        description="Theme files",
    ),
    NameRule(
        ".htaccess",
        FILE_OWNER_RW_GROUP_R,
        recursive=True,
        description="Rewrite rules",
    ),
    NameRule(
        "wp-config.php",
        FILE_OWNER_RW_GROUP_R,
        recursive=False,
        description="Site configuration",
    ),
)
