"""Directory listing guard for the uploads folder."""

import logging
from pathlib import Path

from wpharden.hardening.errors import MissingUploadsDirectoryError
from wpharden.hardening.models import InstallationRoot
from wpharden.hardening.policy import UPLOADS_DIRECTORY, UPLOADS_INDEX

logger = logging.getLogger(__name__)


def uploads_index_path(root: InstallationRoot) -> Path:
    """Return the placeholder index path inside wp-content/uploads."""
    return root.join(UPLOADS_DIRECTORY) / UPLOADS_INDEX


def ensure_uploads_index(root: InstallationRoot, *, dry_run: bool = False) -> bool:
    """Create an empty index.php in wp-content/uploads if it is missing.

    An existing file is never modified. Must run before the policy pass
    so the new file picks up the wp-content modes.

    Args:
        root: Validated installation root.
        dry_run: If True, report without creating the file.

    Returns:
        True if the file was (or would be) created, False if it already existed.

    Raises:
        MissingUploadsDirectoryError: If wp-content/uploads is not a directory.
        OSError: If the file cannot be created.
    """
    index = uploads_index_path(root)
    if not index.parent.is_dir():
        raise MissingUploadsDirectoryError(f"Uploads directory not found: {index.parent}")

    if index.exists() or index.is_symlink():
        logger.debug("Uploads index already present: %s", index)
        return False

    if not dry_run:
        index.touch(exist_ok=True)
        logger.info("Created %s", index)
    return True
