"""Pre-flight validation of the installation root and principal.

Nothing here touches the filesystem beyond read-only checks. All checks
run before any mutation; the first failing check raises.
"""

import grp
import logging
import os
import pwd
from pathlib import Path

from wpharden.hardening.defaults import DefaultsProvider
from wpharden.hardening.errors import (
    InsufficientPrivilegeError,
    InvalidGroupError,
    InvalidRootError,
    InvalidUserError,
)
from wpharden.hardening.models import InstallationRoot, Principal
from wpharden.hardening.policy import REQUIRED_DIRECTORY, REQUIRED_FILE

logger = logging.getLogger(__name__)


def is_superuser() -> bool:
    """Check if the process runs with an effective uid of 0."""
    return os.geteuid() == 0


def require_superuser() -> None:
    """Abort unless running as the superuser.

    Raises:
        InsufficientPrivilegeError: If the effective uid is not 0.
    """
    if not is_superuser():
        raise InsufficientPrivilegeError("You must run this with sudo or root.")


def validate_root(path: Path | str) -> InstallationRoot:
    """Check that a directory looks like a WordPress installation root.

    Args:
        path: Candidate root. Relative paths are made absolute and a
            trailing slash is ignored.

    Returns:
        InstallationRoot for the absolute path.

    Raises:
        InvalidRootError: If wp-admin or wp-config.php is missing.
    """
    if not str(path):
        raise InvalidRootError("Please provide a valid WordPress path.")

    candidate = Path(os.path.abspath(path))
    if not (candidate / REQUIRED_DIRECTORY).is_dir() or not (candidate / REQUIRED_FILE).is_file():
        raise InvalidRootError(f"Please provide a valid WordPress path: {candidate}")
    return InstallationRoot(path=candidate)


def resolve_user(name: str | None) -> int:
    """Resolve a user name to its uid.

    Raises:
        InvalidUserError: If the name is empty or not a system account.
    """
    if not name:
        raise InvalidUserError("Please provide a valid user.")
    try:
        return pwd.getpwnam(name).pw_uid
    except KeyError:
        raise InvalidUserError(f"Please provide a valid user: {name!r} does not exist.") from None


def resolve_group(name: str | None) -> int:
    """Resolve a group name to its gid.

    Raises:
        InvalidGroupError: If the name is empty or not a system group.
    """
    if not name:
        raise InvalidGroupError("Please provide a valid group.")
    try:
        return grp.getgrnam(name).gr_gid
    except KeyError:
        raise InvalidGroupError(f"Please provide a valid group: {name!r} does not exist.") from None


def validate(
    path: Path | str,
    user: str | None,
    group: str | None,
    defaults: DefaultsProvider | None = None,
) -> tuple[InstallationRoot, Principal]:
    """Validate the root, user and group of a hardening run.

    Explicit user/group values win; missing ones are filled from the
    defaults provider, if one is given. Checks run in order: root, user,
    group.

    Args:
        path: Candidate installation root.
        user: Explicit user name, or None.
        group: Explicit group name, or None.
        defaults: Provider of fallback names.

    Returns:
        Tuple of (InstallationRoot, Principal).

    Raises:
        InvalidRootError: If the root is not a WordPress installation.
        InvalidUserError: If the user does not resolve.
        InvalidGroupError: If the group does not resolve.
    """
    root = validate_root(path)

    if defaults is not None and (not user or not group):
        fallback = defaults.detect()
        user = user or fallback.user
        group = group or fallback.group
        logger.debug("Principal after defaults: user=%s group=%s", user, group)

    uid = resolve_user(user)
    gid = resolve_group(group)
    # resolve_* reject empty names, so both are set here
    return root, Principal(user=str(user), group=str(group), uid=uid, gid=gid)
