"""Exceptions raised while preparing and running a hardening pass.

Pre-flight errors (privilege, root, user, group) abort the run before
anything on disk is touched. MissingUploadsDirectoryError is raised by
the uploads guard and reported as a failed step.
"""


class HardenError(Exception):
    """Base exception for hardening errors."""


class InsufficientPrivilegeError(HardenError):
    """Raised when the process is not running as the superuser."""


class InvalidRootError(HardenError):
    """Raised when a path is not a WordPress installation root."""


class InvalidUserError(HardenError):
    """Raised when a user name does not resolve to a system account."""


class InvalidGroupError(HardenError):
    """Raised when a group name does not resolve to a system group."""


class MissingUploadsDirectoryError(HardenError):
    """Raised when wp-content/uploads does not exist."""
