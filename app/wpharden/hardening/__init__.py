"""WordPress filesystem hardening.

This package provides input validation, the fixed permission policy,
the tree walker and policy engine that apply it, and the preparatory
uploads and .htaccess steps.
"""

from wpharden.hardening.defaults import (
    ChainedDefaults,
    ConfiguredDefaults,
    DefaultsProvider,
    PrincipalDefaults,
    WebServerDefaults,
)
from wpharden.hardening.engine import PolicyEngine
from wpharden.hardening.errors import (
    HardenError,
    InsufficientPrivilegeError,
    InvalidGroupError,
    InvalidRootError,
    InvalidUserError,
    MissingUploadsDirectoryError,
)
from wpharden.hardening.models import (
    EntryFailure,
    EntryKind,
    InstallationRoot,
    NameRule,
    PolicyRule,
    Principal,
    StepResult,
    SubtreeRule,
)
from wpharden.hardening.policy import POLICY_TABLE
from wpharden.hardening.runner import harden
from wpharden.hardening.validator import require_superuser, validate
from wpharden.hardening.walker import TreeWalker

__all__ = [
    "POLICY_TABLE",
    "ChainedDefaults",
    "ConfiguredDefaults",
    "DefaultsProvider",
    "EntryFailure",
    "EntryKind",
    "HardenError",
    "InstallationRoot",
    "InsufficientPrivilegeError",
    "InvalidGroupError",
    "InvalidRootError",
    "InvalidUserError",
    "MissingUploadsDirectoryError",
    "NameRule",
    "PolicyEngine",
    "PolicyRule",
    "Principal",
    "StepResult",
    "SubtreeRule",
    "TreeWalker",
    "WebServerDefaults",
    "harden",
    "require_superuser",
    "validate",
]
