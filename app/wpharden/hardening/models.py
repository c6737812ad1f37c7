"""Hardening domain models.

This module defines the data structures shared by the validator, the
tree walker and the policy engine: the validated installation root and
principal, the two policy rule variants, and per-step results.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

# Permission triads used by the policy table.
DIR_OWNER_RWX_GROUP_RX = 0o750  # rwxr-x---
DIR_OWNER_RWX_GROUP_RWX = 0o770  # rwxrwx---
FILE_OWNER_RW_GROUP_R = 0o640  # rw-r-----
FILE_OWNER_RW_GROUP_RW = 0o660  # rw-rw----


class EntryKind(str, Enum):
    """Kind of a filesystem entry discovered during traversal.

    Attributes:
        DIRECTORY: Real directory (not a symlink to one).
        FILE: Regular file.
        OTHER: Symlinks, sockets, devices and FIFOs. Never mutated.
    """

    DIRECTORY = "directory"
    FILE = "file"
    OTHER = "other"


@dataclass(frozen=True, slots=True)
class InstallationRoot:
    """A validated WordPress installation directory.

    Attributes:
        path: Absolute path to the installation root.
    """

    path: Path

    def __post_init__(self) -> None:
        """Validate root data after initialization."""
        if not self.path.is_absolute():
            msg = f"Installation root must be absolute, got {self.path}"
            raise ValueError(msg)

    def join(self, relative: str) -> Path:
        """Resolve a path relative to the installation root."""
        if relative in ("", "."):
            return self.path
        return self.path / relative


@dataclass(frozen=True, slots=True)
class Principal:
    """The (user, group) identity used for ownership assignment.

    Attributes:
        user: User name.
        group: Group name.
        uid: Numeric user id resolved during validation.
        gid: Numeric group id resolved during validation.
    """

    user: str
    group: str
    uid: int
    gid: int

    def __str__(self) -> str:
        return f"{self.user}:{self.group}"


@dataclass(frozen=True, slots=True)
class SubtreeRule:
    """Apply a directory mode and a file mode across a whole subtree.

    Attributes:
        subpath: Subtree root relative to the installation root ("." for all).
        dir_mode: Permission bits for every directory in the subtree.
        file_mode: Permission bits for every regular file in the subtree.
        description: Human-readable category name.
    """

    subpath: str
    dir_mode: int
    file_mode: int
    description: str = ""

    @property
    def label(self) -> str:
        """Short step label used in status output."""
        return self.subpath if self.subpath != "." else "(root)"


@dataclass(frozen=True, slots=True)
class NameRule:
    """Apply a file mode to regular files matching a name.

    Attributes:
        filename: Exact file name to match (e.g. ".htaccess").
        file_mode: Permission bits for each matching regular file.
        recursive: Match anywhere in the tree, or only at the root.
        description: Human-readable category name.
    """

    filename: str
    file_mode: int
    recursive: bool = True
    description: str = ""

    @property
    def dir_mode(self) -> None:
        """Name rules never touch directories."""
        return None

    @property
    def label(self) -> str:
        """Short step label used in status output."""
        return self.filename if not self.recursive else f"**/{self.filename}"


PolicyRule = SubtreeRule | NameRule


@dataclass(frozen=True, slots=True)
class EntryFailure:
    """A single entry that could not be changed during a step.

    Attributes:
        path: Path of the offending entry.
        error: Underlying OS error message.
    """

    path: str
    error: str


@dataclass(frozen=True, slots=True)
class StepResult:
    """Outcome of one top-level hardening step.

    A step that failed outright, or that could not change one or more
    entries, is reported with success=False; the run continues regardless.

    Attributes:
        step: Step label (e.g. "ownership", "wp-content").
        success: Whether every operation in the step succeeded.
        changed: Number of entries the step touched (or would touch).
        dir_mode: Directory mode applied by the step, if any.
        file_mode: File mode applied by the step, if any.
        message: Optional informational message.
        error: Error message if the step failed as a whole.
        failures: Individual entries that could not be changed.
        dry_run: Whether the step only simulated its changes.
    """

    step: str
    success: bool
    changed: int = 0
    dir_mode: int | None = None
    file_mode: int | None = None
    message: str | None = None
    error: str | None = None
    failures: tuple[EntryFailure, ...] = field(default_factory=tuple)
    dry_run: bool = False

    @property
    def failed(self) -> bool:
        """Check if the step failed."""
        return not self.success
