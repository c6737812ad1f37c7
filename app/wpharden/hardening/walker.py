"""Recursive mode and ownership application over a directory tree.

The walker classifies every entry with lstat semantics: real directories
and regular files are changed, everything else (symlinks, sockets,
devices, FIFOs) is left untouched and never followed. A failure on one
entry is recorded and traversal carries on with its siblings.

In dry-run mode the walker keeps a record of every mode and owner it
would have set, and of files that earlier steps would have created, so
that later passes over the same tree count exactly what a real run
would change.
"""

import logging
import os
import stat
from collections.abc import Iterator
from dataclasses import dataclass, field
from pathlib import Path

from wpharden.hardening.models import EntryFailure, EntryKind

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class WalkOutcome:
    """Accumulated outcome of one traversal.

    Attributes:
        changed: Entries whose mode or ownership was (or would be) changed.
        visited: Entries of a mutable kind that were examined.
        failures: Entries that could not be read or changed.
    """

    changed: int = 0
    visited: int = 0
    failures: list[EntryFailure] = field(default_factory=list)

    def fail(self, path: Path | str, error: OSError) -> None:
        """Record a failed entry."""
        logger.warning("Cannot update %s: %s", path, error)
        self.failures.append(EntryFailure(path=str(path), error=error.strerror or str(error)))


@dataclass(frozen=True, slots=True)
class EntryState:
    """Mode and ownership of an entry, as on disk or as simulated.

    Attributes:
        mode: Full st_mode (file type and permission bits).
        uid: Owner id.
        gid: Group id.
    """

    mode: int
    uid: int
    gid: int

    @property
    def kind(self) -> EntryKind:
        if stat.S_ISDIR(self.mode):
            return EntryKind.DIRECTORY
        if stat.S_ISREG(self.mode):
            return EntryKind.FILE
        return EntryKind.OTHER

    @property
    def permissions(self) -> int:
        return stat.S_IMODE(self.mode)


def classify(path: Path) -> EntryKind:
    """Classify a path without following symlinks.

    Args:
        path: Path to classify.

    Returns:
        EntryKind of the path.

    Raises:
        OSError: If the path cannot be stat'ed (e.g. it does not exist).
    """
    st = os.lstat(path)
    return EntryState(st.st_mode, st.st_uid, st.st_gid).kind


def _entry_kind(entry: os.DirEntry[str]) -> EntryKind:
    if entry.is_symlink():
        return EntryKind.OTHER
    if entry.is_dir(follow_symlinks=False):
        return EntryKind.DIRECTORY
    if entry.is_file(follow_symlinks=False):
        return EntryKind.FILE
    return EntryKind.OTHER


def _current_umask() -> int:
    mask = os.umask(0)
    os.umask(mask)
    return mask


class TreeWalker:
    """Applies permission modes and ownership across subtrees.

    Attributes:
        _dry_run: If True, count what would change without modifying anything.
        _simulated: Dry-run only; state each touched entry would have.
        _pending: Dry-run only; files an earlier step would have created,
            keyed by parent directory.
    """

    def __init__(self, *, dry_run: bool = False) -> None:
        """Initialize the TreeWalker.

        Args:
            dry_run: If True, report changes without applying them.
        """
        self._dry_run = dry_run
        self._simulated: dict[Path, EntryState] = {}
        self._pending: dict[Path, list[Path]] = {}

    @property
    def dry_run(self) -> bool:
        """Check if walker is in dry-run mode."""
        return self._dry_run

    def expect_new_file(self, path: Path) -> None:
        """Account for a regular file that a real run would have created.

        The file gets the mode and owner a creation by this process would
        give it (0o666 less the umask, effective uid, and the parent's
        group if the parent is setgid). Has no effect outside dry-run.

        Args:
            path: Path of the file that does not exist yet.
        """
        if not self._dry_run or path in self._simulated or os.path.lexists(path):
            return

        gid = os.getegid()
        try:
            parent = self._state(path.parent)
        except OSError:
            parent = None
        if parent is not None and parent.mode & stat.S_ISGID:
            gid = parent.gid

        mode = stat.S_IFREG | (0o666 & ~_current_umask())
        self._simulated[path] = EntryState(mode, os.geteuid(), gid)
        self._pending.setdefault(path.parent, []).append(path)
        logger.debug("Dry-run: expecting new file %s", path)

    def _state(self, path: Path) -> EntryState:
        state = self._simulated.get(path)
        if state is not None:
            return state
        st = os.lstat(path)
        return EntryState(st.st_mode, st.st_uid, st.st_gid)

    def _list(self, directory: Path) -> list[tuple[Path, EntryKind]]:
        with os.scandir(directory) as it:
            entries = [(Path(e.path), _entry_kind(e)) for e in it]
        listed = {path for path, _ in entries}
        for path in self._pending.get(directory, ()):
            if path not in listed:
                entries.append((path, EntryKind.FILE))
        return entries

    def walk(self, root: Path, outcome: WalkOutcome) -> Iterator[tuple[Path, EntryKind]]:
        """Yield the subtree root and every entry reachable beneath it.

        Each directory is yielded before its children are listed, so a
        caller that changes a directory's mode does so before it is read.
        Traversal uses an explicit stack, so depth is bounded only by the
        filesystem. Unreadable directories and a missing root are
        recorded on ``outcome`` and skipped.

        Args:
            root: Subtree root.
            outcome: Accumulator receiving traversal failures.

        Yields:
            (path, kind) tuples, each reachable entry exactly once.
        """
        try:
            kind = self._state(root).kind
        except OSError as e:
            outcome.fail(root, e)
            return

        yield root, kind
        if kind != EntryKind.DIRECTORY:
            return

        stack = [root]
        while stack:
            directory = stack.pop()
            try:
                entries = self._list(directory)
            except OSError as e:
                outcome.fail(directory, e)
                continue

            subdirs: list[Path] = []
            for path, entry_kind in entries:
                yield path, entry_kind
                if entry_kind == EntryKind.DIRECTORY:
                    subdirs.append(path)
            stack.extend(reversed(subdirs))

    def apply_modes(self, root: Path, dir_mode: int, file_mode: int) -> WalkOutcome:
        """Set dir_mode on every directory and file_mode on every regular file.

        Args:
            root: Subtree root (its own mode is set first).
            dir_mode: Permission bits for directories.
            file_mode: Permission bits for regular files.

        Returns:
            WalkOutcome for the traversal.
        """
        outcome = WalkOutcome()
        for path, kind in self.walk(root, outcome):
            if kind == EntryKind.DIRECTORY:
                self._chmod(path, dir_mode, outcome)
            elif kind == EntryKind.FILE:
                self._chmod(path, file_mode, outcome)
            else:
                logger.debug("Skipping %s (not a directory or regular file)", path)
        return outcome

    def apply_file_mode_by_name(
        self,
        root: Path,
        filename: str,
        file_mode: int,
        *,
        recursive: bool = True,
    ) -> WalkOutcome:
        """Set file_mode on regular files named ``filename``.

        Args:
            root: Directory to search.
            filename: Exact file name to match.
            file_mode: Permission bits to apply.
            recursive: Search the whole tree, or only directly inside root.

        Returns:
            WalkOutcome for the traversal.
        """
        outcome = WalkOutcome()
        if not recursive:
            candidate = root / filename
            try:
                kind = self._state(candidate).kind
            except FileNotFoundError:
                return outcome
            except OSError as e:
                outcome.fail(candidate, e)
                return outcome
            if kind == EntryKind.FILE:
                self._chmod(candidate, file_mode, outcome)
            return outcome

        for path, kind in self.walk(root, outcome):
            if kind == EntryKind.FILE and path.name == filename:
                self._chmod(path, file_mode, outcome)
        return outcome

    def apply_ownership(self, root: Path, uid: int, gid: int) -> WalkOutcome:
        """Set owner and group on every directory and regular file.

        Args:
            root: Subtree root.
            uid: Numeric owner id.
            gid: Numeric group id.

        Returns:
            WalkOutcome for the traversal.
        """
        outcome = WalkOutcome()
        for path, kind in self.walk(root, outcome):
            if kind == EntryKind.OTHER:
                continue
            outcome.visited += 1
            try:
                state = self._state(path)
                if state.uid == uid and state.gid == gid:
                    continue
                if self._dry_run:
                    self._simulated[path] = EntryState(state.mode, uid, gid)
                else:
                    os.chown(path, uid, gid, follow_symlinks=False)
                outcome.changed += 1
            except OSError as e:
                outcome.fail(path, e)
        return outcome

    def _chmod(self, path: Path, mode: int, outcome: WalkOutcome) -> None:
        outcome.visited += 1
        try:
            state = self._state(path)
            if state.permissions == mode:
                return
            if self._dry_run:
                kind_bits = stat.S_IFMT(state.mode)
                self._simulated[path] = EntryState(kind_bits | mode, state.uid, state.gid)
                logger.debug("Dry-run: would chmod %o %s", mode, path)
            else:
                os.chmod(path, mode)
                logger.debug("chmod %o %s", mode, path)
            outcome.changed += 1
        except OSError as e:
            outcome.fail(path, e)
