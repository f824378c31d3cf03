"""
Directory Tree Traversal

Pre-order walk over a root directory. Each filesystem node is described by a
TraversalEntry and handed to a visitor, which decides whether the walk
continues into it. A visitor aborts the walk by raising.

Two modes:

- Plain: entries are described with lstat, so symbolic links show up as
  links and are never followed.
- Following: a symbolic link is resolved to its target. A directory target
  is walked with the same visitor (links inside it are not followed again,
  so link cycles terminate); a file target is visited directly with the
  target's own path and metadata. Links that cannot be resolved are skipped.

Usage:
    from scopy.walker import walk, WalkAction

    def visit(entry):
        print(entry.path)
        return WalkAction.CONTINUE

    walk(".", visit, follow_symlinks=True)
"""

import logging
import os
import stat
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from scopy.errors import TraversalError

logger = logging.getLogger(__name__)


class WalkAction(Enum):
    """What the walk does after visiting an entry."""
    CONTINUE = "continue"
    SKIP_SUBTREE = "skip_subtree"  # Only meaningful for directories


@dataclass(frozen=True)
class TraversalEntry:
    """One filesystem node seen by the walk."""
    path: str
    is_dir: bool
    is_file: bool       # Regular file
    is_symlink: bool
    size: int

    @classmethod
    def from_stat(cls, path: str, st: os.stat_result) -> "TraversalEntry":
        return cls(
            path=path,
            is_dir=stat.S_ISDIR(st.st_mode),
            is_file=stat.S_ISREG(st.st_mode),
            is_symlink=stat.S_ISLNK(st.st_mode),
            size=st.st_size,
        )


Visitor = Callable[[TraversalEntry], Optional[WalkAction]]


def join_path(directory: str, name: str) -> str:
    """Join and clean a path, so walking ``.`` yields ``a.go`` not ``./a.go``."""
    return os.path.normpath(os.path.join(directory, name))


def walk(root: str, visit: Visitor, follow_symlinks: bool = False) -> None:
    """
    Walk the tree under root in pre-order, calling visit for every entry.

    Entries in a directory are visited in lexical order of their names.

    Args:
        root: Directory (or file) to start from
        visit: Callback returning a WalkAction; None means CONTINUE
        follow_symlinks: Resolve symbolic links to their targets

    Raises:
        TraversalError: on any filesystem error, except a missing path while
            not following symlinks (which is skipped)
    """
    walker = _Walker(visit, follow_symlinks, skip_missing=not follow_symlinks)
    walker.walk_root(root)


class _Walker:
    """Holds the visitor and mode for one walk."""

    def __init__(self, visit: Visitor, follow_symlinks: bool, skip_missing: bool):
        self.visit = visit
        self.follow_symlinks = follow_symlinks
        self.skip_missing = skip_missing

    def walk_root(self, root: str) -> None:
        try:
            st = os.lstat(root)
        except OSError as e:
            self._handle_error(root, e)
            return
        self._walk(TraversalEntry.from_stat(root, st))

    def _handle_error(self, path: str, error: OSError) -> None:
        if self.skip_missing and isinstance(error, FileNotFoundError):
            logger.debug(f"Skipping missing path: {path}")
            return
        raise TraversalError(path, error) from error

    def _walk(self, entry: TraversalEntry) -> None:
        if self.follow_symlinks and entry.is_symlink:
            self._follow(entry)
            return

        action = self.visit(entry)
        if not entry.is_dir or action == WalkAction.SKIP_SUBTREE:
            return

        try:
            names = sorted(os.listdir(entry.path))
        except OSError as e:
            self._handle_error(entry.path, e)
            return

        for name in names:
            path = join_path(entry.path, name)
            try:
                st = os.lstat(path)
            except OSError as e:
                self._handle_error(path, e)
                continue
            self._walk(TraversalEntry.from_stat(path, st))

    def _follow(self, link: TraversalEntry) -> None:
        try:
            target = os.readlink(link.path)
        except OSError:
            logger.debug(f"Skipping unreadable link: {link.path}")
            return

        if not os.path.isabs(target):
            target = join_path(os.path.dirname(link.path), target)

        try:
            st = os.stat(target)
        except OSError:
            logger.debug(f"Skipping broken link: {link.path} -> {target}")
            return

        target_entry = TraversalEntry.from_stat(target, st)
        if target_entry.is_dir:
            # Links inside the target are reported, not followed
            inner = _Walker(self.visit, follow_symlinks=False, skip_missing=self.skip_missing)
            inner._walk(target_entry)
        else:
            self.visit(target_entry)
