"""Depth-first directory walk with per-entry-type callbacks.

Every entry below the root is classified by ``lstat`` (symlinks are never
followed) and handed to the matching visitor callback. Entries within a
directory are visited in name order so repeated walks of the same tree see the
same sequence.

The visitor's ``on_open`` runs before the walk and ``on_close`` always runs
after it, whether the walk finished or raised.
"""

from __future__ import annotations

import os
import stat
from pathlib import Path
from typing import Protocol

from multiboot_utils.domain import EntryKind


class TreeVisitor(Protocol):
    def on_open(self) -> None: ...

    def on_close(self, success: bool) -> bool: ...

    def on_directory_enter(self, path: Path, relative_path: str) -> None: ...

    def on_regular_file(self, path: Path, relative_path: str) -> None: ...

    def on_symlink(self, path: Path, relative_path: str) -> None: ...

    def on_special(self, path: Path, relative_path: str) -> None: ...


def classify_entry(path: Path) -> EntryKind:
    mode = os.lstat(path).st_mode
    if stat.S_ISLNK(mode):
        return EntryKind.SYMLINK
    if stat.S_ISDIR(mode):
        return EntryKind.DIRECTORY
    if stat.S_ISREG(mode):
        return EntryKind.REGULAR_FILE
    return EntryKind.SPECIAL


def _dispatch(visitor: TreeVisitor, kind: EntryKind, path: Path, relative: str) -> None:
    if kind is EntryKind.DIRECTORY:
        visitor.on_directory_enter(path, relative)
    elif kind is EntryKind.REGULAR_FILE:
        visitor.on_regular_file(path, relative)
    elif kind is EntryKind.SYMLINK:
        visitor.on_symlink(path, relative)
    else:
        visitor.on_special(path, relative)


def _walk_directory(root: Path, directory: Path, visitor: TreeVisitor) -> None:
    with os.scandir(directory) as iterator:
        names = sorted(entry.name for entry in iterator)
    for name in names:
        path = directory / name
        relative = path.relative_to(root).as_posix()
        kind = classify_entry(path)
        _dispatch(visitor, kind, path, relative)
        if kind is EntryKind.DIRECTORY:
            _walk_directory(root, path, visitor)


def walk_tree(root: str | os.PathLike, visitor: TreeVisitor) -> bool:
    """Walk ``root`` and drive ``visitor``.

    Returns:
        True if the walk completed and ``on_close`` reported success

    Raises:
        Whatever ``on_open`` or a callback raises, and OSError if a directory
        cannot be listed. ``on_close`` has already run when a callback error
        propagates.
    """
    root = Path(root)
    visitor.on_open()

    walk_ok = False
    try:
        _walk_directory(root, root, visitor)
        walk_ok = True
    finally:
        close_ok = visitor.on_close(walk_ok)
    return walk_ok and close_ok
