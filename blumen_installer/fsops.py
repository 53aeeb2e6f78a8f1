# SPDX-License-Identifier: MIT
"""
blumen_installer.fsops

Recursive copy/remove helpers and the small filesystem interface the
flattener works against.

- copy_tree(source, dest) -> bool   copies a link, file or directory tree
- remove_tree(path) -> None         deletes a directory tree, fails loudly
- FileSystem                        protocol consumed by flatten/installer
- LocalFileSystem                   on-disk implementation
"""
from __future__ import annotations

import logging
import os
import shutil
from pathlib import Path
from typing import List, Protocol

__all__ = [
    "copy_tree",
    "remove_tree",
    "FileSystem",
    "LocalFileSystem",
]

_log = logging.getLogger("blumen_installer.fsops")


def copy_tree(source: Path | str, dest: Path | str) -> bool:
    """
    Copy a symbolic link, regular file or directory tree from `source` to `dest`.

    Links are recreated with the same target rather than dereferenced. Files
    are copied by content only. For directories every entry is attempted even
    after a failure; the result is True only if the whole subtree copied.
    """
    src = Path(source)
    dst = Path(dest)

    if src.is_symlink():
        try:
            os.symlink(os.readlink(src), dst)
        except OSError as e:
            _log.debug("copy: cannot link %s → %s: %s", src, dst, e)
            return False
        return True

    if src.is_file():
        try:
            shutil.copyfile(src, dst)
        except OSError as e:
            _log.debug("copy: cannot copy %s → %s: %s", src, dst, e)
            return False
        return True

    if not src.is_dir():
        _log.debug("copy: source vanished or is not copyable: %s", src)
        return False

    if not dst.is_dir():
        try:
            dst.mkdir()
        except OSError as e:
            _log.debug("copy: cannot create directory %s: %s", dst, e)
            return False

    try:
        children = sorted(src.iterdir())
    except OSError as e:
        _log.debug("copy: cannot list %s: %s", src, e)
        return False

    ok = True
    for child in children:
        if not copy_tree(child, dst / child.name):
            ok = False
    return ok


def remove_tree(path: Path | str) -> None:
    """
    Remove `path` and everything below it.

    Links to directories are unlinked, never followed. Any OSError propagates,
    including FileNotFoundError when `path` does not exist.
    """
    root = Path(path)
    with os.scandir(root) as it:
        entries = list(it)
    for entry in entries:
        if entry.is_dir(follow_symlinks=False):
            remove_tree(entry.path)
        else:
            os.unlink(entry.path)
    root.rmdir()


class FileSystem(Protocol):
    """Filesystem operations the flattener and installer depend on."""

    def exists(self, path: Path) -> bool: ...

    def is_dir(self, path: Path) -> bool: ...

    def list_dir(self, path: Path) -> List[Path]: ...

    def make_dir(self, path: Path, *, exclusive: bool = True) -> None: ...

    def copy_tree(self, source: Path, dest: Path) -> bool: ...

    def remove_tree(self, path: Path) -> None: ...

    def unlink(self, path: Path) -> None: ...

    def rmdir(self, path: Path) -> None: ...


class LocalFileSystem:
    """FileSystem backed by the real disk."""

    def exists(self, path: Path) -> bool:
        # lexists: a dangling link still occupies the name
        return os.path.lexists(path)

    def is_dir(self, path: Path) -> bool:
        return Path(path).is_dir() and not Path(path).is_symlink()

    def list_dir(self, path: Path) -> List[Path]:
        return sorted(Path(path).iterdir())

    def make_dir(self, path: Path, *, exclusive: bool = True) -> None:
        """Create `path`; with exclusive=True an existing entry raises FileExistsError."""
        Path(path).mkdir(parents=False, exist_ok=not exclusive)

    def copy_tree(self, source: Path, dest: Path) -> bool:
        return copy_tree(source, dest)

    def remove_tree(self, path: Path) -> None:
        remove_tree(path)

    def unlink(self, path: Path) -> None:
        os.unlink(path)

    def rmdir(self, path: Path) -> None:
        os.rmdir(path)
