# SPDX-License-Identifier: MIT
"""
blumen_installer.flatten

Move the contents of the archive's single top-level folder up into the
target directory, then retire the folder.

GitHub archives always wrap the repository in `<repo>-<branch>/`; this is
what gets flattened away.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from .errors import FilesystemError, UnexpectedArchiveLayoutError
from .fsops import FileSystem, LocalFileSystem
from .log import short

__all__ = ["FlattenReport", "find_extracted_root", "flatten_tree"]

_log = logging.getLogger("blumen_installer.flatten")


@dataclass(frozen=True)
class FlattenReport:
    root: Path
    copied: List[Path] = field(default_factory=list)
    stragglers: List[Path] = field(default_factory=list)
    root_removed: bool = False

    @property
    def ok(self) -> bool:
        return not self.stragglers and self.root_removed


def find_extracted_root(target_dir: Path, fs: Optional[FileSystem] = None) -> Path:
    """Return the single top-level folder inside `target_dir`."""
    fs = fs or LocalFileSystem()
    try:
        entries = fs.list_dir(target_dir)
    except OSError as e:
        raise FilesystemError(f"cannot list {short(target_dir)}: {e}") from e
    if len(entries) != 1:
        raise UnexpectedArchiveLayoutError(
            f"expected exactly one top-level entry in the archive, found {len(entries)}"
        )
    root = entries[0]
    if not fs.is_dir(root):
        raise UnexpectedArchiveLayoutError(
            f"top-level archive entry is not a directory: {root.name}"
        )
    return root


def flatten_tree(target_dir: Path, fs: Optional[FileSystem] = None) -> FlattenReport:
    """
    Copy every entry of the extracted root into `target_dir`, delete the
    sources that copied, and remove the root once empty.

    Entries that fail to copy stay under the root and are reported as
    stragglers; the root is then kept so nothing is lost. Failures while
    deleting copied sources raise FilesystemError.
    """
    fs = fs or LocalFileSystem()
    target_dir = Path(target_dir)
    root = find_extracted_root(target_dir, fs)
    try:
        entries = fs.list_dir(root)
    except OSError as e:
        raise FilesystemError(f"cannot list {short(root)}: {e}") from e

    # Only the root lives in target_dir; a taken name means an entry named like the root
    for source in entries:
        if fs.exists(target_dir / source.name):
            raise UnexpectedArchiveLayoutError(
                f"archive entry {root.name}/{source.name} clashes with its top-level folder"
            )

    _log.info("flatten: moving %s/* up into %s", root.name, short(target_dir))
    ledger: List[Path] = []
    stragglers: List[Path] = []
    for source in entries:
        if fs.copy_tree(source, target_dir / source.name):
            ledger.append(source)
        else:
            _log.warning("flatten: could not copy %s, leaving it in %s", source.name, root.name)
            stragglers.append(source)

    # Only paths in the ledger are ever deleted
    try:
        for source in ledger:
            if fs.is_dir(source):
                fs.remove_tree(source)
            else:
                fs.unlink(source)

        root_removed = False
        if not stragglers:
            fs.rmdir(root)
            root_removed = True
            _log.debug("flatten: removed %s", short(root))
    except OSError as e:
        raise FilesystemError(f"cannot retire copied entries in {short(root)}: {e}") from e

    return FlattenReport(
        root=root,
        copied=ledger,
        stragglers=stragglers,
        root_removed=root_removed,
    )
