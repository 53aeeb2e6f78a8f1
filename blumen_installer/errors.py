# SPDX-License-Identifier: MIT
"""
blumen_installer.errors

Typed errors raised by the installer pipeline. Every error derives from
InstallerError so callers (the CLI included) can catch a single type.
"""
from __future__ import annotations

from pathlib import Path
from typing import Sequence

__all__ = [
    "InstallerError",
    "TargetExistsError",
    "MissingCapabilityError",
    "ArchiveFetchError",
    "ArchiveUnreadableError",
    "UnexpectedArchiveLayoutError",
    "IncompleteFlattenError",
    "FilesystemError",
]


class InstallerError(RuntimeError):
    """Base class for every failure surfaced by blumen_installer."""


class TargetExistsError(InstallerError):
    """Raised when the application directory is already present."""

    def __init__(self, target: Path | str) -> None:
        self.target = Path(target)
        super().__init__("Application already exists!")


class MissingCapabilityError(InstallerError):
    """Raised when the host cannot handle zip archives."""


class ArchiveFetchError(InstallerError):
    """Raised when the template archive cannot be downloaded."""


class ArchiveUnreadableError(InstallerError):
    """Raised when the downloaded archive cannot be opened or extracted safely."""


class UnexpectedArchiveLayoutError(InstallerError):
    """Raised when the extracted archive does not hold exactly one top-level folder."""


class FilesystemError(InstallerError):
    """Raised when the target directory cannot be created or rearranged."""


class IncompleteFlattenError(InstallerError):
    """
    Raised in strict mode when some entries could not be moved out of the
    extracted root folder.

    Attributes:
        stragglers: Source paths that were left under the extracted root.
    """

    def __init__(self, stragglers: Sequence[Path]) -> None:
        self.stragglers = list(stragglers)
        names = ", ".join(p.name for p in self.stragglers)
        super().__init__(f"{len(self.stragglers)} entries could not be copied: {names}")
