# -*- coding: utf-8 -*-
"""
blumen_installer

Scaffold a new Blumen application from the reference template archive.

Exports:
    - ProjectInstaller  : fetch → extract → flatten → clean up orchestrator
    - InstallerSettings : template URL / timeout configuration
    - InstallerError    : base class of every error raised by the installer
"""

from .config import InstallerSettings
from .errors import (
    ArchiveFetchError,
    ArchiveUnreadableError,
    FilesystemError,
    IncompleteFlattenError,
    InstallerError,
    MissingCapabilityError,
    TargetExistsError,
    UnexpectedArchiveLayoutError,
)
from .installer import InstallResult, ProjectInstaller, Stage
from .log import configure_logging

configure_logging()

__all__ = [
    "ProjectInstaller",
    "InstallResult",
    "Stage",
    "InstallerSettings",
    "InstallerError",
    "TargetExistsError",
    "MissingCapabilityError",
    "ArchiveFetchError",
    "ArchiveUnreadableError",
    "UnexpectedArchiveLayoutError",
    "IncompleteFlattenError",
    "FilesystemError",
]
