# SPDX-License-Identifier: MIT
from __future__ import annotations

import enum
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

import httpx

from .archivefetch import (
    discard_archive,
    extract_archive,
    fetch_archive,
    zip_support_available,
)
from .config import InstallerSettings
from .errors import (
    FilesystemError,
    IncompleteFlattenError,
    MissingCapabilityError,
    TargetExistsError,
)
from .flatten import FlattenReport, flatten_tree
from .fsops import FileSystem, LocalFileSystem
from .log import short

logger = logging.getLogger("blumen_installer.installer")


class Stage(str, enum.Enum):
    FETCHED = "fetched"
    EXTRACTED = "extracted"
    FLATTENING = "flattening"
    CLEANED_UP = "cleaned_up"


@dataclass(frozen=True)
class InstallResult:
    name: str
    target: Path
    archive: Path
    members_extracted: int
    flatten: FlattenReport
    stages: List[Stage]

    @property
    def complete(self) -> bool:
        return self.flatten.ok and self.stages[-1] is Stage.CLEANED_UP


class ProjectInstaller:
    """
    Scaffolds a new application from the template archive:
      target_for() → resolve <workdir>/<name>
      new()        → create target, fetch, extract, flatten, clean up

    There is no rollback: if a mandatory step fails the target directory is
    left as it was at that point, but the temporary archive is always removed.
    """

    def __init__(
        self,
        settings: Optional[InstallerSettings] = None,
        *,
        fs: Optional[FileSystem] = None,
        transport: Optional[httpx.BaseTransport] = None,
        workdir: Optional[str | Path] = None,
    ) -> None:
        self.settings = settings or InstallerSettings.from_env()
        self.fs = fs or LocalFileSystem()
        self.transport = transport
        self.workdir = Path(workdir).expanduser().resolve() if workdir else None
        logger.debug(
            "ProjectInstaller created (url=%s, workdir=%s)", self.settings.url, self.workdir
        )

    def _cwd(self) -> Path:
        return self.workdir or Path.cwd()

    def target_for(self, name: str) -> Path:
        name = (name or "").strip()
        if not name or name in (".", "..") or os.sep in name or "/" in name:
            raise ValueError(f"invalid application name: {name!r}")
        return self._cwd() / name

    def new(self, name: str, *, strict: bool = False) -> InstallResult:
        """
        Create application `name` in the working directory.

        Raises
        ------
        MissingCapabilityError  zip support is unavailable (nothing written)
        TargetExistsError       the directory already exists (nothing written)
        FilesystemError         the directory cannot be created or rearranged
        ArchiveFetchError       download failed
        ArchiveUnreadableError  archive could not be opened or extracted
        UnexpectedArchiveLayoutError  archive is not a single top-level folder
        IncompleteFlattenError  strict=True and some entries could not be moved
        """
        if not zip_support_available():
            raise MissingCapabilityError(
                "zlib support is not available in this Python build. "
                "Please install it and try again."
            )

        name = (name or "").strip()
        target = self.target_for(name)
        try:
            self.fs.make_dir(target, exclusive=True)
        except FileExistsError as e:
            raise TargetExistsError(target) from e
        except OSError as e:
            raise FilesystemError(f"cannot create {short(target)}: {e}") from e
        logger.info("new: crafting %s in %s", name, short(target))

        # fetch_archive removes its own partial file when the download fails
        archive = fetch_archive(
            self.settings.url,
            workdir=self._cwd(),
            prefix=self.settings.archive_prefix,
            timeout=self.settings.timeout,
            transport=self.transport,
        )
        stages: List[Stage] = [Stage.FETCHED]
        try:
            members = extract_archive(archive, target)
            stages.append(Stage.EXTRACTED)

            stages.append(Stage.FLATTENING)
            report = flatten_tree(target, self.fs)
        finally:
            if not discard_archive(archive):
                logger.debug("new: temporary archive left behind: %s", short(archive))
        stages.append(Stage.CLEANED_UP)

        if report.stragglers:
            logger.warning(
                "new: %d entries left in %s", len(report.stragglers), short(report.root)
            )
            if strict:
                raise IncompleteFlattenError(report.stragglers)

        logger.info("new: %s ready (%d entries)", name, len(report.copied))
        return InstallResult(
            name=name,
            target=target,
            archive=archive,
            members_extracted=members,
            flatten=report,
            stages=stages,
        )
