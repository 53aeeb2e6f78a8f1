# SPDX-License-Identifier: MIT
"""
blumen_installer.archivefetch

Download the template archive over HTTP(S) into a uniquely named temporary
file, unpack it, and throw the file away afterwards.

Features
- HTTP(S) download via httpx with redirect support and timeout, streamed to disk
- Collision-resistant temp names (time + random token) in the working directory
- Zip extraction with path traversal protection, symlink and exec-bit support
- Best-effort cleanup that never raises

Public API
----------
make_archive_path(workdir=None, prefix="blumen_") -> Path
download_archive(url, dest, *, timeout=60, transport=None) -> Path
fetch_archive(url, *, workdir=None, prefix="blumen_", timeout=60, transport=None) -> Path
extract_archive(archive_path, target_dir) -> int
discard_archive(path) -> bool
"""
from __future__ import annotations

import hashlib
import importlib.util
import logging
import os
import shutil
import stat
import time
import uuid
import zipfile
from pathlib import Path
from typing import Optional

import httpx

from .errors import ArchiveFetchError, ArchiveUnreadableError
from .log import short

__all__ = [
    "zip_support_available",
    "make_archive_path",
    "download_archive",
    "fetch_archive",
    "extract_archive",
    "discard_archive",
]

_log = logging.getLogger("blumen_installer.archivefetch")

try:
    import zlib

    _INFLATE_ERRORS: tuple = (zlib.error,)
except ImportError:  # pragma: no cover - reported by zip_support_available()
    _INFLATE_ERRORS = ()


def zip_support_available() -> bool:
    """Deflated zip members need zlib; without it nothing can be extracted."""
    return importlib.util.find_spec("zlib") is not None


# --------------------------------------------------------------------------------------
# Download
# --------------------------------------------------------------------------------------
def make_archive_path(workdir: Optional[Path | str] = None, prefix: str = "blumen_") -> Path:
    """Return a fresh `<workdir>/<prefix><md5>.zip` path; nothing is created."""
    base = Path(workdir) if workdir is not None else Path.cwd()
    token = hashlib.md5(f"{time.time()}{uuid.uuid4().hex}".encode("utf-8")).hexdigest()
    return base.resolve() / f"{prefix}{token}.zip"


def download_archive(
    url: str,
    dest: Path | str,
    *,
    timeout: Optional[float] = 60,
    transport: Optional[httpx.BaseTransport] = None,
) -> Path:
    """
    Stream the body of GET `url` into `dest`.

    Raises
    ------
    ArchiveFetchError for transport errors, non-success statuses, or when
    `dest` cannot be written.
    """
    path = Path(dest)
    written = 0
    _log.info("http: GET %s", url)
    try:
        with httpx.Client(timeout=timeout, follow_redirects=True, transport=transport) as client:
            with client.stream("GET", url) as resp:
                resp.raise_for_status()
                with open(path, "wb") as out:
                    for chunk in resp.iter_bytes():
                        out.write(chunk)
                        written += len(chunk)
    except httpx.HTTPStatusError as e:
        raise ArchiveFetchError(f"http {e.response.status_code} for {url}") from e
    except httpx.RequestError as e:
        raise ArchiveFetchError(f"download failed: {e}") from e
    except OSError as e:
        raise ArchiveFetchError(f"cannot write archive to {path}: {e}") from e

    _log.debug("http: downloaded %d bytes → %s", written, short(path))
    return path


def fetch_archive(
    url: str,
    *,
    workdir: Optional[Path | str] = None,
    prefix: str = "blumen_",
    timeout: Optional[float] = 60,
    transport: Optional[httpx.BaseTransport] = None,
) -> Path:
    """
    Download `url` into a new temporary archive and return its path.

    The caller owns the returned file and is expected to discard_archive() it.
    A partially written file is removed before the error propagates.
    """
    path = make_archive_path(workdir, prefix)
    try:
        return download_archive(url, path, timeout=timeout, transport=transport)
    except ArchiveFetchError:
        discard_archive(path)
        raise


# --------------------------------------------------------------------------------------
# Extraction
# --------------------------------------------------------------------------------------
def _within(root: Path, path: Path) -> bool:
    return path == root or root in path.parents


def _member_dest(root: Path, name: str) -> Path:
    """
    Map an archive member name to its destination under `root`, refusing
    absolute names and anything that would land outside ("zip slip").
    The final component is not resolved so symlink members stay links.
    """
    parts = Path(name).parts
    if not parts or Path(name).is_absolute() or ".." in parts:
        raise ArchiveUnreadableError(f"unsafe zip entry path: {name}")
    candidate = root.joinpath(*parts)
    parent = candidate.parent.resolve()
    if not _within(root, parent):
        raise ArchiveUnreadableError(f"unsafe zip entry path: {name}")
    return parent / candidate.name


def _safe_extract_zip(zf: zipfile.ZipFile, target_dir: Path) -> int:
    count = 0
    for member in zf.infolist():
        dest = _member_dest(target_dir, member.filename)
        if member.is_dir():
            dest.mkdir(parents=True, exist_ok=True)
            continue

        dest.parent.mkdir(parents=True, exist_ok=True)
        # A repeated name could write through a link placed by an earlier member
        if os.path.lexists(dest):
            raise ArchiveUnreadableError(f"duplicate zip entry path: {member.filename}")
        mode = member.external_attr >> 16
        if stat.S_ISLNK(mode):
            link_target = zf.read(member).decode("utf-8")
            os.symlink(link_target, dest)
        else:
            with zf.open(member, "r") as src, open(dest, "wb") as out:
                shutil.copyfileobj(src, out)
            # Keep executable bits of scripts shipped in the template
            if mode & 0o111:
                os.chmod(dest, stat.S_IMODE(mode))
        count += 1
    return count


def extract_archive(archive_path: Path | str, target_dir: Path | str) -> int:
    """
    Extract every member of the zip at `archive_path` into `target_dir`,
    preserving the archive's internal structure. Returns the number of
    non-directory members written.

    Raises
    ------
    ArchiveUnreadableError if the archive cannot be opened, is corrupt, or
    holds a member that would escape `target_dir`.
    """
    tgt = Path(target_dir).resolve()
    tgt.mkdir(parents=True, exist_ok=True)
    try:
        with zipfile.ZipFile(archive_path) as zf:
            count = _safe_extract_zip(zf, tgt)
    except (zipfile.BadZipFile, EOFError, *_INFLATE_ERRORS) as e:
        raise ArchiveUnreadableError(f"bad zip file {short(archive_path)}: {e}") from e
    except OSError as e:
        raise ArchiveUnreadableError(f"cannot extract {short(archive_path)}: {e}") from e

    _log.debug("zip: extracted %d members → %s", count, short(tgt))
    return count


# --------------------------------------------------------------------------------------
# Cleanup
# --------------------------------------------------------------------------------------
def discard_archive(path: Path | str) -> bool:
    """
    Best-effort removal of a temporary archive. Never raises; returns True
    when the file no longer exists.
    """
    p = Path(path)
    try:
        os.chmod(p, 0o777)
    except OSError:
        pass
    try:
        p.unlink()
    except FileNotFoundError:
        return True
    except OSError as e:
        _log.debug("cleanup: could not remove %s (ignored): %s", short(p), e)
        return False
    _log.debug("cleanup: removed %s", short(p))
    return True
