# tests/conftest.py
# Shared fixtures: mock HTTP transports and in-memory template archives.
from __future__ import annotations

import io
import os
import stat
import zipfile
from typing import Callable, Dict, Optional

import httpx
import pytest

TEMPLATE_URL = "https://github.com/leopaglia/blumen/archive/master.zip"
CODELOAD_URL = "https://codeload.github.com/leopaglia/blumen/zip/refs/heads/master"


# ---- pytest markers ----------------------------------------------------------
def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line("markers", "live: test that downloads the real template")


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in ("BLUMEN_TEMPLATE_URL", "BLUMEN_HTTP_TIMEOUT", "BLUMEN_ARCHIVE_PREFIX"):
        monkeypatch.delenv(key, raising=False)


# ---- archives ----------------------------------------------------------------
def build_zip(
    files: Dict[str, bytes],
    *,
    dirs: tuple[str, ...] = (),
    links: Optional[Dict[str, str]] = None,
    executables: tuple[str, ...] = (),
) -> bytes:
    """
    Build a zip in memory. `files` maps member names to content, `links`
    maps member names to symlink targets (stored the way Info-ZIP does).
    """
    bio = io.BytesIO()
    with zipfile.ZipFile(bio, "w", compression=zipfile.ZIP_DEFLATED) as zf:
        for name in dirs:
            zf.writestr(name if name.endswith("/") else name + "/", b"")
        for name, data in files.items():
            info = zipfile.ZipInfo(name)
            mode = 0o755 if name in executables else 0o644
            info.external_attr = (stat.S_IFREG | mode) << 16
            info.compress_type = zipfile.ZIP_DEFLATED
            zf.writestr(info, data)
        for name, target in (links or {}).items():
            info = zipfile.ZipInfo(name)
            info.create_system = 3
            info.external_attr = (stat.S_IFLNK | 0o777) << 16
            zf.writestr(info, target)
    return bio.getvalue()


@pytest.fixture
def zip_builder() -> Callable[..., bytes]:
    return build_zip


@pytest.fixture
def template_zip() -> bytes:
    """GitHub-style archive: everything under a single `blumen-master/` folder."""
    return build_zip(
        {
            "blumen-master/README.md": b"# Blumen\n",
            "blumen-master/src/index.js": b"console.log('blumen');\n",
            "blumen-master/src/lib/util.js": b"module.exports = {};\n",
            "blumen-master/bin/serve.sh": b"#!/bin/sh\nexec node src/index.js\n",
        },
        dirs=("blumen-master", "blumen-master/src", "blumen-master/src/lib", "blumen-master/bin"),
        links={"blumen-master/index.js": "src/index.js"},
        executables=("blumen-master/bin/serve.sh",),
    )


# ---- HTTP --------------------------------------------------------------------
@pytest.fixture
def mock_transport_factory() -> (
    Callable[[Callable[[httpx.Request], httpx.Response]], httpx.MockTransport]
):
    """
    Factory returning an httpx.MockTransport from a handler function.

    Usage:
        def handler(request: httpx.Request) -> httpx.Response: ...
        transport = mock_transport_factory(handler)
    """

    def _factory(
        handler: Callable[[httpx.Request], httpx.Response],
    ) -> httpx.MockTransport:
        return httpx.MockTransport(handler)

    return _factory


@pytest.fixture
def archive_transport(mock_transport_factory):
    """
    Serve `body` the way GitHub does: the archive URL redirects to codeload.
    Returns (transport, requests) where `requests` records every URL hit.
    """

    def _make(body: bytes, status: int = 200):
        seen: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(str(request.url))
            if str(request.url) == TEMPLATE_URL:
                return httpx.Response(302, headers={"Location": CODELOAD_URL})
            if str(request.url) == CODELOAD_URL:
                return httpx.Response(status, content=body)
            return httpx.Response(404)

        return mock_transport_factory(handler), seen

    return _make


@pytest.fixture
def live_enabled() -> bool:
    return os.getenv("BLUMEN_LIVE") == "1"
