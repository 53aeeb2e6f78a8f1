# SPDX-License-Identifier: MIT
"""
Library-safe logging for blumen_installer.

Modules log through `logging.getLogger("blumen_installer.<module>")`. A
stream handler is attached to the package logger only when BLUMEN_DEBUG=1
(or when the CLI runs with --verbose); otherwise records propagate to
whatever the host application configured.
"""
from __future__ import annotations

import logging
import os
from pathlib import Path

PACKAGE_LOGGER = "blumen_installer"

_TRUTHY = ("1", "true", "yes", "on")


def debug_enabled() -> bool:
    return (os.getenv("BLUMEN_DEBUG") or "").strip().lower() in _TRUTHY


def configure_logging(force: bool = False) -> logging.Logger:
    """Attach the debug handler if BLUMEN_DEBUG is set or `force` is True."""
    log = logging.getLogger(PACKAGE_LOGGER)
    if force or debug_enabled():
        if not log.handlers:
            handler = logging.StreamHandler()
            handler.setFormatter(
                logging.Formatter("[blumen][%(module)s] %(levelname)s: %(message)s")
            )
            log.addHandler(handler)
        log.setLevel(logging.DEBUG)
    return log


def short(path: Path | str, maxlen: int = 120) -> str:
    s = str(path)
    return s if len(s) <= maxlen else ("…" + s[-(maxlen - 1) :])
