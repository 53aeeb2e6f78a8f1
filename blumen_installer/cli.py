# SPDX-License-Identifier: MIT
"""
blumen command line.

Usage:
    blumen new <name> [--url URL] [--timeout SECONDS] [--strict] [-v]

Env (optional):
    BLUMEN_TEMPLATE_URL  : template archive to download
    BLUMEN_HTTP_TIMEOUT  : download timeout in seconds (0 disables)
    BLUMEN_DEBUG         : 1 to print debug logs
"""
from __future__ import annotations

import argparse
import sys
from typing import List, Optional

from pydantic import ValidationError

from .config import InstallerSettings
from .errors import InstallerError
from .installer import ProjectInstaller
from .log import configure_logging


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="blumen", description="Blumen application installer.")
    sub = parser.add_subparsers(dest="command", required=True)

    new = sub.add_parser("new", help="Create a new Blumen application.")
    new.add_argument("name", help="Directory name of the new application.")
    new.add_argument("--url", default=None, help="Template archive URL (zip).")
    new.add_argument("--timeout", type=float, default=None, help="Download timeout in seconds.")
    new.add_argument(
        "--strict",
        action="store_true",
        help="Fail if some template entries could not be moved into place.",
    )
    new.add_argument("-v", "--verbose", action="store_true", help="Print debug logs.")
    return parser


def _cmd_new(args: argparse.Namespace) -> int:
    try:
        settings = InstallerSettings.from_env(template_url=args.url, timeout=args.timeout)
    except (ValidationError, ValueError) as e:
        print(f"error: invalid configuration: {e}", file=sys.stderr)
        return 2

    installer = ProjectInstaller(settings)
    print("Crafting application...")
    try:
        result = installer.new(args.name, strict=args.strict)
    except (InstallerError, ValueError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 1

    if result.flatten.stragglers:
        print(
            f"warning: some files could not be moved out of {result.flatten.root}:",
            file=sys.stderr,
        )
        for p in result.flatten.stragglers:
            print(f"  - {p.name}", file=sys.stderr)
    print("Application ready! Build something amazing.")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(force=args.verbose)
    if args.command == "new":
        return _cmd_new(args)
    return 2  # pragma: no cover - argparse enforces a subcommand


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
