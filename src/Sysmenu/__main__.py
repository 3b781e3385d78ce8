"""Sysmenu entry point.

Changes:
  - 2026-10-18: Added --menu to pick the system/files/all profile.
  - 2026-10-18: Added --dry-run to print delegated commands instead of running them.
"""

from __future__ import annotations

import argparse
import logging
import os
import sys

from Sysmenu import __version__
from Sysmenu.config import get_settings
from Sysmenu.logging_setup import setup_logging
from Sysmenu.session import build_session

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sysmenu",
        description="Sysmenu - menu-driven Linux administration shell",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  sysmenu                       Full menu (processes, sockets, network, files, cron, time, packages)
  sysmenu --menu system         Processes, sockets and network only
  sysmenu --menu files          Files, scheduled tasks, time and packages only
  sysmenu --dry-run             Show the commands that would run, run nothing
""",
    )
    parser.add_argument(
        "--menu",
        choices=("all", "system", "files"),
        default=None,
        help="Menu profile (default: SYSMENU_MENU_PROFILE or 'all')",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Logging level, e.g. DEBUG or INFO (default: SYSMENU_LOG_LEVEL or WARNING)",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print delegated commands instead of executing them",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    settings = get_settings()
    overrides: dict[str, object] = {}
    if args.menu:
        overrides["menu_profile"] = args.menu
    if args.log_level:
        overrides["log_level"] = args.log_level.upper()
    if args.dry_run:
        overrides["dry_run"] = True
    if overrides:
        settings = settings.model_copy(update=overrides)

    setup_logging(level=settings.log_level)
    if settings.dry_run:
        logger.warning("Dry run: delegated commands are printed, not executed")
    if not settings.dry_run and hasattr(os, "geteuid") and os.geteuid() != 0 and not settings.privilege_command:
        logger.warning("Not running as root and no privilege command set; privileged actions may fail")

    return build_session(settings).run()


if __name__ == "__main__":
    sys.exit(main())
