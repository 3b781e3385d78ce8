"""Smoke tests for package import and basic metadata."""

from __future__ import annotations

import Sysmenu
import Sysmenu.__main__
import Sysmenu.session


def test_package_imports() -> None:
    """Package import should work in CI."""
    assert Sysmenu is not None


def test_package_version_present() -> None:
    """Package should expose a non-empty version string."""
    assert isinstance(Sysmenu.__version__, str)
    assert Sysmenu.__version__.strip() != ""


def test_parser_has_launch_flags() -> None:
    parser = Sysmenu.__main__.build_parser()
    args = parser.parse_args(["--menu", "files", "--dry-run"])
    assert args.menu == "files"
    assert args.dry_run is True
    assert args.log_level is None
