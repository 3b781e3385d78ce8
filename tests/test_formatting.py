"""Bounded list rendering."""

from __future__ import annotations

import logging

import pytest

from Sysmenu.formatting import printable, render_bounded


def test_renders_all_items_when_they_fit() -> None:
    assert render_bounded(["UTC", "Asia"], prefix="Zones: ") == "Zones: [UTC, Asia]"
    assert render_bounded([]) == "[]"


def test_truncates_and_marks_the_cut(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING, logger="Sysmenu.formatting"):
        text = render_bounded(["aaaa", "bbbb", "cccc"], capacity=10)
    assert text == "[aaaa, ...]"
    assert "truncated" in caplog.text


def test_nothing_fits() -> None:
    assert render_bounded(["too-long"], capacity=3) == "[...]"


def test_exact_fit_is_not_truncated(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING, logger="Sysmenu.formatting"):
        assert render_bounded(["ab", "cd"], capacity=8) == "[ab, cd]"
    assert caplog.text == ""


def test_printable_replaces_escaped_bytes() -> None:
    assert printable("caf\udce9") == "caf�"
    assert printable("plain") == "plain"
