"""Crontab snapshot parsing and read-modify-write."""

from __future__ import annotations

import pytest

from Sysmenu.crontab import CronEntry, CrontabSnapshot, CrontabStore
from Sysmenu.runner import ExecutionResult

_TABLE = """# backups
MAILTO=ops
0 2 * * * /usr/local/bin/backup --full
@reboot /usr/bin/start-agent
*/5 * * * * date >> /tmp/ticks
"""


def test_snapshot_counts_every_raw_line() -> None:
    snapshot = CrontabSnapshot.from_text(_TABLE)
    assert len(snapshot) == 5
    assert snapshot.text() == _TABLE


def test_comments_and_env_lines_are_numbered_like_tasks() -> None:
    snapshot = CrontabSnapshot.from_text(_TABLE).without_line(2)
    assert snapshot.lines[0] == "# backups"
    assert snapshot.lines[1].startswith("0 2 * * *")


def test_entry_at_parses_tasks_by_raw_line() -> None:
    snapshot = CrontabSnapshot.from_text(_TABLE)
    assert snapshot.entry_at(1) is None
    assert snapshot.entry_at(2) is None
    assert snapshot.entry_at(3) == CronEntry("0 2 * * *", "/usr/local/bin/backup --full", 3)
    assert snapshot.entry_at(4) == CronEntry("@reboot", "/usr/bin/start-agent", 4)
    assert snapshot.entry_at(5).render() == "*/5 * * * * date >> /tmp/ticks"
    assert snapshot.entry_at(6) is None


def test_without_line_removes_exactly_one() -> None:
    snapshot = CrontabSnapshot.from_text(_TABLE).without_line(3)
    assert len(snapshot) == 4
    assert all("backup" not in line for line in snapshot.lines)
    with pytest.raises(IndexError):
        snapshot.without_line(0)
    with pytest.raises(IndexError):
        snapshot.without_line(5)


def test_empty_snapshot_text() -> None:
    assert CrontabSnapshot().text() == ""
    assert CrontabSnapshot().is_empty


def test_store_read_treats_missing_crontab_as_empty(runner) -> None:
    runner.script["crontab"] = ExecutionResult(exit_code=1, stderr="no crontab for user")
    snapshot = CrontabStore(runner).read()
    assert snapshot.is_empty


def test_store_add_rewrites_whole_table(runner) -> None:
    runner.script["crontab"] = [
        ExecutionResult(exit_code=0, stdout="0 1 * * * a\n"),
        ExecutionResult(exit_code=0),
    ]
    entry, result = CrontabStore(runner).add("0 2 * * *", "b")
    assert result.ok
    assert entry == CronEntry("0 2 * * *", "b", 2)
    read, write = runner.calls
    assert read["args"] == ["-l"]
    assert write["args"] == ["-"]
    assert write["input_text"] == "0 1 * * * a\n0 2 * * * b\n"


def test_store_remove_writes_from_snapshot_without_rereading(runner) -> None:
    snapshot = CrontabSnapshot.from_text("0 1 * * * a\n0 2 * * * b\n0 3 * * * c\n")
    CrontabStore(runner).remove(2, snapshot)
    assert len(runner.calls) == 1
    assert runner.calls[0]["args"] == ["-"]
    assert runner.calls[0]["input_text"] == "0 1 * * * a\n0 3 * * * c\n"
