"""User crontab access through ``crontab -l`` / ``crontab -``.

The OS offers no partial update primitive, so every mutation reads the
whole table, edits it in memory and writes the whole text back.

Known hazard: ``remove`` rewrites from the snapshot the user was shown. If
the crontab is changed by something else between that listing and the
write, the line number may point at a different entry and the external
change is overwritten. Nothing here detects that.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from Sysmenu.runner import CommandRunner, ExecutionResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CronEntry:
    """One scheduled task, addressed by its 1-based line in the crontab."""

    schedule: str
    command: str
    line_number: int

    def render(self) -> str:
        return f"{self.schedule} {self.command}"


def _parse_line(line: str, line_number: int) -> CronEntry | None:
    text = line.strip()
    if not text or text.startswith("#"):
        return None
    if text.startswith("@"):
        parts = text.split(maxsplit=1)
        if len(parts) != 2:
            return None
        return CronEntry(schedule=parts[0], command=parts[1], line_number=line_number)
    parts = text.split(maxsplit=5)
    if len(parts) != 6:
        return None
    return CronEntry(schedule=" ".join(parts[:5]), command=parts[5], line_number=line_number)


@dataclass(frozen=True)
class CrontabSnapshot:
    """Crontab text as read at one moment. Line numbers count every raw line."""

    lines: tuple[str, ...] = ()

    @classmethod
    def from_text(cls, text: str) -> CrontabSnapshot:
        return cls(lines=tuple((text or "").splitlines()))

    def __len__(self) -> int:
        return len(self.lines)

    @property
    def is_empty(self) -> bool:
        return not self.lines

    def entry_at(self, line_number: int) -> CronEntry | None:
        """The task on ``line_number``; None for comments, env lines or out of range."""
        if not 0 < line_number <= len(self.lines):
            return None
        return _parse_line(self.lines[line_number - 1], line_number)

    def text(self) -> str:
        if not self.lines:
            return ""
        return "\n".join(self.lines) + "\n"

    def with_line(self, line: str) -> CrontabSnapshot:
        return CrontabSnapshot(lines=(*self.lines, line))

    def without_line(self, line_number: int) -> CrontabSnapshot:
        if not 0 < line_number <= len(self.lines):
            raise IndexError(f"line {line_number} out of range 1..{len(self.lines)}")
        kept = self.lines[: line_number - 1] + self.lines[line_number:]
        return CrontabSnapshot(lines=kept)


class CrontabStore:
    """Read and replace the current user's crontab through the runner."""

    def __init__(self, runner: CommandRunner):
        self.runner = runner

    def read(self) -> CrontabSnapshot:
        """Return the current table; an unreadable or missing crontab is empty."""
        result = self.runner.run("crontab", ["-l"])
        if not result.ok:
            logger.debug("crontab -l exited %d: %s", result.exit_code, result.stderr.strip())
            return CrontabSnapshot()
        return CrontabSnapshot.from_text(result.stdout)

    def write(self, snapshot: CrontabSnapshot) -> ExecutionResult:
        """Replace the whole crontab with ``snapshot``."""
        result = self.runner.run("crontab", ["-"], input_text=snapshot.text())
        if not result.ok:
            logger.info("crontab write failed (%d): %s", result.exit_code, result.stderr.strip())
        return result

    def add(self, schedule: str, command: str) -> tuple[CronEntry, ExecutionResult]:
        """Append a task; returns it with the line number it was written at."""
        snapshot = self.read()
        entry = CronEntry(schedule=schedule, command=command, line_number=len(snapshot) + 1)
        return entry, self.write(snapshot.with_line(entry.render()))

    def remove(self, line_number: int, snapshot: CrontabSnapshot) -> ExecutionResult:
        """Rewrite ``snapshot`` without ``line_number``. See module note on staleness."""
        entry = snapshot.entry_at(line_number)
        if entry is not None:
            logger.info("Removing task at line %d: %s", line_number, entry.render())
        else:
            logger.info("Removing non-task line %d", line_number)
        return self.write(snapshot.without_line(line_number))
