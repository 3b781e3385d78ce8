"""External command execution.

The runner is the only place that spawns processes. It never raises on a
nonzero exit status: callers inspect ``ExecutionResult.exit_code`` and decide
how to phrase the outcome.

Child output is decoded with ``surrogateescape``: bytes that are not valid
UTF-8 survive a read-modify-write (crontab) unchanged, and
``formatting.printable`` makes them safe to show.
"""

from __future__ import annotations

import logging
import os
import shlex
import shutil
import subprocess
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from Sysmenu.config import Settings, get_settings
from Sysmenu.formatting import printable

logger = logging.getLogger(__name__)

EXIT_NOT_FOUND = 127
EXIT_NOT_EXECUTABLE = 126

LineWriter = Callable[[str], None]


@dataclass
class ExecutionResult:
    """Outcome of one delegated command."""

    exit_code: int
    stdout: str = ""
    stderr: str = ""
    command: tuple[str, ...] = ()

    @property
    def ok(self) -> bool:
        return self.exit_code == 0

    def lines(self) -> list[str]:
        return [line for line in self.stdout.splitlines() if line.strip()]


def _echo(line: str) -> None:
    print(printable(line), flush=True)


def _is_root() -> bool:
    geteuid = getattr(os, "geteuid", None)
    return bool(geteuid and geteuid() == 0)


class CommandRunner:
    """Run external programs with captured or streamed output.

    ``run`` buffers stdout/stderr for mutating actions. ``stream`` writes each
    stdout line to the interactive output as soon as it is read, for listing
    actions that show live information. ``interactive`` hands the terminal to
    the child (editors).
    """

    def __init__(
        self,
        settings: Settings | None = None,
        output: LineWriter | None = None,
        dry_run: bool | None = None,
    ):
        self.settings = settings or get_settings()
        self.output = output or _echo
        self.dry_run = self.settings.dry_run if dry_run is None else dry_run

    def build_argv(self, program: str, args: Sequence[str] = (), privileged: bool = False) -> list[str]:
        """Return the full argv, prefixed with the privilege command when needed."""
        argv = [program, *[str(a) for a in args]]
        prefix = self.settings.privilege_command
        if privileged and prefix and not _is_root():
            argv = [*shlex.split(prefix), *argv]
        return argv

    def is_available(self, program: str) -> bool:
        return shutil.which(program) is not None

    def _dry_result(self, argv: list[str]) -> ExecutionResult:
        rendered = shlex.join(argv)
        logger.info("dry-run: %s", rendered)
        self.output(f"[dry-run] {rendered}")
        return ExecutionResult(exit_code=0, command=tuple(argv))

    def _launch_failure(self, argv: list[str], exc: OSError) -> ExecutionResult:
        code = EXIT_NOT_FOUND if isinstance(exc, FileNotFoundError) else EXIT_NOT_EXECUTABLE
        logger.warning("Could not launch %s: %s", argv[0], exc)
        return ExecutionResult(exit_code=code, stderr=str(exc), command=tuple(argv))

    def run(
        self,
        program: str,
        args: Sequence[str] = (),
        *,
        privileged: bool = False,
        input_text: str | None = None,
    ) -> ExecutionResult:
        """Run to completion and capture stdout/stderr."""
        argv = self.build_argv(program, args, privileged)
        if self.dry_run:
            return self._dry_result(argv)

        logger.debug("run: %s", shlex.join(argv))
        try:
            proc = subprocess.run(
                argv,
                input=input_text,
                capture_output=True,
                text=True,
                errors="surrogateescape",
            )
        except OSError as exc:
            return self._launch_failure(argv, exc)

        logger.debug("exit %d: %s", proc.returncode, argv[0])
        return ExecutionResult(
            exit_code=proc.returncode,
            stdout=proc.stdout or "",
            stderr=proc.stderr or "",
            command=tuple(argv),
        )

    def stream(
        self,
        program: str,
        args: Sequence[str] = (),
        *,
        privileged: bool = False,
        max_lines: int | None = None,
        line_filter: Callable[[str], bool] | None = None,
    ) -> ExecutionResult:
        """Run and echo stdout line by line.

        Lines rejected by ``line_filter`` are dropped. Once ``max_lines`` lines
        have been shown the rest of the output is drained silently so the child
        never blocks on a full pipe. stderr goes straight to the terminal.
        """
        argv = self.build_argv(program, args, privileged)
        if self.dry_run:
            return self._dry_result(argv)

        logger.debug("stream: %s", shlex.join(argv))
        shown: list[str] = []
        try:
            proc = subprocess.Popen(
                argv,
                stdout=subprocess.PIPE,
                text=True,
                errors="surrogateescape",
                bufsize=1,
            )
        except OSError as exc:
            return self._launch_failure(argv, exc)

        with proc:
            assert proc.stdout is not None
            for raw in proc.stdout:
                line = raw.rstrip("\n")
                if line_filter is not None and not line_filter(line):
                    continue
                if max_lines is not None and len(shown) >= max_lines:
                    continue
                shown.append(line)
                self.output(line)
            exit_code = proc.wait()

        logger.debug("exit %d: %s (%d lines shown)", exit_code, argv[0], len(shown))
        return ExecutionResult(
            exit_code=exit_code,
            stdout="\n".join(shown),
            command=tuple(argv),
        )

    def interactive(self, program: str, args: Sequence[str] = ()) -> ExecutionResult:
        """Run attached to the current terminal (stdin/stdout/stderr inherited)."""
        argv = self.build_argv(program, args)
        if self.dry_run:
            return self._dry_result(argv)

        logger.debug("interactive: %s", shlex.join(argv))
        try:
            proc = subprocess.run(argv)
        except OSError as exc:
            return self._launch_failure(argv, exc)
        return ExecutionResult(exit_code=proc.returncode, command=tuple(argv))
