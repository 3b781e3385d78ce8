"""Shared fixtures: a recording runner and a scripted dispatcher."""

from __future__ import annotations

import io
from collections.abc import Callable, Sequence

import pytest
from rich.console import Console

from Sysmenu.catalog import build_registry
from Sysmenu.config import Settings, get_settings
from Sysmenu.dispatcher import MenuDispatcher
from Sysmenu.runner import CommandRunner, ExecutionResult
from Sysmenu.validation import FieldValidator


class RecordingRunner(CommandRunner):
    """CommandRunner that records calls and replays scripted results.

    ``script`` maps a program name to an ExecutionResult, or to a list of
    results consumed in order. Unscripted programs succeed with no output.
    """

    def __init__(self, settings: Settings, available: set[str] | None = None):
        super().__init__(settings=settings, output=self._collect)
        self.calls: list[dict] = []
        self.script: dict[str, ExecutionResult | list[ExecutionResult]] = {}
        self.streamed: list[str] = []
        self.available = available if available is not None else {"flatpak"}

    def _collect(self, line: str) -> None:
        self.streamed.append(line)

    def _next(self, program: str) -> ExecutionResult:
        scripted = self.script.get(program)
        if isinstance(scripted, list):
            return scripted.pop(0) if scripted else ExecutionResult(exit_code=0)
        if scripted is not None:
            return scripted
        return ExecutionResult(exit_code=0)

    def _record(self, mode: str, program: str, args: Sequence[str], **extra) -> None:
        self.calls.append({"mode": mode, "program": program, "args": [str(a) for a in args], **extra})

    def run(self, program, args=(), *, privileged=False, input_text=None):
        self._record("run", program, args, privileged=privileged, input_text=input_text)
        return self._next(program)

    def stream(self, program, args=(), *, privileged=False, max_lines=None, line_filter=None):
        self._record("stream", program, args, privileged=privileged)
        result = self._next(program)
        shown: list[str] = []
        for line in result.stdout.splitlines():
            if line_filter is not None and not line_filter(line):
                continue
            if max_lines is not None and len(shown) >= max_lines:
                continue
            shown.append(line)
            self.output(line)
        return ExecutionResult(result.exit_code, "\n".join(shown), result.stderr)

    def interactive(self, program, args=()):
        self._record("interactive", program, args)
        return self._next(program)

    def is_available(self, program: str) -> bool:
        return program in self.available

    def programs(self) -> list[str]:
        return [call["program"] for call in self.calls]


class ScriptedInput:
    """read_line replacement answering from a fixed list."""

    def __init__(self, answers: Sequence[str] = ()):
        self.answers = list(answers)
        self.prompts: list[str] = []

    def __call__(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if not self.answers:
            raise EOFError
        return self.answers.pop(0)


@pytest.fixture(autouse=True)
def _fresh_settings():
    """Each test reads the environment afresh."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def settings(tmp_path) -> Settings:
    zoneinfo = tmp_path / "zoneinfo"
    (zoneinfo / "Asia").mkdir(parents=True)
    (zoneinfo / "Asia" / "Ho_Chi_Minh").write_text("TZif")
    (zoneinfo / "UTC").write_text("TZif")
    return Settings(zoneinfo_dir=str(zoneinfo), privilege_command="sudo")


@pytest.fixture
def runner(settings: Settings) -> RecordingRunner:
    return RecordingRunner(settings)


@pytest.fixture
def make_dispatcher(
    settings: Settings, runner: RecordingRunner, tmp_path
) -> Callable[..., tuple[MenuDispatcher, io.StringIO]]:
    """Build a dispatcher over the recording runner with scripted answers.

    Live PIDs are whatever ``alive`` contains; the working directory is
    ``tmp_path``.
    """

    def _make(
        answers: Sequence[str] = (),
        profile: str = "all",
        alive: set[int] | None = None,
    ) -> tuple[MenuDispatcher, io.StringIO]:
        buffer = io.StringIO()
        console = Console(file=buffer, width=200, color_system=None, force_terminal=False)
        live = alive if alive is not None else {1234}
        validator = FieldValidator(
            zoneinfo_dir=settings.zoneinfo_dir,
            pid_probe=lambda pid: pid in live,
            cwd=lambda: str(tmp_path),
        )
        dispatcher = MenuDispatcher(
            registry=build_registry(profile),
            runner=runner,
            validator=validator,
            settings=settings,
            console=console,
            read_line=ScriptedInput(answers),
        )
        runner.output = dispatcher.emit_line
        return dispatcher, buffer

    return _make
