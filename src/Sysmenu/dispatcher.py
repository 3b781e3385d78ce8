"""Menu dispatcher: selector -> inputs -> delegated command -> report.

One call to ``dispatch`` walks the state machine once::

    AWAITING_SELECTOR -> VALIDATING_INPUTS -> EXECUTING -> REPORTING_RESULT
            |                                                   |
            +--> EXITING (exit selector)                        +--> AWAITING_SELECTOR

An unresolved selector jumps straight to REPORTING_RESULT. A rejected input
ends the action before anything is executed. Every path except the exit
selector ends back in AWAITING_SELECTOR.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any

from rich.console import Console

from Sysmenu.actions import get_handler, get_prompt_hook
from Sysmenu.config import Settings, get_settings
from Sysmenu.crontab import CrontabStore
from Sysmenu.errors import SelectorError, ValidationError
from Sysmenu.formatting import printable
from Sysmenu.registry import ActionDescriptor, ActionRegistry, PromptField
from Sysmenu.runner import CommandRunner, ExecutionResult
from Sysmenu.validation import FieldValidator

logger = logging.getLogger(__name__)

ReadLine = Callable[[str], str]


class DispatchState(str, Enum):
    AWAITING_SELECTOR = "awaiting_selector"
    VALIDATING_INPUTS = "validating_inputs"
    EXECUTING = "executing"
    REPORTING_RESULT = "reporting_result"
    EXITING = "exiting"


@dataclass
class DispatchOutcome:
    """What one dispatch did. ``ok`` is None when nothing was executed."""

    state: DispatchState
    selector: str
    action_key: str = ""
    ok: bool | None = None
    message: str = ""


class MenuDispatcher:
    """Render the menu, resolve a selector and run the chosen action."""

    def __init__(
        self,
        registry: ActionRegistry,
        runner: CommandRunner,
        validator: FieldValidator | None = None,
        settings: Settings | None = None,
        console: Console | None = None,
        read_line: ReadLine | None = None,
        crontab: CrontabStore | None = None,
    ):
        self.registry = registry
        self.runner = runner
        self.settings = settings or get_settings()
        self.validator = validator or FieldValidator(zoneinfo_dir=self.settings.zoneinfo_dir)
        self.console = console or Console()
        self._read_line = read_line
        self.crontab = crontab or CrontabStore(runner)
        self.state = DispatchState.AWAITING_SELECTOR
        self._last_message = ""

    # ------------------------------------------------------------------
    # Output / input
    # ------------------------------------------------------------------

    def say(self, text: str, style: str | None = None) -> None:
        self._last_message = text
        self.console.print(
            printable(text), style=style, markup=False, highlight=False, soft_wrap=True
        )

    def success(self, text: str) -> None:
        self.say(text, style="green")

    def error(self, text: str) -> None:
        self.say(text, style="red")

    def emit_line(self, line: str) -> None:
        """Line writer handed to the runner for streamed output."""
        self.console.print(printable(line), markup=False, highlight=False, soft_wrap=True)

    def ask(self, text: str, hint: Sequence[str] = ()) -> str:
        """Print ``hint`` lines, then read one answer. EOFError propagates."""
        for line in hint:
            self.say(line)
        if self._read_line is not None:
            return self._read_line(text)
        return self.console.input(text, markup=False)

    def render_menu(self) -> None:
        self.console.print(f"*** {self.registry.title} - Menu ***", style="bold", markup=False)
        for g_index, group in enumerate(self.registry.groups, start=1):
            self.console.print(f"{g_index}. {group.title}", style="bold cyan", markup=False)
            for a_index, action in enumerate(group.actions, start=1):
                self.console.print(f"    {a_index}. {action.title}", markup=False, highlight=False)
        self.console.print(f"{self.registry.exit_selector}. Exit", style="bold", markup=False)

    def read_selector(self) -> str:
        return self.ask(f"Please enter your choice (e.g., {self.registry.examples()}): ")

    # ------------------------------------------------------------------
    # Templates
    # ------------------------------------------------------------------

    def context(self) -> dict[str, Any]:
        """Session values available to every command template."""
        return {
            "connectivity_host": self.settings.connectivity_host,
            "ping_count": self.settings.ping_count,
            "process_list_limit": self.settings.process_list_limit,
        }

    def fill(self, template: str, values: Mapping[str, Any]) -> str:
        return template.format(**{**self.context(), **values})

    def fill_all(self, parts: Sequence[str], values: Mapping[str, Any]) -> list[str]:
        return [self.fill(part, values) for part in parts]

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def collect(self, prompts: Sequence[PromptField]) -> dict[str, Any]:
        """Ask each prompt in order; the first rejected answer raises ValidationError.

        A prompt's ``before`` hook runs first and may add values of its own.
        """
        values: dict[str, Any] = {}
        for prompt in prompts:
            if prompt.before:
                values.update(get_prompt_hook(prompt.before)(self, values) or {})
            raw = self.ask(prompt.text, prompt.hint)
            result = self.validator.check(prompt.kind, raw, prompt.field_name, values)
            values[prompt.key] = result.unwrap()
        return values

    def check(self, kind: str, raw: str, field_name: str = "Value") -> Any:
        """Validate a value read by a handler; raises ValidationError on rejection."""
        return self.validator.check(kind, raw, field_name).unwrap()

    def dispatch(self, raw: str) -> DispatchOutcome:
        selector = (raw or "").strip()
        self.state = DispatchState.AWAITING_SELECTOR
        self._last_message = ""

        if self.registry.is_exit(selector):
            self.state = DispatchState.EXITING
            self.say("Exiting program.")
            return DispatchOutcome(self.state, selector, message=self._last_message)

        try:
            action = self.registry.resolve(selector)
        except SelectorError as exc:
            self.state = DispatchState.REPORTING_RESULT
            logger.info("Unresolved selector %r: %s", selector, exc)
            self.error(str(exc))
            return self._finish(selector)

        ok: bool | None = None
        try:
            self.state = DispatchState.VALIDATING_INPUTS
            values = self.collect(action.prompts)
            self.state = DispatchState.EXECUTING
            ok = self.execute(action, values)
        except ValidationError as exc:
            logger.info("%s rejected input: %s", action.key, exc.reason)
            self.error(f"Error: {exc.reason}")
            ok = None
        self.state = DispatchState.REPORTING_RESULT
        return self._finish(selector, action.key, ok)

    def _finish(self, selector: str, action_key: str = "", ok: bool | None = None) -> DispatchOutcome:
        message = self._last_message
        self.state = DispatchState.AWAITING_SELECTOR
        return DispatchOutcome(self.state, selector, action_key, ok, message)

    def execute(self, action: ActionDescriptor, values: Mapping[str, Any]) -> bool | None:
        """Run ``action`` with validated ``values``; returns True/False, None if nothing ran."""
        if action.handler:
            return get_handler(action.handler)(self, action, values)
        if not action.command:
            raise ValueError(f"Action {action.key} has neither a handler nor a command")

        program, *args = self.fill_all(action.command, values)
        if action.mode == "stream":
            if action.header:
                self.say(self.fill(action.header, values))
            result = self.runner.stream(program, args, privileged=action.requires_privilege)
            if not result.ok and action.failure:
                self.report_failure(action, result, values)
            return result.ok

        result = self.runner.run(program, args, privileged=action.requires_privilege)
        if result.ok:
            self.success(self.fill(action.success, values) if action.success else f"{action.title} succeeded.")
        else:
            self.report_failure(action, result, values)
        return result.ok

    def report_failure(
        self, action: ActionDescriptor, result: ExecutionResult, values: Mapping[str, Any]
    ) -> None:
        logger.info("%s failed with exit code %d", action.key, result.exit_code)
        message = self.fill(action.failure, values) if action.failure else f"Error: {action.title} failed."
        self.error(message)
