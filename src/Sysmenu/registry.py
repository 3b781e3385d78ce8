"""Menu schema and the selector -> action lookup table."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Literal

from Sysmenu.errors import InvalidChoiceError, InvalidSubChoiceError

ActionMode = Literal["stream", "mutate"]

# "<group>.<item>", one digit each.
_SELECTOR_RE = re.compile(r"^([0-9])\.([0-9])$")


@dataclass(frozen=True)
class PromptField:
    """One question asked before an action runs.

    ``before`` names a prompt hook in ``Sysmenu.actions`` run just before the
    question. A hook may print context or refuse the action by raising
    ValidationError; a mapping it returns is merged into the collected values.
    """

    key: str
    text: str
    kind: str = "text"
    field_name: str = "Value"
    hint: tuple[str, ...] = ()
    before: str = ""


@dataclass(frozen=True)
class ActionDescriptor:
    """Static description of one menu action.

    Plain actions are fully described by ``command`` (a template whose
    ``{key}`` placeholders are filled from the collected prompt values and the
    session context) plus the messages. Actions that need more than one
    delegated call name a ``handler`` in ``Sysmenu.actions`` instead.
    """

    key: str
    title: str
    prompts: tuple[PromptField, ...] = ()
    command: tuple[str, ...] = ()
    requires_privilege: bool = False
    mode: ActionMode = "mutate"
    header: str = ""
    success: str = ""
    failure: str = ""
    handler: str = ""


@dataclass(frozen=True)
class MenuGroup:
    title: str
    actions: tuple[ActionDescriptor, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class Selector:
    group: int
    item: int

    def __str__(self) -> str:
        return f"{self.group}.{self.item}"


def parse_selector(raw: str) -> Selector | None:
    m = _SELECTOR_RE.match((raw or "").strip())
    if not m:
        return None
    return Selector(int(m.group(1)), int(m.group(2)))


class ActionRegistry:
    """Read-only table of numbered menu groups.

    Groups are numbered from 1 in the order given; the exit selector is the
    bare digit following the last group.
    """

    def __init__(self, title: str, groups: tuple[MenuGroup, ...]):
        if not groups:
            raise ValueError("ActionRegistry needs at least one group")
        if len(groups) > 8:
            raise ValueError("At most 8 groups fit single-digit selectors with an exit digit")
        self.title = title
        self._groups = groups
        self._by_selector: dict[Selector, ActionDescriptor] = {}
        for g_index, group in enumerate(groups, start=1):
            if len(group.actions) > 9:
                raise ValueError(f"Group '{group.title}' has more than 9 actions")
            for a_index, action in enumerate(group.actions, start=1):
                self._by_selector[Selector(g_index, a_index)] = action

    @property
    def groups(self) -> tuple[MenuGroup, ...]:
        return self._groups

    @property
    def exit_selector(self) -> str:
        return str(len(self._groups) + 1)

    def is_exit(self, raw: str) -> bool:
        return (raw or "").strip() == self.exit_selector

    def examples(self) -> str:
        """Selector examples for prompts and diagnostics, e.g. ``1.1, 2.1, 3.1, 4``."""
        firsts = [f"{i}.1" for i in range(1, len(self._groups) + 1)]
        return ", ".join([*firsts, self.exit_selector])

    def invalid_choice_message(self) -> str:
        return f"Invalid choice. Please enter a valid option (e.g., {self.examples()})."

    def resolve(self, raw: str) -> ActionDescriptor:
        """Return the descriptor for ``raw`` or raise a SelectorError."""
        selector = parse_selector(raw)
        if selector is None or not 1 <= selector.group <= len(self._groups):
            raise InvalidChoiceError(self.invalid_choice_message())
        action = self._by_selector.get(selector)
        if action is None:
            group = self._groups[selector.group - 1]
            raise InvalidSubChoiceError(
                f"Invalid sub-choice for {group.title}. Please try again.",
                group_title=group.title,
            )
        return action

    def all(self) -> list[tuple[Selector, ActionDescriptor]]:
        return sorted(self._by_selector.items(), key=lambda kv: (kv[0].group, kv[0].item))
