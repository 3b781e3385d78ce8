"""Exception types raised inside the dispatch core.

Delegated command failures are never exceptions; they travel as
``ExecutionResult`` values with a nonzero exit code.
"""

from __future__ import annotations


class SysmenuError(Exception):
    """Base class for all Sysmenu errors."""


class SelectorError(SysmenuError):
    """A menu selector could not be resolved to an action."""


class InvalidChoiceError(SelectorError):
    """Malformed selector or unknown top-level group."""


class InvalidSubChoiceError(SelectorError):
    """Known group, unknown item within it."""

    def __init__(self, message: str, group_title: str = ""):
        super().__init__(message)
        self.group_title = group_title


class ValidationError(SysmenuError):
    """User input rejected by a validator; ``reason`` is shown verbatim."""

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason
