"""Validators for user-supplied menu fields.

Each validator takes the raw line the user typed and returns a
``ValidationResult``: either the accepted, typed value or a human-readable
rejection reason. Validators never run delegated commands. The few that have
to look at the OS (PID liveness, timezone database, path policy) do so through
small, injectable probes.
"""

from __future__ import annotations

import logging
import os
import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from Sysmenu.errors import ValidationError

logger = logging.getLogger(__name__)

_UNSIGNED_RE = re.compile(r"^[0-9]+$")
_SIGNED_RE = re.compile(r"^-?[0-9]+$")
_CRON_FIELD_RE = re.compile(r"^[0-9*]+$")

NICE_MIN, NICE_MAX = -20, 19
PORT_MIN, PORT_MAX = 0, 65535
CRON_FIELD_COUNT = 5

INSTALL_METHODS = {"1": "apt", "2": "snap", "3": "flatpak"}


@dataclass(frozen=True)
class ValidationResult:
    """Accepted value or rejection reason for one field."""

    ok: bool
    value: Any = None
    reason: str = ""

    @classmethod
    def accept(cls, value: Any) -> ValidationResult:
        return cls(ok=True, value=value)

    @classmethod
    def reject(cls, reason: str) -> ValidationResult:
        return cls(ok=False, reason=reason)

    def unwrap(self) -> Any:
        """Return the value, or raise ``ValidationError`` with the reason."""
        if not self.ok:
            raise ValidationError(self.reason)
        return self.value


def pid_exists(pid: int) -> bool:
    """Zero-signal liveness probe, equivalent to ``kill -0 <pid>``.

    A probe the OS refuses (process owned by someone else) counts as a
    failure, the same as the shell builtin.
    """
    try:
        os.kill(pid, 0)
    except (OverflowError, OSError):
        return False
    return True


def validate_pid(raw: str, probe: Callable[[int], bool] = pid_exists) -> ValidationResult:
    text = (raw or "").strip()
    if not _UNSIGNED_RE.match(text):
        return ValidationResult.reject("Invalid PID.")
    pid = int(text)
    if not probe(pid):
        return ValidationResult.reject("Invalid PID.")
    return ValidationResult.accept(pid)


def validate_nice(raw: str) -> ValidationResult:
    text = (raw or "").strip()
    if not _SIGNED_RE.match(text):
        return ValidationResult.reject("Invalid nice value.")
    value = int(text)
    if not NICE_MIN <= value <= NICE_MAX:
        return ValidationResult.reject(f"Invalid nice value (must be {NICE_MIN} to {NICE_MAX}).")
    return ValidationResult.accept(value)


def validate_port(raw: str) -> ValidationResult:
    text = (raw or "").strip()
    if not _UNSIGNED_RE.match(text):
        return ValidationResult.reject("Invalid port number.")
    value = int(text)
    if not PORT_MIN <= value <= PORT_MAX:
        return ValidationResult.reject("Invalid port number.")
    return ValidationResult.accept(value)


def validate_cron_schedule(raw: str) -> ValidationResult:
    """Five fields of digits and ``*``; field ranges are not checked."""
    fields = (raw or "").split()
    if len(fields) != CRON_FIELD_COUNT or not all(_CRON_FIELD_RE.match(f) for f in fields):
        return ValidationResult.reject(
            "Invalid cron format. Use 'minute hour day_of_month month day_of_week'."
        )
    return ValidationResult.accept(" ".join(fields))


def validate_non_empty(raw: str, label: str = "Value") -> ValidationResult:
    text = (raw or "").strip()
    if not text:
        return ValidationResult.reject(f"{label} cannot be empty.")
    return ValidationResult.accept(text)


def validate_timezone(raw: str, zoneinfo_dir: str | os.PathLike[str]) -> ValidationResult:
    """Accept names that exist as files in the zoneinfo database."""
    text = (raw or "").strip()
    if not text or text.startswith("/") or ".." in Path(text).parts:
        return ValidationResult.reject("Invalid timezone.")
    if not (Path(zoneinfo_dir) / text).is_file():
        return ValidationResult.reject("Invalid timezone.")
    return ValidationResult.accept(text)


def resolve_path(raw: str, cwd: str | os.PathLike[str] | None = None) -> ValidationResult:
    """Resolve a user path against the working directory.

    - ``file.txt``       -> ``<cwd>/file.txt``
    - ``sub/file.txt``   -> ``<cwd>/sub/file.txt``, creating ``<cwd>/sub``
    - ``/abs/file.txt``  -> unchanged
    """
    text = (raw or "").strip()
    if not text:
        return ValidationResult.reject("Invalid path.")

    base = os.fspath(cwd) if cwd is not None else os.getcwd()
    if "/" not in text:
        return ValidationResult.accept(os.path.join(base, text))
    if not text.startswith("/"):
        parent = os.path.join(base, os.path.dirname(text))
        try:
            os.makedirs(parent, exist_ok=True)
        except OSError as exc:
            logger.info("Could not create %s: %s", parent, exc)
            return ValidationResult.reject(f"Cannot create directory '{parent}'.")
        return ValidationResult.accept(os.path.join(base, text))
    return ValidationResult.accept(text)


def validate_line_selector(raw: str, entry_count: int) -> ValidationResult:
    """1-based line number within ``entry_count``; ``0`` is the cancel sentinel."""
    text = (raw or "").strip()
    if text == "0":
        return ValidationResult.accept(0)
    if not _UNSIGNED_RE.match(text):
        return ValidationResult.reject("Invalid input. Enter a number.")
    value = int(text)
    if not 0 < value <= entry_count:
        return ValidationResult.reject("Invalid line number.")
    return ValidationResult.accept(value)


def is_yes(raw: str) -> bool:
    return (raw or "").strip() in {"y", "Y"}


def validate_yes_no(raw: str) -> ValidationResult:
    text = (raw or "").strip()
    if text in {"y", "Y"}:
        return ValidationResult.accept(True)
    if text in {"n", "N"}:
        return ValidationResult.accept(False)
    return ValidationResult.reject("Invalid choice. No changes made.")


def validate_on_off(raw: str) -> ValidationResult:
    text = (raw or "").strip()
    if text == "on":
        return ValidationResult.accept(True)
    if text == "off":
        return ValidationResult.accept(False)
    return ValidationResult.reject("Invalid choice. Use 'on' or 'off'.")


def validate_install_method(raw: str) -> ValidationResult:
    method = INSTALL_METHODS.get((raw or "").strip())
    if method is None:
        return ValidationResult.reject("Invalid installation method. Please choose 1, 2, or 3.")
    return ValidationResult.accept(method)


class FieldValidator:
    """Dispatch a prompt's validator kind to the matching rule.

    Holds the OS-facing inputs (working directory, zoneinfo location, PID
    probe) so the rules themselves stay free of configuration.
    """

    KINDS = (
        "text",
        "non_empty",
        "pid",
        "nice",
        "port",
        "cron_schedule",
        "timezone",
        "path",
        "yes_no",
        "confirm",
        "on_off",
        "install_method",
        "line_selector",
    )

    def __init__(
        self,
        zoneinfo_dir: str = "/usr/share/zoneinfo",
        pid_probe: Callable[[int], bool] = pid_exists,
        cwd: Callable[[], str] = os.getcwd,
    ):
        self.zoneinfo_dir = zoneinfo_dir
        self.pid_probe = pid_probe
        self.cwd = cwd

    def check(
        self,
        kind: str,
        raw: str,
        label: str = "Value",
        context: Mapping[str, Any] | None = None,
    ) -> ValidationResult:
        """Validate ``raw`` as ``kind``.

        ``context`` holds values collected earlier in the same action;
        ``line_selector`` reads its bound from ``context["entry_count"]``.
        """
        context = context or {}
        if kind == "text":
            return ValidationResult.accept((raw or "").strip())
        if kind == "non_empty":
            return validate_non_empty(raw, label)
        if kind == "pid":
            return validate_pid(raw, self.pid_probe)
        if kind == "nice":
            return validate_nice(raw)
        if kind == "port":
            return validate_port(raw)
        if kind == "cron_schedule":
            return validate_cron_schedule(raw)
        if kind == "timezone":
            return validate_timezone(raw, self.zoneinfo_dir)
        if kind == "path":
            return resolve_path(raw, self.cwd())
        if kind == "yes_no":
            return validate_yes_no(raw)
        if kind == "confirm":
            return ValidationResult.accept(is_yes(raw))
        if kind == "on_off":
            return validate_on_off(raw)
        if kind == "install_method":
            return validate_install_method(raw)
        if kind == "line_selector":
            return validate_line_selector(raw, int(context.get("entry_count", 0)))
        raise ValueError(f"Unknown validator kind: {kind}")
