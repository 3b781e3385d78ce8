"""Handlers for menu actions that need more than one delegated command.

Each handler receives the dispatcher, the action descriptor and the already
validated prompt values, and returns True/False for success/failure of the
delegated work, or None when nothing was executed (cancelled, nothing to do).

Prompt hooks run inside input collection, before the prompt that names them.
They show what the user needs to answer the question and may refuse the
action with a ValidationError before anything is executed.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING, Any

from Sysmenu.errors import ValidationError
from Sysmenu.formatting import render_bounded
from Sysmenu.registry import ActionDescriptor

if TYPE_CHECKING:
    from Sysmenu.dispatcher import MenuDispatcher

logger = logging.getLogger(__name__)

Handler = Callable[["MenuDispatcher", ActionDescriptor, Mapping[str, Any]], "bool | None"]
PromptHook = Callable[["MenuDispatcher", Mapping[str, Any]], "Mapping[str, Any] | None"]

_HANDLERS: dict[str, Handler] = {}
_PROMPT_HOOKS: dict[str, PromptHook] = {}


def handler(name: str) -> Callable[[Handler], Handler]:
    def register(fn: Handler) -> Handler:
        _HANDLERS[name] = fn
        return fn

    return register


def prompt_hook(name: str) -> Callable[[PromptHook], PromptHook]:
    def register(fn: PromptHook) -> PromptHook:
        _PROMPT_HOOKS[name] = fn
        return fn

    return register


def get_handler(name: str) -> Handler:
    try:
        return _HANDLERS[name]
    except KeyError:
        raise ValueError(f"Unknown action handler: {name}") from None


def get_prompt_hook(name: str) -> PromptHook:
    try:
        return _PROMPT_HOOKS[name]
    except KeyError:
        raise ValueError(f"Unknown prompt hook: {name}") from None


def handler_names() -> set[str]:
    return set(_HANDLERS)


def prompt_hook_names() -> set[str]:
    return set(_PROMPT_HOOKS)


def _writable_dir(path: str) -> bool:
    return os.access(os.path.dirname(path) or ".", os.W_OK)


# ----------------------------------------------------------------------
# Processes and sockets
# ----------------------------------------------------------------------


@handler("list_processes")
def list_processes(d: MenuDispatcher, action: ActionDescriptor, values: Mapping[str, Any]) -> bool:
    limit = d.settings.process_list_limit
    d.say(f"Listing processes (top {limit}):")
    # +1 keeps the ps header row.
    result = d.runner.stream("ps", ["aux", "--sort=-%cpu"], max_lines=limit + 1)
    if not result.ok:
        d.error("Error listing processes.")
    return result.ok


@handler("find_processes")
def find_processes(d: MenuDispatcher, action: ActionDescriptor, values: Mapping[str, Any]) -> bool:
    name = values["name"]
    needle = name.casefold()
    d.say(f"Processes matching '{name}':")
    result = d.runner.stream(
        "ps",
        ["aux"],
        line_filter=lambda line: needle in line.casefold() and "grep" not in line,
    )
    if not result.ok:
        d.error("Error listing processes.")
        return False
    if not result.lines():
        d.say(f"No processes found matching '{name}'.")
    return True


@handler("kill_socket_process")
def kill_socket_process(
    d: MenuDispatcher, action: ActionDescriptor, values: Mapping[str, Any]
) -> bool | None:
    port = values["port"]
    privileged = action.requires_privilege
    lookup = d.runner.run("lsof", ["-t", "-i", f":{port}"], privileged=privileged)
    pids = sorted({line.strip() for line in lookup.lines() if line.strip().isdigit()}, key=int)
    if not pids:
        d.say(f"No process using port {port}.")
        return None

    result = d.runner.run("kill", ["-9", *pids], privileged=privileged)
    if result.ok:
        d.success(f"Process using port {port} (PID {' '.join(pids)}) killed successfully.")
    else:
        d.error(f"Error killing process on port {port}.")
    return result.ok


# ----------------------------------------------------------------------
# Network
# ----------------------------------------------------------------------


@handler("toggle_network")
def toggle_network(d: MenuDispatcher, action: ActionDescriptor, values: Mapping[str, Any]) -> bool:
    enable = values["state"]
    result = d.runner.run(
        "nmcli", ["networking", "on" if enable else "off"], privileged=action.requires_privilege
    )
    if result.ok:
        d.success("Network enabled." if enable else "Network disabled.")
    else:
        d.error("Error enabling network." if enable else "Error disabling network.")
    return result.ok


# ----------------------------------------------------------------------
# Files
# ----------------------------------------------------------------------


@prompt_hook("require_writable_parent")
def require_writable_parent(d: MenuDispatcher, values: Mapping[str, Any]) -> None:
    path = values["path"]
    if not _writable_dir(path):
        parent = os.path.dirname(path) or "."
        raise ValidationError(f"No write permission in directory '{parent}'.")


@handler("create_file")
def create_file(d: MenuDispatcher, action: ActionDescriptor, values: Mapping[str, Any]) -> bool:
    path = values["path"]
    if values["content"]:
        result = d.runner.interactive(d.settings.editor, [path])
    else:
        result = d.runner.run("touch", [path])

    if result.ok:
        d.success(f"File '{path}' created successfully.")
    else:
        d.error(f"Error creating file '{path}'.")
    return result.ok


@handler("delete_file")
def delete_file(
    d: MenuDispatcher, action: ActionDescriptor, values: Mapping[str, Any]
) -> bool | None:
    path = values["path"]
    if not os.path.lexists(path):
        d.say(f"File '{path}' does not exist.")
        return None
    result = d.runner.run("rm", ["-f", path])
    if result.ok:
        d.success(f"File '{path}' deleted successfully.")
    else:
        d.error(f"Error deleting file '{path}'.")
    return result.ok


@handler("move_file")
def move_file(d: MenuDispatcher, action: ActionDescriptor, values: Mapping[str, Any]) -> bool:
    source = values["source"]
    destination = values["destination"]
    if destination.endswith("/"):
        # Directory target keeps the source file name.
        destination = destination + os.path.basename(source)
    target = d.check("path", destination)

    parent = os.path.dirname(target) or "."
    if not _writable_dir(target):
        d.error(f"Error: No write permission in destination directory '{parent}'.")
        return False

    result = d.runner.run("mv", ["-f", source, target])
    if result.ok:
        d.success(f"File '{source}' moved to '{target}' successfully.")
    else:
        d.error(f"Error moving file '{source}'.")
    return result.ok


@handler("file_info")
def file_info(d: MenuDispatcher, action: ActionDescriptor, values: Mapping[str, Any]) -> bool | None:
    path = values["path"]
    if not os.path.lexists(path):
        d.say(f"File '{path}' does not exist.")
        return None
    d.say(f"Information for file '{path}':")
    return d.runner.stream("stat", [path]).ok


# ----------------------------------------------------------------------
# Scheduled tasks
# ----------------------------------------------------------------------


@prompt_hook("show_crontab")
def show_crontab(d: MenuDispatcher, values: Mapping[str, Any]) -> dict[str, Any]:
    """List the crontab with line numbers; the snapshot is what a delete rewrites."""
    d.say("Current scheduled tasks:")
    snapshot = d.crontab.read()
    if snapshot.is_empty:
        d.say("No tasks scheduled.")
    else:
        width = len(str(len(snapshot)))
        for number, line in enumerate(snapshot.lines, start=1):
            d.emit_line(f"{number:>{width}}  {line}")
    return {"snapshot": snapshot, "entry_count": len(snapshot)}


@handler("create_task")
def create_task(d: MenuDispatcher, action: ActionDescriptor, values: Mapping[str, Any]) -> bool:
    entry, result = d.crontab.add(values["schedule"], values["command"])
    if result.ok:
        d.success(f"Task scheduled successfully: '{entry.render()}'")
    else:
        d.error("Error scheduling task.")
    return result.ok


@handler("list_tasks")
def list_tasks(d: MenuDispatcher, action: ActionDescriptor, values: Mapping[str, Any]) -> bool:
    show_crontab(d, values)
    return True


@handler("delete_task")
def delete_task(
    d: MenuDispatcher, action: ActionDescriptor, values: Mapping[str, Any]
) -> bool | None:
    line_number = values["line"]
    if line_number == 0:
        d.say("Cancelled.")
        return None

    # Rewrites from the listing shown by show_crontab; changes made since then are lost.
    result = d.crontab.remove(line_number, values["snapshot"])
    if result.ok:
        d.success("Task deleted successfully.")
    else:
        d.error("Error deleting task.")
    return result.ok


# ----------------------------------------------------------------------
# System time
# ----------------------------------------------------------------------


def _timezone_sample(zoneinfo_dir: str, size: int) -> list[str]:
    try:
        return sorted(os.listdir(zoneinfo_dir))[:size]
    except OSError as exc:
        logger.info("Cannot list %s: %s", zoneinfo_dir, exc)
        return []


@prompt_hook("show_timezones")
def show_timezones(d: MenuDispatcher, values: Mapping[str, Any]) -> None:
    sample = _timezone_sample(d.settings.zoneinfo_dir, d.settings.timezone_sample_size)
    d.say(render_bounded(sample, prefix="Available timezones (examples): "))
    d.say("For more, use format like 'Asia/Ho_Chi_Minh' or 'America/New_York'.")


@handler("set_timezone")
def set_timezone(d: MenuDispatcher, action: ActionDescriptor, values: Mapping[str, Any]) -> bool:
    timezone = values["timezone"]
    result = d.runner.run(
        "timedatectl", ["set-timezone", timezone], privileged=action.requires_privilege
    )
    if result.ok:
        d.success(f"Timezone set to '{timezone}' successfully.")
    else:
        d.error("Error setting timezone.")
    return result.ok


@prompt_hook("show_ntp_status")
def show_ntp_status(d: MenuDispatcher, values: Mapping[str, Any]) -> None:
    d.say("Current NTP status:")
    d.runner.stream("timedatectl", ["show", "--property=NTPSynchronized", "--value"])


@handler("toggle_ntp")
def toggle_ntp(d: MenuDispatcher, action: ActionDescriptor, values: Mapping[str, Any]) -> bool:
    enable = values["enable"]
    result = d.runner.run(
        "timedatectl",
        ["set-ntp", "true" if enable else "false"],
        privileged=action.requires_privilege,
    )
    if result.ok:
        d.success("NTP synchronization enabled." if enable else "NTP synchronization disabled.")
    else:
        d.error("Error enabling NTP." if enable else "Error disabling NTP.")
    return result.ok


# ----------------------------------------------------------------------
# Packages
# ----------------------------------------------------------------------


def _install_apt(d: MenuDispatcher, package: str, privileged: bool) -> bool:
    d.runner.run("apt", ["update"], privileged=privileged)
    result = d.runner.run("apt", ["install", package, "-y"], privileged=privileged)
    if result.ok:
        d.success(f"Package '{package}' installed or updated successfully via apt.")
    else:
        d.error(f"Error installing or updating package '{package}' via apt.")
    return result.ok


def _install_snap(d: MenuDispatcher, package: str, privileged: bool) -> bool:
    result = d.runner.run("snap", ["install", package], privileged=privileged)
    if result.ok:
        d.success(f"Package '{package}' installed successfully via snap.")
    else:
        d.error(f"Error installing package '{package}' via snap.")
    return result.ok


def _ensure_flatpak(d: MenuDispatcher, privileged: bool) -> bool:
    if d.runner.is_available("flatpak"):
        return True
    d.say("Flatpak is not installed. Installing flatpak...")
    d.runner.run("apt", ["update"], privileged=privileged)
    if not d.runner.run("apt", ["install", "flatpak", "-y"], privileged=privileged).ok:
        d.error("Error installing flatpak.")
        return False
    d.runner.run(
        "flatpak",
        ["remote-add", "--if-not-exists", "flathub", d.settings.flathub_url],
        privileged=privileged,
    )
    return True


def _install_flatpak(d: MenuDispatcher, package: str, privileged: bool) -> bool:
    if not _ensure_flatpak(d, privileged):
        return False
    # Per-user install from the remote; only the bootstrap needs privilege.
    result = d.runner.run("flatpak", ["install", "flathub", package, "-y"])
    if result.ok:
        d.success(f"Package '{package}' installed successfully via flatpak.")
    else:
        d.error(f"Error installing package '{package}' via flatpak.")
    return result.ok


_INSTALLERS: dict[str, Callable[[MenuDispatcher, str, bool], bool]] = {
    "apt": _install_apt,
    "snap": _install_snap,
    "flatpak": _install_flatpak,
}


@handler("install_package")
def install_package(d: MenuDispatcher, action: ActionDescriptor, values: Mapping[str, Any]) -> bool:
    return _INSTALLERS[values["method"]](d, values["package"], action.requires_privilege)


def _dpkg_installed(d: MenuDispatcher, package: str) -> bool:
    listing = d.runner.run("dpkg", ["-l"])
    for line in listing.lines():
        parts = line.split()
        if len(parts) >= 2 and parts[0] == "ii" and parts[1].split(":", 1)[0] == package:
            return True
    return False


@prompt_hook("require_installed")
def require_installed(d: MenuDispatcher, values: Mapping[str, Any]) -> None:
    package = values["package"]
    if not _dpkg_installed(d, package):
        raise ValidationError(f"Package '{package}' is not installed.")


@handler("remove_package")
def remove_package(d: MenuDispatcher, action: ActionDescriptor, values: Mapping[str, Any]) -> bool:
    package = values["package"]
    privileged = action.requires_privilege
    if values["purge"]:
        result = d.runner.run("apt", ["purge", package, "-y"], privileged=privileged)
        if result.ok:
            d.success(f"Package '{package}' purged successfully.")
        else:
            d.error(f"Error purging package '{package}'.")
        return result.ok

    result = d.runner.run("apt", ["remove", package, "-y"], privileged=privileged)
    if result.ok:
        d.success(f"Package '{package}' removed successfully.")
    else:
        d.error(f"Error removing package '{package}'.")
    return result.ok
