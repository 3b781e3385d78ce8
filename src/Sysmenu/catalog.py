"""Built-in menu groups and the menu profiles assembled from them."""

from __future__ import annotations

from Sysmenu.registry import ActionDescriptor, ActionRegistry, MenuGroup, PromptField

_PATH_EXAMPLES = "(e.g., file.txt, subdir/file.txt, /absolute/path/file.txt)"

_PID = PromptField("pid", "Enter the PID to kill: ", kind="pid", field_name="PID")
_PORT = PromptField("port", "Enter the port number to check: ", kind="port", field_name="Port")

PROCESS_GROUP = MenuGroup(
    title="Process management",
    actions=(
        ActionDescriptor(
            key="process.list",
            title="List processes",
            mode="stream",
            handler="list_processes",
        ),
        ActionDescriptor(
            key="process.kill",
            title="Kill a process",
            prompts=(_PID,),
            command=("kill", "-9", "{pid}"),
            requires_privilege=True,
            success="Process {pid} killed successfully.",
            failure="Error killing process {pid}.",
        ),
        ActionDescriptor(
            key="process.renice",
            title="Change process priority",
            prompts=(
                PromptField("pid", "Enter the PID to change priority: ", kind="pid", field_name="PID"),
                PromptField(
                    "nice",
                    "Enter new nice value (-20 to 19, lower is higher priority): ",
                    kind="nice",
                    field_name="Nice value",
                ),
            ),
            command=("renice", "{nice}", "-p", "{pid}"),
            requires_privilege=True,
            success="Priority of process {pid} changed to {nice}.",
            failure="Error changing priority.",
        ),
        ActionDescriptor(
            key="process.find",
            title="Find processes by name",
            prompts=(
                PromptField(
                    "name",
                    "Enter the process name to find (e.g., firefox, python): ",
                    kind="non_empty",
                    field_name="Process name",
                ),
            ),
            mode="stream",
            handler="find_processes",
        ),
    ),
)

SOCKET_GROUP = MenuGroup(
    title="Socket management",
    actions=(
        ActionDescriptor(
            key="socket.list",
            title="List open sockets",
            command=("ss", "-tuln"),
            mode="stream",
            header="Listing open TCP/UDP sockets:",
        ),
        ActionDescriptor(
            key="socket.details",
            title="Check socket details",
            prompts=(_PORT,),
            command=("lsof", "-i", ":{port}"),
            requires_privilege=True,
            mode="stream",
            header="Details for port {port}:",
            failure="No process using port {port}.",
        ),
        ActionDescriptor(
            key="socket.kill",
            title="Kill process by socket",
            prompts=(
                PromptField(
                    "port", "Enter the port number to kill process: ", kind="port", field_name="Port"
                ),
            ),
            requires_privilege=True,
            handler="kill_socket_process",
        ),
    ),
)

NETWORK_GROUP = MenuGroup(
    title="Network management",
    actions=(
        ActionDescriptor(
            key="network.config",
            title="View network configuration",
            command=("ip", "addr", "show"),
            mode="stream",
            header="Network configuration:",
        ),
        ActionDescriptor(
            key="network.ping",
            title="Check connectivity",
            command=("ping", "-c", "{ping_count}", "{connectivity_host}"),
            mode="stream",
            header="Checking connectivity to {connectivity_host}:",
            failure="Connectivity test failed.",
        ),
        ActionDescriptor(
            key="network.toggle",
            title="Toggle network",
            prompts=(
                PromptField("state", "Enable or disable network? (on/off): ", kind="on_off"),
            ),
            requires_privilege=True,
            handler="toggle_network",
        ),
    ),
)

FILE_GROUP = MenuGroup(
    title="File management",
    actions=(
        ActionDescriptor(
            key="file.create",
            title="Create file",
            prompts=(
                PromptField("path", f"Enter the file name or path {_PATH_EXAMPLES}: ", kind="path"),
                PromptField(
                    "content",
                    "Do you want to add content to the file? (y/n): ",
                    kind="confirm",
                    before="require_writable_parent",
                ),
            ),
            handler="create_file",
        ),
        ActionDescriptor(
            key="file.delete",
            title="Delete file",
            prompts=(
                PromptField(
                    "path", f"Enter the file name or path to delete {_PATH_EXAMPLES}: ", kind="path"
                ),
            ),
            handler="delete_file",
        ),
        ActionDescriptor(
            key="file.move",
            title="Move file",
            prompts=(
                PromptField(
                    "source",
                    f"Enter the source file name or path {_PATH_EXAMPLES}: ",
                    kind="path",
                ),
                PromptField(
                    "destination",
                    "Enter the destination (directory or new file path, "
                    "e.g., dest_dir/, dest_dir/file.txt, /absolute/path/): ",
                    kind="non_empty",
                    field_name="Destination",
                ),
            ),
            handler="move_file",
        ),
        ActionDescriptor(
            key="file.info",
            title="Check file information",
            prompts=(
                PromptField(
                    "path", f"Enter the file name or path to check {_PATH_EXAMPLES}: ", kind="path"
                ),
            ),
            mode="stream",
            handler="file_info",
        ),
    ),
)

SCHEDULE_GROUP = MenuGroup(
    title="Schedule tasks",
    actions=(
        ActionDescriptor(
            key="cron.create",
            title="Create a task",
            prompts=(
                PromptField(
                    "command",
                    "Enter the command to schedule (e.g., 'rm -f /path/to/files/*.log'): ",
                ),
                PromptField(
                    "schedule",
                    "Schedule: ",
                    kind="cron_schedule",
                    hint=(
                        "Enter the schedule (cron format: minute hour day_of_month month day_of_week)",
                        "Example: '0 2 * * *' for 2:00 AM daily",
                    ),
                ),
            ),
            handler="create_task",
        ),
        ActionDescriptor(
            key="cron.list",
            title="List tasks",
            mode="stream",
            handler="list_tasks",
        ),
        ActionDescriptor(
            key="cron.delete",
            title="Delete a task",
            prompts=(
                PromptField(
                    "line",
                    "Enter the line number of the task to delete (or 0 to cancel): ",
                    kind="line_selector",
                    before="show_crontab",
                ),
            ),
            handler="delete_task",
        ),
    ),
)

TIME_GROUP = MenuGroup(
    title="System time setup",
    actions=(
        ActionDescriptor(
            key="time.info",
            title="View time information",
            command=("timedatectl",),
            mode="stream",
            header="Current system time information:",
        ),
        ActionDescriptor(
            key="time.timezone",
            title="Set timezone",
            prompts=(
                PromptField(
                    "timezone",
                    "Enter the timezone (e.g., Asia/Ho_Chi_Minh): ",
                    kind="timezone",
                    before="show_timezones",
                ),
            ),
            requires_privilege=True,
            handler="set_timezone",
        ),
        ActionDescriptor(
            key="time.ntp",
            title="Toggle NTP synchronization",
            prompts=(
                PromptField(
                    "enable",
                    "Enable NTP synchronization? (y/n): ",
                    kind="yes_no",
                    before="show_ntp_status",
                ),
            ),
            requires_privilege=True,
            handler="toggle_ntp",
        ),
    ),
)

PACKAGE_GROUP = MenuGroup(
    title="Package management",
    actions=(
        ActionDescriptor(
            key="package.install",
            title="Install a package",
            prompts=(
                PromptField(
                    "method",
                    "Choose an installation method (1-3): ",
                    kind="install_method",
                    hint=("Install a package:", "1. Using apt", "2. Using snap", "3. Using flatpak"),
                ),
                PromptField(
                    "package",
                    "Enter the package name (e.g., vim, spotify, org.gimp.GIMP): ",
                    kind="non_empty",
                    field_name="Package name",
                ),
            ),
            requires_privilege=True,
            handler="install_package",
        ),
        ActionDescriptor(
            key="package.remove",
            title="Remove a package",
            prompts=(
                PromptField(
                    "package",
                    "Enter the package name to remove (e.g., vim, curl): ",
                    kind="non_empty",
                    field_name="Package name",
                ),
                PromptField(
                    "purge",
                    "Remove configuration files as well (purge)? (y/n): ",
                    kind="confirm",
                    before="require_installed",
                ),
            ),
            requires_privilege=True,
            handler="remove_package",
        ),
    ),
)

PROFILES: dict[str, tuple[str, tuple[MenuGroup, ...]]] = {
    "system": ("System Manager", (PROCESS_GROUP, SOCKET_GROUP, NETWORK_GROUP)),
    "files": (
        "File Manager",
        (FILE_GROUP, SCHEDULE_GROUP, TIME_GROUP, PACKAGE_GROUP),
    ),
    "all": (
        "System Administration",
        (
            PROCESS_GROUP,
            SOCKET_GROUP,
            NETWORK_GROUP,
            FILE_GROUP,
            SCHEDULE_GROUP,
            TIME_GROUP,
            PACKAGE_GROUP,
        ),
    ),
}


def build_registry(profile: str = "all") -> ActionRegistry:
    """Build the registry for a menu profile (``all``, ``system`` or ``files``)."""
    try:
        title, groups = PROFILES[profile]
    except KeyError:
        raise ValueError(f"Unknown menu profile: {profile}") from None
    return ActionRegistry(title, groups)
