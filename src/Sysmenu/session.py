"""Interactive session loop and wiring."""

from __future__ import annotations

import logging

from rich.console import Console

from Sysmenu.catalog import build_registry
from Sysmenu.config import Settings, get_settings
from Sysmenu.dispatcher import DispatchState, MenuDispatcher, ReadLine
from Sysmenu.runner import CommandRunner
from Sysmenu.validation import FieldValidator

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_INTERRUPTED = 130


class SessionLoop:
    """Drive the dispatcher until the exit selector is chosen.

    The only state carried between iterations is the ``DispatchState`` the
    dispatcher hands back.
    """

    def __init__(self, dispatcher: MenuDispatcher):
        self.dispatcher = dispatcher

    def step(self) -> DispatchState:
        """Show the menu, read one selector and dispatch it."""
        self.dispatcher.render_menu()
        raw = self.dispatcher.read_selector()
        outcome = self.dispatcher.dispatch(raw)
        self.dispatcher.console.print()
        return outcome.state

    def run(self) -> int:
        state = DispatchState.AWAITING_SELECTOR
        try:
            while state is not DispatchState.EXITING:
                state = self.step()
        except EOFError:
            # stdin closed: nothing more can be read, leave as if exit was chosen.
            logger.info("Input closed, leaving session")
            self.dispatcher.console.print()
            return EXIT_OK
        except KeyboardInterrupt:
            self.dispatcher.console.print()
            return EXIT_INTERRUPTED
        return EXIT_OK


def build_session(
    settings: Settings | None = None,
    console: Console | None = None,
    read_line: ReadLine | None = None,
) -> SessionLoop:
    """Wire registry, runner, validator and dispatcher for one session."""
    settings = settings or get_settings()
    console = console or Console()
    runner = CommandRunner(settings=settings)
    dispatcher = MenuDispatcher(
        registry=build_registry(settings.menu_profile),
        runner=runner,
        validator=FieldValidator(zoneinfo_dir=settings.zoneinfo_dir),
        settings=settings,
        console=console,
        read_line=read_line,
    )
    runner.output = dispatcher.emit_line
    return SessionLoop(dispatcher)
