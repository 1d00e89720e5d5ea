import logging
from enum import Enum, auto
from typing import List, Tuple, Union

from .commands import CommandDispatcher
from .ui import WizardUI

log = logging.getLogger(__name__)


class MenuState(Enum):
    """Screens of the interactive menu."""

    MAIN = auto()
    PROVIDERS = auto()
    MCP = auto()
    EXITING = auto()


MenuOption = Tuple[str, Union[str, MenuState]]

MAIN_OPTIONS: List[MenuOption] = [
    ("Providers & models", MenuState.PROVIDERS),
    ("MCP servers", MenuState.MCP),
    ("Help", "help"),
    ("Exit", MenuState.EXITING),
]

PROVIDER_OPTIONS: List[MenuOption] = [
    ("List providers", "list"),
    ("Add provider", "add"),
    ("Add model to provider", "add-model"),
    ("Set default model", "set-default"),
    ("Delete model", "delete-model"),
    ("Delete provider", "delete"),
    ("Back", MenuState.MAIN),
]

MCP_OPTIONS: List[MenuOption] = [
    ("List MCP servers", "list-mcp"),
    ("Add MCP server", "add-mcp"),
    ("Delete MCP server", "delete-mcp"),
    ("Back", MenuState.MAIN),
]


class WizardMenu:
    """Looping numbered menu driving the dispatcher until the user exits."""

    def __init__(self, dispatcher: CommandDispatcher, ui: WizardUI):
        self.dispatcher = dispatcher
        self.ui = ui
        self.current_state = MenuState.MAIN
        self.transitions = {
            MenuState.MAIN: lambda: self._show(MenuState.MAIN, "OpenCode Configuration Wizard", MAIN_OPTIONS),
            MenuState.PROVIDERS: lambda: self._show(MenuState.PROVIDERS, "Providers & models", PROVIDER_OPTIONS),
            MenuState.MCP: lambda: self._show(MenuState.MCP, "MCP servers", MCP_OPTIONS),
            MenuState.EXITING: lambda: MenuState.EXITING,
        }

    def run(self) -> None:
        """Run until the exit state is reached."""
        while self.current_state != MenuState.EXITING:
            self.current_state = self.transitions[self.current_state]()
        self.ui.display_message("Goodbye!", style="yellow")

    def _show(self, state: MenuState, title: str, options: List[MenuOption]) -> MenuState:
        index = self.ui.choose(title, [label for label, _ in options])
        if index is None:
            self.ui.display_message("Invalid choice", style="yellow")
            return state

        target = options[index][1]
        if isinstance(target, MenuState):
            return target
        self._run_command(target)
        return state

    def _run_command(self, command_name: str) -> None:
        try:
            self.dispatcher.execute(command_name)
        except Exception as exc:
            log.debug("Command %s failed", command_name, exc_info=True)
            self.ui.display_error(f"Error: {exc}")
