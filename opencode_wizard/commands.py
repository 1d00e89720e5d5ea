from typing import Callable, Dict, Optional

from rich.panel import Panel

from .config import ConfigManager
from .mcp import add_mcp_server, delete_mcp_server, list_mcp_servers
from .providers import add_model, add_provider, delete_model, delete_provider, list_providers, set_default_model
from .ui import WizardUI

HELP_TEXT = """[bold cyan]OpenCode Configuration Wizard[/bold cyan]

[bold yellow]Usage:[/bold yellow]
    opencode-config-wizard [command] [--config PATH] [-v]
    Without a command an interactive menu is shown.

[bold yellow]Provider Commands:[/bold yellow]
[green]add[/green]           Add a new OpenAI-compatible provider
[green]add-model[/green]     Add a model to an existing provider
[green]list[/green]          List all configured providers
[green]delete[/green]        Delete a provider
[green]delete-model[/green]  Delete a model from a provider
[green]set-default[/green]   Set default model

[bold yellow]MCP Server Commands:[/bold yellow]
[green]add-mcp[/green]       Add a new MCP server
[green]list-mcp[/green]      List all configured MCP servers
[green]delete-mcp[/green]    Delete an MCP server

[bold yellow]Other:[/bold yellow]
[green]help[/green]          Show this help message

[bold yellow]Examples:[/bold yellow]
    opencode-config-wizard add
    opencode-config-wizard add-mcp
    opencode-config-wizard list --config ./opencode.json
"""

PROVIDER_COMMANDS = ("add", "add-model", "list", "delete", "delete-model", "set-default")
MCP_COMMANDS = ("add-mcp", "list-mcp", "delete-mcp")


class CommandDispatcher:
    """Maps command names to wizard operations."""

    def __init__(
        self,
        manager: ConfigManager,
        ui: WizardUI,
        extra_handlers: Optional[Dict[str, Callable[[], None]]] = None,
    ):
        self.manager = manager
        self.ui = ui
        self.handlers: Dict[str, Callable[[], None]] = {
            "add": lambda: add_provider(self.manager, self.ui),
            "add-model": lambda: add_model(self.manager, self.ui),
            "list": lambda: list_providers(self.manager, self.ui),
            "delete": lambda: delete_provider(self.manager, self.ui),
            "delete-model": lambda: delete_model(self.manager, self.ui),
            "set-default": lambda: set_default_model(self.manager, self.ui),
            "add-mcp": lambda: add_mcp_server(self.manager, self.ui),
            "list-mcp": lambda: list_mcp_servers(self.manager, self.ui),
            "delete-mcp": lambda: delete_mcp_server(self.manager, self.ui),
            "help": self._handle_help,
        }
        if extra_handlers:
            self.handlers.update(extra_handlers)

    def execute(self, command_name: str) -> bool:
        """Run a command by name. Returns False when the command is unknown."""
        handler = self.handlers.get(command_name)
        if not handler:
            return False
        handler()
        return True

    def _handle_help(self) -> None:
        self.ui.display_message(Panel.fit(HELP_TEXT, border_style="blue"))
