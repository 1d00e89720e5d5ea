import logging
from typing import Optional

from .config import MCP_LOCAL, MCP_REMOTE, ConfigManager, MCPServer
from .forms import collect_headers, collect_pairs, parse_int, pick_key
from .ui import WizardUI

log = logging.getLogger(__name__)

OAUTH_FIELDS = (
    ("clientId", "Client ID (leave blank for dynamic registration)"),
    ("clientSecret", "Client Secret (optional)"),
    ("scope", "OAuth scopes (optional)"),
)


def _status(server: MCPServer) -> str:
    return "enabled" if server.is_enabled else "disabled"


def _prompt_server_type(ui: WizardUI) -> str:
    ui.display_message("Server type:", style="bold")
    ui.display_message("  1. Local (runs a command)")
    ui.display_message("  2. Remote (connects to a URL)")
    answer = ui.ask("Select type (1 or 2)", "1").lower()
    return MCP_REMOTE if answer in ("2", MCP_REMOTE) else MCP_LOCAL


def _prompt_local(ui: WizardUI, server: MCPServer) -> None:
    ui.display_header("Local MCP Server")
    command = ui.ask("Command (e.g., npx, bun)", "npx")
    arguments = ui.ask("Arguments (e.g., -y @modelcontextprotocol/server-everything)")

    server.command = [command] + arguments.split()
    while ui.confirm("Add another argument?", default=False):
        argument = ui.ask("Additional argument")
        if argument:
            server.command.append(argument)

    if ui.confirm("Add environment variables?", default=False):
        server.environment = collect_pairs(
            ui,
            "Environment variable name (leave blank to finish)",
            "Environment variable value",
            "Add another environment variable?",
        )


def _prompt_remote(ui: WizardUI, server: MCPServer) -> bool:
    """Fill in the remote fields; False when the required URL is missing."""
    ui.display_header("Remote MCP Server")
    url = ui.ask("Server URL (e.g., https://mcp.example.com/mcp)")
    if not url:
        ui.display_error("URL is required for remote servers")
        return False
    server.url = url

    if ui.confirm("Add custom headers?", default=False):
        server.headers = collect_headers(ui)

    if ui.confirm("Configure OAuth?", default=False):
        for key, prompt in OAUTH_FIELDS:
            value = ui.ask(prompt)
            if value:
                server.oauth[key] = value
    return True


def _prompt_timeout(ui: WizardUI) -> Optional[int]:
    if not ui.confirm("Set custom timeout?", default=False):
        return None
    timeout = parse_int(ui.ask("Timeout in milliseconds (default: 5000)"))
    return timeout if timeout > 0 else None


def add_mcp_server(manager: ConfigManager, ui: WizardUI) -> None:
    """Create (or overwrite) a local or remote MCP server entry."""
    file_existed = manager.exists()
    config = manager.load_config()
    if not file_existed:
        ui.display_message("Creating new config file...", style="dim")

    ui.display_header("Add MCP Server")

    name = ui.ask("Server name (e.g., my-mcp)")
    if not name:
        ui.display_message("Cancelled", style="yellow")
        return
    if name in config.mcp and not ui.confirm(f"Server '{name}' already exists. Overwrite?"):
        ui.display_message("Cancelled", style="yellow")
        return

    server = MCPServer(type=_prompt_server_type(ui))
    if server.type == MCP_LOCAL:
        _prompt_local(ui, server)
    elif not _prompt_remote(ui, server):
        return

    if not ui.confirm("Enable server on startup?", default=True):
        server.enabled = False
    server.timeout = _prompt_timeout(ui)

    config.mcp[name] = server
    manager.save_config(config)
    log.info("Added %s MCP server %s", server.type, name)

    ui.display_message(f"\nConfiguration saved to: {manager.config_file}", style="green")
    ui.display_message(f"Added MCP server: {name} (type: {server.type})", style="green")
    ui.display_message(f"Status: {_status(server)}")


def list_mcp_servers(manager: ConfigManager, ui: WizardUI) -> None:
    config = manager.load_config()
    if not config.mcp:
        ui.display_message("No MCP servers configured")
        return

    ui.display_header("Configured MCP Servers")
    for name in sorted(config.mcp):
        server = config.mcp[name]
        ui.display_message(f"\nServer: {name}", style="bold")
        ui.display_message(f"  Type: {server.type}")
        ui.display_message(f"  Status: {_status(server)}")

        if server.type == MCP_LOCAL:
            if server.command:
                ui.display_message(f"  Command: {' '.join(server.command)}")
            if server.environment:
                ui.display_message("  Environment variables:")
                for key in sorted(server.environment):
                    ui.display_message(f"    {key}: {server.environment[key]}")
        else:
            if server.url:
                ui.display_message(f"  URL: {server.url}")
            if server.headers:
                ui.display_message("  Headers:")
                for key in sorted(server.headers):
                    ui.display_message(f"    {key}: {server.headers[key]}")
            if server.oauth:
                ui.display_message("  OAuth configured")

        if server.timeout is not None:
            ui.display_message(f"  Timeout: {server.timeout} ms")


def delete_mcp_server(manager: ConfigManager, ui: WizardUI) -> None:
    config = manager.load_config()
    if not config.mcp:
        ui.display_message("No MCP servers to delete")
        return

    ui.display_header("Delete MCP Server")
    labels = {name: f"{name} ({server.type}) - {_status(server)}" for name, server in config.mcp.items()}
    name = pick_key(ui, "Available servers:", labels, "Enter server number or name to delete", "Server")
    if name is None:
        return

    if not ui.confirm(f"Delete MCP server '{name}'?"):
        ui.display_message("Cancelled", style="yellow")
        return

    del config.mcp[name]
    manager.save_config(config)
    log.info("Deleted MCP server %s", name)
    ui.display_message(f"Deleted MCP server: {name}", style="green")
