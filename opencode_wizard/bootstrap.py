import argparse
import logging
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

from . import __version__
from .config import ConfigManager


def build_arg_parser() -> argparse.ArgumentParser:
    """Build the CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="opencode-config-wizard",
        description="Manage providers, models and MCP servers in opencode.json",
        epilog="Run 'opencode-config-wizard help' for the list of commands.",
    )
    parser.add_argument("command", nargs="?", help="Command to run (omit for the interactive menu)")
    parser.add_argument("--config", type=Path, help="Path to opencode.json (default: ~/.config/opencode/opencode.json)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def configure_logging(verbose: bool) -> None:
    """Route log records to stderr through rich; DEBUG when verbose, else WARNING.

    Safe to call repeatedly: handlers added by earlier calls are replaced.
    """
    level = logging.DEBUG if verbose else logging.WARNING
    logger = logging.getLogger()
    logger.setLevel(level)

    for handler in list(logger.handlers):
        if getattr(handler, "_added_by_configure_logging", False):
            logger.removeHandler(handler)
            handler.close()

    handler = RichHandler(console=Console(stderr=True), show_path=verbose, rich_tracebacks=verbose)
    handler.setFormatter(logging.Formatter("%(message)s"))
    handler.setLevel(level)
    setattr(handler, "_added_by_configure_logging", True)
    logger.addHandler(handler)


def create_config_manager(args: argparse.Namespace) -> ConfigManager:
    """ConfigManager for --config when given, else the per-user default path."""
    return ConfigManager(args.config)
