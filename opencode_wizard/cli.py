import logging
from typing import List, Optional

from .bootstrap import build_arg_parser, configure_logging, create_config_manager
from .commands import CommandDispatcher
from .menu import WizardMenu
from .ui import WizardUI

log = logging.getLogger(__name__)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point; returns the process exit status."""
    args = build_arg_parser().parse_args(argv)
    configure_logging(args.verbose)

    ui = WizardUI()
    manager = create_config_manager(args)
    log.debug("Using config file %s", manager.config_file)
    dispatcher = CommandDispatcher(manager, ui)

    if not args.command:
        WizardMenu(dispatcher, ui).run()
        return 0

    try:
        if dispatcher.execute(args.command):
            return 0
    except Exception as exc:
        log.debug("Command %s failed", args.command, exc_info=True)
        ui.display_error(f"Error: {exc}")
        return 1

    ui.display_error(f"Unknown command: {args.command}")
    dispatcher.execute("help")
    return 1
