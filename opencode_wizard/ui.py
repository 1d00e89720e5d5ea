from typing import List, Optional

from rich.console import Console
from rich.panel import Panel
from rich.prompt import Prompt
from rich.text import Text


class WizardUI:
    """Terminal prompts and output for the wizard."""

    def __init__(self, console: Optional[Console] = None, error_console: Optional[Console] = None):
        self.console = console or Console()
        self.error_console = error_console or Console(stderr=True)

    def ask(self, prompt: str, default: str = "") -> str:
        """Read one line; blank input returns ``default``."""
        try:
            answer = Prompt.ask(
                Text(prompt),
                console=self.console,
                default=default,
                show_default=bool(default),
            )
        except (KeyboardInterrupt, EOFError):
            self.console.print("\nCancelled.", style="yellow")
            raise SystemExit(130) from None
        return (answer or "").strip()

    def confirm(self, prompt: str, default: bool = False) -> bool:
        """Yes/no question; anything other than y/yes counts as no."""
        answer = self.ask(f"{prompt} (y/n)", "y" if default else "n")
        return answer.lower() in ("y", "yes")

    def choose(self, title: str, options: List[str]) -> Optional[int]:
        """Show a numbered menu and return the zero-based choice, or None if invalid."""
        self.console.print()
        self.console.print(Text(title, style="bold"))
        for index, option in enumerate(options, start=1):
            self.console.print(Text(f"  {index}. {option}"))
        answer = self.ask(f"Choose [1-{len(options)}]")
        if answer.isdigit() and 1 <= int(answer) <= len(options):
            return int(answer) - 1
        return None

    def display_header(self, title: str) -> None:
        self.console.print()
        self.console.print(Panel.fit(Text(title, style="bold cyan"), border_style="blue"))

    def display_message(self, content, style: str = None) -> None:
        """Print plain text (no markup interpretation) or a rich renderable."""
        if isinstance(content, str):
            content = Text(content, style=style or "")
            self.console.print(content)
        else:
            self.console.print(content, style=style)

    def display_error(self, content: str) -> None:
        self.error_console.print(Text(content, style="bold red"))
