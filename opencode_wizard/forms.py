"""Prompt sequences shared by the provider and MCP operations."""

from typing import Dict, List, Optional

from .config import Model, ModelLimit
from .ui import WizardUI


def parse_int(text: str) -> int:
    """Parse a token count or timeout; anything unparsable counts as 0 (not set)."""
    try:
        return int(text.strip())
    except (AttributeError, ValueError):
        return 0


def mask_secret(value: str) -> str:
    if not value:
        return "-"
    if value.startswith("{env:"):
        return value
    if len(value) <= 8:
        return "********"
    return value[:4] + "…" + value[-2:]


def collect_pairs(ui: WizardUI, name_prompt: str, value_prompt: str, another_prompt: str) -> Dict[str, str]:
    """Ask for name/value pairs until a blank name or a "no" to ``another_prompt``.

    Pairs with a blank value are skipped.
    """
    pairs: Dict[str, str] = {}
    while True:
        name = ui.ask(name_prompt)
        if not name:
            break
        value = ui.ask(value_prompt)
        if value:
            pairs[name] = value
        if not ui.confirm(another_prompt, default=False):
            break
    return pairs


def collect_headers(ui: WizardUI) -> Dict[str, str]:
    return collect_pairs(ui, "Header name (leave blank to finish)", "Header value", "Add another header?")


def prompt_model_limit(ui: WizardUI) -> Optional[ModelLimit]:
    if not ui.confirm("Configure token limits?", default=False):
        return None
    context = parse_int(ui.ask("Context limit (tokens, e.g., 128000)"))
    output = parse_int(ui.ask("Output limit (tokens, e.g., 65536)"))
    limit = ModelLimit(context=max(context, 0), output=max(output, 0))
    return limit if limit.is_set else None


def prompt_model(ui: WizardUI, model_id: str) -> Model:
    name = ui.ask("Display name", model_id)
    return Model(name=name or model_id, limit=prompt_model_limit(ui))


def resolve_selection(selection: str, keys: List[str]) -> Optional[str]:
    """Map a 1-based index or a literal key onto ``keys``."""
    if selection.isdigit() and 1 <= int(selection) <= len(keys):
        return keys[int(selection) - 1]
    if selection in keys:
        return selection
    return None


def pick_key(ui: WizardUI, heading: str, labels: Dict[str, str], prompt: str, noun: str) -> Optional[str]:
    """List ``labels`` numbered by sorted key and let the user pick one.

    Prints "Cancelled" for blank input and "<noun> '<x>' not found" when the
    answer matches neither an index nor a key; both return None.
    """
    keys = sorted(labels)
    ui.display_message(heading, style="bold")
    for index, key in enumerate(keys, start=1):
        ui.display_message(f"  {index}. {labels[key]}")

    selection = ui.ask(prompt)
    if not selection:
        ui.display_message("Cancelled", style="yellow")
        return None
    key = resolve_selection(selection, keys)
    if key is None:
        ui.display_message(f"{noun} '{selection}' not found", style="yellow")
    return key
