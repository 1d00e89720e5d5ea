import logging
from typing import List

from .config import ConfigManager, Provider
from .forms import collect_headers, mask_secret, pick_key, prompt_model, resolve_selection
from .ui import WizardUI

log = logging.getLogger(__name__)

DEFAULT_PROVIDER_KEY = "custom"
DEFAULT_PROVIDER_NAME = "Custom Provider"
DEFAULT_BASE_URL = "http://localhost:11434/v1"


def _provider_labels(config) -> dict:
    return {
        key: f"{key} ({provider.name}) - {len(provider.models)} model(s)"
        for key, provider in config.providers.items()
    }


def _add_models_loop(ui: WizardUI, provider: Provider) -> List[str]:
    """Model entry loop used right after a provider is created; returns ids in entry order."""
    ui.display_header("Add Models")
    added: List[str] = []
    while True:
        model_id = ui.ask("Model ID (e.g., qwen3-coder, leave blank to finish)")
        if not model_id:
            break
        if model_id in provider.models and not ui.confirm(f"Model '{model_id}' already exists. Overwrite?"):
            ui.display_message(f"Skipped model '{model_id}'", style="yellow")
        else:
            provider.models[model_id] = prompt_model(ui, model_id)
            if model_id not in added:
                added.append(model_id)
        if not ui.confirm("Add another model?", default=False):
            break
    return added


def add_provider(manager: ConfigManager, ui: WizardUI) -> None:
    """Create (or overwrite) an OpenAI-compatible provider, then offer to add models."""
    file_existed = manager.exists()
    config = manager.load_config()
    if not file_existed:
        ui.display_message("Creating new config file...", style="dim")

    ui.display_header("Add OpenAI-Compatible Provider")

    key = ui.ask("Provider key (e.g., ollama, custom)", DEFAULT_PROVIDER_KEY)
    if not key:
        ui.display_message("Cancelled", style="yellow")
        return
    if key in config.providers and not ui.confirm(f"Provider '{key}' already exists. Overwrite?"):
        ui.display_message("Cancelled", style="yellow")
        return

    name = ui.ask("Display name", DEFAULT_PROVIDER_NAME)
    base_url = ui.ask("Base URL (e.g., http://localhost:11434/v1)", DEFAULT_BASE_URL)
    api_key = ui.ask("API key (optional)")

    provider = Provider(name=name, options={"baseURL": base_url})
    if api_key:
        provider.options["apiKey"] = api_key
    if ui.confirm("Add custom headers?", default=False):
        headers = collect_headers(ui)
        if headers:
            provider.options["headers"] = headers

    config.providers[key] = provider
    added = _add_models_loop(ui, provider)

    if added and ui.confirm("Set as default model?", default=not config.model):
        config.model = f"{key}/{added[0]}"

    manager.save_config(config)
    log.info("Added provider %s with %d model(s)", key, len(provider.models))

    ui.display_message(f"\nConfiguration saved to: {manager.config_file}", style="green")
    ui.display_message(f"Added provider: {name} with {len(provider.models)} model(s)", style="green")
    if config.model:
        ui.display_message(f"Default model: {config.model}")


def add_model(manager: ConfigManager, ui: WizardUI) -> None:
    """Add a model to an existing provider chosen by number or key."""
    config = manager.load_config()
    if not config.providers:
        ui.display_message("No providers configured. Use 'add' command first.", style="yellow")
        return

    ui.display_header("Add Model to Existing Provider")
    key = pick_key(ui, "Available providers:", _provider_labels(config), "Enter provider number or key", "Provider")
    if key is None:
        return

    provider = config.providers[key]
    ui.display_message(f"\nAdding model to provider: {provider.name} ({key})")

    model_id = ui.ask("Model ID (e.g., qwen3-coder)")
    if not model_id:
        ui.display_message("Cancelled", style="yellow")
        return
    if model_id in provider.models and not ui.confirm(f"Model '{model_id}' already exists. Overwrite?"):
        ui.display_message("Cancelled", style="yellow")
        return

    model = prompt_model(ui, model_id)
    provider.models[model_id] = model

    model_ref = f"{key}/{model_id}"
    if ui.confirm("Set as default model?", default=not config.model):
        config.model = model_ref

    manager.save_config(config)
    log.info("Added model %s", model_ref)

    ui.display_message(f"\nModel '{model.name}' added to provider '{provider.name}'", style="green")
    if config.model == model_ref:
        ui.display_message(f"Default model: {config.model}")


def list_providers(manager: ConfigManager, ui: WizardUI) -> None:
    config = manager.load_config()
    if not config.providers:
        ui.display_message("No providers configured")
        return

    ui.display_header("Configured Providers")
    for key in sorted(config.providers):
        provider = config.providers[key]
        ui.display_message(f"\nProvider: {provider.name} ({key})", style="bold")
        ui.display_message(f"  Base URL: {provider.base_url}")
        api_key = provider.options.get("apiKey")
        if api_key:
            ui.display_message(f"  API key: {mask_secret(str(api_key))}")

        if provider.headers:
            ui.display_message("  Custom headers:")
            for name in sorted(provider.headers):
                ui.display_message(f"    {name}: {provider.headers[name]}")

        if not provider.models:
            ui.display_message("  Models: None")
            continue
        ui.display_message("  Models:")
        for model_id in sorted(provider.models):
            model = provider.models[model_id]
            line = f"    - {model.name} ({model_id})"
            if model.limit is not None:
                if model.limit.context > 0:
                    line += f" [context: {model.limit.context}]"
                if model.limit.output > 0:
                    line += f" [output: {model.limit.output}]"
            ui.display_message(line)

    if config.model:
        ui.display_message(f"\nDefault model: {config.model}", style="green")
    if config.small_model:
        ui.display_message(f"Small model: {config.small_model}")
    if config.enabled_providers:
        ui.display_message(f"Enabled providers: {', '.join(config.enabled_providers)}")
    if config.disabled_providers:
        ui.display_message(f"Disabled providers: {', '.join(config.disabled_providers)}")


def delete_provider(manager: ConfigManager, ui: WizardUI) -> None:
    config = manager.load_config()
    if not config.providers:
        ui.display_message("No providers to delete")
        return

    ui.display_header("Delete Provider")
    labels = {key: f"{key} ({provider.name})" for key, provider in config.providers.items()}
    key = pick_key(ui, "Available providers:", labels, "Enter provider number or key to delete", "Provider")
    if key is None:
        return

    provider = config.providers[key]
    if not ui.confirm(f"Delete provider '{provider.name}' ({key}) and its {len(provider.models)} model(s)?"):
        ui.display_message("Cancelled", style="yellow")
        return

    del config.providers[key]
    if config.model.startswith(f"{key}/"):
        ui.display_message("Warning: This provider held the default model. Default model cleared.", style="yellow")
        config.model = ""

    manager.save_config(config)
    log.info("Deleted provider %s", key)
    ui.display_message(f"Deleted provider: {provider.name}", style="green")


def delete_model(manager: ConfigManager, ui: WizardUI) -> None:
    config = manager.load_config()
    if not config.providers:
        ui.display_message("No providers configured. Use 'add' command first.", style="yellow")
        return

    ui.display_header("Delete Model")
    key = pick_key(ui, "Available providers:", _provider_labels(config), "Enter provider number or key", "Provider")
    if key is None:
        return

    provider = config.providers[key]
    if not provider.models:
        ui.display_message(f"Provider '{provider.name}' has no models to delete", style="yellow")
        return

    ui.display_message(f"\nProvider: {provider.name} ({key})")
    labels = {model_id: f"{model.name} ({model_id})" for model_id, model in provider.models.items()}
    model_id = pick_key(ui, "Available models:", labels, "Enter model number or ID", "Model")
    if model_id is None:
        return

    model_name = provider.models[model_id].name
    if not ui.confirm(f"Are you sure you want to delete model '{model_name}' from provider '{provider.name}'?"):
        ui.display_message("Cancelled", style="yellow")
        return

    del provider.models[model_id]
    if config.model == f"{key}/{model_id}":
        ui.display_message("Warning: This was the default model. Default model cleared.", style="yellow")
        config.model = ""

    manager.save_config(config)
    log.info("Deleted model %s/%s", key, model_id)
    ui.display_message(f"Deleted model: {model_name}", style="green")


def set_default_model(manager: ConfigManager, ui: WizardUI) -> None:
    config = manager.load_config()
    if not config.providers:
        ui.display_message("No providers configured. Use 'add' command first.", style="yellow")
        return

    names = {}
    for key, provider in config.providers.items():
        for model_id, model in provider.models.items():
            names[f"{key}/{model_id}"] = model.name
    if not names:
        ui.display_message("No models configured. Use 'add-model' command first.", style="yellow")
        return

    ui.display_header("Set Default Model")
    refs = sorted(names)
    ui.display_message("Available models:", style="bold")
    for index, ref in enumerate(refs, start=1):
        marker = " (current)" if ref == config.model else ""
        ui.display_message(f"  {index}. {ref} ({names[ref]}){marker}")

    selection = ui.ask("Enter model number or provider/model")
    if not selection:
        ui.display_message("Cancelled", style="yellow")
        return
    model_ref = resolve_selection(selection, refs)
    if model_ref is None:
        if "/" not in selection:
            ui.display_message("Invalid choice", style="yellow")
            return
        model_ref = selection

    config.model = model_ref
    manager.save_config(config)
    log.info("Default model set to %s", model_ref)
    ui.display_message(f"Default model set to: {model_ref}", style="green")
