import json
import logging
import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

log = logging.getLogger(__name__)

SCHEMA_URL = "https://opencode.ai/config.json"
PROVIDER_PACKAGE = "@ai-sdk/openai-compatible"
CONFIG_PATH_ENV = "OPENCODE_WIZARD_CONFIG"

MCP_LOCAL = "local"
MCP_REMOTE = "remote"


class ConfigError(Exception):
    """Base error for configuration load/save failures."""


class ConfigReadError(ConfigError):
    """The config file exists but could not be read."""


class MalformedConfigError(ConfigError):
    """The config file is not valid JSON or has an unexpected shape."""


class ConfigWriteError(ConfigError):
    """The config file could not be written."""


def _sorted_mapping(value: Any) -> Any:
    """Return ``value`` with every nested dict's keys sorted."""
    if isinstance(value, dict):
        return {key: _sorted_mapping(value[key]) for key in sorted(value)}
    if isinstance(value, list):
        return [_sorted_mapping(item) for item in value]
    return value


def _require_mapping(data: Any, what: str) -> Dict[str, Any]:
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise MalformedConfigError(f"{what} must be a JSON object, got {type(data).__name__}")
    return data


def _require_string(value: Any, what: str) -> str:
    if value is None:
        return ""
    if not isinstance(value, str):
        raise MalformedConfigError(f"{what} must be a string, got {type(value).__name__}")
    return value


def _extra(data: Dict[str, Any], known: tuple) -> Dict[str, Any]:
    return {key: value for key, value in data.items() if key not in known}


@dataclass
class ModelLimit:
    """Token limits for a model; zero means not configured."""

    context: int = 0
    output: int = 0
    extra: Dict[str, Any] = field(default_factory=dict)

    FIELDS = ("context", "output")

    @property
    def is_set(self) -> bool:
        return self.context > 0 or self.output > 0

    @classmethod
    def from_dict(cls, data: dict) -> "ModelLimit":
        data = _require_mapping(data, "limit")
        return cls(
            context=int(data.get("context") or 0),
            output=int(data.get("output") or 0),
            extra=_extra(data, cls.FIELDS),
        )

    def to_dict(self) -> dict:
        result: Dict[str, Any] = {}
        if self.context:
            result["context"] = self.context
        if self.output:
            result["output"] = self.output
        result.update(_sorted_mapping(self.extra))
        return result


@dataclass
class Model:
    name: str = ""
    id: str = ""
    limit: Optional[ModelLimit] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    FIELDS = ("name", "id", "limit")

    @classmethod
    def from_dict(cls, data: dict) -> "Model":
        data = _require_mapping(data, "model")
        limit = data.get("limit")
        return cls(
            name=data.get("name") or "",
            id=data.get("id") or "",
            limit=ModelLimit.from_dict(limit) if limit is not None else None,
            extra=_extra(data, cls.FIELDS),
        )

    def to_dict(self) -> dict:
        result: Dict[str, Any] = {"name": self.name}
        if self.id:
            result["id"] = self.id
        if self.limit is not None:
            result["limit"] = self.limit.to_dict()
        result.update(_sorted_mapping(self.extra))
        return result


@dataclass
class Provider:
    name: str = ""
    npm: str = PROVIDER_PACKAGE
    options: Dict[str, Any] = field(default_factory=dict)
    models: Dict[str, Model] = field(default_factory=dict)
    extra: Dict[str, Any] = field(default_factory=dict)

    FIELDS = ("npm", "name", "options", "models")

    @property
    def base_url(self) -> str:
        return str(self.options.get("baseURL") or "")

    @property
    def headers(self) -> Dict[str, Any]:
        headers = self.options.get("headers")
        return headers if isinstance(headers, dict) else {}

    @classmethod
    def from_dict(cls, data: dict) -> "Provider":
        data = _require_mapping(data, "provider entry")
        models = _require_mapping(data.get("models"), "models")
        return cls(
            name=data.get("name") or "",
            npm=data.get("npm") or "",
            options=dict(_require_mapping(data.get("options"), "options")),
            models={model_id: Model.from_dict(model) for model_id, model in models.items()},
            extra=_extra(data, cls.FIELDS),
        )

    def to_dict(self) -> dict:
        result: Dict[str, Any] = {}
        if self.npm:
            result["npm"] = self.npm
        if self.name:
            result["name"] = self.name
        if self.options:
            result["options"] = _sorted_mapping(self.options)
        if self.models:
            result["models"] = {model_id: self.models[model_id].to_dict() for model_id in sorted(self.models)}
        result.update(_sorted_mapping(self.extra))
        return result


@dataclass
class MCPServer:
    type: str = MCP_LOCAL
    command: List[str] = field(default_factory=list)
    environment: Dict[str, str] = field(default_factory=dict)
    url: str = ""
    headers: Dict[str, str] = field(default_factory=dict)
    oauth: Dict[str, Any] = field(default_factory=dict)
    enabled: Optional[bool] = None
    timeout: Optional[int] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    FIELDS = ("type", "command", "environment", "url", "headers", "oauth", "enabled", "timeout")

    @property
    def is_enabled(self) -> bool:
        """Absent ``enabled`` means enabled; only an explicit false disables."""
        return self.enabled is not False

    @classmethod
    def from_dict(cls, data: dict) -> "MCPServer":
        data = _require_mapping(data, "mcp entry")
        command = data.get("command") or []
        if not isinstance(command, list):
            raise MalformedConfigError("mcp command must be a JSON array")
        enabled = data.get("enabled")
        timeout = data.get("timeout")
        return cls(
            type=data.get("type") or "",
            command=[str(part) for part in command],
            environment=dict(_require_mapping(data.get("environment"), "environment")),
            url=data.get("url") or "",
            headers=dict(_require_mapping(data.get("headers"), "headers")),
            oauth=dict(_require_mapping(data.get("oauth"), "oauth")),
            enabled=bool(enabled) if enabled is not None else None,
            timeout=int(timeout) if timeout is not None else None,
            extra=_extra(data, cls.FIELDS),
        )

    def to_dict(self) -> dict:
        result: Dict[str, Any] = {"type": self.type}
        if self.command:
            result["command"] = list(self.command)
        if self.environment:
            result["environment"] = _sorted_mapping(self.environment)
        if self.url:
            result["url"] = self.url
        if self.headers:
            result["headers"] = _sorted_mapping(self.headers)
        if self.oauth:
            result["oauth"] = _sorted_mapping(self.oauth)
        if self.enabled is not None:
            result["enabled"] = self.enabled
        if self.timeout is not None:
            result["timeout"] = self.timeout
        result.update(_sorted_mapping(self.extra))
        return result


@dataclass
class Config:
    """In-memory form of ``opencode.json``."""

    schema: str = SCHEMA_URL
    providers: Dict[str, Provider] = field(default_factory=dict)
    model: str = ""
    small_model: str = ""
    enabled_providers: List[str] = field(default_factory=list)
    disabled_providers: List[str] = field(default_factory=list)
    mcp: Dict[str, MCPServer] = field(default_factory=dict)
    extra: Dict[str, Any] = field(default_factory=dict)

    FIELDS = ("$schema", "provider", "model", "small_model", "enabled_providers", "disabled_providers", "mcp")

    @classmethod
    def from_dict(cls, data: dict) -> "Config":
        """Create a Config from a parsed JSON document, defaulting absent maps."""
        data = _require_mapping(data, "config")
        providers = _require_mapping(data.get("provider"), "provider")
        servers = _require_mapping(data.get("mcp"), "mcp")
        return cls(
            schema=data.get("$schema") or SCHEMA_URL,
            providers={key: Provider.from_dict(value) for key, value in providers.items()},
            model=_require_string(data.get("model"), "model"),
            small_model=_require_string(data.get("small_model"), "small_model"),
            enabled_providers=list(data.get("enabled_providers") or []),
            disabled_providers=list(data.get("disabled_providers") or []),
            mcp={name: MCPServer.from_dict(value) for name, value in servers.items()},
            extra=_extra(data, cls.FIELDS),
        )

    def to_dict(self) -> dict:
        """Convert to the on-disk document, omitting empty optional fields."""
        result: Dict[str, Any] = {
            "$schema": self.schema,
            "provider": {key: self.providers[key].to_dict() for key in sorted(self.providers)},
        }
        if self.model:
            result["model"] = self.model
        if self.small_model:
            result["small_model"] = self.small_model
        if self.enabled_providers:
            result["enabled_providers"] = list(self.enabled_providers)
        if self.disabled_providers:
            result["disabled_providers"] = list(self.disabled_providers)
        if self.mcp:
            result["mcp"] = {name: self.mcp[name].to_dict() for name in sorted(self.mcp)}
        result.update(_sorted_mapping(self.extra))
        return result


def get_config_path() -> Path:
    """$OPENCODE_WIZARD_CONFIG, else $XDG_CONFIG_HOME/opencode/opencode.json (~/.config by default)."""
    override = os.environ.get(CONFIG_PATH_ENV)
    if override:
        return Path(override).expanduser()
    xdg_config = os.environ.get("XDG_CONFIG_HOME") or os.path.expanduser("~/.config")
    return Path(xdg_config) / "opencode" / "opencode.json"


def dump_config(config: Config) -> str:
    return json.dumps(config.to_dict(), indent=2, ensure_ascii=False) + "\n"


def load_config(path: Path) -> Config:
    """Load ``path``; a missing file yields a fresh config and is not created."""
    path = Path(path)
    try:
        with open(path, "r", encoding="utf-8") as file_obj:
            raw = file_obj.read()
    except FileNotFoundError:
        log.debug("No config at %s, starting from an empty one", path)
        return Config()
    except OSError as exc:
        raise ConfigReadError(f"Failed to read config {path}: {exc}") from exc

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise MalformedConfigError(f"Failed to parse config {path}: {exc}") from exc

    try:
        config = Config.from_dict(data)
    except (TypeError, ValueError) as exc:
        raise MalformedConfigError(f"Unexpected content in config {path}: {exc}") from exc
    log.debug("Loaded %d provider(s) and %d MCP server(s) from %s", len(config.providers), len(config.mcp), path)
    return config


def save_config(config: Config, path: Path) -> None:
    """Atomically replace ``path`` with the serialized config.

    A symlinked ``path`` is written through: the link stays and its target is replaced.
    """
    path = Path(path)
    target = Path(os.path.realpath(path))
    text = dump_config(config)
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(prefix=f".{target.name}.", suffix=".tmp", dir=str(target.parent))
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as file_obj:
                file_obj.write(text)
            os.chmod(tmp, 0o600)
            os.replace(tmp, target)
        finally:
            if os.path.exists(tmp):
                os.remove(tmp)
    except OSError as exc:
        raise ConfigWriteError(f"Failed to save config {path}: {exc}") from exc
    log.info("Saved config to %s", path)


class ConfigManager:
    """Binds the config file location to load/save."""

    def __init__(self, path: Optional[Path] = None):
        self.config_file = Path(path) if path else get_config_path()

    def exists(self) -> bool:
        return self.config_file.exists()

    def load_config(self) -> Config:
        return load_config(self.config_file)

    def save_config(self, config: Config) -> None:
        save_config(config, self.config_file)
