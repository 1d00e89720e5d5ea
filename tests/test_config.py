import json
import os
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from opencode_wizard.config import (
    SCHEMA_URL,
    Config,
    ConfigManager,
    ConfigReadError,
    ConfigWriteError,
    MalformedConfigError,
    MCPServer,
    Model,
    ModelLimit,
    Provider,
    get_config_path,
    load_config,
    save_config,
)

SAMPLE = {
    "$schema": "https://opencode.ai/config.json",
    "provider": {
        "ollama": {
            "npm": "@ai-sdk/openai-compatible",
            "name": "Ollama",
            "options": {
                "apiKey": "secret-key",
                "baseURL": "http://localhost:11434/v1",
                "headers": {"X-Team": "core"},
            },
            "models": {
                "qwen3-coder": {
                    "name": "Qwen3 Coder",
                    "id": "qwen3-coder:30b",
                    "limit": {"context": 128000, "output": 65536},
                },
            },
        },
    },
    "model": "ollama/qwen3-coder",
    "small_model": "ollama/qwen3-coder",
    "enabled_providers": ["ollama"],
    "disabled_providers": ["openai"],
    "mcp": {
        "docs": {
            "type": "remote",
            "url": "https://mcp.example.com/mcp",
            "headers": {"Authorization": "Bearer token"},
            "oauth": {"clientId": "abc"},
            "enabled": False,
            "timeout": 8000,
        },
        "everything": {
            "type": "local",
            "command": ["npx", "-y", "@modelcontextprotocol/server-everything"],
            "environment": {"DEBUG": "1"},
        },
    },
    "theme": "opencode",
}


class ConfigStoreTests(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.tmp_dir = Path(self._tmp.name)
        self.path = self.tmp_dir / "opencode" / "opencode.json"

    def tearDown(self):
        self._tmp.cleanup()

    def write_sample(self, data=SAMPLE):
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(data), encoding="utf-8")

    def test_missing_file_yields_empty_config_without_creating_it(self):
        config = load_config(self.path)

        self.assertEqual(config.schema, SCHEMA_URL)
        self.assertEqual(config.providers, {})
        self.assertEqual(config.mcp, {})
        self.assertFalse(self.path.exists())
        self.assertFalse(self.path.parent.exists())

    def test_absent_and_null_collections_become_empty_maps(self):
        self.write_sample({"$schema": SCHEMA_URL, "provider": None})

        config = load_config(self.path)

        self.assertEqual(config.providers, {})
        self.assertEqual(config.mcp, {})

    def test_load_parses_entities(self):
        self.write_sample()

        config = load_config(self.path)

        provider = config.providers["ollama"]
        self.assertEqual(provider.base_url, "http://localhost:11434/v1")
        self.assertEqual(provider.headers, {"X-Team": "core"})
        model = provider.models["qwen3-coder"]
        self.assertEqual(model.id, "qwen3-coder:30b")
        self.assertEqual(model.limit, ModelLimit(context=128000, output=65536))
        self.assertFalse(config.mcp["docs"].is_enabled)
        self.assertTrue(config.mcp["everything"].is_enabled)
        self.assertEqual(config.mcp["docs"].timeout, 8000)

    def test_round_trip_preserves_document_and_is_idempotent(self):
        self.write_sample()

        save_config(load_config(self.path), self.path)
        first = self.path.read_text(encoding="utf-8")
        save_config(load_config(self.path), self.path)
        second = self.path.read_text(encoding="utf-8")

        self.assertEqual(first, second)
        self.assertEqual(json.loads(first), SAMPLE)

    def test_save_uses_two_space_indent_and_fixed_field_order(self):
        config = Config(providers={"b": Provider(name="B"), "a": Provider(name="A")})

        save_config(config, self.path)
        text = self.path.read_text(encoding="utf-8")

        self.assertTrue(text.startswith('{\n  "$schema": "https://opencode.ai/config.json",\n  "provider": {'))
        self.assertLess(text.index('"a"'), text.index('"b"'))
        self.assertLess(text.index('"npm"'), text.index('"name"'))
        self.assertTrue(text.endswith("}\n"))

    def test_save_omits_empty_optional_fields(self):
        config = Config()
        config.providers["p"] = Provider(name="P", options={"baseURL": "http://x"})
        config.providers["p"].models["m"] = Model(name="M")
        config.mcp["s"] = MCPServer(type="local", command=["npx"])

        save_config(config, self.path)
        data = json.loads(self.path.read_text(encoding="utf-8"))

        self.assertNotIn("model", data)
        self.assertNotIn("small_model", data)
        self.assertNotIn("enabled_providers", data)
        self.assertEqual(data["provider"]["p"]["models"]["m"], {"name": "M"})
        self.assertEqual(data["mcp"]["s"], {"type": "local", "command": ["npx"]})

    def test_empty_config_still_writes_provider_map_and_reloads(self):
        save_config(Config(), self.path)
        data = json.loads(self.path.read_text(encoding="utf-8"))

        self.assertEqual(data, {"$schema": SCHEMA_URL, "provider": {}})
        self.assertEqual(load_config(self.path).providers, {})

    def test_unknown_limit_keys_survive_round_trip(self):
        limit = {"context": 1000, "output": 10, "input": 900}
        self.write_sample({"provider": {"p": {"name": "P", "models": {"m": {"name": "M", "limit": limit}}}}})

        save_config(load_config(self.path), self.path)
        data = json.loads(self.path.read_text(encoding="utf-8"))

        self.assertEqual(data["provider"]["p"]["models"]["m"]["limit"], limit)

    def test_options_only_provider_is_saved_unchanged(self):
        self.write_sample({"$schema": SCHEMA_URL, "provider": {"anthropic": {"options": {"apiKey": "k"}}}})

        save_config(load_config(self.path), self.path)
        data = json.loads(self.path.read_text(encoding="utf-8"))

        self.assertEqual(data["provider"], {"anthropic": {"options": {"apiKey": "k"}}})

    def test_non_string_default_model_raises_malformed_error(self):
        for key in ("model", "small_model"):
            with self.subTest(key=key):
                self.write_sample({"provider": {}, key: ["ollama/qwen3-coder"]})

                with self.assertRaises(MalformedConfigError):
                    load_config(self.path)

    @unittest.skipIf(not hasattr(os, "symlink"), "symlinks not supported")
    def test_save_writes_through_symlink(self):
        dotfile = self.tmp_dir / "dotfiles" / "opencode.json"
        dotfile.parent.mkdir()
        dotfile.write_text(json.dumps({"provider": {}}), encoding="utf-8")
        self.path.parent.mkdir(parents=True)
        os.symlink(dotfile, self.path)

        config = load_config(self.path)
        config.model = "a/b"
        save_config(config, self.path)

        self.assertTrue(self.path.is_symlink())
        self.assertEqual(json.loads(dotfile.read_text(encoding="utf-8"))["model"], "a/b")
        self.assertEqual(os.listdir(dotfile.parent), ["opencode.json"])

    def test_invalid_json_raises_malformed_error(self):
        self.path.parent.mkdir(parents=True)
        self.path.write_text("{not json", encoding="utf-8")

        with self.assertRaises(MalformedConfigError):
            load_config(self.path)

    def test_wrong_document_shape_raises_malformed_error(self):
        self.write_sample({"provider": ["not", "a", "map"]})

        with self.assertRaises(MalformedConfigError):
            load_config(self.path)

    def test_unreadable_path_raises_read_error(self):
        self.path.mkdir(parents=True)

        with self.assertRaises(ConfigReadError):
            load_config(self.path)

    def test_write_failure_raises_write_error(self):
        self.path.mkdir(parents=True)

        with self.assertRaises(ConfigWriteError):
            save_config(Config(), self.path)

    def test_save_replaces_file_without_leaving_temp_files(self):
        self.write_sample()

        save_config(Config(), self.path)

        self.assertEqual(os.listdir(self.path.parent), ["opencode.json"])


class ConfigPathTests(unittest.TestCase):
    def test_override_env_wins(self):
        with patch.dict(os.environ, {"OPENCODE_WIZARD_CONFIG": "/tmp/custom.json", "XDG_CONFIG_HOME": "/xdg"}):
            self.assertEqual(get_config_path(), Path("/tmp/custom.json"))

    def test_xdg_config_home_is_used(self):
        env = {"XDG_CONFIG_HOME": "/xdg"}
        with patch.dict(os.environ, env):
            os.environ.pop("OPENCODE_WIZARD_CONFIG", None)
            self.assertEqual(get_config_path(), Path("/xdg/opencode/opencode.json"))

    def test_manager_uses_explicit_path(self):
        manager = ConfigManager(Path("/somewhere/opencode.json"))
        self.assertEqual(manager.config_file, Path("/somewhere/opencode.json"))


if __name__ == "__main__":
    unittest.main()
