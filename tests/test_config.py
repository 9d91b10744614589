from __future__ import annotations

import json
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from vaultsearch import config


class ConfigBehaviorTests(unittest.TestCase):
    def test_flags_override_env_and_config(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            config_path = Path(tmp) / "config.json"
            config_path.write_text(json.dumps({"vault_path": "/cfg", "editor": "nano", "style": "friendly"}))
            with mock.patch("vaultsearch.config.CONFIG_PATH", config_path), mock.patch.dict(
                "vaultsearch.config.os.environ", {"VAULT_PATH": "/env", "EDITOR": "emacs"}, clear=True
            ):
                settings = config.resolve_settings(vault_path="/flag", editor="code --wait")
                env_settings = config.resolve_settings()

        self.assertEqual(settings.vault_path, Path("/flag"))
        self.assertEqual(settings.editor, "code --wait")
        self.assertEqual(settings.style, "friendly")
        self.assertEqual(env_settings.vault_path, Path("/env"))
        self.assertEqual(env_settings.editor, "emacs")

    def test_config_file_then_defaults(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            config_path = Path(tmp) / "config.json"
            with mock.patch("vaultsearch.config.CONFIG_PATH", config_path), mock.patch.dict(
                "vaultsearch.config.os.environ", {}, clear=True
            ):
                defaults = config.resolve_settings()
                config_path.write_text(json.dumps({"vault_path": "/cfg", "editor": "  "}))
                from_file = config.resolve_settings()

        self.assertEqual(defaults.vault_path, Path(config.DEFAULT_VAULT_PATH))
        self.assertEqual(defaults.editor, config.DEFAULT_EDITOR)
        self.assertEqual(defaults.style, config.DEFAULT_STYLE)
        self.assertEqual(from_file.vault_path, Path("/cfg"))
        self.assertEqual(from_file.editor, config.DEFAULT_EDITOR)

    def test_malformed_config_is_ignored(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            config_path = Path(tmp) / "config.json"
            config_path.write_text("[1, 2")
            with mock.patch("vaultsearch.config.CONFIG_PATH", config_path):
                self.assertEqual(config.load_config(), {})
                config_path.write_text("[1, 2]")
                self.assertEqual(config.load_config(), {})

    def test_save_defaults_merges_non_empty_values(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            config_path = Path(tmp) / "nested" / "config.json"
            with mock.patch("vaultsearch.config.CONFIG_PATH", config_path):
                config.save_defaults(vault_path="/v", style="friendly")
                saved = config.save_defaults(editor="nvim", style=" ")

        self.assertEqual(saved, {"vault_path": "/v", "style": "friendly", "editor": "nvim"})


if __name__ == "__main__":
    unittest.main()
