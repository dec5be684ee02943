"""Config persistence and typed settings loading."""

from __future__ import annotations

import json
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from lazyexplorer.runtime import config


class ConfigBehaviorTests(unittest.TestCase):
    def test_show_hidden_round_trips_through_default_config_path(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            config_path = Path(tmp) / "nested" / "config.json"
            with mock.patch("lazyexplorer.runtime.config.CONFIG_PATH", config_path):
                self.assertFalse(config.load_show_hidden())
                config.save_show_hidden(True)
                self.assertTrue(config.load_show_hidden())
                self.assertEqual(config.load_config(), {"show_hidden": True})

    def test_malformed_or_non_object_config_loads_empty(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            config_path = Path(tmp) / "config.json"
            config_path.write_text("{not json", encoding="utf-8")
            self.assertEqual(config.load_config(config_path), {})
            config_path.write_text("[1, 2]", encoding="utf-8")
            self.assertEqual(config.load_config(config_path), {})

    def test_save_config_ignores_unwritable_location(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            blocker = Path(tmp) / "file"
            blocker.write_text("", encoding="utf-8")
            config.save_config({"show_hidden": True}, blocker / "config.json")
            self.assertFalse((blocker / "config.json").exists())

    def test_explorer_settings_fall_back_per_field(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            config_path = Path(tmp) / "config.json"
            config_path.write_text(
                json.dumps(
                    {
                        "show_hidden": "yes",
                        "auto_expand_single_directory": True,
                        "show_git_status": False,
                        "columns": ["size", "bogus", "git", "size"],
                        "buffer_debounce": -1,
                        "auto_reveal": False,
                        "reveal_throttle": "fast",
                    }
                ),
                encoding="utf-8",
            )
            settings = config.load_explorer_settings(config_path)

        defaults = config.ExplorerSettings()
        self.assertEqual(settings.show_hidden, defaults.show_hidden)
        self.assertTrue(settings.auto_expand_single_directory)
        self.assertFalse(settings.show_git_status)
        self.assertEqual(settings.columns, ("size", "git"))
        self.assertEqual(settings.buffer_debounce, defaults.buffer_debounce)
        self.assertFalse(settings.auto_reveal)
        self.assertEqual(settings.reveal_throttle, defaults.reveal_throttle)
        self.assertTrue(settings.root_expanded)

    def test_missing_columns_use_defaults(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            settings = config.load_explorer_settings(Path(tmp) / "missing.json")
        self.assertEqual(settings.columns, config.DEFAULT_COLUMNS)
        self.assertEqual(settings, config.ExplorerSettings())


if __name__ == "__main__":
    unittest.main()
