"""Persistent JSON config helpers.

Stores the hidden-file preference and explorer display settings.
Malformed or missing config falls back to defaults.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path

from platformdirs import user_config_dir, user_state_dir

APP_NAME = "lazyexplorer"
CONFIG_FILENAME = "config.json"
EXPAND_STATE_FILENAME = "expanded.json"
DEFAULT_CONFIG_PATH = Path(user_config_dir(APP_NAME, appauthor=False)) / CONFIG_FILENAME
DEFAULT_EXPAND_STATE_PATH = Path(user_state_dir(APP_NAME, appauthor=False)) / EXPAND_STATE_FILENAME
CONFIG_PATH = DEFAULT_CONFIG_PATH

KNOWN_COLUMNS = (
    "selection",
    "clip",
    "git",
    "modified_buffer",
    "size",
    "modified",
    "created",
    "filetype",
)
DEFAULT_COLUMNS = ("selection", "clip", "git", "modified_buffer", "size")


@dataclass(frozen=True)
class ExplorerSettings:
    """Display and behaviour settings read once per session."""

    show_hidden: bool = False
    auto_expand_single_directory: bool = False
    show_git_status: bool = True
    root_expanded: bool = True
    columns: tuple[str, ...] = DEFAULT_COLUMNS
    buffer_debounce: float = 0.5
    auto_reveal: bool = True
    reveal_throttle: float = 0.2


def load_config(path: Path | None = None) -> dict[str, object]:
    """Load the persisted JSON config object.

    Returns an empty dict when the file is missing, unreadable, malformed, or
    does not decode to a top-level JSON object.
    """
    config_path = path if path is not None else CONFIG_PATH
    try:
        data = json.loads(config_path.read_text(encoding="utf-8"))
    except Exception:
        return {}
    return data if isinstance(data, dict) else {}


def save_config(data: dict[str, object], path: Path | None = None) -> None:
    """Persist config data as pretty-printed JSON.

    Any filesystem/serialization error is ignored to keep runtime behavior
    non-fatal when config cannot be written.
    """
    config_path = path if path is not None else CONFIG_PATH
    try:
        config_path.parent.mkdir(parents=True, exist_ok=True)
        config_path.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
    except Exception:
        pass


def _load_bool(data: dict[str, object], key: str, default: bool) -> bool:
    value = data.get(key)
    return value if isinstance(value, bool) else default


def _load_positive_float(data: dict[str, object], key: str, default: float) -> float:
    value = data.get(key)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return default
    if value < 0:
        return default
    return float(value)


def _load_columns(data: dict[str, object]) -> tuple[str, ...]:
    """Keep known column names in configured order; fall back when unusable."""
    value = data.get("columns")
    if not isinstance(value, list):
        return DEFAULT_COLUMNS
    columns: list[str] = []
    for item in value:
        if isinstance(item, str) and item in KNOWN_COLUMNS and item not in columns:
            columns.append(item)
    return tuple(columns)


def load_show_hidden(path: Path | None = None) -> bool:
    """Return persisted hidden-file visibility preference.

    Only explicit boolean values are accepted; any other type falls back to
    ``False``.
    """
    return _load_bool(load_config(path), "show_hidden", False)


def save_show_hidden(show_hidden: bool, path: Path | None = None) -> None:
    """Persist hidden-file visibility preference as a boolean."""
    config = load_config(path)
    config["show_hidden"] = bool(show_hidden)
    save_config(config, path)


def load_explorer_settings(path: Path | None = None) -> ExplorerSettings:
    """Build ``ExplorerSettings`` from config, defaulting each invalid field."""
    data = load_config(path)
    defaults = ExplorerSettings()
    return ExplorerSettings(
        show_hidden=_load_bool(data, "show_hidden", defaults.show_hidden),
        auto_expand_single_directory=_load_bool(
            data,
            "auto_expand_single_directory",
            defaults.auto_expand_single_directory,
        ),
        show_git_status=_load_bool(data, "show_git_status", defaults.show_git_status),
        root_expanded=_load_bool(data, "root_expanded", defaults.root_expanded),
        columns=_load_columns(data),
        buffer_debounce=_load_positive_float(data, "buffer_debounce", defaults.buffer_debounce),
        auto_reveal=_load_bool(data, "auto_reveal", defaults.auto_reveal),
        reveal_throttle=_load_positive_float(data, "reveal_throttle", defaults.reveal_throttle),
    )
