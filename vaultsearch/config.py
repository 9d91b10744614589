"""Settings resolution and the persisted JSON config.

Values come from CLI flags, then the environment (``VAULT_PATH``, ``EDITOR``),
then the JSON config file, then built-in defaults. All config access is
defensive: a malformed or missing file falls back to an empty mapping.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path

from platformdirs import user_config_dir

APP_NAME = "vaultsearch"
CONFIG_FILENAME = "config.json"
CONFIG_PATH = Path(user_config_dir(APP_NAME, appauthor=False)) / CONFIG_FILENAME

DEFAULT_VAULT_PATH = "./vault"
DEFAULT_EDITOR = "vim"
DEFAULT_STYLE = "monokai"
DOCUMENT_GLOB = "*.md"


@dataclass(frozen=True)
class Settings:
    vault_path: Path
    editor: str
    style: str = DEFAULT_STYLE
    no_color: bool = False
    document_glob: str = DOCUMENT_GLOB


def load_config() -> dict[str, object]:
    """Load the persisted JSON config object.

    Returns an empty dict when the file is missing, unreadable, malformed, or
    does not decode to a top-level JSON object.
    """
    try:
        data = json.loads(CONFIG_PATH.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        return {}
    return data if isinstance(data, dict) else {}


def save_config(data: dict[str, object]) -> None:
    """Persist config data as pretty-printed JSON.

    Filesystem errors are ignored so a read-only config dir never breaks the
    tool.
    """
    try:
        CONFIG_PATH.parent.mkdir(parents=True, exist_ok=True)
        CONFIG_PATH.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
    except OSError:
        pass


def _config_str(config: dict[str, object], key: str) -> str | None:
    """Return a stripped non-empty string config value, else ``None``."""
    value = config.get(key)
    if not isinstance(value, str):
        return None
    stripped = value.strip()
    return stripped if stripped else None


def _env_str(name: str) -> str | None:
    value = os.environ.get(name, "").strip()
    return value or None


def resolve_settings(
    vault_path: str | None = None,
    editor: str | None = None,
    style: str | None = None,
    no_color: bool = False,
) -> Settings:
    """Combine CLI values, environment, config file, and defaults."""
    config = load_config()
    resolved_vault = (
        vault_path
        or _env_str("VAULT_PATH")
        or _config_str(config, "vault_path")
        or DEFAULT_VAULT_PATH
    )
    resolved_editor = editor or _env_str("EDITOR") or _config_str(config, "editor") or DEFAULT_EDITOR
    resolved_style = style or _config_str(config, "style") or DEFAULT_STYLE
    return Settings(
        vault_path=Path(resolved_vault).expanduser(),
        editor=resolved_editor,
        style=resolved_style,
        no_color=bool(no_color),
    )


def save_defaults(
    vault_path: str | None = None,
    editor: str | None = None,
    style: str | None = None,
) -> dict[str, object]:
    """Persist non-empty defaults and return the updated config."""
    config = load_config()
    for key, value in (("vault_path", vault_path), ("editor", editor), ("style", style)):
        if value is None:
            continue
        stripped = str(value).strip()
        if stripped:
            config[key] = stripped
    save_config(config)
    return config
