"""Global app configuration (narrative backend connection, session defaults)."""

import json
from pathlib import Path
from typing import Any

from .core import data_dir

_CONFIG_DEFAULTS: dict[str, Any] = {
    "llm_connection": {
        "provider_url": "",
        "api_key": "",
        "provider_format": "koboldcpp",
        "model": "",
        "timeout": 120.0,
    },
    "default_theme": "Classic D&D",
    "default_difficulty": "Medium",
    "default_session_minutes": 30,
}

_SCALAR_KEYS = ("default_theme", "default_difficulty", "default_session_minutes")


def _config_path() -> Path:
    return data_dir() / "config.json"


def get_config() -> dict[str, Any]:
    """Read config, returning defaults merged with stored values."""
    config: dict[str, Any] = json.loads(json.dumps(_CONFIG_DEFAULTS))
    path = _config_path()
    if path.is_file():
        stored = json.loads(path.read_text())
        if isinstance(stored.get("llm_connection"), dict):
            config["llm_connection"].update(stored["llm_connection"])
        for key in _SCALAR_KEYS:
            if key in stored:
                config[key] = stored[key]
    return config


def update_config(fields: dict[str, Any]) -> dict[str, Any]:
    """Merge fields into config and persist. Returns full config.

    llm_connection is merged key-by-key; scalars are overwritten; unknown
    keys are ignored.
    """
    config = get_config()
    if isinstance(fields.get("llm_connection"), dict):
        config["llm_connection"].update(fields["llm_connection"])
    for key in _SCALAR_KEYS:
        if key in fields:
            config[key] = fields[key]
    _config_path().write_text(json.dumps(config, indent=2))
    return config
