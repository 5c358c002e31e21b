"""Tests for config storage: defaults and partial merges."""

import json

from construct_engine import storage


def test_get_config_empty():
    """Returns defaults when no config file exists."""
    config = storage.get_config()
    assert config["llm_connection"]["provider_url"] == ""
    assert config["llm_connection"]["provider_format"] == "koboldcpp"
    assert config["default_theme"] == "Classic D&D"
    assert config["default_difficulty"] == "Medium"
    assert config["default_session_minutes"] == 30


def test_update_scalar_persists():
    result = storage.update_config({"default_theme": "Star Wars"})
    assert result["default_theme"] == "Star Wars"
    assert storage.get_config()["default_theme"] == "Star Wars"


def test_update_connection_merges_keys():
    """Partial llm_connection update preserves the other connection keys."""
    storage.update_config({"llm_connection": {"provider_url": "http://localhost:5001"}})
    storage.update_config({"llm_connection": {"api_key": "secret"}})

    conn = storage.get_config()["llm_connection"]
    assert conn["provider_url"] == "http://localhost:5001"
    assert conn["api_key"] == "secret"
    assert conn["timeout"] == 120.0


def test_unknown_keys_ignored():
    result = storage.update_config({"font_settings": {"size": 12}})
    assert "font_settings" not in result


def test_defaults_not_mutated_between_calls():
    config = storage.get_config()
    config["llm_connection"]["provider_url"] = "changed"
    assert storage.get_config()["llm_connection"]["provider_url"] == ""


def test_partial_file_merged_with_defaults():
    """A stored file missing keys still yields a full config."""
    (storage.data_dir() / "config.json").write_text(json.dumps({"default_session_minutes": 90}))
    config = storage.get_config()
    assert config["default_session_minutes"] == 90
    assert config["default_difficulty"] == "Medium"
    assert config["llm_connection"]["model"] == ""
