"""Tests for config module."""

import json
from pathlib import Path

import pytest

from aitracker.config import (
    DEFAULT_AI_MODEL,
    DEFAULT_CONFIDENCE,
    DEFAULT_DB_PATH,
    TrackerConfig,
    get_config_path,
    load_config,
    save_config,
)
from aitracker.exceptions import ConfigError


class TestTrackerConfig:
    """Tests for TrackerConfig dataclass."""

    def test_defaults(self):
        config = TrackerConfig()
        assert config.db_path == DEFAULT_DB_PATH
        assert config.default_ai_model == DEFAULT_AI_MODEL == "Claude-3.5"
        assert config.default_confidence == DEFAULT_CONFIDENCE == 85
        assert config.session_list_limit == 10

    def test_db_path_expansion(self):
        """Test that ~ is expanded in db_path."""
        config = TrackerConfig(db_path=Path("~/tracker.db"))
        assert not str(config.db_path).startswith("~")

    def test_invalid_confidence(self):
        with pytest.raises(ConfigError):
            TrackerConfig(default_confidence=101)

    def test_invalid_limit(self):
        with pytest.raises(ConfigError):
            TrackerConfig(session_list_limit=0)

    def test_to_dict_from_dict(self):
        config = TrackerConfig(db_path=Path("/tmp/x.db"), default_ai_model="gpt", default_confidence=70)
        restored = TrackerConfig.from_dict(config.to_dict())
        assert restored == config

    def test_from_dict_bad_value(self):
        """Non-numeric values are reported as ConfigError."""
        with pytest.raises(ConfigError):
            TrackerConfig.from_dict({"default_confidence": "high"})


class TestLoadConfig:
    """Tests for load_config / save_config."""

    def test_missing_file_gives_defaults(self, tmp_path):
        config = load_config(tmp_path / "nope.json")
        assert config == TrackerConfig()

    def test_load_from_file(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"default_ai_model": "gpt-4o", "session_list_limit": 3}))
        config = load_config(path)
        assert config.default_ai_model == "gpt-4o"
        assert config.session_list_limit == 3

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text("{not json")
        with pytest.raises(ConfigError):
            load_config(path)

    def test_non_object_json(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text("[1, 2]")
        with pytest.raises(ConfigError):
            load_config(path)

    def test_env_overrides_file(self, tmp_path, monkeypatch):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"default_ai_model": "from-file"}))
        monkeypatch.setenv("AITRACKER_AI_MODEL", "from-env")
        monkeypatch.setenv("AITRACKER_DB_PATH", str(tmp_path / "env.db"))

        config = load_config(path)
        assert config.default_ai_model == "from-env"
        assert config.db_path == tmp_path / "env.db"

    def test_save_then_load(self, tmp_path):
        path = tmp_path / "nested" / "config.json"
        config = TrackerConfig(db_path=tmp_path / "t.db", default_confidence=60)
        save_config(config, path)
        assert load_config(path) == config

    def test_config_path_env(self, tmp_path, monkeypatch):
        monkeypatch.setenv("AITRACKER_CONFIG", str(tmp_path / "custom.json"))
        assert get_config_path() == tmp_path / "custom.json"
