"""
AI Project Tracker - Configuration Management

Handles loading config.json and environment overrides.
Configuration is stored in ~/.config/aitracker/config.json
"""

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from aitracker.exceptions import ConfigError


# Configuration paths
CONFIG_DIR = Path.home() / ".config" / "aitracker"
CONFIG_FILE = CONFIG_DIR / "config.json"
DEFAULT_DB_PATH = CONFIG_DIR / "tracker.db"

DEFAULT_AI_MODEL = "Claude-3.5"
DEFAULT_CONFIDENCE = 85
DEFAULT_SESSION_LIST_LIMIT = 10


@dataclass
class TrackerConfig:
    """Main configuration container for the tracker."""

    db_path: Path = field(default_factory=lambda: DEFAULT_DB_PATH)
    default_ai_model: str = DEFAULT_AI_MODEL
    default_confidence: int = DEFAULT_CONFIDENCE
    session_list_limit: int = DEFAULT_SESSION_LIST_LIMIT

    def __post_init__(self) -> None:
        # Expand ~ in path
        self.db_path = Path(self.db_path).expanduser()

        if not 0 <= self.default_confidence <= 100:
            raise ConfigError(
                "default_confidence must be between 0 and 100",
                {"default_confidence": self.default_confidence},
            )
        if self.session_list_limit < 1:
            raise ConfigError(
                "session_list_limit must be positive",
                {"session_list_limit": self.session_list_limit},
            )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "db_path": str(self.db_path),
            "default_ai_model": self.default_ai_model,
            "default_confidence": self.default_confidence,
            "session_list_limit": self.session_list_limit,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TrackerConfig":
        """Create TrackerConfig from dictionary."""
        try:
            return cls(
                db_path=Path(data.get("db_path", DEFAULT_DB_PATH)),
                default_ai_model=str(data.get("default_ai_model", DEFAULT_AI_MODEL)),
                default_confidence=int(data.get("default_confidence", DEFAULT_CONFIDENCE)),
                session_list_limit=int(data.get("session_list_limit", DEFAULT_SESSION_LIST_LIMIT)),
            )
        except (TypeError, ValueError) as e:
            raise ConfigError("Invalid value in tracker config", {"error": str(e)})


def get_config_path() -> Path:
    """Get config file path, honouring AITRACKER_CONFIG."""
    if override := os.environ.get("AITRACKER_CONFIG"):
        return Path(override).expanduser()
    return CONFIG_FILE


def load_config(path: Path | None = None) -> TrackerConfig:
    """
    Load configuration from file and environment.

    Args:
        path: Explicit config file. Defaults to get_config_path().

    Returns:
        TrackerConfig with all settings loaded

    Raises:
        ConfigError: If configuration is invalid
    """
    config_path = path or get_config_path()
    data: dict[str, Any] = {}

    if config_path.exists():
        try:
            with open(config_path) as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigError(
                f"Invalid JSON in {config_path}",
                {"error": str(e)},
            )
        if not isinstance(data, dict):
            raise ConfigError(
                f"Config file {config_path} must contain a JSON object",
                {"type": type(data).__name__},
            )

    # Environment wins over the file
    if db_path := os.environ.get("AITRACKER_DB_PATH"):
        data["db_path"] = db_path
    if ai_model := os.environ.get("AITRACKER_AI_MODEL"):
        data["default_ai_model"] = ai_model

    return TrackerConfig.from_dict(data)


def save_config(config: TrackerConfig, path: Path | None = None) -> None:
    """
    Save configuration to file.

    Args:
        config: TrackerConfig to save
        path: Target file. Defaults to get_config_path().
    """
    config_path = path or get_config_path()
    config_path.parent.mkdir(parents=True, exist_ok=True)

    with open(config_path, "w") as f:
        json.dump(config.to_dict(), f, indent=2)
