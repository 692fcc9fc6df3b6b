"""
Logging Configuration for AI Project Tracker.

Defines paths, rotation settings and log levels.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path


@dataclass
class LogConfig:
    """Configuration for the tracker logging system."""

    # Paths
    log_dir: Path = field(default_factory=lambda: Path.home() / ".aitracker" / "logs")

    # File settings
    max_file_size_bytes: int = 10 * 1024 * 1024  # 10MB
    backup_count: int = 5

    # Log levels: DEBUG, INFO, WARNING, ERROR
    tool_level: str = "INFO"
    session_level: str = "INFO"

    # Console output goes to stderr; stdout belongs to the MCP transport
    console_level: str = "WARNING"

    @classmethod
    def from_env(cls) -> "LogConfig":
        """Load config from environment variables with defaults."""
        config = cls()

        if level := os.environ.get("AITRACKER_LOG_LEVEL"):
            config.tool_level = level
            config.session_level = level
            config.console_level = level

        if log_dir := os.environ.get("AITRACKER_LOG_DIR"):
            config.log_dir = Path(log_dir)

        # In MB
        if max_size := os.environ.get("AITRACKER_LOG_MAX_SIZE_MB"):
            try:
                config.max_file_size_bytes = int(max_size) * 1024 * 1024
            except ValueError:
                pass

        return config

    def ensure_log_dir(self) -> None:
        """Create log directory if it doesn't exist."""
        self.log_dir.mkdir(parents=True, exist_ok=True)

    @property
    def tool_log_path(self) -> Path:
        """Path to the dispatched tool call log."""
        return self.log_dir / "tool_calls.jsonl"

    @property
    def session_log_path(self) -> Path:
        """Path to session lifecycle log."""
        return self.log_dir / "session.jsonl"


_config: LogConfig | None = None


def get_config() -> LogConfig:
    """Get the global log config, initializing from env if needed."""
    global _config
    if _config is None:
        _config = LogConfig.from_env()
        _config.ensure_log_dir()
    return _config


def set_config(config: LogConfig) -> None:
    """Set a custom log config (useful for testing)."""
    global _config
    _config = config
    _config.ensure_log_dir()
