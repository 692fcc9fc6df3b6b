"""
AI Project Tracker Logging System.

Structured JSONL logging for:
- Dispatched tool calls (name, outcome, latency)
- Session lifecycle events (project and step transitions)

Usage:
    from aitracker.logging import SessionLogEntry, now_iso, session_logger

    entry = SessionLogEntry(
        timestamp=now_iso(),
        session_id=session_id,
        event_type="step_start",
        ...
    )
    session_logger.info(entry.to_json())

Logs are written to ~/.aitracker/logs/:
    - tool_calls.jsonl: dispatched tool calls
    - session.jsonl: session lifecycle events
"""

import threading
from typing import Any

from .config import LogConfig, get_config, set_config
from .entries import SessionLogEntry, ToolCallLogEntry, now_iso
from .handlers import create_jsonl_logger

# Lazy-initialized loggers to avoid creating files before needed
_tool_logger: Any = None
_session_logger: Any = None
_init_lock = threading.Lock()


def _ensure_loggers() -> None:
    """Initialize loggers on first use."""
    global _tool_logger, _session_logger

    if _tool_logger is not None:
        return

    with _init_lock:
        if _tool_logger is not None:
            return

        config = get_config()

        _session_logger = create_jsonl_logger(
            "aitracker.session",
            config.session_log_path,
            level=config.session_level,
            max_bytes=config.max_file_size_bytes,
            backup_count=config.backup_count,
        )

        _tool_logger = create_jsonl_logger(
            "aitracker.tools",
            config.tool_log_path,
            level=config.tool_level,
            max_bytes=config.max_file_size_bytes,
            backup_count=config.backup_count,
        )


def reset_loggers() -> None:
    """Drop initialized loggers so the next use picks up the current config."""
    global _tool_logger, _session_logger

    with _init_lock:
        for logger in (_tool_logger, _session_logger):
            if logger is None:
                continue
            for handler in list(logger.handlers):
                logger.removeHandler(handler)
                handler.close()
        _tool_logger = None
        _session_logger = None


class _LazyLogger:
    """Lazy wrapper that initializes the actual logger on first use."""

    def __init__(self, name: str):
        self._name = name

    def _get_logger(self) -> Any:
        _ensure_loggers()
        if self._name == "tools":
            return _tool_logger
        return _session_logger

    def debug(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._get_logger().debug(msg, *args, **kwargs)

    def info(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._get_logger().info(msg, *args, **kwargs)

    def warning(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._get_logger().warning(msg, *args, **kwargs)

    def error(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._get_logger().error(msg, *args, **kwargs)


# Public logger instances
tool_logger = _LazyLogger("tools")
session_logger = _LazyLogger("session")


__all__ = [
    # Loggers
    "tool_logger",
    "session_logger",
    "reset_loggers",
    # Log entries
    "ToolCallLogEntry",
    "SessionLogEntry",
    # Utilities
    "now_iso",
    # Config
    "LogConfig",
    "get_config",
    "set_config",
]
