"""
Custom Log Handlers for AI Project Tracker.

Size-rotated JSONL file output for structured entries.
"""

import json
import logging
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path


class JSONLRotatingHandler(RotatingFileHandler):
    """
    Rotating file handler that writes one JSON object per line.

    Messages produced by ``entry.to_json()`` are written as-is; anything
    else is wrapped with timestamp, level and logger name.
    """

    def __init__(
        self,
        filename: str | Path,
        max_bytes: int = 10_000_000,
        backup_count: int = 5,
    ):
        filepath = Path(filename)
        filepath.parent.mkdir(parents=True, exist_ok=True)

        super().__init__(
            str(filepath),
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )

    def format(self, record: logging.LogRecord) -> str:
        msg = record.getMessage()
        try:
            data = json.loads(msg)
        except json.JSONDecodeError:
            data = None

        if not isinstance(data, dict):
            data = {
                "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
                "level": record.levelname,
                "message": msg,
                "logger": record.name,
            }
        return json.dumps(data, default=str, ensure_ascii=False)


def create_jsonl_logger(
    name: str,
    filepath: Path,
    level: str = "INFO",
    max_bytes: int = 10_000_000,
    backup_count: int = 5,
) -> logging.Logger:
    """
    Create a logger configured for JSONL output.

    Args:
        name: Logger name
        filepath: Path to log file
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        max_bytes: Max file size before rotation
        backup_count: Number of backup files

    Returns:
        Configured logger
    """
    logger = logging.getLogger(name)
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    # Close and drop handlers from a previous configuration
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    logger.addHandler(
        JSONLRotatingHandler(
            filepath,
            max_bytes=max_bytes,
            backup_count=backup_count,
        )
    )

    # Structured entries stay out of the console
    logger.propagate = False

    return logger
