"""
Log Entry Data Structures for AI Project Tracker.

Structured entries for dispatched tool calls and session lifecycle events.
"""

import json
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from typing import Any


@dataclass
class ToolCallLogEntry:
    """Log entry for one dispatched tool call."""

    # Identity
    timestamp: str  # ISO 8601
    call_id: str  # UUID
    tool: str  # "start_project", "complete_step", ...

    # Context
    session_id: str = ""
    step_id: str = ""

    # Outcome
    success: bool = False
    error: str | None = None
    error_type: str | None = None

    # Metrics
    latency_ms: int = 0

    def to_json(self) -> str:
        """Serialize to JSON string."""
        return json.dumps(asdict(self), default=str)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ToolCallLogEntry":
        """Create from dictionary."""
        return cls(**{k: v for k, v in data.items() if k in cls.__dataclass_fields__})


@dataclass
class SessionLogEntry:
    """Log entry for session and step lifecycle events."""

    timestamp: str  # ISO 8601
    session_id: str
    event_type: str  # "project_start", "step_start", "step_complete", "project_complete"

    # Event-specific fields
    project_name: str = ""
    step_id: str = ""
    step_number: int = 0
    step_type: str = ""
    status: str = ""
    duration_ms: int = 0

    error: str | None = None

    def to_json(self) -> str:
        """Serialize to JSON string."""
        return json.dumps(asdict(self), default=str)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SessionLogEntry":
        """Create from dictionary."""
        return cls(**{k: v for k, v in data.items() if k in cls.__dataclass_fields__})


def now_iso() -> str:
    """Get current UTC time as ISO 8601 string."""
    return datetime.now(timezone.utc).isoformat()
