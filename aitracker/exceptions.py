"""
AI Project Tracker - Exception Hierarchy

All tracker-specific exceptions inherit from TrackerError.
Storage failures are sqlite3.Error subclasses and are not wrapped.
"""

from typing import Any


class TrackerError(Exception):
    """Base exception for all tracker errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


# Configuration Errors
class ConfigError(TrackerError):
    """Raised when configuration is invalid or missing."""

    pass


# Lookup Errors
class NotFoundError(TrackerError):
    """Base exception for lookups that require an existing row."""

    pass


class SessionNotFoundError(NotFoundError):
    """Raised when an operation requires a project session that does not exist."""

    def __init__(self, session_id: str):
        super().__init__(f"Project session not found: {session_id}", {"session_id": session_id})
        self.session_id = session_id


class StepNotFoundError(NotFoundError):
    """Raised when an operation requires a step that does not exist."""

    def __init__(self, step_id: str):
        super().__init__(f"Step not found: {step_id}", {"step_id": step_id})
        self.step_id = step_id


# State Errors
class StateTransitionError(TrackerError):
    """Raised when an invalid step transition is attempted.

    Includes the current state and the attempted target state for debugging.
    """

    def __init__(self, message: str, from_state: str, to_state: str):
        super().__init__(message, {"from_state": from_state, "to_state": to_state})
        self.from_state = from_state
        self.to_state = to_state


# Dispatcher Errors
class UnknownToolError(TrackerError):
    """Raised when a call name is not recognized by the dispatcher."""

    def __init__(self, name: str):
        super().__init__(f"Unknown tool: {name}", {"tool": name})
        self.name = name
