"""
AI Project Tracker - record what an AI agent does, then summarize it.

Agents open a project session, record the steps they perform, attach
metrics, insights and timeline events, and request a computed report.
Exposed over MCP (stdio) and a small CLI.
"""

__version__ = "0.1.0"

from aitracker.exceptions import (
    ConfigError,
    SessionNotFoundError,
    StateTransitionError,
    StepNotFoundError,
    TrackerError,
)

__all__ = [
    "__version__",
    "TrackerError",
    "ConfigError",
    "SessionNotFoundError",
    "StepNotFoundError",
    "StateTransitionError",
]
