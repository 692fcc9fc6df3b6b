"""
AI Project Tracker Persistence Layer

SQLite-backed store for sessions, steps, step details, metrics,
insights and timeline events.
"""

from aitracker.persistence.models import (
    AIInsight,
    Complexity,
    DetailType,
    EventType,
    InsightType,
    OverallStatus,
    ProjectMetrics,
    ProjectReport,
    ProjectSession,
    ProjectStep,
    ProjectSummary,
    SessionStatus,
    Severity,
    StepDetail,
    StepStatus,
    StepType,
    TimelineEvent,
)
from aitracker.persistence.repository import TrackerRepository

__all__ = [
    # Enums
    "SessionStatus",
    "StepStatus",
    "StepType",
    "DetailType",
    "Severity",
    "Complexity",
    "InsightType",
    "EventType",
    "OverallStatus",
    # Core entities
    "ProjectSession",
    "ProjectStep",
    "StepDetail",
    "ProjectMetrics",
    "AIInsight",
    "TimelineEvent",
    # Derived views
    "ProjectSummary",
    "ProjectReport",
    # Repository
    "TrackerRepository",
]
