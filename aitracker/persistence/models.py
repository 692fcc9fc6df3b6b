"""
AI Project Tracker Persistence Models

Dataclasses that map to SQLite tables for the tracker.
Designed for:
- Type safety with enums and Optional types
- Easy serialization to/from database rows
- JSON field handling for open-ended metadata/input/output payloads
- Sortable UTC timestamps
"""

from __future__ import annotations

import json
import uuid
from dataclasses import dataclass, field, fields, is_dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any


# ============================================================================
# ENUMS - Type-safe status values matching SQL schema
# ============================================================================


class SessionStatus(str, Enum):
    """Project session lifecycle status.

    PAUSED is never set by a tracker operation; it is accepted for rows
    updated directly and for filtering.
    """

    ACTIVE = "active"
    COMPLETED = "completed"
    PAUSED = "paused"
    FAILED = "failed"


class StepStatus(str, Enum):
    """Step lifecycle status."""

    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    FAILED = "failed"
    SKIPPED = "skipped"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STEP_STATUSES


TERMINAL_STEP_STATUSES = frozenset(
    {StepStatus.COMPLETED, StepStatus.FAILED, StepStatus.SKIPPED}
)


class StepType(str, Enum):
    """Kind of work a step represents."""

    ANALYSIS = "analysis"
    FILE_READ = "file_read"
    FILE_WRITE = "file_write"
    CODE_GENERATION = "code_generation"
    DEPENDENCY_INSTALL = "dependency_install"
    COMMAND_EXECUTION = "command_execution"
    TESTING = "testing"
    DEBUGGING = "debugging"
    OPTIMIZATION = "optimization"
    DEPLOYMENT = "deployment"
    DOCUMENTATION = "documentation"
    RESEARCH = "research"
    PLANNING = "planning"
    REVIEW = "review"
    CUSTOM = "custom"


class DetailType(str, Enum):
    """Type of a step detail record."""

    LOG = "log"
    FILE_CHANGE = "file_change"
    COMMAND = "command"
    ERROR = "error"
    NOTE = "note"
    METRIC = "metric"


class Severity(str, Enum):
    """Severity of a step log."""

    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    DEBUG = "debug"


class Complexity(str, Enum):
    """Project complexity estimate."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class InsightType(str, Enum):
    """Category of an AI insight."""

    PATTERN = "pattern"
    RECOMMENDATION = "recommendation"
    WARNING = "warning"
    OPTIMIZATION = "optimization"
    MILESTONE = "milestone"


class EventType(str, Enum):
    """Timeline event category."""

    STEP_START = "step_start"
    STEP_COMPLETE = "step_complete"
    ERROR = "error"
    MILESTONE = "milestone"
    PAUSE = "pause"
    RESUME = "resume"


class OverallStatus(str, Enum):
    """Summary verdict for a session."""

    SUCCESS = "success"
    PARTIAL_SUCCESS = "partial_success"
    FAILURE = "failure"


# ============================================================================
# HELPER FUNCTIONS
# ============================================================================


def generate_id() -> str:
    """Generate a new UUID string."""
    return str(uuid.uuid4())


def utcnow() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def to_iso(value: datetime) -> str:
    """Encode a datetime as a sortable UTC ISO-8601 string."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat(timespec="microseconds")


def now_iso() -> str:
    """Get current UTC datetime as ISO string."""
    return to_iso(utcnow())


def parse_json_or_dict(value: str | dict | None) -> dict:
    """Parse JSON string to dict, or return empty dict."""
    if value is None:
        return {}
    if isinstance(value, dict):
        return value
    try:
        result = json.loads(value)
        return result if isinstance(result, dict) else {}
    except (json.JSONDecodeError, TypeError):
        return {}


def to_json(value: dict | None) -> str | None:
    """Convert dict to JSON string."""
    if value is None:
        return None
    return json.dumps(value)


def parse_datetime(value: str | datetime | None) -> datetime | None:
    """Parse ISO datetime string to datetime object."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value
    try:
        return datetime.fromisoformat(value)
    except (ValueError, TypeError):
        return None


def serialize(value: Any) -> Any:
    """Convert models, enums and datetimes into JSON-ready values."""
    if is_dataclass(value) and not isinstance(value, type):
        return {f.name: serialize(getattr(value, f.name)) for f in fields(value)}
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        return to_iso(value)
    if isinstance(value, dict):
        return {k: serialize(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [serialize(v) for v in value]
    return value


# ============================================================================
# CORE ENTITIES
# ============================================================================


@dataclass
class ProjectSession:
    """
    One tracked project-activity run. Root aggregate.

    Maps to: project_sessions table
    """

    id: str = field(default_factory=generate_id)
    project_name: str = ""
    description: str = ""
    start_time: datetime = field(default_factory=utcnow)
    end_time: datetime | None = None
    status: SessionStatus = SessionStatus.ACTIVE
    total_steps: int = 0
    current_step: int = 0
    ai_model: str = ""
    metadata: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_row(cls, row: tuple) -> ProjectSession:
        """Create from database row."""
        return cls(
            id=row[0],
            project_name=row[1],
            description=row[2] or "",
            start_time=parse_datetime(row[3]) or utcnow(),
            end_time=parse_datetime(row[4]),
            status=SessionStatus(row[5]) if row[5] else SessionStatus.ACTIVE,
            total_steps=row[6] or 0,
            current_step=row[7] or 0,
            ai_model=row[8] or "",
            metadata=parse_json_or_dict(row[9]),
        )

    def to_row(self) -> tuple:
        """Convert to database row for INSERT."""
        return (
            self.id,
            self.project_name,
            self.description,
            to_iso(self.start_time),
            to_iso(self.end_time) if self.end_time else None,
            self.status.value,
            self.total_steps,
            self.current_step,
            self.ai_model,
            to_json(self.metadata or {}),
        )

    def to_dict(self) -> dict[str, Any]:
        return serialize(self)


@dataclass
class ProjectStep:
    """
    One discrete unit of work within a session.

    Maps to: project_steps table
    """

    id: str = field(default_factory=generate_id)
    session_id: str = ""
    step_number: int = 0
    step_type: StepType = StepType.CUSTOM
    title: str = ""
    description: str = ""
    start_time: datetime = field(default_factory=utcnow)
    end_time: datetime | None = None
    status: StepStatus = StepStatus.PENDING
    input: dict[str, Any] = field(default_factory=dict)
    output: dict[str, Any] = field(default_factory=dict)
    error_message: str | None = None
    duration: int | None = None  # milliseconds
    metadata: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_row(cls, row: tuple) -> ProjectStep:
        """Create from database row."""
        return cls(
            id=row[0],
            session_id=row[1],
            step_number=row[2],
            step_type=StepType(row[3]) if row[3] else StepType.CUSTOM,
            title=row[4],
            description=row[5] or "",
            start_time=parse_datetime(row[6]) or utcnow(),
            end_time=parse_datetime(row[7]),
            status=StepStatus(row[8]) if row[8] else StepStatus.PENDING,
            input=parse_json_or_dict(row[9]),
            output=parse_json_or_dict(row[10]),
            error_message=row[11],
            duration=row[12],
            metadata=parse_json_or_dict(row[13]),
        )

    def to_row(self) -> tuple:
        """Convert to database row for INSERT. Output is only written on update."""
        return (
            self.id,
            self.session_id,
            self.step_number,
            self.step_type.value,
            self.title,
            self.description,
            to_iso(self.start_time),
            self.status.value,
            to_json(self.input or {}),
            to_json(self.metadata or {}),
        )

    def to_dict(self) -> dict[str, Any]:
        return serialize(self)


@dataclass
class StepDetail:
    """
    A log line or other detail record attached to a step.

    Maps to: step_details table
    """

    id: str = field(default_factory=generate_id)
    step_id: str = ""
    detail_type: DetailType = DetailType.LOG
    timestamp: datetime = field(default_factory=utcnow)
    content: str = ""
    severity: Severity | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_row(cls, row: tuple) -> StepDetail:
        """Create from database row."""
        return cls(
            id=row[0],
            step_id=row[1],
            detail_type=DetailType(row[2]),
            timestamp=parse_datetime(row[3]) or utcnow(),
            content=row[4],
            severity=Severity(row[5]) if row[5] else None,
            metadata=parse_json_or_dict(row[6]),
        )

    def to_row(self) -> tuple:
        """Convert to database row."""
        return (
            self.id,
            self.step_id,
            self.detail_type.value,
            to_iso(self.timestamp),
            self.content,
            self.severity.value if self.severity else None,
            to_json(self.metadata or {}),
        )

    def to_dict(self) -> dict[str, Any]:
        return serialize(self)


@dataclass
class ProjectMetrics:
    """
    Aggregate counters for a session. One row per session.

    Maps to: project_metrics table
    """

    session_id: str = ""
    total_files: int = 0
    files_created: int = 0
    files_modified: int = 0
    files_deleted: int = 0
    lines_of_code: int = 0
    commands_executed: int = 0
    errors_encountered: int = 0
    time_spent: int = 0
    complexity: Complexity = Complexity.LOW
    efficiency: int = 0  # 0-100
    updated_at: datetime | None = None

    @classmethod
    def from_row(cls, row: tuple) -> ProjectMetrics:
        """Create from database row."""
        return cls(
            session_id=row[0],
            total_files=row[1] or 0,
            files_created=row[2] or 0,
            files_modified=row[3] or 0,
            files_deleted=row[4] or 0,
            lines_of_code=row[5] or 0,
            commands_executed=row[6] or 0,
            errors_encountered=row[7] or 0,
            time_spent=row[8] or 0,
            complexity=Complexity(row[9]) if row[9] else Complexity.LOW,
            efficiency=row[10] or 0,
            updated_at=parse_datetime(row[11]),
        )

    def to_dict(self) -> dict[str, Any]:
        return serialize(self)


# Columns of project_metrics that a patch may touch
METRIC_FIELDS = (
    "total_files",
    "files_created",
    "files_modified",
    "files_deleted",
    "lines_of_code",
    "commands_executed",
    "errors_encountered",
    "time_spent",
    "complexity",
    "efficiency",
)


@dataclass
class AIInsight:
    """
    Append-only observation attached to a session.

    Maps to: ai_insights table
    """

    id: str = field(default_factory=generate_id)
    session_id: str = ""
    timestamp: datetime = field(default_factory=utcnow)
    insight_type: InsightType = InsightType.PATTERN
    title: str = ""
    description: str = ""
    confidence: int = 85  # 0-100
    metadata: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_row(cls, row: tuple) -> AIInsight:
        """Create from database row."""
        return cls(
            id=row[0],
            session_id=row[1],
            timestamp=parse_datetime(row[2]) or utcnow(),
            insight_type=InsightType(row[3]),
            title=row[4],
            description=row[5] or "",
            confidence=row[6] if row[6] is not None else 85,
            metadata=parse_json_or_dict(row[7]),
        )

    def to_row(self) -> tuple:
        """Convert to database row."""
        return (
            self.id,
            self.session_id,
            to_iso(self.timestamp),
            self.insight_type.value,
            self.title,
            self.description,
            self.confidence,
            to_json(self.metadata or {}),
        )

    def to_dict(self) -> dict[str, Any]:
        return serialize(self)


@dataclass
class TimelineEvent:
    """
    Append-only chronological log entry.

    Maps to: timeline_events table
    related_step_id is a soft link and may not resolve.
    """

    session_id: str = ""
    timestamp: datetime = field(default_factory=utcnow)
    event_type: EventType = EventType.MILESTONE
    title: str = ""
    description: str | None = None
    related_step_id: str | None = None
    id: str = field(default_factory=generate_id)

    @classmethod
    def from_row(cls, row: tuple) -> TimelineEvent:
        """Create from database row."""
        return cls(
            id=row[0],
            session_id=row[1],
            timestamp=parse_datetime(row[2]) or utcnow(),
            event_type=EventType(row[3]),
            title=row[4],
            description=row[5],
            related_step_id=row[6],
        )

    def to_row(self) -> tuple:
        """Convert to database row."""
        return (
            self.id,
            self.session_id,
            to_iso(self.timestamp),
            self.event_type.value,
            self.title,
            self.description,
            self.related_step_id,
        )

    def to_dict(self) -> dict[str, Any]:
        return serialize(self)


# ============================================================================
# DERIVED VIEWS (not persisted)
# ============================================================================


@dataclass
class ProjectSummary:
    """Computed verdict over a session's steps."""

    session_id: str
    overall_status: OverallStatus
    completion_percentage: int
    key_achievements: list[str] = field(default_factory=list)
    main_challenges: list[str] = field(default_factory=list)
    next_steps: list[str] = field(default_factory=list)
    total_time_spent: int = 0
    efficiency_score: int = 100

    def to_dict(self) -> dict[str, Any]:
        return serialize(self)


@dataclass
class ProjectReport:
    """Everything known about one session plus its summary."""

    session: ProjectSession
    steps: list[ProjectStep]
    metrics: ProjectMetrics
    insights: list[AIInsight]
    timeline: list[TimelineEvent]
    summary: ProjectSummary

    def to_dict(self) -> dict[str, Any]:
        return serialize(self)
