"""
Tracker Repository - Database access layer

Provides all database operations for the AI Project Tracker.
Single connection per repository instance, with context manager support.

Thread Safety:
- SQLite in WAL mode for concurrent reads
- One connection shared by all threads, guarded by a re-entrant lock;
  transaction() holds it until COMMIT or ROLLBACK
- Use separate TrackerRepository instances per process

Absent rows are reported as None from get_* methods. Engine errors
(sqlite3.Error) propagate unchanged and are never retried here.
"""

from __future__ import annotations

import logging
import sqlite3
import threading
from collections.abc import Generator
from contextlib import contextmanager
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any

from aitracker.config import DEFAULT_DB_PATH
from aitracker.persistence.models import (
    METRIC_FIELDS,
    AIInsight,
    ProjectMetrics,
    ProjectSession,
    ProjectStep,
    StepDetail,
    TimelineEvent,
    generate_id,
    now_iso,
    to_iso,
    to_json,
)

logger = logging.getLogger(__name__)

SESSION_COLUMNS = (
    "id, project_name, description, start_time, end_time, status, "
    "total_steps, current_step, ai_model, metadata"
)
STEP_COLUMNS = (
    "id, session_id, step_number, step_type, title, description, start_time, "
    "end_time, status, input, output, error_message, duration, metadata"
)
DETAIL_COLUMNS = "id, step_id, detail_type, timestamp, content, severity, metadata"
METRICS_COLUMNS = "session_id, " + ", ".join(METRIC_FIELDS) + ", updated_at"
INSIGHT_COLUMNS = (
    "id, session_id, timestamp, insight_type, title, description, confidence, metadata"
)
TIMELINE_COLUMNS = "id, session_id, timestamp, event_type, title, description, related_step_id"

# Patchable columns per entity; anything else in a patch is ignored
SESSION_PATCH_FIELDS = (
    "project_name",
    "description",
    "end_time",
    "status",
    "total_steps",
    "current_step",
)
STEP_PATCH_FIELDS = ("end_time", "status", "output", "error_message", "duration")


def _to_column_value(column: str, value: Any) -> Any:
    """Encode a patch value for storage."""
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        return to_iso(value)
    if column == "output":
        return to_json(value)
    return value


def _build_patch(allowed: tuple[str, ...], updates: dict[str, Any]) -> tuple[list[str], list[Any]]:
    """Collect SET clauses for recognized, non-None fields."""
    assignments: list[str] = []
    values: list[Any] = []
    for column in allowed:
        value = updates.get(column)
        if value is None:
            continue
        assignments.append(f"{column} = ?")
        values.append(_to_column_value(column, value))
    return assignments, values


class TrackerRepository:
    """
    Repository for all tracker persistence operations.

    Usage:
        repo = TrackerRepository("/tmp/tracker.db")
        repo.initialize()

        session_id = repo.create_session(ProjectSession(project_name="demo"))
        repo.update_session(session_id, current_step=1, total_steps=1)

        # Use in context manager for auto-cleanup
        with TrackerRepository(path) as repo:
            ...

        # Or close manually
        repo.close()
    """

    def __init__(self, db_path: Path | str | None = None):
        """
        Initialize repository.

        Args:
            db_path: Path to SQLite database file. If None, uses default location.
        """
        self.db_path = Path(db_path) if db_path else DEFAULT_DB_PATH
        self._conn: sqlite3.Connection | None = None
        self._initialized = False
        # Guards the shared connection; held for the whole of a transaction()
        self._lock = threading.RLock()

    def __enter__(self) -> TrackerRepository:
        """Context manager entry."""
        self.initialize()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit."""
        self.close()

    @property
    def conn(self) -> sqlite3.Connection:
        """Get database connection, initializing if needed."""
        if self._conn is None:
            self.initialize()
        return self._conn  # type: ignore

    def initialize(self) -> None:
        """
        Initialize database connection and schema.

        Creates database file and parent directories if they don't exist.
        Applies schema if not already present.
        """
        with self._lock:
            if self._initialized and self._conn:
                return

            self.db_path.parent.mkdir(parents=True, exist_ok=True)

            self._conn = sqlite3.connect(
                self.db_path,
                check_same_thread=False,
                isolation_level=None,  # Autocommit: each call is its own unit of work
            )

            self._conn.execute("PRAGMA journal_mode=WAL")
            self._conn.execute("PRAGMA foreign_keys=ON")
            self._conn.execute("PRAGMA synchronous=NORMAL")

            self._apply_schema()
            self._initialized = True

        logger.info(f"Initialized tracker database at {self.db_path}")

    def _apply_schema(self) -> None:
        """Apply the database schema from schema.sql."""
        schema_path = Path(__file__).parent / "schema.sql"

        if not schema_path.exists():
            logger.error(f"Schema file not found: {schema_path}")
            raise FileNotFoundError(f"Schema file not found: {schema_path}")

        with open(schema_path) as f:
            schema_sql = f.read()

        # CREATE IF NOT EXISTS makes this idempotent
        self._conn.executescript(schema_sql)  # type: ignore
        logger.debug("Database schema applied")

    def close(self) -> None:
        """Close database connection. The repository must not be used afterwards."""
        with self._lock:
            if self._conn:
                self._conn.close()
                self._conn = None
                self._initialized = False

    @contextmanager
    def transaction(self) -> Generator[sqlite3.Cursor, None, None]:
        """
        Execute operations in a transaction.

        Other threads sharing this repository wait until it commits or
        rolls back.

        Usage:
            with repo.transaction() as cursor:
                cursor.execute(...)
        """
        with self._lock:
            cursor = self.conn.cursor()
            try:
                cursor.execute("BEGIN")
                yield cursor
                cursor.execute("COMMIT")
            except Exception:
                cursor.execute("ROLLBACK")
                raise
            finally:
                cursor.close()

    def _execute(self, sql: str, params: tuple | list = ()) -> int:
        """Run one write statement under the connection lock. Returns rowcount."""
        with self._lock:
            cursor = self.conn.cursor()
            try:
                cursor.execute(sql, params)
                return cursor.rowcount
            finally:
                cursor.close()

    def _query(self, sql: str, params: tuple | list = ()) -> list[tuple]:
        """Run one read statement under the connection lock."""
        with self._lock:
            cursor = self.conn.cursor()
            try:
                cursor.execute(sql, params)
                return cursor.fetchall()
            finally:
                cursor.close()

    def _query_one(self, sql: str, params: tuple | list = ()) -> tuple | None:
        rows = self._query(sql, params)
        return rows[0] if rows else None

    # =========================================================================
    # SESSION OPERATIONS
    # =========================================================================

    def create_session(self, session: ProjectSession) -> str:
        """
        Persist a new session and its zero-valued metrics row.

        A fresh id is always generated; any id on the passed object is replaced.

        Returns:
            The new session id
        """
        session.id = generate_id()

        with self.transaction() as cursor:
            cursor.execute(
                f"""INSERT INTO project_sessions ({SESSION_COLUMNS})
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)""",
                session.to_row(),
            )
            self._insert_metrics_row(cursor, session.id)

        logger.debug(f"Created session {session.id[:8]} ({session.project_name})")
        return session.id

    def get_session(self, session_id: str) -> ProjectSession | None:
        """Get session by ID."""
        row = self._query_one(
            f"SELECT {SESSION_COLUMNS} FROM project_sessions WHERE id = ?", (session_id,)
        )
        return ProjectSession.from_row(row) if row else None

    def update_session(self, session_id: str, **updates: Any) -> None:
        """
        Patch session fields.

        Recognized fields: project_name, description, end_time, status,
        total_steps, current_step. None values and unknown fields are
        ignored; an empty patch issues no write.
        """
        assignments, values = _build_patch(SESSION_PATCH_FIELDS, updates)
        if not assignments:
            return

        self._execute(
            f"UPDATE project_sessions SET {', '.join(assignments)} WHERE id = ?",
            (*values, session_id),
        )

    def get_all_sessions(
        self,
        status: str | None = None,
        limit: int | None = None,
    ) -> list[ProjectSession]:
        """List sessions newest first, optionally filtered by status and capped."""
        sql = f"SELECT {SESSION_COLUMNS} FROM project_sessions"
        params: list[Any] = []

        if status:
            sql += " WHERE status = ?"
            params.append(status.value if isinstance(status, Enum) else status)

        sql += " ORDER BY start_time DESC, rowid DESC"

        if limit:
            sql += " LIMIT ?"
            params.append(limit)

        return [ProjectSession.from_row(row) for row in self._query(sql, params)]

    # =========================================================================
    # STEP OPERATIONS
    # =========================================================================

    def create_step(self, step: ProjectStep) -> str:
        """Persist a new step. Output is not written here, only on update."""
        step.id = generate_id()

        self._execute(
            """INSERT INTO project_steps
               (id, session_id, step_number, step_type, title, description,
                start_time, status, input, metadata)
               VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)""",
            step.to_row(),
        )
        return step.id

    def update_step(self, step_id: str, **updates: Any) -> None:
        """
        Patch step fields.

        Recognized fields: end_time, status, output, error_message,
        duration. An empty patch issues no write.
        """
        assignments, values = _build_patch(STEP_PATCH_FIELDS, updates)
        if not assignments:
            return

        self._execute(
            f"UPDATE project_steps SET {', '.join(assignments)} WHERE id = ?",
            (*values, step_id),
        )

    def get_step(self, step_id: str) -> ProjectStep | None:
        """Get step by ID."""
        row = self._query_one(f"SELECT {STEP_COLUMNS} FROM project_steps WHERE id = ?", (step_id,))
        return ProjectStep.from_row(row) if row else None

    def get_steps(self, session_id: str) -> list[ProjectStep]:
        """Get all steps of a session ordered by step number."""
        rows = self._query(
            f"""SELECT {STEP_COLUMNS} FROM project_steps
                WHERE session_id = ?
                ORDER BY step_number ASC, rowid ASC""",
            (session_id,),
        )
        return [ProjectStep.from_row(row) for row in rows]

    # =========================================================================
    # STEP DETAIL OPERATIONS
    # =========================================================================

    def add_step_detail(self, detail: StepDetail) -> str:
        """Append a detail record to a step."""
        detail.id = generate_id()

        self._execute(
            f"INSERT INTO step_details ({DETAIL_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?)",
            detail.to_row(),
        )
        return detail.id

    def get_step_details(self, step_id: str) -> list[StepDetail]:
        """Get detail records of a step in chronological order."""
        rows = self._query(
            f"""SELECT {DETAIL_COLUMNS} FROM step_details
                WHERE step_id = ?
                ORDER BY timestamp ASC, rowid ASC""",
            (step_id,),
        )
        return [StepDetail.from_row(row) for row in rows]

    # =========================================================================
    # METRICS OPERATIONS
    # =========================================================================

    def _insert_metrics_row(self, cursor: sqlite3.Cursor, session_id: str) -> None:
        now = now_iso()
        cursor.execute(
            """INSERT OR IGNORE INTO project_metrics (session_id, created_at, updated_at)
               VALUES (?, ?, ?)""",
            (session_id, now, now),
        )

    def initialize_metrics(self, session_id: str) -> None:
        """Create the zero-valued metrics row. Idempotent."""
        with self.transaction() as cursor:
            self._insert_metrics_row(cursor, session_id)

    def update_metrics(self, session_id: str, **updates: Any) -> None:
        """
        Patch metric counters and stamp updated_at.

        session_id itself is never patchable. An empty patch issues no write.
        """
        assignments, values = _build_patch(METRIC_FIELDS, updates)
        if not assignments:
            return

        assignments.append("updated_at = ?")
        values.append(now_iso())

        rowcount = self._execute(
            f"UPDATE project_metrics SET {', '.join(assignments)} WHERE session_id = ?",
            (*values, session_id),
        )
        if rowcount == 0:
            logger.warning(f"No metrics row for session {session_id[:8]}; update ignored")

    def get_metrics(self, session_id: str) -> ProjectMetrics | None:
        """Get metrics for a session."""
        row = self._query_one(
            f"SELECT {METRICS_COLUMNS} FROM project_metrics WHERE session_id = ?",
            (session_id,),
        )
        return ProjectMetrics.from_row(row) if row else None

    # =========================================================================
    # INSIGHT OPERATIONS
    # =========================================================================

    def add_insight(self, insight: AIInsight) -> str:
        """Append an insight to a session."""
        insight.id = generate_id()

        self._execute(
            f"INSERT INTO ai_insights ({INSIGHT_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?, ?)",
            insight.to_row(),
        )
        return insight.id

    def get_insights(self, session_id: str) -> list[AIInsight]:
        """Get insights for a session, newest first."""
        rows = self._query(
            f"""SELECT {INSIGHT_COLUMNS} FROM ai_insights
                WHERE session_id = ?
                ORDER BY timestamp DESC, rowid DESC""",
            (session_id,),
        )
        return [AIInsight.from_row(row) for row in rows]

    # =========================================================================
    # TIMELINE OPERATIONS
    # =========================================================================

    def add_timeline_event(self, event: TimelineEvent) -> str:
        """Append a timeline event to a session."""
        event.id = generate_id()

        self._execute(
            f"INSERT INTO timeline_events ({TIMELINE_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?)",
            event.to_row(),
        )
        return event.id

    def get_timeline(self, session_id: str) -> list[TimelineEvent]:
        """Get timeline events for a session in chronological order."""
        rows = self._query(
            f"""SELECT {TIMELINE_COLUMNS} FROM timeline_events
                WHERE session_id = ?
                ORDER BY timestamp ASC, rowid ASC""",
            (session_id,),
        )
        return [TimelineEvent.from_row(row) for row in rows]
