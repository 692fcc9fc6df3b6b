"""
AI Project Tracker - Session/Step Lifecycle

Sequences the session -> step -> completion lifecycle on top of the
repository, derives step durations, appends timeline events as side
effects of transitions and computes the report summary.

Step lifecycle:
    pending -> in_progress -> completed | failed | skipped

Steps are created directly in in_progress; pending only appears for
steps declared elsewhere and never started. Terminal steps are not
mutated again.

Session lifecycle:
    active -> completed | failed   (paused only via direct update)
"""

from __future__ import annotations

import logging
import math
import threading
from datetime import datetime
from typing import Any

from aitracker.config import TrackerConfig
from aitracker.exceptions import SessionNotFoundError, StateTransitionError, StepNotFoundError
from aitracker.logging import SessionLogEntry, session_logger
from aitracker.logging import now_iso as log_now_iso
from aitracker.persistence.models import (
    AIInsight,
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
    utcnow,
)
from aitracker.persistence.repository import TrackerRepository

logger = logging.getLogger(__name__)

# Completed steps of these types count as achievements. "milestone" is not
# a StepType member, so in practice only deployment and testing match.
ACHIEVEMENT_STEP_TYPES = frozenset({"milestone", "deployment", "testing"})
MAX_NEXT_STEPS = 3


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def build_summary(session_id: str, steps: list[ProjectStep]) -> ProjectSummary:
    """
    Compute the summary for a session from its steps (in step-number order).

    - completion_percentage: completed / total, 0 when there are no steps
    - efficiency_score: 100 - failed_ratio * 50, clamped to 0..100
    - overall_status: failure below 50%, partial_success below 90% or
      with any failed step, success otherwise
    """
    completed = [s for s in steps if s.status == StepStatus.COMPLETED]
    failed = [s for s in steps if s.status == StepStatus.FAILED]

    total_time = sum(s.duration or 0 for s in steps)

    completion = (len(completed) / len(steps)) * 100 if steps else 0.0
    efficiency = min(100.0, max(0.0, 100 - (len(failed) / max(1, len(steps))) * 50))

    if completion < 50:
        overall = OverallStatus.FAILURE
    elif completion < 90 or failed:
        overall = OverallStatus.PARTIAL_SUCCESS
    else:
        overall = OverallStatus.SUCCESS

    return ProjectSummary(
        session_id=session_id,
        overall_status=overall,
        completion_percentage=_round_half_up(completion),
        key_achievements=[
            s.title for s in completed if s.step_type.value in ACHIEVEMENT_STEP_TYPES
        ],
        main_challenges=[s.title for s in failed],
        next_steps=[s.title for s in steps if s.status == StepStatus.PENDING][:MAX_NEXT_STEPS],
        total_time_spent=total_time,
        efficiency_score=_round_half_up(efficiency),
    )


def empty_metrics(session_id: str) -> ProjectMetrics:
    """All-zero metrics used when a session has no metrics row."""
    return ProjectMetrics(session_id=session_id)


class ProjectTracker:
    """
    Stateful orchestrator over TrackerRepository.

    Holds the most recently started session and a side-table of step
    start instants keyed by step id. The side-table is process-local: a
    step completed by another process (or after a restart) gets
    duration 0.

    Usage:
        tracker = ProjectTracker(TrackerRepository(db_path))
        session_id = tracker.start_project("demo", "Build the demo")
        step_id = tracker.start_step(session_id, "analysis", "Read code", "...")
        tracker.complete_step(step_id)
        report = tracker.generate_report(session_id)
        tracker.close()
    """

    def __init__(
        self,
        repository: TrackerRepository | None = None,
        config: TrackerConfig | None = None,
    ):
        self.config = config or TrackerConfig()
        self.repository = repository or TrackerRepository(self.config.db_path)
        self.repository.initialize()

        self.current_session: ProjectSession | None = None

        self._step_start_times: dict[str, datetime] = {}
        self._start_times_lock = threading.Lock()

        # Serializes current_step read-modify-write per session id
        self._session_locks: dict[str, threading.Lock] = {}
        self._session_locks_guard = threading.Lock()

    def _session_lock(self, session_id: str) -> threading.Lock:
        with self._session_locks_guard:
            lock = self._session_locks.get(session_id)
            if lock is None:
                lock = self._session_locks[session_id] = threading.Lock()
            return lock

    def _log_session_event(self, entry: SessionLogEntry) -> None:
        session_logger.info(entry.to_json())

    def _add_timeline_event(
        self,
        session_id: str,
        event_type: EventType,
        title: str,
        description: str | None = None,
        related_step_id: str | None = None,
        timestamp: datetime | None = None,
    ) -> str:
        return self.repository.add_timeline_event(
            TimelineEvent(
                session_id=session_id,
                timestamp=timestamp or utcnow(),
                event_type=event_type,
                title=title,
                description=description,
                related_step_id=related_step_id,
            )
        )

    # =========================================================================
    # PROJECT LIFECYCLE
    # =========================================================================

    def start_project(
        self,
        project_name: str,
        description: str,
        ai_model: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> str:
        """Open a new active session and record its launch on the timeline."""
        ai_model = ai_model or self.config.default_ai_model

        session_id = self.repository.create_session(
            ProjectSession(
                project_name=project_name,
                description=description,
                start_time=utcnow(),
                status=SessionStatus.ACTIVE,
                total_steps=0,
                current_step=0,
                ai_model=ai_model,
                metadata=metadata or {},
            )
        )
        self.current_session = self.repository.get_session(session_id)

        self._add_timeline_event(
            session_id,
            EventType.STEP_START,
            "Project Started",
            f"Project {project_name} started with {ai_model}",
        )

        self._log_session_event(
            SessionLogEntry(
                timestamp=log_now_iso(),
                session_id=session_id,
                event_type="project_start",
                project_name=project_name,
                status=SessionStatus.ACTIVE.value,
            )
        )
        logger.info(f"Project started: {project_name} (ID: {session_id})")
        return session_id

    def complete_project(self, session_id: str, status: str = "completed") -> None:
        """Close a session as completed or failed and mark it on the timeline."""
        final = SessionStatus(status)
        if final not in (SessionStatus.COMPLETED, SessionStatus.FAILED):
            raise StateTransitionError(
                f"Cannot complete project with status '{final.value}'",
                from_state=SessionStatus.ACTIVE.value,
                to_state=final.value,
            )

        session = self.repository.get_session(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)

        self.repository.update_session(session_id, end_time=utcnow(), status=final)

        succeeded = final == SessionStatus.COMPLETED
        self._add_timeline_event(
            session_id,
            EventType.MILESTONE,
            "Project Completed" if succeeded else "Project Failed",
            "Project completed successfully" if succeeded else "Project failed",
        )

        if self.current_session and self.current_session.id == session_id:
            self.current_session = self.repository.get_session(session_id)

        self._log_session_event(
            SessionLogEntry(
                timestamp=log_now_iso(),
                session_id=session_id,
                event_type="project_complete",
                project_name=session.project_name,
                status=final.value,
            )
        )
        logger.info(f"Project {final.value}: {session.project_name} (ID: {session_id})")

    def list_sessions(
        self,
        status: str | None = None,
        limit: int | None = None,
    ) -> list[ProjectSession]:
        """List persisted sessions newest first."""
        return self.repository.get_all_sessions(status=status, limit=limit)

    # =========================================================================
    # STEP LIFECYCLE
    # =========================================================================

    def start_step(
        self,
        session_id: str,
        step_type: str,
        title: str,
        description: str,
        input_data: dict[str, Any] | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> str:
        """
        Create the next step of a session in in_progress.

        The step number is current_step + 1; current_step and total_steps
        both advance to it.

        Raises:
            SessionNotFoundError: If the session does not exist
        """
        kind = StepType(step_type)

        with self._session_lock(session_id):
            session = self.repository.get_session(session_id)
            if session is None:
                raise SessionNotFoundError(session_id)

            step_number = session.current_step + 1
            started_at = utcnow()
            step_id = self.repository.create_step(
                ProjectStep(
                    session_id=session_id,
                    step_number=step_number,
                    step_type=kind,
                    title=title,
                    description=description,
                    start_time=started_at,
                    status=StepStatus.IN_PROGRESS,
                    input=input_data or {},
                    metadata=metadata or {},
                )
            )

            with self._start_times_lock:
                self._step_start_times[step_id] = started_at

            self.repository.update_session(
                session_id,
                current_step=step_number,
                total_steps=step_number,
            )

        self._add_timeline_event(
            session_id,
            EventType.STEP_START,
            f"Step Started: {title}",
            f"Started {kind.value} step",
            related_step_id=step_id,
        )

        self._log_session_event(
            SessionLogEntry(
                timestamp=log_now_iso(),
                session_id=session_id,
                event_type="step_start",
                step_id=step_id,
                step_number=step_number,
                step_type=kind.value,
                status=StepStatus.IN_PROGRESS.value,
            )
        )
        logger.info(f"Step started: {title} ({kind.value})")
        return step_id

    def complete_step(
        self,
        step_id: str,
        status: str = "completed",
        output: dict[str, Any] | None = None,
        error_message: str | None = None,
    ) -> None:
        """
        Move a step into a terminal state and fix its duration.

        Duration is measured from the start instant recorded by this
        tracker, or 0 when none is recorded. If the step row cannot be
        found only the (no-op) patch is issued and no timeline event is
        added.

        Raises:
            StateTransitionError: If status is not terminal, or the step
                already reached a terminal state
        """
        final = StepStatus(status)
        step = self.repository.get_step(step_id)
        current = step.status if step else StepStatus.IN_PROGRESS

        if not final.is_terminal:
            raise StateTransitionError(
                f"Cannot complete step with non-terminal status '{final.value}'",
                from_state=current.value,
                to_state=final.value,
            )
        if current.is_terminal:
            raise StateTransitionError(
                f"Step {step_id[:8]} already {current.value}",
                from_state=current.value,
                to_state=final.value,
            )

        end_time = utcnow()
        with self._start_times_lock:
            started_at = self._step_start_times.get(step_id)
        duration = (
            max(0, int((end_time - started_at).total_seconds() * 1000)) if started_at else 0
        )

        self.repository.update_step(
            step_id,
            end_time=end_time,
            status=final,
            output=output,
            error_message=error_message,
            duration=duration,
        )

        with self._start_times_lock:
            self._step_start_times.pop(step_id, None)

        if step is None:
            logger.warning(f"Completed unknown step {step_id}; no timeline event recorded")
            return

        succeeded = final == StepStatus.COMPLETED
        verb = {
            StepStatus.COMPLETED: "Completed",
            StepStatus.FAILED: "Failed",
            StepStatus.SKIPPED: "Skipped",
        }[final]
        self._add_timeline_event(
            step.session_id,
            EventType.STEP_COMPLETE if succeeded else EventType.ERROR,
            f"Step {verb}: {step.title}",
            error_message or f"Step finished in {duration}ms",
            related_step_id=step_id,
            timestamp=end_time,
        )

        self._log_session_event(
            SessionLogEntry(
                timestamp=log_now_iso(),
                session_id=step.session_id,
                event_type="step_complete",
                step_id=step_id,
                step_number=step.step_number,
                step_type=step.step_type.value,
                status=final.value,
                duration_ms=duration,
                error=error_message,
            )
        )
        if succeeded:
            logger.info(f"Step completed: {step.title} ({duration}ms)")
        else:
            logger.warning(f"Step {final.value}: {step.title}")

    def add_log(
        self,
        step_id: str,
        content: str,
        severity: str = "info",
        metadata: dict[str, Any] | None = None,
    ) -> str:
        """Attach a log line to a step. Returns the detail id."""
        if self.repository.get_step(step_id) is None:
            raise StepNotFoundError(step_id)

        return self.repository.add_step_detail(
            StepDetail(
                step_id=step_id,
                detail_type=DetailType.LOG,
                timestamp=utcnow(),
                content=content,
                severity=Severity(severity),
                metadata=metadata or {},
            )
        )

    # =========================================================================
    # METRICS / INSIGHTS
    # =========================================================================

    def update_metrics(self, session_id: str, **updates: Any) -> None:
        """Patch the session's metrics counters."""
        self.repository.update_metrics(session_id, **updates)
        logger.debug(f"Metrics updated for session {session_id[:8]}")

    def add_insight(
        self,
        session_id: str,
        insight_type: str,
        title: str,
        description: str,
        confidence: int | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> str:
        """Record an insight. Returns the insight id."""
        insight_id = self.repository.add_insight(
            AIInsight(
                session_id=session_id,
                timestamp=utcnow(),
                insight_type=InsightType(insight_type),
                title=title,
                description=description,
                confidence=self.config.default_confidence if confidence is None else confidence,
                metadata=metadata or {},
            )
        )
        logger.info(f"Insight ({insight_type}): {title}")
        return insight_id

    # =========================================================================
    # REPORTING
    # =========================================================================

    def generate_report(self, session_id: str) -> ProjectReport:
        """
        Gather everything recorded for a session and compute its summary.

        Raises:
            SessionNotFoundError: If the session does not exist
        """
        session = self.repository.get_session(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)

        steps = self.repository.get_steps(session_id)
        metrics = self.repository.get_metrics(session_id)
        if metrics is None:
            logger.warning(f"No metrics row for session {session_id[:8]}; using zeros")
            metrics = empty_metrics(session_id)

        return ProjectReport(
            session=session,
            steps=steps,
            metrics=metrics,
            insights=self.repository.get_insights(session_id),
            timeline=self.repository.get_timeline(session_id),
            summary=build_summary(session_id, steps),
        )

    def close(self) -> None:
        """Release the backing connection. The tracker is unusable afterwards."""
        self.repository.close()
