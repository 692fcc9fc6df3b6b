"""
AI Project Tracker - Tool Dispatcher

Maps named tool calls with flat argument bags onto ProjectTracker and
wraps every outcome in a response envelope:

    {"success": True,  "data": {...}, "metadata": {...}}
    {"success": False, "error": "...", "metadata": {"action": name, "timestamp": ...}}

This is the only place where exceptions are converted into responses.
Metric patches and insight confidence are validated against
aitracker.schemas before reaching the tracker; missing optional
arguments fall back to their defaults.
"""

import logging
import time
import uuid
from collections.abc import Callable
from typing import Any

from aitracker.exceptions import UnknownToolError
from aitracker.logging import ToolCallLogEntry, now_iso, tool_logger
from aitracker.report import render_html, render_text
from aitracker.schemas import MetricsPatch, confidence_adapter
from aitracker.tracker import ProjectTracker

logger = logging.getLogger(__name__)

REPORT_FORMATS = ("json", "text", "html")

Response = dict[str, Any]


def _ok(data: dict[str, Any], action: str, **extra: Any) -> Response:
    return {
        "success": True,
        "data": data,
        "metadata": {"action": action, "timestamp": now_iso(), **extra},
    }


def _fail(error: str, action: str) -> Response:
    return {
        "success": False,
        "error": error,
        "metadata": {"action": action, "timestamp": now_iso()},
    }


class ToolDispatcher:
    """
    Routes tool calls to the tracker.

    Usage:
        dispatcher = ToolDispatcher(tracker)
        response = dispatcher.call("start_project", {"project_name": "x", "description": "y"})
    """

    def __init__(self, tracker: ProjectTracker):
        self.tracker = tracker
        self._handlers: dict[str, Callable[[dict[str, Any]], Response]] = {
            "start_project": self._start_project,
            "start_step": self._start_step,
            "complete_step": self._complete_step,
            "add_log": self._add_log,
            "update_metrics": self._update_metrics,
            "add_insight": self._add_insight,
            "complete_project": self._complete_project,
            "generate_report": self._generate_report,
            "get_project_status": self._get_project_status,
            "list_steps": self._list_steps,
            "get_timeline": self._get_timeline,
            "get_insights": self._get_insights,
            "list_sessions": self._list_sessions,
        }

    @property
    def tool_names(self) -> list[str]:
        return list(self._handlers)

    def call(self, name: str, arguments: dict[str, Any] | None = None) -> Response:
        """Dispatch one call. Never raises."""
        args = arguments or {}
        started = time.perf_counter()
        error_type = None

        try:
            handler = self._handlers.get(name)
            if handler is None:
                raise UnknownToolError(name)
            response = handler(args)
        except KeyError as e:
            error_type = "MissingArgument"
            response = _fail(f"Missing required argument: {e.args[0]}", name)
        except Exception as e:
            logger.warning(f"Tool {name} failed: {e}")
            error_type = type(e).__name__
            response = _fail(str(e), name)

        tool_logger.info(
            ToolCallLogEntry(
                timestamp=now_iso(),
                call_id=str(uuid.uuid4()),
                tool=name,
                session_id=str(args.get("session_id", "")),
                step_id=str(args.get("step_id", "")),
                success=response["success"],
                error=response.get("error"),
                error_type=error_type,
                latency_ms=int((time.perf_counter() - started) * 1000),
            ).to_json()
        )
        return response

    # =========================================================================
    # LIFECYCLE CALLS
    # =========================================================================

    def _start_project(self, args: dict[str, Any]) -> Response:
        session_id = self.tracker.start_project(
            args["project_name"],
            args["description"],
            args.get("ai_model"),
            args.get("metadata"),
        )
        return _ok({"session_id": session_id}, "project_started")

    def _start_step(self, args: dict[str, Any]) -> Response:
        step_id = self.tracker.start_step(
            args["session_id"],
            args["step_type"],
            args["title"],
            args["description"],
            args.get("input"),
            args.get("metadata"),
        )
        return _ok({"step_id": step_id}, "step_started")

    def _complete_step(self, args: dict[str, Any]) -> Response:
        self.tracker.complete_step(
            args["step_id"],
            args.get("status") or "completed",
            args.get("output"),
            args.get("error_message"),
        )
        return _ok({"message": "Step completed"}, "step_completed")

    def _add_log(self, args: dict[str, Any]) -> Response:
        detail_id = self.tracker.add_log(
            args["step_id"],
            args["content"],
            args.get("severity") or "info",
            args.get("metadata"),
        )
        return _ok({"log_id": detail_id}, "log_added")

    def _update_metrics(self, args: dict[str, Any]) -> Response:
        session_id = args["session_id"]
        patch = MetricsPatch.model_validate(args.get("metrics") or {})
        self.tracker.update_metrics(session_id, **patch.to_updates())
        return _ok({"message": "Metrics updated"}, "metrics_updated")

    def _add_insight(self, args: dict[str, Any]) -> Response:
        confidence = args.get("confidence")
        if confidence is not None:
            confidence = confidence_adapter.validate_python(confidence)

        insight_id = self.tracker.add_insight(
            args["session_id"],
            args["insight_type"],
            args["title"],
            args["description"],
            confidence,
            args.get("metadata"),
        )
        return _ok({"insight_id": insight_id}, "insight_added")

    def _complete_project(self, args: dict[str, Any]) -> Response:
        self.tracker.complete_project(args["session_id"], args.get("status") or "completed")
        return _ok({"message": "Project completed"}, "project_completed")

    def _generate_report(self, args: dict[str, Any]) -> Response:
        fmt = args.get("format") or "json"
        if fmt not in REPORT_FORMATS:
            return _fail(f"Unsupported report format: {fmt}", "generate_report")

        report = self.tracker.generate_report(args["session_id"])
        if fmt == "text":
            rendered: Any = render_text(report)
        elif fmt == "html":
            rendered = render_html(report)
        else:
            rendered = report.to_dict()
        return _ok({"report": rendered, "format": fmt}, "report_generated", format=fmt)

    # =========================================================================
    # READ-ONLY QUERIES
    # =========================================================================

    def _get_project_status(self, args: dict[str, Any]) -> Response:
        session_id = args["session_id"]
        session = self.tracker.repository.get_session(session_id)
        if session is None:
            return _fail(f"Project session not found: {session_id}", "get_project_status")
        return _ok({"session": session.to_dict()}, "status_retrieved")

    def _list_steps(self, args: dict[str, Any]) -> Response:
        status = args.get("status")
        steps = self.tracker.repository.get_steps(args["session_id"])
        if status:
            steps = [s for s in steps if s.status.value == status]
        return _ok(
            {"steps": [s.to_dict() for s in steps], "count": len(steps)},
            "steps_listed",
            filter=status or "none",
        )

    def _get_timeline(self, args: dict[str, Any]) -> Response:
        event_type = args.get("event_type")
        events = self.tracker.repository.get_timeline(args["session_id"])
        if event_type:
            events = [e for e in events if e.event_type.value == event_type]
        return _ok(
            {"timeline": [e.to_dict() for e in events], "count": len(events)},
            "timeline_retrieved",
            filter=event_type or "none",
        )

    def _get_insights(self, args: dict[str, Any]) -> Response:
        insight_type = args.get("insight_type")
        insights = self.tracker.repository.get_insights(args["session_id"])
        if insight_type:
            insights = [i for i in insights if i.insight_type.value == insight_type]
        return _ok(
            {"insights": [i.to_dict() for i in insights], "count": len(insights)},
            "insights_retrieved",
            filter=insight_type or "none",
        )

    def _list_sessions(self, args: dict[str, Any]) -> Response:
        status = args.get("status")
        limit = args.get("limit")
        sessions = self.tracker.list_sessions(status=status, limit=limit)
        return _ok(
            {"sessions": [s.to_dict() for s in sessions], "count": len(sessions)},
            "sessions_listed",
            filter=status or "none",
            limit=limit or "none",
        )
