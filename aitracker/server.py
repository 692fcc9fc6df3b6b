"""
AI Project Tracker - MCP Server

Exposes the tracker's tool calls over the Model Context Protocol. Each
tool forwards its arguments to ToolDispatcher and returns the response
envelope as pretty-printed JSON text.

Tool argument schemas are derived from the annotated signatures below,
so enum-valued arguments, metric patches (MetricsPatch) and confidence
bounds are validated by the transport before they reach the dispatcher.
"""

import json
import logging
from typing import Any, Literal

from mcp.server import FastMCP

from aitracker.dispatcher import ToolDispatcher
from aitracker.schemas import MetricsPatch, Percentage
from aitracker.tracker import ProjectTracker

logger = logging.getLogger(__name__)

SERVER_NAME = "ai-project-tracker"

StepTypeName = Literal[
    "analysis",
    "file_read",
    "file_write",
    "code_generation",
    "dependency_install",
    "command_execution",
    "testing",
    "debugging",
    "optimization",
    "deployment",
    "documentation",
    "research",
    "planning",
    "review",
    "custom",
]
StepStatusName = Literal["pending", "in_progress", "completed", "failed", "skipped"]
TerminalStepStatus = Literal["completed", "failed", "skipped"]
SessionStatusName = Literal["active", "completed", "paused", "failed"]
InsightTypeName = Literal["pattern", "recommendation", "warning", "optimization", "milestone"]
EventTypeName = Literal["step_start", "step_complete", "error", "milestone", "pause", "resume"]
SeverityName = Literal["info", "warning", "error", "debug"]
ReportFormat = Literal["json", "text", "html"]


def _drop_none(**kwargs: Any) -> dict[str, Any]:
    return {k: v for k, v in kwargs.items() if v is not None}


def create_server(tracker: ProjectTracker) -> FastMCP:
    """Build the MCP server with every tracker tool registered."""
    dispatcher = ToolDispatcher(tracker)
    server = FastMCP(SERVER_NAME)

    def respond(name: str, arguments: dict[str, Any]) -> str:
        return json.dumps(dispatcher.call(name, arguments), indent=2, default=str)

    @server.tool(name="start_project", description="Start tracking a new AI project session")
    def start_project(
        project_name: str,
        description: str,
        ai_model: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> str:
        return respond(
            "start_project",
            _drop_none(
                project_name=project_name,
                description=description,
                ai_model=ai_model,
                metadata=metadata,
            ),
        )

    @server.tool(name="start_step", description="Start a new step in the current project")
    def start_step(
        session_id: str,
        step_type: StepTypeName,
        title: str,
        description: str,
        input: dict[str, Any] | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> str:
        return respond(
            "start_step",
            _drop_none(
                session_id=session_id,
                step_type=step_type,
                title=title,
                description=description,
                input=input,
                metadata=metadata,
            ),
        )

    @server.tool(name="complete_step", description="Complete a project step")
    def complete_step(
        step_id: str,
        status: TerminalStepStatus = "completed",
        output: dict[str, Any] | None = None,
        error_message: str | None = None,
    ) -> str:
        return respond(
            "complete_step",
            _drop_none(step_id=step_id, status=status, output=output, error_message=error_message),
        )

    @server.tool(name="add_log", description="Attach a log line to a project step")
    def add_log(
        step_id: str,
        content: str,
        severity: SeverityName = "info",
        metadata: dict[str, Any] | None = None,
    ) -> str:
        return respond(
            "add_log",
            _drop_none(step_id=step_id, content=content, severity=severity, metadata=metadata),
        )

    @server.tool(name="update_metrics", description="Update project metrics")
    def update_metrics(session_id: str, metrics: MetricsPatch) -> str:
        return respond(
            "update_metrics", {"session_id": session_id, "metrics": metrics.to_updates()}
        )

    @server.tool(name="add_insight", description="Add an AI insight or observation")
    def add_insight(
        session_id: str,
        insight_type: InsightTypeName,
        title: str,
        description: str,
        confidence: Percentage | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> str:
        return respond(
            "add_insight",
            _drop_none(
                session_id=session_id,
                insight_type=insight_type,
                title=title,
                description=description,
                confidence=confidence,
                metadata=metadata,
            ),
        )

    @server.tool(name="complete_project", description="Complete the project session")
    def complete_project(
        session_id: str,
        status: Literal["completed", "failed"] = "completed",
    ) -> str:
        return respond("complete_project", {"session_id": session_id, "status": status})

    @server.tool(name="generate_report", description="Generate a comprehensive project report")
    def generate_report(session_id: str, format: ReportFormat = "json") -> str:
        return respond("generate_report", {"session_id": session_id, "format": format})

    @server.tool(name="get_project_status", description="Get current project status and progress")
    def get_project_status(session_id: str) -> str:
        return respond("get_project_status", {"session_id": session_id})

    @server.tool(name="list_steps", description="List all steps in a project")
    def list_steps(session_id: str, status: StepStatusName | None = None) -> str:
        return respond("list_steps", _drop_none(session_id=session_id, status=status))

    @server.tool(name="get_timeline", description="Get project timeline events")
    def get_timeline(session_id: str, event_type: EventTypeName | None = None) -> str:
        return respond("get_timeline", _drop_none(session_id=session_id, event_type=event_type))

    @server.tool(name="get_insights", description="Get AI insights for the project")
    def get_insights(session_id: str, insight_type: InsightTypeName | None = None) -> str:
        return respond(
            "get_insights", _drop_none(session_id=session_id, insight_type=insight_type)
        )

    @server.tool(name="list_sessions", description="List all project sessions")
    def list_sessions(status: SessionStatusName | None = None, limit: int | None = None) -> str:
        return respond("list_sessions", _drop_none(status=status, limit=limit))

    logger.debug(f"Registered {len(dispatcher.tool_names)} tools on {SERVER_NAME}")
    return server
