"""Tests for the MCP server tool registration."""

import json

import pytest

from mcp.server.fastmcp.exceptions import ToolError

from aitracker.dispatcher import ToolDispatcher
from aitracker.server import SERVER_NAME, create_server


def _text_of(result):
    """Extract the text payload from a FastMCP call_tool result."""
    content = result[0] if isinstance(result, tuple) else result
    return content[0].text


class TestServer:
    """Tests for create_server."""

    def test_server_name(self, tracker):
        assert create_server(tracker).name == SERVER_NAME == "ai-project-tracker"

    @pytest.mark.asyncio
    async def test_all_tools_listed(self, tracker):
        tools = await create_server(tracker).list_tools()
        assert {t.name for t in tools} == set(ToolDispatcher(tracker).tool_names)

    @pytest.mark.asyncio
    async def test_enum_arguments_in_schema(self, tracker):
        tools = {t.name: t for t in await create_server(tracker).list_tools()}
        step_type = tools["start_step"].inputSchema["properties"]["step_type"]
        assert "custom" in step_type["enum"]
        assert set(tools["start_step"].inputSchema["required"]) == {
            "session_id",
            "step_type",
            "title",
            "description",
        }

    @pytest.mark.asyncio
    async def test_call_returns_envelope_json(self, tracker):
        server = create_server(tracker)
        result = await server.call_tool(
            "start_project", {"project_name": "demo", "description": "desc"}
        )
        payload = json.loads(_text_of(result))
        assert payload["success"] is True
        assert tracker.repository.get_session(payload["data"]["session_id"]) is not None

    @pytest.mark.asyncio
    async def test_metrics_schema_is_closed(self, tracker):
        tools = {t.name: t for t in await create_server(tracker).list_tools()}
        schema = tools["update_metrics"].inputSchema
        patch = schema["$defs"]["MetricsPatch"]
        assert patch["additionalProperties"] is False
        assert "complexity" in patch["properties"]

    @pytest.mark.asyncio
    async def test_invalid_metrics_rejected(self, tracker):
        server = create_server(tracker)
        result = await server.call_tool(
            "start_project", {"project_name": "demo", "description": "desc"}
        )
        session_id = json.loads(_text_of(result))["data"]["session_id"]

        with pytest.raises(ToolError):
            await server.call_tool(
                "update_metrics",
                {"session_id": session_id, "metrics": {"complexity": "extreme"}},
            )
        with pytest.raises(ToolError):
            await server.call_tool(
                "add_insight",
                {
                    "session_id": session_id,
                    "insight_type": "pattern",
                    "title": "t",
                    "description": "d",
                    "confidence": 150,
                },
            )

        report = await server.call_tool("generate_report", {"session_id": session_id})
        assert json.loads(_text_of(report))["success"] is True

    @pytest.mark.asyncio
    async def test_valid_metrics_reach_repository(self, tracker):
        server = create_server(tracker)
        result = await server.call_tool(
            "start_project", {"project_name": "demo", "description": "desc"}
        )
        session_id = json.loads(_text_of(result))["data"]["session_id"]

        result = await server.call_tool(
            "update_metrics",
            {"session_id": session_id, "metrics": {"complexity": "high", "files_created": 3}},
        )
        assert json.loads(_text_of(result))["success"] is True
        metrics = tracker.repository.get_metrics(session_id)
        assert metrics.complexity.value == "high"
        assert metrics.files_created == 3
