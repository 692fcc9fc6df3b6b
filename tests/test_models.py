"""Tests for persistence models and serialization helpers."""

from datetime import datetime, timedelta, timezone

from aitracker.persistence.models import (
    ProjectSession,
    ProjectStep,
    SessionStatus,
    StepStatus,
    StepType,
    parse_json_or_dict,
    serialize,
    to_iso,
)


class TestEnums:
    """Tests for status enums."""

    def test_terminal_step_statuses(self):
        assert StepStatus.COMPLETED.is_terminal
        assert StepStatus.FAILED.is_terminal
        assert StepStatus.SKIPPED.is_terminal
        assert not StepStatus.PENDING.is_terminal
        assert not StepStatus.IN_PROGRESS.is_terminal

    def test_step_type_is_closed(self):
        assert len(StepType) == 15
        assert StepType("custom") == StepType.CUSTOM


class TestHelpers:
    """Tests for JSON and time helpers."""

    def test_parse_json_or_dict(self):
        assert parse_json_or_dict(None) == {}
        assert parse_json_or_dict('{"a": 1}') == {"a": 1}
        assert parse_json_or_dict("not json") == {}
        assert parse_json_or_dict("[1, 2]") == {}

    def test_to_iso_is_utc_and_sortable(self):
        """Naive datetimes are treated as UTC; strings sort chronologically."""
        base = datetime(2024, 1, 1, 12, 0, 0)
        earlier = to_iso(base)
        later = to_iso(base + timedelta(microseconds=1))
        assert earlier.endswith("+00:00")
        assert earlier < later

    def test_to_iso_converts_offsets(self):
        local = datetime(2024, 1, 1, 15, 0, tzinfo=timezone(timedelta(hours=3)))
        assert to_iso(local).startswith("2024-01-01T12:00:00")

    def test_serialize_enums_and_datetimes(self):
        moment = datetime(2024, 5, 1, tzinfo=timezone.utc)
        data = serialize({"status": SessionStatus.ACTIVE, "at": moment, "items": [StepStatus.FAILED]})
        assert data == {"status": "active", "at": to_iso(moment), "items": ["failed"]}


class TestRowMapping:
    """Tests for from_row/to_row."""

    def test_session_row_round_trip(self):
        session = ProjectSession(
            project_name="demo",
            description="desc",
            status=SessionStatus.PAUSED,
            total_steps=2,
            current_step=2,
            ai_model="model",
            metadata={"nested": {"k": [1, 2]}},
        )
        restored = ProjectSession.from_row(session.to_row())
        assert restored == session

    def test_step_from_row(self):
        row = (
            "s1", "sess", 1, "testing", "Run tests", None,
            "2024-01-01T00:00:00.000000+00:00", None, "in_progress",
            '{"cmd": "pytest"}', None, None, None, None,
        )
        step = ProjectStep.from_row(row)
        assert step.step_type == StepType.TESTING
        assert step.status == StepStatus.IN_PROGRESS
        assert step.input == {"cmd": "pytest"}
        assert step.output == {}
        assert step.metadata == {}
        assert step.duration is None

    def test_to_dict_is_json_ready(self):
        session = ProjectSession(project_name="demo")
        data = session.to_dict()
        assert data["status"] == "active"
        assert isinstance(data["start_time"], str)
        assert data["end_time"] is None
