"""Tests for the JSONL logging system."""

import json
import logging

from aitracker.logging import (
    LogConfig,
    SessionLogEntry,
    ToolCallLogEntry,
    now_iso,
    reset_loggers,
    session_logger,
    set_config,
    tool_logger,
)
from aitracker.logging.handlers import create_jsonl_logger


class TestEntries:
    """Tests for log entry dataclasses."""

    def test_tool_call_entry(self):
        entry = ToolCallLogEntry(timestamp=now_iso(), call_id="c1", tool="start_project", success=True)
        data = json.loads(entry.to_json())
        assert data["tool"] == "start_project"
        assert data["success"] is True
        assert ToolCallLogEntry.from_dict({**data, "extra": 1}) == entry

    def test_session_entry_defaults(self):
        entry = SessionLogEntry(timestamp=now_iso(), session_id="s", event_type="step_start")
        assert entry.to_dict()["duration_ms"] == 0
        assert entry.error is None


class TestHandlers:
    """Tests for JSONL output."""

    def test_structured_message_passthrough(self, tmp_path):
        path = tmp_path / "out.jsonl"
        logger = create_jsonl_logger("aitracker.test.passthrough", path)
        logger.info(json.dumps({"a": 1}))
        assert json.loads(path.read_text().strip()) == {"a": 1}

    def test_plain_message_wrapped(self, tmp_path):
        path = tmp_path / "out.jsonl"
        logger = create_jsonl_logger("aitracker.test.wrapped", path, level="DEBUG")
        logger.warning("hello")
        data = json.loads(path.read_text().strip())
        assert data["message"] == "hello"
        assert data["level"] == "WARNING"
        assert data["logger"] == "aitracker.test.wrapped"

    def test_does_not_propagate(self, tmp_path):
        logger = create_jsonl_logger("aitracker.test.quiet", tmp_path / "q.jsonl")
        assert logger.propagate is False
        assert len(logger.handlers) == 1

    def test_recreate_replaces_handler(self, tmp_path):
        create_jsonl_logger("aitracker.test.twice", tmp_path / "one.jsonl")
        logger = create_jsonl_logger("aitracker.test.twice", tmp_path / "two.jsonl")
        assert len(logger.handlers) == 1
        logging.getLogger("aitracker.test.twice").info("x")
        assert (tmp_path / "two.jsonl").read_text().strip()


class TestConfig:
    """Tests for LogConfig and lazy loggers."""

    def test_from_env(self, tmp_path, monkeypatch):
        monkeypatch.setenv("AITRACKER_LOG_LEVEL", "DEBUG")
        monkeypatch.setenv("AITRACKER_LOG_DIR", str(tmp_path / "envlogs"))
        monkeypatch.setenv("AITRACKER_LOG_MAX_SIZE_MB", "2")
        config = LogConfig.from_env()
        assert config.tool_level == config.session_level == config.console_level == "DEBUG"
        assert config.log_dir == tmp_path / "envlogs"
        assert config.max_file_size_bytes == 2 * 1024 * 1024

    def test_bad_size_ignored(self, monkeypatch):
        monkeypatch.setenv("AITRACKER_LOG_MAX_SIZE_MB", "lots")
        assert LogConfig.from_env().max_file_size_bytes == 10 * 1024 * 1024

    def test_paths(self, tmp_path):
        config = LogConfig(log_dir=tmp_path)
        assert config.tool_log_path.name == "tool_calls.jsonl"
        assert config.session_log_path.name == "session.jsonl"

    def test_reset_picks_up_new_config(self, tmp_path):
        set_config(LogConfig(log_dir=tmp_path / "first"))
        reset_loggers()
        tool_logger.info(json.dumps({"n": 1}))

        set_config(LogConfig(log_dir=tmp_path / "second"))
        reset_loggers()
        session_logger.info(json.dumps({"n": 2}))
        tool_logger.info(json.dumps({"n": 3}))

        assert (tmp_path / "first" / "tool_calls.jsonl").read_text().count("\n") == 1
        assert json.loads((tmp_path / "second" / "session.jsonl").read_text()) == {"n": 2}
        assert json.loads((tmp_path / "second" / "tool_calls.jsonl").read_text()) == {"n": 3}
