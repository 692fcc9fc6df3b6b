"""Tests for exception hierarchy."""

import pytest

from aitracker.exceptions import (
    ConfigError,
    NotFoundError,
    SessionNotFoundError,
    StateTransitionError,
    StepNotFoundError,
    TrackerError,
    UnknownToolError,
)


class TestTrackerError:
    """Tests for base TrackerError."""

    def test_basic_error(self):
        """Test basic error creation."""
        err = TrackerError("Something went wrong")
        assert err.message == "Something went wrong"
        assert err.details == {}
        assert str(err) == "Something went wrong"

    def test_error_with_details(self):
        """Test error with details dict."""
        err = TrackerError("Error occurred", {"code": 500})
        assert err.details == {"code": 500}
        assert "code" in str(err)
        assert "500" in str(err)


class TestLookupErrors:
    """Tests for not-found errors."""

    def test_session_not_found(self):
        err = SessionNotFoundError("abc")
        assert isinstance(err, NotFoundError)
        assert isinstance(err, TrackerError)
        assert err.session_id == "abc"
        assert err.message == "Project session not found: abc"

    def test_step_not_found(self):
        err = StepNotFoundError("s-1")
        assert isinstance(err, NotFoundError)
        assert err.step_id == "s-1"
        assert "s-1" in err.message


class TestOtherErrors:
    """Tests for config, state and dispatch errors."""

    def test_config_error(self):
        """ConfigError inherits from TrackerError."""
        assert isinstance(ConfigError("Bad config"), TrackerError)

    def test_state_transition_error(self):
        err = StateTransitionError("nope", from_state="completed", to_state="failed")
        assert err.from_state == "completed"
        assert err.to_state == "failed"
        assert err.details == {"from_state": "completed", "to_state": "failed"}

    def test_unknown_tool_error(self):
        err = UnknownToolError("frobnicate")
        assert err.message == "Unknown tool: frobnicate"
        assert err.name == "frobnicate"

    def test_errors_can_be_caught_as_base(self):
        with pytest.raises(TrackerError):
            raise SessionNotFoundError("x")
