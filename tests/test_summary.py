"""Tests for report summary computation."""

from aitracker.persistence.models import OverallStatus, ProjectStep, StepStatus, StepType
from aitracker.tracker import MAX_NEXT_STEPS, build_summary


def _steps(*specs):
    """Build steps from (status, step_type, duration) tuples."""
    return [
        ProjectStep(
            session_id="s",
            step_number=i + 1,
            step_type=StepType(step_type),
            title=f"step {i + 1}",
            status=StepStatus(status),
            duration=duration,
        )
        for i, (status, step_type, duration) in enumerate(specs)
    ]


class TestCompletionAndEfficiency:
    """Tests for percentages and the overall verdict."""

    def test_no_steps(self):
        summary = build_summary("s", [])
        assert summary.completion_percentage == 0
        assert summary.efficiency_score == 100
        assert summary.overall_status == OverallStatus.FAILURE
        assert summary.total_time_spent == 0

    def test_mixed_outcome(self):
        steps = _steps(
            ("completed", "analysis", 1000),
            ("completed", "analysis", 2000),
            ("failed", "debugging", 500),
            ("pending", "planning", None),
        )
        summary = build_summary("s", steps)
        assert summary.completion_percentage == 50
        assert summary.efficiency_score == 88
        assert summary.overall_status == OverallStatus.PARTIAL_SUCCESS
        assert summary.total_time_spent == 3500
        assert summary.main_challenges == ["step 3"]
        assert summary.next_steps == ["step 4"]

    def test_efficiency_rounds_half_up(self):
        """3 failed of 4 gives 62.5, reported as 63."""
        steps = _steps(
            ("completed", "analysis", None),
            ("failed", "analysis", None),
            ("failed", "analysis", None),
            ("failed", "analysis", None),
        )
        summary = build_summary("s", steps)
        assert summary.efficiency_score == 63
        assert summary.completion_percentage == 25
        assert summary.overall_status == OverallStatus.FAILURE

    def test_completion_rounds_half_up(self):
        steps = _steps(("completed", "analysis", None), *[("pending", "analysis", None)] * 7)
        assert build_summary("s", steps).completion_percentage == 13

    def test_all_completed_is_success(self):
        steps = _steps(*[("completed", "analysis", 10)] * 5)
        summary = build_summary("s", steps)
        assert summary.completion_percentage == 100
        assert summary.overall_status == OverallStatus.SUCCESS

    def test_ninety_percent_without_failures_is_success(self):
        steps = _steps(*[("completed", "analysis", None)] * 9, ("skipped", "analysis", None))
        summary = build_summary("s", steps)
        assert summary.completion_percentage == 90
        assert summary.overall_status == OverallStatus.SUCCESS

    def test_any_failure_caps_at_partial(self):
        steps = _steps(*[("completed", "analysis", None)] * 19, ("failed", "analysis", None))
        summary = build_summary("s", steps)
        assert summary.completion_percentage == 95
        assert summary.overall_status == OverallStatus.PARTIAL_SUCCESS

    def test_below_ninety_is_partial(self):
        steps = _steps(*[("completed", "analysis", None)] * 17, *[("pending", "analysis", None)] * 3)
        summary = build_summary("s", steps)
        assert summary.completion_percentage == 85
        assert summary.overall_status == OverallStatus.PARTIAL_SUCCESS


class TestLists:
    """Tests for achievements, challenges and next steps."""

    def test_achievements_only_deployment_and_testing(self):
        steps = _steps(
            ("completed", "deployment", None),
            ("completed", "analysis", None),
            ("completed", "testing", None),
            ("failed", "testing", None),
        )
        assert build_summary("s", steps).key_achievements == ["step 1", "step 3"]

    def test_next_steps_capped(self):
        steps = _steps(*[("pending", "planning", None)] * 5)
        next_steps = build_summary("s", steps).next_steps
        assert len(next_steps) == MAX_NEXT_STEPS == 3
        assert next_steps == ["step 1", "step 2", "step 3"]

    def test_in_progress_is_not_a_next_step(self):
        steps = _steps(("in_progress", "analysis", None))
        assert build_summary("s", steps).next_steps == []
