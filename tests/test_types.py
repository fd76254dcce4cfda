"""Tests for shared types module."""

from resforge.types import FailurePhase, RunStatus, TargetState


class TestEnums:
    """Test enum definitions."""

    def test_target_state_values(self) -> None:
        """TargetState should have expected values."""
        assert TargetState.PENDING.value == "pending"
        assert TargetState.SKIPPED.value == "skipped"
        assert TargetState.RUNNING.value == "running"
        assert TargetState.SUCCEEDED.value == "succeeded"
        assert TargetState.FAILED.value == "failed"

    def test_run_status_values(self) -> None:
        """RunStatus should have expected values."""
        assert RunStatus.SUCCEEDED.value == "succeeded"
        assert RunStatus.FAILED.value == "failed"
        assert RunStatus.ABORTED.value == "aborted"

    def test_failure_phase_values(self) -> None:
        """FailurePhase should have expected values."""
        assert FailurePhase.COMMAND.value == "command"
        assert FailurePhase.COPY.value == "copy"
