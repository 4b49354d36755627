"""Tests for the pure workflow transitions."""

from __future__ import annotations

import copy
from dataclasses import replace

import pytest

from resume_optimizer.errors import PreconditionError, WorkflowBusyError
from resume_optimizer.workflow.state import (
    INVALID_RESULT,
    MISSING_CREDENTIAL,
    MISSING_INSTRUCTIONS,
    MISSING_RESUME,
    NOTHING_TO_REVERT,
    OperationMode,
    RequestFailed,
    RequestStarted,
    ResultAccepted,
    ResultRejected,
    ResumeLoaded,
    Reverted,
    SessionReset,
    WorkflowState,
    WorkflowStatus,
    reduce,
)


def _optimize(instructions: str = "Backend role", has_credential: bool = True) -> RequestStarted:
    return RequestStarted(OperationMode.OPTIMIZE, instructions, has_credential)


def _adjust(instructions: str = "Shorten summary") -> RequestStarted:
    return RequestStarted(OperationMode.ADJUST, instructions, True)


@pytest.fixture
def loaded(sample_resume) -> WorkflowState:
    return reduce(WorkflowState(), ResumeLoaded(sample_resume))


class TestLoadAndReset:
    def test_load_starts_fresh_session(self, sample_resume):
        state = reduce(WorkflowState(), ResumeLoaded(sample_resume))
        assert state.current == sample_resume
        assert state.current is not sample_resume
        assert state.baseline is None
        assert state.status is WorkflowStatus.IDLE

    def test_load_discards_previous_baseline(self, loaded, resume_factory):
        running = reduce(loaded, _optimize())
        state = reduce(running, ResumeLoaded(resume_factory(name="Other")))
        assert state.baseline is None
        assert state.diff_items == ()

    def test_reset_clears_everything(self, loaded):
        assert reduce(loaded, SessionReset()) == WorkflowState()

    def test_unknown_action_raises(self, loaded):
        with pytest.raises(TypeError):
            reduce(loaded, object())


class TestRequestStarted:
    def test_captures_baseline_on_first_call(self, loaded, sample_resume):
        state = reduce(loaded, _optimize())
        assert state.status is WorkflowStatus.RUNNING
        assert state.baseline == sample_resume
        assert state.baseline is not state.current

    def test_clears_last_error(self, loaded):
        failed = replace(loaded, status=WorkflowStatus.ERROR, last_error="boom")
        assert reduce(failed, _optimize()).last_error is None

    def test_keeps_existing_baseline(self, loaded, optimized_resume, sample_resume):
        state = reduce(loaded, _optimize())
        state = reduce(state, ResultAccepted(optimized_resume))
        state = reduce(state, _adjust())
        assert state.baseline == sample_resume
        assert state.current == optimized_resume

    def test_requires_current(self):
        with pytest.raises(PreconditionError, match=MISSING_RESUME):
            reduce(WorkflowState(), _optimize())

    @pytest.mark.parametrize("instructions", ["", "   \n"])
    def test_requires_instructions(self, loaded, instructions):
        with pytest.raises(PreconditionError) as exc_info:
            reduce(loaded, _optimize(instructions))
        assert str(exc_info.value) == MISSING_INSTRUCTIONS[OperationMode.OPTIMIZE]

    def test_requires_credential(self, loaded):
        with pytest.raises(PreconditionError) as exc_info:
            reduce(loaded, _optimize(has_credential=False))
        assert str(exc_info.value) == MISSING_CREDENTIAL[OperationMode.OPTIMIZE]

    def test_failed_precondition_leaves_state_alone(self, loaded):
        before = copy.deepcopy(loaded)
        with pytest.raises(PreconditionError):
            reduce(loaded, _optimize(has_credential=False))
        assert loaded == before
        assert loaded.baseline is None

    def test_rejects_second_request_while_running(self, loaded):
        running = reduce(loaded, _optimize())
        with pytest.raises(WorkflowBusyError):
            reduce(running, _adjust())

    def test_convert_does_not_need_current_or_capture_baseline(self):
        state = reduce(WorkflowState(), RequestStarted(OperationMode.CONVERT, "Jane Doe\nEngineer", True))
        assert state.status is WorkflowStatus.RUNNING
        assert state.baseline is None


class TestResultAccepted:
    def test_diff_against_baseline_and_metadata(self, loaded, optimized_resume):
        state = reduce(loaded, _optimize())
        state = reduce(state, ResultAccepted(optimized_resume))
        assert state.status is WorkflowStatus.SUCCESS
        assert state.current == optimized_resume
        assert len(state.diff_items) == 2
        assert state.metadata.improvements_count == 2

    def test_cumulative_diff_across_adjustments(self, loaded, optimized_resume):
        state = reduce(loaded, _optimize())
        state = reduce(state, ResultAccepted(optimized_resume))

        third = copy.deepcopy(optimized_resume)
        third["basics"]["headline"] = "Staff Engineer"
        state = reduce(state, _adjust())
        state = reduce(state, ResultAccepted(third))

        paths = {c.dotted_path for c in state.diff_items}
        assert "sections.summary.content" in paths
        assert "sections.experience.items[1].position" in paths
        assert "basics.headline" in paths

    def test_received_at_sets_timestamp(self, loaded, optimized_resume, fixed_clock):
        state = reduce(loaded, _optimize())
        state = reduce(state, ResultAccepted(optimized_resume, received_at=fixed_clock()))
        assert state.metadata.timestamp == "2025-03-01T12:30:45.123Z"

    def test_unchanged_result_has_no_metadata(self, loaded, sample_resume):
        state = reduce(loaded, _optimize())
        state = reduce(state, ResultAccepted(copy.deepcopy(sample_resume)))
        assert state.diff_items == ()
        assert state.metadata is None

    def test_convert_result_starts_fresh_session(self, optimized_resume):
        state = reduce(WorkflowState(), RequestStarted(OperationMode.CONVERT, "text", True))
        state = reduce(state, ResultAccepted(optimized_resume))
        assert state.current == optimized_resume
        assert state.baseline is None
        assert state.status is WorkflowStatus.IDLE
        assert state.diff_items == ()


class TestFailures:
    def test_request_failed_keeps_documents(self, loaded, sample_resume):
        running = reduce(loaded, _optimize())
        state = reduce(running, RequestFailed("API quota exceeded"))
        assert state.status is WorkflowStatus.ERROR
        assert state.last_error == "API quota exceeded"
        assert state.current == sample_resume
        assert state.baseline == running.baseline

    def test_failure_clears_previous_result(self, loaded, optimized_resume):
        state = reduce(loaded, _optimize())
        state = reduce(state, ResultAccepted(optimized_resume))
        state = reduce(state, _adjust())
        state = reduce(state, RequestFailed("Network error connecting to AI service"))
        assert state.current == optimized_resume
        assert state.diff_items == ()
        assert state.metadata is None

    def test_rejected_result_lists_errors(self, loaded):
        state = reduce(loaded, _optimize())
        state = reduce(state, ResultRejected(["basics.name is required.", "sections must be an object."]))
        assert state.status is WorkflowStatus.ERROR
        assert state.last_error == (
            f"{INVALID_RESULT}: basics.name is required. sections must be an object."
        )

    def test_error_state_accepts_new_request(self, loaded):
        state = reduce(loaded, _optimize())
        state = reduce(state, RequestFailed("AI request failed"))
        assert reduce(state, _optimize()).status is WorkflowStatus.RUNNING


class TestRevert:
    def test_restores_baseline_exactly(self, loaded, optimized_resume, sample_resume):
        state = reduce(loaded, _optimize())
        state = reduce(state, ResultAccepted(optimized_resume))
        state = reduce(state, Reverted())
        assert state.current == state.baseline == sample_resume
        assert state.current is not state.baseline
        assert state.diff_items == ()
        assert state.metadata is None
        assert state.status is WorkflowStatus.IDLE

    def test_keeps_baseline_for_next_round(self, loaded, optimized_resume, sample_resume):
        state = reduce(loaded, _optimize())
        state = reduce(state, ResultAccepted(optimized_resume))
        state = reduce(state, Reverted())
        state = reduce(state, _optimize())
        assert state.baseline == sample_resume

    def test_requires_baseline(self, loaded):
        with pytest.raises(PreconditionError, match=NOTHING_TO_REVERT):
            reduce(loaded, Reverted())

    def test_rejected_while_running(self, loaded):
        running = reduce(loaded, _optimize())
        with pytest.raises(WorkflowBusyError):
            reduce(running, Reverted())
        assert not running.can_revert
