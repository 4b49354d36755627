"""Tests for OptimizationSession (async workflow shell)."""

from __future__ import annotations

import asyncio
import copy

import pytest

from resume_optimizer.clients.gateway import GatewayResult
from resume_optimizer.diff.path_formatter import format_path
from resume_optimizer.errors import (
    GatewayError,
    GatewayErrorKind,
    PreconditionError,
    ResumeInputError,
    WorkflowBusyError,
)
from resume_optimizer.validation.schema import ValidationResult
from resume_optimizer.workflow.session import OptimizationSession
from resume_optimizer.workflow.state import OperationMode, WorkflowState, WorkflowStatus


class AcceptAll:
    def validate(self, document):
        return ValidationResult(is_valid=True)


class TestLoadResume:
    def test_valid_resume_starts_session(self, gateway_factory, sample_resume):
        session = OptimizationSession(gateway_factory())
        state = session.load_resume(sample_resume)
        assert state.current == sample_resume
        assert state.baseline is None

    def test_invalid_resume_raises_with_errors(self, gateway_factory, sample_resume):
        del sample_resume["basics"]["name"]
        session = OptimizationSession(gateway_factory())
        with pytest.raises(ResumeInputError) as exc_info:
            session.load_resume(sample_resume)
        assert "basics.name is required." in exc_info.value.errors
        assert session.state.current is None

    def test_on_change_sees_every_transition(self, gateway_factory, sample_resume):
        seen = []
        session = OptimizationSession(gateway_factory(), on_change=seen.append)
        session.load_resume(sample_resume)
        session.reset_session()
        assert [s.current is None for s in seen] == [False, True]


class TestOptimize:
    async def test_end_to_end_summary_change(self, gateway_factory):
        baseline = {
            "basics": {"name": "A"},
            "sections": {"summary": {"id": "s", "name": "Summary", "visible": True, "content": "old"}},
        }
        result = copy.deepcopy(baseline)
        result["sections"]["summary"]["content"] = "new"
        session = OptimizationSession(
            gateway_factory(result),
            validator=AcceptAll(),
            state=WorkflowState(current=baseline),
        )

        state = await session.optimize("Product engineer")

        assert state.status is WorkflowStatus.SUCCESS
        assert len(state.diff_items) == 1
        change = state.diff_items[0]
        assert (change.before, change.after) == ("old", "new")
        assert format_path(change.path) == "Summary"
        assert state.metadata.improvements_count == 1

    async def test_gateway_receives_current_and_instructions(
        self, gateway_factory, sample_resume, optimized_resume, sample_jd_text
    ):
        gateway = gateway_factory(optimized_resume)
        session = OptimizationSession(gateway)
        session.load_resume(sample_resume)

        await session.optimize(sample_jd_text, prompt_override="Custom")

        resume, instructions, mode, override = gateway.calls[0]
        assert resume == sample_resume
        assert instructions == sample_jd_text
        assert mode is OperationMode.OPTIMIZE
        assert override == "Custom"

    async def test_model_metadata_is_merged(self, gateway_factory, sample_resume, optimized_resume, fixed_clock):
        gateway = gateway_factory(
            GatewayResult(optimized_resume, {"keywordsMatched": ["Go"], "improvements_count": 5})
        )
        session = OptimizationSession(gateway, clock=fixed_clock)
        session.load_resume(sample_resume)

        state = await session.optimize("Go backend")

        assert state.metadata.improvements_count == 5
        assert state.metadata.keywords_matched == ["Go"]
        assert state.metadata.timestamp == "2025-03-01T12:30:45.123Z"

    async def test_model_result_is_normalized(self, gateway_factory, sample_resume):
        result = copy.deepcopy(sample_resume)
        result["sections"]["experience"]["items"][0]["url"] = "https://acme.example"
        session = OptimizationSession(gateway_factory(result))
        session.load_resume(sample_resume)

        state = await session.optimize("jd")

        assert state.current["sections"]["experience"]["items"][0]["url"] == {
            "href": "https://acme.example"
        }


class TestAdjust:
    async def test_diff_stays_relative_to_baseline(self, gateway_factory, sample_resume, optimized_resume):
        adjusted = copy.deepcopy(optimized_resume)
        adjusted["sections"]["summary"]["content"] = "Backend engineer."
        adjusted["basics"]["headline"] = "Staff Engineer"
        gateway = gateway_factory(optimized_resume, adjusted)
        session = OptimizationSession(gateway)
        session.load_resume(sample_resume)

        await session.optimize("jd")
        state = await session.adjust("Revert the summary, promote the headline")

        paths = {c.dotted_path for c in state.diff_items}
        # position changed in round one and is still different from the baseline
        assert "sections.experience.items[1].position" in paths
        assert "basics.headline" in paths
        # summary is back to the baseline value
        assert "sections.summary.content" not in paths
        assert state.baseline == sample_resume
        assert gateway.calls[1][0] == optimized_resume
        assert gateway.calls[1][2] is OperationMode.ADJUST

    async def test_revert_after_adjustments(self, gateway_factory, sample_resume, optimized_resume):
        session = OptimizationSession(gateway_factory(optimized_resume))
        session.load_resume(sample_resume)
        await session.optimize("jd")

        state = session.revert()

        assert state.current == sample_resume
        assert state.diff_items == ()
        assert state.metadata is None


class TestFailures:
    async def test_gateway_error_is_recovered(self, gateway_factory, sample_resume):
        session = OptimizationSession(
            gateway_factory(GatewayError(GatewayErrorKind.QUOTA_EXCEEDED))
        )
        session.load_resume(sample_resume)

        state = await session.optimize("jd")

        assert state.status is WorkflowStatus.ERROR
        assert state.last_error == "API quota exceeded"
        assert state.current == sample_resume

    async def test_unexpected_exception_is_classified(self, gateway_factory, sample_resume):
        session = OptimizationSession(gateway_factory(RuntimeError("failed to fetch")))
        session.load_resume(sample_resume)

        state = await session.optimize("jd")

        assert state.last_error == "Network error connecting to AI service"

    async def test_invalid_result_keeps_documents(self, gateway_factory, sample_resume):
        bad = copy.deepcopy(sample_resume)
        bad["basics"]["name"] = ""
        session = OptimizationSession(gateway_factory(bad))
        session.load_resume(sample_resume)

        state = await session.optimize("jd")

        assert state.status is WorkflowStatus.ERROR
        assert state.last_error.startswith("AI generated invalid resume format")
        assert "basics.name cannot be empty." in state.last_error
        assert state.current == sample_resume
        assert state.baseline == sample_resume

    async def test_missing_credential_raises_before_call(self, gateway_factory, sample_resume):
        gateway = gateway_factory(has_credential=False)
        session = OptimizationSession(gateway)
        session.load_resume(sample_resume)

        with pytest.raises(PreconditionError, match="Add your API key"):
            await session.optimize("jd")

        assert gateway.calls == []
        assert session.state.status is WorkflowStatus.IDLE
        assert session.state.baseline is None

    async def test_concurrent_request_is_rejected(self, sample_resume, optimized_resume):
        release = asyncio.Event()

        class SlowGateway:
            has_credential = True

            async def invoke(self, resume, instructions, *, mode, prompt_override=None):
                await release.wait()
                return GatewayResult(optimized_resume)

        session = OptimizationSession(SlowGateway())
        session.load_resume(sample_resume)

        first = asyncio.create_task(session.optimize("jd"))
        await asyncio.sleep(0)
        assert session.state.is_running

        with pytest.raises(WorkflowBusyError):
            await session.adjust("more")

        release.set()
        state = await first
        assert state.status is WorkflowStatus.SUCCESS

    async def test_non_finite_model_metadata_is_ignored(
        self, gateway_factory, sample_resume, optimized_resume
    ):
        nan_metadata = {"improvementsCount": float("nan"), "wordCount": float("inf")}
        session = OptimizationSession(
            gateway_factory(GatewayResult(optimized_resume, nan_metadata), optimized_resume)
        )
        session.load_resume(sample_resume)

        state = await session.optimize("jd")

        assert state.status is WorkflowStatus.SUCCESS
        assert state.metadata.improvements_count == 2
        assert state.metadata.word_count is None
        assert (await session.adjust("more")).status is WorkflowStatus.SUCCESS

    async def test_failure_applying_result_is_recovered(
        self, gateway_factory, sample_resume, optimized_resume
    ):
        class BrokenValidator:
            def validate(self, document):
                raise RuntimeError("validator crashed")

        session = OptimizationSession(
            gateway_factory(optimized_resume),
            validator=BrokenValidator(),
            state=WorkflowState(current=sample_resume),
        )

        state = await session.optimize("jd")

        assert state.status is WorkflowStatus.ERROR
        assert state.last_error == "AI request failed"
        assert state.current == sample_resume
        assert session.revert().current == sample_resume

    async def test_cancelled_request_does_not_stay_running(
        self, gateway_factory, sample_resume, optimized_resume
    ):
        class HangingGateway:
            has_credential = True

            async def invoke(self, resume, instructions, *, mode, prompt_override=None):
                await asyncio.Event().wait()

        session = OptimizationSession(HangingGateway())
        session.load_resume(sample_resume)

        task = asyncio.create_task(session.optimize("jd"))
        await asyncio.sleep(0)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        assert session.state.status is WorkflowStatus.ERROR
        assert session.state.last_error == "AI request failed"
        session.gateway = gateway_factory(optimized_resume)
        assert (await session.optimize("jd")).status is WorkflowStatus.SUCCESS


class TestConvert:
    async def test_convert_starts_new_session(self, gateway_factory, sample_resume):
        gateway = gateway_factory(sample_resume)
        session = OptimizationSession(gateway)

        state = await session.convert("Jane Doe\nBackend engineer at Acme")

        assert state.current == sample_resume
        assert state.baseline is None
        assert state.status is WorkflowStatus.IDLE
        assert gateway.calls[0][0] is None
        assert gateway.calls[0][2] is OperationMode.CONVERT

    async def test_optimize_after_convert_diffs_against_converted(
        self, gateway_factory, sample_resume, optimized_resume
    ):
        session = OptimizationSession(gateway_factory(sample_resume, optimized_resume))
        await session.convert("resume text")

        state = await session.optimize("jd")

        assert state.baseline == sample_resume
        assert len(state.diff_items) == 2
