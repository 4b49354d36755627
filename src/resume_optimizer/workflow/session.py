"""Async shell around the optimization state machine."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from datetime import datetime, timezone
from typing import Protocol

from resume_optimizer.clients.gateway import ModelGateway, classify_exception
from resume_optimizer.errors import GATEWAY_MESSAGES, GatewayErrorKind, ResumeInputError
from resume_optimizer.validation.normalize import normalize_resume
from resume_optimizer.validation.schema import ResumeSchemaValidator, ValidationResult
from resume_optimizer.workflow.state import (
    Action,
    OperationMode,
    RequestFailed,
    RequestStarted,
    ResultAccepted,
    ResultRejected,
    ResumeLoaded,
    Reverted,
    SessionReset,
    WorkflowState,
    reduce,
)

logger = logging.getLogger(__name__)


class SchemaValidator(Protocol):
    def validate(self, document: object) -> ValidationResult: ...


class OptimizationSession:
    """Owns one editing session: current resume, baseline, last result.

    Readers get immutable :class:`WorkflowState` snapshots through
    :attr:`state`; every mutation goes through :func:`reduce`. Gateway and
    validation failures end in ``status == error`` instead of raising;
    precondition violations raise before anything changes.
    """

    def __init__(
        self,
        gateway: ModelGateway,
        *,
        validator: SchemaValidator | None = None,
        clock: Callable[[], datetime] | None = None,
        on_change: Callable[[WorkflowState], None] | None = None,
        state: WorkflowState | None = None,
    ):
        self.gateway = gateway
        self.validator = validator or ResumeSchemaValidator()
        self.clock = clock or (lambda: datetime.now(timezone.utc))
        self.on_change = on_change
        self._state = state or WorkflowState()

    @property
    def state(self) -> WorkflowState:
        return self._state

    def _dispatch(self, action: Action) -> WorkflowState:
        self._state = reduce(self._state, action)
        if self.on_change:
            self.on_change(self._state)
        return self._state

    # --- session lifecycle ---------------------------------------------------

    def load_resume(self, document: dict) -> WorkflowState:
        """Start a new session from a user-supplied document.

        Raises ResumeInputError when the normalized document is invalid.
        """
        normalized = normalize_resume(document)
        result = self.validator.validate(normalized)
        if not result.is_valid:
            logger.warning("Rejected resume with %d validation errors", len(result.errors))
            raise ResumeInputError("Resume JSON is not valid.", result.errors)
        return self._dispatch(ResumeLoaded(normalized))

    def reset_session(self) -> WorkflowState:
        return self._dispatch(SessionReset())

    def revert(self) -> WorkflowState:
        return self._dispatch(Reverted())

    # --- model-backed transitions ---------------------------------------------

    async def optimize(self, job_description: str, *, prompt_override: str | None = None) -> WorkflowState:
        """Tailor the current resume to ``job_description``."""
        return await self._run(OperationMode.OPTIMIZE, job_description, prompt_override)

    async def adjust(self, instructions: str, *, prompt_override: str | None = None) -> WorkflowState:
        """Apply free-text edits; the diff stays relative to the baseline."""
        return await self._run(OperationMode.ADJUST, instructions, prompt_override)

    async def convert(self, resume_text: str, *, prompt_override: str | None = None) -> WorkflowState:
        """Turn plain resume text into a structured resume and start a session on it."""
        return await self._run(OperationMode.CONVERT, resume_text, prompt_override)

    async def _run(
        self,
        mode: OperationMode,
        instructions: str,
        prompt_override: str | None,
    ) -> WorkflowState:
        # Preconditions are checked here, before the first await, so a
        # second caller sees ``running`` and is rejected.
        self._dispatch(RequestStarted(mode, instructions, self.gateway.has_credential))
        resume = self._state.current if mode is not OperationMode.CONVERT else None

        try:
            return await self._complete(resume, instructions, mode, prompt_override)
        finally:
            if self._state.is_running:
                logger.warning("%s request ended without a result", mode.value)
                self._dispatch(RequestFailed(GATEWAY_MESSAGES[GatewayErrorKind.UNKNOWN]))

    async def _complete(
        self,
        resume: dict | None,
        instructions: str,
        mode: OperationMode,
        prompt_override: str | None,
    ) -> WorkflowState:
        start = time.monotonic()
        try:
            result = await self.gateway.invoke(
                resume,
                instructions,
                mode=mode,
                prompt_override=prompt_override,
            )
        except Exception as exc:
            error = classify_exception(exc)
            if error is not exc:
                logger.exception("Unexpected %s failure", mode.value)
            return self._dispatch(RequestFailed(error.message))
        logger.debug("%s call took %.1fs", mode.value, time.monotonic() - start)

        try:
            document = normalize_resume(result.document)
            validation = self.validator.validate(document)
            if not validation.is_valid:
                logger.warning(
                    "Discarding %s result: %s", mode.value, "; ".join(validation.errors)
                )
                return self._dispatch(ResultRejected(validation.errors))

            return self._dispatch(
                ResultAccepted(document, result.metadata, received_at=self.clock())
            )
        except Exception:
            if not self._state.is_running:
                raise
            logger.exception("Could not apply %s result", mode.value)
            return self._dispatch(RequestFailed(GATEWAY_MESSAGES[GatewayErrorKind.UNKNOWN]))
