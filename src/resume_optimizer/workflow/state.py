"""Optimization workflow state and its pure transitions.

Every transition is a function ``(state, action) -> state``; nothing here
performs I/O. The async shell in :mod:`resume_optimizer.workflow.session`
runs the model call and feeds the outcome back through :func:`reduce`.

Diffs are always taken against ``baseline``, the snapshot captured by the
first request of a session, so repeated adjustments show the cumulative
change from the document the user started with.
"""

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Any, Union

from resume_optimizer.diff.differ import diff_documents
from resume_optimizer.diff.metadata import merge
from resume_optimizer.errors import PreconditionError, WorkflowBusyError
from resume_optimizer.models.changes import ChangeRecord
from resume_optimizer.models.metadata import OptimizationMetadata

logger = logging.getLogger(__name__)


class WorkflowStatus(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    SUCCESS = "success"
    ERROR = "error"


class OperationMode(str, Enum):
    OPTIMIZE = "optimize"
    ADJUST = "adjust"
    CONVERT = "convert"


MISSING_CREDENTIAL = {
    OperationMode.OPTIMIZE: "Add your API key to run optimization.",
    OperationMode.ADJUST: "Add your API key to apply adjustments.",
    OperationMode.CONVERT: "Add your API key to convert resume text.",
}

MISSING_INSTRUCTIONS = {
    OperationMode.OPTIMIZE: "Add a job description to run optimization.",
    OperationMode.ADJUST: "Describe the adjustments you want to apply.",
    OperationMode.CONVERT: "Paste resume text to convert.",
}

MISSING_RESUME = "Load a resume before running optimization."
REQUEST_IN_FLIGHT = "An AI request is already running. Wait for it to finish."
NOTHING_TO_REVERT = "There is no original resume to revert to."
INVALID_RESULT = "AI generated invalid resume format"


@dataclass(frozen=True)
class WorkflowState:
    baseline: dict | None = None
    current: dict | None = None
    status: WorkflowStatus = WorkflowStatus.IDLE
    last_error: str | None = None
    diff_items: tuple[ChangeRecord, ...] = ()
    metadata: OptimizationMetadata | None = None
    mode: OperationMode | None = None

    @property
    def is_running(self) -> bool:
        return self.status is WorkflowStatus.RUNNING

    @property
    def can_revert(self) -> bool:
        return self.baseline is not None and not self.is_running


# --- actions -----------------------------------------------------------------


@dataclass(frozen=True)
class ResumeLoaded:
    document: dict


@dataclass(frozen=True)
class SessionReset:
    pass


@dataclass(frozen=True)
class RequestStarted:
    mode: OperationMode
    instructions: str
    has_credential: bool


@dataclass(frozen=True)
class ResultAccepted:
    document: dict
    raw_metadata: Any = None
    received_at: datetime | None = None


@dataclass(frozen=True)
class ResultRejected:
    errors: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class RequestFailed:
    message: str


@dataclass(frozen=True)
class Reverted:
    pass


Action = Union[
    ResumeLoaded,
    SessionReset,
    RequestStarted,
    ResultAccepted,
    ResultRejected,
    RequestFailed,
    Reverted,
]


# --- transitions -------------------------------------------------------------


def reset_session(state: WorkflowState, action: SessionReset | None = None) -> WorkflowState:
    return WorkflowState()


def load_resume(state: WorkflowState, action: ResumeLoaded) -> WorkflowState:
    """Start a new editing session with ``action.document`` as current."""
    return WorkflowState(current=copy.deepcopy(action.document))


def start_request(state: WorkflowState, action: RequestStarted) -> WorkflowState:
    """Check preconditions, capture the baseline, and enter ``running``.

    Raises PreconditionError (WorkflowBusyError while a request runs)
    without touching the state.
    """
    if state.is_running:
        raise WorkflowBusyError(REQUEST_IN_FLIGHT)
    if action.mode is not OperationMode.CONVERT and state.current is None:
        raise PreconditionError(MISSING_RESUME)
    if not action.instructions or not action.instructions.strip():
        raise PreconditionError(MISSING_INSTRUCTIONS[action.mode])
    if not action.has_credential:
        raise PreconditionError(MISSING_CREDENTIAL[action.mode])

    baseline = state.baseline
    if baseline is None and action.mode is not OperationMode.CONVERT:
        baseline = copy.deepcopy(state.current)
        logger.debug("Captured session baseline")

    return replace(
        state,
        baseline=baseline,
        status=WorkflowStatus.RUNNING,
        last_error=None,
        mode=action.mode,
    )


def accept_result(state: WorkflowState, action: ResultAccepted) -> WorkflowState:
    if state.mode is OperationMode.CONVERT:
        # a converted resume starts a fresh session
        return WorkflowState(current=action.document, mode=OperationMode.CONVERT)

    diff_items = tuple(diff_documents(state.baseline, action.document))
    clock = (lambda: action.received_at) if action.received_at else None
    metadata = merge(action.raw_metadata, diff_items, clock=clock)
    logger.debug("Accepted %s result with %d changes", state.mode, len(diff_items))
    return replace(
        state,
        current=action.document,
        status=WorkflowStatus.SUCCESS,
        last_error=None,
        diff_items=diff_items,
        metadata=metadata,
    )


def reject_result(state: WorkflowState, action: ResultRejected) -> WorkflowState:
    message = INVALID_RESULT
    if action.errors:
        message = f"{INVALID_RESULT}: {' '.join(action.errors)}"
    return _fail(state, message)


def fail_request(state: WorkflowState, action: RequestFailed) -> WorkflowState:
    return _fail(state, action.message)


def _fail(state: WorkflowState, message: str) -> WorkflowState:
    return replace(
        state,
        status=WorkflowStatus.ERROR,
        last_error=message,
        diff_items=(),
        metadata=None,
    )


def revert(state: WorkflowState, action: Reverted | None = None) -> WorkflowState:
    """Restore the baseline as current; the baseline itself is kept."""
    if state.is_running:
        raise WorkflowBusyError(REQUEST_IN_FLIGHT)
    if state.baseline is None:
        raise PreconditionError(NOTHING_TO_REVERT)
    return replace(
        state,
        current=copy.deepcopy(state.baseline),
        status=WorkflowStatus.IDLE,
        last_error=None,
        diff_items=(),
        metadata=None,
    )


_TRANSITIONS = {
    ResumeLoaded: load_resume,
    SessionReset: reset_session,
    RequestStarted: start_request,
    ResultAccepted: accept_result,
    ResultRejected: reject_result,
    RequestFailed: fail_request,
    Reverted: revert,
}


def reduce(state: WorkflowState, action: Action) -> WorkflowState:
    """Apply ``action`` to ``state`` and return the new state."""
    try:
        transition = _TRANSITIONS[type(action)]
    except KeyError:
        raise TypeError(f"Unknown workflow action: {action!r}") from None
    return transition(state, action)
