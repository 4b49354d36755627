"""Optimize / adjust / revert workflow."""

from resume_optimizer.workflow.state import (
    OperationMode,
    WorkflowState,
    WorkflowStatus,
    reduce,
)

__all__ = [
    "OperationMode",
    "WorkflowState",
    "WorkflowStatus",
    "reduce",
]
