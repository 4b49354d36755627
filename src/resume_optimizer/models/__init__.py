"""Data models for the resume optimizer."""

from resume_optimizer.models.changes import ChangeRecord, IndexedSegment, PathSegment
from resume_optimizer.models.metadata import ChangeDescription, OptimizationMetadata

__all__ = [
    "ChangeDescription",
    "ChangeRecord",
    "IndexedSegment",
    "OptimizationMetadata",
    "PathSegment",
]
