"""Structural diffing of resume documents."""

from resume_optimizer.diff.differ import EMPTY_PLACEHOLDER, diff, diff_documents, display_string
from resume_optimizer.diff.metadata import merge
from resume_optimizer.diff.path_formatter import PathFormatter, format_path

__all__ = [
    "EMPTY_PLACEHOLDER",
    "PathFormatter",
    "diff",
    "diff_documents",
    "display_string",
    "format_path",
    "merge",
]
