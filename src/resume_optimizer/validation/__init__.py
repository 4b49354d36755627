"""Resume validation and normalization."""

from resume_optimizer.validation.normalize import normalize_resume
from resume_optimizer.validation.schema import (
    ResumeSchemaValidator,
    ValidationResult,
    validate_resume,
)

__all__ = [
    "ResumeSchemaValidator",
    "ValidationResult",
    "normalize_resume",
    "validate_resume",
]
