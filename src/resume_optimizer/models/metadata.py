"""Pydantic models for optimization metadata."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class ChangeDescription(BaseModel):
    """A model-reported change, e.g. a rewritten bullet and why."""

    type: str = "modified"
    section: str = "General"
    description: str | None = None
    before: str | None = None
    after: str | None = None
    reason: str | None = None


class OptimizationMetadata(BaseModel):
    improvements_count: int | None = Field(default=None, alias="improvementsCount")
    keywords_matched: list[str] | None = Field(default=None, alias="keywordsMatched")
    word_count: int | None = Field(default=None, alias="wordCount")
    processing_time_seconds: float | None = Field(
        default=None, alias="processingTimeSeconds"
    )
    changes: list[ChangeDescription] | None = None
    timestamp: str | None = None

    model_config = ConfigDict(populate_by_name=True)

    def to_dict(self) -> dict:
        """camelCase dict with absent fields dropped."""
        return self.model_dump(by_alias=True, exclude_none=True)
