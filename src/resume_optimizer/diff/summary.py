"""Result-view helpers: headline metrics and the capped change table."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from resume_optimizer.diff.path_formatter import PathFormatter
from resume_optimizer.models.changes import ChangeRecord
from resume_optimizer.models.metadata import OptimizationMetadata

MAX_VISIBLE_CHANGES = 50


@dataclass(frozen=True)
class Metric:
    id: str
    value: str
    label: str


@dataclass(frozen=True)
class ChangeRow:
    field: str
    before: str
    after: str


def summarize(
    diff_items: Sequence[ChangeRecord],
    metadata: OptimizationMetadata | None,
) -> list[Metric]:
    """Metrics shown above the change table; empty when nothing changed."""
    if metadata is None:
        if not diff_items:
            return []
        return [Metric("improvements", str(len(diff_items)), "Improvements")]

    metrics = []
    count = metadata.improvements_count
    if count is None:
        count = len(diff_items)
    metrics.append(Metric("improvements", str(count), "Improvements"))

    if metadata.keywords_matched:
        metrics.append(
            Metric("keywords", str(len(metadata.keywords_matched)), "Keywords Matched")
        )
    if metadata.word_count is not None:
        metrics.append(Metric("words", f"{metadata.word_count:,}", "Word Count"))
    if metadata.processing_time_seconds is not None:
        metrics.append(
            Metric("time", f"{metadata.processing_time_seconds:.1f}s", "Processing Time")
        )
    return metrics


def visible_changes(
    diff_items: Sequence[ChangeRecord],
    max_visible: int = MAX_VISIBLE_CHANGES,
    formatter: PathFormatter | None = None,
) -> tuple[list[ChangeRow], str | None]:
    """Format the first ``max_visible`` changes.

    Returns the rows and, when the list was cut, a note for the reader.
    """
    formatter = formatter or PathFormatter()
    shown = diff_items[:max_visible]
    rows = [ChangeRow(formatter.format(item.path), item.before, item.after) for item in shown]

    note = None
    if len(diff_items) > max_visible:
        note = (
            f"Showing first {len(shown)} of {len(diff_items)} changes. "
            "Export JSON to review all updates."
        )
    return rows, note
