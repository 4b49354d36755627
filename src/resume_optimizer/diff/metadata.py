"""Reconcile model-supplied optimization metadata with the computed diff."""

from __future__ import annotations

import logging
import math
from collections.abc import Callable, Mapping, Sequence
from datetime import datetime, timezone
from typing import Any

from resume_optimizer.models.changes import ChangeRecord
from resume_optimizer.models.metadata import ChangeDescription, OptimizationMetadata

logger = logging.getLogger(__name__)

DEFAULT_CHANGE_TYPE = "modified"
DEFAULT_CHANGE_SECTION = "General"


def utc_timestamp(now: datetime | None = None) -> str:
    """ISO-8601 UTC timestamp with millisecond precision and a ``Z`` suffix."""
    moment = now or datetime.now(timezone.utc)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    moment = moment.astimezone(timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def merge(
    raw: Any,
    diff_items: Sequence[ChangeRecord],
    *,
    clock: Callable[[], datetime] | None = None,
) -> OptimizationMetadata | None:
    """Build the canonical metadata record for one optimization result.

    ``raw`` is whatever the model sent (possibly nothing). Field names are
    accepted in camelCase or snake_case, camelCase winning when both are well
    typed. When the model gives no count, the diff length is used so there
    is always a number to show; no metadata and no diff yields ``None``.
    """
    now = clock() if clock else None

    if not isinstance(raw, Mapping):
        if not diff_items:
            return None
        return OptimizationMetadata(
            improvements_count=len(diff_items),
            timestamp=utc_timestamp(now),
        )

    improvements = _read(raw, "improvementsCount", "improvements_count", _number)
    if improvements is None:
        improvements = len(diff_items)

    word_count = _read(raw, "wordCount", "word_count", _number)
    processing = _read(raw, "processingTimeSeconds", "processing_time_seconds", _number)

    timestamp = raw.get("timestamp")
    if not isinstance(timestamp, str):
        timestamp = utc_timestamp(now)

    return OptimizationMetadata(
        improvements_count=int(improvements),
        keywords_matched=_read(raw, "keywordsMatched", "keywords_matched", _keywords),
        word_count=int(word_count) if word_count is not None else None,
        processing_time_seconds=float(processing) if processing is not None else None,
        changes=_changes(raw.get("changes")),
        timestamp=timestamp,
    )


def _read(raw: Mapping, camel: str, snake: str, coerce: Callable[[Any], Any]) -> Any:
    """First well-typed value, camelCase before snake_case."""
    value = coerce(raw.get(camel))
    if value is None:
        value = coerce(raw.get(snake))
    return value


def _number(value: Any) -> int | float | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if not math.isfinite(value):
        return None
    return value


def _keywords(value: Any) -> list[str] | None:
    if not isinstance(value, (list, tuple)):
        return None
    return [keyword for keyword in value if isinstance(keyword, str)]


def _changes(value: Any) -> list[ChangeDescription] | None:
    if not isinstance(value, (list, tuple)):
        return None

    changes = []
    for entry in value:
        if not isinstance(entry, Mapping):
            logger.debug("Dropping malformed change entry: %r", entry)
            continue
        changes.append(
            ChangeDescription(
                type=_text_or(entry.get("type"), DEFAULT_CHANGE_TYPE),
                section=_text_or(entry.get("section"), DEFAULT_CHANGE_SECTION),
                description=_text(entry.get("description")),
                before=_text(entry.get("before")),
                after=_text(entry.get("after")),
                reason=_text(entry.get("reason")),
            )
        )
    return changes


def _text(value: Any) -> str | None:
    return value if isinstance(value, str) else None


def _text_or(value: Any, default: str) -> str:
    return value if isinstance(value, str) else default
