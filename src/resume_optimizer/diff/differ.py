"""Structural deep diff over arbitrary JSON documents.

Values are classified into a :class:`JsonKind` and compared per kind:

* absent on both sides: nothing
* absent on one side: a single record for the whole subtree
* strings: exact comparison, whitespace and case included
* arrays of primitives: compared as one opaque value
* arrays with structured elements: compared index by index
* objects: union of keys, "before" order first
* anything else: strict equality

Output order follows traversal order, so the same inputs always produce the
same list.
"""

from __future__ import annotations

import json
import math
from enum import Enum
from typing import Any

from resume_optimizer.models.changes import ChangeRecord, IndexedSegment, PathSegment

EMPTY_PLACEHOLDER = "--"


class _Absent:
    """Marker for a key or index that does not exist on one side."""

    _instance: _Absent | None = None

    def __new__(cls) -> _Absent:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "ABSENT"

    def __bool__(self) -> bool:
        return False


ABSENT = _Absent()


class JsonKind(str, Enum):
    ABSENT = "absent"
    NULL = "null"
    BOOL = "bool"
    NUMBER = "number"
    STRING = "string"
    ARRAY = "array"
    OBJECT = "object"
    OTHER = "other"


PRIMITIVE_KINDS = frozenset({JsonKind.NULL, JsonKind.BOOL, JsonKind.NUMBER, JsonKind.STRING})


def kind_of(value: Any) -> JsonKind:
    if value is ABSENT:
        return JsonKind.ABSENT
    if value is None:
        return JsonKind.NULL
    # bool before number: bool is an int subclass
    if isinstance(value, bool):
        return JsonKind.BOOL
    if isinstance(value, (int, float)):
        return JsonKind.NUMBER
    if isinstance(value, str):
        return JsonKind.STRING
    if isinstance(value, (list, tuple)):
        return JsonKind.ARRAY
    if isinstance(value, dict):
        return JsonKind.OBJECT
    return JsonKind.OTHER


def display_string(value: Any) -> str:
    """Render any value the way the change table shows it."""
    kind = kind_of(value)
    if kind in (JsonKind.ABSENT, JsonKind.NULL):
        return EMPTY_PLACEHOLDER
    if kind is JsonKind.STRING:
        return value
    if kind is JsonKind.BOOL:
        return "true" if value else "false"
    if kind is JsonKind.NUMBER:
        return _number_text(value)
    if kind is JsonKind.ARRAY:
        return ", ".join(_element_text(entry) for entry in value)
    try:
        return json.dumps(value, ensure_ascii=False, separators=(",", ":"))
    except (TypeError, ValueError):
        return repr(value)


def _element_text(value: Any) -> str:
    # null inside a list reads as "null", not as the empty placeholder
    if value is None:
        return "null"
    return display_string(value)


def _number_text(value: int | float) -> str:
    if isinstance(value, float):
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "Infinity" if value > 0 else "-Infinity"
        if value.is_integer():
            return str(int(value))
    return str(value)


def diff(before: Any, after: Any) -> list[ChangeRecord]:
    """Compare two JSON-like values and return the ordered change list.

    Never raises; unexpected types degrade to a scalar comparison.
    """
    changes: list[ChangeRecord] = []
    _collect(before, after, (), changes)
    return changes


def diff_documents(before: dict | None, after: dict | None) -> list[ChangeRecord]:
    """Diff two resume documents; an empty list when either is missing."""
    if not before or not after:
        return []
    return diff(before, after)


def _collect(
    before: Any,
    after: Any,
    path: tuple[PathSegment, ...],
    changes: list[ChangeRecord],
) -> None:
    before_kind = kind_of(before)
    after_kind = kind_of(after)

    if before_kind is JsonKind.ABSENT and after_kind is JsonKind.ABSENT:
        return

    if before_kind is JsonKind.ABSENT or after_kind is JsonKind.ABSENT:
        changes.append(ChangeRecord(path, display_string(before), display_string(after)))
        return

    if before_kind is JsonKind.STRING and after_kind is JsonKind.STRING:
        if before != after:
            changes.append(ChangeRecord(path, before, after))
        return

    if before_kind is JsonKind.ARRAY and after_kind is JsonKind.ARRAY:
        _collect_array(before, after, path, changes)
        return

    if before_kind is JsonKind.OBJECT and after_kind is JsonKind.OBJECT:
        for key in _union_keys(before, after):
            _collect(
                before.get(key, ABSENT),
                after.get(key, ABSENT),
                path + (key,),
                changes,
            )
        return

    if not _identical(before, before_kind, after, after_kind):
        changes.append(ChangeRecord(path, display_string(before), display_string(after)))


def _collect_array(
    before: list | tuple,
    after: list | tuple,
    path: tuple[PathSegment, ...],
    changes: list[ChangeRecord],
) -> None:
    if _all_primitive(before) and _all_primitive(after):
        if not _sequences_equal(before, after):
            changes.append(ChangeRecord(path, display_string(before), display_string(after)))
        return

    for index in range(max(len(before), len(after))):
        before_item = before[index] if index < len(before) else ABSENT
        after_item = after[index] if index < len(after) else ABSENT
        _collect(before_item, after_item, _element_path(path, index), changes)


def _element_path(path: tuple[PathSegment, ...], index: int) -> tuple[PathSegment, ...]:
    """Bind the index to the key that holds the array."""
    if path and isinstance(path[-1], str):
        return path[:-1] + (IndexedSegment(path[-1], index),)
    # top-level array, or an array nested directly inside another array
    return path + (IndexedSegment("", index),)


def _union_keys(before: dict, after: dict) -> list[str]:
    keys = list(before)
    keys.extend(key for key in after if key not in before)
    return keys


def _all_primitive(values: list | tuple) -> bool:
    return all(kind_of(value) in PRIMITIVE_KINDS for value in values)


def _sequences_equal(before: list | tuple, after: list | tuple) -> bool:
    if len(before) != len(after):
        return False
    return all(
        _identical(b, kind_of(b), a, kind_of(a)) for b, a in zip(before, after)
    )


def _identical(before: Any, before_kind: JsonKind, after: Any, after_kind: JsonKind) -> bool:
    if before_kind is not after_kind:
        return False
    if before_kind is JsonKind.NULL:
        return True
    if before_kind in (JsonKind.BOOL, JsonKind.NUMBER, JsonKind.STRING):
        return before == after
    return before is after
