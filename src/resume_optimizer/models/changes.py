"""Change records produced by the structural differ."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class IndexedSegment:
    """Element ``index`` of the array stored under ``key``.

    Kept distinct from a bare integer so the formatter can render
    ``items`` at index 2 as "Entry 3".
    """

    key: str
    index: int

    def __str__(self) -> str:
        return f"{self.key}[{self.index}]"


PathSegment = Union[str, IndexedSegment]


@dataclass(frozen=True)
class ChangeRecord:
    """One field-level or whole-subtree difference between two documents."""

    path: tuple[PathSegment, ...]
    before: str
    after: str

    @property
    def dotted_path(self) -> str:
        """Machine path, e.g. ``sections.experience.items[1].position``."""
        return ".".join(str(segment) for segment in self.path)
