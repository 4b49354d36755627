"""Human-readable labels for change paths."""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping

from resume_optimizer.models.changes import IndexedSegment, PathSegment

DEFAULT_SEPARATOR = " › "

# First segment of every section path; not meaningful to the reader.
WRAPPER_KEY = "sections"

FIELD_LABELS: dict[str, str] = {
    "basics": "Basics",
    "name": "Name",
    "headline": "Headline",
    "email": "Email",
    "phone": "Phone",
    "location": "Location",
    "url": "Link",
    "href": "URL",
    "label": "Label",
    "customFields": "Custom Field",
    "profiles": "Profiles",
    "network": "Network",
    "username": "Username",
    "picture": "Picture",
    "summary": "Summary",
    # the body of a summary-like section reads as the section itself
    "content": "",
    "experience": "Experience",
    "projects": "Projects",
    "skills": "Skills",
    "education": "Education",
    "awards": "Awards",
    "certifications": "Certifications",
    "volunteer": "Volunteer",
    "interests": "Interests",
    "languages": "Languages",
    "items": "Entry",
    "company": "Company",
    "position": "Position",
    "date": "Date",
    "description": "Description",
    "keywords": "Keywords",
    "level": "Level",
    "institution": "Institution",
    "studyType": "Degree",
    "score": "Score",
    "visible": "Visibility",
    "columns": "Columns",
    "separateLinks": "Separate Links",
    "id": "ID",
}

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")
_SEPARATORS = re.compile(r"[_\-\s]+")


def start_case(key: str) -> str:
    """``studyType`` -> ``Study Type``, ``separate_links`` -> ``Separate Links``."""
    spaced = _CAMEL_BOUNDARY.sub(" ", key)
    words = [word for word in _SEPARATORS.split(spaced) if word]
    return " ".join(word[:1].upper() + word[1:] for word in words)


class PathFormatter:
    """Render change paths with a curated label dictionary."""

    def __init__(
        self,
        labels: Mapping[str, str] | None = None,
        separator: str = DEFAULT_SEPARATOR,
    ):
        self.labels = dict(FIELD_LABELS)
        if labels:
            self.labels.update(labels)
        self.separator = separator

    def label_for(self, key: str) -> str:
        if key in self.labels:
            return self.labels[key]
        return start_case(key)

    def format_segment(self, segment: PathSegment) -> str:
        if isinstance(segment, IndexedSegment):
            base = self.label_for(segment.key) if segment.key else "Item"
            return f"{base} {segment.index + 1}"
        return self.label_for(segment)

    def format(self, path: Iterable[PathSegment]) -> str:
        segments = list(path)
        if segments and segments[0] == WRAPPER_KEY:
            segments = segments[1:]
        parts = [self.format_segment(s) for s in segments]
        shown = [part for part in parts if part]
        if not shown and segments:
            return start_case(str(segments[-1]))
        return self.separator.join(shown)


_default_formatter = PathFormatter()


def format_path(path: Iterable[PathSegment]) -> str:
    """Format a path with the default labels and separator."""
    return _default_formatter.format(path)
