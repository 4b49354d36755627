"""Repair common shape problems in user- or model-supplied resumes."""

from __future__ import annotations

import copy
import re
from typing import Any

PROJECT_NAME_FIELDS = ("title", "project", "projectName")
MAX_DERIVED_NAME = 80

_TAG = re.compile(r"<[^>]*>")
_SPACE = re.compile(r"\s+")
_SLUG = re.compile(r"[^a-z0-9]+")


def strip_html(value: str) -> str:
    return _SPACE.sub(" ", _TAG.sub(" ", value)).strip()


def coerce_url(value: Any) -> dict | None:
    """Turn a url given as a string or list into a ``{"href": ...}`` object."""
    if not value:
        return None
    if isinstance(value, dict):
        return value
    if isinstance(value, str):
        trimmed = value.strip()
        return {"href": trimmed} if trimmed else None
    if isinstance(value, list):
        for entry in value:
            if isinstance(entry, str) and entry.strip():
                return {"href": entry.strip()}
    return None


def normalize_resume(document: Any) -> Any:
    """Return a normalized deep copy; non-objects are returned unchanged."""
    if not isinstance(document, dict):
        return document

    clone = copy.deepcopy(document)
    sections = clone.get("sections")
    if not isinstance(sections, dict):
        return clone

    for key, section in list(sections.items()):
        # {"experience": {"experience": {...}}} style wrappers
        if isinstance(section, dict) and "name" not in section:
            nested = list(section.values())
            if len(nested) == 1 and isinstance(nested[0], dict):
                sections[key] = nested[0]

    experience = sections.get("experience")
    if isinstance(experience, dict) and isinstance(experience.get("items"), list):
        experience["items"] = [_normalize_url_field(item) for item in experience["items"]]

    projects = sections.get("projects")
    if isinstance(projects, dict) and isinstance(projects.get("items"), list):
        items = _normalize_projects(projects["items"])
        projects["items"] = items
        if not items:
            projects["visible"] = False

    return clone


def _normalize_url_field(item: Any) -> Any:
    if not isinstance(item, dict):
        return item
    record = dict(item)
    if "url" in record:
        coerced = coerce_url(record["url"])
        if coerced:
            record["url"] = coerced
        else:
            del record["url"]
    return record


def _normalize_projects(items: list) -> list[dict]:
    normalized: list[dict] = []
    for item in items:
        if not isinstance(item, dict):
            continue
        record = _normalize_url_field(item)
        name = _project_name(record, len(normalized))
        record["name"] = name

        if not isinstance(record.get("id"), str) or not record["id"].strip():
            slug = _SLUG.sub("-", name.lower()).strip("-")
            record["id"] = f"proj-{slug}" if slug else f"proj-{len(normalized) + 1}"

        if not isinstance(record.get("visible"), bool):
            record["visible"] = True

        normalized.append(record)
    return normalized


def _project_name(record: dict, position: int) -> str:
    name = record["name"].strip() if isinstance(record.get("name"), str) else ""

    for field in PROJECT_NAME_FIELDS:
        if not name and isinstance(record.get(field), str):
            name = record[field].strip()

    for field in ("summary", "description"):
        if not name and isinstance(record.get(field), str):
            name = strip_html(record[field])[:MAX_DERIVED_NAME]

    keywords = record.get("keywords")
    if not name and isinstance(keywords, list):
        first = next((k for k in keywords if isinstance(k, str) and k.strip()), None)
        if first:
            name = f"{first.strip()} project"

    return name or f"Project {position + 1}"
