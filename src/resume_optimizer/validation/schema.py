"""Resume document validation.

Rules are structural: required contact fields, per-section bookkeeping
(``id``, ``name``, ``visible``) and per-type item checks for the well-known
sections. Unknown sections only need object items. Errors are collected, not
raised, and each names the offending field path.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class ValidationResult:
    is_valid: bool
    errors: list[str] = field(default_factory=list)


def _is_object(value: Any) -> bool:
    return isinstance(value, dict)


class _Checker:
    def __init__(self) -> None:
        self.errors: list[str] = []

    def string(self, value: Any, path: str, *, optional: bool = False, allow_empty: bool = False) -> None:
        if value is None:
            if not optional:
                self.errors.append(f"{path} is required.")
            return
        if not isinstance(value, str):
            self.errors.append(f"{path} must be a string.")
            return
        if not allow_empty and not value.strip():
            self.errors.append(f"{path} cannot be empty.")

    def boolean(self, value: Any, path: str, *, optional: bool = False) -> None:
        if value is None:
            if not optional:
                self.errors.append(f"{path} is required.")
            return
        if not isinstance(value, bool):
            self.errors.append(f"{path} must be a boolean.")

    def number(self, value: Any, path: str, *, optional: bool = False) -> None:
        if value is None:
            if not optional:
                self.errors.append(f"{path} is required.")
            return
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            self.errors.append(f"{path} must be a number.")

    def array(self, value: Any, path: str, *, optional: bool = False) -> list | None:
        if value is None:
            if not optional:
                self.errors.append(f"{path} is required.")
            return None
        if not isinstance(value, list):
            self.errors.append(f"{path} must be an array.")
            return None
        return value

    def strings(self, value: Any, path: str, *, optional: bool = False, allow_empty: bool = False) -> None:
        entries = self.array(value, path, optional=optional)
        if entries is None:
            return
        for index, entry in enumerate(entries):
            if not isinstance(entry, str):
                self.errors.append(f"{path}[{index}] must be a string.")
            elif not allow_empty and not entry.strip():
                self.errors.append(f"{path}[{index}] cannot be empty.")

    def url(self, value: Any, path: str, *, optional: bool = False) -> None:
        if value is None:
            if not optional:
                self.errors.append(f"{path} is required.")
            return
        if not _is_object(value):
            self.errors.append(f"{path} must be an object.")
            return
        if "label" in value:
            self.string(value["label"], f"{path}.label", optional=True, allow_empty=True)
        if "href" in value:
            self.string(value["href"], f"{path}.href", optional=True, allow_empty=True)

    def item(self, item: Any, path: str) -> bool:
        if not _is_object(item):
            self.errors.append(f"{path} must be an object.")
            return False
        return True


def _check_basics(check: _Checker, basics: dict) -> None:
    check.string(basics.get("name"), "basics.name")
    check.string(basics.get("email"), "basics.email")
    for key in ("headline", "phone", "location"):
        check.string(basics.get(key), f"basics.{key}", optional=True, allow_empty=True)

    if "url" in basics:
        check.url(basics["url"], "basics.url", optional=True)

    if "customFields" in basics:
        fields = check.array(basics["customFields"], "basics.customFields", optional=True)
        for index, entry in enumerate(fields or []):
            path = f"basics.customFields[{index}]"
            if not check.item(entry, path):
                continue
            check.string(entry.get("id"), f"{path}.id")
            check.string(entry.get("name"), f"{path}.name")
            check.string(entry.get("value"), f"{path}.value")
            check.string(entry.get("icon"), f"{path}.icon", optional=True, allow_empty=True)

    if "profiles" in basics:
        profiles = check.array(basics["profiles"], "basics.profiles", optional=True)
        for index, entry in enumerate(profiles or []):
            path = f"basics.profiles[{index}]"
            if not check.item(entry, path):
                continue
            check.string(entry.get("network"), f"{path}.network")
            check.string(entry.get("url"), f"{path}.url")
            check.string(entry.get("username"), f"{path}.username", optional=True, allow_empty=True)


def _check_experience(check: _Checker, item: dict, path: str) -> None:
    check.string(item.get("id"), f"{path}.id")
    check.boolean(item.get("visible"), f"{path}.visible", optional=True)
    check.string(item.get("position"), f"{path}.position")
    check.string(item.get("date"), f"{path}.date", allow_empty=True)
    for key in ("summary", "company", "location"):
        check.string(item.get(key), f"{path}.{key}", optional=True, allow_empty=True)
    check.url(item.get("url"), f"{path}.url", optional=True)


def _check_project(check: _Checker, item: dict, path: str) -> None:
    check.string(item.get("id"), f"{path}.id")
    check.boolean(item.get("visible"), f"{path}.visible", optional=True)
    check.string(item.get("name"), f"{path}.name")
    for key in ("description", "summary", "date"):
        check.string(item.get(key), f"{path}.{key}", optional=True, allow_empty=True)
    check.url(item.get("url"), f"{path}.url", optional=True)
    check.strings(item.get("keywords"), f"{path}.keywords", optional=True, allow_empty=True)


def _check_skill(check: _Checker, item: dict, path: str) -> None:
    check.string(item.get("name"), f"{path}.name")
    check.boolean(item.get("visible"), f"{path}.visible", optional=True)
    check.strings(item.get("keywords"), f"{path}.keywords")


def _check_education(check: _Checker, item: dict, path: str) -> None:
    check.string(item.get("id"), f"{path}.id")
    check.boolean(item.get("visible"), f"{path}.visible")
    check.string(item.get("institution"), f"{path}.institution")
    for key in ("studyType", "date", "location", "score", "summary"):
        check.string(item.get(key), f"{path}.{key}", optional=True, allow_empty=True)
    check.url(item.get("url"), f"{path}.url", optional=True)


_ITEM_CHECKS = {
    "experience": _check_experience,
    "projects": _check_project,
    "skills": _check_skill,
    "education": _check_education,
}


def _check_section(check: _Checker, key: str, section: Any) -> None:
    path = f"sections.{key}"
    if not _is_object(section):
        check.errors.append(f"{path} must be an object.")
        return

    check.string(section.get("name"), f"{path}.name")
    check.boolean(section.get("visible"), f"{path}.visible")
    check.string(section.get("id"), f"{path}.id")
    if "columns" in section:
        check.number(section["columns"], f"{path}.columns", optional=True)
    if "separateLinks" in section:
        check.boolean(section["separateLinks"], f"{path}.separateLinks", optional=True)

    if key == "summary":
        check.string(section.get("content"), f"{path}.content")
        return

    items = check.array(section.get("items"), f"{path}.items", optional=key == "profiles")
    if items is None:
        return

    item_check = _ITEM_CHECKS.get(key)
    for index, item in enumerate(items):
        item_path = f"{path}.items[{index}]"
        if check.item(item, item_path) and item_check is not None:
            item_check(check, item, item_path)


def validate_resume(document: Any) -> ValidationResult:
    """Validate a candidate resume document."""
    check = _Checker()

    if not _is_object(document):
        return ValidationResult(False, ["Resume must be a valid JSON object"])

    basics = document.get("basics")
    if not _is_object(basics):
        check.errors.append("Missing or invalid field: basics")
    else:
        _check_basics(check, basics)

    sections = document.get("sections")
    if not _is_object(sections):
        check.errors.append("Missing or invalid field: sections")
    else:
        for key, section in sections.items():
            _check_section(check, key, section)

    return ValidationResult(not check.errors, check.errors)


class ResumeSchemaValidator:
    """Validator object for injection into the workflow."""

    def validate(self, document: Any) -> ValidationResult:
        return validate_resume(document)
