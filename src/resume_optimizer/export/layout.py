"""Flatten a resume document into renderable blocks shared by DOCX and PDF."""

from __future__ import annotations

import html
import re
from dataclasses import dataclass

from resume_optimizer.diff.path_formatter import start_case

SECTION_ORDER = ("summary", "experience", "projects", "education", "skills")
DEFAULT_SECTION_NAMES = {
    "summary": "Professional Summary",
    "experience": "Experience",
    "projects": "Projects",
    "education": "Education",
    "skills": "Skills",
}

_LIST_ITEM = re.compile(r"<li[^>]*>(.*?)</li>", re.DOTALL | re.IGNORECASE)
_BLOCK_BREAK = re.compile(r"</?(?:p|br|div|ul|ol)[^>]*>", re.IGNORECASE)
_TAG = re.compile(r"<[^>]+>")


@dataclass(frozen=True)
class Block:
    """One line of output.

    kind is one of: name, contact, heading, entry, subtitle, text, bullet, spacer.
    ``aside`` is right-aligned text (dates, locations) for entry/subtitle.
    """

    kind: str
    text: str = ""
    aside: str = ""


def plain_text(value: str) -> str:
    text = _TAG.sub("", value)
    return html.unescape(text).strip()


def html_lines(value: str) -> list[tuple[str, str]]:
    """Split rich text into ("bullet" | "text", line) pairs."""
    bullets = _LIST_ITEM.findall(value)
    if bullets:
        return [("bullet", plain_text(b)) for b in bullets if plain_text(b)]
    parts = _BLOCK_BREAK.split(value)
    return [("text", plain_text(p)) for p in parts if plain_text(p)]


def _text(value) -> str:
    return value.strip() if isinstance(value, str) else ""


def _href(value) -> str:
    if isinstance(value, dict):
        return _text(value.get("href"))
    return _text(value)


def _visible(record) -> bool:
    return isinstance(record, dict) and record.get("visible", True) is not False


def _header(basics: dict) -> list[Block]:
    blocks = [Block("name", _text(basics.get("name")))]
    contact = [_text(basics.get(key)) for key in ("location", "email", "phone")]
    contact.append(_href(basics.get("url")))
    for profile in basics.get("profiles") or []:
        if isinstance(profile, dict):
            contact.append(_href(profile.get("url")))
    contact = [part for part in contact if part]
    if contact:
        blocks.append(Block("contact", " | ".join(contact)))
    return blocks


def _rich(value) -> list[Block]:
    if not isinstance(value, str) or not value.strip():
        return []
    return [Block(kind, line) for kind, line in html_lines(value)]


def _experience(item: dict) -> list[Block]:
    return [
        Block("entry", _text(item.get("company")), _text(item.get("location"))),
        Block("subtitle", _text(item.get("position")), _text(item.get("date"))),
        *_rich(item.get("summary")),
    ]


def _project(item: dict) -> list[Block]:
    blocks = [Block("entry", _text(item.get("name")), _text(item.get("date")))]
    description = _text(item.get("description"))
    if description:
        blocks.append(Block("subtitle", plain_text(description)))
    return blocks + _rich(item.get("summary"))


def _education(item: dict) -> list[Block]:
    degree = " ".join(
        part for part in (_text(item.get("studyType")), _text(item.get("area"))) if part
    )
    score = _text(item.get("score"))
    if score:
        degree = f"{degree} • {score}" if degree else score
    return [
        Block("entry", _text(item.get("institution")), _text(item.get("location"))),
        Block("subtitle", degree, _text(item.get("date"))),
    ]


def _skill(item: dict) -> list[Block]:
    keywords = [k for k in item.get("keywords") or [] if isinstance(k, str)]
    name = _text(item.get("name"))
    if keywords:
        return [Block("text", f"{name}: {', '.join(keywords)}" if name else ", ".join(keywords))]
    return [Block("text", name)] if name else []


def _generic(item: dict) -> list[Block]:
    title = _text(item.get("name")) or _text(item.get("title"))
    blocks = [Block("entry", title, _text(item.get("date")))] if title else []
    return blocks + _rich(item.get("summary")) + _rich(item.get("description"))


_ITEM_BLOCKS = {
    "experience": _experience,
    "projects": _project,
    "education": _education,
    "skills": _skill,
}


def _section(key: str, section: dict) -> list[Block]:
    title = _text(section.get("name")) or DEFAULT_SECTION_NAMES.get(key) or start_case(key)
    body: list[Block] = []

    content = section.get("content")
    if isinstance(content, str):
        body.extend(_rich(content))

    items = section.get("items")
    if isinstance(items, list):
        render = _ITEM_BLOCKS.get(key, _generic)
        for item in items:
            if not _visible(item):
                continue
            body.extend(render(item))
            if key != "skills":
                body.append(Block("spacer"))

    if not body:
        return []
    return [Block("heading", title.upper()), *body]


def resume_blocks(document: dict) -> list[Block]:
    """Header, the standard sections in fixed order, then any others."""
    basics = document.get("basics") or {}
    blocks = _header(basics if isinstance(basics, dict) else {})

    sections = document.get("sections") or {}
    if not isinstance(sections, dict):
        return blocks
    ordered = [k for k in SECTION_ORDER if k in sections]
    ordered += [k for k in sections if k not in SECTION_ORDER]
    for key in ordered:
        section = sections[key]
        if _visible(section):
            blocks.extend(_section(key, section))
    return blocks
