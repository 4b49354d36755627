"""Pull a resume JSON object out of free-form model output."""

from __future__ import annotations

import json
import re

_FENCED_OBJECT = re.compile(r"```(?:json)?\s*(\{[\s\S]*\})\s*```")


def extract_json_object(text: str) -> dict:
    """Extract the JSON object a model returned.

    Tries in order:
    1. A ```json fenced block holding an object
    2. Direct json.loads on the stripped text
    3. First '{' to last '}'
    4. Closing the braces/brackets of a truncated response

    Raises ValueError when none of these yields an object.
    """
    if not isinstance(text, str):
        raise ValueError("Model response is not text")
    text = text.strip()

    match = _FENCED_OBJECT.search(text)
    candidates = [match.group(1)] if match else []
    candidates.append(text)

    for candidate in candidates:
        parsed = _loads_object(candidate)
        if parsed is not None:
            return parsed

    parsed = _loads_object(_between_braces(text))
    if parsed is not None:
        return parsed

    parsed = _loads_object(_close_truncated(text))
    if parsed is not None:
        return parsed

    raise ValueError(f"Could not extract JSON object from text: {text[:200]}...")


def _loads_object(candidate: str | None) -> dict | None:
    if not candidate:
        return None
    try:
        value = json.loads(candidate)
    except json.JSONDecodeError:
        return None
    return value if isinstance(value, dict) else None


def _between_braces(text: str) -> str | None:
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end <= start:
        return None
    return text[start : end + 1]


def _close_truncated(text: str) -> str | None:
    """Append the closers a response cut off mid-object is missing."""
    start = text.find("{")
    if start == -1:
        return None

    candidate = text[start:].rstrip()
    if candidate.endswith("```"):
        candidate = candidate[:-3].rstrip()

    closers: list[str] = []
    in_string = False
    escaped = False
    for char in candidate:
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue
        if char == '"':
            in_string = True
        elif char in "{[":
            closers.append("}" if char == "{" else "]")
        elif char in "}]" and closers:
            closers.pop()

    if not closers:
        return None
    if in_string:
        candidate += '"'
    candidate = candidate.rstrip().rstrip(",")
    return candidate + "".join(reversed(closers))
