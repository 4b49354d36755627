"""Resume intake: JSON documents and plain-text files for conversion."""

from __future__ import annotations

import json
import logging
import re
from pathlib import Path

from resume_optimizer.errors import ResumeInputError
from resume_optimizer.validation.normalize import normalize_resume
from resume_optimizer.validation.schema import validate_resume

logger = logging.getLogger(__name__)

TEXT_SUFFIXES = (".txt", ".md")


def parse_resume_json(text: str) -> dict:
    """Parse pasted or uploaded resume JSON.

    The document is normalized and validated; problems are reported as a
    ResumeInputError carrying field-qualified messages.
    """
    try:
        raw = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ResumeInputError(
            "Resume is not valid JSON.",
            [f"Line {exc.lineno}, column {exc.colno}: {exc.msg}"],
        ) from exc

    document = normalize_resume(raw)
    result = validate_resume(document)
    if not result.is_valid:
        raise ResumeInputError("Resume JSON is not valid.", result.errors)
    return document


def load_resume_file(file_path: str | Path) -> dict:
    """Load a structured resume from a .json file."""
    path = Path(file_path)
    if path.suffix.lower() != ".json":
        raise ResumeInputError(f"Expected a .json resume, got {path.suffix or 'no extension'}")
    return parse_resume_json(path.read_text(encoding="utf-8"))


def parse_resume_text(file_path: str | Path) -> str:
    """Extract plain text from a PDF, DOCX, TXT or MD resume for conversion."""
    path = Path(file_path)
    suffix = path.suffix.lower()
    if suffix == ".pdf":
        text = _parse_pdf(path)
    elif suffix in (".docx", ".doc"):
        text = _parse_docx(path)
    elif suffix in TEXT_SUFFIXES:
        text = path.read_text(encoding="utf-8")
    else:
        raise ResumeInputError(f"Unsupported file format: {path.suffix}")
    logger.debug("Read %d chars of resume text from %s", len(text), path.name)
    return clean_text(text)


def clean_text(text: str) -> str:
    """Remove extraction artifacts: BOM, zero-width characters, odd bullets."""
    text = text.lstrip("\ufeff")
    text = re.sub(r"[\u200b\u200c\u200d\u00ad\u2060\ufeff]", "", text)

    # ●, •, ◦, ◆, ■, ▪, ★, ○ → -
    text = re.sub(r"^(\s*)[●•◦◆■▪★○]\s*", r"\1- ", text, flags=re.MULTILINE)

    lines = [re.sub(r"[ \t]{2,}", " ", line).rstrip() for line in text.splitlines()]
    text = "\n".join(lines)
    text = re.sub(r"\n{3,}", "\n\n", text)
    return text.strip()


def _parse_pdf(path: Path) -> str:
    import fitz  # pymupdf

    doc = fitz.open(str(path))
    text = []
    for page in doc:
        text.append(page.get_text())
    doc.close()
    return "\n".join(text)


def _parse_docx(path: Path) -> str:
    from docx import Document

    doc = Document(str(path))
    return "\n".join(p.text for p in doc.paragraphs if p.text.strip())
