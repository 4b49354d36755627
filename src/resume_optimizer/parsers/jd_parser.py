import re
from pathlib import Path

from resume_optimizer.errors import PreconditionError


def parse_jd(text: str) -> str:
    """Normalize a pasted job description, keeping paragraph breaks."""
    text = text.replace("\r\n", "\n")
    lines = [re.sub(r"[ \t]+", " ", line).strip() for line in text.splitlines()]
    return re.sub(r"\n{3,}", "\n\n", "\n".join(lines)).strip()


def load_jd_file(file_path: str | Path) -> str:
    """Load a job description from a text file; an empty file is an error."""
    text = parse_jd(Path(file_path).read_text(encoding="utf-8"))
    if not text:
        raise PreconditionError(f"Job description file is empty: {file_path}")
    return text
