import json
from pathlib import Path


def to_json(document: dict) -> str:
    return json.dumps(document, indent=2, ensure_ascii=False)


def export_json(document: dict, output_path: str | Path) -> Path:
    """Write the document exactly as held, pretty-printed with 2-space indent."""
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(to_json(document) + "\n", encoding="utf-8")
    return output_path
