"""PDF export using fpdf2 (pure Python, no system deps)."""

from __future__ import annotations

import logging
from io import BytesIO
from pathlib import Path

from fpdf import FPDF

from resume_optimizer.export.layout import Block, resume_blocks

logger = logging.getLogger(__name__)

# Unicode-capable fonts; Helvetica (latin-1 only) otherwise
_UNICODE_FONT_PATHS = [
    "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf",
    "/usr/share/fonts/TTF/DejaVuSans.ttf",
    "/System/Library/Fonts/Supplemental/Arial Unicode.ttf",
    "C:/Windows/Fonts/arial.ttf",
]


def _find_unicode_font() -> str | None:
    for path in _UNICODE_FONT_PATHS:
        if Path(path).exists():
            return path
    return None


def render_pdf(document: dict) -> bytes:
    """Render the resume to PDF bytes."""
    pdf = FPDF(format="Letter")
    pdf.set_margins(15, 15, 15)
    pdf.set_auto_page_break(auto=True, margin=15)
    pdf.add_page()

    font_name = "Helvetica"
    font_path = _find_unicode_font()
    if font_path:
        try:
            pdf.add_font("ResumeFont", "", font_path)
            font_name = "ResumeFont"
        except (OSError, RuntimeError):
            logger.debug("Failed to load font %s", font_path)
    pdf.set_font(font_name, size=10)

    for block in resume_blocks(document):
        _render_block(pdf, block, _safe_text(block.text, pdf), _safe_text(block.aside, pdf))

    buf = BytesIO()
    pdf.output(buf)
    return buf.getvalue()


def export_pdf(document: dict, output_path: str | Path) -> Path:
    """Write the resume as a PDF and return the output path."""
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_bytes(render_pdf(document))
    return output_path


def _render_block(pdf: FPDF, block: Block, text: str, aside: str) -> None:
    width = pdf.w - pdf.l_margin - pdf.r_margin
    if block.kind == "name":
        pdf.set_font_size(16)
        pdf.multi_cell(0, 9, text, align="C", new_x="LMARGIN", new_y="NEXT")
        pdf.set_font_size(10)
    elif block.kind == "contact":
        pdf.multi_cell(0, 5, text, align="C", new_x="LMARGIN", new_y="NEXT")
        pdf.ln(2)
    elif block.kind == "heading":
        pdf.ln(3)
        pdf.set_font_size(12)
        pdf.multi_cell(0, 7, text, new_x="LMARGIN", new_y="NEXT")
        pdf.line(pdf.l_margin, pdf.get_y(), pdf.w - pdf.r_margin, pdf.get_y())
        pdf.ln(2)
        pdf.set_font_size(10)
    elif block.kind in ("entry", "subtitle"):
        if aside:
            aside_width = pdf.get_string_width(aside) + 2
            pdf.cell(width - aside_width, 6, text)
            pdf.cell(aside_width, 6, aside, align="R", new_x="LMARGIN", new_y="NEXT")
        else:
            pdf.multi_cell(0, 6, text, new_x="LMARGIN", new_y="NEXT")
    elif block.kind == "bullet":
        pdf.multi_cell(0, 5, f"  - {text}", new_x="LMARGIN", new_y="NEXT")
    elif block.kind == "text":
        pdf.multi_cell(0, 5, text, new_x="LMARGIN", new_y="NEXT")
    elif block.kind == "spacer":
        pdf.ln(2)


def _safe_text(text: str, pdf: FPDF) -> str:
    """Ensure text is encodable by the current font."""
    if pdf.is_ttf_font:
        return text
    return text.encode("latin-1", errors="replace").decode("latin-1")
