"""DOCX export generated from scratch with python-docx."""

from __future__ import annotations

import logging
from pathlib import Path

from docx import Document
from docx.enum.text import WD_ALIGN_PARAGRAPH, WD_TAB_ALIGNMENT
from docx.shared import Inches, Pt, RGBColor

from resume_optimizer.export.layout import Block, resume_blocks

logger = logging.getLogger(__name__)

HEADING_FONT = "Arial"
BODY_FONT = "Calibri"
MARGIN = Inches(0.5)
RIGHT_TAB = Inches(7.5)


def export_docx(document: dict, output_path: str | Path) -> Path:
    """Write the resume as a .docx and return the output path."""
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    doc = Document()
    style = doc.styles["Normal"]
    style.font.name = BODY_FONT
    style.font.size = Pt(11)
    for section in doc.sections:
        section.top_margin = section.bottom_margin = MARGIN
        section.left_margin = section.right_margin = MARGIN

    blocks = resume_blocks(document)
    for block in blocks:
        _render_block(doc, block)

    doc.save(str(output_path))
    logger.debug("Wrote %d blocks to %s", len(blocks), output_path)
    return output_path


def _render_block(doc, block: Block) -> None:
    if block.kind == "name":
        p = doc.add_paragraph()
        p.alignment = WD_ALIGN_PARAGRAPH.CENTER
        run = p.add_run(block.text)
        run.bold = True
        run.font.name = HEADING_FONT
        run.font.size = Pt(16)
    elif block.kind == "contact":
        p = doc.add_paragraph()
        p.alignment = WD_ALIGN_PARAGRAPH.CENTER
        p.add_run(block.text).font.size = Pt(10)
    elif block.kind == "heading":
        heading = doc.add_heading(block.text, level=1)
        for run in heading.runs:
            run.font.name = HEADING_FONT
            run.font.size = Pt(12)
            run.font.color.rgb = RGBColor(0x1A, 0x1A, 0x1A)
    elif block.kind in ("entry", "subtitle"):
        p = doc.add_paragraph()
        p.paragraph_format.tab_stops.add_tab_stop(RIGHT_TAB, WD_TAB_ALIGNMENT.RIGHT)
        p.paragraph_format.space_after = Pt(0 if block.kind == "entry" else 3)
        run = p.add_run(block.text)
        if block.kind == "entry":
            run.bold = True
            run.font.name = HEADING_FONT
        else:
            run.italic = True
        if block.aside:
            p.add_run(f"\t{block.aside}")
    elif block.kind == "bullet":
        doc.add_paragraph(block.text, style="List Bullet")
    elif block.kind == "text":
        doc.add_paragraph(block.text)
    elif block.kind == "spacer":
        doc.add_paragraph().paragraph_format.space_after = Pt(6)
