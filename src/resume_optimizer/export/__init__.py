"""Resume export: JSON, DOCX and PDF."""
from resume_optimizer.export.docx_export import export_docx
from resume_optimizer.export.json_export import export_json
from resume_optimizer.export.pdf_export import export_pdf

EXPORTERS = {
    "json": export_json,
    "docx": export_docx,
    "pdf": export_pdf,
}

__all__ = ["EXPORTERS", "export_docx", "export_json", "export_pdf"]
