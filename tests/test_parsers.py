"""Tests for resume and JD parsers."""

import json

import pytest
from docx import Document

from resume_optimizer.errors import PreconditionError, ResumeInputError
from resume_optimizer.parsers.jd_parser import load_jd_file, parse_jd
from resume_optimizer.parsers.resume_parser import (
    clean_text,
    load_resume_file,
    parse_resume_json,
    parse_resume_text,
)


class TestJDParser:
    def test_parse_jd_cleans_whitespace(self):
        result = parse_jd("  Hello   World  \r\n\n\n\nLine 2  ")
        assert result == "Hello World\n\nLine 2"

    def test_load_jd_file(self, tmp_path, sample_jd_text):
        jd_file = tmp_path / "jd.txt"
        jd_file.write_text(sample_jd_text, encoding="utf-8")
        result = load_jd_file(jd_file)
        assert result.startswith("Senior Backend Engineer")
        assert "Kubernetes, PostgreSQL, Kafka" in result

    def test_empty_jd_file_is_an_error(self, tmp_path):
        jd_file = tmp_path / "jd.txt"
        jd_file.write_text("  \n\n ", encoding="utf-8")
        with pytest.raises(PreconditionError, match="empty"):
            load_jd_file(jd_file)


class TestParseResumeJson:
    def test_valid_resume(self, sample_resume):
        assert parse_resume_json(json.dumps(sample_resume)) == sample_resume

    def test_syntax_error_reports_position(self):
        with pytest.raises(ResumeInputError) as exc_info:
            parse_resume_json('{"basics": {"name": "Jane",}}')
        assert exc_info.value.message == "Resume is not valid JSON."
        assert exc_info.value.errors[0].startswith("Line 1, column ")

    def test_schema_errors_are_listed(self, sample_resume):
        sample_resume["sections"]["experience"]["items"][0]["position"] = 42
        with pytest.raises(ResumeInputError) as exc_info:
            parse_resume_json(json.dumps(sample_resume))
        assert "sections.experience.items[0].position must be a string." in exc_info.value.errors

    def test_document_is_normalized(self, sample_resume):
        sample_resume["sections"]["projects"] = {
            "id": "projects",
            "name": "Projects",
            "visible": True,
            "items": [{"title": "Ledger", "url": "https://ledger.dev"}],
        }
        result = parse_resume_json(json.dumps(sample_resume))
        project = result["sections"]["projects"]["items"][0]
        assert project["name"] == "Ledger"
        assert project["id"] == "proj-ledger"
        assert project["url"] == {"href": "https://ledger.dev"}


class TestLoadResumeFile:
    def test_json_file(self, tmp_path, sample_resume):
        path = tmp_path / "resume.json"
        path.write_text(json.dumps(sample_resume), encoding="utf-8")
        assert load_resume_file(path) == sample_resume

    def test_non_json_extension_rejected(self, tmp_path):
        path = tmp_path / "resume.txt"
        path.write_text("{}")
        with pytest.raises(ResumeInputError, match="Expected a .json resume"):
            load_resume_file(path)


class TestParseResumeText:
    def test_txt_file(self, tmp_path):
        path = tmp_path / "resume.txt"
        path.write_text("Jane Doe\nEngineer at Acme", encoding="utf-8")
        assert parse_resume_text(path) == "Jane Doe\nEngineer at Acme"

    def test_md_file(self, tmp_path):
        path = tmp_path / "resume.md"
        path.write_text("# Jane Doe\n## Experience", encoding="utf-8")
        assert "# Jane Doe" in parse_resume_text(path)

    def test_docx_file(self, tmp_path):
        path = tmp_path / "resume.docx"
        doc = Document()
        doc.add_paragraph("Jane Doe")
        doc.add_paragraph("")
        doc.add_paragraph("Built APIs at Acme")
        doc.save(str(path))
        assert parse_resume_text(path) == "Jane Doe\nBuilt APIs at Acme"

    def test_unsupported_format(self, tmp_path):
        bad_file = tmp_path / "resume.xyz"
        bad_file.write_text("test")
        with pytest.raises(ResumeInputError, match="Unsupported file format"):
            parse_resume_text(bad_file)


class TestCleanText:
    def test_normalizes_whitespace(self):
        result = clean_text("Title\n\n\n\n\nBody  text   here\n\n\n\nEnd")
        assert "\n\n\n" not in result
        assert "Body text here" in result

    def test_normalizes_bullets(self):
        result = clean_text("● Item 1\n•  Item 2\n◆ Item 3")
        assert result == "- Item 1\n- Item 2\n- Item 3"

    def test_removes_unicode_artifacts(self):
        result = clean_text("\ufeffJane\u200b Doe\u00ad")
        assert result == "Jane Doe"
