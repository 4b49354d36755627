"""Prompt text for optimization, adjustment and text-to-JSON conversion."""

from __future__ import annotations

import json

DEFAULT_OPTIMIZATION_SYSTEM_PROMPT = """\
You are tailoring a resume. Use only the provided resume content as the source \
of truth. Align the language with the job description while keeping content \
believable and concise."""

DEFAULT_ADJUSTMENT_SYSTEM_PROMPT = """\
Apply precise edits to the resume according to the instructions. Keep all \
other content unchanged."""

DEFAULT_CONVERSION_SYSTEM_PROMPT = """\
You convert plain-text resumes into structured JSON using the provided schema. \
Preserve all factual details, dates, companies, and quantifiable outcomes. When \
content includes bullet points, render them as HTML <ul><li>...</li></ul>. Do \
not fabricate information or invent new roles.

Constraints:
- Follow the JSON schema exactly. All keys must match.
- If information is missing (e.g., phone, location), use an empty string.
- Remove optional sections (projects, certifications, etc.) if they have no \
content, or set "visible": false with an empty "items" array.
- Produce valid JSON only - no markdown, commentary, or backticks.
- Keep summaries concise and professional."""

RESUME_SCHEMA_SNIPPET = """\
{
  "basics": {
    "name": "string",
    "headline": "string",
    "email": "string",
    "phone": "string",
    "location": "string",
    "url": { "label": "string", "href": "string" },
    "profiles": [
      { "network": "string", "username": "string", "url": "string" }
    ]
  },
  "sections": {
    "summary": {
      "id": "summary",
      "name": "Professional Summary",
      "visible": true,
      "content": "<p>Short HTML summary.</p>"
    },
    "experience": {
      "id": "experience",
      "name": "Experience",
      "visible": true,
      "items": [
        {
          "id": "exp-1",
          "visible": true,
          "company": "string",
          "position": "string",
          "location": "string",
          "date": "string",
          "summary": "<ul><li>HTML bullet</li></ul>"
        }
      ]
    },
    "projects": {
      "id": "projects",
      "name": "Projects",
      "visible": false,
      "items": []
    },
    "skills": {
      "id": "skills",
      "name": "Skills",
      "visible": true,
      "items": [
        { "id": "skill-1", "visible": true, "name": "string", "keywords": ["string"] }
      ]
    },
    "education": {
      "id": "education",
      "name": "Education",
      "visible": true,
      "items": [
        {
          "id": "edu-1",
          "visible": true,
          "institution": "string",
          "studyType": "string",
          "date": "string",
          "location": "string",
          "score": "string",
          "summary": "string"
        }
      ]
    }
  }
}"""

METADATA_INSTRUCTION = """\
You may wrap the result as {"resume": <resume JSON>, "metadata": {...}} where \
metadata holds improvementsCount, keywordsMatched, wordCount and a list of \
changes ({type, section, description, before, after, reason})."""


def _system(default: str, override: str | None) -> str:
    if override and override.strip():
        return override.strip()
    return default


def build_optimization_prompt(
    resume: dict, job_description: str, override: str | None = None
) -> tuple[str, str]:
    """Return ``(system, prompt)`` for a job-targeted optimization."""
    prompt = f"""Rules:
1. Maintain existing structure and keys exactly.
2. Make subtle wording improvements; do not add new sections or experiences.
3. Integrate relevant keywords naturally.
4. Ensure total content length increases by no more than 10%.

Job description:
{job_description}

Resume JSON:
{json.dumps(resume, indent=2, ensure_ascii=False)}

{METADATA_INSTRUCTION}

Return ONLY the optimized JSON."""
    return _system(DEFAULT_OPTIMIZATION_SYSTEM_PROMPT, override), prompt


def build_adjustment_prompt(
    resume: dict, instructions: str, override: str | None = None
) -> tuple[str, str]:
    """Return ``(system, prompt)`` for a free-text adjustment round."""
    prompt = f"""Instructions:
{instructions}

Resume JSON:
{json.dumps(resume, indent=2, ensure_ascii=False)}

Rules:
- Maintain exact schema and keys.
- If removing items, delete them cleanly from arrays.
- Do not add commentary.

Return ONLY the adjusted JSON."""
    return _system(DEFAULT_ADJUSTMENT_SYSTEM_PROMPT, override), prompt


def build_conversion_prompt(resume_text: str, override: str | None = None) -> tuple[str, str]:
    """Return ``(system, prompt)`` for plain text to structured resume."""
    prompt = f"""Resume schema:
{RESUME_SCHEMA_SNIPPET}

Resume text:
{resume_text}

Return the JSON now:"""
    return _system(DEFAULT_CONVERSION_SYSTEM_PROMPT, override), prompt
