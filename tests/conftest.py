"""Shared test fixtures."""

from __future__ import annotations

import copy
from datetime import datetime, timezone
from unittest.mock import AsyncMock

import pytest

from resume_optimizer.clients.gateway import GatewayResult
from resume_optimizer.clients.llm_client import LLMClient, LLMResponse
from resume_optimizer.workflow.state import OperationMode

FIXED_NOW = datetime(2025, 3, 1, 12, 30, 45, 123000, tzinfo=timezone.utc)


def make_resume(name: str = "Jane Doe", summary: str = "Backend engineer.") -> dict:
    return {
        "basics": {
            "name": name,
            "headline": "Software Engineer",
            "email": "jane@example.com",
            "phone": "555-0100",
            "location": "Seattle, WA",
            "url": {"href": "https://jane.dev"},
        },
        "sections": {
            "summary": {
                "id": "summary",
                "name": "Summary",
                "visible": True,
                "content": summary,
            },
            "experience": {
                "id": "experience",
                "name": "Experience",
                "visible": True,
                "items": [
                    {
                        "id": "exp-1",
                        "visible": True,
                        "company": "Acme",
                        "position": "Engineer",
                        "date": "2021 - Present",
                        "location": "Remote",
                        "summary": "<ul><li>Built APIs</li><li>Ran on-call</li></ul>",
                    },
                    {
                        "id": "exp-2",
                        "visible": True,
                        "company": "Globex",
                        "position": "Engineer",
                        "date": "2018 - 2021",
                        "location": "Austin, TX",
                        "summary": "<p>Maintained billing services.</p>",
                    },
                ],
            },
            "skills": {
                "id": "skills",
                "name": "Skills",
                "visible": True,
                "items": [
                    {
                        "id": "skill-1",
                        "visible": True,
                        "name": "Languages",
                        "keywords": ["Python", "Go"],
                    },
                ],
            },
            "education": {
                "id": "education",
                "name": "Education",
                "visible": True,
                "items": [
                    {
                        "id": "edu-1",
                        "visible": True,
                        "institution": "State University",
                        "studyType": "BSc",
                        "area": "Computer Science",
                        "date": "2014 - 2018",
                    },
                ],
            },
        },
    }


@pytest.fixture
def sample_resume() -> dict:
    return make_resume()


@pytest.fixture
def optimized_resume(sample_resume) -> dict:
    doc = copy.deepcopy(sample_resume)
    doc["sections"]["summary"]["content"] = "Backend engineer focused on distributed systems."
    doc["sections"]["experience"]["items"][1]["position"] = "Senior Engineer"
    return doc


@pytest.fixture
def sample_jd_text() -> str:
    return """Senior Backend Engineer

Responsibilities:
- Design and operate distributed services in Go and Python
- Own reliability for payment APIs

Requirements:
- 5+ years of backend experience
- Kubernetes, PostgreSQL, Kafka
"""


class FakeGateway:
    """Scripted ModelGateway: returns queued results or raises queued errors."""

    def __init__(self, *outcomes, has_credential: bool = True):
        self.outcomes = list(outcomes)
        self.has_credential = has_credential
        self.calls: list[tuple] = []

    async def invoke(
        self,
        resume,
        instructions,
        *,
        mode: OperationMode,
        prompt_override=None,
    ) -> GatewayResult:
        self.calls.append((resume, instructions, mode, prompt_override))
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, BaseException):
            raise outcome
        if isinstance(outcome, GatewayResult):
            return outcome
        return GatewayResult(document=outcome)


@pytest.fixture
def resume_factory():
    return make_resume


@pytest.fixture
def gateway_factory():
    return FakeGateway


@pytest.fixture
def fixed_clock():
    return lambda: FIXED_NOW


@pytest.fixture
def mock_llm_client() -> AsyncMock:
    client = AsyncMock(spec=LLMClient)
    client.generate.return_value = LLMResponse(text="{}", input_tokens=100, output_tokens=50)
    client.generate_json.return_value = {}
    return client

