"""Shared fixtures: fake completion service, sample requirements, document builders."""

import asyncio
import io
import json

import docx
import pytest
from reportlab.pdfgen import canvas

from resume_triage import audit


SAMPLE_REQUIREMENTS = {
    "title": "Senior Python Engineer",
    "description": "Build backend services in Python and lead a small team.",
    "location": "Remote",
    "employment_type": "Full-time",
    "min_experience": 5,
    "max_experience": 10,
    "required_skills": ["Python", "Django", "PostgreSQL"],
    "preferred_skills": ["Kubernetes"],
    "responsibilities": ["Design APIs", "Mentor engineers"],
    "education_required": ["Bachelor in Computer Science"],
    "education_preferred": [],
}

SAMPLE_PROFILE = {
    "contact_info": {"name": "Jane Doe", "email": "jane@example.com", "phone": None, "location": None, "linkedin": None, "portfolio": None},
    "summary": "Python engineer",
    "experience": [{"company": "Acme", "title": "Engineer", "dates": "2018-2024", "location": None, "description": ["Built Django APIs"]}],
    "education": [{"institution": "State University", "degree": "BSc", "field": "Computer Science", "dates": None, "gpa": None}],
    "skills": {"technical": ["Python", "Django"]},
    "certifications": None,
    "projects": None,
    "languages": ["English"],
    "additional": None,
    "confidence": {"contact_info": "high", "experience": "high"},
}


class FakeCompletion:
    """
    Stands in for the completion service. JSON-mode calls (structured parsing)
    get `profile_reply`; plain calls (qualitative scoring) get `score_reply`.
    A reply that is an exception instance is raised instead of returned.
    """

    def __init__(self, profile_reply=None, score_reply="0.9", delay: float = 0.0):
        self.profile_reply = json.dumps(SAMPLE_PROFILE) if profile_reply is None else profile_reply
        self.score_reply = score_reply
        self.delay = delay
        self.calls = []

    async def complete(self, prompt, system_instruction=None, json_mode=False):
        self.calls.append({"prompt": prompt, "system_instruction": system_instruction, "json_mode": json_mode})
        if self.delay:
            await asyncio.sleep(self.delay)
        reply = self.profile_reply if json_mode else self.score_reply
        if isinstance(reply, BaseException):
            raise reply
        return reply


def build_pdf(pages: list[str]) -> bytes:
    buf = io.BytesIO()
    c = canvas.Canvas(buf)
    for text in pages:
        c.drawString(72, 720, text)
        c.showPage()
    c.save()
    return buf.getvalue()


def build_docx(paragraphs: list[str]) -> bytes:
    document = docx.Document()
    for p in paragraphs:
        document.add_paragraph(p)
    buf = io.BytesIO()
    document.save(buf)
    return buf.getvalue()


@pytest.fixture(autouse=True)
def audit_dir(tmp_path, monkeypatch):
    """Keep audit and score logs out of the project tree."""
    log_dir = tmp_path / "logs"
    monkeypatch.setattr(audit, "AUDIT_DIR", log_dir)
    monkeypatch.setattr(audit, "AUDIT_FILE", log_dir / "audit.log")
    monkeypatch.setattr(audit, "APP_LOG_FILE", log_dir / "app.log")
    monkeypatch.setattr(audit, "SCORES_CSV", log_dir / "evaluation_scores.csv")
    return log_dir


@pytest.fixture
def sample_requirements():
    return json.loads(json.dumps(SAMPLE_REQUIREMENTS))


@pytest.fixture
def fake_completion():
    return FakeCompletion


@pytest.fixture
def pdf_bytes():
    return build_pdf


@pytest.fixture
def docx_bytes():
    return build_docx
