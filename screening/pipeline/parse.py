"""Stage: structure extracted résumé text into a candidate profile (LLM-assisted)."""

import json
import logging
from pathlib import Path

import jsonschema

from screening.errors import MalformedResponse
from screening.utils import hash_text
from screening.validation import validate_candidate_profile

log = logging.getLogger(__name__)

PROFILE_SECTIONS = (
    "contact_info",
    "summary",
    "experience",
    "education",
    "skills",
    "certifications",
    "projects",
    "languages",
    "additional",
    "confidence",
)
SYSTEM_INSTRUCTION = "You are an unstructured text parsing expert that outputs only valid JSON."


def _load_prompt(name: str) -> str:
    prompt_path = Path(__file__).resolve().parent.parent / "prompts" / f"{name}.txt"
    return prompt_path.read_text(encoding="utf-8")


def build_parse_prompt(resume_text: str, job_requirements: dict) -> str:
    template = _load_prompt("parse_resume")
    reqs_json = json.dumps(job_requirements, indent=2)
    return template.replace("{{job_requirements_json}}", reqs_json).replace("{{resume_text}}", resume_text)


def strip_code_fences(content: str) -> str:
    """Remove a leading ``` or ```json line and a trailing ``` the model may wrap output in."""
    text = content.strip()
    if text.startswith("```"):
        lines = text.split("\n")
        first = lines[0][3:].strip()
        if first and first.lower() != "json":
            # Fence and payload share a line: ```json {...}
            lines[0] = first[4:] if first.lower().startswith("json") else first
        else:
            lines = lines[1:]
        if lines and lines[-1].strip().endswith("```"):
            lines[-1] = lines[-1].strip()[:-3]
        text = "\n".join(lines).strip()
    return text


def _normalize_profile(data: dict) -> dict:
    """Every section present; empty strings become None (unknown)."""
    profile = {}
    for section in PROFILE_SECTIONS:
        value = data.get(section)
        profile[section] = None if value == "" else value
    for key, value in data.items():
        if key not in profile:
            profile[key] = value
    contact = profile.get("contact_info")
    if isinstance(contact, dict):
        profile["contact_info"] = {k: (None if v == "" else v) for k, v in contact.items()}
    return profile


def parse_profile_response(content: str) -> dict:
    """
    Deserialize a completion into a CandidateProfile.
    Raises MalformedResponse if the output is not a JSON object valid per schema.
    """
    text = strip_code_fences(content or "")
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise MalformedResponse(f"Invalid JSON from model: {e}") from e
    if not isinstance(data, dict):
        raise MalformedResponse(f"Expected a JSON object, got {type(data).__name__}")
    try:
        validate_candidate_profile(data)
    except jsonschema.ValidationError as e:
        raise MalformedResponse(f"Candidate profile failed schema validation: {e.message}") from e
    return _normalize_profile(data)


async def parse_candidate_profile(completion, resume_text: str, job_requirements: dict) -> dict:
    """
    Send extracted text plus job requirements to the completion service in JSON mode.
    Raises CompletionFailed (service error) or MalformedResponse (bad output).
    """
    prompt = build_parse_prompt(resume_text, job_requirements)
    log.debug("Parsing résumé (prompt_hash=%s, chars=%d)", hash_text(prompt)[:16], len(resume_text))
    content = await completion.complete(prompt, system_instruction=SYSTEM_INSTRUCTION, json_mode=True)
    return parse_profile_response(content)
