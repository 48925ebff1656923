"""Model-judged fit score between a structured candidate profile and job requirements."""

import json
import logging
import math
from pathlib import Path

from screening.errors import CompletionFailed

log = logging.getLogger(__name__)

SYSTEM_INSTRUCTION = "You are an expert recruiter. Reply with a single number between 0 and 1."


def _load_prompt(name: str) -> str:
    prompt_path = Path(__file__).resolve().parent.parent / "prompts" / f"{name}.txt"
    return prompt_path.read_text(encoding="utf-8")


def build_score_prompt(job_requirements: dict, profile: dict) -> str:
    template = _load_prompt("score_candidate")
    return (
        template.replace("{{job_requirements_json}}", json.dumps(job_requirements, indent=2))
        .replace("{{candidate_profile_json}}", json.dumps(profile, indent=2))
    )


def clamp_score(value: float) -> float:
    return min(1.0, max(0.0, value))


def parse_score_response(content: str) -> float:
    """Bare float in [0, 1]; unparseable or NaN replies score 0."""
    try:
        value = float((content or "").strip())
    except ValueError:
        log.warning("Unparseable qualitative score %r; using 0", (content or "")[:40])
        return 0.0
    if math.isnan(value):
        return 0.0
    return clamp_score(value)


async def qualitative_score(completion, job_requirements: dict, profile: dict) -> float:
    """
    Ask the completion service for a fit score.
    Degrades to 0.0 on service failure.
    """
    prompt = build_score_prompt(job_requirements, profile)
    try:
        content = await completion.complete(prompt, system_instruction=SYSTEM_INSTRUCTION)
    except CompletionFailed as e:
        log.warning("Qualitative scoring degraded to 0: %s", e)
        return 0.0
    return parse_score_response(content)
