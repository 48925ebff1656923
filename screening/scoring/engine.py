"""Evaluation combiner: keyword overlap and qualitative judgment merged into one ranking score."""

from screening.scoring.keyword import keyword_score
from screening.scoring.qualitative import clamp_score, qualitative_score

KEYWORD_WEIGHT = 0.4
QUALITATIVE_WEIGHT = 0.6


def combine_scores(keyword: float, qualitative: float) -> float:
    """Weighted total. Pure function of the two (clamped) inputs."""
    keyword = clamp_score(keyword)
    qualitative = clamp_score(qualitative)
    return clamp_score(keyword * KEYWORD_WEIGHT + qualitative * QUALITATIVE_WEIGHT)


async def evaluate_resume(
    completion, job_requirements: dict, resume_text: str, profile: dict
) -> dict:
    """
    Run the keyword scorer (deterministic) and the qualitative scorer (LLM), then combine.
    Returns keyword, qualitative and total scores, each within [0, 1].
    """
    kw = clamp_score(keyword_score(job_requirements, resume_text))
    qual = await qualitative_score(completion, job_requirements, profile)
    return {
        "keyword_score": kw,
        "qualitative_score": qual,
        "total_score": combine_scores(kw, qual),
    }
