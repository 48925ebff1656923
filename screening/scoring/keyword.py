"""Deterministic keyword overlap between job requirements and résumé text. Pure code, no LLM."""

import re

# Field order is fixed so the keyword list is reproducible.
REQUIREMENT_FIELDS = (
    "title",
    "department",
    "description",
    "location",
    "employment_type",
    "min_experience",
    "max_experience",
    "required_skills",
    "preferred_skills",
    "responsibilities",
    "education_required",
    "education_preferred",
)
TOKEN_SPLIT = re.compile(r"[\s,.;:()\[\]{}]+")
ALPHA_TOKEN = re.compile(r"^[a-z]+$")
MIN_TOKEN_LEN = 3

STOP_WORDS = frozenset(
    """
    the be to of and a in that have i it for not on with he as you do at this but his by
    from they we say her she or an will my one all would there their what so up out if
    about who get which go me when make can like time no just him know take people into
    year your good some could them see other than then now look only come its over think
    also back after use two how our work first well way even new want because any these
    give day most us is are was were been being has had does did done am shall should may
    might must very more much many such own same each few both through during before above
    below between under again further once here where why off too nor only yet upon within
    without while per via etc those whom whose itself themselves ourselves yourself
    herself himself across along among around until onto toward towards including plus
    against though although whether either neither every since unless really quite
    """.split()
)


def requirements_text(job_requirements: dict) -> str:
    """Serialize job requirements to a flat lowercase text blob."""
    parts = []
    for field in REQUIREMENT_FIELDS:
        value = job_requirements.get(field)
        if value is None:
            continue
        if isinstance(value, (list, tuple)):
            parts.extend(str(v) for v in value if v is not None)
        else:
            parts.append(str(value))
    return " ".join(parts).lower()


def job_keywords(job_requirements: dict) -> list[str]:
    """
    Tokenize requirement text and keep alphabetic, non-stop-word tokens longer than 2 chars.
    Not deduplicated: a term repeated in the requirements weighs more.
    """
    tokens = TOKEN_SPLIT.split(requirements_text(job_requirements))
    return [
        t for t in tokens
        if len(t) >= MIN_TOKEN_LEN and ALPHA_TOKEN.match(t) and t not in STOP_WORDS
    ]


def keyword_score(job_requirements: dict, resume_text: str) -> float:
    """
    Fraction of job keyword tokens found as substrings of the lowercased résumé text.
    Returns 0.0 when no keywords survive filtering. Always within [0, 1].
    """
    keywords = job_keywords(job_requirements)
    if not keywords:
        return 0.0
    text = (resume_text or "").lower()
    matched = sum(1 for kw in keywords if kw in text)
    return matched / len(keywords)
