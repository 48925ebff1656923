"""Schema validation for job requirements and candidate profiles."""

import json
from functools import lru_cache
from pathlib import Path

import jsonschema

SCHEMAS_DIR = Path(__file__).resolve().parent / "schemas"


@lru_cache(maxsize=None)
def _load_schema(name: str) -> dict:
    path = SCHEMAS_DIR / f"{name}.schema.json"
    return json.loads(path.read_text(encoding="utf-8"))


def validate_job_requirements(data: dict) -> None:
    """Validate job requirements against schema. Raises jsonschema.ValidationError if invalid."""
    jsonschema.validate(data, _load_schema("job_requirements"))


def validate_candidate_profile(data: dict) -> None:
    """Validate a parsed candidate profile against schema. Raises jsonschema.ValidationError if invalid."""
    jsonschema.validate(data, _load_schema("candidate_profile"))
