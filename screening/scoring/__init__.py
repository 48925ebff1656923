"""Scoring engine: keyword overlap, qualitative judgment, combination and triage buckets."""

from screening.scoring.engine import combine_scores, evaluate_resume
from screening.scoring.keyword import keyword_score
from screening.scoring.qualitative import qualitative_score
from screening.scoring.buckets import classify_bucket, resolve_buckets

__all__ = [
    "combine_scores",
    "evaluate_resume",
    "keyword_score",
    "qualitative_score",
    "classify_bucket",
    "resolve_buckets",
]
