"""Bucket classifier: map a total score to one of three triage buckets."""

from screening.errors import BucketsMissing

EXCELLENT = "Excellent"
GOOD = "Good"
NO_GO = "No Go"
BUCKET_NAMES = (EXCELLENT, GOOD, NO_GO)

EXCELLENT_THRESHOLD = 0.8
GOOD_THRESHOLD = 0.5


def classify_bucket(total_score: float) -> str:
    """Thresholds checked in order; boundary values go to the higher bucket."""
    if total_score >= EXCELLENT_THRESHOLD:
        return EXCELLENT
    if total_score >= GOOD_THRESHOLD:
        return GOOD
    return NO_GO


async def resolve_buckets(store, session_id: str) -> dict:
    """
    Load the session's triage buckets keyed by name.
    Raises BucketsMissing if any of the three cannot be resolved.
    """
    buckets = {b["name"]: b for b in await store.list_buckets(session_id)}
    missing = [name for name in BUCKET_NAMES if name not in buckets]
    if missing:
        raise BucketsMissing(f"Session {session_id} is missing buckets: {', '.join(missing)}")
    return {name: buckets[name] for name in BUCKET_NAMES}
