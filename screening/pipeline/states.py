"""Explicit job state machine for the résumé pipeline."""

from enum import Enum

from screening.errors import InvalidTransition
from screening.utils import iso_now


class JobState(str, Enum):
    QUEUED = "queued"
    FETCHING = "fetching"
    EXTRACTING = "extracting"
    PARSING = "parsing"
    SCORING = "scoring"
    PERSISTING = "persisting"
    DONE = "done"
    FAILED = "failed"


# parsing -> persisting skips scoring when structured parsing degraded (needs_review).
ALLOWED_TRANSITIONS = {
    JobState.QUEUED: {JobState.FETCHING, JobState.FAILED},
    JobState.FETCHING: {JobState.EXTRACTING, JobState.FAILED},
    JobState.EXTRACTING: {JobState.PARSING, JobState.FAILED},
    JobState.PARSING: {JobState.SCORING, JobState.PERSISTING, JobState.FAILED},
    JobState.SCORING: {JobState.PERSISTING, JobState.FAILED},
    JobState.PERSISTING: {JobState.DONE, JobState.FAILED},
    JobState.DONE: set(),
    JobState.FAILED: set(),
}
TERMINAL_STATES = frozenset({JobState.DONE, JobState.FAILED})

# Advisory progress percentages reported at each checkpoint.
PROGRESS_FETCHED = 25
PROGRESS_EXTRACTED = 40
PROGRESS_PARSED = 60
PROGRESS_PERSISTED = 80
PROGRESS_DONE = 100


class JobTracker:
    """Tracks one job's state and keeps a timestamped history for auditing partial failures."""

    def __init__(self, job_label: str):
        self.job_label = job_label
        self.state = JobState.QUEUED
        self.history = [{"state": self.state.value, "at": iso_now()}]
        self.error: str | None = None

    def advance(self, new_state: JobState) -> None:
        if new_state not in ALLOWED_TRANSITIONS[self.state]:
            raise InvalidTransition(
                f"Job {self.job_label}: {self.state.value} -> {new_state.value} is not allowed"
            )
        self.state = new_state
        self.history.append({"state": new_state.value, "at": iso_now()})

    def fail(self, error: BaseException) -> JobState:
        """Move to FAILED and return the state the failure originated in."""
        origin = self.state
        self.error = str(error)
        if self.state not in TERMINAL_STATES:
            self.advance(JobState.FAILED)
        return origin

    @property
    def terminal(self) -> bool:
        return self.state in TERMINAL_STATES
