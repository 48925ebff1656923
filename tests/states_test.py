"""Job state machine: allowed transitions, history and failure origin."""

import pytest

from screening.errors import InvalidTransition
from screening.pipeline.states import ALLOWED_TRANSITIONS, JobState, JobTracker


def test_happy_path_history():
    tracker = JobTracker("job-1")
    for state in (
        JobState.FETCHING,
        JobState.EXTRACTING,
        JobState.PARSING,
        JobState.SCORING,
        JobState.PERSISTING,
        JobState.DONE,
    ):
        tracker.advance(state)
    assert tracker.terminal
    assert [h["state"] for h in tracker.history] == [
        "queued", "fetching", "extracting", "parsing", "scoring", "persisting", "done",
    ]


def test_degraded_parse_may_skip_scoring():
    tracker = JobTracker("job-2")
    tracker.advance(JobState.FETCHING)
    tracker.advance(JobState.EXTRACTING)
    tracker.advance(JobState.PARSING)
    tracker.advance(JobState.PERSISTING)
    assert tracker.state is JobState.PERSISTING


def test_skipping_stages_is_rejected():
    tracker = JobTracker("job-3")
    with pytest.raises(InvalidTransition):
        tracker.advance(JobState.SCORING)


def test_fail_records_origin_and_error():
    tracker = JobTracker("job-4")
    tracker.advance(JobState.FETCHING)
    tracker.advance(JobState.EXTRACTING)
    origin = tracker.fail(RuntimeError("bad pdf"))
    assert origin is JobState.EXTRACTING
    assert tracker.state is JobState.FAILED
    assert tracker.error == "bad pdf"


def test_terminal_states_have_no_exits():
    assert ALLOWED_TRANSITIONS[JobState.DONE] == set()
    assert ALLOWED_TRANSITIONS[JobState.FAILED] == set()
    tracker = JobTracker("job-5")
    tracker.fail(RuntimeError("x"))
    with pytest.raises(InvalidTransition):
        tracker.advance(JobState.FETCHING)
