"""Pipeline orchestrator: fetch → extract → parse → score → persist for one queued résumé."""

import asyncio
import logging
from dataclasses import dataclass

from screening.errors import DEGRADED_ERRORS, PersistenceFailed, PipelineError
from screening.pipeline.artifacts import STATUS_NEEDS_REVIEW, STATUS_PROCESSED
from screening.pipeline.extract import extract_text
from screening.pipeline.parse import parse_candidate_profile
from screening.pipeline.states import (
    PROGRESS_DONE,
    PROGRESS_EXTRACTED,
    PROGRESS_FETCHED,
    PROGRESS_PARSED,
    PROGRESS_PERSISTED,
    JobState,
    JobTracker,
)
from screening.scoring.buckets import classify_bucket, resolve_buckets
from screening.scoring.engine import evaluate_resume

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class Job:
    """One unit of work. The requirements are a snapshot taken when the job was created."""

    document_key: str
    job_requirements: dict
    mime_type: str
    resume_id: str
    session_id: str
    file_name: str = ""


@dataclass
class WorkerContext:
    """Collaborators shared by every job a worker runs. Constructed and owned by the caller."""

    documents: object
    completion: object
    store: object


async def _no_progress(_pct: int) -> None:
    return None


async def process_resume_job(job: Job, context: WorkerContext, report_progress=None) -> dict:
    """
    Run every stage for one job, sequentially.

    Structured-parsing failures degrade the résumé to `needs_review` (extracted
    text is kept, scoring skipped). Any other stage failure is fatal: the résumé
    is moved to `failed` and the error is re-raised with its originating stage.
    """
    report_progress = report_progress or _no_progress
    tracker = JobTracker(job.resume_id)
    store = context.store
    extracted_text = None

    try:
        resume = await store.get_resume(job.resume_id)
        candidate_id = resume["candidate_id"]

        tracker.advance(JobState.FETCHING)
        data = await context.documents.get(job.document_key)
        await report_progress(PROGRESS_FETCHED)

        tracker.advance(JobState.EXTRACTING)
        extracted_text = await asyncio.to_thread(extract_text, data, job.mime_type)
        await report_progress(PROGRESS_EXTRACTED)

        tracker.advance(JobState.PARSING)
        try:
            profile = await parse_candidate_profile(
                context.completion, extracted_text, job.job_requirements
            )
        except DEGRADED_ERRORS as e:
            log.warning("Structured parsing failed for resume %s, needs review: %s", job.resume_id, e)
            profile = None
        await report_progress(PROGRESS_PARSED)

        scores = None
        bucket = None
        if profile is not None:
            tracker.advance(JobState.SCORING)
            buckets = await resolve_buckets(store, job.session_id)
            scores = await evaluate_resume(
                context.completion, job.job_requirements, extracted_text, profile
            )
            bucket = buckets[classify_bucket(scores["total_score"])]

        tracker.advance(JobState.PERSISTING)
        if bucket is not None:
            status = STATUS_PROCESSED
            await store.complete_evaluated_resume(
                job.resume_id, extracted_text, profile, bucket["id"], scores
            )
        else:
            status = STATUS_NEEDS_REVIEW
            await store.complete_resume(job.resume_id, extracted_text, profile, status)
        await report_progress(PROGRESS_PERSISTED)

        tracker.advance(JobState.DONE)
        await report_progress(PROGRESS_DONE)
    except asyncio.CancelledError as e:
        origin = tracker.fail(e)
        tracker.error = f"[{origin.value}] job cancelled"
        await _close_failed_resume(store, job, tracker.error, extracted_text)
        raise
    except Exception as e:
        origin = tracker.fail(e)
        if isinstance(e, PipelineError) and e.stage is None:
            e.stage = origin.value
        await _close_failed_resume(store, job, e, extracted_text)
        raise

    log.info(
        "Resume %s %s (bucket=%s, total=%s)",
        job.resume_id,
        status,
        bucket["name"] if bucket else None,
        scores["total_score"] if scores else None,
    )
    return {
        "resume_id": job.resume_id,
        "candidate_id": candidate_id,
        "status": status,
        "bucket": bucket["name"] if bucket else None,
        "scores": scores,
        "resume_char_count": len(extracted_text),
        "history": tracker.history,
    }


async def _close_failed_resume(store, job: Job, error, extracted_text: str | None) -> None:
    """A fatal error or cancellation must not leave the résumé in `processing`."""
    try:
        await store.mark_resume_failed(job.resume_id, str(error), extracted_text)
    except (PersistenceFailed, LookupError) as close_error:
        log.error("Could not mark resume %s failed: %s", job.resume_id, close_error)


async def abandon_resume_job(job: Job, context: WorkerContext, reason: str) -> None:
    """Close the résumé of a job that was dropped before any worker ran it."""
    await _close_failed_resume(context.store, job, reason, None)
