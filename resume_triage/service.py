"""Service layer: session creation, document submission, job polling, results and rankings."""

import copy
import logging

from screening.errors import RecordNotFound
from screening.pipeline.artifacts import STATUS_PROCESSED, STATUS_PROCESSING
from screening.pipeline.extract import SUPPORTED_MIME_TYPES
from screening.pipeline.orchestrator import Job
from resume_triage.audit import audit_log

log = logging.getLogger(__name__)

MAX_DOCUMENT_BYTES = 5 * 1024 * 1024  # 5MB


class UnsupportedDocument(ValueError):
    """Raised for uploads that are not PDF/DOCX or exceed the size limit."""


async def create_session(store, job_requirements: dict) -> dict:
    """Validate and persist job requirements; the three triage buckets are created with it."""
    session = await store.create_session(job_requirements)
    audit_log(
        action="create_session",
        status="success",
        session_id=session["id"],
        extra={"title": job_requirements.get("title")},
    )
    return session


async def submit_documents(context, queue, session_id: str, uploads: list[tuple[str, str, bytes]]) -> list[dict]:
    """
    Store each upload, create its candidate and placeholder résumé, snapshot the
    session's job requirements into a Job and enqueue it.
    `uploads` is a list of (file_name, mime_type, data). Returns one entry per upload.
    """
    for file_name, mime_type, data in uploads:
        if mime_type not in SUPPORTED_MIME_TYPES:
            raise UnsupportedDocument(f"Invalid file type for {file_name}. Only PDF and DOCX files are allowed.")
        if len(data) > MAX_DOCUMENT_BYTES:
            raise UnsupportedDocument(f"{file_name} exceeds the {MAX_DOCUMENT_BYTES // (1024 * 1024)}MB limit.")

    job_requirements = await context.store.get_job_requirements(session_id)
    submitted = []
    for file_name, mime_type, data in uploads:
        key = await context.documents.put(data, file_name, mime_type)
        _, resume = await context.store.create_candidate_with_resume(session_id, key, file_name, mime_type)
        job = Job(
            document_key=key,
            job_requirements=copy.deepcopy(job_requirements),
            mime_type=mime_type,
            resume_id=resume["id"],
            session_id=session_id,
            file_name=file_name,
        )
        job_id = await queue.enqueue(job)
        submitted.append({"job_id": job_id, "resume_id": resume["id"], "file_name": file_name})
        log.info("Enqueued job %s for %s (resume=%s)", job_id, file_name, resume["id"])

    audit_log(
        action="submit_documents",
        status="success",
        session_id=session_id,
        extra={"num_documents": len(submitted)},
    )
    return submitted


def job_statuses(queue, job_ids: list[str]) -> dict:
    """Status and advisory progress for each job id."""
    statuses = {}
    for job_id in job_ids:
        entry = queue.get_entry(job_id)
        statuses[job_id] = {
            "status": queue.get_status(job_id),
            "progress": queue.get_progress(job_id),
            "resume_id": entry.job.resume_id if entry else None,
            "error": entry.error if entry else None,
        }
    return statuses


async def resume_result(store, resume_id: str) -> dict:
    """
    Résumé record with its structured data, plus the latest evaluation and
    current bucket once processing has finished.
    """
    resume = await store.get_resume(resume_id)
    result = {"resume": resume, "evaluation": None, "bucket": None, "original_bucket": None}
    if resume["status"] == STATUS_PROCESSING:
        return result

    result["evaluation"] = await store.latest_evaluation(resume_id)
    candidate = await store.get_candidate(resume["candidate_id"])
    if candidate.get("bucket_id"):
        result["bucket"] = (await store.get_bucket(candidate["bucket_id"]))["name"]
    if candidate.get("original_bucket_id"):
        result["original_bucket"] = (await store.get_bucket(candidate["original_bucket_id"]))["name"]
    return result


async def session_rankings(store, session_id: str) -> list[dict]:
    """Processed, evaluated résumés of a session ordered by total score, best first."""
    await store.get_session(session_id)
    buckets = {b["id"]: b["name"] for b in await store.list_buckets(session_id)}
    rankings = []
    for resume in await store.list_resumes(session_id):
        if resume["status"] != STATUS_PROCESSED:
            continue
        evaluation = await store.latest_evaluation(resume["id"])
        if evaluation is None:
            continue
        try:
            candidate = await store.get_candidate(resume["candidate_id"])
        except RecordNotFound:
            log.warning("Resume %s has no candidate record", resume["id"])
            continue
        rankings.append({
            "resume_id": resume["id"],
            "candidate_id": resume["candidate_id"],
            "file_name": resume["file_name"],
            "bucket": buckets.get(candidate.get("bucket_id")),
            "scores": {
                "keyword_score": evaluation["keyword_score"],
                "qualitative_score": evaluation["qualitative_score"],
                "total_score": evaluation["total_score"],
            },
            "structured_data": resume["structured_data"],
        })
    rankings.sort(key=lambda r: r["scores"]["total_score"], reverse=True)
    return rankings
