"""Artifact storage: sessions, buckets, candidates, résumés and evaluations as JSON files."""

import asyncio
import copy
import json
import logging
import os
from pathlib import Path

from screening.errors import PersistenceFailed, RecordNotFound
from screening.scoring.buckets import BUCKET_NAMES
from screening.utils import iso_now, new_id
from screening.validation import validate_job_requirements

log = logging.getLogger(__name__)

STATUS_PROCESSING = "processing"
STATUS_PROCESSED = "processed"
STATUS_NEEDS_REVIEW = "needs_review"
STATUS_FAILED = "failed"
RESUME_STATUSES = (STATUS_PROCESSING, STATUS_PROCESSED, STATUS_NEEDS_REVIEW, STATUS_FAILED)
# A failed résumé may be finalized again when its job is re-run.
FINALIZABLE_STATUSES = (STATUS_PROCESSING, STATUS_FAILED)

KINDS = ("sessions", "buckets", "candidates", "resumes", "evaluations")


class ArtifactStore:
    """
    File-backed persistent store. One JSON document per record under
    <root>/<kind>/<id>.json. Writes are atomic (temp file + rename); blocking
    I/O runs in a worker thread so callers on the event loop are not blocked.
    """

    def __init__(self, root: str | Path):
        self.root = Path(root)

    # --- low-level file access -------------------------------------------------

    def _path(self, kind: str, record_id: str) -> Path:
        safe_id = "".join(c if c.isalnum() or c in "-_" else "_" for c in record_id)
        return self.root / kind / f"{safe_id}.json"

    def _write(self, kind: str, record: dict) -> dict:
        path = self._path(kind, record["id"])
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            tmp = path.with_suffix(".json.tmp")
            tmp.write_text(json.dumps(record, indent=2), encoding="utf-8")
            os.replace(tmp, path)
        except OSError as e:
            raise PersistenceFailed(f"Failed to write {kind}/{record['id']}: {e}") from e
        return record

    def _remove(self, kind: str, record_id: str) -> None:
        try:
            self._path(kind, record_id).unlink(missing_ok=True)
        except OSError as e:
            raise PersistenceFailed(f"Failed to remove {kind}/{record_id}: {e}") from e

    def _read(self, kind: str, record_id: str) -> dict:
        path = self._path(kind, record_id)
        if not path.exists():
            raise RecordNotFound(f"{kind[:-1].capitalize()} not found: {record_id}")
        return json.loads(path.read_text(encoding="utf-8"))

    def _scan(self, kind: str, **match) -> list[dict]:
        directory = self.root / kind
        if not directory.exists():
            return []
        records = []
        for path in sorted(directory.glob("*.json")):
            record = json.loads(path.read_text(encoding="utf-8"))
            if all(record.get(k) == v for k, v in match.items()):
                records.append(record)
        return records

    async def _run(self, fn, *args, **kwargs):
        return await asyncio.to_thread(fn, *args, **kwargs)

    # --- sessions and buckets --------------------------------------------------

    def _create_session(self, job_requirements: dict, bucket_names) -> dict:
        validate_job_requirements(job_requirements)
        session = {
            "id": new_id(),
            "job_requirements": copy.deepcopy(job_requirements),
            "created_at": iso_now(),
        }
        self._write("sessions", session)
        for name in bucket_names:
            self._write("buckets", {"id": new_id(), "session_id": session["id"], "name": name})
        return session

    async def create_session(self, job_requirements: dict, bucket_names=BUCKET_NAMES) -> dict:
        """Persist job requirements and create the session's triage buckets."""
        return await self._run(self._create_session, job_requirements, tuple(bucket_names))

    async def get_session(self, session_id: str) -> dict:
        return await self._run(self._read, "sessions", session_id)

    async def get_job_requirements(self, session_id: str) -> dict:
        session = await self.get_session(session_id)
        return session["job_requirements"]

    async def list_buckets(self, session_id: str) -> list[dict]:
        return await self._run(self._scan, "buckets", session_id=session_id)

    async def get_bucket(self, bucket_id: str) -> dict:
        return await self._run(self._read, "buckets", bucket_id)

    # --- candidates and résumés ------------------------------------------------

    def _create_candidate_with_resume(
        self, session_id: str, document_key: str, file_name: str, mime_type: str
    ) -> tuple[dict, dict]:
        self._read("sessions", session_id)
        now = iso_now()
        candidate = {
            "id": new_id(),
            "session_id": session_id,
            "resume_id": None,
            "bucket_id": None,
            "original_bucket_id": None,
            "created_at": now,
        }
        resume = {
            "id": new_id(),
            "session_id": session_id,
            "candidate_id": candidate["id"],
            "document_key": document_key,
            "file_name": file_name,
            "mime_type": mime_type,
            "extracted_text": None,
            "structured_data": None,
            "status": STATUS_PROCESSING,
            "error": None,
            "created_at": now,
            "updated_at": now,
        }
        candidate["resume_id"] = resume["id"]
        self._write("candidates", candidate)
        self._write("resumes", resume)
        return candidate, resume

    async def create_candidate_with_resume(
        self, session_id: str, document_key: str, file_name: str, mime_type: str
    ) -> tuple[dict, dict]:
        """Create a candidate and its placeholder résumé in `processing` status."""
        return await self._run(
            self._create_candidate_with_resume, session_id, document_key, file_name, mime_type
        )

    async def get_candidate(self, candidate_id: str) -> dict:
        return await self._run(self._read, "candidates", candidate_id)

    async def get_resume(self, resume_id: str) -> dict:
        return await self._run(self._read, "resumes", resume_id)

    async def list_resumes(self, session_id: str) -> list[dict]:
        return await self._run(self._scan, "resumes", session_id=session_id)

    def _open_for_completion(self, resume_id: str) -> dict:
        resume = self._read("resumes", resume_id)
        if resume["status"] not in FINALIZABLE_STATUSES:
            raise PersistenceFailed(
                f"Resume {resume_id} already finalized with status {resume['status']}"
            )
        if resume["status"] == STATUS_FAILED:
            # Evaluations left by an earlier failed attempt are orphans.
            for evaluation in self._scan("evaluations", resume_id=resume_id):
                self._remove("evaluations", evaluation["id"])
        return resume

    def _complete_resume(
        self, resume_id: str, extracted_text: str, structured_data: dict | None, status: str
    ) -> dict:
        if status not in (STATUS_PROCESSED, STATUS_NEEDS_REVIEW):
            raise ValueError(f"Not a completion status: {status}")
        resume = self._open_for_completion(resume_id)
        resume.update(
            extracted_text=extracted_text,
            structured_data=structured_data,
            status=status,
            error=None,
            updated_at=iso_now(),
        )
        return self._write("resumes", resume)

    def _complete_evaluated_resume(
        self, resume_id: str, extracted_text: str, structured_data: dict, bucket_id: str, scores: dict
    ) -> dict:
        resume = self._open_for_completion(resume_id)
        candidate = self._read("candidates", resume["candidate_id"])
        previous_candidate = copy.deepcopy(candidate)

        evaluation = self._add_evaluation(resume_id, scores)
        try:
            self._assign_bucket(candidate["id"], bucket_id)
            resume.update(
                extracted_text=extracted_text,
                structured_data=structured_data,
                status=STATUS_PROCESSED,
                error=None,
                updated_at=iso_now(),
            )
            self._write("resumes", resume)
        except PersistenceFailed:
            self._undo_evaluation(evaluation, previous_candidate)
            raise
        return evaluation

    def _undo_evaluation(self, evaluation: dict, previous_candidate: dict) -> None:
        try:
            self._remove("evaluations", evaluation["id"])
            self._write("candidates", previous_candidate)
        except PersistenceFailed as e:
            log.error("Rollback of evaluation %s incomplete: %s", evaluation["id"], e)

    async def complete_resume(
        self, resume_id: str, extracted_text: str, structured_data: dict | None, status: str
    ) -> dict:
        """Move a résumé in `processing` or `failed` to `processed` or `needs_review`."""
        return await self._run(self._complete_resume, resume_id, extracted_text, structured_data, status)

    async def complete_evaluated_resume(
        self, resume_id: str, extracted_text: str, structured_data: dict, bucket_id: str, scores: dict
    ) -> dict:
        """
        Persist a scored résumé: evaluation, bucket assignment and the `processed`
        status together. If any write fails, the evaluation and the bucket change are
        rolled back and PersistenceFailed is raised, so the job can be re-run.
        """
        return await self._run(
            self._complete_evaluated_resume, resume_id, extracted_text, structured_data, bucket_id, scores
        )

    def _mark_resume_failed(self, resume_id: str, error: str, extracted_text: str | None) -> dict:
        resume = self._read("resumes", resume_id)
        if resume["status"] not in FINALIZABLE_STATUSES:
            return resume
        resume.update(status=STATUS_FAILED, error=error, updated_at=iso_now())
        if extracted_text is not None:
            resume["extracted_text"] = extracted_text
        return self._write("resumes", resume)

    async def mark_resume_failed(
        self, resume_id: str, error: str, extracted_text: str | None = None
    ) -> dict:
        """Close a résumé left in `processing` (or re-run from `failed`) after a fatal stage error."""
        return await self._run(self._mark_resume_failed, resume_id, error, extracted_text)

    def _assign_bucket(self, candidate_id: str, bucket_id: str) -> dict:
        candidate = self._read("candidates", candidate_id)
        candidate["bucket_id"] = bucket_id
        if candidate.get("original_bucket_id") is None:
            candidate["original_bucket_id"] = bucket_id
        return self._write("candidates", candidate)

    async def assign_bucket(self, candidate_id: str, bucket_id: str) -> dict:
        """Set the current bucket; the first assignment is also kept as the original bucket."""
        return await self._run(self._assign_bucket, candidate_id, bucket_id)

    # --- evaluations -----------------------------------------------------------

    def _add_evaluation(self, resume_id: str, scores: dict) -> dict:
        evaluation = {
            "id": new_id(),
            "resume_id": resume_id,
            "keyword_score": scores["keyword_score"],
            "qualitative_score": scores["qualitative_score"],
            "total_score": scores["total_score"],
            "created_at": iso_now(),
        }
        return self._write("evaluations", evaluation)

    async def add_evaluation(self, resume_id: str, scores: dict) -> dict:
        """Append a new evaluation record. Existing records are never overwritten."""
        return await self._run(self._add_evaluation, resume_id, scores)

    async def list_evaluations(self, resume_id: str) -> list[dict]:
        evaluations = await self._run(self._scan, "evaluations", resume_id=resume_id)
        return sorted(evaluations, key=lambda e: e["created_at"])

    async def latest_evaluation(self, resume_id: str) -> dict | None:
        evaluations = await self.list_evaluations(resume_id)
        return evaluations[-1] if evaluations else None
