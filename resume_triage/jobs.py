"""In-process job queue: bounded worker pool, status and progress tracking."""

import asyncio
import logging
from collections import deque
from dataclasses import dataclass, field

from screening.utils import iso_now, new_id
from resume_triage.audit import audit_log, log_evaluation_scores

log = logging.getLogger(__name__)

NOT_FOUND = "not_found"
WAITING = "waiting"
ACTIVE = "active"
COMPLETED = "completed"
FAILED = "failed"

DEFAULT_RETAIN_FINISHED = 1000


@dataclass
class JobEntry:
    id: str
    job: object
    status: str = WAITING
    progress: int = 0
    result: dict | None = None
    error: str | None = None
    created_at: str = field(default_factory=iso_now)
    finished_at: str | None = None


class JobQueue:
    """
    Runs `processor(job, context, report_progress)` for each enqueued job on
    `concurrency` worker tasks. The worker context is owned by the caller and
    handed to every job. A failing job is recorded and never stops its worker.

    `on_abandon(job, context, reason)` is awaited for jobs still waiting when the
    queue is closed. Only the newest `retain_finished` finished entries are kept
    for status lookups.
    """

    def __init__(
        self,
        processor,
        context,
        concurrency: int = 2,
        on_abandon=None,
        retain_finished: int = DEFAULT_RETAIN_FINISHED,
    ):
        if concurrency < 1:
            raise ValueError("concurrency must be >= 1")
        self.processor = processor
        self.context = context
        self.concurrency = concurrency
        self.on_abandon = on_abandon
        self.retain_finished = retain_finished
        self._pending: asyncio.Queue | None = None
        self._entries: dict[str, JobEntry] = {}
        self._finished: deque[str] = deque()
        self._workers: list[asyncio.Task] = []

    async def start(self) -> None:
        if self._workers:
            return
        self._pending = asyncio.Queue()
        self._workers = [
            asyncio.create_task(self._worker(i), name=f"resume-worker-{i}")
            for i in range(self.concurrency)
        ]
        log.info("Job queue started with %d workers", self.concurrency)

    async def enqueue(self, job) -> str:
        if self._pending is None:
            raise RuntimeError("Job queue is not started")
        entry = JobEntry(id=new_id(), job=job)
        self._entries[entry.id] = entry
        await self._pending.put(entry)
        return entry.id

    def get_status(self, job_id: str) -> str:
        entry = self._entries.get(job_id)
        return entry.status if entry else NOT_FOUND

    def get_progress(self, job_id: str) -> int | None:
        entry = self._entries.get(job_id)
        return entry.progress if entry else None

    def get_result(self, job_id: str) -> dict | None:
        entry = self._entries.get(job_id)
        return entry.result if entry else None

    def get_entry(self, job_id: str) -> JobEntry | None:
        return self._entries.get(job_id)

    async def join(self) -> None:
        """Wait until every enqueued job has finished."""
        if self._pending is not None:
            await self._pending.join()

    async def close(self) -> None:
        """
        Stop the workers. Jobs still waiting are failed and handed to `on_abandon`;
        active jobs are cancelled and recorded as failed.
        """
        abandoned = []
        if self._pending is not None:
            while not self._pending.empty():
                abandoned.append(self._pending.get_nowait())
                self._pending.task_done()

        for task in self._workers:
            task.cancel()
        await asyncio.gather(*self._workers, return_exceptions=True)
        self._workers = []
        self._pending = None

        for entry in abandoned:
            await self._abandon(entry, "Job queue closed before the job started")
        if abandoned:
            log.warning("Job queue closed with %d waiting jobs abandoned", len(abandoned))

    async def _worker(self, index: int) -> None:
        while True:
            entry = await self._pending.get()
            try:
                await self._run(entry)
            except Exception:
                log.exception("Worker %d: unexpected error handling job %s", index, entry.id)
            finally:
                self._pending.task_done()

    async def _run(self, entry: JobEntry) -> None:
        job = entry.job
        entry.status = ACTIVE

        async def report_progress(pct: int) -> None:
            # Advisory and monotonic.
            entry.progress = max(entry.progress, min(100, int(pct)))

        try:
            result = await self.processor(job, self.context, report_progress)
        except asyncio.CancelledError:
            self._mark_failed(entry, "Job cancelled while active")
            raise
        except Exception as e:
            self._mark_failed(entry, str(e))
            log.error("Job %s failed: %s", entry.id, e)
            await asyncio.to_thread(
                audit_log,
                action="process_resume",
                status="error",
                session_id=job.session_id,
                job_id=entry.id,
                resume_id=job.resume_id,
                filename=job.file_name,
                error=str(e),
                extra={"stage": getattr(e, "stage", None)},
            )
            return

        entry.status = COMPLETED
        entry.result = result
        entry.progress = 100
        entry.finished_at = iso_now()
        self._retire(entry)
        await asyncio.to_thread(
            audit_log,
            action="process_resume",
            status=result.get("status", "success"),
            session_id=job.session_id,
            job_id=entry.id,
            resume_id=result.get("resume_id"),
            filename=job.file_name,
            extra={"bucket": result.get("bucket"), "scores": result.get("scores")},
        )
        await asyncio.to_thread(
            log_evaluation_scores,
            job_id=entry.id,
            session_id=job.session_id,
            file_name=job.file_name,
            result=result,
        )

    async def _abandon(self, entry: JobEntry, reason: str) -> None:
        job = entry.job
        self._mark_failed(entry, reason)
        if self.on_abandon is not None:
            try:
                await self.on_abandon(job, self.context, reason)
            except Exception:
                log.exception("Could not close abandoned job %s", entry.id)
        await asyncio.to_thread(
            audit_log,
            action="process_resume",
            status="abandoned",
            session_id=job.session_id,
            job_id=entry.id,
            resume_id=job.resume_id,
            filename=job.file_name,
            error=reason,
        )

    def _mark_failed(self, entry: JobEntry, error: str) -> None:
        entry.status = FAILED
        entry.error = error
        entry.finished_at = iso_now()
        self._retire(entry)

    def _retire(self, entry: JobEntry) -> None:
        self._finished.append(entry.id)
        while len(self._finished) > self.retain_finished:
            self._entries.pop(self._finished.popleft(), None)
