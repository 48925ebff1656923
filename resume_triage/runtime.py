"""Screening runtime: worker context construction and a background event loop for sync callers."""

import asyncio
import logging
import threading

from screening.pipeline.artifacts import ArtifactStore
from screening.pipeline.orchestrator import WorkerContext, abandon_resume_job, process_resume_job
from resume_triage.completion import create_completion_client
from resume_triage.config import get_completion_config, get_queue_concurrency, get_storage_config
from resume_triage.document_store import create_document_store
from resume_triage.jobs import JobQueue

log = logging.getLogger(__name__)


def build_context() -> WorkerContext:
    """Construct the worker context from environment configuration."""
    storage = get_storage_config()
    return WorkerContext(
        documents=create_document_store(storage),
        completion=create_completion_client(get_completion_config()),
        store=ArtifactStore(storage["data_dir"]),
    )


class ScreeningRuntime:
    """
    Owns a job queue running on a private event loop in a daemon thread, so
    synchronous code (Flask views) can submit coroutines with `call`.
    """

    def __init__(self, context: WorkerContext, concurrency: int | None = None):
        self.context = context
        self.queue = JobQueue(
            process_resume_job,
            context,
            concurrency or get_queue_concurrency(),
            on_abandon=abandon_resume_job,
        )
        self.loop = asyncio.new_event_loop()
        self._thread = threading.Thread(target=self.loop.run_forever, name="screening-loop", daemon=True)

    def start(self) -> "ScreeningRuntime":
        if not self._thread.is_alive():
            self._thread.start()
            self.call(self.queue.start())
        return self

    def call(self, coro, timeout: float | None = None):
        """Run a coroutine on the runtime loop and wait for its result."""
        return asyncio.run_coroutine_threadsafe(coro, self.loop).result(timeout)

    def wait_idle(self, timeout: float | None = None) -> None:
        self.call(self.queue.join(), timeout)

    def stop(self) -> None:
        if self._thread.is_alive():
            self.call(self.queue.close())
            self.loop.call_soon_threadsafe(self.loop.stop)
            self._thread.join()
        log.info("Screening runtime stopped")
