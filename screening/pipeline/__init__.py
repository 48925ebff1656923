"""Résumé pipeline: fetch → extract → parse → score → persist."""

from screening.pipeline.extract import extract_text, SUPPORTED_MIME_TYPES
from screening.pipeline.parse import parse_candidate_profile, strip_code_fences
from screening.pipeline.artifacts import ArtifactStore
from screening.pipeline.states import JobState, JobTracker
from screening.pipeline.orchestrator import Job, WorkerContext, abandon_resume_job, process_resume_job

__all__ = [
    "extract_text",
    "SUPPORTED_MIME_TYPES",
    "parse_candidate_profile",
    "strip_code_fences",
    "ArtifactStore",
    "JobState",
    "JobTracker",
    "Job",
    "WorkerContext",
    "process_resume_job",
    "abandon_resume_job",
]
