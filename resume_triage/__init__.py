"""Résumé Triage - queue-driven résumé screening with LLM-assisted scoring."""

from resume_triage.jobs import JobQueue
from resume_triage.runtime import ScreeningRuntime, build_context

__all__ = ["JobQueue", "ScreeningRuntime", "build_context"]
