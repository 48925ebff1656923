"""Error taxonomy for the résumé processing pipeline."""


class PipelineError(Exception):
    """Base class for stage failures. `stage` names the job state that raised it."""

    def __init__(self, message: str, stage: str | None = None):
        super().__init__(message)
        self.stage = stage

    def __str__(self) -> str:
        msg = super().__str__()
        return f"[{self.stage}] {msg}" if self.stage else msg


class FetchFailed(PipelineError):
    """Document store unreachable or key missing. Fatal."""


class ExtractionFailed(PipelineError):
    """Document bytes could not be parsed as the declared type. Fatal."""


class CompletionFailed(PipelineError):
    """Completion service unreachable, erroring or timed out. Degrades the stage."""


class MalformedResponse(PipelineError):
    """Completion output failed JSON/schema or number parsing. Degrades the stage."""


class BucketsMissing(PipelineError):
    """Triage buckets absent from the persistent store. Fatal."""


class PersistenceFailed(PipelineError):
    """Persistent store write failure. Fatal, eligible for external retry."""


class RecordNotFound(LookupError):
    """Raised when a persisted record does not exist."""


class InvalidTransition(ValueError):
    """Raised when a job attempts a state change not in the transition table."""


FATAL_ERRORS = (FetchFailed, ExtractionFailed, BucketsMissing, PersistenceFailed)
DEGRADED_ERRORS = (CompletionFailed, MalformedResponse)
