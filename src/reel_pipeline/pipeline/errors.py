"""
Pipeline error types.

All errors inherit from PipelineError for easy catching.
Publish precondition failures never mutate job state.
"""


class PipelineError(Exception):
    """Base exception for all pipeline failures."""


class PublishPreconditionError(PipelineError):
    """Raised when a manual publish cannot start."""


class JobNotFoundError(PublishPreconditionError):
    def __init__(self, job_id: str):
        self.job_id = job_id
        super().__init__("Job not found")


class UpstreamNotReadyError(PublishPreconditionError):
    def __init__(self, job_id: str, pending: list[str]):
        self.job_id = job_id
        self.pending = pending
        super().__init__("Upstream stages are not ready")


class PublishAlreadyRunningError(PublishPreconditionError):
    def __init__(self, job_id: str):
        self.job_id = job_id
        super().__init__("Publish already running")


class ScriptGenerationError(PipelineError):
    """Raised when the script provider returns an unusable response."""


class VideoGenerationError(PipelineError):
    """Raised when the video provider reports a failed render."""


class VideoGenerationTimeoutError(VideoGenerationError):
    """Raised when the video provider does not finish within the retry budget."""

    def __init__(self, task_id: str, attempts: int):
        self.task_id = task_id
        self.attempts = attempts
        super().__init__(f"Video generation timed out after {attempts} attempts")
