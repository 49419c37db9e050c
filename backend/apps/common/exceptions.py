# apps/common/exceptions.py

"""
Error taxonomy shared by the pipeline stages.

Transient errors are retried by the owning task with backoff and, once
retries are exhausted, surface as a terminal failure state on the entity.
Permanent (policy) errors are recorded once and never retried.
"""


class PipelineError(Exception):
    """Base class for pipeline errors."""

    retryable = False

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message or self.__class__.__name__

    def __str__(self):
        return self.message


class TransientError(PipelineError):
    """Network, timeout or resource exhaustion. Safe to retry later."""

    retryable = True


class PermanentError(PipelineError):
    """Policy or malformed-input failure. Never retried."""

    retryable = False
