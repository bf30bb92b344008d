"""Error taxonomy for the generation endpoints.

Every error carries the HTTP status it maps to, a short `error` message and
optional `details`. The image routes turn these into distinct responses. The
text routes map provider failures to retry hints. The sound route treats all
of them as recoverable and falls back.
"""

from __future__ import annotations

from typing import Any


class GenerationError(Exception):
    """Base class for all failures raised while resolving a generation request."""

    status_code: int = 500

    def __init__(self, error: str, details: Any = None, status_code: int | None = None) -> None:
        super().__init__(error if details is None else f"{error}: {details}")
        self.error = error
        self.details = details
        if status_code is not None:
            self.status_code = status_code

    def to_body(self) -> dict[str, Any]:
        body: dict[str, Any] = {"error": self.error}
        if self.details is not None:
            body["details"] = self.details
        return body


class InvalidRequestError(GenerationError):
    """Malformed or missing request field. Never retried."""

    status_code = 400


class ConfigurationError(GenerationError):
    """Server-side configuration is missing (e.g. no RunPod credential)."""


class UpstreamSubmitError(GenerationError):
    """Job creation failed: non-OK response or no job id in the reply."""


class UpstreamPollError(GenerationError):
    """A single status check failed. Consumed by the poll loop, not fatal."""

    status_code = 502


class JobTimeoutError(GenerationError):
    """The poll budget ran out before the job reached a terminal state."""

    status_code = 504


class UpstreamJobFailure(GenerationError):
    """The provider reported the job as FAILED."""


class OutputFormatError(GenerationError):
    """A COMPLETED job produced output in none of the recognised shapes."""


class SoundDecisionError(GenerationError):
    """The AI sound decision could not be parsed into a response."""


class ProviderError(GenerationError):
    """A hosted text provider failed. `status_code` is the provider's HTTP status when it sent one."""

    status_code = 502
