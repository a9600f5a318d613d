"""LLM-specific error hierarchy.

Every failure of an inference call surfaces as an InferenceError so the
agent loop only has one exception type to handle. ``retryable`` tells a
retry policy whether trying again could help; the adapters themselves
never retry.
"""

from __future__ import annotations

from code_editing_agent.exceptions import AgentError, ConfigError


class LLMConfigError(ConfigError):
    """Missing or invalid provider configuration (e.g., no API key)."""


class InferenceError(AgentError):
    """Base for all inference failures.

    Attributes:
        status_code: HTTP status of the failed request, if there was one.
        retryable: Whether a later attempt might succeed.
    """

    retryable: bool = False

    def __init__(self, message: str = "Inference failed", *, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)


class LLMAuthError(InferenceError):
    """Authentication failed (401/403)."""


class LLMRateLimitError(InferenceError):
    """Rate limited by the API (429).

    Attributes:
        retry_after: Seconds to wait before retrying (from Retry-After header),
            or None if not provided.
    """

    retryable = True

    def __init__(
        self,
        message: str = "Rate limited",
        retry_after: float | None = None,
        *,
        status_code: int | None = 429,
    ) -> None:
        self.retry_after = retry_after
        if retry_after is not None:
            message = f"{message} (retry after {retry_after}s)"
        super().__init__(message, status_code=status_code)


class LLMServerError(InferenceError):
    """The provider answered with a 5xx status (or an overload signal)."""

    retryable = True


class LLMConnectionError(InferenceError):
    """The request never completed (DNS, connect, timeout, protocol errors)."""

    retryable = True


class LLMResponseError(InferenceError):
    """Unexpected response format or rejected request (other 4xx)."""
