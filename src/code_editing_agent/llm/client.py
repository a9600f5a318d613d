"""Shared sync httpx plumbing for the built-in provider adapters.

HTTPProvider owns the httpx client, posts JSON payloads, and maps every
transport and status failure onto the InferenceError hierarchy. Subclasses
only build the vendor payload and parse the vendor reply.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import httpx

from code_editing_agent.llm.errors import (
    InferenceError,
    LLMAuthError,
    LLMConfigError,
    LLMConnectionError,
    LLMRateLimitError,
    LLMResponseError,
    LLMServerError,
)

if TYPE_CHECKING:
    from collections.abc import Sequence

    from code_editing_agent.models import Transcript, UnifiedResponse
    from code_editing_agent.toolkit.models import ToolDefinition

logger = logging.getLogger(__name__)

_AUTH_ERROR_STATUS_CODES = {401, 403}
# Anthropic signals overload with a non-standard 529.
_SERVER_ERROR_STATUS_CODES = {500, 502, 503, 504, 529}

DEFAULT_MAX_TOKENS = 1024
DEFAULT_TIMEOUT = 120.0


class HTTPProvider:
    """Base class for providers that speak JSON over HTTPS.

    Subclasses set ``name``, ``display_name``, ``default_model`` and
    ``default_base_url``, and implement ``_headers()``, ``_endpoint()``,
    ``_build_payload()`` and ``_parse_response()``.

    Usage::

        with OpenAIProvider(api_key="sk-...") as provider:
            response = provider.run_inference(transcript, registry.definitions())
    """

    name: str = ""
    display_name: str = ""
    default_model: str = ""
    default_base_url: str = ""

    def __init__(
        self,
        api_key: str,
        *,
        base_url: str | None = None,
        model: str | None = None,
        max_tokens: int = DEFAULT_MAX_TOKENS,
        system_prompt: str | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Initialize the provider.

        Args:
            api_key: Vendor API key.
            base_url: API base URL. Falls back to the vendor default.
            model: Model identifier. Falls back to ``default_model``.
            max_tokens: Maximum tokens to generate per reply.
            system_prompt: Optional system prompt sent with every request.
            timeout: Request timeout in seconds.
            transport: Optional httpx transport (tests use MockTransport).

        Raises:
            LLMConfigError: If no API key is provided.
        """
        if not api_key:
            raise LLMConfigError(f"No API key provided for {self.name or 'provider'}.")
        self._api_key = api_key
        self._base_url = (base_url or self.default_base_url).rstrip("/")
        self.model = model or self.default_model
        self.max_tokens = max_tokens
        self.system_prompt = system_prompt
        self._client = httpx.Client(
            timeout=timeout,
            headers=self._headers(),
            transport=transport,
        )

    # ------------------------------------------------------------------
    # Provider protocol
    # ------------------------------------------------------------------

    def run_inference(
        self,
        transcript: Transcript,
        tools: Sequence[ToolDefinition],
    ) -> UnifiedResponse:
        """Send the transcript and tools to the vendor and decode its reply.

        Raises:
            InferenceError: On any transport, status, or reply-shape failure.
        """
        payload = self._build_payload(transcript, tools)
        logger.debug(
            "%s request: model=%s turns=%d tools=%d",
            self.name,
            self.model,
            len(transcript),
            len(tools),
        )
        data = self._post(payload)
        try:
            response = self._parse_response(data)
        except InferenceError:
            raise
        except (KeyError, IndexError, TypeError, ValueError) as exc:
            raise LLMResponseError(
                f"Unexpected {self.name} response format: {exc!r}"
            ) from exc
        logger.debug(
            "%s reply: %d chars of text, %d tool call(s)",
            self.name,
            len(response.text),
            len(response.tool_calls),
        )
        return response

    def close(self) -> None:
        """Close the underlying httpx client."""
        self._client.close()

    def __enter__(self) -> HTTPProvider:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"{type(self).__name__}(model={self.model!r}, base_url={self._base_url!r})"

    # ------------------------------------------------------------------
    # Subclass hooks
    # ------------------------------------------------------------------

    def _headers(self) -> dict[str, str]:
        raise NotImplementedError

    def _endpoint(self) -> str:
        raise NotImplementedError

    def _build_payload(
        self,
        transcript: Transcript,
        tools: Sequence[ToolDefinition],
    ) -> dict[str, Any]:
        raise NotImplementedError

    def _parse_response(self, data: dict[str, Any]) -> UnifiedResponse:
        raise NotImplementedError

    # ------------------------------------------------------------------
    # HTTP
    # ------------------------------------------------------------------

    def _post(self, payload: dict[str, Any]) -> dict[str, Any]:
        """Execute a single request (no retry) and return the decoded body."""
        url = f"{self._base_url}{self._endpoint()}"
        try:
            response = self._client.post(url, json=payload)
        except httpx.HTTPError as exc:
            raise LLMConnectionError(
                f"{self.name} request to {url} failed: {exc}"
            ) from exc

        status = response.status_code
        if status in _AUTH_ERROR_STATUS_CODES:
            raise LLMAuthError(
                f"Authentication failed: HTTP {status} - {_error_detail(response)}",
                status_code=status,
            )
        if status == 429:
            raise LLMRateLimitError(
                f"Rate limited: HTTP 429 - {_error_detail(response)}",
                retry_after=_retry_after(response),
            )
        if status in _SERVER_ERROR_STATUS_CODES:
            raise LLMServerError(
                f"{self.name} server error: HTTP {status} - {_error_detail(response)}",
                status_code=status,
            )
        if status >= 400:
            raise LLMResponseError(
                f"{self.name} rejected the request: HTTP {status} - {_error_detail(response)}",
                status_code=status,
            )

        try:
            data = response.json()
        except ValueError as exc:
            raise LLMResponseError(
                f"{self.name} returned a non-JSON body: {response.text[:200]!r}",
                status_code=status,
            ) from exc
        if not isinstance(data, dict):
            raise LLMResponseError(
                f"Unexpected {self.name} response format: {data!r}",
                status_code=status,
            )
        return data


def _error_detail(response: httpx.Response) -> str:
    """Pull the vendor's error message out of an error body, if present."""
    try:
        body = response.json()
    except ValueError:
        return response.text
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
    return response.text


def _retry_after(response: httpx.Response) -> float | None:
    raw = response.headers.get("Retry-After")
    if raw is None:
        return None
    try:
        return float(raw)
    except (ValueError, TypeError):
        return None
