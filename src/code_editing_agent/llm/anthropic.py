"""Anthropic Messages API adapter (block-oriented content model)."""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

from code_editing_agent.llm.client import HTTPProvider
from code_editing_agent.llm.errors import LLMResponseError
from code_editing_agent.models import ToolCallRequest, UnifiedResponse

if TYPE_CHECKING:
    from collections.abc import Sequence

    from code_editing_agent.models import Transcript
    from code_editing_agent.toolkit.models import ToolDefinition

logger = logging.getLogger(__name__)

ANTHROPIC_VERSION = "2023-06-01"


class AnthropicProvider(HTTPProvider):
    """Provider adapter for Anthropic's ``/v1/messages`` endpoint.

    Each turn is sent as a single text content block. Empty turns are
    left out (the API rejects empty text blocks); a transcript with no text
    at all yields an empty response without a request. The reply's
    ``content`` blocks are scanned in order: ``text`` blocks are
    concatenated, ``tool_use`` blocks become ToolCallRequests whose
    arguments are the ``input`` object serialized back to JSON.
    """

    name = "anthropic"
    display_name = "Claude"
    default_model = "claude-3-7-sonnet-latest"
    default_base_url = "https://api.anthropic.com"

    def _headers(self) -> dict[str, str]:
        return {
            "Content-Type": "application/json",
            "x-api-key": self._api_key,
            "anthropic-version": ANTHROPIC_VERSION,
        }

    def _endpoint(self) -> str:
        return "/v1/messages"

    def run_inference(
        self,
        transcript: Transcript,
        tools: Sequence[ToolDefinition],
    ) -> UnifiedResponse:
        if not any(turn.content for turn in transcript):
            logger.debug("Skipping anthropic request: transcript has no text")
            return UnifiedResponse()
        return super().run_inference(transcript, tools)

    def _build_payload(
        self,
        transcript: Transcript,
        tools: Sequence[ToolDefinition],
    ) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "model": self.model,
            "max_tokens": self.max_tokens,
            "messages": [
                {
                    "role": turn.role,
                    "content": [{"type": "text", "text": turn.content}],
                }
                for turn in transcript
                if turn.content
            ],
        }
        if self.system_prompt:
            payload["system"] = self.system_prompt
        if tools:
            payload["tools"] = [tool.to_anthropic() for tool in tools]
        return payload

    def _parse_response(self, data: dict[str, Any]) -> UnifiedResponse:
        if data.get("type") == "error":
            error = data.get("error") or {}
            raise LLMResponseError(
                f"anthropic error: {error.get('message', data)}"
            )
        blocks = data["content"]
        if not isinstance(blocks, list):
            raise LLMResponseError(f"Unexpected anthropic content: {blocks!r}")

        text_parts: list[str] = []
        tool_calls: list[ToolCallRequest] = []
        for block in blocks:
            kind = block.get("type")
            if kind == "text":
                text_parts.append(block["text"])
            elif kind == "tool_use":
                tool_calls.append(
                    ToolCallRequest(
                        id=block["id"],
                        name=block["name"],
                        arguments=json.dumps(block.get("input", {}), ensure_ascii=False),
                    )
                )
            else:
                logger.debug("Ignoring anthropic content block of type %r", kind)

        return UnifiedResponse(text="".join(text_parts), tool_calls=tuple(tool_calls))
