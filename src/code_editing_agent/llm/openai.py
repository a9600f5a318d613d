"""OpenAI Chat Completions adapter (role/message model)."""

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


class OpenAIProvider(HTTPProvider):
    """Provider adapter for OpenAI-compatible ``/chat/completions`` endpoints.

    Turns map one-to-one onto ``{"role", "content"}`` messages. The reply's
    first choice supplies the text; its ``tool_calls`` array supplies the
    ToolCallRequests, with ``function.arguments`` passed through verbatim.
    """

    name = "openai"
    display_name = "GPT"
    default_model = "gpt-4o"
    default_base_url = "https://api.openai.com/v1"

    def _headers(self) -> dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self._api_key}",
        }

    def _endpoint(self) -> str:
        return "/chat/completions"

    def _build_payload(
        self,
        transcript: Transcript,
        tools: Sequence[ToolDefinition],
    ) -> dict[str, Any]:
        messages: list[dict[str, Any]] = []
        if self.system_prompt:
            messages.append({"role": "system", "content": self.system_prompt})
        messages.extend(
            {"role": turn.role, "content": turn.content} for turn in transcript
        )
        payload: dict[str, Any] = {
            "model": self.model,
            "max_tokens": self.max_tokens,
            "messages": messages,
        }
        if tools:
            payload["tools"] = [tool.to_openai() for tool in tools]
        return payload

    def _parse_response(self, data: dict[str, Any]) -> UnifiedResponse:
        if "choices" not in data:
            raise LLMResponseError(
                f"Unexpected response format: missing 'choices' key. Response: {data}"
            )
        choices = data["choices"]
        if not choices:
            raise LLMResponseError("openai returned no choices")
        message = choices[0]["message"]

        tool_calls: list[ToolCallRequest] = []
        for raw in message.get("tool_calls") or []:
            if raw.get("type", "function") != "function":
                logger.debug("Ignoring openai tool call of type %r", raw.get("type"))
                continue
            function = raw["function"]
            arguments = function.get("arguments", "")
            if not isinstance(arguments, str):
                # Some compatible servers send an object instead of a string.
                arguments = json.dumps(arguments, ensure_ascii=False)
            tool_calls.append(
                ToolCallRequest(
                    id=raw["id"],
                    name=function["name"],
                    arguments=arguments,
                )
            )

        return UnifiedResponse(
            text=message.get("content") or "",
            tool_calls=tuple(tool_calls),
        )
