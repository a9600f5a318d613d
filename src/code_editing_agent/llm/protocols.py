"""Provider protocol.

Any object with these attributes and methods can drive the agent loop.
The built-in AnthropicProvider and OpenAIProvider implement it.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Sequence

    from code_editing_agent.models import Transcript, UnifiedResponse
    from code_editing_agent.toolkit.models import ToolDefinition


@runtime_checkable
class Provider(Protocol):
    """Protocol for pluggable LLM provider adapters.

    ``run_inference`` converts the transcript and tool set into the
    vendor's wire format, performs one request and converts the reply
    into a UnifiedResponse. It raises InferenceError on any failure and
    never retries.
    """

    name: str
    display_name: str
    model: str

    def run_inference(
        self,
        transcript: Transcript,
        tools: Sequence[ToolDefinition],
    ) -> UnifiedResponse:
        """Run one inference call over the full transcript."""
        ...

    def close(self) -> None:
        """Release underlying resources."""
        ...
