"""Core agent loop.

Provides the Agent class that drives the read-infer-act-display cycle:
read one line of operator input, run inference over the full transcript,
execute any requested tools in order, print the reply, repeat until the
input source is exhausted.
"""

from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING, TextIO

import tenacity

from code_editing_agent.agent.config import AgentConfig, AgentState
from code_editing_agent.agent.display import ConsoleDisplay
from code_editing_agent.models import Transcript

if TYPE_CHECKING:
    from collections.abc import Callable

    from code_editing_agent.llm.protocols import Provider
    from code_editing_agent.models import ToolCallRequest, UnifiedResponse
    from code_editing_agent.toolkit.models import ToolResult
    from code_editing_agent.toolkit.registry import ToolRegistry

logger = logging.getLogger(__name__)


def line_reader(stream: TextIO | None = None) -> Callable[[], str | None]:
    """Build an input source that reads one line per call.

    Returns None at end-of-stream. The trailing line terminator (``\\n`` or
    ``\\r\\n``) is removed; everything else is kept as typed.
    """

    def read() -> str | None:
        source = stream if stream is not None else sys.stdin
        line = source.readline()
        if line == "":
            return None
        if line.endswith("\n"):
            line = line[:-1]
            if line.endswith("\r"):
                line = line[:-1]
        return line

    return read


def _is_retryable(exc: BaseException) -> bool:
    return bool(getattr(exc, "retryable", False))


class Agent:
    """Single-threaded conversational agent.

    Owns the transcript for one run. Each user turn is processed to
    completion (inference, every tool call, display) before the next line
    is read.

    Usage::

        from code_editing_agent.agent import Agent
        from code_editing_agent.llm import select_provider

        with select_provider() as provider:
            Agent(provider).run()
    """

    def __init__(
        self,
        provider: Provider,
        registry: ToolRegistry | None = None,
        *,
        read_input: Callable[[], str | None] | None = None,
        display: ConsoleDisplay | None = None,
        config: AgentConfig | None = None,
    ) -> None:
        if registry is None:
            from code_editing_agent.toolkit.registry import default_registry

            registry = default_registry()
        self._provider = provider
        self._registry = registry
        self._tools = tuple(registry.definitions())
        self._read_input = read_input or line_reader()
        self._display = display or ConsoleDisplay()
        self._config = config or AgentConfig()
        self._transcript = Transcript()
        self._state = AgentState.AWAITING_INPUT

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @property
    def state(self) -> AgentState:
        """Return the current loop state."""
        return self._state

    @property
    def transcript(self) -> Transcript:
        return self._transcript

    @property
    def provider(self) -> Provider:
        return self._provider

    def run(self) -> Transcript:
        """Run the loop until the input source signals end-of-stream.

        Returns:
            The transcript accumulated during the run.

        Raises:
            InferenceError: If an inference call fails (after any retries
                allowed by ``AgentConfig.max_inference_attempts``). The loop
                stops; the transcript is not resumed.
        """
        try:
            while True:
                self._state = AgentState.AWAITING_INPUT
                self._display.prompt()
                line = self._read_input()
                if line is None:
                    logger.debug("End of input after %d turns", len(self._transcript))
                    break
                self.step(line)
        finally:
            self._state = AgentState.STOPPED
        return self._transcript

    def step(self, user_input: str) -> UnifiedResponse:
        """Process one user turn to completion.

        Appends the user turn, runs inference, dispatches tool calls in the
        order returned, then prints and records the assistant text.

        Args:
            user_input: The operator's line (may be empty).

        Returns:
            The provider's response for this turn.

        Raises:
            InferenceError: If the inference call fails.
        """
        self._state = AgentState.INFERRING
        self._transcript.append_user(user_input)
        response = self._infer()

        if response.has_tool_calls:
            self._state = AgentState.DISPATCHING_TOOLS
            for call in response.tool_calls:
                self._dispatch(call)

        self._state = AgentState.DISPLAYING
        if response.has_text:
            self._display.assistant(self._provider.display_name, response.text)
            self._transcript.append_assistant(response.text)
        return response

    # ------------------------------------------------------------------
    # Internal methods
    # ------------------------------------------------------------------

    def _infer(self) -> UnifiedResponse:
        """Call the provider, retrying only as AgentConfig allows.

        Uses tenacity.Retrying programmatically (not as decorator) so that
        the attempt count is configurable per-instance.
        """
        retryer = tenacity.Retrying(
            retry=tenacity.retry_if_exception(_is_retryable),
            wait=tenacity.wait_exponential(
                multiplier=self._config.retry_backoff, max=30
            ),
            stop=tenacity.stop_after_attempt(
                max(1, self._config.max_inference_attempts)
            ),
            before_sleep=tenacity.before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )
        return retryer(
            self._provider.run_inference, self._transcript, self._tools
        )

    def _dispatch(self, call: ToolCallRequest) -> ToolResult:
        """Run one tool call and fold its outcome into the transcript.

        Failures (unknown tool, bad arguments, tool errors) are printed
        and recorded but never raised.
        """
        if self._config.show_tool_calls:
            self._display.tool_call(call)
        result = self._registry.execute(call)
        self._transcript.append_assistant(result.to_text())
        self._display.tool_result(result)

        if self._config.on_tool_result is not None:
            try:
                self._config.on_tool_result(result)
            except Exception:
                logger.debug("on_tool_result callback error", exc_info=True)
        return result
