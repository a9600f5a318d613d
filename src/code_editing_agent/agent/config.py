"""Agent loop configuration types.

Provides AgentState (the loop's state machine) and AgentConfig (loop
policy: retries and per-tool-result callback).
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable

if TYPE_CHECKING:
    from code_editing_agent.toolkit.models import ToolResult


class AgentState(str, enum.Enum):
    """States the agent loop moves through for each user turn.

    ``AWAITING_INPUT -> INFERRING -> (DISPATCHING_TOOLS)? -> DISPLAYING``
    and back to ``AWAITING_INPUT``. ``STOPPED`` is terminal: reached at end
    of input or when an inference call fails.
    """

    AWAITING_INPUT = "awaiting_input"
    INFERRING = "inferring"
    DISPATCHING_TOOLS = "dispatching_tools"
    DISPLAYING = "displaying"
    STOPPED = "stopped"


@dataclass
class AgentConfig:
    """Configuration for the agent loop.

    Mutable dataclass -- callers may adjust settings between runs.

    Attributes:
        max_inference_attempts: Total attempts per inference call. 1 (the
            default) means a failed call is never retried. Only errors
            flagged ``retryable`` (rate limits, 5xx, connection failures)
            are retried.
        retry_backoff: Multiplier for the exponential wait between attempts,
            in seconds. 0 disables waiting.
        show_tool_calls: Print a line for each tool call before it runs.
        on_tool_result: Callback invoked after each tool call completes.
    """

    max_inference_attempts: int = 1
    retry_backoff: float = 1.0
    show_tool_calls: bool = True
    on_tool_result: Callable[[ToolResult], None] | None = None
