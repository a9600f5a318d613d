"""Agent package -- the conversation loop, its configuration and display."""

from code_editing_agent.agent.config import AgentConfig, AgentState
from code_editing_agent.agent.display import ConsoleDisplay
from code_editing_agent.agent.loop import Agent, line_reader

__all__ = [
    "Agent",
    "AgentConfig",
    "AgentState",
    "ConsoleDisplay",
    "line_reader",
]
