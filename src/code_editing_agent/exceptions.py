"""Agent exception hierarchy.

All agent-specific exceptions inherit from AgentError. Inference errors live
in ``code_editing_agent.llm.errors`` and share the same base.
"""


class AgentError(Exception):
    """Base exception for all agent errors."""


class ConfigError(AgentError):
    """Raised for startup configuration problems.

    Configuration errors are fatal: they are raised before the first
    user turn is read.
    """


class DuplicateToolError(ConfigError):
    """Raised when two tools are registered under the same name."""

    def __init__(self, tool_name: str) -> None:
        self.tool_name = tool_name
        super().__init__(f"Tool already registered: {tool_name}")


class SchemaError(ConfigError):
    """Raised when a tool's input schema cannot be derived.

    Points at a programming mistake in the tool's input model (an untyped
    field, a union, a keyword the adapters cannot carry).
    """

    def __init__(self, model_name: str, reason: str) -> None:
        self.model_name = model_name
        self.reason = reason
        super().__init__(f"Cannot derive schema for {model_name}: {reason}")


class ToolError(AgentError):
    """Base for errors raised by tool handlers.

    Tool errors are recoverable: the agent loop reports them and moves on.
    """


class ToolInputError(ToolError):
    """The raw argument payload could not be parsed into the tool's input."""


class ToolExecutionError(ToolError):
    """The tool ran but could not produce a result."""
