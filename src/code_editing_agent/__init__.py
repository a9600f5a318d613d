"""code-editing-agent: a minimal terminal agent that can read files.

Normalizes the Anthropic and OpenAI chat protocols behind one Provider
interface and runs a synchronous read-infer-act-display loop.
"""

from code_editing_agent._version import __version__

# Conversation model
from code_editing_agent.models import (
    Role,
    ToolCallRequest,
    Transcript,
    Turn,
    UnifiedResponse,
)

# Errors
from code_editing_agent.exceptions import (
    AgentError,
    ConfigError,
    DuplicateToolError,
    SchemaError,
    ToolError,
    ToolExecutionError,
    ToolInputError,
)

# Tools
from code_editing_agent.toolkit import (
    READ_FILE,
    ToolDefinition,
    ToolRegistry,
    ToolResult,
    ToolSchema,
    default_registry,
    derive_schema,
)

# Providers
from code_editing_agent.llm import (
    AnthropicProvider,
    InferenceError,
    OpenAIProvider,
    Provider,
    select_provider,
)

# Loop
from code_editing_agent.agent import Agent, AgentConfig, AgentState

__all__ = [
    "__version__",
    "Role",
    "Turn",
    "Transcript",
    "ToolCallRequest",
    "UnifiedResponse",
    "AgentError",
    "ConfigError",
    "DuplicateToolError",
    "SchemaError",
    "ToolError",
    "ToolInputError",
    "ToolExecutionError",
    "InferenceError",
    "READ_FILE",
    "ToolDefinition",
    "ToolRegistry",
    "ToolResult",
    "ToolSchema",
    "default_registry",
    "derive_schema",
    "Provider",
    "AnthropicProvider",
    "OpenAIProvider",
    "select_provider",
    "Agent",
    "AgentConfig",
    "AgentState",
]
