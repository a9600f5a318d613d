"""Agent toolkit: tool definitions, schema derivation, and the tool registry."""

from code_editing_agent.toolkit.models import ToolDefinition, ToolResult
from code_editing_agent.toolkit.read_file import READ_FILE, ReadFileInput, read_file
from code_editing_agent.toolkit.registry import ToolRegistry, default_registry
from code_editing_agent.toolkit.schema import ToolSchema, derive_schema

__all__ = [
    "ToolDefinition",
    "ToolResult",
    "ToolRegistry",
    "ToolSchema",
    "default_registry",
    "derive_schema",
    "READ_FILE",
    "ReadFileInput",
    "read_file",
]
