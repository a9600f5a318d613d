"""Toolkit data models.

Frozen dataclasses for tool definitions and tool execution results.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from code_editing_agent.toolkit.schema import ToolSchema, derive_schema

if TYPE_CHECKING:
    from collections.abc import Callable

    from pydantic import BaseModel

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ToolDefinition:
    """A single tool the model may ask to run.

    Attributes:
        name: Tool name, unique within a registry (e.g. "read_file").
        description: Human-readable description of when/why to use this tool.
        input_model: Pydantic model declaring the tool's input shape.
        handler: Callable receiving the raw JSON argument payload and
            returning the textual result. Raises ToolError on failure.
    """

    name: str
    description: str
    input_model: type[BaseModel]
    handler: Callable[[str | bytes], str]

    @property
    def schema(self) -> ToolSchema:
        """The derived (and cached) input schema."""
        return derive_schema(self.input_model)

    def to_openai(self) -> dict:
        """Convert to OpenAI function-calling format.

        Returns:
            Dict with "type": "function" and a nested "function" object
            carrying the full JSON Schema object as "parameters".
        """
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.schema.to_object(),
            },
        }

    def to_anthropic(self) -> dict:
        """Convert to Anthropic tool-use format.

        The input schema is rebuilt from the flattened property map and
        required list.

        Returns:
            Dict with "name", "description", and "input_schema".
        """
        properties, required = self.schema.flattened()
        input_schema: dict = {"type": "object", "properties": properties}
        if required:
            input_schema["required"] = required
        return {
            "name": self.name,
            "description": self.description,
            "input_schema": input_schema,
        }


@dataclass(frozen=True)
class ToolResult:
    """Structured result from executing a tool.

    Attributes:
        tool_name: Name of the tool that was requested.
        success: Whether execution succeeded.
        output: String output on success (empty on failure).
        error: Error message on failure.
        call_id: Provider-assigned id of the originating call.
    """

    tool_name: str
    success: bool
    output: str = ""
    error: str = ""
    call_id: str = ""

    def to_text(self) -> str:
        """Render the result as the prose folded into the transcript."""
        if self.success:
            return f"Tool {self.tool_name} result: {self.output}"
        return f"Tool {self.tool_name} error: {self.error}"
