"""ToolRegistry: holds the tools a run may invoke and dispatches calls to them.

Registration happens once at startup. Duplicate names and underivable
schemas are configuration errors raised from ``register()``; everything that
goes wrong while executing a call is reported through a failed ToolResult.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from code_editing_agent.exceptions import DuplicateToolError, ToolError
from code_editing_agent.toolkit.models import ToolDefinition, ToolResult

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

    from code_editing_agent.models import ToolCallRequest

logger = logging.getLogger(__name__)


class ToolRegistry:
    """Central registry for tool definitions.

    Usage::

        registry = ToolRegistry([READ_FILE])
        result = registry.execute(call)
        if result.success:
            print(result.output)
        else:
            print(result.error)
    """

    def __init__(self, tools: Iterable[ToolDefinition] = ()) -> None:
        self._tools: dict[str, ToolDefinition] = {}
        for tool in tools:
            self.register(tool)

    def register(self, tool: ToolDefinition) -> None:
        """Register a tool.

        The tool's schema is derived here so that a broken input model
        fails at startup rather than on the first inference call.

        Raises:
            DuplicateToolError: If a tool with the same name is registered.
            SchemaError: If the tool's input schema cannot be derived.
        """
        if not isinstance(tool, ToolDefinition):
            raise TypeError(f"Expected ToolDefinition, got {type(tool).__name__}")
        if tool.name in self._tools:
            raise DuplicateToolError(tool.name)
        tool.schema  # noqa: B018 -- derive eagerly
        self._tools[tool.name] = tool
        logger.debug("Registered tool: %s", tool.name)

    def lookup(self, name: str) -> ToolDefinition | None:
        """Get a tool by name, or None if it is not registered."""
        return self._tools.get(name)

    def execute(self, call: ToolCallRequest) -> ToolResult:
        """Run a tool call and return a structured result.

        Never raises for tool-level problems: unknown tools, argument
        parse failures and handler errors all become a failed ToolResult.

        Args:
            call: The tool call produced by a provider adapter.

        Returns:
            ToolResult with success/failure status and output/error.
        """
        tool = self.lookup(call.name)
        if tool is None:
            logger.warning("Tool not found: %s", call.name)
            return ToolResult(
                tool_name=call.name,
                success=False,
                error=f"tool not found: {call.name}",
                call_id=call.id,
            )
        try:
            output = tool.handler(call.arguments)
        except ToolError as exc:
            logger.debug("Tool %s failed: %s", call.name, exc)
            return ToolResult(
                tool_name=call.name,
                success=False,
                error=str(exc),
                call_id=call.id,
            )
        except Exception as exc:
            logger.debug("Tool %s raised unexpectedly", call.name, exc_info=True)
            return ToolResult(
                tool_name=call.name,
                success=False,
                error=f"{type(exc).__name__}: {exc}",
                call_id=call.id,
            )
        return ToolResult(
            tool_name=call.name,
            success=True,
            output=str(output),
            call_id=call.id,
        )

    def definitions(self) -> list[ToolDefinition]:
        """Return all registered tools in registration order."""
        return list(self._tools.values())

    @property
    def names(self) -> list[str]:
        return list(self._tools)

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __iter__(self) -> Iterator[ToolDefinition]:
        return iter(self.definitions())

    def __len__(self) -> int:
        return len(self._tools)


def default_registry() -> ToolRegistry:
    """Create a registry holding the built-in tools."""
    from code_editing_agent.toolkit.read_file import READ_FILE

    return ToolRegistry([READ_FILE])
