"""Terminal rendering for the agent loop.

Rich auto-detects TTY and degrades gracefully when piped (no ANSI codes).
Everything printed here is cosmetic; nothing reads it back.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.console import Console
from rich.text import Text

if TYPE_CHECKING:
    from code_editing_agent.models import ToolCallRequest
    from code_editing_agent.toolkit.models import ToolResult

_PREVIEW_CHARS = 120


def _preview(text: str) -> str:
    flat = " ".join(text.split())
    if len(flat) > _PREVIEW_CHARS:
        return flat[: _PREVIEW_CHARS - 3] + "..."
    return flat


class ConsoleDisplay:
    """Prints prompts, assistant replies and tool annotations to a console.

    Model and file text is passed as rich ``Text`` rather than markup, so
    square brackets in replies are printed literally.
    """

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console(stderr=False)

    def prompt(self) -> None:
        self.console.print(Text("You", style="bold blue"), ": ", sep="", end="")

    def assistant(self, name: str, text: str) -> None:
        self.console.print(
            Text(name, style="bold yellow"),
            ": ",
            Text(text),
            sep="",
            soft_wrap=True,
        )

    def tool_call(self, call: ToolCallRequest) -> None:
        self.console.print(
            Text("tool", style="bold green"),
            ": ",
            Text(f"{call.name}({_preview(call.arguments)})", style="dim"),
            sep="",
            soft_wrap=True,
        )

    def tool_result(self, result: ToolResult) -> None:
        if result.success:
            self.console.print(
                Text("tool", style="bold green"),
                ": ",
                Text(f"{result.tool_name} returned {len(result.output)} chars", style="dim"),
                sep="",
                soft_wrap=True,
            )
        else:
            self.console.print(
                Text("tool error", style="bold red"),
                ": ",
                Text(f"{result.tool_name}: {result.error}"),
                sep="",
                soft_wrap=True,
            )

    def error(self, message: str) -> None:
        self.console.print(
            Text("Error:", style="red"), " ", Text(message), sep="", soft_wrap=True
        )
