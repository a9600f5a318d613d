"""Rich formatting helpers for the CLI.

Rich auto-detects TTY and degrades gracefully when piped (no ANSI codes).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.console import Console
from rich.markup import escape

if TYPE_CHECKING:
    from code_editing_agent.llm.protocols import Provider


def get_console() -> Console:
    """Create a Rich Console that auto-detects TTY for graceful pipe degradation."""
    return Console(stderr=False)


def format_banner(provider: Provider, console: Console) -> None:
    """Display the start-of-session banner."""
    console.print(
        f"Chat with [bold yellow]{escape(provider.display_name)}[/bold yellow] "
        f"[dim]({escape(provider.name)}, {escape(provider.model)})[/dim]",
        highlight=False,
    )
    console.print(
        "[dim]Ask me to read files or explain code. "
        "Press Ctrl-D to finish, Ctrl-C to quit.[/dim]",
        highlight=False,
    )


def format_error(message: str, console: Console) -> None:
    """Display an error message."""
    console.print(f"[red]Error:[/red] {escape(message)}", highlight=False)
