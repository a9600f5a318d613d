"""Shared test fixtures.

Provides a scripted provider, a captured console display, and a scripted
input source so the agent loop can be driven without network or TTY.
"""

from __future__ import annotations

import io

import pytest
from rich.console import Console

from code_editing_agent.agent import ConsoleDisplay
from code_editing_agent.toolkit import default_registry


class ScriptedProvider:
    """A provider that replays canned responses and records every call.

    Items in ``responses`` are returned in order; exception instances are
    raised instead of returned.
    """

    name = "scripted"
    display_name = "Bot"
    model = "scripted-1"

    def __init__(self, responses=()):
        self._responses = list(responses)
        self.calls: list[dict] = []
        self.closed = False

    def run_inference(self, transcript, tools):
        self.calls.append({
            "turns": transcript.turns,
            "tools": [tool.name for tool in tools],
        })
        if not self._responses:
            raise AssertionError("ScriptedProvider ran out of responses")
        item = self._responses.pop(0)
        if isinstance(item, BaseException):
            raise item
        return item

    def close(self) -> None:
        self.closed = True

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()


def scripted_input(lines):
    """Input source that yields ``lines`` then signals end-of-stream."""
    remaining = list(lines)

    def read():
        return remaining.pop(0) if remaining else None

    return read


@pytest.fixture
def make_provider():
    """Factory fixture building a ScriptedProvider from a response list."""
    return ScriptedProvider


@pytest.fixture
def make_input():
    return scripted_input


@pytest.fixture
def console() -> Console:
    """Plain-text console writing into a StringIO buffer."""
    return Console(
        file=io.StringIO(),
        force_terminal=False,
        color_system=None,
        width=200,
    )


@pytest.fixture
def display(console: Console) -> ConsoleDisplay:
    return ConsoleDisplay(console)


@pytest.fixture
def registry():
    return default_registry()


@pytest.fixture
def workdir(tmp_path, monkeypatch):
    """Temporary working directory; relative paths resolve inside it."""
    monkeypatch.chdir(tmp_path)
    return tmp_path
