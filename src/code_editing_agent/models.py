"""Conversation data model.

Turn and Transcript hold the conversation; ToolCallRequest and
UnifiedResponse are the provider-agnostic shapes every adapter produces.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Literal, overload

from pydantic import BaseModel, ConfigDict

Role = Literal["user", "assistant"]


class Turn(BaseModel):
    """A single role-tagged message in the transcript.

    Frozen: turns are never edited once appended. Content is kept
    verbatim (no stripping, no newline normalization).
    """

    model_config = ConfigDict(frozen=True)

    role: Role
    content: str

    @classmethod
    def user(cls, content: str) -> Turn:
        return cls(role="user", content=content)

    @classmethod
    def assistant(cls, content: str) -> Turn:
        return cls(role="assistant", content=content)


class Transcript:
    """Append-only, chronologically ordered sequence of turns.

    Turns can only be appended; existing turns are never replaced.

    Usage::

        transcript = Transcript()
        transcript.append_user("Hello")
        for turn in transcript:
            print(turn.role, turn.content)
    """

    def __init__(self) -> None:
        self._turns: list[Turn] = []

    def append(self, turn: Turn) -> Turn:
        """Append a turn and return it."""
        if not isinstance(turn, Turn):
            raise TypeError(f"Expected Turn, got {type(turn).__name__}")
        self._turns.append(turn)
        return turn

    def append_user(self, content: str) -> Turn:
        return self.append(Turn.user(content))

    def append_assistant(self, content: str) -> Turn:
        return self.append(Turn.assistant(content))

    @property
    def turns(self) -> tuple[Turn, ...]:
        """Snapshot of all turns in order."""
        return tuple(self._turns)

    @property
    def last(self) -> Turn | None:
        return self._turns[-1] if self._turns else None

    def __iter__(self) -> Iterator[Turn]:
        return iter(tuple(self._turns))

    def __len__(self) -> int:
        return len(self._turns)

    @overload
    def __getitem__(self, index: int) -> Turn: ...

    @overload
    def __getitem__(self, index: slice) -> tuple[Turn, ...]: ...

    def __getitem__(self, index: int | slice) -> Turn | tuple[Turn, ...]:
        if isinstance(index, slice):
            return tuple(self._turns[index])
        return self._turns[index]

    def __repr__(self) -> str:
        return f"Transcript(turns={len(self._turns)})"


@dataclass(frozen=True)
class ToolCallRequest:
    """A provider's request to run a named tool.

    ``arguments`` is the raw JSON text of the call payload, exactly as the
    provider emitted it. The receiving tool parses and validates it.
    """

    id: str
    name: str
    arguments: str = "{}"


@dataclass(frozen=True)
class UnifiedResponse:
    """Vendor-independent result of one inference call.

    Either field may be empty. Vendor failures are raised as
    InferenceError, never returned as an empty response.
    """

    text: str = ""
    tool_calls: tuple[ToolCallRequest, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        if not isinstance(self.tool_calls, tuple):
            object.__setattr__(self, "tool_calls", tuple(self.tool_calls))

    @property
    def has_text(self) -> bool:
        return bool(self.text)

    @property
    def has_tool_calls(self) -> bool:
        return bool(self.tool_calls)
