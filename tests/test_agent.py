"""Tests for the Agent loop.

Tests cover:
- State transitions and end-of-input handling
- Transcript growth for plain replies and empty lines
- Tool dispatch order, partial failures and result folding
- Inference failures stop the loop; retry policy via AgentConfig
- Console output and the on_tool_result callback
"""

from __future__ import annotations

import io
import json

import httpx
import pytest

from code_editing_agent.agent import Agent, AgentConfig, AgentState, line_reader
from code_editing_agent.llm import AnthropicProvider, LLMAuthError, LLMRateLimitError, LLMServerError
from code_editing_agent.models import ToolCallRequest, Transcript, Turn, UnifiedResponse


def _call(call_id: str, path: str, name: str = "read_file") -> ToolCallRequest:
    return ToolCallRequest(id=call_id, name=name, arguments=f'{{"path": "{path}"}}')


def _output(console) -> str:
    return console.file.getvalue()


# ---------------------------------------------------------------------------
# Input source
# ---------------------------------------------------------------------------


class TestLineReader:
    def test_strips_terminators(self):
        read = line_reader(io.StringIO("one\ntwo\r\nthree"))
        assert read() == "one"
        assert read() == "two"
        assert read() == "three"
        assert read() is None

    def test_keeps_whitespace_and_empty_lines(self):
        read = line_reader(io.StringIO("  padded \t\n\n"))
        assert read() == "  padded \t"
        assert read() == ""
        assert read() is None


# ---------------------------------------------------------------------------
# Loop basics
# ---------------------------------------------------------------------------


class TestRunLoop:
    def test_initial_state(self, make_provider, registry, display):
        agent = Agent(make_provider(), registry, display=display)
        assert agent.state is AgentState.AWAITING_INPUT
        assert len(agent.transcript) == 0

    def test_eof_before_any_input(self, make_provider, make_input, registry, display):
        provider = make_provider()
        agent = Agent(provider, registry, read_input=make_input([]), display=display)
        transcript = agent.run()

        assert isinstance(transcript, Transcript)
        assert len(transcript) == 0
        assert provider.calls == []
        assert agent.state is AgentState.STOPPED

    def test_plain_replies(self, make_provider, make_input, registry, display):
        provider = make_provider([
            UnifiedResponse(text="Hi!"),
            UnifiedResponse(text="Fine, thanks."),
        ])
        agent = Agent(provider, registry, read_input=make_input(["hello", "how are you"]), display=display)
        transcript = agent.run()

        assert transcript.turns == (
            Turn.user("hello"),
            Turn.assistant("Hi!"),
            Turn.user("how are you"),
            Turn.assistant("Fine, thanks."),
        )
        assert agent.state is AgentState.STOPPED

    def test_full_transcript_sent_every_call(self, make_provider, make_input, registry, display):
        provider = make_provider([UnifiedResponse(text="a"), UnifiedResponse(text="b")])
        Agent(provider, registry, read_input=make_input(["one", "two"]), display=display).run()

        assert provider.calls[0]["turns"] == (Turn.user("one"),)
        assert provider.calls[1]["turns"] == (
            Turn.user("one"),
            Turn.assistant("a"),
            Turn.user("two"),
        )
        assert provider.calls[0]["tools"] == ["read_file"]

    def test_empty_line_is_sent(self, make_provider, make_input, registry, display):
        provider = make_provider([UnifiedResponse(text="?")])
        transcript = Agent(provider, registry, read_input=make_input([""]), display=display).run()
        assert transcript[0] == Turn.user("")
        assert len(provider.calls) == 1

    def test_blank_line_with_anthropic_keeps_running(self, make_input, registry, display):
        requests = []

        def handler(request):
            requests.append(json.loads(request.content))
            return httpx.Response(200, json={"type": "message", "content": [{"type": "text", "text": "Hi!"}]})

        with AnthropicProvider("k", transport=httpx.MockTransport(handler)) as provider:
            agent = Agent(provider, registry, read_input=make_input(["", "hello"]), display=display)
            transcript = agent.run()

        assert transcript.turns == (Turn.user(""), Turn.user("hello"), Turn.assistant("Hi!"))
        assert len(requests) == 1
        assert requests[0]["messages"] == [
            {"role": "user", "content": [{"type": "text", "text": "hello"}]},
        ]

    def test_empty_reply_adds_no_turn(self, make_provider, make_input, registry, display):
        provider = make_provider([UnifiedResponse()])
        transcript = Agent(provider, registry, read_input=make_input(["hi"]), display=display).run()
        assert transcript.turns == (Turn.user("hi"),)

    def test_input_kept_verbatim(self, make_provider, make_input, registry, display):
        text = "  Hello 世界! 🌍 [bold]not markup[/bold]  "
        provider = make_provider([UnifiedResponse(text="ok")])
        transcript = Agent(provider, registry, read_input=make_input([text]), display=display).run()
        assert transcript[0].content == text

    def test_states_during_turn(self, make_input, registry, display):
        seen: list[AgentState] = []

        class StateProbe:
            name = "probe"
            display_name = "Probe"
            model = "probe-1"

            def run_inference(self, transcript, tools):
                seen.append(agent.state)
                return UnifiedResponse(tool_calls=[_call("1", "missing.txt")])

            def close(self):
                pass

        agent = Agent(
            StateProbe(),
            registry,
            read_input=make_input(["go"]),
            display=display,
            config=AgentConfig(on_tool_result=lambda result: seen.append(agent.state)),
        )
        agent.run()
        assert seen == [AgentState.INFERRING, AgentState.DISPATCHING_TOOLS]
        assert agent.state is AgentState.STOPPED

    def test_step_returns_response(self, make_provider, registry, display):
        response = UnifiedResponse(text="hello")
        agent = Agent(make_provider([response]), registry, display=display)
        assert agent.step("hi") is response
        assert agent.state is AgentState.DISPLAYING


# ---------------------------------------------------------------------------
# Tool dispatch
# ---------------------------------------------------------------------------


class TestToolDispatch:
    def test_read_file_scenario(self, workdir, make_provider, make_input, registry, display, console):
        (workdir / "X").write_text("file X contents")
        provider = make_provider([
            UnifiedResponse(text="Reading it.", tool_calls=[_call("call_1", "X")]),
        ])
        transcript = Agent(provider, registry, read_input=make_input(["read X"]), display=display).run()

        assert transcript.turns == (
            Turn.user("read X"),
            Turn.assistant("Tool read_file result: file X contents"),
            Turn.assistant("Reading it."),
        )
        output = _output(console)
        assert "tool: read_file" in output
        assert "read_file returned 15 chars" in output
        assert "Bot: Reading it." in output

    def test_calls_run_in_order_with_partial_failure(self, workdir, make_provider, make_input, registry, display):
        (workdir / "a.txt").write_text("A")
        (workdir / "c.txt").write_text("C")
        provider = make_provider([
            UnifiedResponse(tool_calls=[
                _call("1", "a.txt"),
                _call("2", "b.txt"),
                _call("3", "c.txt"),
            ]),
        ])
        transcript = Agent(provider, registry, read_input=make_input(["read"]), display=display).run()

        contents = [turn.content for turn in transcript[1:]]
        assert contents[0] == "Tool read_file result: A"
        assert contents[1].startswith("Tool read_file error: failed to read file b.txt")
        assert contents[2] == "Tool read_file result: C"
        assert all(turn.role == "assistant" for turn in transcript[1:])

    def test_failing_call_does_not_change_reply(self, workdir, make_provider, make_input, registry, display, console):
        (workdir / "X").write_text("file X contents")
        provider = make_provider([
            UnifiedResponse(text="Done.", tool_calls=[_call("1", "X"), _call("2", "unrelated.txt")]),
        ])
        transcript = Agent(provider, registry, read_input=make_input(["read X"]), display=display).run()

        assert transcript[1] == Turn.assistant("Tool read_file result: file X contents")
        assert transcript[2].content.startswith("Tool read_file error:")
        assert transcript.last == Turn.assistant("Done.")
        assert "Bot: Done." in _output(console)

    def test_unknown_tool_does_not_stop_loop(self, make_provider, make_input, registry, display, console):
        provider = make_provider([
            UnifiedResponse(tool_calls=[_call("1", "x", name="write_file")]),
            UnifiedResponse(text="sorry"),
        ])
        agent = Agent(provider, registry, read_input=make_input(["write", "ok?"]), display=display)
        transcript = agent.run()

        assert transcript[1] == Turn.assistant("Tool write_file error: tool not found: write_file")
        assert transcript.last == Turn.assistant("sorry")
        assert "tool error: write_file: tool not found" in _output(console)
        assert len(provider.calls) == 2

    def test_bad_arguments_reported(self, make_provider, make_input, registry, display):
        call = ToolCallRequest(id="1", name="read_file", arguments="{not json")
        provider = make_provider([UnifiedResponse(tool_calls=[call])])
        transcript = Agent(provider, registry, read_input=make_input(["go"]), display=display).run()
        assert transcript[1].content.startswith("Tool read_file error: failed to parse input")

    def test_tool_results_visible_to_next_inference(self, workdir, make_provider, make_input, registry, display):
        (workdir / "X").write_text("42")
        provider = make_provider([
            UnifiedResponse(tool_calls=[_call("1", "X")]),
            UnifiedResponse(text="It says 42."),
        ])
        Agent(provider, registry, read_input=make_input(["read X", "what is it?"]), display=display).run()
        assert Turn.assistant("Tool read_file result: 42") in provider.calls[1]["turns"]

    def test_hidden_tool_calls(self, workdir, make_provider, make_input, registry, display, console):
        (workdir / "X").write_text("x")
        provider = make_provider([UnifiedResponse(tool_calls=[_call("1", "X")])])
        Agent(
            provider,
            registry,
            read_input=make_input(["go"]),
            display=display,
            config=AgentConfig(show_tool_calls=False),
        ).run()
        output = _output(console)
        assert "read_file(" not in output
        assert "read_file returned 1 chars" in output

    def test_on_tool_result_callback(self, workdir, make_provider, make_input, registry, display):
        (workdir / "X").write_text("x")
        results = []
        provider = make_provider([UnifiedResponse(tool_calls=[_call("1", "X"), _call("2", "Y")])])
        Agent(
            provider,
            registry,
            read_input=make_input(["go"]),
            display=display,
            config=AgentConfig(on_tool_result=results.append),
        ).run()
        assert [(r.call_id, r.success) for r in results] == [("1", True), ("2", False)]

    def test_callback_errors_are_swallowed(self, workdir, make_provider, make_input, registry, display):
        (workdir / "X").write_text("x")

        def broken(result):
            raise RuntimeError("callback broke")

        provider = make_provider([UnifiedResponse(tool_calls=[_call("1", "X")])])
        transcript = Agent(
            provider,
            registry,
            read_input=make_input(["go"]),
            display=display,
            config=AgentConfig(on_tool_result=broken),
        ).run()
        assert transcript.last == Turn.assistant("Tool read_file result: x")


# ---------------------------------------------------------------------------
# Inference failures
# ---------------------------------------------------------------------------


class TestInferenceFailure:
    def test_error_stops_loop(self, make_provider, make_input, registry, display):
        provider = make_provider([UnifiedResponse(text="hi"), LLMAuthError("bad key", status_code=401)])
        agent = Agent(provider, registry, read_input=make_input(["one", "two", "three"]), display=display)

        with pytest.raises(LLMAuthError, match="bad key"):
            agent.run()

        assert agent.state is AgentState.STOPPED
        assert len(provider.calls) == 2
        assert agent.transcript.last == Turn.user("two")

    def test_no_retry_by_default(self, make_provider, make_input, registry, display):
        provider = make_provider([LLMServerError("busy", status_code=503), UnifiedResponse(text="late")])
        agent = Agent(provider, registry, read_input=make_input(["hi"]), display=display)
        with pytest.raises(LLMServerError):
            agent.run()
        assert len(provider.calls) == 1

    def test_retryable_errors_retried(self, make_provider, make_input, registry, display):
        provider = make_provider([
            LLMRateLimitError("slow down"),
            LLMServerError("busy", status_code=503),
            UnifiedResponse(text="finally"),
        ])
        agent = Agent(
            provider,
            registry,
            read_input=make_input(["hi"]),
            display=display,
            config=AgentConfig(max_inference_attempts=3, retry_backoff=0),
        )
        transcript = agent.run()
        assert len(provider.calls) == 3
        assert transcript.turns == (Turn.user("hi"), Turn.assistant("finally"))

    def test_retries_exhausted(self, make_provider, make_input, registry, display):
        provider = make_provider([LLMServerError("busy")] * 2)
        agent = Agent(
            provider,
            registry,
            read_input=make_input(["hi"]),
            display=display,
            config=AgentConfig(max_inference_attempts=2, retry_backoff=0),
        )
        with pytest.raises(LLMServerError):
            agent.run()
        assert len(provider.calls) == 2

    def test_non_retryable_not_retried(self, make_provider, make_input, registry, display):
        provider = make_provider([LLMAuthError("denied"), UnifiedResponse(text="never")])
        agent = Agent(
            provider,
            registry,
            read_input=make_input(["hi"]),
            display=display,
            config=AgentConfig(max_inference_attempts=5, retry_backoff=0),
        )
        with pytest.raises(LLMAuthError):
            agent.run()
        assert len(provider.calls) == 1


# ---------------------------------------------------------------------------
# Display
# ---------------------------------------------------------------------------


class TestDisplay:
    def test_prompt_and_reply(self, make_provider, make_input, registry, display, console):
        provider = make_provider([UnifiedResponse(text="Hello [there]")])
        Agent(provider, registry, read_input=make_input(["hi"]), display=display).run()
        output = _output(console)
        assert output.startswith("You: ")
        assert "Bot: Hello [there]" in output

    def test_long_arguments_truncated(self, display, console):
        display.tool_call(ToolCallRequest(id="1", name="read_file", arguments="x" * 500))
        line = _output(console).strip()
        assert line.endswith("...)")
        assert len(line) < 200

    def test_error(self, display, console):
        display.error("something [broke]")
        assert "Error: something [broke]" in _output(console)
