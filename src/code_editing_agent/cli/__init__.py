"""Command-line entry point: an interactive chat on stdin/stdout.

Loaded via the ``code-editing-agent`` entry point defined in pyproject.toml.
"""

from __future__ import annotations

import logging

import click

from code_editing_agent._version import __version__
from code_editing_agent.agent import Agent, AgentConfig, ConsoleDisplay
from code_editing_agent.cli.formatting import format_banner, format_error, get_console
from code_editing_agent.exceptions import ConfigError
from code_editing_agent.llm import InferenceError, select_provider
from code_editing_agent.llm.client import DEFAULT_MAX_TOKENS
from code_editing_agent.llm.selection import PROVIDERS
from code_editing_agent.toolkit import default_registry

logger = logging.getLogger(__name__)


@click.command()
@click.option(
    "--provider",
    "provider_name",
    type=click.Choice(list(PROVIDERS), case_sensitive=False),
    default=None,
    envvar="AGENT_PROVIDER",
    help="Force a provider (default: whichever API key is set, OpenAI first).",
)
@click.option(
    "--model",
    default=None,
    envvar="AGENT_MODEL",
    help="Model identifier (default: the provider's default model).",
)
@click.option(
    "--max-tokens",
    type=click.IntRange(min=1),
    default=DEFAULT_MAX_TOKENS,
    show_default=True,
    help="Maximum tokens per reply.",
)
@click.option("--system", "system_prompt", default=None, help="System prompt.")
@click.option(
    "--retries",
    type=click.IntRange(min=0),
    default=0,
    show_default=True,
    help="Retries for rate-limited or transient inference failures.",
)
@click.option("-v", "--verbose", is_flag=True, help="Verbose logging.")
@click.version_option(__version__, prog_name="code-editing-agent")
def main(
    provider_name: str | None,
    model: str | None,
    max_tokens: int,
    system_prompt: str | None,
    retries: int,
    verbose: bool,
) -> None:
    """Chat with an LLM that can read files in the working directory."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    console = get_console()

    try:
        registry = default_registry()
        provider = select_provider(
            prefer=provider_name,
            model=model,
            max_tokens=max_tokens,
            system_prompt=system_prompt,
        )
    except ConfigError as e:
        format_error(str(e), console)
        raise SystemExit(1) from None

    with provider:
        format_banner(provider, console)
        agent = Agent(
            provider,
            registry,
            display=ConsoleDisplay(console),
            config=AgentConfig(max_inference_attempts=retries + 1),
        )
        try:
            agent.run()
        except InferenceError as e:
            console.print()
            format_error(str(e), console)
            raise SystemExit(1) from None
        except KeyboardInterrupt:
            logger.debug("Interrupted by user")
        console.print()
