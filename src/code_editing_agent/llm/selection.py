"""Start-of-run provider selection from environment credentials."""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from typing import Any

from code_editing_agent.llm.anthropic import AnthropicProvider
from code_editing_agent.llm.client import HTTPProvider
from code_editing_agent.llm.errors import LLMConfigError
from code_editing_agent.llm.openai import OpenAIProvider

logger = logging.getLogger(__name__)

# Preference order when more than one credential is present.
PROVIDERS: dict[str, type[HTTPProvider]] = {
    "openai": OpenAIProvider,
    "anthropic": AnthropicProvider,
}

API_KEY_ENV = {
    "openai": "OPENAI_API_KEY",
    "anthropic": "ANTHROPIC_API_KEY",
}
BASE_URL_ENV = {
    "openai": "OPENAI_BASE_URL",
    "anthropic": "ANTHROPIC_BASE_URL",
}
MODEL_ENV = {
    "openai": "OPENAI_MODEL",
    "anthropic": "ANTHROPIC_MODEL",
}

_MISSING_KEY_HELP = (
    "No API key found. Set one of the following environment variables:\n"
    "  export OPENAI_API_KEY='your-openai-api-key'\n"
    "  export ANTHROPIC_API_KEY='your-anthropic-api-key'\n"
    "Get an API key:\n"
    "  OpenAI: https://platform.openai.com/api-keys\n"
    "  Anthropic: https://console.anthropic.com/"
)


def available_providers(environ: Mapping[str, str] | None = None) -> list[str]:
    """Names of providers whose credential is set, in preference order."""
    env = os.environ if environ is None else environ
    return [name for name in PROVIDERS if env.get(API_KEY_ENV[name])]


def select_provider(
    environ: Mapping[str, str] | None = None,
    *,
    prefer: str | None = None,
    model: str | None = None,
    **kwargs: Any,
) -> HTTPProvider:
    """Build the provider for this run.

    The first provider in ``PROVIDERS`` order whose API key is present wins
    unless ``prefer`` names a specific one. The choice is made once; there
    is no fallback to another vendor later in the run.

    Args:
        environ: Environment mapping. Defaults to ``os.environ``.
        prefer: Provider name to force ("openai" or "anthropic").
        model: Model override. Falls back to the provider's ``*_MODEL``
            environment variable, then to its default model.
        **kwargs: Forwarded to the provider constructor (max_tokens,
            system_prompt, timeout, transport).

    Returns:
        A ready-to-use provider instance.

    Raises:
        LLMConfigError: If ``prefer`` is unknown, its key is missing, or
            no credential is present at all.
    """
    env = os.environ if environ is None else environ

    if prefer is not None:
        prefer = prefer.lower()
        if prefer not in PROVIDERS:
            raise LLMConfigError(
                f"Unknown provider {prefer!r}. Choose one of: {', '.join(PROVIDERS)}."
            )
        if not env.get(API_KEY_ENV[prefer]):
            raise LLMConfigError(
                f"Provider {prefer!r} requested but {API_KEY_ENV[prefer]} is not set."
            )
        name = prefer
    else:
        candidates = available_providers(env)
        if not candidates:
            raise LLMConfigError(_MISSING_KEY_HELP)
        name = candidates[0]
        if len(candidates) > 1:
            logger.info(
                "Multiple API keys found (%s); using %s",
                ", ".join(candidates),
                name,
            )

    provider_cls = PROVIDERS[name]
    provider = provider_cls(
        env[API_KEY_ENV[name]],
        base_url=env.get(BASE_URL_ENV[name]) or None,
        model=model or env.get(MODEL_ENV[name]) or None,
        **kwargs,
    )
    logger.debug("Selected provider %s (model=%s)", name, provider.model)
    return provider
