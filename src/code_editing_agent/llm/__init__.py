"""LLM provider adapters.

Provides the Provider protocol, httpx-based adapters for the Anthropic
Messages API and OpenAI Chat Completions, environment-driven selection,
and the inference error hierarchy.
"""

from code_editing_agent.llm.anthropic import AnthropicProvider
from code_editing_agent.llm.client import HTTPProvider
from code_editing_agent.llm.errors import (
    InferenceError,
    LLMAuthError,
    LLMConfigError,
    LLMConnectionError,
    LLMRateLimitError,
    LLMResponseError,
    LLMServerError,
)
from code_editing_agent.llm.openai import OpenAIProvider
from code_editing_agent.llm.protocols import Provider
from code_editing_agent.llm.selection import available_providers, select_provider

__all__ = [
    "Provider",
    "HTTPProvider",
    "AnthropicProvider",
    "OpenAIProvider",
    "available_providers",
    "select_provider",
    "InferenceError",
    "LLMConfigError",
    "LLMAuthError",
    "LLMRateLimitError",
    "LLMServerError",
    "LLMConnectionError",
    "LLMResponseError",
]
