"""LLM provider module for diffscribe.

This module provides a unified interface to multiple LLM providers.
Each provider is a ProviderVariant executed by the same LLMClient.
"""

from typing import Optional

import httpx
from dotenv import load_dotenv

from diffscribe.config import LLMProvider
from diffscribe.llm.anthropic_provider import ANTHROPIC
from diffscribe.llm.base import GenerationOptions, LLMClient, ProviderVariant, RequestSpec
from diffscribe.llm.cancellation import CancellationToken
from diffscribe.llm.exceptions import (
    AbortedError,
    ConfigurationError,
    EmptyResponseError,
    HttpError,
    LLMError,
    MissingAPIKeyError,
    TransportError,
)
from diffscribe.llm.google_provider import GOOGLE
from diffscribe.llm.openai_provider import CUSTOM, GROQ, MISTRAL, OPENAI, OPENROUTER
from diffscribe.settings import ProviderSettings, load_provider_settings

# Load environment variables from .env file
load_dotenv()

VARIANTS: dict[LLMProvider, ProviderVariant] = {
    variant.provider: variant
    for variant in (OPENAI, ANTHROPIC, GOOGLE, OPENROUTER, GROQ, MISTRAL, CUSTOM)
}


def get_provider(
    provider: LLMProvider,
    settings: Optional[ProviderSettings] = None,
    transport: Optional[httpx.BaseTransport] = None,
) -> LLMClient:
    """Get an LLM client for a provider.

    Args:
        provider: The provider to use.
        settings: Connection settings. Defaults to the current configuration.
        transport: Optional httpx transport (used by tests).

    Returns:
        An LLMClient bound to the provider's variant.

    Raises:
        ValueError: If the provider is not supported.
    """
    variant = VARIANTS.get(provider)
    if variant is None:
        raise ValueError(f"Unsupported provider: {provider}")

    if settings is None:
        settings = load_provider_settings(provider)
    return LLMClient(variant, settings, transport=transport)


# Export commonly used items
__all__ = [
    "AbortedError",
    "CancellationToken",
    "ConfigurationError",
    "EmptyResponseError",
    "GenerationOptions",
    "HttpError",
    "LLMClient",
    "LLMError",
    "MissingAPIKeyError",
    "ProviderVariant",
    "RequestSpec",
    "TransportError",
    "VARIANTS",
    "get_provider",
]
