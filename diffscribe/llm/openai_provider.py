"""OpenAI and OpenAI-compatible provider variants.

OpenRouter, Groq, Mistral and any self-hosted server (Ollama, vLLM,
LocalAI) speak the OpenAI chat-completions protocol, so they only differ
in defaults and headers.
"""

from typing import Any, Callable, Optional

from diffscribe.config import LLMProvider
from diffscribe.llm.base import ProviderVariant, RequestSpec
from diffscribe.llm.stream import extract_delta
from diffscribe.settings import ProviderSettings


def chat_completions_request(
    extra_headers: Optional[dict[str, str]] = None,
) -> Callable[[ProviderSettings, str], RequestSpec]:
    """Create a request builder for ``POST <base>/chat/completions``.

    Args:
        extra_headers: Headers added to every request.

    Returns:
        A build_request function for ProviderVariant.
    """

    def build(settings: ProviderSettings, prompt: str) -> RequestSpec:
        headers = {"Content-Type": "application/json", "Accept": "text/event-stream"}
        # Local servers may run without a key
        if settings.api_key:
            headers["Authorization"] = f"Bearer {settings.api_key}"
        if extra_headers:
            headers.update(extra_headers)

        return RequestSpec(
            url=f"{settings.base_url}/chat/completions",
            headers=headers,
            body={
                "model": settings.model,
                "messages": [{"role": "user", "content": prompt}],
                "temperature": settings.temperature,
                "max_tokens": settings.max_tokens,
                "stream": True,
            },
        )

    return build


def extract_chat_completion_text(payload: Any) -> Optional[str]:
    """Text of a non-streaming chat-completions response."""
    return extract_delta(payload)


OPENAI = ProviderVariant(
    provider=LLMProvider.OPENAI,
    display_name="OpenAI",
    default_base_url="https://api.openai.com/v1",
    default_model="gpt-4o",
    requires_api_key=True,
    build_request=chat_completions_request(),
    extract_text=extract_chat_completion_text,
)

OPENROUTER = ProviderVariant(
    provider=LLMProvider.OPENROUTER,
    display_name="OpenRouter",
    default_base_url="https://openrouter.ai/api/v1",
    default_model="anthropic/claude-sonnet-4",
    requires_api_key=True,
    build_request=chat_completions_request(
        {"HTTP-Referer": "https://github.com/diffscribe", "X-Title": "diffscribe"}
    ),
    extract_text=extract_chat_completion_text,
)

GROQ = ProviderVariant(
    provider=LLMProvider.GROQ,
    display_name="Groq",
    default_base_url="https://api.groq.com/openai/v1",
    default_model="llama-3.3-70b-versatile",
    requires_api_key=True,
    build_request=chat_completions_request(),
    extract_text=extract_chat_completion_text,
)

MISTRAL = ProviderVariant(
    provider=LLMProvider.MISTRAL,
    display_name="Mistral",
    default_base_url="https://api.mistral.ai/v1",
    default_model="mistral-small-latest",
    requires_api_key=True,
    build_request=chat_completions_request(),
    extract_text=extract_chat_completion_text,
)

# Base URL and model must come from the user's settings
CUSTOM = ProviderVariant(
    provider=LLMProvider.CUSTOM,
    display_name="Custom API",
    default_base_url=None,
    default_model=None,
    requires_api_key=False,
    build_request=chat_completions_request(),
    extract_text=extract_chat_completion_text,
)
