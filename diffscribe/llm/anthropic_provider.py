"""Anthropic Claude provider variant (Messages API, single JSON response)."""

from typing import Any, Optional

from diffscribe.config import LLMProvider
from diffscribe.llm.base import ProviderVariant, RequestSpec
from diffscribe.settings import ProviderSettings

ANTHROPIC_VERSION = "2023-06-01"


def build_messages_request(settings: ProviderSettings, prompt: str) -> RequestSpec:
    return RequestSpec(
        url=f"{settings.base_url}/v1/messages",
        headers={
            "Content-Type": "application/json",
            "x-api-key": settings.api_key or "",
            "anthropic-version": ANTHROPIC_VERSION,
        },
        body={
            "model": settings.model,
            "max_tokens": settings.max_tokens,
            "temperature": settings.temperature,
            "messages": [{"role": "user", "content": prompt}],
        },
    )


def extract_messages_text(payload: Any) -> Optional[str]:
    """Return the first text block of a Messages API response."""
    if not isinstance(payload, dict):
        return None
    for block in payload.get("content") or []:
        if isinstance(block, dict) and block.get("type") == "text":
            text = block.get("text")
            return text if isinstance(text, str) else None
    return None


ANTHROPIC = ProviderVariant(
    provider=LLMProvider.ANTHROPIC,
    display_name="Anthropic Claude",
    default_base_url="https://api.anthropic.com",
    default_model="claude-3-5-sonnet-20241022",
    requires_api_key=True,
    build_request=build_messages_request,
    extract_text=extract_messages_text,
)
