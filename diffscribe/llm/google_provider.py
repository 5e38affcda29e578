"""Google Gemini provider variant (generateContent, single JSON response)."""

from typing import Any, Optional

from diffscribe.config import LLMProvider
from diffscribe.llm.base import ProviderVariant, RequestSpec
from diffscribe.settings import ProviderSettings


def build_generate_content_request(settings: ProviderSettings, prompt: str) -> RequestSpec:
    # Key goes in a header so it never ends up in a logged URL
    return RequestSpec(
        url=f"{settings.base_url}/models/{settings.model}:generateContent",
        headers={
            "Content-Type": "application/json",
            "x-goog-api-key": settings.api_key or "",
        },
        body={
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": {
                "temperature": settings.temperature,
                "maxOutputTokens": settings.max_tokens,
            },
        },
    )


def extract_candidate_text(payload: Any) -> Optional[str]:
    """Return the text of the first candidate's first part."""
    try:
        text = payload["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError):
        return None
    return text if isinstance(text, str) else None


GOOGLE = ProviderVariant(
    provider=LLMProvider.GOOGLE,
    display_name="Google Gemini",
    default_base_url="https://generativelanguage.googleapis.com/v1beta",
    default_model="gemini-2.0-flash",
    requires_api_key=True,
    build_request=build_generate_content_request,
    extract_text=extract_candidate_text,
)
