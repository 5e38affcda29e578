"""Configuration for diffscribe LLM providers.

Configuration is loaded from ~/.diffscribe/config.yaml
Use 'diffscribe config' commands to modify settings.
"""

from enum import Enum


class LLMProvider(Enum):
    """Supported LLM providers."""

    OPENAI = "openai"
    ANTHROPIC = "anthropic"
    GOOGLE = "google"
    OPENROUTER = "openrouter"
    GROQ = "groq"
    MISTRAL = "mistral"
    CUSTOM = "custom"


class OutputStyle(Enum):
    """Shape of the generated commit message."""

    HEADER_ONLY = "header_only"
    HEADER_AND_BODY = "header_and_body"


# ============================================================
# DEFAULT FALLBACK VALUES
# ============================================================
# These are used only if ~/.diffscribe/config.yaml doesn't exist

DEFAULT_PROVIDER = LLMProvider.OPENAI
DEFAULT_MAX_TOKENS = 500
DEFAULT_TEMPERATURE = 0.7
DEFAULT_LANGUAGE = "en"
DEFAULT_OUTPUT_STYLE = OutputStyle.HEADER_AND_BODY
DEFAULT_MAX_DIFF_LENGTH = 4000

# Debounce window for pushing streamed text into the visible field
FLUSH_INTERVAL_SECONDS = 0.06

# Seconds before the HTTP layer gives up on a request
REQUEST_TIMEOUT_SECONDS = 60.0


# ============================================================
# AVAILABLE MODELS PER PROVIDER
# ============================================================

AVAILABLE_MODELS = {
    LLMProvider.OPENAI: [
        "gpt-4o",
        "gpt-4o-mini",
        "gpt-4.1",
        "gpt-4.1-mini",
    ],
    LLMProvider.ANTHROPIC: [
        "claude-3-5-sonnet-20241022",
        "claude-3-5-haiku-latest",
        "claude-sonnet-4-20250514",
    ],
    LLMProvider.GOOGLE: [
        "gemini-2.0-flash",
        "gemini-2.5-flash",
        "gemini-2.5-pro",
    ],
    LLMProvider.OPENROUTER: [
        "anthropic/claude-sonnet-4",
        "openai/gpt-4o",
        "google/gemini-2.0-flash-exp",
        "deepseek/deepseek-chat",
    ],
    LLMProvider.GROQ: [
        "llama-3.3-70b-versatile",
        "llama-3.1-8b-instant",
    ],
    LLMProvider.MISTRAL: [
        "mistral-small-latest",
        "mistral-large-latest",
        "codestral-latest",
    ],
    # Any OpenAI-compatible server (Ollama, vLLM, LocalAI); model is user supplied
    LLMProvider.CUSTOM: [],
}

# ============================================================
# API KEY ENVIRONMENT VARIABLES
# ============================================================

API_KEY_ENV_VARS = {
    LLMProvider.OPENAI: "OPENAI_API_KEY",
    LLMProvider.ANTHROPIC: "ANTHROPIC_API_KEY",
    LLMProvider.GOOGLE: "GOOGLE_API_KEY",
    LLMProvider.OPENROUTER: "OPENROUTER_API_KEY",
    LLMProvider.GROQ: "GROQ_API_KEY",
    LLMProvider.MISTRAL: "MISTRAL_API_KEY",
    LLMProvider.CUSTOM: "DIFFSCRIBE_API_KEY",
}


def get_api_key_env_var(provider: LLMProvider) -> str:
    """Get the environment variable name for the API key.

    Args:
        provider: The LLM provider.

    Returns:
        The environment variable name.
    """
    return API_KEY_ENV_VARS[provider]
