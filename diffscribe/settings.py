"""Resolved settings for a single generation attempt.

Settings are read from ~/.diffscribe/config.yaml, the credentials file and
the environment every time they are requested, so a retry after the user
edits the configuration picks up the new values.
"""

import os
from dataclasses import dataclass
from typing import Optional

from diffscribe import global_config
from diffscribe.config import (
    API_KEY_ENV_VARS,
    DEFAULT_LANGUAGE,
    DEFAULT_MAX_DIFF_LENGTH,
    DEFAULT_MAX_TOKENS,
    DEFAULT_OUTPUT_STYLE,
    DEFAULT_PROVIDER,
    DEFAULT_TEMPERATURE,
    LLMProvider,
    OutputStyle,
)


@dataclass(frozen=True)
class ProviderSettings:
    """Connection settings handed to a provider variant.

    Empty values mean "use the variant default" for base URL and model.
    """

    api_key: Optional[str] = None
    base_url: Optional[str] = None
    model: Optional[str] = None
    temperature: float = DEFAULT_TEMPERATURE
    max_tokens: int = DEFAULT_MAX_TOKENS


@dataclass(frozen=True)
class GenerationSettings:
    """User preferences that shape the prompt and the output."""

    provider: LLMProvider = DEFAULT_PROVIDER
    language: str = DEFAULT_LANGUAGE
    output_style: OutputStyle = DEFAULT_OUTPUT_STYLE
    max_diff_length: int = DEFAULT_MAX_DIFF_LENGTH
    custom_prompt: str = ""
    debug: bool = False
    debug_log_prompt: bool = False

    @property
    def header_only(self) -> bool:
        return self.output_style == OutputStyle.HEADER_ONLY


def resolve_api_key(provider: LLMProvider) -> Optional[str]:
    """Find the API key for a provider.

    Checks in order:
    1. Environment variable (a loaded .env file counts)
    2. ~/.diffscribe/credentials file

    Args:
        provider: The LLM provider.

    Returns:
        The API key, or None if it is not set anywhere.
    """
    env_var_name = API_KEY_ENV_VARS[provider]
    api_key = os.getenv(env_var_name)
    if api_key:
        return api_key
    return global_config.get_credential(env_var_name) or None


def load_provider_settings(
    provider: LLMProvider,
    model: Optional[str] = None,
) -> ProviderSettings:
    """Build ProviderSettings for a provider from the current configuration.

    Args:
        provider: The LLM provider.
        model: Model override (e.g. from the command line).

    Returns:
        Freshly resolved provider settings.
    """
    section = global_config.get_provider_section(provider)
    max_tokens = global_config.get_max_tokens()
    temperature = global_config.get_temperature()

    return ProviderSettings(
        api_key=resolve_api_key(provider),
        base_url=section.get("base_url") or None,
        model=model or section.get("model") or None,
        temperature=DEFAULT_TEMPERATURE if temperature is None else float(temperature),
        max_tokens=DEFAULT_MAX_TOKENS if max_tokens is None else int(max_tokens),
    )


def load_generation_settings(
    provider: Optional[LLMProvider] = None,
    language: Optional[str] = None,
    output_style: Optional[OutputStyle] = None,
    max_diff_length: Optional[int] = None,
    debug: Optional[bool] = None,
) -> GenerationSettings:
    """Build GenerationSettings from config, applying explicit overrides.

    Overrides (command line flags) take precedence over config.yaml, which
    takes precedence over the built-in defaults.
    """
    config = global_config.load_global_config()

    return GenerationSettings(
        provider=provider or global_config.get_active_provider() or DEFAULT_PROVIDER,
        language=language or config.get("language") or DEFAULT_LANGUAGE,
        output_style=output_style or global_config.get_output_style() or DEFAULT_OUTPUT_STYLE,
        max_diff_length=int(max_diff_length or config.get("max_diff_length") or DEFAULT_MAX_DIFF_LENGTH),
        custom_prompt=config.get("custom_prompt") or "",
        debug=bool(config.get("debug", False)) if debug is None else debug,
        debug_log_prompt=bool(config.get("debug_log_prompt", False)),
    )
