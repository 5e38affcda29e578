"""Prompt building for diffscribe."""

from diffscribe.prompts.engine import (
    PromptContext,
    build_prompt,
    render_template,
)
from diffscribe.prompts.templates import (
    DEFAULT_PROMPT,
    LANGUAGE_NAMES,
    get_language_display_name,
)

__all__ = [
    "PromptContext",
    "build_prompt",
    "render_template",
    "DEFAULT_PROMPT",
    "LANGUAGE_NAMES",
    "get_language_display_name",
]
