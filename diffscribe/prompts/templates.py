"""Default prompt template and language names.

Template variables:
- {{diff}}: the trimmed diff
- {{files}}: changed files, one per line
- {{branch}}: current branch
- {{language}}: display name of the output language
- {{commitlint_rules}}: project commit rules as bullet lines
- {{suggested_type}} / {{suggested_scope}}: heuristic hints
- {{header_only}} / {{allow_body}}: "1" when set, empty otherwise

Blocks wrapped in {{#if name}}...{{/if}} are kept only when the variable
is non-empty. Blocks may be nested.
"""

DEFAULT_PROMPT = """You are a professional Git commit message generator.

## Code Changes
```diff
{{diff}}
```

## Changed Files
{{files}}

## Current Branch
{{branch}}

{{#if commitlint_rules}}
## Project Commit Rules
{{commitlint_rules}}
{{/if}}

{{#if suggested_type}}
## Hints
- Likely type: {{suggested_type}}
{{#if suggested_scope}}
- Likely scope: {{suggested_scope}}
{{/if}}
{{/if}}

## Task
Generate a commit message based on the changes above.

Requirements:
- Use Conventional Commits format: <type>[optional scope]: <description>
- Available types: feat, fix, docs, style, refactor, perf, test, build, ci, chore
- Write the description in {{language}}
- Be concise and clear
- Focus on WHAT changed and WHY, not HOW
{{#if header_only}}
- Output a single header line only, with no body
{{/if}}
{{#if allow_body}}
- Add a body with details after a blank line if the change is complex
{{/if}}

Output ONLY the commit message, no explanations."""

LANGUAGE_NAMES = {
    "en": "English",
    "zh-CN": "简体中文 (Simplified Chinese)",
    "zh-TW": "繁體中文 (Traditional Chinese)",
    "ja": "日本語 (Japanese)",
    "ko": "한국어 (Korean)",
    "de": "Deutsch (German)",
    "fr": "Français (French)",
    "es": "Español (Spanish)",
}


def get_language_display_name(lang: str) -> str:
    """Get the display name for a language code (unknown codes pass through)."""
    return LANGUAGE_NAMES.get(lang, lang)
