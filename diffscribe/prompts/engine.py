"""Prompt template rendering."""

import re
from dataclasses import dataclass
from typing import Mapping, Optional, Sequence, Union

from diffscribe.commitlint import CommitlintRules, format_rules_for_prompt
from diffscribe.diff_trim import trim_diff
from diffscribe.heuristics import infer_scope, infer_type
from diffscribe.log import get_logger
from diffscribe.prompts.templates import DEFAULT_PROMPT, get_language_display_name
from diffscribe.settings import GenerationSettings

logger = get_logger(__name__)

# Deeper {{#if}} tags are kept as literal text
MAX_BLOCK_DEPTH = 32

_TAG_RE = re.compile(r"\{\{#if\s+(?P<name>\w+)\s*\}\}|\{\{/if\}\}")
_VAR_RE = re.compile(r"\{\{(\w+)\}\}")


@dataclass(frozen=True)
class PromptContext:
    """The change set a prompt is built from."""

    diff: str
    files: tuple[str, ...]
    branch: str


@dataclass
class _Block:
    name: str
    children: list["_Node"]


_Node = Union[str, _Block]


def _parse(source: str, pos: int, depth: int) -> tuple[list[_Node], int, bool]:
    """Parse nodes from pos until a matching {{/if}} or the end of source.

    Returns:
        (nodes, position after the consumed text, whether a {{/if}} closed
        this level).
    """
    nodes: list[_Node] = []
    while True:
        match = _TAG_RE.search(source, pos)
        if match is None:
            nodes.append(source[pos:])
            return nodes, len(source), False

        nodes.append(source[pos:match.start()])
        name = match.group("name")

        if name is None:
            if depth == 0:
                # Stray {{/if}}
                nodes.append(match.group(0))
                pos = match.end()
                continue
            return nodes, match.end(), True

        if depth >= MAX_BLOCK_DEPTH:
            nodes.append(match.group(0))
            pos = match.end()
            continue

        children, pos, closed = _parse(source, match.end(), depth + 1)
        if closed:
            nodes.append(_Block(name, children))
        else:
            # Unclosed {{#if}}: keep the tag as text
            nodes.append(match.group(0))
            nodes.extend(children)


def _render(nodes: Sequence[_Node], variables: Mapping[str, str]) -> str:
    def substitute(match: re.Match) -> str:
        name = match.group(1)
        return variables[name] if name in variables else match.group(0)

    parts = []
    for node in nodes:
        if isinstance(node, _Block):
            if variables.get(node.name):
                parts.append(_render(node.children, variables))
        else:
            parts.append(_VAR_RE.sub(substitute, node))
    return "".join(parts)


def render_template(template: str, variables: Mapping[str, str]) -> str:
    """Render a prompt template.

    ``{{#if name}}...{{/if}}`` blocks (nesting allowed) are kept without
    their markers when ``variables[name]`` is a non-empty string and removed
    entirely otherwise. ``{{name}}`` tokens are then replaced with their
    values; substituted values are never scanned again, and unknown names
    are left untouched.

    Args:
        template: The template text.
        variables: Variable values.

    Returns:
        The rendered prompt, stripped of outer whitespace.
    """
    nodes, _, _ = _parse(template, 0, 0)
    return _render(nodes, variables).strip()


def flag(value: bool) -> str:
    """Represent a boolean template variable."""
    return "1" if value else ""


def build_prompt(
    context: PromptContext,
    settings: GenerationSettings,
    rules: Optional[CommitlintRules] = None,
) -> str:
    """Build the final prompt for a change set.

    Args:
        context: Diff, changed files and branch.
        settings: Generation preferences (template, language, limits).
        rules: Commitlint rules of the project, if any.

    Returns:
        The rendered prompt.
    """
    template = settings.custom_prompt.strip() or DEFAULT_PROMPT

    trimmed = trim_diff(context.diff, settings.max_diff_length)
    if trimmed.trimmed:
        logger.debug(
            "Diff trimmed from %d to %d characters", len(context.diff), len(trimmed.text)
        )

    allowed_types = rules.types if rules else None
    allowed_scopes = rules.scopes if rules else None

    variables = {
        "diff": trimmed.text,
        "files": "\n".join(context.files),
        "branch": context.branch,
        "language": get_language_display_name(settings.language),
        "commitlint_rules": format_rules_for_prompt(rules),
        "suggested_type": infer_type(context.files, allowed_types),
        "suggested_scope": infer_scope(context.files, allowed_scopes),
        "header_only": flag(settings.header_only),
        "allow_body": flag(not settings.header_only),
    }
    return render_template(template, variables)
