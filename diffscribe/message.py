"""Cleanup of raw model output into a commit message."""

import re
from typing import Optional

_FENCE_RE = re.compile(r"```[\s\S]*?```")
_LABEL_RE = re.compile(r"^\s*(commit message|message)\s*:\s*", re.IGNORECASE)
_WRAPPING_QUOTES_RE = re.compile(r"^[\"'`]+|[\"'`]+$")
_EXCESS_BLANK_LINES_RE = re.compile(r"\n{3,}")


def _unfence(match: re.Match) -> str:
    """Keep the inner lines of a fenced block, drop inline fences."""
    lines = re.split(r"\r?\n", match.group(0))
    if len(lines) >= 2 and lines[0].startswith("```") and lines[-1].startswith("```"):
        return "\n".join(lines[1:-1])
    return ""


def _strip_wrappers(text: str) -> str:
    """Remove leading labels and wrapping quotes until nothing changes."""
    while True:
        cleaned = _LABEL_RE.sub("", text, count=1).strip()
        cleaned = _WRAPPING_QUOTES_RE.sub("", cleaned).strip()
        if cleaned == text:
            return cleaned
        text = cleaned


def normalize_commit_message(raw: Optional[str], header_only: bool = False) -> str:
    """Turn a raw model response into a commit message.

    Args:
        raw: The text the model produced (may be None).
        header_only: Return only the first non-blank line.

    Returns:
        The cleaned message. In header-only mode the result never contains
        a newline, and normalizing it again returns it unchanged.
    """
    text = (raw or "").replace("\r\n", "\n")
    text = _FENCE_RE.sub(_unfence, text)
    text = _strip_wrappers(text)

    if header_only:
        for line in text.split("\n"):
            header = _strip_wrappers(line.strip())
            if header:
                return header
        return ""

    return _EXCESS_BLANK_LINES_RE.sub("\n\n", text).strip()
