"""Size-bounded diff trimming.

Diffs can be megabytes long while a prompt has a fixed character budget.
Instead of cutting the diff at the budget (which only ever shows the first
file), every file block gets summarized in order: its header, the hunk
headers, the first few changed lines of every hunk and any line that looks
like a declaration, comment or import.
"""

import re
from dataclasses import dataclass

TRUNCATED_MARKER = "\n\n... (diff truncated)"
TRIMMED_MARKER = "\n\n... (diff trimmed)"

# Room reserved for the marker when distributing the budget across files
BUDGET_RESERVE = 40
MIN_BUDGET = 200
MAX_HEADER_LINES = 12
MAX_CHANGES_PER_HUNK = 6

_FILE_HEADER_RE = re.compile(r"^diff --git .*$", re.MULTILINE)

_SIGNATURE_LIKE_RE = re.compile(
    r"^(?:[+\- ]\s*)?(export\s+)?(default\s+)?(async\s+)?(function|class|interface|type|enum)\b"
    r"|^(?:[+\- ]\s*)?(def|class)\s+\w+"
    r"|^(?:[+\- ]\s*)?(func)\s+\w+"
    r"|^(?:[+\- ]\s*)?(public|private|protected)\b"
)
_COMMENT_LIKE_RE = re.compile(r"^(?:[+\- ]\s*)?(//|#|/\*|\*|\s*\*/)")
_IMPORT_LIKE_RE = re.compile(r"^(?:[+\- ]\s*)?(import\s+|from\s+\S+\s+import\s+)")


@dataclass(frozen=True)
class TrimResult:
    """Outcome of trim_diff."""

    text: str
    trimmed: bool


def split_diff_by_file(diff: str) -> list[str]:
    """Split a unified diff into per-file blocks.

    Args:
        diff: The full diff text.

    Returns:
        One block per ``diff --git`` header, in order, with trailing
        whitespace removed. A diff without headers is a single block.
    """
    starts = [match.start() for match in _FILE_HEADER_RE.finditer(diff)]
    if not starts:
        return [diff]

    blocks = []
    for i, start in enumerate(starts):
        end = starts[i + 1] if i + 1 < len(starts) else len(diff)
        blocks.append(diff[start:end].rstrip())
    return blocks


def _is_structural(line: str) -> bool:
    return bool(
        _SIGNATURE_LIKE_RE.search(line)
        or _COMMENT_LIKE_RE.search(line)
        or _IMPORT_LIKE_RE.search(line)
    )


def summarize_diff_block(block: str, remaining: int) -> str:
    """Reduce one file block to its most informative lines.

    Args:
        block: A single ``diff --git`` block.
        remaining: Characters still available for this block.

    Returns:
        The block itself if it fits, otherwise its summary cut to
        ``remaining`` characters.
    """
    if len(block) <= remaining:
        return block

    header: list[str] = []
    important: list[str] = []
    in_hunk = False
    hunk_changes = 0

    for line in re.split(r"\r?\n", block):
        if len(header) < MAX_HEADER_LINES and not line.startswith("@@"):
            header.append(line)
            continue

        if line.startswith("@@"):
            in_hunk = True
            hunk_changes = 0
            important.append(line)
            continue

        if not in_hunk:
            continue

        is_change = line.startswith("+") or line.startswith("-")
        if is_change:
            hunk_changes += 1
            if hunk_changes <= MAX_CHANGES_PER_HUNK:
                important.append(line)
                continue

        if _is_structural(line):
            important.append(line)

    result = "\n".join(header + important)
    return result[:remaining] if len(result) > remaining else result


def _with_marker(text: str, marker: str, max_chars: int) -> str:
    """Append marker while keeping the result within max_chars."""
    if len(marker) >= max_chars:
        return text[:max_chars]
    return text[: max_chars - len(marker)] + marker


def trim_diff(diff: str, max_chars: int) -> TrimResult:
    """Bound a diff to max_chars while keeping structural signal.

    Args:
        diff: The raw unified diff.
        max_chars: Character budget for the returned text.

    Returns:
        TrimResult whose text is never longer than max_chars; ``trimmed``
        is True whenever the input had to be cut.
    """
    if len(diff) <= max_chars:
        return TrimResult(text=diff, trimmed=False)

    blocks = split_diff_by_file(diff)
    if len(blocks) <= 1:
        return TrimResult(text=_with_marker(diff, TRUNCATED_MARKER, max_chars), trimmed=True)

    budget = max(MIN_BUDGET, max_chars - BUDGET_RESERVE)
    out = ""

    for block in blocks:
        if len(out) >= budget:
            break
        summary = summarize_diff_block(block, budget - len(out))
        out += ("\n" if out else "") + summary

    return TrimResult(text=_with_marker(out, TRIMMED_MARKER, max_chars), trimmed=True)
