"""Git diff utilities.

Contains:
- get_staged_diff / get_unstaged_diff: Raw unified diffs
- get_staged_files / get_unstaged_files: Changed paths in git order
- get_current_branch: Current branch name, "unknown" when unavailable
- collect_changes: Staged changes, falling back to the working tree
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from diffscribe.git.exceptions import GitError, NoChangesError
from diffscribe.git.runner import _run_git_command

DIFF_SOURCE_STAGED = "staged"
DIFF_SOURCE_UNSTAGED = "unstaged"


@dataclass(frozen=True)
class ChangeSet:
    """A diff plus the facts the prompt needs about it."""

    diff: str
    files: tuple[str, ...]
    branch: str
    source: str


def _split_paths(output: str) -> list[str]:
    return [path for path in output.split("\0") if path]


def get_staged_diff(repo_root: Optional[Path] = None) -> str:
    """Get the diff of the index against HEAD."""
    return _run_git_command(["diff", "--cached"], cwd=repo_root)


def get_unstaged_diff(repo_root: Optional[Path] = None) -> str:
    """Get the diff of the working tree against the index."""
    return _run_git_command(["diff"], cwd=repo_root)


def get_staged_files(repo_root: Optional[Path] = None) -> list[str]:
    """Get the staged file paths in the order git reports them."""
    return _split_paths(_run_git_command(["diff", "--cached", "--name-only", "-z"], cwd=repo_root))


def get_unstaged_files(repo_root: Optional[Path] = None) -> list[str]:
    """Get the modified but unstaged file paths in git order."""
    return _split_paths(_run_git_command(["diff", "--name-only", "-z"], cwd=repo_root))


def get_current_branch(repo_root: Optional[Path] = None) -> str:
    """Get the current branch name.

    Returns:
        The branch name, or "unknown" in detached HEAD state or when git
        cannot tell.
    """
    try:
        branch = _run_git_command(["rev-parse", "--abbrev-ref", "HEAD"], cwd=repo_root)
    except GitError:
        return "unknown"
    if not branch or branch == "HEAD":
        return "unknown"
    return branch


def collect_changes(repo_root: Optional[Path] = None) -> ChangeSet:
    """Collect the change set to describe.

    Staged changes win; when nothing is staged the working-tree diff is
    used instead.

    Args:
        repo_root: The repository root (defaults to the current directory).

    Returns:
        ChangeSet with diff, files, branch and diff source.

    Raises:
        NoChangesError: If there are neither staged nor unstaged changes.
    """
    source = DIFF_SOURCE_STAGED
    files = get_staged_files(repo_root)
    diff = get_staged_diff(repo_root) if files else ""

    if not diff:
        source = DIFF_SOURCE_UNSTAGED
        files = get_unstaged_files(repo_root)
        diff = get_unstaged_diff(repo_root) if files else ""

    if not diff:
        raise NoChangesError(
            "No changes found. Stage your changes first with: git add <files>"
        )

    return ChangeSet(
        diff=diff,
        files=tuple(files),
        branch=get_current_branch(repo_root),
        source=source,
    )
