"""Git collaborator for diffscribe.

This package provides:
- exceptions: GitError, NoChangesError
- runner: _run_git_command, get_repo_root
- diff: staged / unstaged diffs and files, current branch, collect_changes
- commit: commit_with_message
"""

from diffscribe.git.exceptions import (
    GitError,
    NoChangesError,
)

from diffscribe.git.runner import (
    _run_git_command,
    get_repo_root,
)

from diffscribe.git.diff import (
    DIFF_SOURCE_STAGED,
    DIFF_SOURCE_UNSTAGED,
    ChangeSet,
    collect_changes,
    get_current_branch,
    get_staged_diff,
    get_staged_files,
    get_unstaged_diff,
    get_unstaged_files,
)

from diffscribe.git.commit import commit_with_message


__all__ = [
    # Exceptions
    "GitError",
    "NoChangesError",
    # Runner
    "_run_git_command",
    "get_repo_root",
    # Diff
    "DIFF_SOURCE_STAGED",
    "DIFF_SOURCE_UNSTAGED",
    "ChangeSet",
    "collect_changes",
    "get_current_branch",
    "get_staged_diff",
    "get_staged_files",
    "get_unstaged_diff",
    "get_unstaged_files",
    # Commit
    "commit_with_message",
]
