"""Creating the commit."""

import tempfile
from pathlib import Path
from typing import Optional

from diffscribe.git.runner import _run_git_command


def commit_with_message(
    message: str,
    repo_root: Optional[Path] = None,
    include_unstaged: bool = False,
) -> str:
    """Commit staged changes with the given message.

    The message is passed through a temporary file so multi-line bodies
    survive unchanged.

    Args:
        message: The commit message.
        repo_root: The repository root (defaults to the current directory).
        include_unstaged: Commit tracked working-tree changes too (``-a``).

    Returns:
        The output of ``git commit``.

    Raises:
        GitError: If the commit fails.
    """
    with tempfile.NamedTemporaryFile("w", suffix=".txt", delete=False, encoding="utf-8") as f:
        f.write(message.rstrip() + "\n")
        message_file = Path(f.name)

    args = ["commit", "-F", str(message_file)]
    if include_unstaged:
        args.insert(1, "-a")
    try:
        return _run_git_command(args, cwd=repo_root)
    finally:
        message_file.unlink(missing_ok=True)
