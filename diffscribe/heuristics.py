"""Commit type and scope heuristics.

Provides deterministic guesses for the conventional-commit type and scope
from the list of changed files. Both are passed to the model as hints;
an empty scope means "no confident guess".
"""

import re
from collections import Counter
from typing import Optional, Sequence

DOCS_FILES = {"README.md", "CHANGELOG.md", "LICENSE"}
DOCS_DIRS = ("docs/", "doc/", "documentation/")

TEST_DIRS = ("test/", "tests/")
_TEST_NAME_RE = re.compile(r"\.(test|spec)\.[^/]+$")

CI_DIRS = (".github/workflows/", ".github/actions/", "ci/")

BUILD_FILES = {
    "package.json",
    "package-lock.json",
    "pnpm-lock.yaml",
    "yarn.lock",
    "tsconfig.json",
    "Cargo.toml",
    "go.mod",
    "pyproject.toml",
    "requirements.txt",
    "poetry.lock",
}

# First path segments too generic to serve as a scope on their own
SCOPE_IGNORED_ROOTS = {"src", "app", "lib", "packages", "test", "tests", "docs", ".github"}

_SCOPE_CLEAN_RE = re.compile(r"[^a-zA-Z0-9_-]")


def normalize_path(path: str) -> str:
    """Normalize a file path to forward slashes."""
    return path.replace("\\", "/")


def is_docs_file(path: str) -> bool:
    """Check if a file is documentation."""
    return path in DOCS_FILES or path.endswith(".md") or path.startswith(DOCS_DIRS)


def is_test_file(path: str) -> bool:
    """Check if a file is a test or snapshot."""
    return (
        path.startswith(TEST_DIRS)
        or "__tests__/" in path
        or bool(_TEST_NAME_RE.search(path))
        or path.endswith(".snap")
    )


def is_ci_file(path: str) -> bool:
    """Check if a file belongs to CI configuration."""
    return path.startswith(CI_DIRS)


def is_build_file(path: str) -> bool:
    """Check if a file is a build manifest or lockfile."""
    return path in BUILD_FILES or path.endswith(".gradle")


def infer_type(files: Sequence[str], allowed_types: Optional[Sequence[str]] = None) -> str:
    """Infer the conventional-commit type for a set of changed files.

    Priority: any CI file -> ci, any build file -> build, all docs -> docs,
    all tests -> test, otherwise feat.

    Args:
        files: Changed file paths.
        allowed_types: Types permitted by the project (e.g. commitlint
            ``type-enum``). Order matters for the fallback.

    Returns:
        The inferred type, mapped into ``allowed_types`` when given.
    """
    normalized = [normalize_path(f) for f in files]

    if any(is_ci_file(f) for f in normalized):
        inferred = "ci"
    elif any(is_build_file(f) for f in normalized):
        inferred = "build"
    elif normalized and all(is_docs_file(f) for f in normalized):
        inferred = "docs"
    elif normalized and all(is_test_file(f) for f in normalized):
        inferred = "test"
    else:
        inferred = "feat"

    if allowed_types:
        if inferred in allowed_types:
            return inferred
        if "chore" in allowed_types:
            return "chore"
        return allowed_types[0]

    return inferred


def _scope_candidate(path: str) -> Optional[str]:
    parts = [p for p in path.split("/") if p]
    if not parts:
        return None
    if parts[0] == "packages" and len(parts) >= 2:
        return parts[1]
    if len(parts) >= 2 and parts[0] in SCOPE_IGNORED_ROOTS:
        return parts[1]
    return parts[0]


def infer_scope(files: Sequence[str], allowed_scopes: Optional[Sequence[str]] = None) -> str:
    """Infer a conventional-commit scope from changed file paths.

    A tie between the two most frequent candidates yields no scope.

    Args:
        files: Changed file paths.
        allowed_scopes: Scopes permitted by the project (e.g. commitlint
            ``scope-enum``).

    Returns:
        The scope, or an empty string when there is no clear winner or it
        is not among ``allowed_scopes``.
    """
    counts: Counter[str] = Counter()

    for file_path in files:
        candidate = _scope_candidate(normalize_path(file_path))
        if candidate is None:
            continue
        cleaned = _SCOPE_CLEAN_RE.sub("", candidate).lower()
        if cleaned:
            counts[cleaned] += 1

    ranked = counts.most_common(2)
    if not ranked:
        return ""
    best, best_count = ranked[0]
    if len(ranked) > 1 and ranked[1][1] == best_count:
        return ""

    if allowed_scopes:
        allowed_by_lower: dict[str, str] = {}
        for scope in allowed_scopes:
            allowed_by_lower.setdefault(scope.lower(), scope)
        return allowed_by_lower.get(best, "")

    return best
