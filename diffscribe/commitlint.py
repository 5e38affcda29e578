"""Commitlint rule discovery.

Reads the project's commitlint configuration so that the allowed types,
scopes and length limits can be passed to the model as hints. The rules
are never enforced on the generated output.
"""

import json
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import BaseModel

from diffscribe.log import get_logger

logger = get_logger(__name__)

# Checked in order; the first file that parses wins
CONFIG_FILES = [
    ".commitlintrc",
    ".commitlintrc.json",
    ".commitlintrc.yaml",
    ".commitlintrc.yml",
    ".commitlintrc.js",
    ".commitlintrc.cjs",
    "commitlint.config.js",
    "commitlint.config.cjs",
]

CONVENTIONAL_TYPES = [
    "feat",
    "fix",
    "docs",
    "style",
    "refactor",
    "perf",
    "test",
    "build",
    "ci",
    "chore",
    "revert",
]


class CommitlintRules(BaseModel):
    """Subset of commitlint rules relevant to message generation.

    Attributes:
        types: Allowed commit types (``type-enum``), in project order.
        scopes: Allowed scopes (``scope-enum``), in project order.
        max_header_length: ``header-max-length`` limit.
        body_max_line_length: ``body-max-line-length`` limit.
    """

    types: Optional[list[str]] = None
    scopes: Optional[list[str]] = None
    max_header_length: Optional[int] = None
    body_max_line_length: Optional[int] = None


def _rule_value(rules: dict, name: str) -> Any:
    """Return the value slot of a ``[level, applicable, value]`` rule."""
    rule = rules.get(name)
    if isinstance(rule, list) and len(rule) >= 3 and rule[2]:
        return rule[2]
    return None


def extract_rules(config: Any) -> CommitlintRules:
    """Pull the relevant rules out of a parsed commitlint config.

    Args:
        config: The parsed configuration object.

    Returns:
        CommitlintRules (all fields None when nothing applies).
    """
    if not isinstance(config, dict):
        return CommitlintRules()

    data: dict[str, Any] = {}

    extends = config.get("extends")
    if extends:
        extends_list = extends if isinstance(extends, list) else [extends]
        if any("conventional" in str(e) for e in extends_list):
            data["types"] = list(CONVENTIONAL_TYPES)

    rules = config.get("rules")
    if isinstance(rules, dict):
        type_enum = _rule_value(rules, "type-enum")
        if isinstance(type_enum, list):
            data["types"] = [str(t) for t in type_enum]

        scope_enum = _rule_value(rules, "scope-enum")
        if isinstance(scope_enum, list):
            data["scopes"] = [str(s) for s in scope_enum]

        header_max = _rule_value(rules, "header-max-length")
        if isinstance(header_max, int):
            data["max_header_length"] = header_max

        body_max = _rule_value(rules, "body-max-line-length")
        if isinstance(body_max, int):
            data["body_max_line_length"] = body_max

    return CommitlintRules(**data)


def parse_config_file(config_path: Path) -> Optional[CommitlintRules]:
    """Parse one commitlint config file.

    JSON and YAML files are supported; ``.commitlintrc`` may be either.
    JavaScript configs cannot be evaluated and yield None.

    Args:
        config_path: Path to the config file.

    Returns:
        Parsed rules, or None if the file could not be interpreted.
    """
    name = config_path.name
    if name.endswith((".js", ".cjs")):
        logger.debug("Skipping JavaScript commitlint config %s", config_path)
        return None

    content = config_path.read_text(encoding="utf-8")

    if name.endswith(".json") or name == ".commitlintrc":
        try:
            return extract_rules(json.loads(content))
        except json.JSONDecodeError:
            if name.endswith(".json"):
                raise

    return extract_rules(yaml.safe_load(content))


def load_commitlint_rules(repo_root: Path) -> Optional[CommitlintRules]:
    """Load commitlint rules from a repository.

    Args:
        repo_root: The root directory of the git repository.

    Returns:
        Rules from the first readable config file, the ``commitlint`` key of
        package.json, or None if the project has no commitlint config.
    """
    for config_file in CONFIG_FILES:
        config_path = repo_root / config_file
        if not config_path.exists():
            continue
        try:
            rules = parse_config_file(config_path)
        except (OSError, ValueError, yaml.YAMLError) as e:
            logger.warning("Failed to parse %s: %s", config_file, e)
            continue
        if rules is not None:
            return rules

    package_json = repo_root / "package.json"
    if package_json.exists():
        try:
            data = json.loads(package_json.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning("Failed to parse package.json commitlint config: %s", e)
            return None
        if isinstance(data, dict) and data.get("commitlint"):
            return extract_rules(data["commitlint"])

    return None


def format_rules_for_prompt(rules: Optional[CommitlintRules]) -> str:
    """Render rules as bullet lines for the prompt ("" when there are none)."""
    if rules is None:
        return ""

    lines = []
    if rules.types:
        lines.append(f"- Allowed types: {', '.join(rules.types)}")
    if rules.scopes:
        lines.append(f"- Allowed scopes: {', '.join(rules.scopes)}")
    if rules.max_header_length:
        lines.append(f"- Maximum header length: {rules.max_header_length} characters")
    if rules.body_max_line_length:
        lines.append(f"- Maximum body line length: {rules.body_max_line_length} characters")
    return "\n".join(lines)
