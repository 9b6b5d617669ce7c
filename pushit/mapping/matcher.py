"""Matching of repo-relative file paths against path rules."""

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Optional

from ..exceptions import MultiError, NoMappingFoundError
from .resolver import PathRule

logger = logging.getLogger(__name__)


@dataclass
class FileMapping:
    """A local path to push and the rule that maps it."""

    local_path: str
    """Path relative to the repository top level (forward slashes)"""

    is_directory: bool = False
    """Whether the path is a directory (copied recursively)"""

    matched_rule: Optional[PathRule] = None
    """Rule assigned by the matcher"""


def rule_matches(rule: PathRule, path: str) -> bool:
    """Check whether a rule's local pattern is a prefix of ``path``."""
    if rule.is_root:
        return True
    return path.startswith(rule.local_pattern)


def match(path: str, rules: Sequence[PathRule]) -> PathRule:
    """Find the first rule whose local pattern is a prefix of ``path``.

    Rules are tried in declaration order, so more specific rules should be
    declared before catch-alls.

    Args:
        path: Repo-relative file path
        rules: Resolved rules in declaration order

    Returns:
        The first matching rule

    Raises:
        NoMappingFoundError: If no rule matches

    Examples:
        >>> rules = [PathRule("src/fw", "/usr/fw"), PathRule(".", "/")]
        >>> match("src/fw/lib/x.js", rules).remote_template
        '/usr/fw'
        >>> match("README.md", rules).remote_template
        '/'
    """
    for rule in rules:
        if rule_matches(rule, path):
            logger.debug(f"  MATCHED: '{path}' -> local pattern '{rule.local_pattern}'")
            return rule
        logger.debug(f"  tried:   '{path}' -> local pattern '{rule.local_pattern}'")

    raise NoMappingFoundError(path)


def match_all(files: Sequence[FileMapping], rules: Sequence[PathRule]) -> None:
    """Assign a matching rule to every file.

    Args:
        files: Files to match; ``matched_rule`` is set in place
        rules: Resolved rules in declaration order

    Raises:
        MultiError: With a NoMappingFoundError for every unmatched file
    """
    errors: list[NoMappingFoundError] = []
    for file in files:
        try:
            file.matched_rule = match(file.local_path, rules)
        except NoMappingFoundError as e:
            errors.append(e)

    if errors:
        raise MultiError(errors)
