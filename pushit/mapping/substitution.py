"""Substitution of resolved values into remote path templates."""

import logging
import posixpath
from collections.abc import Mapping

from ..exceptions import UnresolvedReferenceError
from .resolver import PathRule
from .template import find_references

logger = logging.getLogger(__name__)


def substitute(template: str, resolved: Mapping[str, str], path: str = "") -> str:
    """Replace every ``%name%`` in a template with its resolved value.

    Values may themselves contain references, so substitution is repeated
    until nothing changes. The number of passes is bounded by the number of
    resolved values.

    Args:
        template: Template to expand
        resolved: Value table (variable name or hook signature -> value)
        path: Local path the template is being expanded for (error context)

    Returns:
        The fully substituted string

    Raises:
        UnresolvedReferenceError: If a ``%`` remains after substitution

    Examples:
        >>> substitute("%root%/lib", {"root": "/opt/%app%", "app": "web"})
        '/opt/web/lib'
    """
    result = template
    for _ in range(len(resolved) + 1):
        names = list(dict.fromkeys(find_references(result)))
        known = [name for name in names if name in resolved]
        if not known:
            break
        for name in known:
            result = result.replace(f"%{name}%", resolved[name])

    if "%" in result:
        raise UnresolvedReferenceError(path or template, result)
    return result


def compose_remote_path(
    local_path: str, is_directory: bool, rule: PathRule, remote_root: str
) -> str:
    """Build the destination for a local path under its rule's remote root.

    The matched local prefix is stripped (unless the rule is the repository
    root) and the remainder appended to ``remote_root``. Directories are
    copied recursively, so their destination is the parent of that path.

    Args:
        local_path: Repo-relative path of the file or directory
        is_directory: Whether ``local_path`` is a directory
        rule: Rule that matched ``local_path``
        remote_root: The rule's remote template after substitution

    Returns:
        Remote destination path

    Examples:
        >>> rule = PathRule("lib", "/opt/app/lib")
        >>> compose_remote_path("lib/x.js", False, rule, "/opt/app/lib")
        '/opt/app/lib/x.js'
        >>> compose_remote_path("lib", True, rule, "/opt/app/lib")
        '/opt/app'
        >>> compose_remote_path("lib", True, PathRule("lib", "app"), "app")
        '.'
    """
    trimmed = local_path
    if not rule.is_root:
        trimmed = local_path[len(rule.local_pattern) :]
        if trimmed.startswith("/"):
            trimmed = trimmed[1:]

    remote = posixpath.join(remote_root, trimmed) if trimmed else remote_root
    if is_directory:
        stripped = remote.rstrip("/") or "/"
        parent = posixpath.dirname(stripped)
        if not parent:
            # Relative remote with no parent: the login directory
            parent = "."
        remote = parent

    logger.debug(f"  '{local_path}' -> remote '{remote}' (trimmed '{trimmed}')")
    return remote
