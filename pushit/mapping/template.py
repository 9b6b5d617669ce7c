"""Scanning of ``%name%`` references in remote path templates."""

import re
from dataclasses import dataclass
from typing import Optional

# A reference is anything between two percent signs that contains no percent
REFERENCE_RE = re.compile(r"%([^%]+)%")


@dataclass(frozen=True)
class HookReference:
    """A ``[hookName arg1 arg2 ...]`` reference found inside a template."""

    name: str
    """Hook name (first token)"""

    args: tuple[str, ...] = ()
    """Positional string arguments"""

    @property
    def signature(self) -> str:
        """Canonical ``[name arg ...]`` form, used as the value table key."""
        return format_hook_signature(self.name, self.args)


def find_references(text: Optional[str]) -> list[str]:
    """Return the names of all variables referenced in a string.

    Args:
        text: String to scan (``None`` is treated as empty)

    Returns:
        Referenced names in left-to-right order, duplicates preserved

    Examples:
        >>> find_references("%a%%b%")
        ['a', 'b']
        >>> find_references("/usr/%[getZoneRoot fwapi]%/root")
        ['[getZoneRoot fwapi]']
    """
    if not text:
        return []
    return REFERENCE_RE.findall(text)


def parse_hook_reference(name: str) -> Optional[HookReference]:
    """Parse a reference name as a hook reference.

    Args:
        name: Reference name as returned by :func:`find_references`

    Returns:
        HookReference if ``name`` is bracketed and has a hook name, else None
    """
    if not (name.startswith("[") and name.endswith("]")):
        return None

    tokens = name[1:-1].split()
    if not tokens:
        return None
    return HookReference(name=tokens[0], args=tuple(tokens[1:]))


def format_hook_signature(name: str, args: tuple[str, ...]) -> str:
    """Format a hook name and its arguments as ``[name arg1 arg2]``."""
    return "[" + " ".join((name, *args)) + "]"


def canonical_name(name: str) -> str:
    """Return the value table key for a reference name.

    Hook references are normalised to their signature so that
    ``%[getZoneRoot  fwapi]%`` and ``%[getZoneRoot fwapi]%`` share one value.
    """
    hook = parse_hook_reference(name)
    if hook is not None:
        return hook.signature
    return name
