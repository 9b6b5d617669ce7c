"""Repository configuration: path rules and variables."""

import posixpath
from dataclasses import dataclass, field
from typing import Any, Union

from .modes import SelfReference

ROOT_PATTERN = "."
"""Local pattern that matches every path in the repository"""


def normalize_local_pattern(pattern: str) -> str:
    """Normalize a local pattern to a repo-relative posix path.

    An empty pattern (or ``./``) becomes the root sentinel ``.``.

    Examples:
        >>> normalize_local_pattern("src/fw/")
        'src/fw'
        >>> normalize_local_pattern("")
        '.'
    """
    pattern = pattern.strip().replace("\\", "/").lstrip("/")
    if not pattern:
        return ROOT_PATTERN
    return posixpath.normpath(pattern)


@dataclass
class PathMapping:
    """A single ``local=remote`` rule as declared in the repos file."""

    local: str
    """Local path pattern, relative to the repository top level"""

    remote: str
    """Remote path template, possibly containing %variables%"""

    def __post_init__(self):
        self.local = normalize_local_pattern(self.local)
        self.remote = self.remote.strip()

    @property
    def is_root(self) -> bool:
        """True if this rule matches the whole repository."""
        return self.local == ROOT_PATTERN

    @classmethod
    def parse_literal(cls, literal: str) -> "PathMapping":
        """Parse a ``local=remote`` rule string.

        Only the first ``=`` separates the two parts, so remote templates may
        contain ``=`` themselves.

        Args:
            literal: Rule string, e.g. ``"lib=/opt/app/lib"``

        Returns:
            PathMapping instance

        Raises:
            ValueError: If the string has no ``=`` or an empty remote part

        Examples:
            >>> PathMapping.parse_literal("lib=/opt/app/lib")
            PathMapping(local='lib', remote='/opt/app/lib')
        """
        local, sep, remote = literal.partition("=")
        if not sep:
            raise ValueError(f"Path '{literal}' is not in 'local=remote' format")
        if not remote.strip():
            raise ValueError(f"Path '{literal}' has an empty remote path")
        return cls(local=local, remote=remote)

    @classmethod
    def from_config(cls, value: Union[str, dict]) -> "PathMapping":
        """Create a PathMapping from a repos file entry (string or object)."""
        if isinstance(value, str):
            return cls.parse_literal(value)
        if isinstance(value, dict):
            if "remote" not in value:
                raise ValueError(f"Path entry {value!r} is missing 'remote'")
            return cls(local=str(value.get("local", "")), remote=str(value["remote"]))
        raise ValueError(f"Invalid path entry: {value!r}")

    def to_literal(self) -> str:
        """Format this rule back into ``local=remote`` form."""
        local = "" if self.is_root else self.local
        return f"{local}={self.remote}"


@dataclass
class RepoConfig:
    """Path rules and variables configured for one repository.

    Examples:
        >>> repo = RepoConfig.from_dict(
        ...     {"paths": ["lib=/opt/app/lib"], "variables": {}}
        ... )
        >>> repo.paths[0].remote
        '/opt/app/lib'
    """

    paths: list[PathMapping] = field(default_factory=list)
    """Ordered rules; the first matching rule wins"""

    variables: dict[str, str] = field(default_factory=dict)
    """Variable name -> raw value (may reference other variables or hooks)"""

    self_reference: SelfReference = SelfReference.VALUE
    """What variables without further references resolve to"""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RepoConfig":
        """Create a RepoConfig from a repos file entry.

        Args:
            data: Dictionary with ``paths``, optional ``variables`` and
                optional ``selfReference``

        Returns:
            RepoConfig instance

        Raises:
            ValueError: If the entry is malformed
        """
        if not isinstance(data, dict):
            raise ValueError(f"Repo entry must be an object, got {type(data).__name__}")

        raw_paths = data.get("paths", [])
        if isinstance(raw_paths, (str, dict)):
            raw_paths = [raw_paths]
        if not isinstance(raw_paths, list):
            raise ValueError("'paths' must be a list")

        variables = data.get("variables") or {}
        if not isinstance(variables, dict):
            raise ValueError("'variables' must be an object")

        self_reference = SelfReference.from_string(
            str(data.get("selfReference", SelfReference.VALUE.value))
        )

        return cls(
            paths=[PathMapping.from_config(p) for p in raw_paths],
            variables={str(k): str(v) for k, v in variables.items()},
            self_reference=self_reference,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to a repos file entry."""
        result: dict[str, Any] = {
            "paths": [p.to_literal() for p in self.paths],
            "variables": dict(self.variables),
        }
        if self.self_reference != SelfReference.VALUE:
            result["selfReference"] = self.self_reference.value
        return result
