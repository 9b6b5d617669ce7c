"""Variable graph resolution for remote path templates.

For every path rule the resolver walks the graph of variable references
reachable from its remote template and works out which plain variables and
which hook calls are needed before the template can be substituted.
"""

import logging
from collections import deque
from collections.abc import Container, Iterable, Mapping
from dataclasses import dataclass, field
from typing import Optional

from ..exceptions import (
    CyclicVariableError,
    MultiError,
    PushitError,
    UnknownHookError,
    UnknownVariableError,
)
from .modes import SelfReference
from .rules import ROOT_PATTERN, PathMapping
from .template import (
    canonical_name,
    find_references,
    format_hook_signature,
    parse_hook_reference,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HookCall:
    """A hook invocation required to resolve a template."""

    hook_name: str
    """Registered hook name"""

    args: tuple[str, ...]
    """Positional string arguments"""

    bound_variable: str = field(compare=False)
    """Name of the variable that referenced the hook (or the signature itself)"""

    @property
    def key(self) -> tuple[str, tuple[str, ...]]:
        """Deduplication identity: ``(hook_name, args)``."""
        return (self.hook_name, self.args)

    @property
    def signature(self) -> str:
        """Canonical ``[name arg ...]`` form of this call."""
        return format_hook_signature(self.hook_name, self.args)


@dataclass(frozen=True)
class PathRule:
    """A path mapping together with its resolution closure."""

    local_pattern: str
    remote_template: str
    referenced_vars: frozenset[str] = frozenset()
    required_hooks: tuple[HookCall, ...] = ()
    values: Mapping[str, str] = field(default_factory=dict, compare=False)
    """Plain variable name -> value to substitute"""

    @property
    def is_root(self) -> bool:
        """True if the rule matches the whole repository."""
        return self.local_pattern == ROOT_PATTERN


class VariableResolver:
    """Computes the variables and hook calls each path rule depends on.

    Examples:
        >>> resolver = VariableResolver({"base": "/opt/%app%", "app": "web"})
        >>> rule = resolver.resolve(PathMapping("lib", "%base%/lib"))
        >>> sorted(rule.referenced_vars)
        ['app', 'base']
    """

    def __init__(
        self,
        variables: Mapping[str, str],
        hooks: Optional[Container[str]] = None,
        self_reference: SelfReference = SelfReference.VALUE,
    ):
        """Initialize the resolver.

        Args:
            variables: Repo variable table (name -> raw value)
            hooks: Registered hook names
            self_reference: Value given to variables without further references
        """
        self.variables = variables
        self.hooks = hooks if hooks is not None else ()
        self.self_reference = self_reference

    def resolve(self, mapping: PathMapping) -> PathRule:
        """Resolve the closure of a single path rule.

        Args:
            mapping: Rule to resolve

        Returns:
            PathRule with its referenced variables and required hooks

        Raises:
            MultiError: With every unknown variable, unknown hook and cycle found
        """
        rule, errors = self._resolve(mapping)
        if errors:
            raise MultiError(errors)
        return rule

    def resolve_all(self, mappings: Iterable[PathMapping]) -> list[PathRule]:
        """Resolve every rule, collecting errors across all of them.

        Raises:
            MultiError: If any rule failed to resolve
        """
        rules: list[PathRule] = []
        errors: list[PushitError] = []
        for mapping in mappings:
            rule, rule_errors = self._resolve(mapping)
            rules.append(rule)
            errors.extend(rule_errors)

        if errors:
            raise MultiError(errors)
        return rules

    def _resolve(self, mapping: PathMapping) -> tuple[PathRule, list[PushitError]]:
        errors: list[PushitError] = []
        seen: set[str] = set()
        hooks: list[HookCall] = []
        values: dict[str, str] = {}
        edges: dict[str, list[str]] = {}

        logger.debug(
            f"path [{mapping.local}={mapping.remote}]: resolving references"
        )

        # (name, name of the variable whose value referenced it)
        queue: deque[tuple[str, Optional[str]]] = deque(
            (name, None) for name in find_references(mapping.remote)
        )

        while queue:
            name, origin = queue.popleft()
            key = canonical_name(name)
            if key in seen:
                continue
            seen.add(key)

            hook = parse_hook_reference(name)
            if hook is not None:
                if hook.name not in self.hooks:
                    logger.debug(f"  hook '{hook.name}' not found")
                    errors.append(UnknownHookError(hook.name))
                    continue

                call = HookCall(
                    hook_name=hook.name,
                    args=hook.args,
                    bound_variable=origin if origin is not None else hook.signature,
                )
                logger.debug(
                    f"  hook '{call.hook_name}' args={list(call.args)} "
                    f"bound to '{call.bound_variable}'"
                )
                # Later discoveries are deeper dependencies, so they go first
                hooks.insert(0, call)
                continue

            if name not in self.variables:
                logger.debug(f"  variable '{name}' not found")
                errors.append(UnknownVariableError(name))
                continue

            raw = self.variables[name]
            refs = find_references(raw)
            edges[name] = [canonical_name(ref) for ref in refs]
            if refs or self.self_reference == SelfReference.VALUE:
                values[name] = raw
            else:
                values[name] = name
            logger.debug(f"  variable '{name}' found, references={refs}")
            queue.extend((ref, name) for ref in refs)

        for cycle in _find_cycles(edges):
            errors.append(CyclicVariableError(cycle))

        rule = PathRule(
            local_pattern=mapping.local,
            remote_template=mapping.remote,
            referenced_vars=frozenset(values),
            required_hooks=tuple(hooks),
            values=values,
        )
        return rule, errors


def _find_cycles(edges: Mapping[str, list[str]]) -> list[list[str]]:
    """Return one chain per cycle in the variable reference graph.

    Each chain starts and ends with the same name, e.g. ``["a", "b", "a"]``.
    """
    cycles: list[list[str]] = []
    done: set[str] = set()

    for start in edges:
        if start in done:
            continue
        path: list[str] = [start]
        on_path = {start}
        iterators = [iter(edges[start])]

        while iterators:
            child = next(iterators[-1], None)
            if child is None:
                iterators.pop()
                finished = path.pop()
                on_path.discard(finished)
                done.add(finished)
                continue
            if child in on_path:
                cycles.append(path[path.index(child) :] + [child])
                continue
            if child in done or child not in edges:
                continue
            path.append(child)
            on_path.add(child)
            iterators.append(iter(edges[child]))

    return cycles
