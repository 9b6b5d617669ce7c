"""Mapping engine: turns local paths into remote destinations."""

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from ..exceptions import MultiError, PushitError, UnresolvedReferenceError
from ..utils import DEFAULT_MAX_WORKERS
from .dispatcher import HookDispatcher, HookInvoker, ResolvedValues
from .matcher import FileMapping, match_all
from .resolver import HookCall, PathRule, VariableResolver
from .rules import RepoConfig
from .substitution import compose_remote_path, substitute

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TransferItem:
    """A single copy to perform on the remote host."""

    source: str
    """Repo-relative local path"""

    destination: str
    """Remote destination path"""

    recursive: bool = False
    """Whether the source is a directory"""


class MappingEngine:
    """Resolves the remote destination of every file in a push.

    The work is split into phases. Each phase attempts every independent
    unit of work and raises a MultiError with all failures; a failed phase
    stops the run before the next one starts.

    1. resolve the variable/hook closure of every path rule
    2. match each file to the first rule whose local pattern prefixes it
    3. run the hooks needed by the matched rules, once per signature
    4. substitute values into each rule's template and compose destinations

    Examples:
        >>> repo = RepoConfig.from_dict({"paths": ["lib=/opt/app/lib"]})
        >>> engine = MappingEngine(repo, HookRegistry())
        >>> [item.destination for item in engine.plan([FileMapping("lib/x.js")])]
        ['/opt/app/lib/x.js']
    """

    def __init__(
        self,
        repo: RepoConfig,
        registry: HookInvoker,
        hook_context: Any = None,
        max_workers: int = DEFAULT_MAX_WORKERS,
    ):
        """Initialize the mapping engine.

        Args:
            repo: Path rules and variables of the current repository
            registry: Hook registry (must support ``in`` and ``invoke``)
            hook_context: Passed to every hook invocation
            max_workers: Maximum number of hooks running at once
        """
        self.repo = repo
        self.registry = registry
        self.resolver = VariableResolver(
            repo.variables, hooks=registry, self_reference=repo.self_reference
        )
        self.dispatcher = HookDispatcher(registry, hook_context, max_workers)
        self.resolved = ResolvedValues()

    def resolve_rules(self) -> list[PathRule]:
        """Resolve every path rule of the repository.

        Raises:
            MultiError: With every unknown variable or hook in any rule
        """
        logger.debug("==> resolve_rules start")
        return self.resolver.resolve_all(self.repo.paths)

    def run_hooks(self, rules: Sequence[PathRule]) -> ResolvedValues:
        """Seed plain variable values and run the hooks ``rules`` need.

        Raises:
            MultiError: With a HookFailureError for every failed hook
        """
        logger.debug("==> run_hooks start")
        calls: list[HookCall] = []
        for rule in rules:
            self.resolved.update(rule.values)
            calls.extend(rule.required_hooks)

        return self.dispatcher.run_hooks(calls, self.resolved)

    def expand(self, files: Sequence[FileMapping]) -> list[TransferItem]:
        """Substitute values and compose a destination for each matched file.

        Raises:
            MultiError: With an UnresolvedReferenceError for every file whose
                remote path still contains a ``%``
        """
        logger.debug("==> expand start")
        items: list[TransferItem] = []
        errors: list[PushitError] = []

        for file in files:
            rule = file.matched_rule
            if rule is None:
                raise ValueError(f"File '{file.local_path}' has not been matched")

            try:
                remote_root = substitute(
                    rule.remote_template, self.resolved, file.local_path
                )
            except UnresolvedReferenceError as e:
                errors.append(e)
                continue

            destination = compose_remote_path(
                file.local_path, file.is_directory, rule, remote_root
            )
            items.append(
                TransferItem(
                    source=file.local_path,
                    destination=destination,
                    recursive=file.is_directory,
                )
            )

        if errors:
            raise MultiError(errors)
        return items

    def plan(self, files: Sequence[FileMapping]) -> list[TransferItem]:
        """Compute the transfer for every file.

        Args:
            files: Repo-relative paths to push

        Returns:
            One TransferItem per file, in input order

        Raises:
            MultiError: From the first phase that failed
        """
        rules = self.resolve_rules()

        logger.debug("==> match start")
        match_all(files, rules)

        matched: list[PathRule] = []
        for file in files:
            if file.matched_rule is not None and file.matched_rule not in matched:
                matched.append(file.matched_rule)

        self.run_hooks(matched)
        items = self.expand(files)

        for item in items:
            logger.info(f"{item.source} -> {item.destination}")
        return items

