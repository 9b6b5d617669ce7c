"""Concurrent execution of the hook calls needed by a run."""

import logging
from collections.abc import Iterable, Iterator, Mapping
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Any, Optional, Protocol

from ..exceptions import HookFailureError, MultiError
from ..utils import DEFAULT_MAX_WORKERS
from .resolver import HookCall
from .template import canonical_name

logger = logging.getLogger(__name__)


class HookInvoker(Protocol):
    """Anything that can run a hook by name."""

    def invoke(self, name: str, args: tuple[str, ...], context: Any) -> str: ...


class ResolvedValues(Mapping[str, str]):
    """Value table shared by every file in a run.

    Keys are plain variable names or hook signatures. Values are only ever
    added; an existing key is never overwritten.
    """

    def __init__(self, initial: Optional[Mapping[str, str]] = None):
        self._values: dict[str, str] = {}
        if initial:
            self.update(initial)

    def __getitem__(self, name: str) -> str:
        return self._values[canonical_name(name)]

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and canonical_name(name) in self._values

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"ResolvedValues({self._values!r})"

    def set(self, name: str, value: str) -> bool:
        """Record a value unless the name already has one.

        Returns:
            True if the value was recorded
        """
        key = canonical_name(name)
        if key in self._values:
            return False
        self._values[key] = value
        return True

    def update(self, values: Mapping[str, str]) -> None:
        """Record several values (existing keys are kept)."""
        for name, value in values.items():
            self.set(name, value)

    def record_hook(self, calls: Iterable[HookCall], value: str) -> None:
        """Record a hook result under its signature and its bound variables.

        A bound variable that already has a value of its own (for instance a
        configured variable whose raw value embeds the hook) keeps it.
        """
        for call in calls:
            self.set(call.signature, value)
            self.set(call.bound_variable, value)


class HookDispatcher:
    """Runs each unique hook call once per run.

    Examples:
        >>> dispatcher = HookDispatcher(registry, context)
        >>> resolved = ResolvedValues()
        >>> dispatcher.run_hooks(rule.required_hooks, resolved)
        >>> resolved["[getZoneRoot fwapi]"]
        '/zones/abc123'
    """

    def __init__(
        self,
        registry: HookInvoker,
        context: Any = None,
        max_workers: int = DEFAULT_MAX_WORKERS,
    ):
        """Initialize the dispatcher.

        Args:
            registry: Hook registry used to invoke hooks by name
            context: Passed to every hook (e.g. the destination host)
            max_workers: Maximum number of hooks running at once
        """
        self.registry = registry
        self.context = context
        self.max_workers = max(1, max_workers)

    def run_hooks(
        self, calls: Iterable[HookCall], resolved: ResolvedValues
    ) -> ResolvedValues:
        """Invoke every unique hook call and record the results.

        Calls sharing ``(hook_name, args)`` run once. Signatures that already
        have a value in ``resolved`` are not run again. All calls are waited
        for, even when some of them fail.

        Args:
            calls: Required hook calls, possibly with duplicates
            resolved: Value table to populate

        Returns:
            The populated value table

        Raises:
            MultiError: With a HookFailureError for every failed call
        """
        unique: dict[tuple[str, tuple[str, ...]], list[HookCall]] = {}
        for call in calls:
            unique.setdefault(call.key, []).append(call)

        pending = {
            key: group
            for key, group in unique.items()
            if group[0].signature not in resolved
        }
        for key, group in unique.items():
            if key not in pending:
                logger.debug(f"hook {group[0].signature}: already ran, reusing")
                resolved.record_hook(group, resolved[group[0].signature])

        if not pending:
            return resolved

        logger.debug(f"Running {len(pending)} hook(s) with {self.max_workers} workers")
        errors: list[HookFailureError] = []

        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            futures = {
                executor.submit(
                    self.registry.invoke, group[0].hook_name, group[0].args, self.context
                ): group
                for group in pending.values()
            }

            # Results are recorded here on the joining thread only
            for future in as_completed(futures):
                group = futures[future]
                call = group[0]
                try:
                    value = future.result()
                except Exception as e:
                    logger.debug(f"hook {call.signature} failed: {e}")
                    errors.append(HookFailureError(call.hook_name, call.args, e))
                    continue

                logger.debug(f"hook {call.signature} returned '{value}'")
                resolved.record_hook(group, value)

        if errors:
            raise MultiError(errors)
        return resolved
