"""Hooks: named functions called while resolving remote path variables.

A template such as ``%[getZoneRoot fwapi]%`` calls the ``getZoneRoot`` hook
with the argument ``"fwapi"``. Each hook receives a :class:`HookContext`
followed by its positional string arguments and returns a string.
"""

import logging
import re
import shlex
from collections.abc import Iterator
from dataclasses import dataclass
from typing import Callable, Optional

from .exceptions import UnknownHookError
from .ssh import SshRunner

logger = logging.getLogger(__name__)

HOOK_NAME_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


@dataclass
class HookContext:
    """Information available to every hook.

    The context is shared by hooks running in parallel, so it is not
    modified after construction.
    """

    host: str
    """Destination host of the push"""

    runner: Optional[SshRunner] = None
    """Runner for commands on the destination host"""

    def __post_init__(self):
        if self.runner is None:
            self.runner = SshRunner(self.host)

    def ssh(self, command: str) -> str:
        """Run a command on the destination host and return its output."""
        return self.runner.run(command)


HookFunction = Callable[..., str]


class HookRegistry:
    """Mapping of hook names to hook functions.

    Examples:
        >>> registry = HookRegistry()
        >>> registry.register("echo", lambda context, *args: " ".join(args))
        >>> registry.invoke("echo", ("a", "b"), None)
        'a b'
    """

    def __init__(self, hooks: Optional[dict[str, HookFunction]] = None):
        self._hooks: dict[str, HookFunction] = {}
        for name, func in (hooks or {}).items():
            self.register(name, func)

    def register(self, name: str, func: HookFunction) -> None:
        """Register a hook.

        Raises:
            ValueError: If the name is not a valid identifier or not callable
        """
        if not HOOK_NAME_RE.match(name):
            raise ValueError(f"Invalid hook name '{name}'")
        if not callable(func):
            raise ValueError(f"Hook '{name}' is not callable")
        self._hooks[name] = func

    def __contains__(self, name: object) -> bool:
        return name in self._hooks

    def __iter__(self) -> Iterator[str]:
        return iter(self._hooks)

    def __len__(self) -> int:
        return len(self._hooks)

    def invoke(self, name: str, args: tuple[str, ...], context: object) -> str:
        """Call a hook by name.

        Raises:
            UnknownHookError: If no hook with that name is registered
            TypeError: If the hook does not return a string
        """
        if name not in self._hooks:
            raise UnknownHookError(name)

        logger.debug(f"====> {name} start: args={list(args)}")
        result = self._hooks[name](context, *args)
        if not isinstance(result, str):
            raise TypeError(
                f"Hook '{name}' returned {type(result).__name__}, expected str"
            )
        return result


def get_zone_root(context: HookContext, zone_alias: str) -> str:
    """Get the zone root of the zone whose ``smartdc_role`` tag is ``zone_alias``."""
    lookup = shlex.quote(f"tags.smartdc_role=~^{zone_alias}")
    cmd = f"vmadm get $(vmadm lookup -1 {lookup}) | json zonepath"
    stdout = context.ssh(cmd)
    lines = stdout.strip().splitlines()
    if not lines:
        raise ValueError(f"no zone root found for '{zone_alias}'")

    logger.info(f"  {lines[0]}")
    return lines[0]


def default_registry() -> HookRegistry:
    """Return a registry holding the built-in hooks."""
    return HookRegistry({"getZoneRoot": get_zone_root})
