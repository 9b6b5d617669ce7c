"""Custom exceptions for pushit."""

from collections.abc import Iterator, Sequence


class PushitError(Exception):
    """Base exception for all pushit errors."""


class ConfigError(PushitError):
    """Raised when a configuration file is missing or malformed."""


class GitError(PushitError):
    """Raised when querying the local git repository fails."""


class SshError(PushitError):
    """Raised when a remote ssh command fails."""


class LocalPathError(PushitError):
    """Raised when a local path to push cannot be read."""

    def __init__(self, path: str, cause: Exception):
        self.path = path
        self.cause = cause
        super().__init__(f'Cannot read "{path}": {cause}')


class UnknownVariableError(PushitError):
    """Raised when a template references a variable that is not configured."""

    kind = "variable"

    def __init__(self, name: str):
        self.name = name
        super().__init__(f'Unknown {self.kind} "{name}"')


class UnknownHookError(UnknownVariableError):
    """Raised when a hook reference names a hook that is not registered."""

    kind = "hook"


class CyclicVariableError(PushitError):
    """Raised when variables reference each other in a loop."""

    def __init__(self, chain: Sequence[str]):
        self.chain = list(chain)
        super().__init__(f"Cyclic variable reference: {' -> '.join(self.chain)}")


class NoMappingFoundError(PushitError):
    """Raised when a file matches none of the repo's path rules."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f'No config file paths matched for "{path}"')


class HookFailureError(PushitError):
    """Raised when a hook invocation fails."""

    def __init__(self, hook_name: str, args: Sequence[str], cause: Exception):
        self.hook_name = hook_name
        self.hook_args = tuple(args)
        self.cause = cause
        super().__init__(f'Function "{hook_name}" failed: {cause}')


class UnresolvedReferenceError(PushitError):
    """Raised when a substituted remote path still contains a ``%`` marker."""

    def __init__(self, path: str, result: str):
        self.path = path
        self.result = result
        super().__init__(f'Found %: "{path}" => "{result}"')


class TransferError(PushitError):
    """Raised when copying a file to the remote host fails."""

    def __init__(self, path: str, cause: Exception):
        self.path = path
        self.cause = cause
        super().__init__(f'Transfer of "{path}" failed: {cause}')


class MultiError(PushitError):
    """Aggregate of several independent errors from one phase.

    Examples:
        >>> err = MultiError([UnknownVariableError("a"), UnknownVariableError("b")])
        >>> str(err)
        'Unknown variable "a" (and 1 more error)'
    """

    def __init__(self, errors: Sequence[Exception]):
        if not errors:
            raise ValueError("MultiError requires at least one error")
        self.errors = list(errors)
        message = str(self.errors[0])
        extra = len(self.errors) - 1
        if extra:
            message += f" (and {extra} more error{'s' if extra > 1 else ''})"
        super().__init__(message)


def flatten_errors(error: BaseException) -> Iterator[BaseException]:
    """Yield the individual errors contained in ``error``.

    Nested MultiErrors are expanded recursively; any other exception is
    yielded as-is.
    """
    if isinstance(error, MultiError):
        for inner in error.errors:
            yield from flatten_errors(inner)
    else:
        yield error
