"""pushit - push files from a git repo to a remote server."""

from .config import Config
from .exceptions import (
    ConfigError,
    CyclicVariableError,
    GitError,
    HookFailureError,
    LocalPathError,
    MultiError,
    NoMappingFoundError,
    PushitError,
    SshError,
    TransferError,
    UnknownHookError,
    UnknownVariableError,
    UnresolvedReferenceError,
)
from .hooks import HookContext, HookRegistry, default_registry
from .mapping import FileMapping, MappingEngine, RepoConfig, TransferItem

__version__ = "1.0.0"

__all__ = [
    "Config",
    "FileMapping",
    "HookContext",
    "HookRegistry",
    "MappingEngine",
    "RepoConfig",
    "TransferItem",
    "default_registry",
    "ConfigError",
    "CyclicVariableError",
    "GitError",
    "HookFailureError",
    "LocalPathError",
    "MultiError",
    "NoMappingFoundError",
    "PushitError",
    "SshError",
    "TransferError",
    "UnknownHookError",
    "UnknownVariableError",
    "UnresolvedReferenceError",
]
