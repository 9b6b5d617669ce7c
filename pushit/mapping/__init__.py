"""Variable resolution and path mapping for pushit."""

from .dispatcher import HookDispatcher, ResolvedValues
from .engine import MappingEngine, TransferItem
from .matcher import FileMapping, match, match_all
from .modes import SelfReference
from .resolver import HookCall, PathRule, VariableResolver
from .rules import ROOT_PATTERN, PathMapping, RepoConfig
from .substitution import compose_remote_path, substitute
from .template import HookReference, find_references, parse_hook_reference

__all__ = [
    "MappingEngine",
    "TransferItem",
    "FileMapping",
    "HookCall",
    "HookDispatcher",
    "HookReference",
    "PathMapping",
    "PathRule",
    "RepoConfig",
    "ResolvedValues",
    "ROOT_PATTERN",
    "SelfReference",
    "VariableResolver",
    "compose_remote_path",
    "find_references",
    "match",
    "match_all",
    "parse_hook_reference",
    "substitute",
]
