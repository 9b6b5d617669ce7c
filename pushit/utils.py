"""Utility functions and constants for pushit."""

import shlex
from collections.abc import Sequence
from pathlib import Path

# =============================================================================
# Constants
# =============================================================================

# Default location of the file holding the default host
DEFAULT_CONFIG_PATH: Path = Path.home() / ".pushitrc"

# Default location of the per-repository path rules and variables
DEFAULT_REPOS_PATH: Path = Path.home() / ".pushit-repos"

# Parallelism for stat, hook and transfer phases
DEFAULT_MAX_WORKERS: int = 8


# =============================================================================
# Command formatting
# =============================================================================


def format_command(cmd: Sequence[str]) -> str:
    """Format an argument list as a shell command line for display.

    Args:
        cmd: Command and arguments

    Returns:
        Shell-quoted command string

    Examples:
        >>> format_command(["scp", "/src/a b.js", "host:/opt"])
        "scp '/src/a b.js' host:/opt"
    """
    return shlex.join(list(cmd))
