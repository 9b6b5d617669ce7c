"""Checks the local paths given to a push."""

import logging
import os
import stat
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import Union

from .exceptions import LocalPathError, MultiError
from .mapping.matcher import FileMapping
from .utils import DEFAULT_MAX_WORKERS

logger = logging.getLogger(__name__)


def stat_path(path: Union[str, Path], top: Path) -> FileMapping:
    """Stat a local path and convert it to a repo-relative FileMapping.

    Args:
        path: Path as given by the user (relative to the cwd, or absolute)
        top: Top-level directory of the working copy

    Returns:
        FileMapping with a forward-slash path relative to ``top``

    Raises:
        LocalPathError: If the path cannot be stat'ed or is outside ``top``
    """
    local = Path(path)
    try:
        st = local.stat()
    except OSError as e:
        raise LocalPathError(str(path), e) from e

    absolute = Path(os.path.abspath(local))
    try:
        relative = absolute.relative_to(top.absolute()).as_posix()
    except ValueError as e:
        raise LocalPathError(str(path), ValueError(f"not inside {top}")) from e

    is_dir = stat.S_ISDIR(st.st_mode)
    logger.debug(f"Adding local path {relative} (directory={is_dir})")
    return FileMapping(local_path=relative, is_directory=is_dir)


def scan_paths(
    paths: Sequence[Union[str, Path]],
    top: Path,
    max_workers: int = DEFAULT_MAX_WORKERS,
) -> list[FileMapping]:
    """Stat every path concurrently.

    All paths are checked before any error is reported.

    Args:
        paths: Paths to push
        top: Top-level directory of the working copy
        max_workers: Number of parallel stat calls

    Returns:
        FileMappings in the same order as ``paths``

    Raises:
        MultiError: With a LocalPathError for every unreadable path
    """
    results: dict[int, FileMapping] = {}
    errors: list[LocalPathError] = []

    with ThreadPoolExecutor(max_workers=max(1, max_workers)) as executor:
        futures = {
            executor.submit(stat_path, path, top): index
            for index, path in enumerate(paths)
        }
        for future in as_completed(futures):
            try:
                results[futures[future]] = future.result()
            except LocalPathError as e:
                errors.append(e)

    if errors:
        raise MultiError(sorted(errors, key=lambda e: e.path))
    return [results[index] for index in range(len(paths))]
