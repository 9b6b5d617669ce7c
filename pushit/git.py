"""Queries against the local git repository."""

import logging
import subprocess
from pathlib import Path
from typing import Optional, Union

from .exceptions import GitError

logger = logging.getLogger(__name__)


class GitRepository:
    """Reads the repository id, top level and modified files via git."""

    def __init__(self, cwd: Optional[Union[str, Path]] = None):
        """Initialize repository access.

        Args:
            cwd: Directory inside the working copy (defaults to the current one)
        """
        self.cwd = Path(cwd) if cwd else Path.cwd()

    def _run(self, args: list[str]) -> str:
        cmd = ["git", *args]
        logger.debug(f"Running {' '.join(cmd)} in {self.cwd}")
        try:
            result = subprocess.run(
                cmd,
                cwd=self.cwd,
                capture_output=True,
                text=True,
                check=True,
            )
        except subprocess.CalledProcessError as e:
            detail = e.stderr.strip() if e.stderr else f"exit code {e.returncode}"
            raise GitError(f"{' '.join(cmd)}: {detail}") from e
        except FileNotFoundError as e:
            raise GitError("git command not found") from e
        return result.stdout

    def remote_url(self) -> str:
        """Return the URL of the first configured remote.

        This is the id used to look the repository up in the repos file.

        Raises:
            GitError: If there is no remote
        """
        stdout = self._run(["remote", "-v"])
        if not stdout.strip():
            raise GitError("git remote -v: no remote git repo")

        fields = stdout.splitlines()[0].split()
        if len(fields) < 2:
            raise GitError("git remote -v: could not determine remote git repo")

        logger.debug(f"remote git repo={fields[1]}")
        return fields[1]

    def top_level(self) -> Path:
        """Return the top-level directory of the working copy."""
        top = Path(self._run(["rev-parse", "--show-toplevel"]).splitlines()[0])
        logger.debug(f"git top-level directory={top}")
        return top

    def modified_files(self) -> list[Path]:
        """Return absolute paths of files modified in the working copy.

        Only entries with status ``M`` are included; new, deleted and renamed
        files are left out.

        Raises:
            GitError: If nothing has changed
        """
        stdout = self._run(["status", "--porcelain"])
        if not stdout.strip():
            raise GitError("No changed files in git repo")

        top = self.top_level()
        files: list[Path] = []
        for line in stdout.splitlines():
            fields = line.strip().split(None, 1)
            if len(fields) != 2:
                continue
            status, name = fields
            logger.debug(f"git file: type={status}, file={name}")
            if status != "M":
                continue
            files.append(top / name)

        return files
