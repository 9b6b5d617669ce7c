"""Configuration files for pushit.

Two JSON files are used:

* ``~/.pushitrc`` holds the default destination host::

    {"defaultHost": "user@hostname"}

* ``~/.pushit-repos`` maps a repository id (the git remote URL) to its path
  rules and variables::

    {
      "git@github.com:example/app.git": {
        "paths": ["lib=%root%/opt/app/lib", "=/var/tmp/app"],
        "variables": {"root": "%[getZoneRoot app]%/root"}
      }
    }
"""

import json
import logging
from pathlib import Path
from typing import Any, Optional, Union

from .exceptions import ConfigError
from .mapping.rules import RepoConfig
from .utils import DEFAULT_CONFIG_PATH, DEFAULT_REPOS_PATH

logger = logging.getLogger(__name__)


class Config:
    """Access to the pushit config and repos files."""

    def __init__(
        self,
        config_path: Optional[Union[str, Path]] = None,
        repos_path: Optional[Union[str, Path]] = None,
    ):
        """Initialize config.

        Args:
            config_path: Path of the default-host file (default ~/.pushitrc)
            repos_path: Path of the repos file (default ~/.pushit-repos)
        """
        self.config_path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH
        self.repos_path = Path(repos_path) if repos_path else DEFAULT_REPOS_PATH

    def _read_json(self, path: Path, missing_hint: str) -> Any:
        logger.debug(f"Loading JSON from {path}")
        try:
            with open(path, encoding="utf-8") as f:
                return json.load(f)
        except FileNotFoundError as e:
            raise ConfigError(f'File "{path}" does not exist. {missing_hint}') from e
        except json.JSONDecodeError as e:
            raise ConfigError(f'File "{path}" is not valid JSON: {e}') from e
        except OSError as e:
            raise ConfigError(f'Cannot read "{path}": {e}') from e

    def load_config(self) -> dict[str, Any]:
        """Load the config file.

        Raises:
            ConfigError: If the file is missing or invalid
        """
        data = self._read_json(
            self.config_path,
            'Create it with "pushit default username@hostname".',
        )
        if not isinstance(data, dict):
            raise ConfigError(f'Config file "{self.config_path}" must hold an object')
        logger.debug(f"config: {data}")
        return data

    def get_default_host(self) -> str:
        """Get the default destination host.

        Raises:
            ConfigError: If the file is missing or has no ``defaultHost``
        """
        data = self.load_config()
        host = data.get("defaultHost")
        if not host:
            raise ConfigError(
                'Config file is missing the "defaultHost" property: '
                'set it with "pushit default myhostname"'
            )
        return str(host)

    def save_default_host(self, host: str) -> None:
        """Save the default destination host.

        Args:
            host: ``user@hostname`` to push to when no host is given
        """
        data = {"defaultHost": host}
        logger.debug(f"Writing config to {self.config_path}: {data}")
        self.config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.config_path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)

    def load_repos(self) -> dict[str, Any]:
        """Load the raw repos file.

        Raises:
            ConfigError: If the file is missing or invalid
        """
        data = self._read_json(self.repos_path, "")
        if not isinstance(data, dict):
            raise ConfigError(f'Repo file "{self.repos_path}" must hold an object')
        return data

    def get_repo(self, repo_id: str) -> RepoConfig:
        """Get the path rules and variables for a repository.

        Args:
            repo_id: Repository identifier (git remote URL)

        Returns:
            RepoConfig for the repository

        Raises:
            ConfigError: If the repository is unknown or its entry is invalid
        """
        repos = self.load_repos()
        if repo_id not in repos:
            raise ConfigError(
                f'Repo "{repo_id}" not known: add it to the repos file: '
                f"{self.repos_path}"
            )

        try:
            repo = RepoConfig.from_dict(repos[repo_id])
        except ValueError as e:
            raise ConfigError(f'Invalid entry for repo "{repo_id}": {e}') from e

        logger.debug(
            f"repo {repo_id}: {len(repo.paths)} path(s), "
            f"{len(repo.variables)} variable(s)"
        )
        return repo
