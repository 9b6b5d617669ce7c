"""Remote command execution over ssh."""

import logging
import subprocess
from typing import Optional

from .exceptions import SshError
from .utils import format_command

logger = logging.getLogger(__name__)


class SshRunner:
    """Runs shell commands on a remote host with the ``ssh`` client."""

    def __init__(self, host: str, ssh_args: Optional[list[str]] = None):
        """Initialize the runner.

        Args:
            host: ``user@hostname`` to connect to
            ssh_args: Extra options passed to ssh before the host
        """
        self.host = host
        self.ssh_args = list(ssh_args or [])

    def command(self, remote_command: str) -> list[str]:
        """Build the ssh argument list for a remote command."""
        return ["ssh", *self.ssh_args, self.host, remote_command]

    def run(self, remote_command: str) -> str:
        """Run a command on the remote host.

        Args:
            remote_command: Shell command to run remotely

        Returns:
            Standard output of the command

        Raises:
            SshError: If ssh cannot be started or the command fails
        """
        cmd = self.command(remote_command)
        logger.info(f"# {format_command(cmd)}")
        try:
            result = subprocess.run(cmd, capture_output=True, text=True)
        except OSError as e:
            raise SshError(f"Could not run ssh: {e}") from e

        if result.returncode != 0:
            detail = result.stderr.strip() or f"exit code {result.returncode}"
            raise SshError(f"ssh {self.host} failed: {detail}")
        return result.stdout
