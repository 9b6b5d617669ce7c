"""Copying files to the remote host with scp."""

import logging
import subprocess
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import Optional, Protocol, Union

from .exceptions import MultiError, TransferError
from .mapping.engine import TransferItem
from .output import OutputFormatter
from .utils import DEFAULT_MAX_WORKERS, format_command

logger = logging.getLogger(__name__)


class Transfer(Protocol):
    """Anything that can copy one TransferItem to the remote host."""

    def copy(self, item: TransferItem) -> None: ...


class ScpTransfer:
    """Copies files to a host with ``scp``.

    Examples:
        >>> transfer = ScpTransfer("root@host", Path("/src/app"), dry_run=True)
        >>> transfer.command(TransferItem("lib", "/opt/app", recursive=True))
        ['scp', '-r', '/src/app/lib', 'root@host:/opt/app']
    """

    def __init__(
        self,
        host: str,
        root: Union[str, Path],
        output: Optional[OutputFormatter] = None,
        dry_run: bool = False,
    ):
        """Initialize the transfer.

        Args:
            host: ``user@hostname`` to copy to
            root: Top-level directory that TransferItem sources are relative to
            output: Output formatter used to print dry-run commands
            dry_run: Print the commands instead of running them
        """
        self.host = host
        self.root = Path(root)
        self.output = output or OutputFormatter()
        self.dry_run = dry_run

    def command(self, item: TransferItem) -> list[str]:
        """Build the scp argument list for an item."""
        cmd = ["scp"]
        if item.recursive:
            cmd.append("-r")
        cmd.append(f"{self.root.as_posix()}/{item.source}")
        cmd.append(f"{self.host}:{item.destination}")
        return cmd

    def copy(self, item: TransferItem) -> None:
        """Copy a single item.

        Raises:
            TransferError: If scp cannot be started or exits non-zero
        """
        cmd = self.command(item)
        if self.dry_run:
            self.output.print(f"# {format_command(cmd)}")
            return

        logger.info(f"# {format_command(cmd)}")
        try:
            result = subprocess.run(cmd, capture_output=True, text=True)
        except OSError as e:
            raise TransferError(item.source, e) from e

        if result.returncode != 0:
            detail = result.stderr.strip() or f"exit code {result.returncode}"
            raise TransferError(item.source, RuntimeError(f"scp failed: {detail}"))


def run_transfers(
    items: Sequence[TransferItem],
    transfer: Transfer,
    max_workers: int = DEFAULT_MAX_WORKERS,
) -> int:
    """Copy every item in parallel.

    Every copy is attempted even if some of them fail.

    Args:
        items: Items to copy
        transfer: Transfer used for each copy
        max_workers: Number of parallel copies

    Returns:
        Number of items copied

    Raises:
        MultiError: With a TransferError for every failed copy
    """
    logger.debug(f"Copying {len(items)} item(s) with {max_workers} workers")
    errors: list[TransferError] = []
    copied = 0

    with ThreadPoolExecutor(max_workers=max(1, max_workers)) as executor:
        futures = {executor.submit(transfer.copy, item): item for item in items}
        for future in as_completed(futures):
            item = futures[future]
            try:
                future.result()
                copied += 1
            except TransferError as e:
                errors.append(e)
            except Exception as e:
                errors.append(TransferError(item.source, e))

    if errors:
        raise MultiError(sorted(errors, key=lambda e: e.path))
    return copied
