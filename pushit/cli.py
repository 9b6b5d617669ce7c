"""CLI interface for pushit."""

import logging
from pathlib import Path
from typing import Any, Optional

import click

from . import __version__
from .config import Config
from .exceptions import PushitError, flatten_errors
from .git import GitRepository
from .hooks import HookContext, default_registry
from .mapping import MappingEngine
from .output import OutputFormatter
from .scanner import scan_paths
from .transfer import ScpTransfer, run_transfers
from .utils import DEFAULT_MAX_WORKERS

logger = logging.getLogger(__name__)


def report_error(out: OutputFormatter, error: BaseException) -> None:
    """Print every individual error contained in ``error`` on its own line."""
    for err in flatten_errors(error):
        out.error(str(err))


@click.group()
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False),
    envvar="PUSHIT_CONFIG",
    help="Config file holding the default host (default: ~/.pushitrc)",
)
@click.option(
    "--repos",
    "repos_path",
    type=click.Path(dir_okay=False),
    envvar="PUSHIT_REPOS",
    help="Repos file holding path rules and variables (default: ~/.pushit-repos)",
)
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output")
@click.option("--verbose", "-v", is_flag=True, help="Verbose output")
@click.option("--debug", is_flag=True, help="Output debug information")
@click.version_option(version=__version__)
@click.pass_context
def main(
    ctx: Any,
    config_path: Optional[str],
    repos_path: Optional[str],
    quiet: bool,
    verbose: bool,
    debug: bool,
) -> None:
    """pushit - push files from a git repo to a remote server."""
    ctx.ensure_object(dict)
    ctx.obj["config"] = Config(config_path=config_path, repos_path=repos_path)
    ctx.obj["out"] = OutputFormatter(quiet=quiet)

    if debug:
        level = logging.DEBUG
    elif verbose:
        level = logging.INFO
    else:
        level = logging.WARNING

    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%H:%M:%S",
    )
    logging.getLogger("pushit").setLevel(level)


@main.command()
@click.argument("files", nargs=-1, type=click.Path())
@click.option("--all", "-a", "push_all", is_flag=True, help="Push all changed files")
@click.option("--host", "-h", help="Destination host (default: the saved host)")
@click.option(
    "--dry-run",
    is_flag=True,
    help="Print out files to copy, but don't actually scp them",
)
@click.option(
    "--workers",
    "-j",
    type=int,
    default=DEFAULT_MAX_WORKERS,
    help=f"Number of parallel hooks/copies (default: {DEFAULT_MAX_WORKERS})",
)
@click.pass_context
def push(
    ctx: Any,
    files: tuple[str, ...],
    push_all: bool,
    host: Optional[str],
    dry_run: bool,
    workers: int,
) -> None:
    """Push FILES to the remote host.

    The remote destination of every file comes from the path rules
    configured for the current repo in the repos file.

    Examples:
        pushit push lib/foo.js                  # Push one file
        pushit push -a                          # Push all modified files
        pushit push -h root@10.99.99.7 lib      # Push a directory to a host
        pushit push -a --dry-run                # Show the scp commands only
    """
    out: OutputFormatter = ctx.obj["out"]
    config: Config = ctx.obj["config"]

    if not push_all and not files:
        out.error("No files to push: pass FILES or use --all")
        ctx.exit(1)

    if workers < 1:
        out.error("Workers must be at least 1")
        ctx.exit(1)

    try:
        if host is None:
            host = config.get_default_host()

        git = GitRepository()
        repo_id = git.remote_url()
        repo_config = config.get_repo(repo_id)
        top = git.top_level()

        paths: list[Any] = [Path(f) for f in files]
        if push_all:
            paths.extend(git.modified_files())

        to_push = scan_paths(paths, top, max_workers=workers)

        engine = MappingEngine(
            repo_config,
            default_registry(),
            hook_context=HookContext(host=host),
            max_workers=workers,
        )
        items = engine.plan(to_push)

        transfer = ScpTransfer(host, top, output=out, dry_run=dry_run)
        run_transfers(items, transfer, max_workers=workers)

    except KeyboardInterrupt:
        out.warning("Push cancelled by user")
        ctx.exit(130)
    except PushitError as e:
        report_error(out, e)
        ctx.exit(1)

    if not dry_run:
        out.success("Push completed successfully.")


@main.command()
@click.argument("host")
@click.pass_context
def default(ctx: Any, host: str) -> None:
    """Save HOST as the default host.

    Running push without --host will push to the default host.
    """
    out: OutputFormatter = ctx.obj["out"]
    config: Config = ctx.obj["config"]

    try:
        config.save_default_host(host)
    except OSError as e:
        out.error(f"Could not write {config.config_path}: {e}")
        ctx.exit(1)

    out.success(f"Default host set to {host}")


@main.command("show-default")
@click.pass_context
def show_default(ctx: Any) -> None:
    """Print the default host."""
    out: OutputFormatter = ctx.obj["out"]
    config: Config = ctx.obj["config"]

    try:
        click.echo(config.get_default_host())
    except PushitError as e:
        report_error(out, e)
        ctx.exit(1)


@main.command()
@click.pass_context
def repo(ctx: Any) -> None:
    """Print the current repo, for use as a key in the repos file."""
    out: OutputFormatter = ctx.obj["out"]

    try:
        click.echo(GitRepository().remote_url())
    except PushitError as e:
        report_error(out, e)
        ctx.exit(1)


if __name__ == "__main__":
    main()
