"""CLI entry point for relgit.

Provides ``relgit status``, ``relgit changed``, ``relgit tag``,
``relgit push``, and ``relgit worker`` subcommands.

Follows Function Core / Imperative Shell:
- Pure functions: format_status, format_changed, build_context
- Click commands: main, status, changed, tag, push, worker
"""

from __future__ import annotations

import asyncio
import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING

import click

from relgit.executor import RelgitError
from relgit.git import GitClient
from relgit.models import InvocationContext

if TYPE_CHECKING:
    from relgit.models import AheadBehind, RepoStatus

# ---------------------------------------------------------------------------
# Exit codes
# ---------------------------------------------------------------------------

EXIT_SUCCESS = 0
EXIT_FAILURE = 1
EXIT_INFRASTRUCTURE_ERROR = 3


# ---------------------------------------------------------------------------
# Pure functions
# ---------------------------------------------------------------------------


def build_context(cwd: str) -> InvocationContext:
    """Build an invocation context rooted at the absolute form of *cwd*."""
    return InvocationContext(cwd=Path(cwd).resolve())


def format_status(status: RepoStatus, counts: AheadBehind | None = None, remote: str = "") -> str:
    """Format a RepoStatus for human-readable terminal output."""
    branch = "(detached HEAD)" if status.detached else status.branch
    lines = [
        f"Branch: {branch}",
        f"Commit: {status.short_sha} ({status.sha})",
        f"Last tag: {status.last_tag or 'none'}",
        f"Root: {status.workspace_root}",
    ]
    if counts is not None:
        lines.append(f"Upstream: {remote} behind={counts.behind} ahead={counts.ahead}")
    return "\n".join(lines)


def format_changed(paths: list[str]) -> str:
    return "\n".join(paths)


def _fail(exc: RelgitError) -> None:
    click.echo(f"Error: {exc}", err=True)
    sys.exit(EXIT_FAILURE)


# ---------------------------------------------------------------------------
# Click commands
# ---------------------------------------------------------------------------

_cwd_option = click.option(
    "--cwd",
    default=".",
    show_default=True,
    type=click.Path(exists=True, file_okay=False),
    help="Repository working directory.",
)


@click.group()
@click.version_option(package_name="relgit")
@click.option("--verbose", is_flag=True, help="Log every git invocation.")
def main(verbose: bool) -> None:
    """relgit — git operations for release workflows."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")


@main.command()
@_cwd_option
@click.option("--remote", default=None, help="Also refresh remotes and compare with this remote.")
@click.option("--json", "output_json", is_flag=True, help="Output RepoStatus as JSON.")
def status(cwd: str, remote: str | None, output_json: bool) -> None:
    """Show branch, commit, last tag, and optionally upstream counts."""
    client = GitClient()
    context = build_context(cwd)
    if not client.is_initialized(context):
        click.echo(f"Not a git repository: {context.cwd}", err=True)
        sys.exit(EXIT_FAILURE)

    try:
        repo_status = client.status(context)
        counts = None
        if remote:
            client.update_remotes(context)
            counts = client.ahead_behind(remote, context)
    except RelgitError as exc:
        _fail(exc)
        return

    if output_json:
        click.echo(repo_status.model_dump_json(indent=2))
    else:
        click.echo(format_status(repo_status, counts, remote or ""))


@main.command()
@_cwd_option
@click.option("--since", "committish", required=True, help="Ref to diff against.")
@click.argument("location", default=".")
def changed(cwd: str, committish: str, location: str) -> None:
    """List files changed since a ref, optionally under LOCATION."""
    context = build_context(cwd)
    try:
        paths = GitClient().diff_since_in(committish, location, context)
    except RelgitError as exc:
        _fail(exc)
        return
    if paths:
        click.echo(format_changed(paths))


@main.command()
@_cwd_option
@click.argument("tag_name")
@click.option("--push", "push_after", is_flag=True, help="Push the branch and the tag afterwards.")
@click.option("--remote", default="origin", show_default=True, help="Remote to push to.")
def tag(cwd: str, tag_name: str, push_after: bool, remote: str) -> None:
    """Create an annotated tag at HEAD."""
    client = GitClient()
    context = build_context(cwd)

    async def _run() -> None:
        await client.add_tag(tag_name, context)
        if push_after:
            await client.push_with_tags(remote, [tag_name], context)

    try:
        asyncio.run(_run())
    except RelgitError as exc:
        _fail(exc)
        return
    click.echo(f"Tagged {tag_name}" + (f" and pushed to {remote}" if push_after else ""))


@main.command()
@_cwd_option
@click.option("--remote", default="origin", show_default=True, help="Remote to push to.")
@click.argument("tags", nargs=-1)
def push(cwd: str, remote: str, tags: tuple[str, ...]) -> None:
    """Push the current branch, then TAGS."""
    context = build_context(cwd)
    try:
        asyncio.run(GitClient().push_with_tags(remote, list(tags), context))
    except RelgitError as exc:
        _fail(exc)
        return
    click.echo(f"Pushed to {remote}")


@main.command()
@click.option(
    "--temporal-address",
    default=None,
    help="Temporal server address (default: $RELGIT_TEMPORAL_ADDRESS or localhost:7233).",
)
def worker(temporal_address: str | None) -> None:
    """Start the Temporal activity worker."""
    from relgit.worker import run_worker

    try:
        asyncio.run(run_worker(address=temporal_address))
    except (OSError, RuntimeError) as exc:
        click.echo(f"Worker failed: {exc}", err=True)
        sys.exit(EXIT_INFRASTRUCTURE_ERROR)
