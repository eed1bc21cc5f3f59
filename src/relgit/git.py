"""Typed git operations for release workflows.

``GitClient`` is the public façade. Every method takes an explicit
:class:`~relgit.models.InvocationContext`; nothing depends on the process's
current directory and nothing is cached between calls.

Each operation has one of two failure modes, fixed per operation:

- value operations use ``check_git``/``check_git_async`` and let
  :class:`~relgit.executor.CommandFailure` propagate;
- predicate operations (``is_initialized``, ``has_commit``, ``has_tags``) read
  the exit status of a non-raising call, so a failing git process is a valid
  ``False`` answer rather than an error.

Observation happens at the boundary of every public method through the
``_observed`` decorator; operation bodies contain no logging.
"""

from __future__ import annotations

import functools
import inspect
from typing import TYPE_CHECKING, Any

from relgit import commands
from relgit.executor import check_git, check_git_async, probe_git, run_git
from relgit.models import InvocationContext, RepoStatus
from relgit.observer import GitObserver, LoggingObserver
from relgit.parsing import parse_ahead_behind, parse_flag, parse_path_list
from relgit.tempfiles import remove_temp_file, write_temp_file

if TYPE_CHECKING:
    import os
    from collections.abc import Callable, Iterable
    from pathlib import Path

    from relgit.models import AheadBehind

DETACHED_HEAD = "HEAD"

NO_TAGS_WARNING = "ENOTAGS"


# ---------------------------------------------------------------------------
# Observation
# ---------------------------------------------------------------------------


def _detail(args: tuple[Any, ...]) -> object:
    values = tuple(a for a in args if not isinstance(a, InvocationContext))
    if not values:
        return None
    if len(values) == 1:
        return values[0]
    return values


def _observed(method: Callable[..., Any]) -> Callable[..., Any]:
    """Report call, result, and error events for a ``GitClient`` method."""
    name = method.__name__

    if inspect.iscoroutinefunction(method):

        @functools.wraps(method)
        async def async_wrapper(self: GitClient, *args: Any, **kwargs: Any) -> Any:
            self.observer.on_call(name, _detail(args))
            try:
                result = await method(self, *args, **kwargs)
            except Exception as exc:
                self.observer.on_error(name, exc)
                raise
            self.observer.on_result(name, result)
            return result

        return async_wrapper

    @functools.wraps(method)
    def wrapper(self: GitClient, *args: Any, **kwargs: Any) -> Any:
        self.observer.on_call(name, _detail(args))
        try:
            result = method(self, *args, **kwargs)
        except Exception as exc:
            self.observer.on_error(name, exc)
            raise
        self.observer.on_result(name, result)
        return result

    return wrapper


# ---------------------------------------------------------------------------
# Façade
# ---------------------------------------------------------------------------


class GitClient:
    """Release-oriented git operations.

    Holds no repository state; a single instance can serve any number of
    repositories and concurrent callers. Callers must serialize operations that
    mutate the same working tree.
    """

    def __init__(
        self,
        observer: GitObserver | None = None,
        write_temp: Callable[[str, str], Path] = write_temp_file,
    ) -> None:
        self.observer: GitObserver = observer or LoggingObserver()
        self.write_temp = write_temp

    # --- Branch / HEAD ------------------------------------------------------

    @_observed
    def current_branch(self, context: InvocationContext) -> str:
        """Current branch name, or ``"HEAD"`` when detached."""
        return check_git(commands.CURRENT_BRANCH, context)

    @_observed
    def is_detached_head(self, context: InvocationContext) -> bool:
        return self.current_branch(context) == DETACHED_HEAD

    # --- Predicates (failure is a negative answer) --------------------------

    @_observed
    def is_initialized(self, context: InvocationContext) -> bool:
        """Whether ``context.cwd`` is inside a git repository."""
        return probe_git(commands.REPO_PROBE, context)

    @_observed
    def has_commit(self, context: InvocationContext) -> bool:
        """Whether the current branch has any history."""
        return probe_git(commands.HISTORY_PROBE, context)

    @_observed
    def has_tags(self, context: InvocationContext) -> bool:
        """Whether any tag exists. A failing listing warns and answers ``False``."""
        result = run_git(commands.LIST_TAGS, context)
        if not result.ok:
            self.observer.on_warning(NO_TAGS_WARNING, "No git tags were reachable from this branch!")
            return False
        return parse_flag(result.stdout)

    # --- Mutations ----------------------------------------------------------

    @_observed
    async def add_files(
        self,
        files: Iterable[str | os.PathLike[str]],
        context: InvocationContext,
    ) -> str:
        return await check_git_async(commands.add_args(files, context.cwd), context)

    @_observed
    async def commit(self, message: str, context: InvocationContext) -> str:
        """Commit what is staged, skipping hooks.

        A multi-line message goes through a temp file, removed once git exits.
        """
        args, message_path = commands.commit_args(message, self.write_temp)
        try:
            return await check_git_async(args, context)
        finally:
            if message_path is not None:
                remove_temp_file(message_path)

    @_observed
    async def add_tag(self, tag: str, context: InvocationContext) -> str:
        return await check_git_async(commands.tag_args(tag), context)

    @_observed
    async def push_with_tags(
        self,
        remote: str,
        tags: Iterable[str],
        context: InvocationContext,
    ) -> None:
        """Push the current branch, then the given tags.

        The two pushes are strictly sequential; if the branch push fails the
        tags are not pushed. An empty tag list skips the second push.
        """
        tag_list = list(tags)
        branch = await check_git_async(commands.CURRENT_BRANCH, context)
        await check_git_async(commands.push_branch_args(remote, branch), context)
        if tag_list:
            await check_git_async(commands.push_tags_args(remote, tag_list), context)

    @_observed
    async def checkout_changes(self, file_glob: str, context: InvocationContext) -> str:
        """Restore working-tree files matching *file_glob* to their committed state."""
        return await check_git_async(commands.checkout_args(file_glob), context)

    @_observed
    def init(self, context: InvocationContext) -> None:
        check_git(commands.INIT, context)

    # --- Single-shot queries ------------------------------------------------

    @_observed
    def get_last_tagged_commit(self, context: InvocationContext) -> str:
        return check_git(commands.LAST_TAGGED_COMMIT, context)

    @_observed
    def get_first_commit(self, context: InvocationContext) -> str:
        return check_git(commands.FIRST_COMMIT, context)

    @_observed
    def get_last_tag(self, context: InvocationContext) -> str:
        return check_git(commands.LAST_TAG, context)

    @_observed
    def get_current_sha(self, context: InvocationContext) -> str:
        return check_git(commands.CURRENT_SHA, context)

    @_observed
    def get_short_sha(self, context: InvocationContext) -> str:
        return check_git(commands.SHORT_SHA, context)

    @_observed
    def get_workspace_root(self, context: InvocationContext) -> str:
        return check_git(commands.WORKSPACE_ROOT, context)

    @_observed
    def diff_since_in(
        self,
        committish: str,
        location: str | os.PathLike[str],
        context: InvocationContext,
    ) -> list[str]:
        """Files changed since *committish*, restricted to *location* unless it is ``cwd``."""
        output = check_git(commands.diff_args(committish, location, context.cwd), context)
        return parse_path_list(output)

    # --- Upstream -----------------------------------------------------------

    @_observed
    def ahead_behind(self, remote: str, context: InvocationContext) -> AheadBehind:
        """Left-right counts between ``<remote>/<branch>`` and the current branch.

        Uses the remote-tracking refs as they are; see ``is_behind_upstream``
        for the variant that refreshes them first.
        """
        branch = self.current_branch(context)
        output = check_git(commands.left_right_count_args(remote, branch), context)
        return parse_ahead_behind(output)

    @_observed
    def update_remotes(self, context: InvocationContext) -> None:
        """Fetch every configured remote (``git remote update``)."""
        check_git(commands.REMOTE_UPDATE, context)

    @_observed
    def is_behind_upstream(self, remote: str, context: InvocationContext) -> bool:
        """Refresh every remote, then report whether the upstream has commits we lack."""
        self.update_remotes(context)
        return self.ahead_behind(remote, context).behind > 0

    # --- Snapshot -----------------------------------------------------------

    @_observed
    def status(self, context: InvocationContext) -> RepoStatus:
        """Collect branch, SHAs, last tag, and workspace root in one snapshot.

        ``last_tag`` is ``None`` when no tag exists or none is reachable from HEAD.
        """
        branch = self.current_branch(context)
        last_tag = None
        if self.has_tags(context):
            described = run_git(commands.LAST_TAG, context)
            if described.ok:
                last_tag = described.stdout
        return RepoStatus(
            branch=branch,
            detached=branch == DETACHED_HEAD,
            sha=self.get_current_sha(context),
            short_sha=self.get_short_sha(context),
            last_tag=last_tag,
            workspace_root=self.get_workspace_root(context),
        )
