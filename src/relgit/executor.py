"""Run the git binary and classify the outcome.

Two families of entry points:

- ``run_git`` / ``run_git_async`` never raise on a non-zero exit code and
  return a :class:`SubprocessResult`; callers decide what is an error.
- ``check_git`` / ``check_git_async`` return trimmed stdout on exit code 0 and
  raise :class:`CommandFailure` otherwise.

``probe_git`` discards both streams and only reports whether git exited 0.

Nothing here queues, retries, or times out. Two async calls against the same
context run concurrently unless the caller awaits them in sequence.
"""

from __future__ import annotations

import asyncio
import logging
import os
import subprocess
from typing import TYPE_CHECKING

from relgit.models import StdioMode
from relgit.subprocess_result import SubprocessResult
from relgit.tracing import get_tracer, git_command_attributes, git_span_name

if TYPE_CHECKING:
    from collections.abc import Sequence

    from relgit.models import InvocationContext

logger = logging.getLogger(__name__)

RELGIT_GIT_ENV = "RELGIT_GIT"
DEFAULT_GIT_BINARY = "git"

# Reported when the binary cannot be launched at all (shell convention).
LAUNCH_FAILURE_RETURNCODE = 127

# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class RelgitError(Exception):
    """Base exception for all relgit errors."""


class CommandFailure(RelgitError):
    """git exited with a non-zero status."""

    def __init__(self, command: Sequence[str], exit_code: int, stderr: str) -> None:
        self.command = tuple(command)
        self.exit_code = exit_code
        self.stderr = stderr
        detail = f": {stderr}" if stderr else ""
        super().__init__(f"git {' '.join(self.command)} exited with {exit_code}{detail}")


# ---------------------------------------------------------------------------
# Pure helpers
# ---------------------------------------------------------------------------


def resolve_git_binary() -> str:
    """Return the git executable, honouring ``RELGIT_GIT``."""
    return os.environ.get(RELGIT_GIT_ENV) or DEFAULT_GIT_BINARY


def _trim(text: str | None) -> str:
    if not text:
        return ""
    return text.rstrip("\r\n")


def _build_env(context: InvocationContext) -> dict[str, str] | None:
    if not context.env:
        return None
    return {**os.environ, **context.env}


def _stream_target(stdio: StdioMode) -> int | None:
    if stdio is StdioMode.PIPE:
        return subprocess.PIPE
    if stdio is StdioMode.IGNORE:
        return subprocess.DEVNULL
    return None


def _raise_for_result(result: SubprocessResult) -> str:
    if not result.ok:
        raise CommandFailure(result.args, result.returncode, result.stderr)
    return result.stdout


# ---------------------------------------------------------------------------
# Synchronous
# ---------------------------------------------------------------------------


def run_git(args: Sequence[str], context: InvocationContext) -> SubprocessResult:
    """Execute ``git <args>`` in ``context.cwd`` and block until it exits."""
    argv = tuple(args)
    target = _stream_target(context.stdio)
    tracer = get_tracer()
    with tracer.start_as_current_span(git_span_name(argv)) as span:
        span.set_attributes(git_command_attributes(argv, str(context.cwd)))
        logger.debug("git %s (cwd=%s)", " ".join(argv), context.cwd)
        try:
            completed = subprocess.run(
                [resolve_git_binary(), *argv],
                cwd=context.cwd,
                env=_build_env(context),
                stdin=subprocess.DEVNULL,
                stdout=target,
                stderr=target,
                text=True,
                encoding="utf-8",
                errors="replace",
            )
        except OSError as exc:
            logger.debug("Failed to launch git: %s", exc)
            result = SubprocessResult(LAUNCH_FAILURE_RETURNCODE, "", str(exc), argv)
        else:
            result = SubprocessResult(
                returncode=completed.returncode,
                stdout=_trim(completed.stdout),
                stderr=_trim(completed.stderr),
                args=argv,
            )
        span.set_attributes(git_command_attributes(argv, str(context.cwd), result.returncode))
        return result


def check_git(args: Sequence[str], context: InvocationContext) -> str:
    """Execute ``git <args>`` and return trimmed stdout.

    Raises:
        CommandFailure: If git exits non-zero or cannot be launched.
    """
    return _raise_for_result(run_git(args, context))


def probe_git(args: Sequence[str], context: InvocationContext) -> bool:
    """Return whether ``git <args>`` exits 0, discarding all output."""
    return run_git(args, context.with_stdio(StdioMode.IGNORE)).ok


# ---------------------------------------------------------------------------
# Asynchronous
# ---------------------------------------------------------------------------


async def run_git_async(args: Sequence[str], context: InvocationContext) -> SubprocessResult:
    """Execute ``git <args>`` without blocking the event loop."""
    argv = tuple(args)
    target = _stream_target(context.stdio)
    tracer = get_tracer()
    with tracer.start_as_current_span(git_span_name(argv)) as span:
        span.set_attributes(git_command_attributes(argv, str(context.cwd)))
        logger.debug("git %s (cwd=%s, async)", " ".join(argv), context.cwd)
        try:
            process = await asyncio.create_subprocess_exec(
                resolve_git_binary(),
                *argv,
                cwd=context.cwd,
                env=_build_env(context),
                stdin=subprocess.DEVNULL,
                stdout=target,
                stderr=target,
            )
            stdout, stderr = await process.communicate()
        except OSError as exc:
            logger.debug("Failed to launch git: %s", exc)
            result = SubprocessResult(LAUNCH_FAILURE_RETURNCODE, "", str(exc), argv)
        else:
            result = SubprocessResult(
                returncode=process.returncode if process.returncode is not None else -1,
                stdout=_trim(stdout.decode("utf-8", errors="replace") if stdout else ""),
                stderr=_trim(stderr.decode("utf-8", errors="replace") if stderr else ""),
                args=argv,
            )
        span.set_attributes(git_command_attributes(argv, str(context.cwd), result.returncode))
        return result


async def check_git_async(args: Sequence[str], context: InvocationContext) -> str:
    """Async counterpart of :func:`check_git`.

    Raises:
        CommandFailure: If git exits non-zero or cannot be launched.
    """
    return _raise_for_result(await run_git_async(args, context))
