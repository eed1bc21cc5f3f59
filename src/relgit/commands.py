"""Argument vectors for git.

Pure functions: no subprocess, no logging. The only side effect is the
temp file written by ``commit_args`` for multi-line messages, and that goes
through the caller-supplied writer.
"""

from __future__ import annotations

import os
from pathlib import PurePath
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable
    from pathlib import Path

COMMIT_MESSAGE_FILENAME = "relgit-commit.txt"

_LINE_TERMINATORS = ("\n", "\r")


# ---------------------------------------------------------------------------
# Paths
# ---------------------------------------------------------------------------


def relative_posix(cwd: str | os.PathLike[str], location: str | os.PathLike[str]) -> str:
    """Return *location* relative to *cwd* with forward slashes.

    Relative locations are resolved against *cwd* first. The same-directory
    case yields ``""``.
    """
    base = os.path.normpath(os.fspath(cwd))
    target = os.path.normpath(os.path.join(base, os.fspath(location)))
    relative = os.path.relpath(target, base)
    if relative == os.curdir:
        return ""
    return PurePath(relative).as_posix()


def is_multiline(message: str) -> bool:
    return any(terminator in message for terminator in _LINE_TERMINATORS)


# ---------------------------------------------------------------------------
# Builders
# ---------------------------------------------------------------------------


def add_args(files: Iterable[str | os.PathLike[str]], cwd: str | os.PathLike[str]) -> list[str]:
    """``git add -- <paths>``; the working directory itself is staged as ``.``."""
    paths = [relative_posix(cwd, f) or "." for f in files]
    return ["add", "--", *paths]


def commit_args(
    message: str, write_temp: Callable[[str, str], Path]
) -> tuple[list[str], Path | None]:
    """``git commit --no-verify`` with the message inline or via ``-F <file>``.

    Multi-line messages are never passed inline; they are written with
    *write_temp* and referenced by path. Returns the argv and the written
    path (``None`` for an inline message), which the caller removes.
    """
    if not is_multiline(message):
        return ["commit", "--no-verify", "-m", message], None
    path = write_temp(message, COMMIT_MESSAGE_FILENAME)
    return ["commit", "--no-verify", "-F", os.fspath(path)], path


def tag_args(tag: str) -> list[str]:
    """Annotated tag whose message is the tag name."""
    return ["tag", tag, "-m", tag]


def diff_args(
    committish: str,
    location: str | os.PathLike[str],
    cwd: str | os.PathLike[str],
) -> list[str]:
    """``git diff --name-only <committish> [-- <location>]``.

    The path restriction is dropped when *location* is *cwd* itself.
    """
    args = ["diff", "--name-only", committish]
    relative = relative_posix(cwd, location)
    if relative:
        args.extend(["--", relative])
    return args


def checkout_args(file_glob: str) -> list[str]:
    return ["checkout", "--", file_glob]


def push_branch_args(remote: str, branch: str) -> list[str]:
    return ["push", remote, branch]


def push_tags_args(remote: str, tags: Iterable[str]) -> list[str]:
    return ["push", remote, *tags]


def left_right_count_args(remote: str, branch: str) -> list[str]:
    return ["rev-list", "--left-right", "--count", f"{remote}/{branch}...{branch}"]


# ---------------------------------------------------------------------------
# Fixed queries
# ---------------------------------------------------------------------------

CURRENT_BRANCH = ["rev-parse", "--abbrev-ref", "HEAD"]
REPO_PROBE = ["rev-parse"]
HISTORY_PROBE = ["log", "-1"]
LIST_TAGS = ["tag"]
LAST_TAGGED_COMMIT = ["rev-list", "--tags", "--max-count=1"]
FIRST_COMMIT = ["rev-list", "--max-parents=0", "HEAD"]
LAST_TAG = ["describe", "--tags", "--abbrev=0"]
CURRENT_SHA = ["rev-parse", "HEAD"]
SHORT_SHA = ["rev-parse", "--short", "HEAD"]
WORKSPACE_ROOT = ["rev-parse", "--show-toplevel"]
INIT = ["init"]
REMOTE_UPDATE = ["remote", "update"]
