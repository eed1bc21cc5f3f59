"""Shared test fixtures for relgit."""

from __future__ import annotations

import subprocess
from typing import TYPE_CHECKING

import pytest

from relgit.models import InvocationContext

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path

    GitRunner = Callable[..., str]


def _git(*args: str, cwd: Path) -> str:
    result = subprocess.run(
        ["git", *args],
        cwd=cwd,
        check=True,
        capture_output=True,
        text=True,
    )
    return result.stdout.strip()


def _configure_identity(repo: Path) -> None:
    _git("config", "user.email", "test@relgit.test", cwd=repo)
    _git("config", "user.name", "Relgit Test", cwd=repo)
    _git("config", "commit.gpgsign", "false", cwd=repo)
    _git("config", "tag.gpgsign", "false", cwd=repo)


class RecordingObserver:
    """GitObserver that keeps every event for assertions."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, object]] = []
        self.results: list[tuple[str, object]] = []
        self.errors: list[tuple[str, Exception]] = []
        self.warnings: list[tuple[str, str]] = []

    def on_call(self, operation: str, detail: object = None) -> None:
        self.calls.append((operation, detail))

    def on_result(self, operation: str, result: object) -> None:
        self.results.append((operation, result))

    def on_error(self, operation: str, error: Exception) -> None:
        self.errors.append((operation, error))

    def on_warning(self, code: str, message: str) -> None:
        self.warnings.append((code, message))


@pytest.fixture
def git() -> GitRunner:
    """Run a git command for test setup, returning stripped stdout."""
    return _git


@pytest.fixture
def observer() -> RecordingObserver:
    return RecordingObserver()


@pytest.fixture
def git_repo(tmp_path: Path) -> Path:
    """Create a temporary git repository with one initial commit.

    The repo has a committed ``README.md`` on the ``main`` branch.

    Returns the path to the repository root.
    """
    repo = tmp_path / "repo"
    repo.mkdir()
    _git("init", "-b", "main", cwd=repo)
    _configure_identity(repo)

    (repo / "README.md").write_text("# Test repo\n")
    _git("add", "README.md", cwd=repo)
    _git("commit", "-m", "Initial commit", cwd=repo)

    return repo


@pytest.fixture
def context(git_repo: Path) -> InvocationContext:
    return InvocationContext(cwd=git_repo)


@pytest.fixture
def empty_repo(tmp_path: Path) -> Path:
    """An initialized repository with no commits."""
    repo = tmp_path / "empty"
    repo.mkdir()
    _git("init", "-b", "main", cwd=repo)
    _configure_identity(repo)
    return repo


@pytest.fixture
def not_a_repo(tmp_path_factory: pytest.TempPathFactory) -> Path:
    """A directory outside any git repository."""
    return tmp_path_factory.mktemp("plain")


@pytest.fixture
def outside_context(not_a_repo: Path) -> InvocationContext:
    """Context for *not_a_repo* that stops git from searching parent directories."""
    return InvocationContext(
        cwd=not_a_repo,
        env={"GIT_CEILING_DIRECTORIES": str(not_a_repo.parent)},
    )


@pytest.fixture
def remote_repo(git_repo: Path, tmp_path: Path) -> Path:
    """A bare ``origin`` for *git_repo*, with ``main`` already pushed."""
    remote = tmp_path / "origin.git"
    _git("init", "--bare", "-b", "main", str(remote), cwd=tmp_path)
    _git("remote", "add", "origin", str(remote), cwd=git_repo)
    _git("push", "-u", "origin", "main", cwd=git_repo)
    return remote


@pytest.fixture
def upstream_clone(remote_repo: Path, tmp_path: Path) -> Path:
    """A second clone of *remote_repo*, used to push commits the first clone lacks."""
    clone = tmp_path / "clone"
    _git("clone", str(remote_repo), str(clone), cwd=tmp_path)
    _configure_identity(clone)
    return clone
