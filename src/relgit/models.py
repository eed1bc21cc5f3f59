"""Core data models for relgit."""

from __future__ import annotations

from enum import StrEnum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator


class StdioMode(StrEnum):
    """How the executor treats the child's stdout/stderr."""

    PIPE = "pipe"
    IGNORE = "ignore"
    INHERIT = "inherit"


class InvocationContext(BaseModel):
    """Working directory and environment used for every git call.

    Created once per logical session by the caller and passed to every
    operation. Never mutated; use :meth:`with_stdio` for a derived copy.
    """

    model_config = ConfigDict(frozen=True)

    cwd: Path
    env: dict[str, str] = Field(
        default_factory=dict,
        description="Environment overrides merged over the process environment.",
    )
    stdio: StdioMode = StdioMode.PIPE

    @field_validator("cwd")
    @classmethod
    def _require_absolute(cls, value: Path) -> Path:
        if not value.is_absolute():
            msg = f"cwd must be an absolute path, got {str(value)!r}"
            raise ValueError(msg)
        return value

    def with_stdio(self, stdio: StdioMode) -> InvocationContext:
        return self.model_copy(update={"stdio": stdio})


class AheadBehind(BaseModel):
    """Left-right commit counts between ``<remote>/<branch>`` and ``<branch>``."""

    model_config = ConfigDict(frozen=True)

    behind: int = Field(description="Commits on the upstream missing locally.")
    ahead: int = Field(description="Local commits missing on the upstream.")


class RepoStatus(BaseModel):
    """Point-in-time snapshot of the repository as seen by a release run."""

    branch: str
    detached: bool
    sha: str
    short_sha: str
    last_tag: str | None = None
    workspace_root: str


# ---------------------------------------------------------------------------
# Activity inputs / outputs
# ---------------------------------------------------------------------------


class RepoInput(BaseModel):
    """Fields shared by every git activity input."""

    repo_root: str
    env: dict[str, str] = Field(default_factory=dict)

    def context(self) -> InvocationContext:
        return InvocationContext(cwd=Path(self.repo_root), env=self.env)


class CommitInput(RepoInput):
    """Input to commit_activity."""

    message: str
    file_paths: list[str] = Field(
        default_factory=list,
        description="Paths to stage before committing. Empty commits what is already staged.",
    )


class CommitOutput(BaseModel):
    """Output of commit_activity."""

    commit_sha: str


class AddTagInput(RepoInput):
    """Input to add_tag_activity."""

    tag: str


class PushWithTagsInput(RepoInput):
    """Input to push_with_tags_activity."""

    remote: str = "origin"
    tags: list[str] = Field(default_factory=list)


class UpstreamInput(RepoInput):
    """Input to is_behind_upstream_activity."""

    remote: str = "origin"
