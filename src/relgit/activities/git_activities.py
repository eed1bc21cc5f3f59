"""Git release steps as Temporal activities.

Thin wrappers around ``GitClient`` so that a release workflow can run git
operations outside its deterministic code. Retry policy belongs to the calling
workflow; the activities themselves never retry.
"""

from __future__ import annotations

import asyncio
import logging

from temporalio import activity

from relgit.activities._heartbeat import heartbeat_during
from relgit.git import GitClient
from relgit.models import (
    AddTagInput,
    CommitInput,
    CommitOutput,
    PushWithTagsInput,
    RepoInput,
    RepoStatus,
    UpstreamInput,
)
from relgit.tracing import get_tracer

logger = logging.getLogger(__name__)

RELGIT_TASK_QUEUE = "relgit"


@activity.defn
async def commit_activity(input: CommitInput) -> CommitOutput:
    """Stage the given paths (if any) and commit, returning the new HEAD SHA."""
    client = GitClient()
    context = input.context()

    tracer = get_tracer()
    with tracer.start_as_current_span("relgit.commit_activity") as span:
        if input.file_paths:
            await client.add_files(input.file_paths, context)
        await client.commit(input.message, context)
        sha = await asyncio.to_thread(client.get_current_sha, context)
        logger.info("Commit: repo=%s sha=%s", input.repo_root, sha)
        span.set_attributes({"relgit.commit.sha": sha, "relgit.commit.files": len(input.file_paths)})
        return CommitOutput(commit_sha=sha)


@activity.defn
async def add_tag_activity(input: AddTagInput) -> None:
    """Create an annotated tag at HEAD."""
    logger.info("Tag: repo=%s tag=%s", input.repo_root, input.tag)
    await GitClient().add_tag(input.tag, input.context())


@activity.defn
async def push_with_tags_activity(input: PushWithTagsInput) -> None:
    """Push the current branch, then the given tags."""
    logger.info("Push: repo=%s remote=%s tags=%s", input.repo_root, input.remote, input.tags)
    tracer = get_tracer()
    with tracer.start_as_current_span("relgit.push_with_tags_activity") as span:
        span.set_attributes({"relgit.push.remote": input.remote, "relgit.push.tags": len(input.tags)})
        async with heartbeat_during(f"push {input.remote}"):
            await GitClient().push_with_tags(input.remote, input.tags, input.context())


@activity.defn
async def repo_status_activity(input: RepoInput) -> RepoStatus:
    """Snapshot branch, SHAs, and last tag."""
    # Several blocking git queries; run them off the event loop.
    return await asyncio.to_thread(GitClient().status, input.context())


@activity.defn
async def is_behind_upstream_activity(input: UpstreamInput) -> bool:
    """Refresh remotes and report whether the local branch is behind *remote*."""
    client = GitClient()
    async with heartbeat_during("remote update"):
        # remote update blocks; keep the event loop free for heartbeats.
        behind = await asyncio.to_thread(client.is_behind_upstream, input.remote, input.context())
    logger.info("Upstream check: repo=%s remote=%s behind=%s", input.repo_root, input.remote, behind)
    return behind
