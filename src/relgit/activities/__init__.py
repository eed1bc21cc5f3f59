"""Temporal activities for relgit release steps."""

from __future__ import annotations

from relgit.activities.git_activities import (
    RELGIT_TASK_QUEUE,
    add_tag_activity,
    commit_activity,
    is_behind_upstream_activity,
    push_with_tags_activity,
    repo_status_activity,
)

__all__ = [
    "RELGIT_TASK_QUEUE",
    "add_tag_activity",
    "commit_activity",
    "is_behind_upstream_activity",
    "push_with_tags_activity",
    "repo_status_activity",
]
