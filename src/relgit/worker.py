"""Temporal worker entry point for relgit.

Connects to the Temporal server, registers the git activities on the
``relgit`` task queue, and runs until interrupted. Release workflows living in
other workers schedule these activities by name.
"""

from __future__ import annotations

import logging
import os

from temporalio.client import Client
from temporalio.contrib.pydantic import pydantic_data_converter
from temporalio.worker import Worker

from relgit.activities import (
    RELGIT_TASK_QUEUE,
    add_tag_activity,
    commit_activity,
    is_behind_upstream_activity,
    push_with_tags_activity,
    repo_status_activity,
)

DEFAULT_TEMPORAL_ADDRESS = "localhost:7233"
RELGIT_TEMPORAL_ADDRESS_ENV = "RELGIT_TEMPORAL_ADDRESS"

ACTIVITIES = [
    add_tag_activity,
    commit_activity,
    is_behind_upstream_activity,
    push_with_tags_activity,
    repo_status_activity,
]

logger = logging.getLogger(__name__)


def resolve_temporal_address(address: str | None = None) -> str:
    """Explicit address, then ``RELGIT_TEMPORAL_ADDRESS``, then the local default."""
    if address:
        return address
    return os.environ.get(RELGIT_TEMPORAL_ADDRESS_ENV) or DEFAULT_TEMPORAL_ADDRESS


async def run_worker(address: str | None = None, *, task_queue: str = RELGIT_TASK_QUEUE) -> None:
    """Connect to Temporal and run the relgit activity worker."""
    from relgit.tracing import init_tracing, shutdown_tracing

    address = resolve_temporal_address(address)
    init_tracing()

    client = await Client.connect(
        address,
        data_converter=pydantic_data_converter,
    )

    worker = Worker(
        client,
        task_queue=task_queue,
        activities=ACTIVITIES,
    )

    logger.info("relgit worker listening on %s (queue=%s)", address, task_queue)
    try:
        await worker.run()
    finally:
        shutdown_tracing()
