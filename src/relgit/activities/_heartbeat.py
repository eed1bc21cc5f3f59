"""Keep Temporal informed while git waits on a remote."""

from __future__ import annotations

import asyncio
import contextlib
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from temporalio import activity

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

GIT_HEARTBEAT_INTERVAL_SECONDS = 10


@asynccontextmanager
async def heartbeat_during(
    operation: str,
    interval_seconds: float = GIT_HEARTBEAT_INTERVAL_SECONDS,
) -> AsyncIterator[None]:
    """Heartbeat with *operation* as the detail until the body finishes.

    Outside an activity (direct calls, tests) the body just runs; there is
    nobody to heartbeat to.
    """
    if not activity.in_activity():
        yield
        return

    async def _beat() -> None:
        while True:
            await asyncio.sleep(interval_seconds)
            activity.heartbeat(operation)

    beater = asyncio.create_task(_beat())
    try:
        yield
    finally:
        beater.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await beater
