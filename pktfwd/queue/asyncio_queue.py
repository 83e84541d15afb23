"""In-process asyncio queue implementation of StatusQueue."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from pktfwd.core.models import StatusSnapshot

log = structlog.get_logger()


class AsyncioStatusQueue:
    """StatusQueue backed by a bounded asyncio.Queue.

    When full, the oldest snapshot is dropped: a stalled transport must never
    block the reporter, and a newer status supersedes an older one.
    """

    def __init__(self, max_size: int = 100) -> None:
        self._queue: asyncio.Queue[StatusSnapshot] = asyncio.Queue(maxsize=max_size)

    async def put(self, snapshot: StatusSnapshot) -> None:
        while self._queue.full():
            dropped = self._queue.get_nowait()
            log.warning("status_dropped", time=dropped.time, depth=self._queue.qsize())
        self._queue.put_nowait(snapshot)

    async def get(self) -> StatusSnapshot:
        return await self._queue.get()

    def qsize(self) -> int:
        return self._queue.qsize()
