"""Outbox interface (port) handing status snapshots to the uplink transport."""

from __future__ import annotations

from typing import Protocol, TYPE_CHECKING

if TYPE_CHECKING:
    from pktfwd.core.models import StatusSnapshot


class StatusQueue(Protocol):
    """Port: accepts status snapshots and delivers them to the transport."""

    async def put(self, snapshot: StatusSnapshot) -> None: ...

    async def get(self) -> StatusSnapshot: ...

    def qsize(self) -> int: ...
