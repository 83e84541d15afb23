"""Health check and local status endpoints."""

from __future__ import annotations

import asyncio
import time
from dataclasses import asdict

from fastapi import APIRouter, HTTPException

from pktfwd.core.status import StatusError

router = APIRouter(prefix="/api/v1")


@router.get("/health")
async def health() -> dict:
    """Basic health check."""
    from pktfwd.main import VERSION, get_queue, get_reporter, get_started_at

    reporter = get_reporter()
    latest = reporter.latest
    return {
        "status": "ok",
        "version": VERSION,
        "uptime_seconds": round(time.time() - get_started_at(), 1),
        "outbox_depth": get_queue().qsize(),
        "last_status_time": latest.time if latest is not None else None,
        "cycles_failed": reporter.cycles_failed,
    }


@router.get("/status")
async def status(fresh: bool = False) -> dict:
    """Latest gateway status.

    With ``fresh=true`` a new snapshot is generated on the spot, using the
    last recorded round-trip time. It is not published to the outbox.
    """
    from pktfwd.main import get_manager, get_reporter

    reporter = get_reporter()
    if fresh:
        try:
            snapshot = await asyncio.to_thread(get_manager().generate_status, reporter.rtt)
        except StatusError as e:
            raise HTTPException(status_code=503, detail=str(e)) from e
        return snapshot.to_dict()

    if reporter.latest is None:
        raise HTTPException(status_code=503, detail="no status generated yet")
    return reporter.latest.to_dict()


@router.get("/counters")
async def counters() -> dict:
    """Cumulative traffic counters since agent start."""
    from pktfwd.main import get_manager

    return asdict(get_manager().counters())
