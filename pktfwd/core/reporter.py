"""Status reporter — the periodic driver around StatusManager.

Generates a snapshot every ``interval_seconds`` under an overall deadline and
publishes it to the outbox queue. A failed or late cycle is skipped; the next
tick retries.
"""

from __future__ import annotations

import asyncio
import time
from typing import TYPE_CHECKING

import structlog

from pktfwd.core.status import StatusError

if TYPE_CHECKING:
    from pktfwd.core.models import StatusSnapshot
    from pktfwd.core.status import StatusManager
    from pktfwd.queue.base import StatusQueue

log = structlog.get_logger()


class StatusReporter:
    """Drives status generation on a timer."""

    def __init__(
        self,
        manager: StatusManager,
        queue: StatusQueue,
        interval_seconds: float = 30.0,
        deadline_seconds: float = 10.0,
    ) -> None:
        self._manager = manager
        self._queue = queue
        self._interval = interval_seconds
        self._deadline = deadline_seconds
        self._rtt = 0.0
        self._latest: StatusSnapshot | None = None
        self._last_generated_at: float | None = None
        self._cycles_failed = 0

    @property
    def rtt(self) -> float:
        return self._rtt

    @property
    def latest(self) -> StatusSnapshot | None:
        return self._latest

    @property
    def last_generated_at(self) -> float | None:
        return self._last_generated_at

    @property
    def cycles_failed(self) -> int:
        return self._cycles_failed

    def record_rtt(self, seconds: float) -> None:
        """Store the most recently measured round-trip time to the backend."""
        self._rtt = seconds

    async def report_once(self) -> StatusSnapshot | None:
        """Run one reporting cycle. Returns the snapshot, or None if skipped."""
        started = time.monotonic()
        try:
            # The worker thread is abandoned, not interrupted, on timeout.
            snapshot = await asyncio.wait_for(
                asyncio.to_thread(self._manager.generate_status, self._rtt),
                timeout=self._deadline,
            )
        except StatusError as e:
            self._cycles_failed += 1
            log.warning("status_generation_failed", error=str(e),
                        cause=repr(e.__cause__))
            return None
        except asyncio.TimeoutError:
            self._cycles_failed += 1
            log.warning("status_generation_timeout", deadline_seconds=self._deadline)
            return None
        except Exception:
            self._cycles_failed += 1
            log.error("status_generation_failed", exc_info=True)
            return None

        self._latest = snapshot
        self._last_generated_at = time.time()
        await self._queue.put(snapshot)
        log.debug("status_generated",
                  rx_in=snapshot.rx_in, tx_in=snapshot.tx_in,
                  ips=len(snapshot.ip),
                  elapsed_ms=round((time.monotonic() - started) * 1000, 1))
        return snapshot

    async def run(self) -> None:
        """Report forever. Runs as a background task until cancelled."""
        log.info("status_reporter_started", interval_seconds=self._interval)
        while True:
            await self.report_once()
            await asyncio.sleep(self._interval)
