"""Tests for the periodic status reporter and its outbox queue."""

from __future__ import annotations

import asyncio
import contextlib
import threading

import pytest
from structlog.testing import capture_logs

from conftest import FakeAddresses
from pktfwd.core.reporter import StatusReporter
from pktfwd.queue.asyncio_queue import AsyncioStatusQueue


@pytest.mark.asyncio
async def test_report_once_publishes(make_manager):
    manager = make_manager()
    manager.record_uplink_batch(4, 3)
    queue = AsyncioStatusQueue(max_size=10)
    reporter = StatusReporter(manager, queue, interval_seconds=60, deadline_seconds=5)
    reporter.record_rtt(0.25)

    snap = await reporter.report_once()

    assert snap is not None
    assert snap.rtt == 250
    assert snap.rx_in == 4
    assert reporter.latest is snap
    assert reporter.last_generated_at is not None
    assert queue.qsize() == 1
    assert await queue.get() is snap


@pytest.mark.asyncio
async def test_report_once_skips_on_network_failure(make_manager):
    manager = make_manager(addresses=FakeAddresses(error=OSError("no interfaces")))
    queue = AsyncioStatusQueue(max_size=10)
    reporter = StatusReporter(manager, queue, deadline_seconds=5)

    with capture_logs() as logs:
        snap = await reporter.report_once()

    assert snap is None
    assert reporter.latest is None
    assert reporter.cycles_failed == 1
    assert queue.qsize() == 0
    assert any(e["event"] == "status_generation_failed" for e in logs)


@pytest.mark.asyncio
async def test_report_once_times_out(make_manager):
    release = threading.Event()

    class SlowAddresses:
        def interface_addresses(self):
            release.wait(timeout=5)
            return ["10.1.1.1"]

    manager = make_manager(addresses=SlowAddresses())
    queue = AsyncioStatusQueue(max_size=10)
    reporter = StatusReporter(manager, queue, deadline_seconds=0.05)

    try:
        with capture_logs() as logs:
            snap = await reporter.report_once()
    finally:
        release.set()

    assert snap is None
    assert reporter.cycles_failed == 1
    assert queue.qsize() == 0
    assert any(e["event"] == "status_generation_timeout" for e in logs)


@pytest.mark.asyncio
async def test_failed_cycle_then_recovery(make_manager):
    addresses = FakeAddresses(error=OSError("link down"))
    manager = make_manager(addresses=addresses)
    queue = AsyncioStatusQueue(max_size=10)
    reporter = StatusReporter(manager, queue, deadline_seconds=5)

    assert await reporter.report_once() is None

    addresses.error = None
    snap = await reporter.report_once()
    assert snap is not None
    assert reporter.cycles_failed == 1
    assert queue.qsize() == 1


@pytest.mark.asyncio
async def test_outbox_drops_oldest_when_full(make_manager):
    manager = make_manager()
    queue = AsyncioStatusQueue(max_size=2)

    first = manager.generate_status(0.0)
    second = manager.generate_status(0.0)
    third = manager.generate_status(0.0)

    with capture_logs() as logs:
        await queue.put(first)
        await queue.put(second)
        await queue.put(third)

    assert queue.qsize() == 2
    assert await queue.get() is second
    assert await queue.get() is third
    assert [e["event"] for e in logs] == ["status_dropped"]


class CrashingManager:
    """Manager whose first generation raises an unexpected error."""

    def __init__(self, manager):
        self._manager = manager
        self.calls = 0

    def generate_status(self, rtt):
        self.calls += 1
        if self.calls == 1:
            raise RuntimeError("cpu counters unavailable")
        return self._manager.generate_status(rtt)


@pytest.mark.asyncio
async def test_unexpected_error_skips_cycle(make_manager):
    queue = AsyncioStatusQueue(max_size=10)
    reporter = StatusReporter(CrashingManager(make_manager()), queue, deadline_seconds=5)

    with capture_logs() as logs:
        snap = await reporter.report_once()

    assert snap is None
    assert reporter.cycles_failed == 1
    failures = [e for e in logs if e["event"] == "status_generation_failed"]
    assert failures[0]["log_level"] == "error"


@pytest.mark.asyncio
async def test_run_survives_unexpected_error(make_manager):
    queue = AsyncioStatusQueue(max_size=10)
    manager = CrashingManager(make_manager())
    reporter = StatusReporter(manager, queue, interval_seconds=0.01, deadline_seconds=5)

    task = asyncio.create_task(reporter.run())
    try:
        for _ in range(200):
            if reporter.latest is not None:
                break
            await asyncio.sleep(0.01)
        assert not task.done()
    finally:
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task

    assert reporter.cycles_failed == 1
    assert reporter.latest is not None
    assert manager.calls >= 2
