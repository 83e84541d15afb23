"""Shared test fixtures."""

from __future__ import annotations

import pytest
from httpx import ASGITransport, AsyncClient

import pktfwd.main as main_module
from pktfwd.config import AppConfig
from pktfwd.core.models import Location
from pktfwd.core.reporter import StatusReporter
from pktfwd.core.status import StatusManager
from pktfwd.queue.asyncio_queue import AsyncioStatusQueue


class FakeMetrics:
    """OSMetricsProvider returning fixed values (None = unavailable)."""

    def __init__(self, cpu=12.5, load=(0.5, 0.4, 0.3), memory=33.0):
        self.cpu = cpu
        self.load = load
        self.memory = memory

    def cpu_percent(self):
        return self.cpu

    def load_average(self):
        return self.load

    def memory_percent(self):
        return self.memory


class FakeAddresses:
    """AddressEnumerator returning a fixed list, or raising ``error``."""

    def __init__(self, addresses=None, error=None):
        self.addresses = addresses if addresses is not None else ["127.0.0.1", "192.168.1.20"]
        self.error = error

    def interface_addresses(self):
        if self.error is not None:
            raise self.error
        return list(self.addresses)


class FakeGPS:
    """GPSReader returning ``location`` or raising ``error``; counts calls."""

    def __init__(self, location=None, error=None):
        self.location = location
        self.error = error
        self.calls = 0

    def read_position(self):
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.location


@pytest.fixture
def make_manager():
    """Factory for a StatusManager wired to fake collaborators."""

    def _make(
        gps_chip=False,
        antenna_location=None,
        metrics=None,
        addresses=None,
        gps=None,
        **kwargs,
    ):
        return StatusManager(
            frequency_plan=kwargs.pop("frequency_plan", "EU_863_870"),
            description=kwargs.pop("description", "rooftop gateway"),
            gps_chip=gps_chip,
            antenna_location=antenna_location,
            metrics=metrics or FakeMetrics(),
            addresses=addresses or FakeAddresses(),
            gps=gps,
            **kwargs,
        )

    return _make


@pytest.fixture(autouse=True)
def _init_agent():
    """Initialize agent singletons for every test, with fake collaborators."""
    config = AppConfig()
    config.logging.level = "warning"

    manager = StatusManager(
        frequency_plan=config.gateway.frequency_plan,
        description="test gateway",
        gps_chip=False,
        antenna_location=Location(latitude=52.37, longitude=4.89, altitude=12.0),
        metrics=FakeMetrics(),
        addresses=FakeAddresses(),
    )
    queue = AsyncioStatusQueue(max_size=config.status.outbox_size)
    reporter = StatusReporter(manager=manager, queue=queue, deadline_seconds=5.0)

    # Patch module-level singletons
    main_module._config = config
    main_module._manager = manager
    main_module._queue = queue
    main_module._reporter = reporter

    yield

    # Cleanup
    main_module._config = None
    main_module._manager = None
    main_module._queue = None
    main_module._reporter = None


@pytest.fixture
async def client():
    from pktfwd.main import app

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
