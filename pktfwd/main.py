"""pktfwd-status agent — main entry point.

This is the only file that knows about concrete implementations.
It wires together the core, collaborator, queue, and API layers.

The concentrator integration reaches the running StatusManager through
get_manager() to feed traffic counters and the boot time, and the uplink
transport consumes snapshots from get_queue().
"""

from __future__ import annotations

import asyncio
import logging
import time
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI

from pktfwd.api.monitoring import router as monitoring_router
from pktfwd.config import AppConfig, load_config
from pktfwd.core.reporter import StatusReporter
from pktfwd.core.status import StatusManager
from pktfwd.queue.asyncio_queue import AsyncioStatusQueue
from pktfwd.sources.gps import NmeaGPSReader
from pktfwd.sources.host import PsutilAddressEnumerator, PsutilMetricsProvider

log = structlog.get_logger()

VERSION = "0.1.0"

# Module-level singletons (set during startup)
_manager: StatusManager | None = None
_reporter: StatusReporter | None = None
_queue: AsyncioStatusQueue | None = None
_config: AppConfig | None = None
_started_at: float = time.time()


def get_manager() -> StatusManager:
    assert _manager is not None, "Agent not initialized"
    return _manager


def get_reporter() -> StatusReporter:
    assert _reporter is not None, "Agent not initialized"
    return _reporter


def get_queue() -> AsyncioStatusQueue:
    assert _queue is not None, "Agent not initialized"
    return _queue


def get_config() -> AppConfig:
    assert _config is not None, "Agent not initialized"
    return _config


def get_started_at() -> float:
    return _started_at


def _setup_logging(config: AppConfig) -> None:
    """Configure structlog based on the logging config."""
    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    if config.logging.format == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelName(config.logging.level.upper()),
        ),
    )


def build_manager(config: AppConfig) -> StatusManager:
    """Create the StatusManager with the host-backed collaborators."""
    gateway = config.gateway
    gps = None
    if gateway.gps_chip:
        gps = NmeaGPSReader(
            port=config.gps.serial_port,
            baud_rate=config.gps.baud_rate,
            timeout=config.gps.timeout_seconds,
        )
    return StatusManager(
        frequency_plan=gateway.frequency_plan,
        description=gateway.description,
        gps_chip=gateway.gps_chip,
        antenna_location=gateway.antenna_location(),
        metrics=PsutilMetricsProvider(),
        addresses=PsutilAddressEnumerator(),
        gps=gps,
        log=log.bind(component="status"),
        trusted=gateway.trusted,
        contact_email=gateway.contact_email,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Agent startup and shutdown."""
    global _manager, _reporter, _queue, _config, _started_at

    _config = load_config()
    _setup_logging(_config)
    _started_at = time.time()

    log.info("agent_starting",
             frequency_plan=_config.gateway.frequency_plan,
             gps_chip=_config.gateway.gps_chip,
             interval_seconds=_config.status.interval_seconds)

    _manager = build_manager(_config)
    _queue = AsyncioStatusQueue(max_size=_config.status.outbox_size)
    _reporter = StatusReporter(
        manager=_manager,
        queue=_queue,
        interval_seconds=_config.status.interval_seconds,
        deadline_seconds=_config.status.deadline_seconds,
    )

    reporter_task = asyncio.create_task(_reporter.run())

    log.info("agent_started",
             host=_config.server.host,
             port=_config.server.port)

    yield

    # Shutdown
    reporter_task.cancel()
    try:
        await reporter_task
    except asyncio.CancelledError:
        pass
    log.info("agent_stopped")


app = FastAPI(
    title="pktfwd-status",
    description="LoRa gateway status agent",
    version=VERSION,
    lifespan=lifespan,
)

app.include_router(monitoring_router)
