"""Status aggregation — traffic counters plus point-in-time gateway status.

This is the core business logic. It depends on the collaborator protocols in
pktfwd.sources.base, not concrete implementations, and owns no threads:
every operation runs on the calling thread.
"""

from __future__ import annotations

import ipaddress
import platform
import time
from typing import TYPE_CHECKING

import structlog

from pktfwd.core.counters import TrafficCounters
from pktfwd.core.models import Location, OSMetrics, StatusSnapshot, TrafficCounts
from pktfwd.core.timestamp import concentrator_timestamp

if TYPE_CHECKING:
    from pktfwd.sources.base import AddressEnumerator, GPSReader, OSMetricsProvider


class StatusError(Exception):
    """A status snapshot could not be generated."""


class NetworkIdentityError(StatusError):
    """The host's interface addresses could not be enumerated."""


def filter_addresses(addresses: list[str]) -> tuple[str, ...]:
    """Keep non-loopback IPv4 addresses, unwrapping IPv4-mapped IPv6 ones."""
    result = []
    for raw in addresses:
        try:
            ip = ipaddress.ip_address(raw)
        except ValueError:
            continue
        if ip.version == 6:
            if ip.ipv4_mapped is None:
                continue
            ip = ip.ipv4_mapped
        if ip.is_loopback:
            continue
        result.append(str(ip))
    return tuple(result)


class StatusManager:
    """Accumulates traffic counters and generates gateway status snapshots.

    The counter operations are safe to call from any number of threads.
    ``generate_status`` may run concurrently with them and with itself; each
    counter is read atomically, but the four reads are not one transaction.

    Location precedence: when the gateway has a GPS chip, a successful live
    read replaces the account-server antenna location for that snapshot. A
    failed read is logged and the antenna location is used as configured.
    """

    def __init__(
        self,
        frequency_plan: str,
        description: str,
        gps_chip: bool,
        antenna_location: Location | None = None,
        *,
        metrics: OSMetricsProvider,
        addresses: AddressEnumerator,
        gps: GPSReader | None = None,
        log=None,
        trusted: bool = True,
        contact_email: str = "",
        platform_name: str | None = None,
    ) -> None:
        if gps_chip and gps is None:
            raise ValueError("gps_chip is set but no GPS reader was provided")

        self._log = log if log is not None else structlog.get_logger()
        self._frequency_plan = frequency_plan
        self._description = description
        self._gps_chip = gps_chip
        self._antenna_location = antenna_location
        self._metrics = metrics
        self._addresses = addresses
        self._gps = gps
        self._trusted = trusted
        self._contact_email = contact_email
        self._platform = platform_name or platform.system().lower()
        self._counters = TrafficCounters()
        self._boot_time: float | None = None

        if antenna_location is None:
            self._log.warning("antenna_location_unavailable",
                              source="account_server")

    def set_boot_time(self, t: float) -> None:
        """Record when the concentrator started (seconds since the epoch)."""
        self._boot_time = t

    def record_downlink_received(self) -> None:
        self._counters.tx_in.add(1)

    def record_downlink_acknowledged(self) -> None:
        self._counters.tx_ok.add(1)

    def record_uplink_batch(self, received: int, valid: int) -> None:
        """Record one processed batch of uplink frames."""
        self._counters.rx_in.add(received)
        self._counters.rx_ok.add(valid)

    def counters(self) -> TrafficCounts:
        return self._counters.read()

    def _uptime_timestamp(self) -> int:
        boot_time = self._boot_time
        if boot_time is None:
            return 0
        return concentrator_timestamp(time.time() - boot_time)

    def _query_metric(self, name: str, query):
        """Run one provider query; a raising query counts as unavailable."""
        try:
            return query()
        except Exception as e:
            self._log.warning("os_metric_unavailable", metric=name, error=str(e))
            return None

    def _os_metrics(self) -> OSMetrics:
        """Query each host metric independently; missing ones stay at 0.0."""
        cpu = self._query_metric("cpu", self._metrics.cpu_percent)
        load = self._query_metric("load", self._metrics.load_average)
        memory = self._query_metric("memory", self._metrics.memory_percent)

        load_1 = load_5 = load_15 = 0.0
        if load is not None:
            load_1, load_5, load_15 = load
        return OSMetrics(
            cpu_percentage=cpu if cpu is not None else 0.0,
            load_1=load_1,
            load_5=load_5,
            load_15=load_15,
            memory_percentage=memory if memory is not None else 0.0,
        )

    def _resolve_location(self) -> Location | None:
        location = self._antenna_location
        if self._gps_chip:
            try:
                location = self._gps.read_position()
            except Exception as e:
                self._log.warning("gps_read_failed",
                                  error=str(e),
                                  fallback="account_server" if location is not None else "none")
        return location

    def generate_status(self, rtt: float) -> StatusSnapshot:
        """Build a status snapshot. ``rtt`` is the backend round-trip time in seconds.

        Raises NetworkIdentityError if interface addresses cannot be
        enumerated. Every other collaborator failure degrades the snapshot
        instead of failing it.
        """
        timestamp = self._uptime_timestamp()
        os_metrics = self._os_metrics()

        try:
            raw_addresses = self._addresses.interface_addresses()
        except Exception as e:
            raise NetworkIdentityError(f"net interfaces obtention error: {e}") from e
        ips = filter_addresses(raw_addresses)

        counts = self._counters.read()
        location = self._resolve_location()

        return StatusSnapshot(
            timestamp=timestamp,
            time=time.time_ns(),
            gateway_trusted=self._trusted,
            region=self._frequency_plan,
            description=self._description,
            contact_email=self._contact_email,
            platform=self._platform,
            ip=ips,
            rtt=round(rtt * 1_000_000) // 1000,
            rx_in=counts.rx_in,
            rx_ok=counts.rx_ok,
            tx_in=counts.tx_in,
            tx_ok=counts.tx_ok,
            os=os_metrics,
            gps=location,
        )
