"""psutil-backed host collaborators: OS metrics and interface addresses."""

from __future__ import annotations

import socket

import psutil
import structlog

log = structlog.get_logger()

# Errors psutil raises when a metric is unsupported or not readable on the host.
_UNAVAILABLE = (psutil.Error, OSError, AttributeError, NotImplementedError)


class PsutilMetricsProvider:
    """OSMetricsProvider backed by psutil.

    Temperature is not reported: there is no portable way to read it.
    """

    def cpu_percent(self) -> float | None:
        """Busy share of cumulative CPU time since host boot."""
        try:
            times = psutil.cpu_times()
        except _UNAVAILABLE as e:
            log.warning("os_metric_unavailable", metric="cpu", error=str(e))
            return None
        total = sum(times)
        if total <= 0:
            return None
        return (total - times.idle) / total * 100

    def load_average(self) -> tuple[float, float, float] | None:
        try:
            load1, load5, load15 = psutil.getloadavg()
        except _UNAVAILABLE as e:
            log.warning("os_metric_unavailable", metric="load", error=str(e))
            return None
        return load1, load5, load15

    def memory_percent(self) -> float | None:
        try:
            return psutil.virtual_memory().percent
        except _UNAVAILABLE as e:
            log.warning("os_metric_unavailable", metric="memory", error=str(e))
            return None


class PsutilAddressEnumerator:
    """AddressEnumerator backed by psutil.net_if_addrs().

    Returns IPv4 and IPv6 addresses of every interface, in interface order.
    Filtering is left to the caller. Errors propagate.
    """

    def interface_addresses(self) -> list[str]:
        addresses = []
        for snics in psutil.net_if_addrs().values():
            for snic in snics:
                if snic.family == socket.AF_INET:
                    addresses.append(snic.address)
                elif snic.family == socket.AF_INET6:
                    # Link-local addresses carry a "%iface" zone suffix.
                    addresses.append(snic.address.split("%", 1)[0])
        return addresses
