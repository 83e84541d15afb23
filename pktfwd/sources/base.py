"""Collaborator interfaces (ports) queried during status generation."""

from __future__ import annotations

from typing import Protocol, TYPE_CHECKING

if TYPE_CHECKING:
    from pktfwd.core.models import Location


class OSMetricsProvider(Protocol):
    """Port: host metrics. Each returns None when unavailable on the platform."""

    def cpu_percent(self) -> float | None: ...

    def load_average(self) -> tuple[float, float, float] | None: ...

    def memory_percent(self) -> float | None: ...


class AddressEnumerator(Protocol):
    """Port: local interface addresses. Raises on enumeration failure."""

    def interface_addresses(self) -> list[str]: ...


class GPSReader(Protocol):
    """Port: live position from the GPS chip. Raises when no position is available."""

    def read_position(self) -> Location: ...
