"""pktfwd-status — core internal data models.

These are plain dataclasses with no framework dependencies.
The uplink transport converts snapshots to its own wire format at the boundary.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field


@dataclass(frozen=True)
class Location:
    """Gateway position. Any field may be missing."""
    latitude: float | None = None
    longitude: float | None = None
    altitude: float | None = None  # metres

    @property
    def is_empty(self) -> bool:
        return self.latitude is None and self.longitude is None and self.altitude is None


@dataclass(frozen=True)
class OSMetrics:
    cpu_percentage: float = 0.0
    load_1: float = 0.0
    load_5: float = 0.0
    load_15: float = 0.0
    memory_percentage: float = 0.0


@dataclass(frozen=True)
class TrafficCounts:
    rx_in: int = 0
    rx_ok: int = 0
    tx_in: int = 0
    tx_ok: int = 0


@dataclass(frozen=True)
class StatusSnapshot:
    timestamp: int                 # concentrator counter, µs since boot mod 2**32
    time: int                      # wall clock, ns since the Unix epoch
    gateway_trusted: bool
    region: str
    description: str
    platform: str
    rtt: int                       # ms
    rx_in: int
    rx_ok: int
    tx_in: int
    tx_ok: int
    contact_email: str = ""
    ip: tuple[str, ...] = ()
    os: OSMetrics = field(default_factory=OSMetrics)
    gps: Location | None = None

    def to_dict(self) -> dict:
        """Return a JSON-serializable dict."""
        data = asdict(self)
        data["ip"] = list(self.ip)
        return data
