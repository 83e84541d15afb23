"""Cumulative traffic counters.

Each counter carries its own lock, so every add and every read is atomic on
its own. Reading several counters is not transactional.
No framework dependencies.
"""

from __future__ import annotations

import threading

from pktfwd.core.models import TrafficCounts


class AtomicCounter:
    """Non-negative integer counter, safe for any number of threads."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._value = 0

    def add(self, delta: int = 1) -> None:
        with self._lock:
            self._value += delta

    @property
    def value(self) -> int:
        with self._lock:
            return self._value


class TrafficCounters:
    """Lifetime uplink/downlink traffic since process start. Never reset."""

    def __init__(self) -> None:
        self.rx_in = AtomicCounter()   # uplinks received
        self.rx_ok = AtomicCounter()   # uplinks with a valid CRC
        self.tx_in = AtomicCounter()   # downlinks received from the backend
        self.tx_ok = AtomicCounter()   # downlinks handed to the concentrator

    def read(self) -> TrafficCounts:
        return TrafficCounts(
            rx_in=self.rx_in.value,
            rx_ok=self.rx_ok.value,
            tx_in=self.tx_in.value,
            tx_ok=self.tx_ok.value,
        )
