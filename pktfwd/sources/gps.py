"""NMEA serial GPS reader.

Reads GGA sentences from a GPS module on a serial port. Each read opens the
port, waits for a sentence carrying a fix and closes it again; no state is
kept between reads.
"""

from __future__ import annotations

import time

import pynmea2
import serial
import structlog

from pktfwd.core.models import Location

log = structlog.get_logger()


class GPSReadError(Exception):
    """No position could be obtained from the GPS hardware."""


class NmeaGPSReader:
    """GPSReader for NMEA 0183 modules attached over a serial line."""

    def __init__(
        self,
        port: str,
        baud_rate: int = 9600,
        timeout: float = 2.0,
        max_lines: int = 50,
    ) -> None:
        self._port = port
        self._baud_rate = baud_rate
        self._timeout = timeout
        self._max_lines = max_lines

    def read_position(self) -> Location:
        deadline = time.monotonic() + self._timeout
        try:
            with serial.Serial(self._port, self._baud_rate, timeout=self._timeout) as ser:
                for _ in range(self._max_lines):
                    if time.monotonic() >= deadline:
                        break
                    raw = ser.readline()
                    if not raw:
                        continue
                    location = self._parse_fix(raw)
                    if location is not None:
                        return location
        except serial.SerialException as e:
            raise GPSReadError(f"serial error on {self._port}: {e}") from e
        raise GPSReadError(f"no GPS fix from {self._port} within {self._timeout}s")

    @staticmethod
    def _parse_fix(raw: bytes) -> Location | None:
        """Return the position in a GGA sentence with a fix, else None."""
        line = raw.decode("ascii", errors="ignore").strip()
        if not line.startswith("$") or line[3:6] != "GGA":
            return None
        try:
            msg = pynmea2.parse(line)
        except pynmea2.ParseError as e:
            log.debug("nmea_parse_failed", line=line, error=str(e))
            return None
        if not msg.gps_qual:
            return None
        # Some modules report a fix quality before the coordinates are filled in.
        if not msg.lat or not msg.lon:
            return None
        return Location(
            latitude=msg.latitude,
            longitude=msg.longitude,
            altitude=msg.altitude,
        )
