"""Concentrator timestamp conversion.

The concentrator exposes a free-running 32-bit counter in microseconds, which
wraps roughly every 71.6 minutes. Status records carry uptime in that unit.
"""

from __future__ import annotations

# Counter resolution: 1 tick = 1 µs.
TICKS_PER_SECOND = 1_000_000

# The counter is 32 bits wide.
TIMESTAMP_MODULUS = 2 ** 32


def concentrator_timestamp(seconds_since_boot: float) -> int:
    """Convert time since concentrator boot to the wrapping µs counter.

    Negative durations (boot time in the future, clock stepped back) clamp to 0.
    """
    if seconds_since_boot <= 0:
        return 0
    ticks = int(seconds_since_boot * TICKS_PER_SECOND)
    return ticks % TIMESTAMP_MODULUS
