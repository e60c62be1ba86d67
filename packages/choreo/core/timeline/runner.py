"""Cooperative tick loop driving a TimelineClock."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable

from choreo.core.timeline.clock import TimelineClock

logger = logging.getLogger(__name__)

DEFAULT_TICK_RATE_HZ = 60.0


async def run_playback(
    clock: TimelineClock,
    rate_hz: float = DEFAULT_TICK_RATE_HZ,
    stop: asyncio.Event | None = None,
    *,
    time_source: Callable[[], float] = time.perf_counter,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> int:
    """Tick the clock at a fixed cadence until playback stops.

    Each tick finishes (including every clock listener) before the next
    sleep begins, so ticks never overlap. Elapsed time is measured with a
    monotonic timer, not assumed from the cadence.

    Args:
        clock: Clock to drive; should already be playing
        rate_hz: Target tick rate
        stop: Optional event that ends the loop when set
        time_source: Monotonic time function (injectable for tests)
        sleep: Async sleep function (injectable for tests)

    Returns:
        Number of ticks performed
    """
    if rate_hz <= 0:
        raise ValueError(f"rate_hz must be > 0, got {rate_hz}")

    interval = 1.0 / rate_hz
    ticks = 0
    last = time_source()

    while clock.is_playing and not (stop is not None and stop.is_set()):
        await sleep(interval)
        now = time_source()
        clock.tick(now - last)
        last = now
        ticks += 1

    logger.debug(f"Playback loop finished after {ticks} ticks at {clock.current_time:.3f}s")
    return ticks
