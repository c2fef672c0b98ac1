"""Periodic refresh of the single reading snapshot."""

from __future__ import annotations

import asyncio
import logging
import math
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from functools import lru_cache
from typing import Callable, Optional, Sequence

from models.readings import ErrorKind, ReadingSnapshot, SensorSection
from services.errors import SensorsError
from services.parser import parse_sensor_output
from services.source import DataSource, build_default_source
from settings import get_settings

logger = logging.getLogger(__name__)

Parser = Callable[[str], Sequence[SensorSection]]


@dataclass(frozen=True)
class Tick:
    """One firing of the refresh timer."""

    sequence: int
    fired_at: datetime


def capture_snapshot(
    source: DataSource,
    parser: Parser = parse_sensor_output,
    tick: Optional[Tick] = None,
) -> ReadingSnapshot:
    """Run the source then the parser and fold the outcome into a snapshot."""
    sequence = tick.sequence if tick is not None else 0
    try:
        sections = parser(source.run_and_capture())
    except SensorsError as exc:
        return ReadingSnapshot.failure(exc.kind, exc.message, tick=sequence)
    except Exception as exc:
        logger.exception("Unexpected failure while reading sensors", extra={"tick": sequence})
        return ReadingSnapshot.failure(
            ErrorKind.source_unavailable,
            f"Unexpected failure while reading sensors: {exc}",
            tick=sequence,
        )
    return ReadingSnapshot.success(sections, tick=sequence)


def next_snapshot(
    previous: ReadingSnapshot,
    tick: Tick,
    source: DataSource,
    parser: Parser = parse_sensor_output,
) -> ReadingSnapshot:
    """Return the snapshot replacing ``previous`` after ``tick``.

    The previous snapshot never contributes to the result: success or error,
    the fresh capture overwrites it whole.
    """
    return capture_snapshot(source, parser, tick)


def next_due(due: float, now: float, interval: float) -> float:
    """Return the next scheduled tick time after ``due`` on a fixed grid.

    Periods that already elapsed while a slow tick ran are skipped rather
    than fired back to back.
    """
    due += interval
    if interval > 0 and due < now:
        due += math.ceil((now - due) / interval) * interval
    return due


class RefreshController:
    """Holds the current snapshot and replaces it on every tick."""

    def __init__(
        self,
        source: DataSource,
        parser: Parser = parse_sensor_output,
        interval: float = 0.5,
    ) -> None:
        self.source = source
        self.parser = parser
        self.interval = interval
        self._ticks = 0
        self._lock = asyncio.Lock()
        self._current = capture_snapshot(source, parser)
        self._log_outcome(self._current, duration_ms=None)

    @property
    def current(self) -> ReadingSnapshot:
        return self._current

    @property
    def ticks(self) -> int:
        return self._ticks

    def refresh(self) -> ReadingSnapshot:
        """Run one tick synchronously on the calling thread."""
        tick = self._next_tick()
        start_time = time.perf_counter()
        snapshot = next_snapshot(self._current, tick, self.source, self.parser)
        return self._publish(snapshot, start_time)

    async def refresh_async(self) -> ReadingSnapshot:
        """Run one tick with the blocking command off the event loop.

        The snapshot itself is written back on the event loop, so readers on
        the same loop never observe a half-finished tick.
        """
        async with self._lock:
            tick = self._next_tick()
            start_time = time.perf_counter()
            snapshot = await asyncio.to_thread(
                next_snapshot, self._current, tick, self.source, self.parser
            )
            return self._publish(snapshot, start_time)

    async def run(self) -> None:
        """Refresh every ``interval`` seconds, on a fixed schedule, until cancelled."""
        loop = asyncio.get_running_loop()
        due = loop.time()
        while True:
            due = next_due(due, loop.time(), self.interval)
            await asyncio.sleep(max(0.0, due - loop.time()))
            await self.refresh_async()

    def _next_tick(self) -> Tick:
        self._ticks += 1
        return Tick(sequence=self._ticks, fired_at=datetime.now(timezone.utc))

    def _publish(self, snapshot: ReadingSnapshot, start_time: float) -> ReadingSnapshot:
        self._current = snapshot
        self._log_outcome(snapshot, duration_ms=int((time.perf_counter() - start_time) * 1000))
        return snapshot

    @staticmethod
    def _log_outcome(snapshot: ReadingSnapshot, duration_ms: Optional[int]) -> None:
        if snapshot.error is not None:
            logger.warning(
                "Sensor refresh failed: %s",
                snapshot.error.message,
                extra={
                    "tick": snapshot.tick,
                    "error_kind": snapshot.error.kind.value,
                    "duration_ms": duration_ms,
                },
            )
            return
        logger.debug(
            "Sensor readings refreshed",
            extra={
                "tick": snapshot.tick,
                "section_count": len(snapshot.sections),
                "duration_ms": duration_ms,
            },
        )


@lru_cache
def build_default_controller(interval: Optional[float] = None) -> RefreshController:
    """Factory that wires the controller to the configured ``sensors`` command."""
    settings = get_settings()
    return RefreshController(
        source=build_default_source(),
        interval=interval or settings.refresh_interval,
    )
