"""
Frame-driven game loop.

Each frame measures the time since the previous one and hands it to the
session. Implausible gaps (non-finite, negative, or over a second, e.g. after
the process was suspended) count as one nominal frame instead.
"""

import asyncio
import math
import time
from typing import Awaitable, Callable, List, Optional

from .models import SpawnOutcome
from .session import GameSession


NOMINAL_FRAME_MS = 16.0
MAX_FRAME_MS = 1000.0


def clamp_frame_delta(dt_ms: float) -> float:
    """Replace an implausible frame delta with the nominal frame length."""
    if not math.isfinite(dt_ms) or dt_ms < 0 or dt_ms > MAX_FRAME_MS:
        return NOMINAL_FRAME_MS
    return dt_ms


class GameLoop:
    """
    Drives a GameSession in real or simulated time.

    Args:
        session: Session to tick
        clock: Monotonic clock in seconds
        sleep: Coroutine used to wait between frames
        frame_ms: Target frame length
    """

    def __init__(
        self,
        session: GameSession,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        frame_ms: float = NOMINAL_FRAME_MS,
    ):
        self.session = session
        self.clock = clock
        self.sleep = sleep
        self.frame_ms = frame_ms
        self.last_tick: Optional[float] = None
        self.frames = 0
        self._stopped = False

    def frame(self, now: Optional[float] = None) -> Optional[SpawnOutcome]:
        """
        Run one frame.

        Args:
            now: Clock reading in seconds (read from the clock if omitted)

        Returns:
            The spawn outcome if a spawn landed this frame
        """
        if now is None or not math.isfinite(now):
            now = self.clock()

        dt = NOMINAL_FRAME_MS if self.last_tick is None else (now - self.last_tick) * 1000
        self.last_tick = now
        self.frames += 1
        return self.session.tick(clamp_frame_delta(dt))

    def advance(self, total_ms: float) -> List[SpawnOutcome]:
        """
        Simulate `total_ms` of game time in frame-sized steps.

        Stops early if the session ends.

        Returns:
            Outcomes of the spawns that landed
        """
        outcomes = []
        remaining = total_ms
        while remaining > 0 and not self.session.is_over:
            dt = min(self.frame_ms, remaining)
            outcome = self.session.tick(dt)
            self.frames += 1
            if outcome is not None:
                outcomes.append(outcome)
            remaining -= dt
        return outcomes

    def stop(self) -> None:
        self._stopped = True

    async def run(self) -> None:
        """Tick in real time until the session ends or stop() is called."""
        self._stopped = False
        self.last_tick = self.clock()
        while not self._stopped and not self.session.is_over:
            await self.sleep(self.frame_ms / 1000)
            self.frame()
