"""
Frame pacing primitives for the race animator.

A clock hands out one callback per frame and passes it a monotonic timestamp
in milliseconds. ManualFrameClock is stepped explicitly (tests, headless
replays); AsyncioFrameClock fires on a fixed interval inside an event loop.
"""
from __future__ import annotations

import asyncio
import itertools
from typing import Callable, Dict, Optional, Protocol

FrameCallback = Callable[[float], None]


class FrameClock(Protocol):
    def request_frame(self, callback: FrameCallback) -> int:
        ...

    def cancel_frame(self, handle: int) -> None:
        ...


class ManualFrameClock:
    def __init__(self, start_ms: float = 0.0, frame_interval_ms: float = 1000.0 / 60.0) -> None:
        self.now = start_ms
        self.frame_interval_ms = frame_interval_ms
        self._pending: Dict[int, FrameCallback] = {}
        self._handles = itertools.count(1)

    @property
    def pending(self) -> int:
        return len(self._pending)

    def request_frame(self, callback: FrameCallback) -> int:
        handle = next(self._handles)
        self._pending[handle] = callback
        return handle

    def cancel_frame(self, handle: int) -> None:
        self._pending.pop(handle, None)

    def tick(self, delta_ms: Optional[float] = None) -> int:
        """Advances the clock and runs every callback queued before this tick. Returns how many ran."""
        self.now += self.frame_interval_ms if delta_ms is None else delta_ms
        due = self._pending
        self._pending = {}
        for callback in due.values():
            callback(self.now)
        return len(due)

    def run_until_idle(self, max_frames: int = 100_000, delta_ms: Optional[float] = None) -> int:
        frames = 0
        while self._pending and frames < max_frames:
            self.tick(delta_ms)
            frames += 1
        return frames


class AsyncioFrameClock:
    def __init__(self, frame_rate: int = 60, loop: Optional[asyncio.AbstractEventLoop] = None) -> None:
        if frame_rate <= 0:
            raise ValueError("frame_rate must be positive")
        self.frame_rate = frame_rate
        self._loop = loop
        self._timers: Dict[int, asyncio.TimerHandle] = {}
        self._handles = itertools.count(1)

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    @property
    def pending(self) -> int:
        return len(self._timers)

    def request_frame(self, callback: FrameCallback) -> int:
        handle = next(self._handles)
        self._timers[handle] = self.loop.call_later(1.0 / self.frame_rate, self._fire, handle, callback)
        return handle

    def cancel_frame(self, handle: int) -> None:
        timer = self._timers.pop(handle, None)
        if timer is not None:
            timer.cancel()

    def _fire(self, handle: int, callback: FrameCallback) -> None:
        self._timers.pop(handle, None)
        callback(self.loop.time() * 1000.0)

    async def wait_idle(self) -> None:
        while self._timers:
            await asyncio.sleep(1.0 / self.frame_rate)
