"""
Playback clock for the routesim protocol simulator.

This clock decouples event playback from wall-clock time. Time is an
integer count of milliseconds and only moves when the owner advances it,
either explicitly (tests, headless replays) or from a monotonic source
(``run_realtime``). Timers fire on the thread that advances the clock,
one callback at a time, so whatever they touch needs no locking.
"""

from __future__ import annotations

import heapq
import time
from collections import deque
from collections.abc import Callable
from dataclasses import dataclass, field


@dataclass(order=True)
class TimerHandle:
    deadline: int
    sequence: int
    callback: Callable[[], None] = field(compare=False)
    interval: int | None = field(default=None, compare=False)
    cancelled: bool = field(default=False, compare=False)

    def cancel(self) -> None:
        self.cancelled = True

    @property
    def active(self) -> bool:
        return not self.cancelled


class PlaybackClock:
    """
    A simulated millisecond clock with one-shot and repeating timers.

    Due timers fire in deadline order, ties in the order they were
    scheduled. ``call_soon`` callbacks run on the next turn, ahead of
    any timer due at the same time.
    """

    def __init__(self) -> None:
        self._current_time: int = 0
        self._timers: list[TimerHandle] = []
        self._soon: deque[Callable[[], None]] = deque()
        self._sequence = 0

    def now(self) -> int:
        """
        Return the current simulated time in milliseconds.
        """
        return self._current_time

    # ---------------------------------------------------------------- timers

    def call_soon(self, callback: Callable[[], None]) -> None:
        """
        Queue ``callback`` for the next turn of the clock.
        """
        if not callable(callback):
            raise TypeError("callback must be callable")
        self._soon.append(callback)

    def call_later(self, delay: int, callback: Callable[[], None]) -> TimerHandle:
        return self._schedule(delay, callback, repeat=False)

    def call_repeating(self, interval: int, callback: Callable[[], None]) -> TimerHandle:
        """
        Fire ``callback`` every ``interval`` ms until the handle is cancelled.

        The first call happens one interval from now.
        """
        if interval <= 0:
            raise ValueError(f"Repeating interval must be positive, got {interval}")
        return self._schedule(interval, callback, repeat=True)

    def cancel(self, handle: TimerHandle | None) -> None:
        if handle is not None:
            handle.cancel()

    def pending(self) -> int:
        """
        Number of queued callbacks and live timers.
        """
        return len(self._soon) + sum(1 for t in self._timers if not t.cancelled)

    def next_deadline(self) -> int | None:
        self._discard_cancelled()
        return self._timers[0].deadline if self._timers else None

    # -------------------------------------------------------------- movement

    def run_pending(self) -> None:
        """
        Run every callback queued with ``call_soon``, including ones queued
        while draining.
        """
        while self._soon:
            self._soon.popleft()()

    def advance_to(self, target_time: int | float) -> None:
        """
        Advance the clock to the specified time, firing every timer due on
        the way.

        The clock may only move forwards. Attempting to move backwards is
        treated as a caller error.
        """
        target = int(target_time)

        if target < self._current_time:
            raise ValueError(
                f"Cannot move clock backwards from {self._current_time} to {target}"
            )

        self.run_pending()
        while True:
            self._discard_cancelled()
            if not self._timers or self._timers[0].deadline > target:
                break

            timer = heapq.heappop(self._timers)
            self._current_time = timer.deadline
            timer.callback()
            if timer.interval is not None and not timer.cancelled:
                timer.deadline += timer.interval
                heapq.heappush(self._timers, timer)
            self.run_pending()

        self._current_time = target

    def advance(self, delta: int | float) -> None:
        if delta < 0:
            raise ValueError(f"Cannot advance the clock by a negative amount: {delta}")
        self.advance_to(self._current_time + int(delta))

    def run_realtime(
        self,
        until: Callable[[], bool] | None = None,
        poll_ms: int = 5,
    ) -> None:
        """
        Drive the clock from ``time.monotonic()`` until nothing is pending
        or ``until()`` returns True.
        """
        origin = time.monotonic() - self._current_time / 1000.0

        while True:
            self.run_pending()
            if until is not None and until():
                return
            deadline = self.next_deadline()
            if deadline is None:
                return

            elapsed_ms = int((time.monotonic() - origin) * 1000)
            if elapsed_ms < deadline:
                time.sleep(min(deadline - elapsed_ms, poll_ms) / 1000.0)
                continue
            self.advance_to(max(elapsed_ms, self._current_time))

    def reset(self) -> None:
        """
        Reset the clock to time zero and cancel every timer.
        """
        self._current_time = 0
        for timer in self._timers:
            timer.cancel()
        self._timers.clear()
        self._soon.clear()

    # ------------------------------------------------------------- internals

    def _schedule(self, delay: int, callback: Callable[[], None], repeat: bool) -> TimerHandle:
        if delay < 0:
            raise ValueError("delay must be non-negative")
        if not callable(callback):
            raise TypeError("callback must be callable")

        self._sequence += 1
        handle = TimerHandle(
            deadline=self._current_time + int(delay),
            sequence=self._sequence,
            callback=callback,
            interval=int(delay) if repeat else None,
        )
        heapq.heappush(self._timers, handle)
        return handle

    def _discard_cancelled(self) -> None:
        while self._timers and self._timers[0].cancelled:
            heapq.heappop(self._timers)
