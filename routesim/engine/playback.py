"""
Event playback for the routesim protocol simulator.

The player replays a finished event trace at a controlled pace. It is a
small state machine (stopped, playing, paused) with a cursor into a fixed
list of events, driven by a repeating timer on a PlaybackClock.

Each tick hands exactly one event to the listener and then moves the
cursor. Pausing, stopping and delay changes take effect between ticks,
never in the middle of a dispatch. The listener runs on whichever thread
drives the clock, which must be the thread that owns the rendering state.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from enum import Enum
from typing import Protocol

from routesim.engine.clock import PlaybackClock, TimerHandle
from routesim.engine.events import ProtocolEvent

LOGGER = logging.getLogger(__name__)

DEFAULT_DELAY_MS = 400
MIN_DELAY_MS = 10


class PlaybackListener(Protocol):
    def on_event(self, event: ProtocolEvent, index: int, total: int) -> None:
        """
        Apply or display ``event``; ``index`` is 0-based, ``total`` is the
        length of the trace.
        """

    def on_finished(self) -> None:
        """
        Called when playback reaches the end of the trace.
        """


class PlaybackState(Enum):
    STOPPED = "stopped"
    PLAYING = "playing"
    PAUSED = "paused"


class EventPlayer:
    """
    Replays protocol events to a listener with transport controls.

    A listener that raises is logged and otherwise ignored, so a faulty
    renderer cannot stall the transport.
    """

    def __init__(
        self,
        events: Iterable[ProtocolEvent] | None,
        listener: PlaybackListener,
        clock: PlaybackClock | None = None,
        delay_ms: int = DEFAULT_DELAY_MS,
    ) -> None:
        self._events: tuple[ProtocolEvent, ...] = tuple(events or ())
        self._listener = listener
        self.clock = clock if clock is not None else PlaybackClock()
        self._delay_ms = max(MIN_DELAY_MS, int(delay_ms))
        self._index = 0
        self._timer: TimerHandle | None = None
        self._state = PlaybackState.STOPPED

    # ------------------------------------------------------------- transport

    def play(self) -> None:
        """
        Start or resume playback from the current cursor.
        """
        if not self._events:
            # nothing to dispatch, report completion on the next turn
            self.clock.call_soon(self._notify_finished)
            return

        if self.is_playing():
            return

        self._start_timer()
        self._state = PlaybackState.PLAYING

    def pause(self) -> None:
        """
        Halt the tick, keeping the cursor where it is.
        """
        self._stop_timer()
        self._state = PlaybackState.PAUSED

    def step_forward(self) -> None:
        """
        Dispatch one event right now, pausing first if playing.
        """
        self.pause()
        self._tick()

    def reset(self) -> None:
        """
        Pause and rewind the cursor to the first event.
        """
        self._stop_timer()
        self._index = 0
        self._state = PlaybackState.STOPPED

    stop = reset

    def set_delay(self, delay_ms: int) -> None:
        """
        Change the interval between events.

        While playing, the tick is restarted with the new interval. The
        cursor is not touched, so no event is skipped or repeated.
        """
        self._delay_ms = max(MIN_DELAY_MS, int(delay_ms))
        if self.is_playing():
            self._stop_timer()
            self._start_timer()

    # ---------------------------------------------------------------- status

    def is_playing(self) -> bool:
        return self._timer is not None and self._timer.active

    def current_index(self) -> int:
        """
        Index of the next event to dispatch.
        """
        return self._index

    @property
    def state(self) -> PlaybackState:
        return self._state

    @property
    def delay_ms(self) -> int:
        return self._delay_ms

    @property
    def total(self) -> int:
        return len(self._events)

    @property
    def finished(self) -> bool:
        return self._index >= len(self._events)

    # ------------------------------------------------------------- internals

    def _start_timer(self) -> None:
        self._timer = self.clock.call_repeating(self._delay_ms, self._tick)

    def _stop_timer(self) -> None:
        if self._timer is not None:
            self.clock.cancel(self._timer)
            self._timer = None

    def _tick(self) -> None:
        if self._index >= len(self._events):
            self._stop_timer()
            self._state = PlaybackState.STOPPED
            self._notify_finished()
            return

        index = self._index
        event = self._events[index]
        self._index += 1
        try:
            self._listener.on_event(event, index, len(self._events))
        except Exception:
            LOGGER.exception("playback listener failed on event %d: %s", index, event)

    def _notify_finished(self) -> None:
        try:
            self._listener.on_finished()
        except Exception:
            LOGGER.exception("playback listener failed in on_finished")
