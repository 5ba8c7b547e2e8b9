"""
Unit tests for routesim/engine/clock.py
"""

import pytest

from routesim.engine.clock import PlaybackClock


class TestPlaybackClockTime:
    """Test suite for time keeping."""

    def test_initialization(self):
        """Test that clock initializes with time zero."""
        clock = PlaybackClock()
        assert clock.now() == 0, "Clock should start at time 0"
        assert clock.pending() == 0

    def test_advance_to_float_converts_to_int(self):
        """Test that advance_to converts float inputs to integers."""
        clock = PlaybackClock()
        clock.advance_to(5.7)
        assert clock.now() == 5
        assert isinstance(clock.now(), int)

    def test_advance_to_same_time(self):
        """Test advancing to the current time (no-op)."""
        clock = PlaybackClock()
        clock.advance_to(10)
        clock.advance_to(10)
        assert clock.now() == 10

    def test_advance_to_backwards_raises_error(self):
        """Test that attempting to move backwards raises ValueError."""
        clock = PlaybackClock()
        clock.advance_to(100)

        with pytest.raises(ValueError) as exc_info:
            clock.advance_to(50)

        assert "Cannot move clock backwards from 100 to 50" in str(exc_info.value)
        assert clock.now() == 100, "Clock time should not change after error"

    def test_advance_by_delta(self):
        clock = PlaybackClock()
        clock.advance(30)
        clock.advance(12)
        assert clock.now() == 42

        with pytest.raises(ValueError):
            clock.advance(-1)

    def test_reset_drops_timers(self):
        """Test that reset returns to zero and forgets scheduled work."""
        clock = PlaybackClock()
        fired = []
        clock.call_later(10, lambda: fired.append("late"))
        clock.call_soon(lambda: fired.append("soon"))
        clock.advance_to(5)

        clock.reset()
        clock.advance_to(50)

        assert clock.now() == 50
        assert fired == ["soon"]
        assert clock.pending() == 0

    def test_reset_cancels_handles(self):
        clock = PlaybackClock()
        one_shot = clock.call_later(10, lambda: None)
        repeating = clock.call_repeating(5, lambda: None)

        clock.reset()

        assert not one_shot.active
        assert not repeating.active


class TestPlaybackClockTimers:
    """Test suite for one-shot and repeating timers."""

    def test_call_later_fires_at_deadline(self):
        clock = PlaybackClock()
        seen = []
        clock.call_later(100, lambda: seen.append(clock.now()))

        clock.advance_to(99)
        assert seen == []

        clock.advance_to(100)
        assert seen == [100]

        clock.advance_to(500)
        assert seen == [100], "One-shot timers fire once"

    def test_timers_fire_in_deadline_then_schedule_order(self):
        clock = PlaybackClock()
        order = []
        clock.call_later(20, lambda: order.append("b"))
        clock.call_later(10, lambda: order.append("a"))
        clock.call_later(20, lambda: order.append("c"))

        clock.advance_to(20)

        assert order == ["a", "b", "c"]

    def test_repeating_timer(self):
        """Test that a repeating timer fires once per interval."""
        clock = PlaybackClock()
        ticks = []
        clock.call_repeating(100, lambda: ticks.append(clock.now()))

        clock.advance_to(350)

        assert ticks == [100, 200, 300]
        assert clock.now() == 350

    def test_repeating_timer_cancelled_from_callback(self):
        clock = PlaybackClock()
        ticks = []

        def tick():
            ticks.append(clock.now())
            if len(ticks) == 2:
                handle.cancel()

        handle = clock.call_repeating(10, tick)
        clock.advance_to(100)

        assert ticks == [10, 20]
        assert not handle.active
        assert clock.next_deadline() is None

    def test_cancel_before_deadline(self):
        clock = PlaybackClock()
        fired = []
        handle = clock.call_later(10, lambda: fired.append(True))

        clock.cancel(handle)
        clock.cancel(None)
        clock.advance_to(20)

        assert fired == []

    def test_invalid_schedules(self):
        clock = PlaybackClock()

        with pytest.raises(ValueError):
            clock.call_repeating(0, lambda: None)
        with pytest.raises(ValueError):
            clock.call_later(-5, lambda: None)
        with pytest.raises(TypeError):
            clock.call_later(5, "not callable")
        with pytest.raises(TypeError):
            clock.call_soon(None)

    def test_call_soon_runs_on_next_turn(self):
        """Test that call_soon defers work until the clock is driven."""
        clock = PlaybackClock()
        seen = []
        clock.call_soon(lambda: seen.append("first"))

        assert seen == []
        assert clock.pending() == 1

        clock.run_pending()
        assert seen == ["first"]

    def test_call_soon_runs_before_timers_due_now(self):
        clock = PlaybackClock()
        order = []
        clock.call_later(0, lambda: order.append("timer"))
        clock.call_soon(lambda: order.append("soon"))

        clock.advance_to(0)

        assert order == ["soon", "timer"]

    def test_callbacks_scheduled_during_callbacks(self):
        clock = PlaybackClock()
        order = []

        def first():
            order.append("first")
            clock.call_soon(lambda: order.append("chained"))

        clock.call_later(5, first)
        clock.advance_to(5)

        assert order == ["first", "chained"]


class TestRunRealtime:
    """Test suite for the monotonic driver."""

    def test_returns_when_idle(self):
        clock = PlaybackClock()
        clock.run_realtime()
        assert clock.now() == 0

    def test_runs_short_timers(self):
        clock = PlaybackClock()
        fired = []
        clock.call_later(15, lambda: fired.append(clock.now()))

        clock.run_realtime()

        assert len(fired) == 1
        assert fired[0] == 15

    def test_until_stops_repeating_timer(self):
        clock = PlaybackClock()
        ticks = []
        clock.call_repeating(5, lambda: ticks.append(clock.now()))

        clock.run_realtime(until=lambda: len(ticks) >= 3)

        assert len(ticks) >= 3
        assert ticks[:3] == [5, 10, 15]
