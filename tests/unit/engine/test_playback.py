"""
Unit tests for routesim/engine/playback.py
"""

import logging
from unittest.mock import Mock

from routesim.engine.events import ProtocolEvent
from routesim.engine.playback import (
    DEFAULT_DELAY_MS,
    MIN_DELAY_MS,
    EventPlayer,
    PlaybackState,
)


class TestEventPlayerBasics:
    """Test suite for construction and status."""

    def test_initial_state(self, five_events, listener, clock):
        player = EventPlayer(five_events, listener, clock=clock)

        assert player.state is PlaybackState.STOPPED
        assert player.is_playing() is False
        assert player.current_index() == 0
        assert player.total == 5
        assert player.delay_ms == DEFAULT_DELAY_MS

    def test_none_events_treated_as_empty(self, listener, clock):
        player = EventPlayer(None, listener, clock=clock)
        assert player.total == 0
        assert player.finished

    def test_sequence_is_snapshotted(self, five_events, listener, clock):
        """Test that later changes to the caller's list do not reach the player."""
        player = EventPlayer(five_events, listener, clock=clock)
        five_events.clear()

        assert player.total == 5

    def test_delay_is_clamped(self, listener, clock):
        player = EventPlayer([], listener, clock=clock, delay_ms=1)
        assert player.delay_ms == MIN_DELAY_MS

        player.set_delay(3)
        assert player.delay_ms == MIN_DELAY_MS


class TestEventPlayerTransport:
    """Test suite for play, pause, step and reset."""

    def test_empty_sequence_finishes_on_next_turn(self, listener, clock):
        """Test that play() on nothing reports completion and no events."""
        player = EventPlayer([], listener, clock=clock)

        player.play()
        assert listener.finished == 0, "completion is deferred to the next turn"

        clock.run_pending()

        assert listener.finished == 1
        assert listener.events == []
        assert player.is_playing() is False

    def test_play_dispatches_one_event_per_tick(self, five_events, listener, clock):
        player = EventPlayer(five_events, listener, clock=clock, delay_ms=100)

        player.play()
        assert player.state is PlaybackState.PLAYING
        assert player.is_playing()

        clock.advance_to(99)
        assert listener.events == []

        clock.advance_to(100)
        assert listener.indices == [0]

        clock.advance_to(300)
        assert listener.indices == [0, 1, 2]
        assert player.current_index() == 3

    def test_play_to_end_then_finish(self, five_events, listener, clock):
        """Test that the tick after the last event stops and reports completion."""
        player = EventPlayer(five_events, listener, clock=clock, delay_ms=50)
        player.play()

        clock.advance_to(250)
        assert listener.indices == [0, 1, 2, 3, 4]
        assert listener.finished == 0

        clock.advance_to(300)
        assert listener.finished == 1
        assert player.is_playing() is False
        assert player.state is PlaybackState.STOPPED

        clock.advance_to(1000)
        assert listener.finished == 1
        assert len(listener.events) == 5

    def test_listener_receives_event_index_and_total(self, five_events, clock):
        listener = Mock()
        player = EventPlayer(five_events, listener, clock=clock, delay_ms=10)
        player.play()
        clock.advance_to(10)

        listener.on_event.assert_called_once_with(five_events[0], 0, 5)

    def test_play_twice_does_not_double_tick(self, five_events, listener, clock):
        player = EventPlayer(five_events, listener, clock=clock, delay_ms=100)
        player.play()
        player.play()

        clock.advance_to(100)
        assert listener.indices == [0]

    def test_pause_keeps_cursor(self, five_events, listener, clock):
        player = EventPlayer(five_events, listener, clock=clock, delay_ms=100)
        player.play()
        clock.advance_to(200)

        player.pause()
        assert player.state is PlaybackState.PAUSED
        assert player.is_playing() is False

        clock.advance_to(1000)
        assert listener.indices == [0, 1]

        player.play()
        clock.advance_to(1100)
        assert listener.indices == [0, 1, 2]

    def test_step_forward_without_play(self, five_events, listener, clock):
        """Test that three steps dispatch events 0, 1, 2 and leave the player paused."""
        player = EventPlayer(five_events, listener, clock=clock)

        player.step_forward()
        player.step_forward()
        player.step_forward()

        assert listener.indices == [0, 1, 2]
        assert [event for event, _, _ in listener.events] == five_events[:3]
        assert player.state is PlaybackState.PAUSED
        assert player.is_playing() is False
        assert player.current_index() == 3

    def test_step_forward_while_playing_pauses(self, five_events, listener, clock):
        player = EventPlayer(five_events, listener, clock=clock, delay_ms=100)
        player.play()
        clock.advance_to(100)

        player.step_forward()

        assert listener.indices == [0, 1]
        assert player.state is PlaybackState.PAUSED
        clock.advance_to(1000)
        assert listener.indices == [0, 1]

    def test_step_past_end_reports_finished(self, listener, clock):
        player = EventPlayer([ProtocolEvent.info("only")], listener, clock=clock)

        player.step_forward()
        player.step_forward()

        assert listener.indices == [0]
        assert listener.finished == 1
        assert player.state is PlaybackState.STOPPED

    def test_reset_rewinds(self, five_events, listener, clock):
        player = EventPlayer(five_events, listener, clock=clock, delay_ms=100)
        player.play()
        clock.advance_to(300)

        player.reset()
        assert player.current_index() == 0
        assert player.state is PlaybackState.STOPPED
        assert player.is_playing() is False

        clock.advance_to(1000)
        assert listener.indices == [0, 1, 2]

        player.step_forward()
        assert listener.indices == [0, 1, 2, 0]

    def test_stop_is_reset(self, five_events, listener, clock):
        player = EventPlayer(five_events, listener, clock=clock)
        player.step_forward()
        player.stop()
        assert player.current_index() == 0

    def test_clock_reset_halts_player(self, five_events, listener, clock):
        """Test that a player can be restarted after its clock is reset."""
        player = EventPlayer(five_events, listener, clock=clock, delay_ms=100)
        player.play()
        clock.advance_to(100)

        clock.reset()
        assert not player.is_playing()

        player.play()
        assert player.is_playing()
        clock.advance_to(100)
        assert listener.indices == [0, 1]


class TestEventPlayerDelay:
    """Test suite for delay changes."""

    def test_set_delay_while_playing_keeps_cursor(self, five_events, listener, clock):
        """Test that changing speed mid-playback neither skips nor repeats events."""
        player = EventPlayer(five_events, listener, clock=clock, delay_ms=100)
        player.play()
        clock.advance_to(200)

        player.set_delay(30)
        assert player.is_playing()
        assert player.current_index() == 2

        clock.advance_to(230)
        assert listener.indices == [0, 1, 2]

        player.set_delay(500)
        clock.advance_to(2000)

        assert listener.indices == [0, 1, 2, 3, 4]
        assert listener.finished == 1

    def test_set_delay_while_paused_does_not_start(self, five_events, listener, clock):
        player = EventPlayer(five_events, listener, clock=clock)
        player.set_delay(50)

        clock.advance_to(500)
        assert listener.events == []
        assert player.is_playing() is False

        player.play()
        clock.advance_to(550)
        assert listener.indices == [0]


class TestEventPlayerFaults:
    """Test suite for listener failures."""

    def test_listener_exception_does_not_stop_playback(self, five_events, clock, caplog):
        listener = Mock()
        listener.on_event.side_effect = [None, RuntimeError("render bug"), None, None, None]
        player = EventPlayer(five_events, listener, clock=clock, delay_ms=10)

        with caplog.at_level(logging.ERROR, logger="routesim.engine.playback"):
            player.play()
            clock.advance_to(100)

        assert listener.on_event.call_count == 5
        listener.on_finished.assert_called_once()
        assert player.current_index() == 5
        assert "playback listener failed on event 1" in caplog.text

    def test_on_finished_exception_is_logged(self, clock, caplog):
        listener = Mock()
        listener.on_finished.side_effect = ValueError("boom")
        player = EventPlayer([], listener, clock=clock)

        with caplog.at_level(logging.ERROR, logger="routesim.engine.playback"):
            player.play()
            clock.run_pending()

        listener.on_finished.assert_called_once()
        assert "on_finished" in caplog.text

    def test_step_forward_survives_listener_error(self, five_events, clock):
        listener = Mock()
        listener.on_event.side_effect = RuntimeError("always")
        player = EventPlayer(five_events, listener, clock=clock)

        player.step_forward()
        player.step_forward()

        assert player.current_index() == 2
