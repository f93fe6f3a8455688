"""Tests for splicer.playback module."""

from __future__ import annotations

import math

import pytest

from splicer.config import SplicerConfig
from splicer.events import CURSOR_MOVED, PLAYBACK_ENDED, STATE_CHANGED, EventBus
from splicer.exceptions import ValidationError
from splicer.playback import PlaybackClock, PlaybackState
from tests.conftest import ManualScheduler


def make_clock(total: float = 10.0, **kwargs) -> PlaybackClock:
    return PlaybackClock(lambda: total, **kwargs)


class TestTransport:
    def test_initial_state(self) -> None:
        clock = make_clock()
        assert clock.state == PlaybackState.STOPPED
        assert clock.cursor == 0.0
        assert clock.speed == 1.0

    def test_play_pause_stop(self) -> None:
        clock = make_clock()
        clock.play()
        assert clock.is_playing
        clock.seek(3.0)
        clock.pause()
        assert clock.state == PlaybackState.PAUSED
        assert clock.cursor == 3.0
        clock.stop()
        assert clock.state == PlaybackState.STOPPED
        assert clock.cursor == 0.0

    def test_toggle(self) -> None:
        clock = make_clock()
        clock.toggle()
        assert clock.state == PlaybackState.PLAYING
        clock.toggle()
        assert clock.state == PlaybackState.PAUSED

    def test_play_empty_timeline_is_noop(self) -> None:
        clock = make_clock(total=0.0)
        clock.play()
        assert clock.state == PlaybackState.STOPPED

    def test_play_at_end_restarts(self) -> None:
        clock = make_clock(total=5.0)
        clock.seek(5.0)
        clock.play()
        assert clock.cursor == 0.0
        assert clock.is_playing


class TestSeek:
    def test_seek_clamps(self) -> None:
        clock = make_clock(total=10.0)
        assert clock.seek(-3) == 0.0
        assert clock.seek(42) == 10.0

    def test_seek_rejects_nan(self) -> None:
        clock = make_clock()
        with pytest.raises(ValidationError):
            clock.seek(math.nan)

    def test_seek_to_end_while_playing_stops(self) -> None:
        clock = make_clock(total=10.0)
        clock.play()
        clock.seek(10.0)
        assert clock.state == PlaybackState.STOPPED
        assert clock.cursor == 10.0

    def test_seek_while_paused_keeps_state(self) -> None:
        clock = make_clock(total=10.0)
        clock.play()
        clock.pause()
        clock.seek(10.0)
        assert clock.state == PlaybackState.PAUSED

    def test_rewind_end_policy(self) -> None:
        clock = make_clock(total=10.0, end_policy="rewind")
        clock.play()
        clock.seek(12.0)
        assert clock.state == PlaybackState.STOPPED
        assert clock.cursor == 0.0

    def test_frame_step(self) -> None:
        clock = make_clock(frame_rate=30)
        clock.seek(1.0)
        assert clock.frame_step("forward") == pytest.approx(1.0 + 1 / 30)
        assert clock.frame_step(-1) == pytest.approx(1.0)

    def test_frame_step_invalid_direction(self) -> None:
        with pytest.raises(ValidationError):
            make_clock().frame_step("sideways")


class TestTicks:
    def test_tick_advances_by_speed(self) -> None:
        clock = make_clock()
        clock.set_speed(2.0)
        clock.play()
        clock.tick()
        assert clock.cursor == pytest.approx(0.066)

    def test_tick_ignored_when_paused(self) -> None:
        clock = make_clock()
        clock.tick()
        assert clock.cursor == 0.0

    def test_invalid_speed(self) -> None:
        clock = make_clock()
        with pytest.raises(ValidationError):
            clock.set_speed(0)
        with pytest.raises(ValidationError):
            clock.set_speed(math.inf)
        assert clock.speed == 1.0

    def test_scheduler_drives_playback(self, scheduler: ManualScheduler) -> None:
        clock = make_clock(total=1.0, tick_interval=0.1, scheduler=scheduler)
        clock.play()
        scheduler.advance(0.35)
        assert clock.cursor == pytest.approx(0.3)
        scheduler.advance(1.0)
        assert clock.state == PlaybackState.STOPPED
        assert clock.cursor == 1.0
        assert scheduler.active() == []

    def test_pause_cancels_timer(self, scheduler: ManualScheduler) -> None:
        clock = make_clock(total=5.0, tick_interval=0.1, scheduler=scheduler)
        clock.play()
        scheduler.advance(0.25)
        clock.pause()
        position = clock.cursor
        scheduler.advance(1.0)
        assert clock.cursor == position
        assert scheduler.active() == []

    def test_stale_callback_does_nothing(self, scheduler: ManualScheduler) -> None:
        clock = make_clock(total=5.0, tick_interval=0.1, scheduler=scheduler)
        clock.play()
        stale = scheduler.pending[0]
        clock.pause()
        clock.play()
        stale.callback()
        assert clock.cursor == 0.0

    def test_resume_inside_tick_keeps_single_timer(self, scheduler: ManualScheduler) -> None:
        events = EventBus()
        clock = make_clock(total=5.0, tick_interval=0.1, scheduler=scheduler, events=events)
        resumed = []

        def pause_and_resume(cursor: float) -> None:
            if not resumed:
                resumed.append(cursor)
                clock.pause()
                clock.play()

        events.subscribe(CURSOR_MOVED, pause_and_resume)
        clock.play()
        scheduler.advance(0.1)
        assert len(scheduler.active()) == 1
        scheduler.advance(1.0)
        assert clock.cursor == pytest.approx(1.1)
        assert len(scheduler.active()) == 1

    def test_duration_read_live(self, scheduler: ManualScheduler) -> None:
        total = [1.0]
        clock = PlaybackClock(lambda: total[0], scheduler=scheduler, tick_interval=0.1)
        clock.play()
        total[0] = 0.15
        scheduler.advance(0.2)
        assert clock.state == PlaybackState.STOPPED
        assert clock.cursor == 0.15

    def test_from_config(self) -> None:
        config = SplicerConfig(tick_interval=0.05, playback_speed=1.5, playback_end="rewind")
        clock = PlaybackClock.from_config(config, lambda: 3.0)
        assert clock.tick_interval == 0.05
        assert clock.speed == 1.5
        assert clock.end_policy == "rewind"


class TestEvents:
    def test_events_emitted(self) -> None:
        events = EventBus()
        received: list[tuple] = []
        events.subscribe(STATE_CHANGED, lambda state, previous: received.append(("state", state)))
        events.subscribe(CURSOR_MOVED, lambda cursor: received.append(("cursor", cursor)))
        events.subscribe(PLAYBACK_ENDED, lambda cursor: received.append(("ended", cursor)))
        clock = make_clock(total=2.0, events=events)

        clock.play()
        clock.seek(2.0)

        assert received == [
            ("state", PlaybackState.PLAYING),
            ("cursor", 2.0),
            ("state", PlaybackState.STOPPED),
            ("ended", 2.0),
        ]
