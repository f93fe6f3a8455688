"""
splicer.playback - Cooperative playback clock.

The clock advances a cursor over the arrangement from a repeating timer
callback: every ``tick_interval`` seconds it moves the cursor by
``tick_interval * speed`` and seeks there. There is no drift correction
against the wall clock; the tick interval is the only time base.

Pausing or stopping cancels the pending timer before returning, and every
scheduled callback carries a generation number so a callback that was
already queued when playback halted does nothing.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from enum import Enum
from typing import Protocol

from splicer.config import SplicerConfig
from splicer.events import CURSOR_MOVED, PLAYBACK_ENDED, STATE_CHANGED, EventBus
from splicer.exceptions import ValidationError
from splicer.logging import get_logger
from splicer.utils import require_finite

log = get_logger("playback")

NOMINAL_FRAME_RATE = 30.0


class PlaybackState(str, Enum):
    STOPPED = "stopped"
    PAUSED = "paused"
    PLAYING = "playing"


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle: ...


class AsyncioScheduler:
    """Schedules clock ticks on an asyncio event loop."""

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop

    def call_later(self, delay: float, callback: Callable[[], None]) -> asyncio.TimerHandle:
        loop = self._loop or asyncio.get_running_loop()
        return loop.call_later(delay, callback)


class PlaybackClock:
    """Play/pause/stop/seek transport over a timeline of ``duration_source()`` seconds.

    Args:
        duration_source: Returns the current total duration; read on every seek
        scheduler: Timer provider; None means the host calls ``tick()`` itself
        tick_interval: Seconds between ticks, also the per-tick advance at speed 1
        speed: Playback speed multiplier
        frame_rate: Scrub granularity for ``frame_step``
        end_policy: "hold" keeps the cursor at the end on auto-stop, "rewind" returns it to 0
        events: Bus receiving state_changed, cursor_moved and ended
    """

    def __init__(
        self,
        duration_source: Callable[[], float],
        scheduler: Scheduler | None = None,
        tick_interval: float = 0.033,
        speed: float = 1.0,
        frame_rate: float = NOMINAL_FRAME_RATE,
        end_policy: str = "hold",
        events: EventBus | None = None,
    ) -> None:
        if tick_interval <= 0:
            raise ValueError("tick_interval must be positive")
        if end_policy not in ("hold", "rewind"):
            raise ValueError(f"Unknown end_policy: {end_policy}")
        self._duration_source = duration_source
        self._scheduler = scheduler
        self.tick_interval = tick_interval
        self.frame_rate = frame_rate
        self.end_policy = end_policy
        self.events = events or EventBus()

        self._state = PlaybackState.STOPPED
        self._cursor = 0.0
        self._speed = 1.0
        self._handle: TimerHandle | None = None
        self._generation = 0
        self.set_speed(speed)

    @classmethod
    def from_config(
        cls,
        config: SplicerConfig,
        duration_source: Callable[[], float],
        scheduler: Scheduler | None = None,
        events: EventBus | None = None,
    ) -> PlaybackClock:
        return cls(
            duration_source,
            scheduler=scheduler,
            tick_interval=config.tick_interval,
            speed=config.playback_speed,
            frame_rate=config.frame_rate,
            end_policy=config.playback_end,
            events=events,
        )

    @property
    def state(self) -> PlaybackState:
        return self._state

    @property
    def cursor(self) -> float:
        return self._cursor

    @property
    def speed(self) -> float:
        return self._speed

    @property
    def is_playing(self) -> bool:
        return self._state == PlaybackState.PLAYING

    def total_duration(self) -> float:
        return max(0.0, self._duration_source())

    def set_speed(self, speed: float) -> None:
        """Change the speed multiplier; applies from the next tick."""
        speed = require_finite(speed, "speed")
        if speed <= 0:
            raise ValidationError(f"speed must be positive, got {speed}")
        self._speed = speed

    def play(self) -> None:
        if self._state == PlaybackState.PLAYING:
            return
        total = self.total_duration()
        if total <= 0:
            log.debug("play ignored: timeline is empty")
            return
        if self._cursor >= total:
            self._move_cursor(0.0)
        self._set_state(PlaybackState.PLAYING)
        self._schedule()

    def pause(self) -> None:
        if self._state != PlaybackState.PLAYING:
            return
        self._cancel()
        self._set_state(PlaybackState.PAUSED)

    def stop(self) -> None:
        self._cancel()
        self._move_cursor(0.0)
        self._set_state(PlaybackState.STOPPED)

    def toggle(self) -> None:
        if self.is_playing:
            self.pause()
        else:
            self.play()

    def seek(self, seconds: float) -> float:
        """Move the cursor to ``seconds`` clamped to [0, total]. State is unchanged
        unless playback reaches the end, which auto-stops the clock."""
        seconds = require_finite(seconds, "seek time")
        total = self.total_duration()
        self._move_cursor(min(max(seconds, 0.0), total))
        if self._state == PlaybackState.PLAYING and self._cursor >= total:
            self._finish(total)
        return self._cursor

    def frame_step(self, direction: int | str = 1) -> float:
        """Step one nominal frame forward (1, "forward") or backward (-1, "backward")."""
        if direction in ("forward", 1):
            step = 1.0
        elif direction in ("backward", -1):
            step = -1.0
        else:
            raise ValidationError(f"Unknown frame step direction: {direction!r}")
        return self.seek(self._cursor + step / self.frame_rate)

    def tick(self) -> None:
        """Advance by one tick if playing."""
        if self._state != PlaybackState.PLAYING:
            return
        self.seek(self._cursor + self.tick_interval * self._speed)

    def _schedule(self) -> None:
        if self._scheduler is None:
            return
        generation = self._generation
        self._handle = self._scheduler.call_later(
            self.tick_interval, lambda: self._on_timer(generation)
        )

    def _on_timer(self, generation: int) -> None:
        if generation != self._generation or self._state != PlaybackState.PLAYING:
            return
        self._handle = None
        self.tick()
        # a callback that paused and resumed during the tick has already rescheduled
        if generation == self._generation and self._state == PlaybackState.PLAYING:
            self._schedule()

    def _cancel(self) -> None:
        self._generation += 1
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _finish(self, total: float) -> None:
        self._cancel()
        self._move_cursor(total if self.end_policy == "hold" else 0.0)
        self._set_state(PlaybackState.STOPPED)
        log.debug("playback reached end at %.3fs", total)
        self.events.emit(PLAYBACK_ENDED, cursor=self._cursor)

    def _move_cursor(self, cursor: float) -> None:
        if cursor != self._cursor:
            self._cursor = cursor
            self.events.emit(CURSOR_MOVED, cursor=cursor)

    def _set_state(self, state: PlaybackState) -> None:
        if state != self._state:
            previous = self._state
            self._state = state
            self.events.emit(STATE_CHANGED, state=state, previous=previous)
