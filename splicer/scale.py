"""
splicer.scale - Mapping between timeline seconds and pixels.

A single zoom factor (pixels per second) converts in both directions. Zoom
is always kept inside ``[min_zoom, max_zoom]``; requests outside the range
snap to the nearest bound.
"""

from __future__ import annotations

from dataclasses import dataclass

from splicer.config import SplicerConfig
from splicer.logging import get_logger
from splicer.models import Clip, Transition
from splicer.utils import format_frame_time, require_finite

log = get_logger("scale")


@dataclass(frozen=True)
class RulerTick:
    time: float
    pixel: float
    major: bool
    label: str | None


class TimelineScale:
    """Coordinate mapper for the timeline view."""

    def __init__(
        self,
        zoom: float = 50.0,
        min_zoom: float = 10.0,
        max_zoom: float = 200.0,
        label_gutter_px: float = 80.0,
        zoom_step: float = 1.5,
    ) -> None:
        if min_zoom <= 0 or min_zoom >= max_zoom:
            raise ValueError("zoom bounds must satisfy 0 < min_zoom < max_zoom")
        self.min_zoom = min_zoom
        self.max_zoom = max_zoom
        self.label_gutter_px = label_gutter_px
        self.zoom_step = zoom_step
        self._zoom = min_zoom
        self.set_zoom(zoom)

    @classmethod
    def from_config(cls, config: SplicerConfig) -> TimelineScale:
        return cls(
            zoom=config.default_zoom,
            min_zoom=config.min_zoom,
            max_zoom=config.max_zoom,
            label_gutter_px=config.label_gutter_px,
            zoom_step=config.zoom_step,
        )

    @property
    def zoom(self) -> float:
        return self._zoom

    def set_zoom(self, zoom: float) -> float:
        """Set pixels-per-second, clamped to the zoom bounds. Returns the effective zoom."""
        zoom = require_finite(zoom, "zoom")
        self._zoom = min(max(zoom, self.min_zoom), self.max_zoom)
        return self._zoom

    def zoom_in(self) -> float:
        return self.set_zoom(self._zoom * self.zoom_step)

    def zoom_out(self) -> float:
        return self.set_zoom(self._zoom / self.zoom_step)

    def zoom_percentage(self) -> int:
        return round(self._zoom / self.max_zoom * 100)

    def fit_to_window(self, viewport_width_px: float, total_duration: float) -> float:
        """Choose the zoom that shows the whole arrangement in the viewport.

        The label gutter is subtracted from the viewport first. A zero-length
        arrangement leaves the zoom unchanged.
        """
        viewport_width_px = require_finite(viewport_width_px, "viewport_width_px")
        total_duration = require_finite(total_duration, "total_duration")
        if total_duration <= 0:
            return self._zoom
        usable = viewport_width_px - self.label_gutter_px
        zoom = self.set_zoom(usable / total_duration)
        log.debug("fit %.2fs into %.0fpx -> zoom %.2f", total_duration, viewport_width_px, zoom)
        return zoom

    def time_to_pixel(self, seconds: float) -> float:
        return seconds * self._zoom

    def pixel_to_time(self, x: float) -> float:
        return x / self._zoom

    def clip_geometry(self, clip: Clip) -> tuple[float, float]:
        """(left, width) in pixels for a clip block."""
        return self.time_to_pixel(clip.start_time), self.time_to_pixel(clip.duration)

    def transition_marker(self, transition: Transition) -> tuple[float, float]:
        """(left, width) for a transition marker centred on its stored position.

        Uses only the transition's own position and duration, never the
        current clip geometry.
        """
        width = self.time_to_pixel(transition.duration)
        left = self.time_to_pixel(transition.position) - width / 2
        return left, width

    def tick_interval(self) -> int:
        if self._zoom >= 50:
            return 1
        if self._zoom >= 20:
            return 2
        return 5

    def ruler_ticks(self, duration: float) -> list[RulerTick]:
        """Ruler ticks from 0 to duration; every 5 seconds is a labelled major tick."""
        interval = self.tick_interval()
        ticks = []
        second = 0
        while second <= duration:
            major = second % 5 == 0
            ticks.append(
                RulerTick(
                    time=float(second),
                    pixel=self.time_to_pixel(second),
                    major=major,
                    label=format_frame_time(second) if major else None,
                )
            )
            second += interval
        return ticks
