"""Tests for splicer.scale module."""

from __future__ import annotations

import math

import pytest

from splicer.config import SplicerConfig
from splicer.exceptions import ValidationError
from splicer.models import Transition
from splicer.scale import TimelineScale
from tests.conftest import make_clip


class TestZoom:
    def test_default_zoom(self) -> None:
        scale = TimelineScale()
        assert scale.zoom == 50
        assert scale.zoom_percentage() == 25

    def test_zoom_clamped_to_max(self) -> None:
        scale = TimelineScale()
        assert scale.set_zoom(500) == 200
        assert scale.zoom == 200

    def test_zoom_clamped_to_min(self) -> None:
        scale = TimelineScale()
        assert scale.set_zoom(1) == 10

    def test_zoom_rejects_nan(self) -> None:
        scale = TimelineScale()
        with pytest.raises(ValidationError):
            scale.set_zoom(math.nan)
        assert scale.zoom == 50

    def test_zoom_in_and_out(self) -> None:
        scale = TimelineScale()
        assert scale.zoom_in() == pytest.approx(75)
        assert scale.zoom_out() == pytest.approx(50)

    def test_zoom_in_stops_at_max(self) -> None:
        scale = TimelineScale(zoom=180)
        assert scale.zoom_in() == 200
        assert scale.zoom_in() == 200

    def test_invalid_bounds(self) -> None:
        with pytest.raises(ValueError):
            TimelineScale(min_zoom=100, max_zoom=50)

    def test_from_config(self) -> None:
        config = SplicerConfig(default_zoom=30, min_zoom=5, max_zoom=100, label_gutter_px=0)
        scale = TimelineScale.from_config(config)
        assert scale.zoom == 30
        assert scale.max_zoom == 100
        assert scale.label_gutter_px == 0


class TestFitToWindow:
    def test_fit_subtracts_gutter(self) -> None:
        scale = TimelineScale()
        assert scale.fit_to_window(1080, 10) == pytest.approx(100)

    def test_fit_clamps(self) -> None:
        scale = TimelineScale()
        assert scale.fit_to_window(1080, 1000) == 10
        assert scale.fit_to_window(1080, 0.5) == 200

    def test_fit_empty_timeline_keeps_zoom(self) -> None:
        scale = TimelineScale(zoom=70)
        assert scale.fit_to_window(1080, 0) == 70


class TestMapping:
    def test_time_pixel_roundtrip(self) -> None:
        scale = TimelineScale(zoom=40)
        assert scale.time_to_pixel(2.5) == 100
        assert scale.pixel_to_time(100) == 2.5

    def test_clip_geometry(self) -> None:
        scale = TimelineScale(zoom=20)
        clip = make_clip("a", 3.0, 2.0)
        assert scale.clip_geometry(clip) == (60.0, 40.0)

    def test_transition_marker_centred_on_position(self) -> None:
        scale = TimelineScale(zoom=100)
        transition = Transition(
            id="t", from_clip_id="a", to_clip_id="b", type="dissolve", duration=0.5, position=4.0
        )
        assert scale.transition_marker(transition) == (375.0, 50.0)


class TestRuler:
    def test_tick_interval_by_zoom(self) -> None:
        assert TimelineScale(zoom=60).tick_interval() == 1
        assert TimelineScale(zoom=25).tick_interval() == 2
        assert TimelineScale(zoom=10).tick_interval() == 5

    def test_ruler_ticks(self) -> None:
        ticks = TimelineScale(zoom=50).ruler_ticks(6)
        assert [t.time for t in ticks] == [0, 1, 2, 3, 4, 5, 6]
        assert [t.major for t in ticks] == [True, False, False, False, False, True, False]
        assert ticks[5].label == "0:05:00"
        assert ticks[1].label is None
        assert ticks[2].pixel == 100

    def test_coarse_ruler(self) -> None:
        ticks = TimelineScale(zoom=10).ruler_ticks(20)
        assert [t.time for t in ticks] == [0, 5, 10, 15, 20]
        assert all(t.major for t in ticks)
