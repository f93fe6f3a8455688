"""
Test configuration and shared fixtures.
"""

from __future__ import annotations

import json
from collections.abc import Callable
from pathlib import Path

import pytest

from splicer.models import Clip, Timeline, Track, TrackType
from splicer.project import Project


class ManualHandle:
    def __init__(self, scheduler: ManualScheduler, due: float, callback: Callable[[], None]):
        self.scheduler = scheduler
        self.due = due
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """Timer fake: callbacks only run when the test advances time."""

    def __init__(self) -> None:
        self.now = 0.0
        self.pending: list[ManualHandle] = []

    def call_later(self, delay: float, callback: Callable[[], None]) -> ManualHandle:
        handle = ManualHandle(self, self.now + delay, callback)
        self.pending.append(handle)
        return handle

    def active(self) -> list[ManualHandle]:
        return [h for h in self.pending if not h.cancelled]

    def advance(self, seconds: float) -> None:
        end = self.now + seconds
        while True:
            due = [h for h in self.active() if h.due <= end + 1e-9]
            if not due:
                break
            handle = min(due, key=lambda h: h.due)
            self.pending.remove(handle)
            self.now = handle.due
            handle.callback()
        self.now = end


def make_clip(clip_id: str, start: float, duration: float, **kwargs) -> Clip:
    return Clip(
        id=clip_id,
        start_time=start,
        out_point=duration,
        source_duration=kwargs.pop("source_duration", duration),
        **kwargs,
    )


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture
def sample_timeline() -> Timeline:
    """Three contiguous 4s clips on the video track and one audio bed."""
    return Timeline(
        id="demo-timeline",
        project_id="demo",
        tracks=[
            Track(
                id="video-1",
                type=TrackType.VIDEO,
                clips=[
                    make_clip("a", 0.0, 4.0, label="Opening", shot_id="shot-1"),
                    make_clip("b", 4.0, 4.0, label="Middle", shot_id="shot-2"),
                    make_clip("c", 8.0, 4.0, label="Closing", shot_id="shot-3"),
                ],
            ),
            Track(
                id="audio-1",
                type=TrackType.AUDIO,
                clips=[make_clip("vo", 0.0, 10.0, label="Voiceover")],
            ),
        ],
    )


@pytest.fixture
def storyboard_data() -> dict:
    return {
        "shots": [
            {"id": "shot-2", "sequence_number": 2, "label": "Walk", "previous_shot_id": "shot-1",
             "transition_type": "dissolve"},
            {"id": "shot-1", "sequence_number": 1, "label": "Arrive"},
            {"id": "shot-3", "sequence_number": 3, "label": "Leave", "previous_shot_id": "shot-2",
             "transition_type": "motion"},
        ],
        "clips": [
            {"id": "gen-1a", "shot_id": "shot-1", "duration": 3.0, "is_selected": True},
            {"id": "gen-1b", "shot_id": "shot-1", "duration": 9.0},
            {"id": "gen-2a", "shot_id": "shot-2", "duration": 5.0, "is_selected": True},
            {"id": "gen-3a", "shot_id": "shot-3", "duration": 2.5, "is_selected": True},
        ],
    }


@pytest.fixture
def storyboard_file(tmp_path: Path, storyboard_data: dict) -> Path:
    path = tmp_path / "storyboard.json"
    path.write_text(json.dumps(storyboard_data))
    return path


@pytest.fixture
def tmp_project(tmp_path: Path) -> Project:
    """Create a temporary project with an empty timeline."""
    project = Project(tmp_path / "test_project")
    project.create()
    return project
