"""Tests for splicer.models module."""

from __future__ import annotations

import math

import pytest
from pydantic import ValidationError as PydanticValidationError

from splicer.exceptions import NotFoundError
from splicer.models import (
    Clip,
    ConflictInfo,
    ConflictType,
    Severity,
    Timeline,
    TimelineStatus,
    Track,
    TrackType,
    Transition,
    TransitionType,
)
from tests.conftest import make_clip


class TestClip:
    def test_duration_and_end_time(self) -> None:
        clip = Clip(id="a", start_time=2.0, in_point=1.0, out_point=4.0, source_duration=6.0)
        assert clip.duration == 3.0
        assert clip.end_time == 5.0

    def test_duration_is_serialized(self) -> None:
        clip = make_clip("a", 0.0, 2.0)
        assert clip.model_dump()["duration"] == 2.0

    def test_display_name_falls_back_to_id(self) -> None:
        assert make_clip("a", 0.0, 1.0).display_name == "a"
        assert make_clip("a", 0.0, 1.0, label="Intro").display_name == "Intro"

    def test_out_point_must_exceed_in_point(self) -> None:
        with pytest.raises(PydanticValidationError):
            Clip(id="a", in_point=2.0, out_point=2.0)

    def test_out_point_limited_by_source(self) -> None:
        with pytest.raises(PydanticValidationError):
            Clip(id="a", out_point=5.0, source_duration=4.0)

    def test_negative_start_rejected(self) -> None:
        with pytest.raises(PydanticValidationError):
            Clip(id="a", start_time=-1.0, out_point=1.0)

    def test_nan_rejected(self) -> None:
        with pytest.raises(PydanticValidationError):
            Clip(id="a", start_time=math.nan, out_point=1.0)


class TestTrack:
    def test_lookup(self) -> None:
        track = Track(id="v", type=TrackType.VIDEO, clips=[make_clip("a", 0, 1)])
        assert track.index_of("a") == 0
        assert track.has_clip("a")
        assert not track.has_clip("z")
        with pytest.raises(NotFoundError, match="clip not found: z"):
            track.get_clip("z")

    def test_sorted_clips_stable(self) -> None:
        track = Track(
            id="v",
            type=TrackType.VIDEO,
            clips=[make_clip("b", 3, 1), make_clip("x", 0, 1), make_clip("y", 0, 2)],
        )
        assert [c.id for c in track.sorted_clips()] == ["x", "y", "b"]

    def test_end_time_empty(self) -> None:
        assert Track(id="v", type=TrackType.VIDEO).end_time() == 0.0


class TestTimeline:
    def test_empty_layout(self) -> None:
        timeline = Timeline.empty("demo")
        assert timeline.id == "demo-timeline"
        assert [t.type for t in timeline.tracks] == [TrackType.VIDEO, TrackType.AUDIO]
        assert timeline.status == TimelineStatus.DRAFT
        assert timeline.version == 1
        assert timeline.total_duration() == 0.0

    def test_total_duration_uses_video_track(self, sample_timeline: Timeline) -> None:
        assert sample_timeline.total_duration() == 12.0

    def test_total_duration_ignores_arrangement_order(self) -> None:
        timeline = Timeline.empty("demo")
        timeline.video_track().clips = [make_clip("late", 10, 5), make_clip("early", 0, 2)]
        assert timeline.total_duration() == 15.0

    def test_find_clip(self, sample_timeline: Timeline) -> None:
        track, clip = sample_timeline.find_clip("vo")
        assert track.id == "audio-1"
        assert clip.label == "Voiceover"
        with pytest.raises(NotFoundError):
            sample_timeline.find_clip("missing")

    def test_get_track_missing(self, sample_timeline: Timeline) -> None:
        with pytest.raises(NotFoundError, match="track not found"):
            sample_timeline.get_track("video-9")

    def test_duplicate_clip_ids_rejected(self) -> None:
        with pytest.raises(PydanticValidationError):
            Timeline(
                id="t",
                project_id="p",
                tracks=[
                    Track(id="v", type=TrackType.VIDEO, clips=[make_clip("a", 0, 1)]),
                    Track(id="au", type=TrackType.AUDIO, clips=[make_clip("a", 0, 1)]),
                ],
            )

    def test_duplicate_track_ids_rejected(self) -> None:
        with pytest.raises(PydanticValidationError):
            Timeline(
                id="t",
                project_id="p",
                tracks=[Track(id="v", type=TrackType.VIDEO), Track(id="v", type=TrackType.AUDIO)],
            )

    def test_snapshot_is_independent(self, sample_timeline: Timeline) -> None:
        snapshot = sample_timeline.snapshot()
        sample_timeline.get_track("video-1").clips[0].start_time = 99.0
        assert snapshot.get_track("video-1").clips[0].start_time == 0.0

    def test_json_roundtrip(self, sample_timeline: Timeline) -> None:
        restored = Timeline.model_validate_json(sample_timeline.model_dump_json())
        assert restored.total_duration() == sample_timeline.total_duration()
        assert restored.find_clip("b")[1].shot_id == "shot-2"


class TestTransition:
    def test_cut_has_zero_duration(self) -> None:
        transition = Transition(id="t", from_clip_id="a", to_clip_id="b", duration=1.0)
        assert transition.type == TransitionType.CUT
        assert transition.duration == 0.0

    def test_negative_duration_rejected(self) -> None:
        with pytest.raises(PydanticValidationError):
            Transition(
                id="t", from_clip_id="a", to_clip_id="b", type="dissolve", duration=-0.5
            )


class TestConflictInfo:
    def test_frozen(self) -> None:
        conflict = ConflictInfo(
            type=ConflictType.GAP,
            severity=Severity.INFO,
            message="gap",
            affected_clips=("a", "b"),
        )
        with pytest.raises(PydanticValidationError):
            conflict.message = "changed"

    def test_affected_clips_required(self) -> None:
        with pytest.raises(PydanticValidationError):
            ConflictInfo(
                type=ConflictType.GAP, severity=Severity.INFO, message="gap", affected_clips=()
            )
