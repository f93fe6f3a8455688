"""
splicer.models - Interval model for tracks, clips, transitions and conflicts.

A Timeline owns its Tracks and their Clips by value: ``snapshot()`` deep-copies
everything. Transitions and conflicts are auxiliary records kept outside the
timeline document and can be recomputed or discarded at any time.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, computed_field, model_validator

from splicer.exceptions import NotFoundError


class TrackType(str, Enum):
    VIDEO = "video"
    AUDIO = "audio"


class TimelineStatus(str, Enum):
    DRAFT = "draft"
    GENERATED = "generated"
    LOCKED = "locked"


class TransitionType(str, Enum):
    CUT = "cut"
    DISSOLVE = "dissolve"
    FADE = "fade"
    WIPE = "wipe"
    SLIDE = "slide"


class ConflictType(str, Enum):
    ORDER = "order"
    OVERLAP = "overlap"
    GAP = "gap"


class Severity(str, Enum):
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


class Clip(BaseModel):
    """A trimmed piece of source media placed on a track.

    ``duration`` is derived from the trim points and cannot be assigned;
    only the trim engine changes ``in_point``/``out_point``.
    """

    model_config = ConfigDict(allow_inf_nan=False)

    id: str
    label: str = ""
    start_time: float = Field(default=0.0, ge=0.0)
    in_point: float = Field(default=0.0, ge=0.0)
    out_point: float = Field(gt=0.0)
    source_duration: float | None = Field(default=None, gt=0.0)
    color: str | None = None
    thumbnail_url: str | None = None
    shot_id: str | None = None
    source_clip_id: str | None = None

    @model_validator(mode="after")
    def validate_trim_points(self) -> Clip:
        if self.out_point <= self.in_point:
            raise ValueError(
                f"out_point ({self.out_point}) must be greater than in_point ({self.in_point})"
            )
        if self.source_duration is not None and self.out_point > self.source_duration:
            raise ValueError(
                f"out_point ({self.out_point}) exceeds source_duration ({self.source_duration})"
            )
        return self

    @computed_field  # type: ignore[prop-decorator]
    @property
    def duration(self) -> float:
        return self.out_point - self.in_point

    @property
    def end_time(self) -> float:
        return self.start_time + self.duration

    @property
    def display_name(self) -> str:
        return self.label or self.id


class Track(BaseModel):
    """An ordered lane of clips of one medium type.

    ``clips`` is kept in arrangement order, which only matches start-time
    order right after a reorder.
    """

    id: str
    type: TrackType
    clips: list[Clip] = Field(default_factory=list)

    def index_of(self, clip_id: str) -> int:
        for i, clip in enumerate(self.clips):
            if clip.id == clip_id:
                return i
        raise NotFoundError("clip", clip_id)

    def get_clip(self, clip_id: str) -> Clip:
        return self.clips[self.index_of(clip_id)]

    def has_clip(self, clip_id: str) -> bool:
        return any(clip.id == clip_id for clip in self.clips)

    def sorted_clips(self) -> list[Clip]:
        """Clips in start-time order; ties keep arrangement order."""
        return sorted(self.clips, key=lambda c: c.start_time)

    def end_time(self) -> float:
        return max((clip.end_time for clip in self.clips), default=0.0)


class Timeline(BaseModel):
    """A project's arrangement of tracks plus its external audio assets."""

    id: str
    project_id: str
    version: int = Field(default=1, ge=1)
    version_name: str | None = None
    status: TimelineStatus = TimelineStatus.DRAFT
    tracks: list[Track] = Field(default_factory=list)
    voiceover_audio_path: str | None = None
    bgm_audio_path: str | None = None
    saved_at: datetime | None = None

    @model_validator(mode="after")
    def validate_unique_ids(self) -> Timeline:
        track_ids = [t.id for t in self.tracks]
        if len(track_ids) != len(set(track_ids)):
            raise ValueError("track ids must be unique")
        clip_ids = [c.id for t in self.tracks for c in t.clips]
        if len(clip_ids) != len(set(clip_ids)):
            raise ValueError("clip ids must be unique across the timeline")
        return self

    @classmethod
    def empty(cls, project_id: str, timeline_id: str | None = None) -> Timeline:
        """Build the default layout: one video track and one audio track."""
        return cls(
            id=timeline_id or f"{project_id}-timeline",
            project_id=project_id,
            tracks=[
                Track(id="video-1", type=TrackType.VIDEO),
                Track(id="audio-1", type=TrackType.AUDIO),
            ],
        )

    def get_track(self, track_id: str) -> Track:
        for track in self.tracks:
            if track.id == track_id:
                return track
        raise NotFoundError("track", track_id)

    def _first_of_type(self, track_type: TrackType) -> Track | None:
        return next((t for t in self.tracks if t.type == track_type), None)

    def video_track(self) -> Track | None:
        return self._first_of_type(TrackType.VIDEO)

    def audio_track(self) -> Track | None:
        return self._first_of_type(TrackType.AUDIO)

    def find_clip(self, clip_id: str) -> tuple[Track, Clip]:
        for track in self.tracks:
            for clip in track.clips:
                if clip.id == clip_id:
                    return track, clip
        raise NotFoundError("clip", clip_id)

    def total_duration(self) -> float:
        """Max end time across the video track's clips."""
        video = self.video_track()
        if video is None:
            return 0.0
        return video.end_time()

    def snapshot(self) -> Timeline:
        return self.model_copy(deep=True)


class Transition(BaseModel):
    """A visual effect on the boundary between two specific clips.

    ``position`` records the end time of ``from_clip_id`` when the transition
    was created and is not kept in sync with later edits.
    """

    model_config = ConfigDict(allow_inf_nan=False)

    id: str
    from_clip_id: str
    to_clip_id: str
    type: TransitionType = TransitionType.CUT
    duration: float = Field(default=0.0, ge=0.0)
    position: float = Field(default=0.0, ge=0.0)

    @model_validator(mode="after")
    def cut_has_no_duration(self) -> Transition:
        if self.type == TransitionType.CUT:
            self.duration = 0.0
        return self


class ConflictInfo(BaseModel):
    """One structural problem found by the conflict detector. Never persisted."""

    model_config = ConfigDict(frozen=True)

    type: ConflictType
    severity: Severity
    message: str
    affected_clips: tuple[str, ...] = Field(min_length=1, max_length=2)
    suggested_fix: str | None = None
    amount: float | None = None
    target_time: float | None = None
