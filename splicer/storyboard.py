"""
splicer.storyboard - Shot and generated-clip records from the storyboard.

These records are owned by the surrounding application. The engine only
uses them to build the canonical ordering for order checks, to place the
selected clip of each shot on a track, and to seed transitions.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from splicer import editing
from splicer.exceptions import ValidationError
from splicer.io import read_json
from splicer.logging import get_logger
from splicer.models import Clip, Track

log = get_logger("storyboard")


class Shot(BaseModel):
    model_config = ConfigDict(allow_inf_nan=False)

    id: str
    sequence_number: int
    label: str | None = None
    previous_shot_id: str | None = None
    transition_type: str | None = None
    use_last_frame_as_first: bool = False


class SourceClip(BaseModel):
    """A generated clip available for a shot."""

    model_config = ConfigDict(allow_inf_nan=False)

    id: str
    shot_id: str
    duration: float = Field(gt=0.0)
    is_selected: bool = False
    thumbnail_url: str | None = None


class Storyboard(BaseModel):
    shots: list[Shot] = Field(default_factory=list)
    clips: list[SourceClip] = Field(default_factory=list)

    def sorted_shots(self) -> list[Shot]:
        return sorted(self.shots, key=lambda s: s.sequence_number)

    def clips_by_shot(self) -> dict[str, list[SourceClip]]:
        grouped: dict[str, list[SourceClip]] = {}
        for clip in self.clips:
            grouped.setdefault(clip.shot_id, []).append(clip)
        return grouped


def load_storyboard(path: Path) -> Storyboard:
    """Load shots and clips exported by the host application as JSON."""
    return Storyboard.model_validate(read_json(path))


def selected_clip(clips: Iterable[SourceClip]) -> SourceClip | None:
    return next((c for c in clips if c.is_selected), None)


def canonical_order(shots: Iterable[Shot], clips: Iterable[Clip]) -> dict[str, int]:
    """Map timeline clip ids to the sequence number of the shot they came from.

    Clips without a ``shot_id`` or whose shot is unknown are left out and so
    never take part in order checks.
    """
    sequence = {shot.id: shot.sequence_number for shot in shots}
    order = {}
    for clip in clips:
        if clip.shot_id is not None and clip.shot_id in sequence:
            order[clip.id] = sequence[clip.shot_id]
    return order


def selected_timeline_clips(
    shots: Sequence[Shot],
    clips_by_shot: Mapping[str, Sequence[SourceClip]],
) -> list[Clip]:
    """Build a timeline clip for the selected clip of every shot, in sequence order.

    Shots with no selected clip are skipped. Nothing is placed on a track.
    """
    clips = []
    for shot in sorted(shots, key=lambda s: s.sequence_number):
        source = selected_clip(clips_by_shot.get(shot.id, ()))
        if source is None:
            log.debug("shot %s has no selected clip, skipped", shot.id)
            continue
        clips.append(
            Clip(
                id=f"item-{source.id}",
                label=shot.label or shot.id,
                out_point=source.duration,
                source_duration=source.duration,
                thumbnail_url=source.thumbnail_url,
                shot_id=shot.id,
                source_clip_id=source.id,
            )
        )
    return clips


def place_selected_clips(
    track: Track,
    shots: Sequence[Shot],
    clips_by_shot: Mapping[str, Sequence[SourceClip]],
) -> list[Clip]:
    """Append the selected clip of every shot, in shot sequence order, end to end.

    All clip ids are checked before the track is touched, so a duplicate
    leaves the track unchanged.

    Returns:
        The placed timeline clips

    Raises:
        ValidationError: If a clip id is already on the track or repeats
    """
    clips = selected_timeline_clips(shots, clips_by_shot)
    seen = {clip.id for clip in track.clips}
    for clip in clips:
        if clip.id in seen:
            raise ValidationError(f"Clip {clip.id} is already on track {track.id}")
        seen.add(clip.id)
    return [editing.append_clip(track, clip) for clip in clips]
