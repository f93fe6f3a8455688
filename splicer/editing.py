"""
splicer.editing - Trim and reorder operations on a track.

Trim only changes the trimmed clip; it can open a gap or create an overlap
with its neighbours and leaves that for the conflict detector to report.
Reorder is the one operation that always leaves a track contiguous.

Every operation resolves ids and validates input before touching the track,
so a failed call leaves the model unchanged.
"""

from __future__ import annotations

from splicer.exceptions import ValidationError
from splicer.logging import get_logger
from splicer.models import Clip, Track
from splicer.utils import require_finite

log = get_logger("editing")

DEFAULT_MIN_CLIP_DURATION = 0.1


def clamp_trim(
    clip: Clip,
    new_in: float,
    new_out: float,
    min_clip_duration: float = DEFAULT_MIN_CLIP_DURATION,
) -> tuple[float, float]:
    """Resolve requested trim points against the clip's bounds.

    The in point never goes below 0 and the out point never past the source
    length. When the request is shorter than ``min_clip_duration`` the edge
    that moved is stopped at the minimum; if both moved the out point yields.

    Args:
        clip: Clip being trimmed (not modified)
        new_in: Requested in point, seconds into the source
        new_out: Requested out point, seconds into the source
        min_clip_duration: Shortest allowed effective duration

    Returns:
        (in_point, out_point) to apply

    Raises:
        ValidationError: If a value is NaN/infinite or the source is shorter
            than the minimum duration
    """
    new_in = require_finite(new_in, "in_point")
    new_out = require_finite(new_out, "out_point")
    limit = clip.source_duration
    if limit is not None and limit < min_clip_duration:
        raise ValidationError(
            f"Source of clip {clip.id} ({limit}s) is shorter than the minimum "
            f"clip duration ({min_clip_duration}s)"
        )

    in_moved = new_in != clip.in_point
    out_moved = new_out != clip.out_point

    in_point = max(new_in, 0.0)
    out_point = new_out if limit is None else min(new_out, limit)

    if out_point - in_point < min_clip_duration:
        if in_moved and not out_moved:
            in_point = out_point - min_clip_duration
        else:
            out_point = in_point + min_clip_duration

        if limit is not None and out_point > limit:
            out_point = limit
            in_point = limit - min_clip_duration
        if in_point < 0:
            in_point = 0.0
            out_point = min_clip_duration

    return in_point, out_point


def trim(
    track: Track,
    clip_id: str,
    new_in: float,
    new_out: float,
    min_clip_duration: float = DEFAULT_MIN_CLIP_DURATION,
) -> Clip:
    """Set a clip's in/out points. Neighbouring clips are not shifted."""
    clip = track.get_clip(clip_id)
    in_point, out_point = clamp_trim(clip, new_in, new_out, min_clip_duration)
    clip.in_point = in_point
    clip.out_point = out_point
    log.debug(
        "trim %s: in=%.3f out=%.3f duration=%.3f", clip_id, in_point, out_point, clip.duration
    )
    return clip


def pack(track: Track) -> None:
    """Lay clips end to end from 0 in arrangement order."""
    cursor = 0.0
    for clip in track.clips:
        clip.start_time = cursor
        cursor = clip.end_time


def reorder(track: Track, dragged_id: str, target_id: str) -> list[Clip]:
    """Move the dragged clip to the target's slot and repack the track.

    The dragged clip is taken out of the arrangement and inserted at the
    index the target occupied, then start times are recomputed as a running
    sum of durations from 0. Dropping a clip on itself changes nothing.

    Returns:
        The track's clips in their new order
    """
    dragged_index = track.index_of(dragged_id)
    target_index = track.index_of(target_id)
    if dragged_id == target_id:
        return track.clips

    clips = list(track.clips)
    dragged = clips.pop(dragged_index)
    clips.insert(target_index, dragged)
    track.clips = clips
    pack(track)

    log.debug("reorder %s -> slot %d on %s", dragged_id, target_index, track.id)
    return track.clips


def move(track: Track, clip_id: str, start_time: float) -> Clip:
    """Place a clip at an explicit start time without touching other clips."""
    clip = track.get_clip(clip_id)
    start_time = require_finite(start_time, "start_time")
    if start_time < 0:
        raise ValidationError(f"start_time must be >= 0, got {start_time}")
    clip.start_time = start_time
    log.debug("move %s to %.3f", clip_id, start_time)
    return clip


def add_clip(track: Track, clip: Clip, index: int | None = None) -> Clip:
    """Insert a clip into the arrangement (appended when index is None)."""
    if track.has_clip(clip.id):
        raise ValidationError(f"Clip {clip.id} is already on track {track.id}")
    if index is None:
        track.clips.append(clip)
    else:
        track.clips.insert(index, clip)
    log.debug("add %s to %s at %.3f", clip.id, track.id, clip.start_time)
    return clip


def append_clip(track: Track, clip: Clip) -> Clip:
    """Append a clip starting where the track currently ends."""
    if track.has_clip(clip.id):
        raise ValidationError(f"Clip {clip.id} is already on track {track.id}")
    clip.start_time = track.end_time()
    return add_clip(track, clip)


def remove_clip(track: Track, clip_id: str) -> Clip:
    """Detach a clip from its track. Remaining clips keep their start times."""
    index = track.index_of(clip_id)
    clip = track.clips.pop(index)
    log.debug("remove %s from %s", clip_id, track.id)
    return clip
