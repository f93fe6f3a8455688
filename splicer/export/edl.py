"""
splicer.export.edl - CMX 3600 EDL generator.

Exports the video track as an Edit Decision List. Record times follow the
clips' timeline positions (gaps are preserved) offset to a one-hour start;
source times are the clips' trim points.
"""

from __future__ import annotations

from collections.abc import Iterable

from splicer.exceptions import ExportError
from splicer.export.timecode import frames_to_timecode, is_drop_frame_fps, seconds_to_frames
from splicer.models import Timeline, Transition, TransitionType

RECORD_START_SECONDS = 3600


def _reel_name(source_id: str | None, index: int) -> str:
    if source_id:
        return source_id[:8]
    return f"R{index:03d}"


def _edit_code(transition: Transition | None, fps: float) -> str:
    """Edit type field: C for cuts, D/W001 plus a duration in frames otherwise."""
    if transition is None or transition.type == TransitionType.CUT:
        return "C       "
    frames = seconds_to_frames(transition.duration, fps)
    code = "W001" if transition.type == TransitionType.WIPE else "D"
    return f"{code:<4s} {frames:03d}"


def generate_edl(
    timeline: Timeline,
    transitions: Iterable[Transition] = (),
    fps: float = 24,
    title: str | None = None,
) -> str:
    """Generate a CMX 3600 EDL for the timeline's video track.

    Args:
        timeline: Timeline to export
        transitions: Registry entries; a non-cut transition into a clip
            turns that clip's event into a dissolve or wipe
        fps: Record frame rate
        title: EDL title (defaults to the project id)

    Returns:
        EDL content as string

    Raises:
        ExportError: If there is no video track or it has no clips
    """
    video = timeline.video_track()
    if video is None or not video.clips:
        raise ExportError("No video clips in timeline")

    drop_frame = is_drop_frame_fps(fps)
    incoming = {t.to_clip_id: t for t in transitions}

    lines = [
        f"TITLE: {title or timeline.project_id}",
        f"FCM: {'DROP FRAME' if drop_frame else 'NON-DROP FRAME'}",
        "",
    ]

    record_offset = seconds_to_frames(RECORD_START_SECONDS, fps)
    for i, clip in enumerate(video.sorted_clips(), 1):
        reel = _reel_name(clip.source_clip_id, i)
        src_in = frames_to_timecode(seconds_to_frames(clip.in_point, fps), fps, drop_frame)
        src_out = frames_to_timecode(seconds_to_frames(clip.out_point, fps), fps, drop_frame)
        rec_in_frames = record_offset + seconds_to_frames(clip.start_time, fps)
        rec_out_frames = record_offset + seconds_to_frames(clip.end_time, fps)
        rec_in = frames_to_timecode(rec_in_frames, fps, drop_frame)
        rec_out = frames_to_timecode(rec_out_frames, fps, drop_frame)

        transition = incoming.get(clip.id)
        edit = _edit_code(transition, fps)
        lines.append(f"{i:03d}  {reel:<8s} V     {edit} {src_in} {src_out} {rec_in} {rec_out}")
        lines.append(f"* FROM CLIP NAME: {clip.display_name}")
        if transition is not None and transition.type != TransitionType.CUT:
            lines.append(f"* TRANSITION: {transition.type.value.upper()}")
        lines.append("")

    return "\n".join(lines)
