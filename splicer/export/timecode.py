"""
splicer.export.timecode - Timecode math for project export.

Timeline times are float seconds; exported events are whole frames.
Drop-frame numbering is only used for 29.97 fps.
"""

from __future__ import annotations


def is_drop_frame_fps(fps: float) -> bool:
    return abs(fps - 29.97) < 0.01


def seconds_to_frames(seconds: float, fps: float) -> int:
    """Round a time to the nearest whole frame."""
    return round(seconds * fps)


def frames_to_timecode(total_frames: int, fps: float, drop_frame: bool = False) -> str:
    """Convert a frame count to HH:MM:SS:FF (or HH:MM:SS;FF for drop-frame).

    Args:
        total_frames: Frame count from zero
        fps: Frames per second
        drop_frame: Number frames as 29.97 drop-frame

    Returns:
        Timecode string
    """
    if drop_frame and is_drop_frame_fps(fps):
        # 17982 frames per 10 minutes, two frame numbers skipped every minute but the tenth
        tens, rest = divmod(total_frames, 17982)
        skipped = 18 * tens + (2 * ((rest - 2) // 1798) if rest >= 2 else 0)
        numbered = total_frames + skipped
        ff = numbered % 30
        ss = (numbered // 30) % 60
        mm = (numbered // 1800) % 60
        hh = numbered // 108000
        return f"{hh:02d}:{mm:02d}:{ss:02d};{ff:02d}"

    nominal = round(fps)
    ff = total_frames % nominal
    total_seconds = total_frames // nominal
    ss = total_seconds % 60
    mm = (total_seconds // 60) % 60
    hh = total_seconds // 3600
    return f"{hh:02d}:{mm:02d}:{ss:02d}:{ff:02d}"


def seconds_to_timecode(seconds: float, fps: float, drop_frame: bool = False) -> str:
    return frames_to_timecode(seconds_to_frames(seconds, fps), fps, drop_frame)


def timecode_to_frames(timecode: str, fps: float) -> int:
    """Parse HH:MM:SS:FF (or ;FF drop-frame) back to a frame count."""
    hh, mm, ss, ff = (int(part) for part in timecode.replace(";", ":").split(":"))
    if ";" in timecode:
        total_minutes = hh * 60 + mm
        return hh * 108000 + mm * 1800 + ss * 30 + ff - 2 * (total_minutes - total_minutes // 10)
    return (hh * 3600 + mm * 60 + ss) * round(fps) + ff
