"""
splicer.utils - Shared time formatting helpers.
"""

from __future__ import annotations

import math

from splicer.exceptions import ValidationError

DISPLAY_FPS = 30


def format_duration(seconds: float) -> str:
    """Format seconds as H:MM:SS or M:SS.

    Args:
        seconds: Duration in seconds

    Returns:
        Formatted string (H:MM:SS if >= 1 hour, otherwise M:SS)
    """
    hours = int(seconds // 3600)
    minutes = int((seconds % 3600) // 60)
    secs = int(seconds % 60)
    if hours > 0:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"


def format_frame_time(seconds: float, fps: int = DISPLAY_FPS) -> str:
    """Format seconds as M:SS:FF, the ruler and transport display format.

    Args:
        seconds: Time in seconds
        fps: Frames per second used for the frame field (default 30)

    Returns:
        String like "1:05:12"
    """
    mins = int(seconds // 60)
    secs = int(seconds % 60)
    frames = int((seconds % 1) * fps)
    return f"{mins}:{secs:02d}:{frames:02d}"


def format_seconds(seconds: float) -> str:
    """Render a time for messages: rounded to the millisecond, always with a decimal."""
    return str(round(seconds, 3) + 0.0)


def require_finite(value: float, name: str) -> float:
    """Return value as float, raising ValidationError for NaN or infinity."""
    value = float(value)
    if not math.isfinite(value):
        raise ValidationError(f"{name} must be a finite number, got {value}")
    return value
