"""
splicer.export.xmeml - Final Cut Pro 7 XML (xmeml) generator.

Writes every track as a sequence of clipitems. Times are whole frames at
the given timebase.
"""

from __future__ import annotations

from xml.sax.saxutils import escape, quoteattr

from splicer.export.timecode import seconds_to_frames
from splicer.models import Timeline


def generate_xmeml(timeline: Timeline, fps: float = 24, name: str | None = None) -> str:
    """Generate xmeml v5 for all tracks of a timeline.

    Args:
        timeline: Timeline to export
        fps: Timebase in frames per second
        name: Sequence name (defaults to the project id)

    Returns:
        XML content as string
    """
    timebase = round(fps)
    sequence_name = escape(name or timeline.project_id)
    duration = seconds_to_frames(timeline.total_duration(), fps)

    lines = [
        '<?xml version="1.0" encoding="UTF-8"?>',
        "<!DOCTYPE xmeml>",
        '<xmeml version="5">',
        f"    <sequence id={quoteattr(timeline.id)}>",
        f"        <name>{sequence_name}</name>",
        f"        <duration>{duration}</duration>",
        f"        <rate><timebase>{timebase}</timebase></rate>",
        "        <media>",
    ]

    for track_type in ("video", "audio"):
        tracks = [t for t in timeline.tracks if t.type.value == track_type]
        if not tracks:
            continue
        lines.append(f"            <{track_type}>")
        for track in tracks:
            lines.append("                <track>")
            for clip in track.sorted_clips():
                start = seconds_to_frames(clip.start_time, fps)
                end = seconds_to_frames(clip.end_time, fps)
                source_in = seconds_to_frames(clip.in_point, fps)
                source_out = seconds_to_frames(clip.out_point, fps)
                lines.extend(
                    [
                        f"                    <clipitem id={quoteattr(clip.id)}>",
                        f"                        <name>{escape(clip.display_name)}</name>",
                        f"                        <start>{start}</start>",
                        f"                        <end>{end}</end>",
                        f"                        <in>{source_in}</in>",
                        f"                        <out>{source_out}</out>",
                        "                    </clipitem>",
                    ]
                )
            lines.append("                </track>")
        lines.append(f"            </{track_type}>")

    lines.extend(
        [
            "        </media>",
            "    </sequence>",
            "</xmeml>",
        ]
    )
    return "\n".join(lines)
