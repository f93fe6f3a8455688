"""
splicer.conflicts - Structural problem detection and overlap repair.

Detection is a pure function of a clip list: each pass sorts the clips by
start time, walks adjacent pairs and reports what it finds. Nothing here
raises for a conflict, and nothing is fixed unless ``resolve_overlap`` is
called explicitly.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable, Mapping, Sequence

from splicer.exceptions import ConflictResolutionError, NotFoundError
from splicer.logging import get_logger
from splicer.models import Clip, ConflictInfo, ConflictType, Severity
from splicer.utils import format_seconds

log = get_logger("conflicts")

DEFAULT_GAP_THRESHOLD = 0.5


def _adjacent_pairs(clips: Iterable[Clip]) -> list[tuple[Clip, Clip]]:
    ordered = sorted(clips, key=lambda c: c.start_time)
    return list(zip(ordered, ordered[1:]))


def detect_overlaps(clips: Sequence[Clip]) -> list[ConflictInfo]:
    """Report each adjacent pair where the first clip runs past the second's start."""
    conflicts = []
    for current, following in _adjacent_pairs(clips):
        current_end = current.end_time
        overlap = current_end - following.start_time
        if overlap > 0:
            conflicts.append(
                ConflictInfo(
                    type=ConflictType.OVERLAP,
                    severity=Severity.ERROR,
                    message=(
                        f'Clip "{current.display_name}" overlaps "{following.display_name}" '
                        f"by {overlap:.2f}s"
                    ),
                    affected_clips=(current.id, following.id),
                    suggested_fix=f"move {following.display_name} to {format_seconds(current_end)}",
                    amount=overlap,
                    target_time=current_end,
                )
            )
    return conflicts


def detect_gaps(
    clips: Sequence[Clip], max_gap_duration: float = DEFAULT_GAP_THRESHOLD
) -> list[ConflictInfo]:
    """Report each adjacent pair separated by more than ``max_gap_duration`` seconds."""
    conflicts = []
    for current, following in _adjacent_pairs(clips):
        gap = following.start_time - current.end_time
        if gap > max_gap_duration:
            conflicts.append(
                ConflictInfo(
                    type=ConflictType.GAP,
                    severity=Severity.INFO,
                    message=(
                        f'{gap:.2f}s gap between "{current.display_name}" '
                        f'and "{following.display_name}"'
                    ),
                    affected_clips=(current.id, following.id),
                    suggested_fix="add a transition or close the gap",
                    amount=gap,
                )
            )
    return conflicts


def detect_order_conflicts(
    clips: Sequence[Clip], canonical_order: Mapping[str, int]
) -> list[ConflictInfo]:
    """Report adjacent pairs whose timeline order contradicts the canonical sequence.

    Clips missing from ``canonical_order`` are never reported.
    """
    conflicts = []
    for current, following in _adjacent_pairs(clips):
        current_seq = canonical_order.get(current.id)
        following_seq = canonical_order.get(following.id)
        if current_seq is None or following_seq is None:
            continue
        if current_seq > following_seq:
            conflicts.append(
                ConflictInfo(
                    type=ConflictType.ORDER,
                    severity=Severity.WARNING,
                    message=(
                        f'Clip "{current.display_name}" plays before "{following.display_name}" '
                        f"but comes after it in the storyboard ({current_seq} > {following_seq})"
                    ),
                    affected_clips=(current.id, following.id),
                    suggested_fix="reorder the timeline to match the storyboard",
                )
            )
    return conflicts


def detect_conflicts(
    clips: Sequence[Clip],
    canonical_order: Mapping[str, int] | None = None,
    gap_threshold: float = DEFAULT_GAP_THRESHOLD,
) -> list[ConflictInfo]:
    """Run every pass over the same clips: overlaps, then gaps, then order.

    The order pass only runs when a canonical order is supplied. A pair of
    clips may appear in more than one conflict.
    """
    conflicts = detect_overlaps(clips)
    conflicts.extend(detect_gaps(clips, gap_threshold))
    if canonical_order is not None:
        conflicts.extend(detect_order_conflicts(clips, canonical_order))
    return conflicts


def summarize(conflicts: Iterable[ConflictInfo]) -> dict[Severity, int]:
    """Count conflicts per severity (every severity present, possibly 0)."""
    counts = Counter(c.severity for c in conflicts)
    return {severity: counts.get(severity, 0) for severity in Severity}


def _find(clips: Sequence[Clip], clip_id: str) -> Clip:
    for clip in clips:
        if clip.id == clip_id:
            return clip
    raise NotFoundError("clip", clip_id)


def resolve_overlap(clips: Sequence[Clip], conflict: ConflictInfo) -> Clip:
    """Move the second clip of an overlap so it starts where the first ends.

    Only the second clip changes. If that pushes it into the next clip the
    new overlap shows up on the next detection pass.

    Returns:
        The moved clip

    Raises:
        ConflictResolutionError: For gap and order conflicts, which are not automated
        NotFoundError: If an affected clip is not in ``clips``
    """
    if conflict.type != ConflictType.OVERLAP:
        raise ConflictResolutionError(f"{conflict.type.value} conflicts must be fixed manually")
    if len(conflict.affected_clips) != 2:
        raise ConflictResolutionError("overlap conflict must name exactly two clips")

    first_id, second_id = conflict.affected_clips
    first = _find(clips, first_id)
    second = _find(clips, second_id)

    second.start_time = first.end_time
    log.debug("resolved overlap: %s now starts at %.3f", second.id, second.start_time)
    return second


def resolve_all(clips: Sequence[Clip], conflicts: Iterable[ConflictInfo]) -> list[Clip]:
    """Apply ``resolve_overlap`` to each overlap conflict in order; others are skipped.

    Returns:
        The clips that were moved
    """
    moved = []
    for conflict in conflicts:
        if conflict.type == ConflictType.OVERLAP:
            moved.append(resolve_overlap(clips, conflict))
    return moved
