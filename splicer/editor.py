"""
splicer.editor - Editing session over one timeline.

TimelineEditor is the surface a host UI talks to. It routes every edit to
the trim/reorder engine, then re-runs conflict detection for all tracks
before returning, so the host never renders or accepts another edit
against stale conflicts. The coordinate mapper and the playback clock hang
off the same session and read the live timeline.
"""

from __future__ import annotations

from collections.abc import Mapping

from splicer import conflicts as detector
from splicer import editing
from splicer.config import SplicerConfig
from splicer.events import CONFLICTS_CHANGED, TIMELINE_CHANGED, EventBus
from splicer.exceptions import ConflictResolutionError, ProjectError
from splicer.logging import get_logger
from splicer.models import (
    Clip,
    ConflictInfo,
    ConflictType,
    Timeline,
    TimelineStatus,
    Transition,
    TransitionType,
)
from splicer.playback import PlaybackClock, Scheduler
from splicer.scale import TimelineScale
from splicer.storyboard import (
    Storyboard,
    canonical_order,
    place_selected_clips,
    selected_timeline_clips,
)
from splicer.transitions import TransitionRegistry

log = get_logger("editor")


class TimelineEditor:
    def __init__(
        self,
        timeline: Timeline,
        config: SplicerConfig | None = None,
        transitions: TransitionRegistry | None = None,
        canonical_order: Mapping[str, int] | None = None,
        scheduler: Scheduler | None = None,
        events: EventBus | None = None,
    ) -> None:
        self.config = config or SplicerConfig()
        self.events = events or EventBus()
        self.timeline = timeline
        self.transitions = transitions or TransitionRegistry(
            default_duration=self.config.default_transition_duration,
            max_duration=self.config.max_transition_duration,
        )
        self.canonical_order = dict(canonical_order) if canonical_order is not None else None
        self.scale = TimelineScale.from_config(self.config)
        self.clock = PlaybackClock.from_config(
            self.config, self.total_duration, scheduler=scheduler, events=self.events
        )
        self._conflicts: dict[str, list[ConflictInfo]] = {}
        self.analyze()

    # Read side

    def total_duration(self) -> float:
        return self.timeline.total_duration()

    def conflicts(self, track_id: str | None = None) -> list[ConflictInfo]:
        """Conflicts from the last analysis, for one track or all tracks."""
        if track_id is not None:
            self.timeline.get_track(track_id)
            return list(self._conflicts.get(track_id, []))
        return [c for track in self.timeline.tracks for c in self._conflicts.get(track.id, [])]

    def analyze(self) -> dict[str, list[ConflictInfo]]:
        """Recompute conflicts for every track from scratch."""
        results = {
            track.id: detector.detect_conflicts(
                track.clips,
                canonical_order=self.canonical_order,
                gap_threshold=self.config.gap_threshold,
            )
            for track in self.timeline.tracks
        }
        changed = results != self._conflicts
        self._conflicts = results
        if changed:
            self.events.emit(CONFLICTS_CHANGED, conflicts=self.conflicts())
        return results

    def set_canonical_order(self, order: Mapping[str, int] | None) -> None:
        self.canonical_order = dict(order) if order is not None else None
        self.analyze()

    def use_storyboard(self, storyboard: Storyboard) -> dict[str, int]:
        """Check order against the storyboard's shot sequence."""
        clips = [c for track in self.timeline.tracks for c in track.clips]
        order = canonical_order(storyboard.shots, clips)
        self.set_canonical_order(order)
        return order

    # Edits

    def trim(self, clip_id: str, new_in: float, new_out: float) -> Clip:
        self._check_editable()
        track, _ = self.timeline.find_clip(clip_id)
        clip = editing.trim(track, clip_id, new_in, new_out, self.config.min_clip_duration)
        self._after_edit()
        return clip

    def reorder(self, track_id: str, dragged_id: str, target_id: str) -> list[Clip]:
        self._check_editable()
        track = self.timeline.get_track(track_id)
        clips = editing.reorder(track, dragged_id, target_id)
        self._after_edit()
        return clips

    def move(self, clip_id: str, start_time: float) -> Clip:
        self._check_editable()
        track, _ = self.timeline.find_clip(clip_id)
        clip = editing.move(track, clip_id, start_time)
        self._after_edit()
        return clip

    def add_clip(self, track_id: str, clip: Clip, index: int | None = None) -> Clip:
        self._check_editable()
        track = self.timeline.get_track(track_id)
        self._check_unique(clip.id)
        editing.add_clip(track, clip, index)
        self._after_edit()
        return clip

    def append_clip(self, track_id: str, clip: Clip) -> Clip:
        self._check_editable()
        track = self.timeline.get_track(track_id)
        self._check_unique(clip.id)
        editing.append_clip(track, clip)
        self._after_edit()
        return clip

    def remove_clip(self, clip_id: str) -> Clip:
        """Detach a clip and drop the transitions that reference it."""
        self._check_editable()
        track, _ = self.timeline.find_clip(clip_id)
        clip = editing.remove_clip(track, clip_id)
        dropped = self.transitions.discard_for_clip(clip_id)
        if dropped:
            log.debug("dropped %d transition(s) with %s", len(dropped), clip_id)
        self._after_edit()
        return clip

    def fix_conflict(self, conflict: ConflictInfo) -> Clip:
        """Apply the automatic fix for one overlap conflict."""
        self._check_editable()
        if conflict.type != ConflictType.OVERLAP:
            raise ConflictResolutionError(f"{conflict.type.value} conflicts must be fixed manually")
        track, _ = self.timeline.find_clip(conflict.affected_clips[0])
        clip = detector.resolve_overlap(track.clips, conflict)
        self._after_edit()
        return clip

    def fix_overlaps(self, track_id: str | None = None) -> list[Clip]:
        """Fix every currently reported overlap once; returns the moved clips.

        A fix can create a new overlap further down the track, which is
        reported by the analysis that follows, not fixed here.
        """
        self._check_editable()
        tracks = [self.timeline.get_track(track_id)] if track_id else self.timeline.tracks
        moved = []
        for track in tracks:
            moved.extend(detector.resolve_all(track.clips, self._conflicts.get(track.id, [])))
        if moved:
            self._after_edit()
        return moved

    def seed(
        self, storyboard: Storyboard, track_id: str = "video-1"
    ) -> tuple[list[Clip], list[Transition]]:
        """Place the selected clip of every shot and add the shot-level transitions.

        Lock and timeline-wide id checks run before anything is placed. The
        storyboard also becomes the canonical order for order checks.
        """
        self._check_editable()
        track = self.timeline.get_track(track_id)
        for clip in selected_timeline_clips(storyboard.shots, storyboard.clips_by_shot()):
            self._check_unique(clip.id)
        placed = place_selected_clips(track, storyboard.shots, storyboard.clips_by_shot())
        by_shot = {clip.shot_id: clip for clip in track.clips if clip.shot_id}
        created = self.transitions.seed_from_shots(storyboard.shots, by_shot)
        clips = [c for t in self.timeline.tracks for c in t.clips]
        self.canonical_order = canonical_order(storyboard.shots, clips)
        self._after_edit()
        return placed, created

    # Transitions

    def add_transition(
        self,
        from_clip_id: str,
        to_clip_id: str,
        type: TransitionType | str = TransitionType.DISSOLVE,
        duration: float | None = None,
    ) -> Transition:
        self._check_editable()
        _, from_clip = self.timeline.find_clip(from_clip_id)
        _, to_clip = self.timeline.find_clip(to_clip_id)
        transition = self.transitions.create(from_clip, to_clip, type, duration)
        self.events.emit(TIMELINE_CHANGED, timeline=self.timeline)
        return transition

    def remove_transition(self, transition_id: str) -> Transition:
        self._check_editable()
        transition = self.transitions.remove(transition_id)
        self.events.emit(TIMELINE_CHANGED, timeline=self.timeline)
        return transition

    # View

    def fit_to_window(self, viewport_width_px: float) -> float:
        return self.scale.fit_to_window(viewport_width_px, self.total_duration())

    def replace_timeline(self, timeline: Timeline) -> None:
        """Swap in another timeline wholesale (version restore). Playback stops."""
        self.clock.stop()
        self.timeline = timeline
        self._after_edit()

    def _check_editable(self) -> None:
        if self.timeline.status == TimelineStatus.LOCKED:
            raise ProjectError(f"Timeline {self.timeline.id} is locked")

    def _check_unique(self, clip_id: str) -> None:
        for track in self.timeline.tracks:
            if track.has_clip(clip_id):
                raise ProjectError(f"Clip {clip_id} is already on track {track.id}")

    def _after_edit(self) -> None:
        self.events.emit(TIMELINE_CHANGED, timeline=self.timeline)
        self.analyze()
        if self.clock.cursor > self.total_duration():
            self.clock.seek(self.clock.cursor)
