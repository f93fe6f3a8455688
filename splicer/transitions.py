"""
splicer.transitions - Transitions between adjacent clips.

The registry is kept apart from the clip records so a clip can be trimmed
or moved without touching any transition. A transition's position is taken
from the end of its ``from`` clip when it is created and is never updated
afterwards.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping, Sequence

from splicer.exceptions import NotFoundError, ValidationError
from splicer.logging import get_logger
from splicer.models import Clip, Transition, TransitionType
from splicer.storyboard import Shot

log = get_logger("transitions")

DEFAULT_DURATION = 0.5
MAX_DURATION = 3.0

# Shot-level transition names used by the storyboard.
SHOT_TRANSITIONS = {
    "cut": TransitionType.CUT,
    "dissolve": TransitionType.DISSOLVE,
    "fade": TransitionType.FADE,
    "wipe": TransitionType.WIPE,
    "slide": TransitionType.SLIDE,
    "motion": TransitionType.SLIDE,
}


def transition_id(from_clip_id: str, to_clip_id: str) -> str:
    return f"tr-{from_clip_id}-{to_clip_id}"


class TransitionRegistry:
    def __init__(
        self,
        transitions: Iterable[Transition] = (),
        default_duration: float = DEFAULT_DURATION,
        max_duration: float = MAX_DURATION,
    ) -> None:
        self.default_duration = default_duration
        self.max_duration = max_duration
        self._transitions: dict[str, Transition] = {}
        for transition in transitions:
            self.add(transition)

    def __iter__(self) -> Iterator[Transition]:
        return iter(list(self._transitions.values()))

    def __len__(self) -> int:
        return len(self._transitions)

    def __contains__(self, transition_id: object) -> bool:
        return transition_id in self._transitions

    def get(self, transition_id: str) -> Transition:
        try:
            return self._transitions[transition_id]
        except KeyError:
            raise NotFoundError("transition", transition_id) from None

    def add(self, transition: Transition) -> Transition:
        """Add a transition, replacing any existing one with the same id."""
        if transition.duration > self.max_duration:
            raise ValidationError(
                f"Transition duration {transition.duration}s exceeds {self.max_duration}s"
            )
        self._transitions[transition.id] = transition
        return transition

    def create(
        self,
        from_clip: Clip,
        to_clip: Clip,
        type: TransitionType | str = TransitionType.DISSOLVE,
        duration: float | None = None,
    ) -> Transition:
        """Create (or replace) the transition on the boundary between two clips."""
        transition_type = TransitionType(type)
        if duration is None:
            duration = 0.0 if transition_type == TransitionType.CUT else self.default_duration
        existing = self.find_by_boundary(from_clip.id, to_clip.id)
        transition = Transition(
            id=existing.id if existing else transition_id(from_clip.id, to_clip.id),
            from_clip_id=from_clip.id,
            to_clip_id=to_clip.id,
            type=transition_type,
            duration=duration,
            position=from_clip.end_time,
        )
        log.debug(
            "transition %s %s at %.3f", transition.id, transition.type.value, transition.position
        )
        return self.add(transition)

    def update(
        self,
        transition_id: str,
        type: TransitionType | str | None = None,
        duration: float | None = None,
    ) -> Transition:
        """Change type and/or duration; the stored position is kept."""
        current = self.get(transition_id)
        data = current.model_dump()
        if type is not None:
            data["type"] = TransitionType(type)
        if duration is not None:
            data["duration"] = duration
        return self.add(Transition(**data))

    def remove(self, transition_id: str) -> Transition:
        transition = self.get(transition_id)
        del self._transitions[transition_id]
        return transition

    def find_by_boundary(self, from_clip_id: str, to_clip_id: str) -> Transition | None:
        for transition in self._transitions.values():
            if transition.from_clip_id == from_clip_id and transition.to_clip_id == to_clip_id:
                return transition
        return None

    def for_clip(self, clip_id: str) -> list[Transition]:
        return [
            t for t in self._transitions.values() if clip_id in (t.from_clip_id, t.to_clip_id)
        ]

    def discard_for_clip(self, clip_id: str) -> list[Transition]:
        """Drop every transition touching a clip (used when the clip leaves the timeline)."""
        dropped = self.for_clip(clip_id)
        for transition in dropped:
            del self._transitions[transition.id]
        return dropped

    def seed_from_shots(
        self, shots: Sequence[Shot], clips_by_shot: Mapping[str, Clip]
    ) -> list[Transition]:
        """Create transitions for consecutive linked shots.

        Walks shots in sequence order; where a shot names the previous shot
        as its ``previous_shot_id`` and both have a clip on the timeline, the
        later shot's ``transition_type`` becomes a transition between the two
        clips. Existing boundaries are left alone.
        """
        created = []
        ordered = sorted(shots, key=lambda s: s.sequence_number)
        for previous, shot in zip(ordered, ordered[1:]):
            if shot.previous_shot_id != previous.id:
                continue
            from_clip = clips_by_shot.get(previous.id)
            to_clip = clips_by_shot.get(shot.id)
            if from_clip is None or to_clip is None:
                continue
            if self.find_by_boundary(from_clip.id, to_clip.id) is not None:
                continue
            transition_type = SHOT_TRANSITIONS.get(shot.transition_type or "cut")
            if transition_type is None:
                log.warning(
                    "shot %s has unknown transition type %r, using cut",
                    shot.id,
                    shot.transition_type,
                )
                transition_type = TransitionType.CUT
            created.append(self.create(from_clip, to_clip, transition_type))
        return created

    def to_list(self) -> list[Transition]:
        return list(self._transitions.values())
