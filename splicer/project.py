"""
splicer.project - Project directory, timeline document and version store.

Layout::

    <project>/
        splicer.yaml        configuration
        timeline.json       live timeline
        transitions.json    transition registry
        versions/v0002.json immutable named snapshots
        export/             EDL / XML / JSON project files

Saving a version writes a new snapshot file keyed by the next version
number and never rewrites an existing one. Restoring copies a snapshot
back over the live timeline under a fresh version number.
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path

from pydantic import ValidationError as PydanticValidationError

from splicer.config import (
    CONFIG_FILENAME,
    SplicerConfig,
    create_default_config,
    load_config,
    write_config,
)
from splicer.exceptions import NotFoundError, ProjectError
from splicer.io import read_json, read_model, write_json, write_model
from splicer.logging import get_logger
from splicer.models import Timeline, Transition
from splicer.transitions import TransitionRegistry

log = get_logger("project")


class Project:
    """Represents a Splicer project directory."""

    def __init__(self, path: Path) -> None:
        self.path = path
        self.config_path = path / CONFIG_FILENAME
        self.timeline_path = path / "timeline.json"
        self.transitions_path = path / "transitions.json"
        self.versions_dir = path / "versions"
        self.export_dir = path / "export"

    @property
    def name(self) -> str:
        return self.path.name

    def exists(self) -> bool:
        return self.config_path.exists() and self.timeline_path.exists()

    def create(self) -> Timeline:
        """Create the directory structure, default config and an empty timeline."""
        if self.exists():
            raise ProjectError(f"Project already exists: {self.path}")
        self.path.mkdir(parents=True, exist_ok=True)
        self.versions_dir.mkdir(exist_ok=True)
        self.export_dir.mkdir(exist_ok=True)

        write_config(create_default_config(self.name), self.config_path)
        timeline = Timeline.empty(self.name)
        self.save_timeline(timeline)
        self.save_transitions(TransitionRegistry())
        log.info("created project %s", self.path)
        return timeline

    def load_config(self) -> SplicerConfig:
        return load_config(self.path)

    def load_timeline(self) -> Timeline:
        if not self.timeline_path.exists():
            raise ProjectError(f"Timeline not found: {self.timeline_path}")
        return self._read_timeline(self.timeline_path)

    def save_timeline(self, timeline: Timeline) -> None:
        timeline.saved_at = datetime.now().replace(microsecond=0)
        write_model(self.timeline_path, timeline)

    def load_transitions(self, config: SplicerConfig | None = None) -> TransitionRegistry:
        config = config or SplicerConfig()
        registry = TransitionRegistry(
            default_duration=config.default_transition_duration,
            max_duration=config.max_transition_duration,
        )
        if self.transitions_path.exists():
            for item in read_json(self.transitions_path):
                registry.add(Transition.model_validate(item))
        return registry

    def save_transitions(self, registry: TransitionRegistry) -> None:
        write_json(self.transitions_path, [t.model_dump(mode="json") for t in registry])

    # Versions

    def version_path(self, version: int) -> Path:
        return self.versions_dir / f"v{version:04d}.json"

    def version_numbers(self) -> list[int]:
        if not self.versions_dir.exists():
            return []
        numbers = []
        for path in self.versions_dir.glob("v*.json"):
            try:
                numbers.append(int(path.stem[1:]))
            except ValueError:
                log.warning("ignoring unexpected file in versions/: %s", path.name)
        return sorted(numbers)

    def latest_version(self, timeline: Timeline) -> int:
        return max([timeline.version, *self.version_numbers()])

    def save_version(self, timeline: Timeline, version_name: str) -> Timeline:
        """Store an immutable snapshot of ``timeline`` under the next version number.

        The live timeline takes the new version number and name as well.
        """
        snapshot = timeline.snapshot()
        snapshot.version = self.latest_version(timeline) + 1
        snapshot.version_name = version_name
        self._write_snapshot(snapshot)

        timeline.version = snapshot.version
        timeline.version_name = version_name
        self.save_timeline(timeline)
        log.info("saved version %d (%s)", snapshot.version, version_name)
        return snapshot

    def list_versions(self) -> list[Timeline]:
        """All stored snapshots, newest first."""
        return [self.load_version(n) for n in reversed(self.version_numbers())]

    def load_version(self, version: int) -> Timeline:
        path = self.version_path(version)
        if not path.exists():
            raise NotFoundError("version", version)
        return self._read_timeline(path)

    def restore_version(self, version: int, current: Timeline | None = None) -> Timeline:
        """Replace the live timeline with a copy of a stored snapshot.

        The restored timeline is saved as a new version so the history keeps
        every state, including the one being replaced.
        """
        source = self.load_version(version)
        current = current or self.load_timeline()

        restored = source.snapshot()
        restored.version = self.latest_version(current) + 1
        restored.version_name = f"Restored from v{source.version}"
        self._write_snapshot(restored)
        self.save_timeline(restored)
        log.info("restored version %d as version %d", version, restored.version)
        return restored

    def _write_snapshot(self, snapshot: Timeline) -> None:
        path = self.version_path(snapshot.version)
        if path.exists():
            raise ProjectError(f"Version {snapshot.version} already exists")
        snapshot.saved_at = datetime.now().replace(microsecond=0)
        write_model(path, snapshot)

    def _read_timeline(self, path: Path) -> Timeline:
        try:
            return read_model(path, Timeline)
        except PydanticValidationError as e:
            raise ProjectError(f"Invalid timeline document {path}: {e}") from e


def find_project_dir(start: Path | None = None) -> Path | None:
    """Find the project directory by walking up from ``start`` looking for splicer.yaml."""
    current = (start or Path.cwd()).resolve()
    while True:
        if (current / CONFIG_FILENAME).exists():
            return current
        if current == current.parent:
            return None
        current = current.parent
