"""
splicer.config - YAML config loading, merging and validation.

Handles loading splicer.yaml from a project directory, applying defaults, and
validating the editing, zoom and playback parameters.
"""

from __future__ import annotations

import math
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

from splicer.exceptions import ConfigError

CONFIG_FILENAME = "splicer.yaml"


class SplicerConfig(BaseModel):
    """Resolved configuration for a Splicer project."""

    project_name: str = "untitled"

    min_clip_duration: float = Field(default=0.1, gt=0.0)
    gap_threshold: float = Field(default=0.5, ge=0.0)

    frame_rate: float = Field(default=30.0, gt=0.0)
    tick_interval: float = Field(default=0.033, gt=0.0)
    playback_speed: float = Field(default=1.0, gt=0.0)
    speed_options: list[float] = Field(default_factory=lambda: [0.25, 0.5, 1.0, 1.5, 2.0])
    playback_end: str = "hold"

    default_zoom: float = Field(default=50.0, gt=0.0)
    min_zoom: float = Field(default=10.0, gt=0.0)
    max_zoom: float = Field(default=200.0, gt=0.0)
    zoom_step: float = Field(default=1.5, gt=1.0)
    label_gutter_px: float = Field(default=80.0, ge=0.0)

    default_transition_duration: float = Field(default=0.5, ge=0.0)
    max_transition_duration: float = Field(default=3.0, gt=0.0)

    export_fps: float = Field(default=24.0, gt=0.0)

    config_path: Path | None = None

    @field_validator("playback_end")
    @classmethod
    def validate_playback_end(cls, v: str) -> str:
        valid = {"hold", "rewind"}
        if v not in valid:
            raise ValueError(f"playback_end must be one of: {valid}")
        return v

    @field_validator("speed_options")
    @classmethod
    def validate_speed_options(cls, v: list[float]) -> list[float]:
        if not v:
            raise ValueError("speed_options must not be empty")
        for speed in v:
            if not math.isfinite(speed) or speed <= 0:
                raise ValueError("speed_options must be positive numbers")
        return sorted(v)

    @model_validator(mode="after")
    def validate_zoom_bounds(self) -> SplicerConfig:
        if self.min_zoom >= self.max_zoom:
            raise ValueError("min_zoom must be smaller than max_zoom")
        if self.default_transition_duration > self.max_transition_duration:
            raise ValueError("default_transition_duration exceeds max_transition_duration")
        return self


def merge_config(project_config: dict[str, Any], defaults: dict[str, Any]) -> dict[str, Any]:
    """Merge project config over defaults. Project values take precedence; None is ignored."""
    merged = defaults.copy()
    for key, value in project_config.items():
        if value is not None:
            merged[key] = value
    return merged


def load_config(project_dir: Path) -> SplicerConfig:
    """Load and validate configuration from a project directory."""
    config_file = project_dir / CONFIG_FILENAME
    if not config_file.exists():
        raise FileNotFoundError(f"No {CONFIG_FILENAME} found in {project_dir}")

    with open(config_file) as f:
        raw_config = yaml.safe_load(f) or {}

    if not isinstance(raw_config, dict):
        raise ConfigError(f"{config_file} must contain a mapping")

    merged = merge_config(raw_config, create_default_config(project_dir.name))
    merged["config_path"] = config_file

    try:
        return SplicerConfig(**merged)
    except ValueError as e:
        raise ConfigError(f"Invalid configuration in {config_file}: {e}") from e


def create_default_config(project_name: str) -> dict[str, Any]:
    """Create a default config dict for a new project."""
    defaults = SplicerConfig(project_name=project_name).model_dump(exclude={"config_path"})
    return defaults


def write_config(config: dict[str, Any], path: Path) -> None:
    """Write configuration to a YAML file."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        yaml.dump(config, f, default_flow_style=False, sort_keys=False)
