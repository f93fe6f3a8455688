"""Tests for splicer.config module."""

from __future__ import annotations

from pathlib import Path

import pytest

from splicer.config import (
    SplicerConfig,
    create_default_config,
    load_config,
    merge_config,
    write_config,
)
from splicer.exceptions import ConfigError


class TestSplicerConfig:
    def test_default_config(self) -> None:
        config = SplicerConfig()
        assert config.project_name == "untitled"
        assert config.min_clip_duration == 0.1
        assert config.gap_threshold == 0.5
        assert config.max_zoom == 200
        assert config.playback_end == "hold"

    def test_invalid_playback_end_raises(self) -> None:
        with pytest.raises(ValueError):
            SplicerConfig(playback_end="loop")

    def test_speed_options_sorted(self) -> None:
        config = SplicerConfig(speed_options=[2.0, 0.5, 1.0])
        assert config.speed_options == [0.5, 1.0, 2.0]

    def test_invalid_speed_options(self) -> None:
        with pytest.raises(ValueError):
            SplicerConfig(speed_options=[])
        with pytest.raises(ValueError):
            SplicerConfig(speed_options=[1.0, -2.0])

    def test_zoom_bounds(self) -> None:
        with pytest.raises(ValueError):
            SplicerConfig(min_zoom=300)

    def test_transition_defaults_bounded(self) -> None:
        with pytest.raises(ValueError):
            SplicerConfig(default_transition_duration=4.0)


class TestMergeConfig:
    def test_project_overrides_defaults(self) -> None:
        merged = merge_config({"gap_threshold": 1.0}, {"gap_threshold": 0.5, "frame_rate": 30})
        assert merged == {"gap_threshold": 1.0, "frame_rate": 30}

    def test_none_ignored(self) -> None:
        merged = merge_config({"gap_threshold": None}, {"gap_threshold": 0.5})
        assert merged["gap_threshold"] == 0.5


class TestLoadConfig:
    def test_load_written_defaults(self, tmp_path: Path) -> None:
        write_config(create_default_config("demo"), tmp_path / "splicer.yaml")
        config = load_config(tmp_path)
        assert config.project_name == "demo"
        assert config.config_path == tmp_path / "splicer.yaml"

    def test_partial_config_uses_defaults(self, tmp_path: Path) -> None:
        (tmp_path / "splicer.yaml").write_text("gap_threshold: 2.0\n")
        config = load_config(tmp_path)
        assert config.gap_threshold == 2.0
        assert config.project_name == tmp_path.name
        assert config.tick_interval == 0.033

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path)

    def test_invalid_value(self, tmp_path: Path) -> None:
        (tmp_path / "splicer.yaml").write_text("playback_end: loop\n")
        with pytest.raises(ConfigError):
            load_config(tmp_path)

    def test_not_a_mapping(self, tmp_path: Path) -> None:
        (tmp_path / "splicer.yaml").write_text("- a\n- b\n")
        with pytest.raises(ConfigError):
            load_config(tmp_path)
