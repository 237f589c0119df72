from __future__ import annotations

import json
from pathlib import Path

import pytest

from livewire.config import ScissorsConfig, from_dict, from_json_file


def test_defaults_match_published_settings() -> None:
    config = ScissorsConfig().validate()

    assert config.search_gran == 256
    assert config.points_per_post == 500
    assert (config.edge_gran, config.grad_gran, config.inside_gran, config.outside_gran) == (
        256,
        1024,
        256,
        256,
    )
    assert config.training_length == 32
    assert config.min_training_points == 8


@pytest.mark.parametrize(
    "payload",
    [
        {"points_per_post": 0},
        {"grad_gran": 4},
        {"min_training_points": 40},
        {"edge_width": -1},
    ],
)
def test_invalid_settings_are_rejected(payload: dict) -> None:
    with pytest.raises(ValueError):
        from_dict(payload)


def test_from_json_file(tmp_path: Path) -> None:
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"points_per_post": 50, "edge_width": 3}), encoding="utf-8")

    config = from_json_file(path)

    assert config.points_per_post == 50
    assert config.edge_width == 3
    assert config.grad_gran == 1024


def test_unknown_keys_are_rejected(tmp_path: Path) -> None:
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"pointsPerPost": 50}), encoding="utf-8")

    with pytest.raises(ValueError):
        from_json_file(path)
