from __future__ import annotations

import argparse
import json
from pathlib import Path

import cv2
import numpy as np
import pytest

from conftest import vertical_step
from livewire.imaging import draw_path, load_rgba, rgba_from_array
from livewire.path import Point
from livewire.runner import main, parse_point, trace_image


def _write_step(path: Path) -> None:
    cv2.imwrite(str(path), vertical_step(16, 16, 8))


def _write_colour_chart(path: Path) -> None:
    canvas = np.full((40, 60, 3), 255, dtype=np.uint8)
    cv2.rectangle(canvas, (10, 10), (40, 30), (60, 120, 220), -1)
    cv2.imwrite(str(path), canvas)


def test_load_rgba_converts_bgr(tmp_path: Path) -> None:
    image_path = tmp_path / "chart.png"
    _write_colour_chart(image_path)

    buffer, width, height = load_rgba(image_path)
    rgba = np.frombuffer(buffer, dtype=np.uint8).reshape(height, width, 4)

    assert (width, height) == (60, 40)
    assert tuple(rgba[20, 20]) == (220, 120, 60, 255)
    assert tuple(rgba[0, 0]) == (255, 255, 255, 255)


def test_load_rgba_missing_file(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_rgba(tmp_path / "missing.png")


def test_rgba_from_grey_array() -> None:
    rgba = rgba_from_array(np.full((3, 2), 7, dtype=np.uint8))
    assert rgba.shape == (3, 2, 4)
    assert tuple(rgba[1, 1]) == (7, 7, 7, 255)


def test_draw_path_marks_pixels() -> None:
    canvas = np.zeros((10, 10), dtype=np.uint8)
    out = draw_path(canvas, [Point(2, 2), Point(2, 7)], color=(0, 0, 255))

    assert out.shape == (10, 10, 3)
    assert tuple(out[5, 2]) == (0, 0, 255)
    assert canvas.max() == 0


def test_parse_point() -> None:
    assert parse_point("3,4") == Point(3, 4)
    with pytest.raises(argparse.ArgumentTypeError):
        parse_point("3;4")


def test_features_command_writes_maps(tmp_path: Path) -> None:
    image_path = tmp_path / "step.png"
    _write_step(image_path)
    out_dir = tmp_path / "features"

    main(["features", str(image_path), "--out", str(out_dir), "--quiet"])

    for name in ("greyscale.png", "gradient.png", "laplace.png", "inside.png", "outside.png"):
        assert (out_dir / name).exists()
    stats = json.loads((out_dir / "stats.json").read_text(encoding="utf-8"))
    assert stats["width"] == 16
    assert stats["zero_crossing_density"] > 0.0


def test_features_command_on_directory(tmp_path: Path) -> None:
    images = tmp_path / "images"
    images.mkdir()
    _write_step(images / "a.png")
    _write_colour_chart(images / "b.png")
    out_dir = tmp_path / "features"

    main(["features", str(images), "--out", str(out_dir), "--quiet"])

    assert (out_dir / "a" / "stats.json").exists()
    assert (out_dir / "b" / "gradient.png").exists()


def test_trace_command_follows_edge(tmp_path: Path) -> None:
    image_path = tmp_path / "step.png"
    _write_step(image_path)
    out_dir = tmp_path / "trace"

    main(
        [
            "trace",
            str(image_path),
            "--points",
            "7,2",
            "7,13",
            "--out",
            str(out_dir),
            "--no-train",
            "--quiet",
        ]
    )

    payload = json.loads((out_dir / "path.json").read_text(encoding="utf-8"))
    assert payload["points"] == [[7, y] for y in range(2, 14)]
    assert payload["control_point_indices"] == [0, 11]
    assert payload["closed"] is False
    overlay = cv2.imread(str(out_dir / "overlay.png"))
    assert overlay.shape == (16, 16, 3)


def test_trace_uses_config_file(tmp_path: Path) -> None:
    image_path = tmp_path / "step.png"
    _write_step(image_path)
    config_path = tmp_path / "config.json"
    config_path.write_text(json.dumps({"points_per_post": 7}), encoding="utf-8")
    out_dir = tmp_path / "trace"

    main(
        [
            "--config",
            str(config_path),
            "trace",
            str(image_path),
            "--points",
            "7,2",
            "7,9",
            "--out",
            str(out_dir),
            "--close",
            "--quiet",
        ]
    )

    payload = json.loads((out_dir / "path.json").read_text(encoding="utf-8"))
    assert payload["closed"] is True
    assert payload["points"][0] == payload["points"][-1]


def test_trace_needs_two_points(tmp_path: Path) -> None:
    image_path = tmp_path / "step.png"
    _write_step(image_path)

    with pytest.raises(ValueError):
        trace_image(str(image_path), [Point(1, 1)], str(tmp_path / "out"), verbose=False)
