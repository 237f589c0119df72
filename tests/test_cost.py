from __future__ import annotations

import math

import numpy as np
import pytest

from conftest import grey_to_rgba, vertical_step
from livewire.cost import CostFunction
from livewire.features import compute_feature_maps
from livewire.path import Point
from livewire.training import TrainingModel


def _cost_function(grey: np.ndarray, training: TrainingModel | None = None) -> CostFunction:
    maps = compute_feature_maps(grey_to_rgba(grey), grey.shape[1], grey.shape[0])
    return CostFunction(maps, training or TrainingModel())


def test_flat_region_uses_static_weights() -> None:
    cost = _cost_function(np.full((10, 10), 128, dtype=np.uint8))

    assert cost.grad_direction(4, 4, 5, 4) == pytest.approx(2 / 3)
    assert cost.dist(4, 4, 5, 4) == pytest.approx(
        0.43 * math.sqrt(0.5) + 0.43 + 0.11 * 2 / 3
    )
    assert cost.dist(4, 4, 5, 5) == pytest.approx(0.43 + 0.43 + 0.11 * 2 / 3)


def test_link_along_edge_is_free() -> None:
    cost = _cost_function(vertical_step(12, 12, 6))

    assert cost.grad_direction(5, 2, 5, 3) == pytest.approx(0.0)
    assert cost.dist(5, 2, 5, 3) == pytest.approx(0.0)
    assert cost.dist(5, 7, 5, 6) == pytest.approx(0.0)


def test_link_across_edge_pays_direction_term() -> None:
    cost = _cost_function(vertical_step(12, 12, 6))

    assert cost.grad_direction(5, 4, 6, 4) == pytest.approx(2 / 3)
    assert cost.dist(5, 4, 6, 4) > cost.dist(5, 4, 5, 5)


def test_direction_term_is_bounded() -> None:
    rng = np.random.default_rng(7)
    cost = _cost_function(rng.integers(0, 256, size=(9, 9), dtype=np.uint8))

    for px, py in [(1, 1), (4, 4), (7, 2)]:
        for dx in (-1, 0, 1):
            for dy in (-1, 0, 1):
                if dx == 0 and dy == 0:
                    continue
                value = cost.grad_direction(px, py, px + dx, py + dy)
                assert 0.0 <= value <= 1.0 + 1e-12


def test_trained_cost_blends_lookup_tables() -> None:
    grey = np.full((10, 10), 128, dtype=np.uint8)
    maps = compute_feature_maps(grey_to_rgba(grey), 10, 10)
    training = TrainingModel()
    assert training.train([Point(x, 3) for x in range(10)], maps)
    cost = CostFunction(maps, training)

    grad = 1.0 * math.sqrt(0.5)
    expected = (
        0.3 * training.trained_grad(grad)
        + 0.3 * 1.0
        + 0.1
        * (
            2 / 3
            + training.trained_edge(float(maps.greyscale[3, 3]))
            + training.trained_inside(float(maps.inside[3, 3]))
            + training.trained_outside(float(maps.outside[3, 3]))
        )
    )
    assert cost.dist(3, 3, 4, 3) == pytest.approx(expected)

    training.reset()
    assert cost.dist(3, 3, 4, 3) == pytest.approx(
        0.43 * math.sqrt(0.5) + 0.43 + 0.11 * 2 / 3
    )
