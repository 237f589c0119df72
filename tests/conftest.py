from __future__ import annotations

from pathlib import Path
import sys

import numpy as np
import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from livewire.scissors import Scissors


def grey_to_rgba(grey: np.ndarray) -> bytes:
    grey = np.asarray(grey, dtype=np.uint8)
    rgba = np.empty(grey.shape + (4,), dtype=np.uint8)
    rgba[:, :, :3] = grey[:, :, None]
    rgba[:, :, 3] = 255
    return rgba.tobytes()


def vertical_step(width: int, height: int, split: int) -> np.ndarray:
    """Black columns left of ``split``, white from ``split`` on."""
    grey = np.zeros((height, width), dtype=np.uint8)
    grey[:, split:] = 255
    return grey


def make_engine(grey: np.ndarray, config=None) -> Scissors:
    engine = Scissors(config)
    engine.set_dimensions(grey.shape[1], grey.shape[0])
    engine.set_data(grey_to_rgba(grey))
    return engine


def drain(engine: Scissors) -> list:
    links = []
    while True:
        batch = engine.do_work()
        if not batch:
            return links
        links.extend(batch)


@pytest.fixture
def step_engine() -> Scissors:
    # 12x12 image, edge between columns 5 and 6
    return make_engine(vertical_step(12, 12, 6))
