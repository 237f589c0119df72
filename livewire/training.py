from __future__ import annotations

import logging
from typing import Dict, List, Optional, Sequence

import numpy as np
from numpy.typing import NDArray

from .config import ScissorsConfig
from .features import FeatureMaps, round_half_up
from .path import Point

logger = logging.getLogger(__name__)

# 5-tap smoothing kernel and its one-sided variants for the first/last two bins
BLUR_CENTER: float = 0.4
BLUR_NEAR: float = 0.25
BLUR_FAR: float = 0.05
BLUR_EDGE_NEAR: float = 0.5
BLUR_EDGE_FAR: float = 0.1

CHANNELS = ("edge", "grad", "inside", "outside")


def gaussian_blur(buffer: NDArray[np.float64]) -> NDArray[np.float64]:
    """Smooth a histogram so unsampled neighbouring bins are filled in."""
    b = np.asarray(buffer, dtype=np.float64)
    n = b.size
    if n < 5:
        raise ValueError(f"Blur needs at least 5 bins, got {n}")
    out = np.empty_like(b)
    # Both one-sided taps of the first bin read b[1]; the last bin reaches b[-3]
    out[0] = BLUR_CENTER * b[0] + (BLUR_EDGE_NEAR + BLUR_EDGE_FAR) * b[1]
    out[1] = BLUR_NEAR * b[0] + BLUR_CENTER * b[1] + BLUR_NEAR * b[2] + BLUR_EDGE_FAR * b[3]
    out[2:-2] = (
        BLUR_FAR * b[:-4]
        + BLUR_NEAR * b[1:-3]
        + BLUR_CENTER * b[2:-2]
        + BLUR_NEAR * b[3:-1]
        + BLUR_FAR * b[4:]
    )
    out[-2] = BLUR_NEAR * b[-1] + BLUR_CENTER * b[-2] + BLUR_NEAR * b[-3] + BLUR_EDGE_FAR * b[-4]
    out[-1] = BLUR_CENTER * b[-1] + BLUR_EDGE_NEAR * b[-2] + BLUR_EDGE_FAR * b[-3]
    return out


def build_lookup(
    values: NDArray[np.float64],
    granularity: int,
) -> NDArray[np.float64]:
    """Map sampled feature values to a smoothed cost table.

    Frequently sampled values get a low cost.
    """
    idx = np.clip(round_half_up(np.asarray(values) * (granularity - 1)), 0, granularity - 1)
    counts = np.bincount(idx, minlength=granularity).astype(np.float64)
    max_count = max(1.0, float(counts.max()) if counts.size else 0.0)
    table = gaussian_blur(1.0 - counts / max_count)
    return np.clip(table, 0.0, 1.0)


class TrainingModel:
    """Lookup tables learned from the most recent accepted boundary."""

    def __init__(self, config: Optional[ScissorsConfig] = None):
        self.config = config or ScissorsConfig()
        self.granularity: Dict[str, int] = {
            "edge": self.config.edge_gran,
            "grad": self.config.grad_gran,
            "inside": self.config.inside_gran,
            "outside": self.config.outside_gran,
        }
        self.trained = False
        self.training_points: List[Point] = []
        self.tables: Dict[str, NDArray[np.float64]] = {
            name: np.zeros(0, dtype=np.float64) for name in CHANNELS
        }
        self._lists: Dict[str, List[float]] = {name: [] for name in CHANNELS}

    def reset(self) -> None:
        self.trained = False

    def train(self, points: Sequence[Point], maps: FeatureMaps) -> bool:
        """Rebuild all tables from ``points``; returns False if too few."""
        self.training_points = list(points)
        have = len(self.training_points)
        if have < self.config.min_training_points:
            logger.debug(
                "Skipping training: %d points, need %d",
                have,
                self.config.min_training_points,
            )
            return False

        xs = np.fromiter((p.x for p in self.training_points), dtype=np.intp, count=have)
        ys = np.fromiter((p.y for p in self.training_points), dtype=np.intp, count=have)
        sources = {
            "edge": maps.greyscale,
            "grad": maps.gradient,
            "inside": maps.inside,
            "outside": maps.outside,
        }
        for name in CHANNELS:
            self.tables[name] = build_lookup(sources[name][ys, xs], self.granularity[name])

        need = self.config.grad_points_needed
        if have < need:
            self._add_static_grad(have, need)

        for name in CHANNELS:
            self._lists[name] = self.tables[name].tolist()
        self.trained = True
        logger.debug("Trained on %d points", have)
        return True

    def _add_static_grad(self, have: int, need: int) -> None:
        # Few samples make a spiky gradient table, cap it with a linear ramp
        gran = self.granularity["grad"]
        ramp = 1.0 - np.arange(gran, dtype=np.float64) * (need - have) / (need * gran)
        self.tables["grad"] = np.minimum(self.tables["grad"], ramp)

    def _lookup(self, name: str, value: float) -> float:
        return self._lists[name][int((self.granularity[name] - 1) * value + 0.5)]

    def trained_edge(self, value: float) -> float:
        return self._lookup("edge", value)

    def trained_grad(self, value: float) -> float:
        return self._lookup("grad", value)

    def trained_inside(self, value: float) -> float:
        return self._lookup("inside", value)

    def trained_outside(self, value: float) -> float:
        return self._lookup("outside", value)


__all__ = ["TrainingModel", "build_lookup", "gaussian_blur"]
