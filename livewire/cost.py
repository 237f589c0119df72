from __future__ import annotations

import math

from .features import FeatureMaps, unit_vectors
from .training import TrainingModel

# Mortensen & Barrett link cost weights
GRAD_WEIGHT: float = 0.43
LAPLACE_WEIGHT: float = 0.43
DIRECTION_WEIGHT: float = 0.11

TRAINED_GRAD_WEIGHT: float = 0.3
TRAINED_LAPLACE_WEIGHT: float = 0.3
TRAINED_OTHER_WEIGHT: float = 0.1

TWO_THIRD_PI: float = 2 / (3 * math.pi)
SQRT1_2: float = math.sqrt(0.5)


def _clamped_acos(value: float) -> float:
    return math.acos(min(1.0, max(-1.0, value)))


class CostFunction:
    """Weighted cost of the link between two 8-connected pixels."""

    def __init__(self, maps: FeatureMaps, training: TrainingModel):
        self.width = maps.width
        self.training = training
        # Flat row-major lists, indexed y * width + x
        self._grey = maps.greyscale.ravel().tolist()
        self._gradient = maps.gradient.ravel().tolist()
        self._laplace = maps.laplace.ravel().tolist()
        self._inside = maps.inside.ravel().tolist()
        self._outside = maps.outside.ravel().tolist()
        ux, uy = unit_vectors(maps.grad_x, maps.grad_y)
        self._ux = ux.ravel().tolist()
        self._uy = uy.ravel().tolist()

    def grad_direction(self, px: int, py: int, qx: int, qy: int) -> float:
        p = py * self.width + px
        q = qy * self.width + qx
        vx = qx - px
        vy = qy - py

        dp = self._uy[p] * vx - self._ux[p] * vy
        dq = self._uy[q] * vx - self._ux[q] * vy

        if dp < 0:
            dp = -dp
            dq = -dq

        if px != qx and py != qy:
            dp *= SQRT1_2
            dq *= SQRT1_2

        return TWO_THIRD_PI * (_clamped_acos(dp) + _clamped_acos(dq))

    def dist(self, px: int, py: int, qx: int, qy: int) -> float:
        q = qy * self.width + qx
        grad = self._gradient[q]
        if px == qx or py == qy:
            # Axis-aligned links are shorter than diagonal ones
            grad *= SQRT1_2

        lap = self._laplace[q]
        direction = self.grad_direction(px, py, qx, qy)

        training = self.training
        if training.trained:
            p = py * self.width + px
            return (
                TRAINED_GRAD_WEIGHT * training.trained_grad(grad)
                + TRAINED_LAPLACE_WEIGHT * lap
                + TRAINED_OTHER_WEIGHT
                * (
                    direction
                    + training.trained_edge(self._grey[p])
                    + training.trained_inside(self._inside[p])
                    + training.trained_outside(self._outside[p])
                )
            )
        return GRAD_WEIGHT * grad + LAPLACE_WEIGHT * lap + DIRECTION_WEIGHT * direction


__all__ = [
    "CostFunction",
    "GRAD_WEIGHT",
    "LAPLACE_WEIGHT",
    "DIRECTION_WEIGHT",
    "TRAINED_GRAD_WEIGHT",
    "TRAINED_LAPLACE_WEIGHT",
    "TRAINED_OTHER_WEIGHT",
]
