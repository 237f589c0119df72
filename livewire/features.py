from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Tuple

import cv2
import numpy as np
from numpy.typing import NDArray

logger = logging.getLogger(__name__)

# Laplacian zero-crossing threshold used to get rid of clutter
LAPLACE_THRESHOLD: float = 0.33

# Extended Laplacian-of-Gaussian stencil, zero-sum
LAPLACE_KERNEL: NDArray[np.float64] = np.array(
    [
        [0, 0, 1, 0, 0],
        [0, 1, 2, 1, 0],
        [1, 2, -16, 2, 1],
        [0, 1, 2, 1, 0],
        [0, 0, 1, 0, 0],
    ],
    dtype=np.float64,
)

_LAPLACE_MARGIN: int = 2

# Floor for gradient magnitudes before normalizing to unit vectors
_UNIT_VECTOR_TOL: float = 1e-100

# Below this the image is treated as uniform and the gradient cost is flat
_GRADIENT_MAX_TOL: float = 1e-12


@dataclass(frozen=True)
class FeatureMaps:
    """Per-pixel features of one image, all shaped (height, width).

    ``gradient`` is already a cost: 1 in flat regions, 0 on the strongest
    edge. ``laplace`` is 0 on zero-crossings and 1 elsewhere.
    """

    width: int
    height: int
    greyscale: NDArray[np.float64]
    grad_x: NDArray[np.float64]
    grad_y: NDArray[np.float64]
    gradient: NDArray[np.float64]
    laplace: NDArray[np.float64]
    inside: NDArray[np.float64]
    outside: NDArray[np.float64]

    @property
    def shape(self) -> Tuple[int, int]:
        return self.height, self.width


def round_half_up(values):
    """Round halves up rather than to even."""
    return np.floor(np.asarray(values, dtype=np.float64) + 0.5).astype(np.int64)


def _as_rgba(buffer, width: int, height: int) -> NDArray[np.uint8]:
    if isinstance(buffer, (bytes, bytearray, memoryview)):
        flat = np.frombuffer(buffer, dtype=np.uint8)
    else:
        flat = np.asarray(buffer).reshape(-1)
    expected = width * height * 4
    if flat.size != expected:
        raise ValueError(
            f"RGBA buffer has {flat.size} values, expected {expected} for {width}x{height}"
        )
    return flat.reshape(height, width, 4)


def compute_greyscale(rgba: NDArray) -> NDArray[np.float64]:
    return rgba[:, :, :3].sum(axis=2, dtype=np.float64) / (3 * 255)


def compute_grad_x(greyscale: NDArray[np.float64]) -> NDArray[np.float64]:
    grad_x = np.zeros_like(greyscale)
    if greyscale.shape[1] < 2:
        return grad_x
    grad_x[:, :-1] = greyscale[:, 1:] - greyscale[:, :-1]
    # Last column repeats its left neighbour
    grad_x[:, -1] = grad_x[:, -2]
    return grad_x


def compute_grad_y(greyscale: NDArray[np.float64]) -> NDArray[np.float64]:
    grad_y = np.zeros_like(greyscale)
    if greyscale.shape[0] < 2:
        return grad_y
    grad_y[:-1, :] = greyscale[:-1, :] - greyscale[1:, :]
    grad_y[-1, :] = grad_y[-2, :]
    return grad_y


def compute_gradient(
    grad_x: NDArray[np.float64],
    grad_y: NDArray[np.float64],
) -> NDArray[np.float64]:
    """Gradient magnitude scaled to [0, 1] by the image maximum and flipped."""
    magnitude = np.hypot(grad_x, grad_y)
    max_mag = float(magnitude.max()) if magnitude.size else 0.0
    if max_mag <= _GRADIENT_MAX_TOL:
        logger.debug("Uniform image, gradient cost map is flat")
        return np.ones_like(magnitude)
    return 1.0 - magnitude / max_mag


def compute_laplace(greyscale: NDArray[np.float64]) -> NDArray[np.float64]:
    h, w = greyscale.shape
    laplace = np.ones((h, w), dtype=np.float64)
    m = _LAPLACE_MARGIN
    if h <= 2 * m or w <= 2 * m:
        return laplace
    raw = cv2.filter2D(
        greyscale,
        cv2.CV_64F,
        LAPLACE_KERNEL,
        borderType=cv2.BORDER_REPLICATE,
    )
    inner = raw[m : h - m, m : w - m]
    laplace[m : h - m, m : w - m] = np.where(inner > LAPLACE_THRESHOLD, 0.0, 1.0)
    return laplace


def unit_vectors(
    grad_x: NDArray[np.float64],
    grad_y: NDArray[np.float64],
) -> Tuple[NDArray[np.float64], NDArray[np.float64]]:
    magnitude = np.maximum(np.hypot(grad_x, grad_y), _UNIT_VECTOR_TOL)
    return grad_x / magnitude, grad_y / magnitude


def compute_sides(
    edge_width: float,
    grad_x: NDArray[np.float64],
    grad_y: NDArray[np.float64],
    greyscale: NDArray[np.float64],
) -> Tuple[NDArray[np.float64], NDArray[np.float64]]:
    """Sample greyscale ``edge_width`` pixels to either side of each edge.

    The offset follows the gradient rotated by 90 degrees, ``(y, -x)``.
    """
    h, w = greyscale.shape
    ux, uy = unit_vectors(grad_x, grad_y)
    ys, xs = np.mgrid[0:h, 0:w]

    ix = np.clip(round_half_up(xs + edge_width * uy), 0, w - 1)
    iy = np.clip(round_half_up(ys - edge_width * ux), 0, h - 1)
    ox = np.clip(round_half_up(xs - edge_width * uy), 0, w - 1)
    oy = np.clip(round_half_up(ys + edge_width * ux), 0, h - 1)

    return greyscale[iy, ix], greyscale[oy, ox]


def _freeze(array: NDArray) -> NDArray:
    array.setflags(write=False)
    return array


def compute_feature_maps(
    buffer,
    width: int,
    height: int,
    edge_width: float = 2,
) -> FeatureMaps:
    """Derive every livewire feature map from a flat RGBA buffer.

    Parameters
    ----------
    buffer:
        ``width * height * 4`` bytes (or an array of that many values in
        0..255), row-major RGBA.
    width, height:
        Grid size in pixels.
    edge_width:
        Distance in pixels of the inside/outside samples from each pixel.
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"Dimensions must be positive, got {width}x{height}")
    rgba = _as_rgba(buffer, width, height)

    greyscale = compute_greyscale(rgba)
    grad_x = compute_grad_x(greyscale)
    grad_y = compute_grad_y(greyscale)
    gradient = compute_gradient(grad_x, grad_y)
    laplace = compute_laplace(greyscale)
    inside, outside = compute_sides(edge_width, grad_x, grad_y, greyscale)

    logger.debug(
        "Computed feature maps for %dx%d image (%d zero-crossings)",
        width,
        height,
        int(np.count_nonzero(laplace == 0)),
    )

    return FeatureMaps(
        width=int(width),
        height=int(height),
        greyscale=_freeze(greyscale),
        grad_x=_freeze(grad_x),
        grad_y=_freeze(grad_y),
        gradient=_freeze(gradient),
        laplace=_freeze(laplace),
        inside=_freeze(np.ascontiguousarray(inside)),
        outside=_freeze(np.ascontiguousarray(outside)),
    )


__all__ = [
    "FeatureMaps",
    "LAPLACE_KERNEL",
    "LAPLACE_THRESHOLD",
    "compute_feature_maps",
    "compute_gradient",
    "compute_laplace",
    "compute_sides",
    "round_half_up",
    "unit_vectors",
]
