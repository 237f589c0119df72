from __future__ import annotations

from pathlib import Path
from typing import Dict, Sequence, Tuple

import cv2
import numpy as np

from .features import FeatureMaps
from .path import Point

SUPPORTED_SUFFIXES: Sequence[str] = (".png", ".jpg", ".jpeg", ".bmp", ".tif", ".tiff")


def rgba_from_array(image: np.ndarray) -> np.ndarray:
    """Convert a grey, BGR or BGRA OpenCV image to an RGBA uint8 array."""
    if image.dtype != np.uint8:
        image = cv2.normalize(image, None, 0, 255, cv2.NORM_MINMAX).astype(np.uint8)
    if image.ndim == 2 or (image.ndim == 3 and image.shape[2] == 1):
        return cv2.cvtColor(image, cv2.COLOR_GRAY2RGBA)
    if image.shape[2] == 4:
        return cv2.cvtColor(image, cv2.COLOR_BGRA2RGBA)
    return cv2.cvtColor(image, cv2.COLOR_BGR2RGBA)


def load_rgba(path: str | Path) -> Tuple[bytes, int, int]:
    """Read an image file into a flat RGBA buffer plus its width and height."""
    image = cv2.imread(str(path), cv2.IMREAD_UNCHANGED)
    if image is None:
        raise FileNotFoundError(f"Unable to load image: {path}")
    rgba = rgba_from_array(image)
    h, w = rgba.shape[:2]
    return np.ascontiguousarray(rgba).tobytes(), w, h


def draw_path(
    image: np.ndarray,
    points: Sequence[Point],
    color: Tuple[int, int, int] = (0, 0, 255),
    closed: bool = False,
    thickness: int = 1,
) -> np.ndarray:
    canvas = image.copy()
    if canvas.ndim == 2:
        canvas = cv2.cvtColor(canvas, cv2.COLOR_GRAY2BGR)
    elif canvas.shape[2] == 4:
        canvas = cv2.cvtColor(canvas, cv2.COLOR_BGRA2BGR)
    if len(points) == 0:
        return canvas
    pts = np.array([[p.x, p.y] for p in points], dtype=np.int32)
    cv2.polylines(canvas, [pts], closed, color, thickness)
    return canvas


def _to_uint8(values: np.ndarray) -> np.ndarray:
    return np.clip(np.rint(values * 255.0), 0, 255).astype(np.uint8)


def save_feature_overlays(maps: FeatureMaps, output_dir: Path) -> None:
    output_dir.mkdir(parents=True, exist_ok=True)
    overlays = {
        "greyscale.png": maps.greyscale,
        "gradient.png": maps.gradient,
        "laplace.png": maps.laplace,
        "inside.png": maps.inside,
        "outside.png": maps.outside,
    }
    for name, data in overlays.items():
        cv2.imwrite(str(output_dir / name), _to_uint8(data))


def feature_stats(maps: FeatureMaps) -> Dict[str, float]:
    size = float(maps.width * maps.height or 1)
    return {
        "width": maps.width,
        "height": maps.height,
        "mean_brightness": float(maps.greyscale.mean()),
        "contrast": float(maps.greyscale.std()),
        "edge_density": float(np.count_nonzero(maps.gradient < 0.5)) / size,
        "zero_crossing_density": float(np.count_nonzero(maps.laplace == 0)) / size,
    }


__all__ = [
    "SUPPORTED_SUFFIXES",
    "draw_path",
    "feature_stats",
    "load_rgba",
    "rgba_from_array",
    "save_feature_overlays",
]
