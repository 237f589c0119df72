from __future__ import annotations

import logging
from typing import List, Optional, Tuple

from .errors import ScissorsError
from .path import Path, Point, as_point
from .scissors import Scissors

logger = logging.getLogger(__name__)


def trace_path(
    engine: Scissors,
    target: Point | Tuple[int, int],
    max_batches: Optional[int] = None,
) -> List[Point]:
    """Run the search until ``target`` is reached and return seed-to-target points.

    Stops early when the queue drains or ``max_batches`` calls to
    ``do_work`` have been spent; the result is then just ``[target]``.
    """
    target = as_point(target)
    batches = 0
    while not engine.is_reached(target):
        if max_batches is not None and batches >= max_batches:
            break
        if not engine.do_work():
            break
        batches += 1
    if batches:
        logger.debug("Traced to %s in %d batches", tuple(target), batches)
    return engine.path_to(target)


class LivewireTracer:
    """Builds a multi-segment boundary one accepted livewire segment at a time."""

    def __init__(self, engine: Scissors, max_batches: Optional[int] = None):
        self.engine = engine
        self.max_batches = max_batches
        self.path = Path()
        self._anchor: Optional[Point] = None

    @classmethod
    def from_rgba(cls, buffer, width: int, height: int, **kwargs) -> "LivewireTracer":
        config = kwargs.pop("config", None)
        engine = Scissors(config)
        engine.set_dimensions(width, height)
        engine.set_data(buffer)
        return cls(engine, **kwargs)

    @property
    def started(self) -> bool:
        return self._anchor is not None

    def start(self, point: Point | Tuple[int, int]) -> None:
        point = as_point(point)
        self.engine.set_point(point)
        self.path = Path([point], [0])
        self._anchor = point

    def preview(self, target: Point | Tuple[int, int]) -> List[Point]:
        """Live segment from the last control point to ``target``."""
        if self._anchor is None:
            raise ScissorsError("Livewire has not been started.")
        return trace_path(self.engine, target, self.max_batches)

    def accept(self, target: Point | Tuple[int, int], train: bool = True) -> List[Point]:
        """Fix the live segment to ``target`` and continue from there."""
        target = as_point(target)
        if target == self._anchor:
            return [target]
        segment = self.preview(target)
        if not self.engine.is_reached(target):
            raise ScissorsError(f"Target {tuple(target)} is not reachable from the seed.")

        if train:
            # Train on the segment just accepted, before the search is re-seeded
            self.engine.do_training(target)

        self.path.add_points(segment[1:])
        self.path.control_point_indices.append(len(self.path) - 1)
        self.engine.set_point(target)
        self._anchor = target
        return segment

    def close(self, train: bool = True) -> Path:
        if self._anchor is None:
            raise ScissorsError("Livewire has not been started.")
        first = self.path.get_point(0)
        if self._anchor != first:
            self.accept(first, train=train)
        self._anchor = None
        return self.path

    def cancel(self) -> None:
        """Drop the segment in progress; accepted segments are kept."""
        if self._anchor is not None:
            self.engine.set_point(self._anchor)

    def reset_training(self) -> None:
        self.engine.reset_training()


__all__ = ["LivewireTracer", "trace_path"]
