"""
Intelligent Scissors (livewire) boundary search.

Ref: Eric N. Mortensen, William A. Barrett, Interactive Segmentation with
Intelligent Scissors, Graphical Models and Image Processing, 60(5), 1998,
pp. 349-384, DOI: 10.1006/gmip.1998.0480.

The engine is driven incrementally: ``set_point`` seeds a search and every
``do_work`` call settles at most ``points_per_post`` pixels, so an
interactive caller can interleave search work with its own event handling.
Re-seeding discards the previous search wholesale.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

import numpy as np
from numpy.typing import NDArray

from .bucket_queue import BucketQueue
from .config import ScissorsConfig
from .cost import CostFunction
from .errors import DimensionsNotSetError, ScissorsError, assert_in_bounds
from .features import FeatureMaps, compute_feature_maps
from .path import Point, as_point
from .training import TrainingModel

logger = logging.getLogger(__name__)

NO_PARENT: int = -1

Link = Tuple[Point, Optional[Point]]


@dataclass
class SearchSession:
    """Grids of one single-source search, flat row-major."""

    seed: Point
    width: int
    height: int
    cost: List[float] = field(default_factory=list)
    parent: List[int] = field(default_factory=list)
    visited: bytearray = field(default_factory=bytearray)
    queue: Optional[BucketQueue[int]] = None

    @classmethod
    def create(cls, seed: Point, width: int, height: int) -> "SearchSession":
        size = width * height
        session = cls(
            seed=seed,
            width=width,
            height=height,
            cost=[math.inf] * size,
            parent=[NO_PARENT] * size,
            visited=bytearray(size),
        )
        session.cost[seed.y * width + seed.x] = 0.0
        return session

    def index(self, point: Point) -> int:
        assert_in_bounds(point.x, point.y, self.width, self.height)
        return point.y * self.width + point.x

    def point(self, index: int) -> Point:
        y, x = divmod(index, self.width)
        return Point(x, y)


class Scissors:
    """Livewire search engine over one image."""

    def __init__(self, config: Optional[ScissorsConfig] = None):
        self.config = (config or ScissorsConfig()).validate()
        self.width = -1
        self.height = -1
        self.maps: Optional[FeatureMaps] = None
        self.training = TrainingModel(self.config)
        self.cost_function: Optional[CostFunction] = None
        self.session: Optional[SearchSession] = None

    # Image setup

    def set_dimensions(self, width: int, height: int) -> None:
        if int(width) <= 0 or int(height) <= 0:
            raise ValueError(f"Dimensions must be positive, got {width}x{height}")
        self.width = int(width)
        self.height = int(height)
        self.maps = None
        self.cost_function = None
        self.session = None

    def set_data(self, buffer) -> None:
        if self.width == -1 or self.height == -1:
            raise DimensionsNotSetError("Dimensions have not been set.")

        self.maps = compute_feature_maps(
            buffer, self.width, self.height, edge_width=self.config.edge_width
        )
        self.training = TrainingModel(self.config)
        self.cost_function = CostFunction(self.maps, self.training)
        self.session = None

    # Search

    def set_point(self, seed: Point | Tuple[int, int]) -> None:
        if self.cost_function is None:
            raise ScissorsError("Image data has not been set.")
        seed = as_point(seed)
        assert_in_bounds(seed.x, seed.y, self.width, self.height)

        session = SearchSession.create(seed, self.width, self.height)
        gran = self.config.search_gran
        cost = session.cost
        bits = self.config.search_gran_bits
        if self.config.check_queue_window:
            # Trained links reach cost 1.0, one bucket past a search_gran window
            bits += 1
        session.queue = BucketQueue(
            bits,
            cost=lambda index: int(gran * cost[index] + 0.5),
            check_window=self.config.check_queue_window,
        )
        session.queue.push(seed.y * self.width + seed.x)
        self.session = session

    def do_work(self) -> List[Link]:
        """Settle up to ``points_per_post`` pixels.

        Returns the ``(child, parent)`` links settled in this batch, the seed
        paired with None. The engine's own parent grid stays authoritative.
        """
        session = self.session
        if session is None:
            return []

        queue = session.queue
        cost = session.cost
        parent = session.parent
        visited = session.visited
        dist = self.cost_function.dist
        w = self.width
        h = self.height

        links: List[Link] = []
        count = 0
        while not queue.is_empty() and count < self.config.points_per_post:
            p = queue.pop()
            py, px = divmod(p, w)
            p_parent = parent[p]
            links.append(
                (
                    Point(px, py),
                    None if p_parent == NO_PARENT else session.point(p_parent),
                )
            )
            visited[p] = 1
            base = cost[p]

            for qy in range(max(py - 1, 0), min(py + 1, h - 1) + 1):
                row = qy * w
                for qx in range(max(px - 1, 0), min(px + 1, w - 1) + 1):
                    q = row + qx
                    if q == p or visited[q]:
                        continue
                    new_cost = base + dist(px, py, qx, qy)
                    if new_cost < cost[q]:
                        if cost[q] != math.inf:
                            # Queued under its old cost, take it out first
                            queue.remove(q)
                        cost[q] = new_cost
                        parent[q] = p
                        queue.push(q)

            count += 1

        if count:
            logger.debug("Settled %d pixels, %d queued", count, len(queue))
        return links

    # Training

    def find_training_points(self, point: Point | Tuple[int, int]) -> List[Point]:
        """Walk parents back from ``point``, most recent first."""
        session = self.session
        if session is None:
            return []
        index = session.index(as_point(point))
        points: List[Point] = []
        while index != NO_PARENT and len(points) < self.config.training_length:
            points.append(session.point(index))
            index = session.parent[index]
        return points

    def do_training(self, point: Point | Tuple[int, int]) -> bool:
        points = self.find_training_points(point)
        return self.training.train(points, self.maps)

    def reset_training(self) -> None:
        self.training.reset()

    @property
    def trained(self) -> bool:
        return self.training.trained

    # Read access to the current search

    def _require_session(self) -> SearchSession:
        if self.session is None:
            raise ScissorsError("No search has been seeded.")
        return self.session

    @property
    def seed(self) -> Optional[Point]:
        return self.session.seed if self.session is not None else None

    def is_exhausted(self) -> bool:
        return self.session is None or self.session.queue.is_empty()

    def cost_at(self, point: Point | Tuple[int, int]) -> float:
        session = self._require_session()
        return session.cost[session.index(as_point(point))]

    def parent_of(self, point: Point | Tuple[int, int]) -> Optional[Point]:
        session = self._require_session()
        index = session.parent[session.index(as_point(point))]
        return None if index == NO_PARENT else session.point(index)

    def is_visited(self, point: Point | Tuple[int, int]) -> bool:
        session = self._require_session()
        return bool(session.visited[session.index(as_point(point))])

    def is_reached(self, target: Point | Tuple[int, int]) -> bool:
        target = as_point(target)
        session = self._require_session()
        return target == session.seed or self.parent_of(target) is not None

    def path_to(self, target: Point | Tuple[int, int]) -> List[Point]:
        """Seed-to-target points along the parent chain.

        Returns just ``[target]`` while the target has not been reached.
        """
        session = self._require_session()
        index = session.index(as_point(target))
        reversed_path: List[Point] = []
        while index != NO_PARENT:
            reversed_path.append(session.point(index))
            index = session.parent[index]
        reversed_path.reverse()
        return reversed_path

    def as_arrays(
        self,
    ) -> Tuple[NDArray[np.float64], NDArray[np.int64], NDArray[np.int64], NDArray[np.bool_]]:
        """Copies of the search grids shaped (height, width).

        Parent coordinates are -1 where no parent is set.
        """
        session = self._require_session()
        shape = (self.height, self.width)
        cost = np.asarray(session.cost, dtype=np.float64).reshape(shape)
        parent = np.asarray(session.parent, dtype=np.int64)
        has_parent = parent != NO_PARENT
        parent_x = np.where(has_parent, parent % self.width, NO_PARENT).reshape(shape)
        parent_y = np.where(has_parent, parent // self.width, NO_PARENT).reshape(shape)
        visited = np.frombuffer(bytes(session.visited), dtype=np.uint8).astype(bool).reshape(shape)
        return cost, parent_x, parent_y, visited


__all__ = ["Scissors", "SearchSession", "NO_PARENT"]
