from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List, NamedTuple, Sequence, Tuple


class Point(NamedTuple):
    """Pixel-grid coordinate, column first."""

    x: int
    y: int


def as_point(value: Point | Tuple[int, int] | Sequence[int]) -> Point:
    x, y = value
    return Point(int(x), int(y))


@dataclass
class Path:
    """Polyline with a subset of its points flagged as control points."""

    points: List[Point] = field(default_factory=list)
    control_point_indices: List[int] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.points)

    def get_point(self, index: int) -> Point:
        return self.points[index]

    def add_point(self, point: Point | Tuple[int, int]) -> None:
        self.points.append(as_point(point))

    def add_points(self, points: Iterable[Point | Tuple[int, int]]) -> None:
        self.points.extend(as_point(p) for p in points)

    def _index_of(self, point: Point | Tuple[int, int]) -> int:
        try:
            return self.points.index(as_point(point))
        except ValueError:
            raise ValueError(f"Point {tuple(point)} is not part of the path") from None

    def add_control_point(self, point: Point | Tuple[int, int]) -> None:
        """Flag an existing point as a control point."""
        index = self._index_of(point)
        if index not in self.control_point_indices:
            self.control_point_indices.append(index)

    def is_control_point(self, point: Point | Tuple[int, int]) -> bool:
        return self._index_of(point) in self.control_point_indices

    def control_points(self) -> List[Point]:
        return [self.points[i] for i in self.control_point_indices]

    def append_path(self, other: "Path") -> None:
        """Append another path, shifting its control indices past our points."""
        offset = len(self.points)
        self.points.extend(other.points)
        self.control_point_indices.extend(i + offset for i in other.control_point_indices)

    def to_dict(self) -> dict:
        return {
            "points": [[p.x, p.y] for p in self.points],
            "control_point_indices": list(self.control_point_indices),
        }


__all__ = ["Point", "Path", "as_point"]
