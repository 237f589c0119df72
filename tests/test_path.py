from __future__ import annotations

import pytest

from livewire.path import Path, Point


def test_append_path_shifts_control_points() -> None:
    first = Path([Point(0, 0), Point(1, 0)], [0])
    second = Path([Point(2, 0), Point(3, 1), Point(4, 1)], [0, 2])

    first.append_path(second)

    assert len(first) == 5
    assert first.control_point_indices == [0, 2, 4]
    assert first.control_points() == [Point(0, 0), Point(2, 0), Point(4, 1)]


def test_control_points_must_belong_to_path() -> None:
    path = Path()
    path.add_points([(1, 1), (2, 2)])
    path.add_control_point((2, 2))

    assert path.is_control_point(Point(2, 2))
    assert not path.is_control_point((1, 1))
    with pytest.raises(ValueError):
        path.add_control_point((5, 5))
    with pytest.raises(ValueError):
        path.is_control_point((5, 5))


def test_to_dict_is_json_friendly() -> None:
    path = Path([Point(3, 4)], [0])
    path.add_point((5, 6))

    assert path.to_dict() == {"points": [[3, 4], [5, 6]], "control_point_indices": [0]}
