from __future__ import annotations


class ScissorsError(Exception):
    """Base class for livewire engine errors."""


class EmptyQueueError(ScissorsError, IndexError):
    pass


class DimensionsNotSetError(ScissorsError, RuntimeError):
    pass


class QueueWindowError(ScissorsError, ValueError):
    pass


def assert_in_bounds(x: int, y: int, width: int, height: int) -> None:
    if not (0 <= x < width and 0 <= y < height):
        raise ValueError(
            f"Point ({x}, {y}) is outside the {width}x{height} pixel grid"
        )


__all__ = [
    "ScissorsError",
    "EmptyQueueError",
    "DimensionsNotSetError",
    "QueueWindowError",
    "assert_in_bounds",
]
