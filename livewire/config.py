from __future__ import annotations

import json
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Mapping

# The smoothing kernel reads two taps on each side of a bin.
_MIN_GRANULARITY = 5


@dataclass
class ScissorsConfig:
    """Engine settings.

    ``check_queue_window`` makes the search queue raise ``QueueWindowError``
    on out-of-window pushes. Link costs are scaled by ``search_gran``, and a
    trained link can cost up to 1.0, which lands one bucket past a
    ``search_gran`` window. The checked queue therefore uses
    ``2 * search_gran`` buckets.
    """

    search_gran_bits: int = 8
    points_per_post: int = 500
    edge_width: int = 2
    training_length: int = 32
    min_training_points: int = 8
    grad_points_needed: int = 32
    edge_gran: int = 256
    grad_gran: int = 1024
    inside_gran: int = 256
    outside_gran: int = 256
    check_queue_window: bool = False

    @property
    def search_gran(self) -> int:
        return 1 << self.search_gran_bits

    def validate(self) -> "ScissorsConfig":
        for name in ("search_gran_bits", "points_per_post", "training_length"):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be positive, got {getattr(self, name)}")
        if self.edge_width < 0:
            raise ValueError(f"edge_width must be non-negative, got {self.edge_width}")
        for name in ("edge_gran", "grad_gran", "inside_gran", "outside_gran"):
            if getattr(self, name) < _MIN_GRANULARITY:
                raise ValueError(
                    f"{name} must be at least {_MIN_GRANULARITY}, got {getattr(self, name)}"
                )
        if not 0 < self.min_training_points <= self.training_length:
            raise ValueError(
                "min_training_points must be in [1, training_length], "
                f"got {self.min_training_points}"
            )
        return self

    def to_dict(self) -> dict:
        return asdict(self)


def from_dict(payload: Mapping[str, object]) -> ScissorsConfig:
    known = {f.name for f in fields(ScissorsConfig)}
    unknown = sorted(set(payload) - known)
    if unknown:
        raise ValueError(f"Unknown configuration keys: {', '.join(unknown)}")
    return ScissorsConfig(**payload).validate()


def from_json_file(path: str | Path) -> ScissorsConfig:
    file_path = Path(path)
    with file_path.open("r", encoding="utf-8") as fp:
        payload = json.load(fp)
    if not isinstance(payload, dict):
        raise ValueError(f"Configuration in {file_path} must be a JSON object")
    return from_dict(payload)


__all__ = ["ScissorsConfig", "from_dict", "from_json_file"]
