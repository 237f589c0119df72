from .bucket_queue import BucketQueue
from .config import ScissorsConfig, from_json_file
from .cost import CostFunction
from .errors import (
    DimensionsNotSetError,
    EmptyQueueError,
    QueueWindowError,
    ScissorsError,
)
from .features import FeatureMaps, compute_feature_maps
from .path import Path, Point
from .runner import main as cli_main
from .scissors import Scissors, SearchSession
from .tracer import LivewireTracer, trace_path
from .training import TrainingModel

__all__ = [
    "BucketQueue",
    "CostFunction",
    "FeatureMaps",
    "compute_feature_maps",
    "TrainingModel",
    "Scissors",
    "SearchSession",
    "LivewireTracer",
    "trace_path",
    "Path",
    "Point",
    "ScissorsConfig",
    "from_json_file",
    "ScissorsError",
    "EmptyQueueError",
    "DimensionsNotSetError",
    "QueueWindowError",
    "cli_main",
]
