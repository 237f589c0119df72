from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Sequence

import cv2

from .config import ScissorsConfig, from_json_file
from .features import compute_feature_maps
from .imaging import (
    SUPPORTED_SUFFIXES,
    draw_path,
    feature_stats,
    load_rgba,
    save_feature_overlays,
)
from .path import Point
from .tracer import LivewireTracer


def _collect_images(root: Path) -> List[Path]:
    if root.is_file():
        return [root] if root.suffix.lower() in SUPPORTED_SUFFIXES else []
    return sorted(
        path
        for path in root.rglob("*")
        if path.is_file() and path.suffix.lower() in SUPPORTED_SUFFIXES
    )


def _write_json(path: Path, payload: object) -> None:
    with path.open("w", encoding="utf-8") as fh:
        json.dump(payload, fh, indent=2)


def parse_point(value: str) -> Point:
    try:
        x_str, y_str = value.split(",")
        return Point(int(x_str), int(y_str))
    except ValueError:
        raise argparse.ArgumentTypeError(f"Expected X,Y but got '{value}'") from None


def _load_config(path: str | None) -> ScissorsConfig:
    if path is None:
        return ScissorsConfig()
    return from_json_file(Path(path).expanduser())


def extract_features(
    image_path: str,
    output_dir: str,
    *,
    config: ScissorsConfig | None = None,
    limit: int | None = None,
    verbose: bool = True,
) -> None:
    config = config or ScissorsConfig()
    images = _collect_images(Path(image_path).expanduser())
    if limit is not None and limit > 0:
        images = images[:limit]
    if not images:
        raise FileNotFoundError(f"No supported images found in {image_path}")

    output = Path(output_dir).expanduser()
    output.mkdir(parents=True, exist_ok=True)

    for idx, path in enumerate(images, start=1):
        buffer, width, height = load_rgba(path)
        maps = compute_feature_maps(buffer, width, height, edge_width=config.edge_width)

        target = output / path.stem if len(images) > 1 else output
        save_feature_overlays(maps, target)
        stats = feature_stats(maps)
        _write_json(target / "stats.json", stats)

        if verbose:
            print(
                f"[{idx}/{len(images)}] {path.name} "
                f"(edge_density={stats['edge_density']:.3f})"
            )


def trace_image(
    image_path: str,
    points: Sequence[Point],
    output_dir: str,
    *,
    config: ScissorsConfig | None = None,
    close: bool = False,
    train: bool = True,
    verbose: bool = True,
) -> dict:
    if len(points) < 2:
        raise ValueError("At least two points are needed to trace a livewire.")

    buffer, width, height = load_rgba(image_path)
    tracer = LivewireTracer.from_rgba(buffer, width, height, config=config)
    tracer.start(points[0])

    for idx, point in enumerate(points[1:], start=1):
        segment = tracer.accept(point, train=train)
        if verbose:
            print(
                f"[{idx}/{len(points) - 1}] ({point.x}, {point.y}) "
                f"segment={len(segment)} trained={tracer.engine.trained}"
            )

    path = tracer.close(train=train) if close else tracer.path

    out_dir = Path(output_dir).expanduser()
    out_dir.mkdir(parents=True, exist_ok=True)
    payload = {
        "image": str(image_path),
        "width": width,
        "height": height,
        "closed": close,
        **path.to_dict(),
    }
    _write_json(out_dir / "path.json", payload)

    image = cv2.imread(str(image_path), cv2.IMREAD_UNCHANGED)
    overlay = draw_path(image, path.points, closed=close)
    cv2.imwrite(str(out_dir / "overlay.png"), overlay)

    if verbose:
        print(f"Wrote {len(path)} points to {out_dir / 'path.json'}")
    return payload


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Intelligent scissors (livewire) boundary tracing utilities."
    )
    parser.add_argument("--config", default=None, help="JSON file with engine settings.")
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
    )
    subparsers = parser.add_subparsers(dest="command")

    features_parser = subparsers.add_parser(
        "features", help="Write the livewire feature maps of images."
    )
    features_parser.add_argument("image", help="Image file or directory of images.")
    features_parser.add_argument(
        "-o",
        "--out",
        default="feature_outputs",
        help="Directory where feature maps are written.",
    )
    features_parser.add_argument("--limit", type=int, default=None)
    features_parser.add_argument("--quiet", action="store_true")

    trace_parser = subparsers.add_parser(
        "trace", help="Trace a livewire boundary through control points."
    )
    trace_parser.add_argument("image", help="Image to trace on.")
    trace_parser.add_argument(
        "--points",
        type=parse_point,
        nargs="+",
        required=True,
        metavar="X,Y",
        help="Control points in pixel coordinates.",
    )
    trace_parser.add_argument(
        "-o",
        "--out",
        default="trace_outputs",
        help="Directory where path.json and overlay.png are written.",
    )
    trace_parser.add_argument("--close", action="store_true", help="Close the boundary.")
    trace_parser.add_argument("--no-train", action="store_false", dest="train")
    trace_parser.add_argument("--quiet", action="store_true")

    return parser


def main(argv: List[str] | None = None) -> None:
    args_list = sys.argv[1:] if argv is None else argv
    parser = build_parser()
    parsed = parser.parse_args(args_list)
    logging.basicConfig(level=getattr(logging, parsed.log_level))

    if parsed.command == "features":
        extract_features(
            parsed.image,
            parsed.out,
            config=_load_config(parsed.config),
            limit=parsed.limit,
            verbose=not parsed.quiet,
        )
        return

    if parsed.command == "trace":
        trace_image(
            parsed.image,
            parsed.points,
            parsed.out,
            config=_load_config(parsed.config),
            close=parsed.close,
            train=parsed.train,
            verbose=not parsed.quiet,
        )
        return

    parser.print_help()


__all__ = ["extract_features", "trace_image", "main", "parse_point"]
