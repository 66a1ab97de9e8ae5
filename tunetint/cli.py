# Copyright (c) 2026 Tunetint
# SPDX-License-Identifier: MIT

"""
Command line entry point.

Runs one generation through the full event pipeline against an in-memory
style surface and prints what the style authority applied::

    python -m tunetint swatches.json --energy 0.9 --confidence 0.9
    python -m tunetint --image cover.jpg --flavor latte --format markdown
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import List, Optional

from tunetint import __version__
from tunetint.config import PipelineConfig, load_config
from tunetint.extractors import ImageSwatchExtractor, StaticAnalysisProvider, StaticSwatchExtractor
from tunetint.pipeline import build_pipeline
from tunetint.runtime.events import ColorsFailed, TrackChanged
from tunetint.runtime.serializers import OutputFormat, to_style_block
from tunetint.runtime.surfaces import InMemoryHostSurface, InMemoryStyleSurface
from tunetint.schema import BrightnessMode, Flavor, MusicAnalysisSnapshot, RawSwatchSet

logger = logging.getLogger("tunetint.cli")


def read_swatches(path: Path) -> RawSwatchSet:
    """
    Read swatches from JSON.

    Accepts a full set (``{"content_id": ..., "swatches": [...]}``) or a
    bare list of ``{"rgb": [r, g, b], "population": p}`` objects, in which
    case the file stem is the content id.
    """
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    if isinstance(data, list):
        data = {"content_id": path.stem, "swatches": data}
    if not isinstance(data, dict):
        raise ValueError(f"{path}: expected a swatch list or object")
    data.setdefault("content_id", path.stem)
    return RawSwatchSet.from_dict(data)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tunetint",
        description="Turn artwork swatches and music analysis into style variables",
    )
    parser.add_argument("swatches", nargs="?", type=Path, help="swatch JSON file")
    parser.add_argument("--image", type=Path, help="extract swatches from an image (needs Pillow)")
    parser.add_argument("--content-id", help="content id (defaults to the file stem)")
    parser.add_argument("--energy", type=float)
    parser.add_argument("--valence", type=float)
    parser.add_argument("--tempo", type=float, dest="tempo_bpm")
    parser.add_argument("--beat-phase", type=float)
    parser.add_argument("--confidence", type=float)
    parser.add_argument("--flavor", choices=[f.value for f in Flavor])
    parser.add_argument("--brightness", choices=[m.value for m in BrightnessMode])
    parser.add_argument(
        "--flavor-blend", type=float, help="share of the nearest flavor accent mixed into roles (0-1)"
    )
    parser.add_argument("--config", type=Path, help="pipeline config JSON")
    parser.add_argument("--host", action="store_true", help="include host bridge overrides")
    parser.add_argument(
        "--format", choices=[f.value for f in OutputFormat], default=OutputFormat.CSS.value
    )
    parser.add_argument("-v", "--verbose", action="store_true")
    parser.add_argument("-q", "--quiet", action="store_true")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def _music(args: argparse.Namespace) -> MusicAnalysisSnapshot:
    given = {
        key: getattr(args, key)
        for key in ("energy", "valence", "tempo_bpm", "beat_phase", "confidence")
        if getattr(args, key) is not None
    }
    return MusicAnalysisSnapshot.from_dict(given)


def _config(args: argparse.Namespace) -> PipelineConfig:
    config = load_config(args.config) if args.config else PipelineConfig()
    changes = {}
    if args.flavor:
        changes["flavor"] = Flavor(args.flavor)
    if args.brightness:
        changes["brightness_mode"] = BrightnessMode(args.brightness)
    if args.flavor_blend is not None:
        changes["flavor_blend"] = args.flavor_blend
    if changes:
        config = replace(config, enhancement=config.enhancement.with_changes(**changes))
    return config


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.ERROR if args.quiet else logging.WARNING,
        format="%(levelname)s:%(name)s:%(message)s",
    )

    if (args.swatches is None) == (args.image is None):
        parser.error("give exactly one of SWATCHES or --image")

    try:
        config = _config(args)
        if args.image is not None:
            content_id = args.content_id or args.image.stem
            extractor = ImageSwatchExtractor({content_id: args.image})
        else:
            raw = read_swatches(args.swatches)
            if args.content_id:
                raw = RawSwatchSet(content_id=args.content_id, swatches=raw.swatches)
            content_id = raw.content_id
            extractor = StaticSwatchExtractor({content_id: raw})
    except (OSError, ValueError) as exc:
        logger.error("%s", exc)
        return 2

    surface = InMemoryStyleSurface()
    pipeline = build_pipeline(
        extractor,
        analysis=StaticAnalysisProvider(_music(args)),
        surface=surface,
        host=InMemoryHostSurface() if args.host else None,
        config=config,
    )
    failures: list[ColorsFailed] = []
    pipeline.bus.subscribe(ColorsFailed, failures.append, owner="cli")

    pipeline.bus.emit(TrackChanged(content_id=content_id))
    pipeline.close()

    if failures:
        failure = failures[-1]
        logger.error("colors:failed (%s) %s", failure.reason.value, failure.detail)
        return 1

    print(
        to_style_block(
            surface.snapshot(),
            format=OutputFormat(args.format),
            result=pipeline.authority.get_current_color_result(),
        )
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
