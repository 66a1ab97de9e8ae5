# Copyright (c) 2026 Tunetint
# SPDX-License-Identifier: MIT

"""
Tunetint -- Music-reactive color pipeline.

Turns artwork swatches and live audio analysis into one complete,
versioned set of style variables, applied by a single writer.

Quick start::

    from tunetint import build_pipeline, StaticSwatchExtractor, TrackChanged

    pipeline = build_pipeline(StaticSwatchExtractor({"track-1": swatches}))
    pipeline.bus.emit(TrackChanged("track-1"))
    pipeline.surface.snapshot()   # the applied variables
"""

from __future__ import annotations

import logging

__version__ = "1.0.0"

logging.getLogger(__name__).addHandler(logging.NullHandler())

from tunetint.config import PipelineConfig, load_config
from tunetint.extractors import (
    ImageSwatchExtractor,
    StaticAnalysisProvider,
    StaticSwatchExtractor,
)
from tunetint.pipeline import Pipeline, build_pipeline
from tunetint.process import VARIABLE_NAMES, ColorProcessor
from tunetint.runtime import (
    ColorsFailed,
    ColorsHarmonized,
    EventBus,
    StyleAuthority,
    TrackChanged,
)
from tunetint.schema import (
    BrightnessMode,
    ColorResult,
    EnhancementConfig,
    Flavor,
    MusicAnalysisSnapshot,
    RawSwatch,
    RawSwatchSet,
)

__all__ = [
    # Core API
    "build_pipeline",
    "Pipeline",
    "ColorProcessor",
    "StyleAuthority",
    "EventBus",
    "VARIABLE_NAMES",
    # Events (commonly needed)
    "TrackChanged",
    "ColorsHarmonized",
    "ColorsFailed",
    # Types
    "RawSwatch",
    "RawSwatchSet",
    "MusicAnalysisSnapshot",
    "EnhancementConfig",
    "ColorResult",
    "BrightnessMode",
    "Flavor",
    # Config
    "PipelineConfig",
    "load_config",
    "StaticSwatchExtractor",
    "StaticAnalysisProvider",
    "ImageSwatchExtractor",
    # Version
    "__version__",
]
