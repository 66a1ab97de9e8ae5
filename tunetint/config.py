# Copyright (c) 2026 Tunetint
# SPDX-License-Identifier: MIT

"""
Pipeline configuration.

Tuning constants live in frozen dataclasses with documented defaults.
A JSON file can override any of them::

    {
      "processor": {"chroma_floor": 0.04, "k_energy": 0.5},
      "router": {"extraction_timeout_s": 5.0},
      "enhancement": {"preset": "vibrant", "flavor": "latte"}
    }
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Union

from tunetint.schema import EnhancementConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProcessorSettings:
    """Constants for candidate selection and music modulation."""

    # Candidates below this OKLCH chroma are near-achromatic and dropped
    chroma_floor: float = 0.03

    # Candidates outside this lightness band have too little contrast
    min_lightness: float = 0.08
    max_lightness: float = 0.97

    # Only the most populous candidates are ranked
    max_candidates: int = 8

    # Accent must sit at least this far (degrees) from primary when possible
    accent_min_hue_separation: float = 30.0

    # chroma *= 1 + energy * k_energy
    k_energy: float = 0.35

    # lightness *= 1 + (valence - 0.5) * k_valence
    k_valence: float = 0.2

    # Music modulation is skipped entirely below this confidence
    confidence_threshold: float = 0.3

    # Peak lightness offset contributed by the beat pulse
    beat_pulse_depth: float = 0.03

    def __post_init__(self) -> None:
        if self.chroma_floor < 0.0:
            raise ValueError(f"chroma_floor must be >= 0, got {self.chroma_floor}")
        if not 0.0 <= self.min_lightness < self.max_lightness <= 1.0:
            raise ValueError(
                f"lightness band must satisfy 0 <= min < max <= 1, "
                f"got {self.min_lightness}..{self.max_lightness}"
            )
        if self.max_candidates < 1:
            raise ValueError(f"max_candidates must be >= 1, got {self.max_candidates}")
        if not 0.0 <= self.confidence_threshold <= 1.0:
            raise ValueError(
                f"confidence_threshold must be 0-1, got {self.confidence_threshold}"
            )


@dataclass(frozen=True)
class RouterSettings:
    """Constants for the event router."""

    # Bounded wait on the upstream extractor
    extraction_timeout_s: float = 10.0

    def __post_init__(self) -> None:
        if self.extraction_timeout_s <= 0.0:
            raise ValueError(
                f"extraction_timeout_s must be > 0, got {self.extraction_timeout_s}"
            )


@dataclass(frozen=True)
class PipelineConfig:
    """Everything needed to build a pipeline."""

    processor: ProcessorSettings = field(default_factory=ProcessorSettings)
    router: RouterSettings = field(default_factory=RouterSettings)
    enhancement: EnhancementConfig = field(default_factory=EnhancementConfig)

    @classmethod
    def from_dict(cls, data: dict) -> PipelineConfig:
        """Build from a dict of sections; omitted sections keep defaults."""
        unknown = set(data) - {"processor", "router", "enhancement"}
        if unknown:
            raise ValueError(f"Unknown config sections: {sorted(unknown)}")
        return cls(
            processor=_override(ProcessorSettings(), data.get("processor", {})),
            router=_override(RouterSettings(), data.get("router", {})),
            enhancement=EnhancementConfig.from_dict(data.get("enhancement", {})),
        )

    def to_dict(self) -> dict:
        return {
            "processor": {f.name: getattr(self.processor, f.name) for f in fields(self.processor)},
            "router": {f.name: getattr(self.router, f.name) for f in fields(self.router)},
            "enhancement": self.enhancement.to_dict(),
        }


def _override(defaults, values: dict):
    names = {f.name for f in fields(defaults)}
    unknown = set(values) - names
    if unknown:
        raise ValueError(
            f"Unknown {type(defaults).__name__} keys: {sorted(unknown)}"
        )
    return replace(defaults, **values)


def load_config(path: Union[str, Path]) -> PipelineConfig:
    """Load a PipelineConfig from a JSON file."""
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    config = PipelineConfig.from_dict(data)
    logger.debug("Loaded pipeline config from %s", path)
    return config
