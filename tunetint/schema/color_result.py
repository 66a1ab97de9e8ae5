# Copyright (c) 2026 Tunetint
# SPDX-License-Identifier: MIT

"""
ColorResult v1.0: data model for the music-reactive color pipeline.

Design principles:
- Immutable: inputs and outputs are frozen dataclasses
- Deterministic: same (swatches, music, config) → same variables
- Complete: a ColorResult carries every variable that will be applied
- Serializable: JSON-ready for late-subscribing consumers

Inputs:
    RawSwatchSet           : swatches extracted from artwork (upstream)
    MusicAnalysisSnapshot  : best-effort audio analysis (upstream)
    EnhancementConfig      : settings-derived parameters

Output:
    ColorResult            : processed role colors, the complete
                             style-variable map, and metadata

OKLCH Color Space:
- L (Lightness): 0.0 = black, 1.0 = white
- C (Chroma): 0.0 = gray, ~0.32 = max saturation in sRGB
- H (Hue): 0-360 degrees (≈30=orange, ≈90=yellow, ≈145=green, ≈250=blue, ≈330=pink/red)
"""

from __future__ import annotations

import json
import math
from dataclasses import dataclass, field, replace
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping, Optional


# =============================================================================
# Schema Version
# =============================================================================

SCHEMA_VERSION = "1.0"

# Semantic roles, in emission order.
ROLES: tuple[str, ...] = ("primary", "accent", "highlight", "shadow", "atmosphere")

RGB = tuple[int, int, int]


# =============================================================================
# Enumerations
# =============================================================================


class BrightnessMode(Enum):
    """Global brightness modifier applied by the style authority."""

    BRIGHT = "bright"
    BALANCED = "balanced"
    DARK = "dark"
    AUTO = "auto"


class Flavor(Enum):
    """Named palette families used for neutral surfaces and fallbacks."""

    MOCHA = "mocha"
    MACCHIATO = "macchiato"
    FRAPPE = "frappe"
    LATTE = "latte"


class TieBreak(Enum):
    """Ranking keys for role selection, applied in configured order."""

    POPULATION = "population"
    CHROMA = "chroma"
    HUE_DISTANCE = "hue_distance"


DEFAULT_TIE_BREAK: tuple[TieBreak, ...] = (
    TieBreak.POPULATION,
    TieBreak.CHROMA,
    TieBreak.HUE_DISTANCE,
)


# =============================================================================
# Helpers
# =============================================================================


def rgb_to_hex(rgb: RGB) -> str:
    """Format an integer RGB triple as ``#RRGGBB``."""
    r, g, b = rgb
    return f"#{r:02X}{g:02X}{b:02X}"


def hex_to_rgb(hex_color: str) -> RGB:
    """Parse ``#RRGGBB`` (or ``RRGGBB``) into an integer RGB triple."""
    value = hex_color.strip().lstrip("#")
    if len(value) != 6:
        raise ValueError(f"Expected 6-digit hex color, got {hex_color!r}")
    return (int(value[0:2], 16), int(value[2:4], 16), int(value[4:6], 16))


def _validate_rgb(rgb: Any) -> RGB:
    if len(rgb) != 3:
        raise ValueError(f"RGB must have 3 channels, got {rgb!r}")
    out = tuple(int(v) for v in rgb)
    for v in out:
        if not 0 <= v <= 255:
            raise ValueError(f"RGB channel must be 0-255, got {v}")
    return out  # type: ignore[return-value]


def _unit(name: str, value: float) -> None:
    if not 0.0 <= value <= 1.0:
        raise ValueError(f"{name} must be 0-1, got {value}")


def _enum(cls, value):
    if isinstance(value, cls):
        return value
    return cls(str(value).lower())


# =============================================================================
# Core Color Type
# =============================================================================


@dataclass(frozen=True, slots=True)
class OKLCHColor:
    """
    A single color in OKLCH color space.

    This is the working representation inside the processor: chroma and
    lightness adjustments are made here, never on RGB, so boosting one
    does not shift hue.

    Attributes:
        L: Lightness (0.0 = black, 1.0 = white)
        C: Chroma (0.0 = neutral gray, typical max ~0.32 for sRGB)
        H: Hue in degrees (0-360), None for achromatic colors
    """
    L: float
    C: float
    H: Optional[float] = None

    def __post_init__(self) -> None:
        """Validate color values are within expected ranges."""
        if not 0.0 <= self.L <= 1.0:
            raise ValueError(f"Lightness must be 0-1, got {self.L}")
        if self.C < 0.0:
            raise ValueError(f"Chroma must be >= 0, got {self.C}")
        if self.H is not None and not 0.0 <= self.H < 360.0:
            raise ValueError(f"Hue must be 0-360, got {self.H}")

    @property
    def is_achromatic(self) -> bool:
        """True if the color has no perceptible hue (gray/white/black)."""
        return self.C < 0.02 or self.H is None

    @property
    def rgb(self) -> RGB:
        """Integer sRGB triple, gamut-clipped."""
        from tunetint.process.colorspace import oklch_to_rgb
        return oklch_to_rgb(self.L, self.C, self.H)

    @property
    def hex(self) -> str:
        """Hex color string like ``#3941C8``."""
        return rgb_to_hex(self.rgb)

    def to_dict(self) -> dict:
        """Serialize to dictionary."""
        return {"L": self.L, "C": self.C, "H": self.H}

    @classmethod
    def from_dict(cls, data: dict) -> OKLCHColor:
        """Deserialize from dictionary."""
        return cls(L=data["L"], C=data["C"], H=data.get("H"))


# =============================================================================
# Upstream Inputs
# =============================================================================


@dataclass(frozen=True, slots=True)
class RawSwatch:
    """
    One representative color sampled from artwork.

    Attributes:
        rgb: sRGB triple, 0-255 per channel
        population: Relative weight of this swatch in the artwork (>= 0).
            Weights need not sum to 1; the processor normalizes them.
    """
    rgb: RGB
    population: float

    def __post_init__(self) -> None:
        object.__setattr__(self, "rgb", _validate_rgb(self.rgb))
        if not math.isfinite(self.population) or self.population < 0.0:
            raise ValueError(f"Population must be >= 0, got {self.population}")

    @property
    def hex(self) -> str:
        return rgb_to_hex(self.rgb)

    def to_dict(self) -> dict:
        return {"rgb": list(self.rgb), "population": self.population}

    @classmethod
    def from_dict(cls, data: dict) -> RawSwatch:
        return cls(rgb=tuple(data["rgb"]), population=float(data.get("population", 0.0)))


@dataclass(frozen=True, slots=True)
class RawSwatchSet:
    """
    Ordered swatches extracted from one piece of content.

    The content id identifies the track (or other content) the artwork
    belongs to; it is used for staleness checks and to decide whether a
    settings change can reuse already-extracted swatches.
    """
    content_id: str
    swatches: tuple[RawSwatch, ...] = ()

    def __post_init__(self) -> None:
        if not isinstance(self.content_id, str):
            raise ValueError(f"content_id must be a string, got {self.content_id!r}")
        object.__setattr__(self, "swatches", tuple(self.swatches))

    def __len__(self) -> int:
        return len(self.swatches)

    @property
    def is_empty(self) -> bool:
        return not self.swatches

    @classmethod
    def empty(cls, content_id: str) -> RawSwatchSet:
        return cls(content_id=content_id, swatches=())

    def to_dict(self) -> dict:
        return {
            "content_id": self.content_id,
            "swatches": [s.to_dict() for s in self.swatches],
        }

    @classmethod
    def from_dict(cls, data: dict) -> RawSwatchSet:
        return cls(
            content_id=str(data.get("content_id", "")),
            swatches=tuple(RawSwatch.from_dict(s) for s in data.get("swatches", ())),
        )


@dataclass(frozen=True, slots=True)
class MusicAnalysisSnapshot:
    """
    Best-effort audio analysis for the current moment of playback.

    Every field has a default because the analysis collaborator may be
    unavailable. A confidence of 0 means "no usable analysis" and disables
    music modulation entirely.
    """
    energy: float = 0.5
    valence: float = 0.5
    tempo_bpm: float = 120.0
    beat_phase: float = 0.0
    confidence: float = 0.0

    def __post_init__(self) -> None:
        _unit("energy", self.energy)
        _unit("valence", self.valence)
        _unit("beat_phase", self.beat_phase)
        _unit("confidence", self.confidence)
        if not math.isfinite(self.tempo_bpm) or self.tempo_bpm < 0.0:
            raise ValueError(f"tempo_bpm must be >= 0, got {self.tempo_bpm}")

    @property
    def beat_interval_ms(self) -> float:
        """Milliseconds per beat, 0 when tempo is unknown."""
        if self.tempo_bpm <= 0.0:
            return 0.0
        return 60000.0 / self.tempo_bpm

    def to_dict(self) -> dict:
        return {
            "energy": self.energy,
            "valence": self.valence,
            "tempo_bpm": self.tempo_bpm,
            "beat_phase": self.beat_phase,
            "confidence": self.confidence,
        }

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> MusicAnalysisSnapshot:
        """Lenient constructor: missing or invalid fields fall back to defaults.

        Unit-range fields are clamped to [0, 1]; a negative or non-finite
        tempo falls back to the default.
        """
        defaults = cls()
        data = data or {}

        def num(key: str, default: float) -> float:
            try:
                value = float(data.get(key, default))
            except (TypeError, ValueError):
                return default
            return value if math.isfinite(value) else default

        def unit(key: str, default: float) -> float:
            return min(1.0, max(0.0, num(key, default)))

        tempo = num("tempo_bpm", defaults.tempo_bpm)
        if tempo < 0.0:
            tempo = defaults.tempo_bpm
        return cls(
            energy=unit("energy", defaults.energy),
            valence=unit("valence", defaults.valence),
            tempo_bpm=tempo,
            beat_phase=unit("beat_phase", defaults.beat_phase),
            confidence=unit("confidence", defaults.confidence),
        )


# =============================================================================
# Enhancement Configuration
# =============================================================================


@dataclass(frozen=True, slots=True)
class EnhancementConfig:
    """
    Settings-derived processing parameters.

    Read-only input to the processor. The style authority holds the
    current instance and replaces it when settings change.

    Attributes:
        chroma_boost: Chroma multiplier applied in OKLCH (0.5-2.0)
        lightness_boost: Lightness multiplier applied in OKLCH (0.5-1.5)
        shadow_reduction: Lightness factor for the shadow role (0.1-0.6)
        preferred_hue: Hue (degrees) favoured by the HUE_DISTANCE tie-break
        flavor: Palette family for neutral surfaces and fallbacks
        brightness_mode: Brightness modifier
        music_reactive: If False, music modulation is never applied
        flavor_blend: Share (0-1) by which each artwork-derived role color is
            blended toward the nearest flavor accent, in OKLab
        tie_break: Ranking key order for role selection
    """
    chroma_boost: float = 1.15
    lightness_boost: float = 1.1
    shadow_reduction: float = 0.3
    preferred_hue: Optional[float] = None
    flavor: Flavor = Flavor.MOCHA
    brightness_mode: BrightnessMode = BrightnessMode.BALANCED
    music_reactive: bool = True
    flavor_blend: float = 0.15
    tie_break: tuple[TieBreak, ...] = DEFAULT_TIE_BREAK

    def __post_init__(self) -> None:
        if not 0.5 <= self.chroma_boost <= 2.0:
            raise ValueError(f"chroma_boost must be 0.5-2.0, got {self.chroma_boost}")
        if not 0.5 <= self.lightness_boost <= 1.5:
            raise ValueError(f"lightness_boost must be 0.5-1.5, got {self.lightness_boost}")
        if not 0.1 <= self.shadow_reduction <= 0.6:
            raise ValueError(f"shadow_reduction must be 0.1-0.6, got {self.shadow_reduction}")
        if self.preferred_hue is not None and not 0.0 <= self.preferred_hue < 360.0:
            raise ValueError(f"preferred_hue must be 0-360, got {self.preferred_hue}")
        if not 0.0 <= self.flavor_blend <= 1.0:
            raise ValueError(f"flavor_blend must be 0-1, got {self.flavor_blend}")
        object.__setattr__(self, "flavor", _enum(Flavor, self.flavor))
        object.__setattr__(self, "brightness_mode", _enum(BrightnessMode, self.brightness_mode))
        order = tuple(_enum(TieBreak, t) for t in self.tie_break)
        if not order:
            raise ValueError("tie_break cannot be empty")
        if len(set(order)) != len(order):
            raise ValueError(f"tie_break has duplicate keys: {order}")
        object.__setattr__(self, "tie_break", order)

    def requires_reprocessing(self, other: EnhancementConfig) -> bool:
        """True if switching to ``other`` changes processor output.

        Brightness mode, flavor and flavor blend are applied as modifiers
        by the style authority and never require re-running the processor.
        """
        return (
            self.chroma_boost != other.chroma_boost
            or self.lightness_boost != other.lightness_boost
            or self.shadow_reduction != other.shadow_reduction
            or self.preferred_hue != other.preferred_hue
            or self.music_reactive != other.music_reactive
            or self.tie_break != other.tie_break
        )

    def with_changes(self, **changes) -> EnhancementConfig:
        return replace(self, **changes)

    def to_dict(self) -> dict:
        return {
            "chroma_boost": self.chroma_boost,
            "lightness_boost": self.lightness_boost,
            "shadow_reduction": self.shadow_reduction,
            "preferred_hue": self.preferred_hue,
            "flavor": self.flavor.value,
            "brightness_mode": self.brightness_mode.value,
            "music_reactive": self.music_reactive,
            "flavor_blend": self.flavor_blend,
            "tie_break": [t.value for t in self.tie_break],
        }

    @classmethod
    def from_dict(cls, data: dict) -> EnhancementConfig:
        """Deserialize from dictionary.

        A ``preset`` key (subtle, standard, vibrant, cosmic) seeds the
        boost values; explicit keys override it.
        """
        data = dict(data)
        preset = str(data.pop("preset", "standard")).lower()
        if preset not in ENHANCEMENT_PRESETS:
            raise ValueError(f"Unknown enhancement preset: {preset!r}")
        base = ENHANCEMENT_PRESETS[preset]
        known = set(base.to_dict())
        unknown = set(data) - known
        if unknown:
            raise ValueError(f"Unknown enhancement settings: {sorted(unknown)}")
        return replace(base, **data)


# Enhancement presets. STANDARD is the default configuration.
ENHANCEMENT_PRESETS: dict[str, EnhancementConfig] = {
    "subtle": EnhancementConfig(chroma_boost=1.1, lightness_boost=1.05, shadow_reduction=0.4),
    "standard": EnhancementConfig(chroma_boost=1.15, lightness_boost=1.1, shadow_reduction=0.3),
    "vibrant": EnhancementConfig(chroma_boost=1.25, lightness_boost=1.15, shadow_reduction=0.25),
    "cosmic": EnhancementConfig(chroma_boost=1.2, lightness_boost=1.1, shadow_reduction=0.2),
}


# =============================================================================
# Processing Output
# =============================================================================


@dataclass(frozen=True, slots=True)
class ResultMetadata:
    """
    Provenance for a ColorResult.

    Attributes:
        content_id: Content the swatches came from
        generation_id: Monotonic id; higher ids supersede lower ones
        processing_duration_ms: Wall time spent in the processor
        music_influence_applied: True only if music modulation ran
        fallback: True if the neutral default palette was used
        artwork_lightness: Population-weighted mean OKLCH lightness of the
            input swatches (0.5 when there were none); drives AUTO brightness
        flavor: Flavor the result was produced under
        brightness_mode: Brightness mode the result was produced under
    """
    content_id: str
    generation_id: int
    processing_duration_ms: float = 0.0
    music_influence_applied: bool = False
    fallback: bool = False
    artwork_lightness: float = 0.5
    flavor: Flavor = Flavor.MOCHA
    brightness_mode: BrightnessMode = BrightnessMode.BALANCED

    def __post_init__(self) -> None:
        if self.generation_id < 0:
            raise ValueError(f"generation_id must be >= 0, got {self.generation_id}")
        _unit("artwork_lightness", self.artwork_lightness)

    def to_dict(self) -> dict:
        return {
            "content_id": self.content_id,
            "generation_id": self.generation_id,
            "processing_duration_ms": self.processing_duration_ms,
            "music_influence_applied": self.music_influence_applied,
            "fallback": self.fallback,
            "artwork_lightness": self.artwork_lightness,
            "flavor": self.flavor.value,
            "brightness_mode": self.brightness_mode.value,
        }

    @classmethod
    def from_dict(cls, data: dict) -> ResultMetadata:
        return cls(
            content_id=data["content_id"],
            generation_id=int(data["generation_id"]),
            processing_duration_ms=float(data.get("processing_duration_ms", 0.0)),
            music_influence_applied=bool(data.get("music_influence_applied", False)),
            fallback=bool(data.get("fallback", False)),
            artwork_lightness=float(data.get("artwork_lightness", 0.5)),
            flavor=Flavor(data.get("flavor", Flavor.MOCHA.value)),
            brightness_mode=BrightnessMode(
                data.get("brightness_mode", BrightnessMode.BALANCED.value)
            ),
        )


@dataclass(frozen=True, slots=True)
class ColorResult:
    """
    The single authoritative output of one pipeline generation.

    ``css_variables`` is complete: the style authority applies it as-is
    (after value-only modifiers) and never synthesizes variables of its
    own. ``accent_hex``/``accent_rgb`` duplicate the accent role for
    consumers that only need the headline color. Both maps are read-only
    views, so an applied result cannot be edited after the fact.

    Attributes:
        processed_colors: Role name → sRGB triple (0-255)
        css_variables: Fully-qualified variable name → string value
        accent_hex: Accent color as ``#RRGGBB``
        accent_rgb: Accent color as an sRGB triple
        metadata: Generation and provenance information
        version: Schema version
    """
    processed_colors: Mapping[str, RGB]
    css_variables: Mapping[str, str]
    accent_hex: str
    accent_rgb: RGB
    metadata: ResultMetadata
    version: str = field(default=SCHEMA_VERSION)

    def __post_init__(self) -> None:
        missing = [role for role in ROLES if role not in self.processed_colors]
        if missing:
            raise ValueError(f"Missing role colors: {missing}")
        object.__setattr__(
            self,
            "processed_colors",
            MappingProxyType(
                {role: _validate_rgb(rgb) for role, rgb in self.processed_colors.items()}
            ),
        )
        object.__setattr__(self, "css_variables", MappingProxyType(dict(self.css_variables)))
        object.__setattr__(self, "accent_rgb", _validate_rgb(self.accent_rgb))
        if rgb_to_hex(self.accent_rgb) != self.accent_hex.upper():
            raise ValueError(
                f"accent_hex {self.accent_hex} does not match accent_rgb {self.accent_rgb}"
            )

    @property
    def generation_id(self) -> int:
        return self.metadata.generation_id

    @property
    def content_id(self) -> str:
        return self.metadata.content_id

    def role_hex(self, role: str) -> str:
        """Hex string for a semantic role."""
        return rgb_to_hex(self.processed_colors[role])

    def to_dict(self) -> dict:
        """Serialize to dictionary (the ``colors:harmonized`` payload)."""
        return {
            "version": self.version,
            "processed_colors": {k: list(v) for k, v in self.processed_colors.items()},
            "css_variables": dict(self.css_variables),
            "accent_hex": self.accent_hex,
            "accent_rgb": list(self.accent_rgb),
            "metadata": self.metadata.to_dict(),
        }

    def to_json(self, indent: Optional[int] = 2) -> str:
        """Serialize to JSON string."""
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_dict(cls, data: dict) -> ColorResult:
        """Deserialize from dictionary."""
        return cls(
            version=data.get("version", SCHEMA_VERSION),
            processed_colors={k: tuple(v) for k, v in data["processed_colors"].items()},
            css_variables=dict(data["css_variables"]),
            accent_hex=data["accent_hex"],
            accent_rgb=tuple(data["accent_rgb"]),
            metadata=ResultMetadata.from_dict(data["metadata"]),
        )

    @classmethod
    def from_json(cls, json_str: str) -> ColorResult:
        """Deserialize from JSON string."""
        return cls.from_dict(json.loads(json_str))
