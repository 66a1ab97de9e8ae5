# Copyright (c) 2026 Tunetint
# SPDX-License-Identifier: MIT

"""
Tunetint schema definitions.

Immutable inputs and outputs of the color pipeline.
"""

from tunetint.schema.color_result import (
    DEFAULT_TIE_BREAK,
    ENHANCEMENT_PRESETS,
    RGB,
    ROLES,
    SCHEMA_VERSION,
    BrightnessMode,
    ColorResult,
    EnhancementConfig,
    Flavor,
    MusicAnalysisSnapshot,
    OKLCHColor,
    RawSwatch,
    RawSwatchSet,
    ResultMetadata,
    TieBreak,
    hex_to_rgb,
    rgb_to_hex,
)

__all__ = [
    "SCHEMA_VERSION",
    "ROLES",
    "RGB",
    # Enumerations
    "BrightnessMode",
    "Flavor",
    "TieBreak",
    "DEFAULT_TIE_BREAK",
    # Colors
    "OKLCHColor",
    "rgb_to_hex",
    "hex_to_rgb",
    # Inputs
    "RawSwatch",
    "RawSwatchSet",
    "MusicAnalysisSnapshot",
    "EnhancementConfig",
    "ENHANCEMENT_PRESETS",
    # Output
    "ResultMetadata",
    "ColorResult",
]
