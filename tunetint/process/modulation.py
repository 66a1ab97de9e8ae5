# Copyright (c) 2026 Tunetint
# SPDX-License-Identifier: MIT

"""
Enhancement and music-reactive modulation in OKLCH.

Two stages, both applied to lightness and chroma only:

1. Enhancement (from settings): ``L *= lightness_boost``, ``C *= chroma_boost``
2. Music (from analysis):
   ``C *= 1 + energy * k_energy``,
   ``L *= 1 + (valence - 0.5) * k_valence``,
   plus a small beat-synchronous lightness offset.

Music modulation is all-or-nothing: unless analysis confidence exceeds
the threshold (or the config disables it) none of it is applied. Results are
gamut-mapped by chroma reduction, so hue is preserved end to end.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional

from tunetint.config import ProcessorSettings
from tunetint.process.colorspace import clamp_to_gamut
from tunetint.schema import EnhancementConfig, MusicAnalysisSnapshot, OKLCHColor


@dataclass(frozen=True, slots=True)
class MusicModulation:
    """
    Resolved music modulation for one generation.

    Attributes:
        applied: False when modulation was skipped
        chroma_factor: Multiplier for chroma
        lightness_factor: Multiplier for lightness
        beat_pulse: Pulse envelope (0-1), 1 on the beat
        lightness_offset: Additive lightness from the beat pulse
    """
    applied: bool = False
    chroma_factor: float = 1.0
    lightness_factor: float = 1.0
    beat_pulse: float = 0.0
    lightness_offset: float = 0.0


NO_MODULATION = MusicModulation()


def beat_pulse(beat_phase: float) -> float:
    """Raised-cosine pulse: 1.0 on the beat (phase 0), 0.0 half-way between."""
    return 0.5 + 0.5 * math.cos(2.0 * math.pi * beat_phase)


def resolve_music(
    music: MusicAnalysisSnapshot,
    *,
    enabled: bool = True,
    settings: Optional[ProcessorSettings] = None,
) -> MusicModulation:
    """Turn an analysis snapshot into modulation factors (or none)."""
    cfg = settings or ProcessorSettings()
    if not enabled or music.confidence <= cfg.confidence_threshold:
        return NO_MODULATION
    pulse = beat_pulse(music.beat_phase)
    return MusicModulation(
        applied=True,
        chroma_factor=1.0 + music.energy * cfg.k_energy,
        lightness_factor=1.0 + (music.valence - 0.5) * cfg.k_valence,
        beat_pulse=pulse,
        lightness_offset=cfg.beat_pulse_depth * music.energy * pulse,
    )


def modulate(
    color: OKLCHColor,
    config: EnhancementConfig,
    music: MusicModulation = NO_MODULATION,
) -> OKLCHColor:
    """
    Apply enhancement, then music modulation, then gamut-map.

    Achromatic colors stay neutral; chroma scaling cannot give them a hue.
    """
    L = color.L * config.lightness_boost
    C = color.C * config.chroma_boost
    if music.applied:
        C *= music.chroma_factor
        L = L * music.lightness_factor + music.lightness_offset

    H = color.H
    if H is None:
        C = 0.0
    L, C, H = clamp_to_gamut(L, C, H)
    return OKLCHColor(L=L, C=C, H=H)
