# Copyright (c) 2026 Tunetint
# SPDX-License-Identifier: MIT

"""
Perceptual color processor.

Main entry point: ``ColorProcessor.process(raw, music, config)``

Pipeline:
1. Filter swatches into candidates (chroma floor, lightness band)
2. Rank candidates and assign semantic roles in OKLCH
3. Apply enhancement and music modulation, gamut-mapped
4. Build the complete variable map and stamp generation metadata

The processor holds no state between calls except its generation counter.
Empty or unusable input yields the neutral palette of the configured
flavor; it is never an error.
"""

from __future__ import annotations

import itertools
import logging
import time
from typing import Optional

from tunetint.config import ProcessorSettings
from tunetint.process.flavors import neutral_colors, surface_tones
from tunetint.process.modulation import NO_MODULATION, modulate, resolve_music
from tunetint.process.selection import (
    artwork_lightness,
    rank_candidates,
    select_candidates,
    select_roles,
)
from tunetint.process.variables import build_variables
from tunetint.schema import (
    ROLES,
    ColorResult,
    EnhancementConfig,
    MusicAnalysisSnapshot,
    RawSwatchSet,
    ResultMetadata,
)

logger = logging.getLogger(__name__)


class ColorProcessor:
    """
    Turns raw swatches plus a music snapshot into a complete ColorResult.

    One instance is shared per pipeline so that generation ids stay
    monotonic. ``process`` is otherwise a pure function of its inputs.
    """

    def __init__(self, settings: Optional[ProcessorSettings] = None):
        self.settings = settings or ProcessorSettings()
        self._counter = itertools.count(1)

    def reserve_generation(self) -> int:
        """Hand out the next generation id (strictly increasing)."""
        return next(self._counter)

    def process(
        self,
        raw: Optional[RawSwatchSet],
        music: Optional[MusicAnalysisSnapshot] = None,
        config: Optional[EnhancementConfig] = None,
        *,
        generation_id: Optional[int] = None,
    ) -> ColorResult:
        """
        Process one generation.

        Args:
            raw: Swatches from the extractor (None is treated as empty)
            music: Analysis snapshot (None uses the defaults, which carry
                zero confidence and therefore no modulation)
            config: Enhancement configuration (None uses the defaults)
            generation_id: Id reserved when the request started; a new one
                is reserved if omitted

        Returns:
            ColorResult whose ``css_variables`` holds every registered name
        """
        start = time.perf_counter()
        if raw is None:
            raw = RawSwatchSet.empty("")
        music = music or MusicAnalysisSnapshot()
        config = config or EnhancementConfig()
        if generation_id is None:
            generation_id = self.reserve_generation()

        lightness = artwork_lightness(raw)
        candidates = select_candidates(raw, self.settings)

        if candidates:
            ranked = rank_candidates(candidates, config.tie_break, config.preferred_hue)
            roles = select_roles(
                ranked,
                shadow_reduction=config.shadow_reduction,
                settings=self.settings,
            )
            modulation = resolve_music(
                music, enabled=config.music_reactive, settings=self.settings
            )
            colors = {
                role: modulate(color, config, modulation)
                for role, color in roles.as_dict().items()
            }
            fallback = False
        else:
            logger.debug(
                "No usable swatches for %r (%d given), using neutral palette",
                raw.content_id, len(raw),
            )
            colors = neutral_colors(config.flavor)
            modulation = NO_MODULATION
            fallback = True

        variables = build_variables(
            colors,
            tones=surface_tones(config.flavor, config.brightness_mode, lightness),
            music=music,
            modulation=modulation,
            flavor=config.flavor,
            mode=config.brightness_mode,
            fallback=fallback,
        )
        processed = {role: colors[role].rgb for role in ROLES}
        duration_ms = (time.perf_counter() - start) * 1000.0

        result = ColorResult(
            processed_colors=processed,
            css_variables=variables,
            accent_hex=variables["--sn-accent-hex"],
            accent_rgb=processed["accent"],
            metadata=ResultMetadata(
                content_id=raw.content_id,
                generation_id=generation_id,
                processing_duration_ms=duration_ms,
                music_influence_applied=modulation.applied,
                fallback=fallback,
                artwork_lightness=lightness,
                flavor=config.flavor,
                brightness_mode=config.brightness_mode,
            ),
        )
        logger.debug(
            "Generation %d for %r: accent %s, music %s, %.2f ms",
            generation_id, raw.content_id, result.accent_hex,
            "applied" if modulation.applied else "skipped", duration_ms,
        )
        return result
