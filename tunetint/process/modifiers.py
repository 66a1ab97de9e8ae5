# Copyright (c) 2026 Tunetint
# SPDX-License-Identifier: MIT

"""
Brightness and flavor modifiers.

Modifiers rewrite the values of a complete variable map; they never add
or remove names. They are applied by the style authority on top of the
last processed result, so switching brightness or flavor costs one pass
over an existing map instead of a new processing run.

Role colors are emitted by the processor at neutral lightness and
without flavor. The modifier:

1. Harmonizes each artwork-derived role color with the flavor by
   blending it toward the nearest flavor accent in OKLab
   (a fallback result instead takes the flavor's neutral palette)
2. Scales OKLCH lightness by the brightness table
3. Regenerates every value derived from the role colors (hex, rgb,
   oklch, accent, gradients, on-accent text)
4. Replaces surface tones and state values from the flavor tables
"""

from __future__ import annotations

from typing import Mapping

import numpy as np

from tunetint.process.colorspace import (
    ACHROMATIC_CHROMA,
    clamp_to_gamut,
    oklab_to_oklch,
    oklch_to_oklab,
)
from tunetint.process.flavors import (
    LIGHTNESS_SCALE,
    nearest_accent,
    neutral_colors,
    resolve_brightness,
    surface_tones,
)
from tunetint.process.variables import (
    role_names,
    role_variables,
    state_variables,
    surface_variables,
    parse_oklch,
)
from tunetint.schema import ROLES, BrightnessMode, Flavor, OKLCHColor


def scale_lightness(color: OKLCHColor, factor: float) -> OKLCHColor:
    """Scale OKLCH lightness at fixed hue, gamut-mapping the result."""
    L, C, H = clamp_to_gamut(color.L * factor, color.C, color.H)
    return OKLCHColor(L=L, C=C, H=H)


def _oklab(color: OKLCHColor) -> np.ndarray:
    if color.H is None:
        return np.array([color.L, 0.0, 0.0])
    return oklch_to_oklab(np.array([color.L, color.C, color.H]))


def harmonize(color: OKLCHColor, flavor: Flavor, ratio: float) -> OKLCHColor:
    """
    Blend ``color`` toward the flavor accent nearest in hue.

    The blend is linear in OKLab, so ``ratio`` 0 returns the color
    unchanged and 1 returns the accent.
    """
    if ratio <= 0.0:
        return color
    start = _oklab(color)
    end = _oklab(nearest_accent(flavor, color.H))
    L, C, H = (float(v) for v in oklab_to_oklch(start + (end - start) * min(ratio, 1.0)))
    L, C, H = clamp_to_gamut(L, C, None if C < ACHROMATIC_CHROMA else H)
    return OKLCHColor(L=L, C=C, H=H)


def apply_modifiers(
    variables: Mapping[str, str],
    brightness_mode: BrightnessMode,
    flavor: Flavor,
    artwork_lightness: float = 0.5,
    flavor_blend: float = 0.0,
) -> dict[str, str]:
    """
    Apply a brightness mode and flavor to a complete variable map.

    Always pass the unmodified map of the last processed result: the
    output depends only on that map and the arguments, so repeated or
    alternating toggles never accumulate.

    Args:
        variables: ``ColorResult.css_variables``
        brightness_mode: Mode to apply (AUTO resolves from artwork lightness)
        flavor: Flavor whose tones and accents to use
        artwork_lightness: Mean artwork lightness from the result metadata
        flavor_blend: Share of the nearest flavor accent mixed into each
            artwork-derived role color (0 disables harmonization)

    Returns:
        A new map with exactly the same names, in the same order
    """
    out = dict(variables)
    resolved = resolve_brightness(brightness_mode, artwork_lightness)
    fallback = variables.get("--sn-color-state-fallback") == "1"
    factor = LIGHTNESS_SCALE[resolved]

    if fallback or flavor_blend > 0.0 or factor != 1.0:
        if fallback:
            # The neutral palette belongs to the flavor, not the artwork
            colors = neutral_colors(flavor)
        else:
            colors = {
                role: harmonize(parse_oklch(variables[role_names(role)[2]]), flavor, flavor_blend)
                for role in ROLES
            }
        if factor != 1.0:
            colors = {role: scale_lightness(color, factor) for role, color in colors.items()}
        _update_existing(out, role_variables(colors))

    _update_existing(out, surface_variables(surface_tones(flavor, resolved)))
    _update_existing(out, state_variables(flavor, brightness_mode, fallback))
    return out


def _update_existing(target: dict[str, str], values: Mapping[str, str]) -> None:
    # Only names already present are rewritten.
    for name, value in values.items():
        if name in target:
            target[name] = value
