# Copyright (c) 2026 Tunetint
# SPDX-License-Identifier: MIT

"""
Flavor palettes and brightness tables.

A flavor is a named palette family. It supplies the neutral surface tones
(base, raised surface, text) that sit under the artwork-derived colors,
and the neutral default palette used when no usable swatches exist. Its
accents are also the targets artwork-derived role colors are harmonized
toward (see ``nearest_accent``).

Brightness modes choose which tones of the flavor act as base/surface and
how much role-color lightness is scaled.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

from tunetint.process.colorspace import hex_to_oklch, hue_distance
from tunetint.schema import BrightnessMode, Flavor, OKLCHColor


PALETTES: dict[Flavor, dict[str, str]] = {
    Flavor.MOCHA: {
        "rosewater": "#F5E0DC", "flamingo": "#F2CDCD", "pink": "#F5C2E7",
        "mauve": "#CBA6F7", "red": "#F38BA8", "maroon": "#EBA0AC",
        "peach": "#FAB387", "yellow": "#F9E2AF", "green": "#A6E3A1",
        "teal": "#94E2D5", "sky": "#89DCEB", "sapphire": "#74C7EC",
        "blue": "#89B4FA", "lavender": "#B4BEFE", "text": "#CDD6F4",
        "subtext1": "#BAC2DE", "subtext0": "#A6ADC8", "overlay2": "#9399B2",
        "overlay1": "#7F849C", "overlay0": "#6C7086", "surface2": "#585B70",
        "surface1": "#45475A", "surface0": "#313244", "base": "#1E1E2E",
        "mantle": "#181825", "crust": "#11111B",
    },
    Flavor.MACCHIATO: {
        "rosewater": "#F4DBD6", "flamingo": "#F0C6C6", "pink": "#F5BDE6",
        "mauve": "#C6A0F6", "red": "#ED8796", "maroon": "#EE99A0",
        "peach": "#F5A97F", "yellow": "#EED49F", "green": "#A6DA95",
        "teal": "#8BD5CA", "sky": "#91D7E3", "sapphire": "#7DC4E4",
        "blue": "#8AADF4", "lavender": "#B7BDF8", "text": "#CAD3F5",
        "subtext1": "#B8C0E0", "subtext0": "#A5ADCB", "overlay2": "#939AB7",
        "overlay1": "#8087A2", "overlay0": "#6E738D", "surface2": "#5B6078",
        "surface1": "#494D64", "surface0": "#363A4F", "base": "#24273A",
        "mantle": "#1E2030", "crust": "#181926",
    },
    Flavor.FRAPPE: {
        "rosewater": "#F2D5CF", "flamingo": "#EEBEBE", "pink": "#F4B8E4",
        "mauve": "#CA9EE6", "red": "#E78284", "maroon": "#EA999C",
        "peach": "#EF9F76", "yellow": "#E5C890", "green": "#A6D189",
        "teal": "#81C8BE", "sky": "#99D1DB", "sapphire": "#85C1DC",
        "blue": "#8CAAEE", "lavender": "#BABBF1", "text": "#C6D0F5",
        "subtext1": "#B5BFE2", "subtext0": "#A5ADCE", "overlay2": "#949CBB",
        "overlay1": "#838BA7", "overlay0": "#737994", "surface2": "#626880",
        "surface1": "#51576D", "surface0": "#414559", "base": "#303446",
        "mantle": "#292C3C", "crust": "#232634",
    },
    Flavor.LATTE: {
        "rosewater": "#DC8A78", "flamingo": "#DD7878", "pink": "#EA76CB",
        "mauve": "#8839EF", "red": "#D20F39", "maroon": "#E64553",
        "peach": "#FE640B", "yellow": "#DF8E1D", "green": "#40A02B",
        "teal": "#179299", "sky": "#04A5E5", "sapphire": "#209FB5",
        "blue": "#1E66F5", "lavender": "#7287FD", "text": "#4C4F69",
        "subtext1": "#5C5F77", "subtext0": "#6C6F85", "overlay2": "#7C7F93",
        "overlay1": "#8C8FA1", "overlay0": "#9CA0B0", "surface2": "#ACB0BE",
        "surface1": "#BCC0CC", "surface0": "#CCD0DA", "base": "#EFF1F5",
        "mantle": "#E6E9EF", "crust": "#DCE0E8",
    },
}

# (base slot, raised-surface slot) per brightness mode. Latte is a light
# flavor, so its "bright" end runs the other way.
_SURFACE_SLOTS: dict[BrightnessMode, tuple[str, str]] = {
    BrightnessMode.BRIGHT: ("surface0", "surface1"),
    BrightnessMode.BALANCED: ("surface0", "surface1"),
    BrightnessMode.DARK: ("base", "surface0"),
}
_LATTE_SURFACE_SLOTS: dict[BrightnessMode, tuple[str, str]] = {
    BrightnessMode.BRIGHT: ("surface1", "surface2"),
    BrightnessMode.BALANCED: ("base", "surface0"),
    BrightnessMode.DARK: ("mantle", "surface0"),
}

# Role-color lightness multiplier per resolved brightness mode.
LIGHTNESS_SCALE: dict[BrightnessMode, float] = {
    BrightnessMode.BRIGHT: 1.06,
    BrightnessMode.BALANCED: 1.0,
    BrightnessMode.DARK: 0.86,
}

# AUTO resolves from mean artwork lightness.
AUTO_BRIGHT_ABOVE = 0.6
AUTO_DARK_BELOW = 0.35


@dataclass(frozen=True)
class SurfaceTones:
    """Neutral tones for one (flavor, brightness) pair."""
    base: str
    raised: str
    text: str


def resolve_brightness(mode: BrightnessMode, artwork_lightness: float = 0.5) -> BrightnessMode:
    """Resolve AUTO to a concrete mode; other modes pass through."""
    if mode is not BrightnessMode.AUTO:
        return mode
    if artwork_lightness >= AUTO_BRIGHT_ABOVE:
        return BrightnessMode.BRIGHT
    if artwork_lightness <= AUTO_DARK_BELOW:
        return BrightnessMode.DARK
    return BrightnessMode.BALANCED


def surface_tones(
    flavor: Flavor,
    mode: BrightnessMode,
    artwork_lightness: float = 0.5,
) -> SurfaceTones:
    """Base, raised surface and text hex colors for a flavor and mode."""
    resolved = resolve_brightness(mode, artwork_lightness)
    palette = PALETTES[flavor]
    slots = _LATTE_SURFACE_SLOTS if flavor is Flavor.LATTE else _SURFACE_SLOTS
    base_slot, raised_slot = slots[resolved]
    return SurfaceTones(
        base=palette[base_slot],
        raised=palette[raised_slot],
        text=palette["text"],
    )


def default_accent(flavor: Flavor) -> str:
    """Default accent for a flavor (blue on latte for contrast, mauve otherwise)."""
    palette = PALETTES[flavor]
    return palette["blue"] if flavor is Flavor.LATTE else palette["mauve"]


def neutral_palette(flavor: Flavor) -> dict[str, str]:
    """Role → hex for the neutral default palette of a flavor."""
    palette = PALETTES[flavor]
    return {
        "primary": default_accent(flavor),
        "accent": palette["lavender"],
        "highlight": palette["text"],
        "shadow": palette["crust"],
        "atmosphere": palette["base"],
    }


def neutral_colors(flavor: Flavor) -> dict[str, OKLCHColor]:
    """Role colors of the neutral default palette."""
    return {
        role: OKLCHColor(*hex_to_oklch(hex_color))
        for role, hex_color in neutral_palette(flavor).items()
    }


# Accents a role color may be harmonized toward, in preference order
HARMONY_ACCENTS = ("mauve", "lavender", "blue", "sapphire", "sky", "pink", "peach", "teal")


@lru_cache(maxsize=None)
def _harmony_accents(flavor: Flavor) -> tuple[OKLCHColor, ...]:
    palette = PALETTES[flavor]
    return tuple(OKLCHColor(*hex_to_oklch(palette[name])) for name in HARMONY_ACCENTS)


def nearest_accent(flavor: Flavor, hue: Optional[float]) -> OKLCHColor:
    """
    Flavor accent closest in hue to ``hue``.

    Ties go to the earlier accent in ``HARMONY_ACCENTS``; an undefined hue
    therefore maps to mauve.
    """
    accents = _harmony_accents(flavor)
    return min(accents, key=lambda accent: hue_distance(hue, accent.H))
