# Copyright (c) 2026 Tunetint
# SPDX-License-Identifier: MIT

"""
Style-variable registry and formatting.

``VARIABLE_NAMES`` is the fixed set of names every ColorResult carries.
Names never change between generations (same role, same name), so
downstream consumers can bind once. Only values change.

Value formats:
- ``*-hex``: ``#RRGGBB``
- ``*-rgb``: ``r,g,b`` (0-255, for ``rgba(var(--x), a)``)
- ``*-oklch``: ``oklch(L C H)`` with L/C to 3 places, H to 1 (``none`` when achromatic)
- music values: plain decimals
"""

from __future__ import annotations

from typing import Mapping

from tunetint.process.colorspace import contrast_ratio
from tunetint.process.flavors import SurfaceTones
from tunetint.process.modulation import MusicModulation
from tunetint.schema import (
    ROLES,
    BrightnessMode,
    Flavor,
    MusicAnalysisSnapshot,
    OKLCHColor,
    hex_to_rgb,
    rgb_to_hex,
)
from tunetint.schema.color_result import RGB


def role_names(role: str) -> tuple[str, str, str]:
    """(hex, rgb, oklch) variable names for a role."""
    return (
        f"--sn-color-{role}-hex",
        f"--sn-color-{role}-rgb",
        f"--sn-color-{role}-oklch",
    )


ACCENT_NAMES = ("--sn-accent-hex", "--sn-accent-rgb")
ON_ACCENT_NAME = "--sn-color-on-accent-hex"
GRADIENT_NAMES = (
    "--sn-bg-gradient-primary-rgb",
    "--sn-bg-gradient-secondary-rgb",
    "--sn-bg-gradient-accent-rgb",
)
SURFACE_NAMES = (
    "--sn-surface-base-hex",
    "--sn-surface-base-rgb",
    "--sn-surface-raised-hex",
    "--sn-surface-raised-rgb",
    "--sn-surface-text-hex",
    "--sn-surface-text-rgb",
)
MUSIC_NAMES = (
    "--sn-music-energy",
    "--sn-music-valence",
    "--sn-music-tempo-bpm",
    "--sn-music-beat-phase",
    "--sn-music-beat-pulse",
    "--sn-music-beat-interval-ms",
    "--sn-music-influence",
)
STATE_NAMES = (
    "--sn-color-state-flavor",
    "--sn-color-state-brightness",
    "--sn-color-state-fallback",
)

ROLE_NAMES: tuple[str, ...] = tuple(name for role in ROLES for name in role_names(role))

# Every name a ColorResult carries, in emission order.
VARIABLE_NAMES: tuple[str, ...] = (
    ROLE_NAMES
    + ACCENT_NAMES
    + (ON_ACCENT_NAME,)
    + GRADIENT_NAMES
    + SURFACE_NAMES
    + MUSIC_NAMES
    + STATE_NAMES
)

# Light and dark text candidates for contrast against the accent.
_ON_ACCENT_LIGHT: RGB = (255, 255, 255)
_ON_ACCENT_DARK: RGB = (17, 17, 27)


def format_rgb(rgb: RGB) -> str:
    r, g, b = rgb
    return f"{r},{g},{b}"


def format_oklch(color: OKLCHColor) -> str:
    hue = "none" if color.H is None else f"{color.H:.1f}"
    return f"oklch({color.L:.3f} {color.C:.3f} {hue})"


def on_color(rgb: RGB) -> RGB:
    """Whichever of light/dark text has the higher contrast on ``rgb``."""
    light = contrast_ratio(rgb, _ON_ACCENT_LIGHT)
    dark = contrast_ratio(rgb, _ON_ACCENT_DARK)
    return _ON_ACCENT_LIGHT if light >= dark else _ON_ACCENT_DARK


def role_variables(colors: Mapping[str, OKLCHColor]) -> dict[str, str]:
    """Variables derived from role colors (roles, accent, gradients, on-accent)."""
    out: dict[str, str] = {}
    rgbs = {role: colors[role].rgb for role in ROLES}
    for role in ROLES:
        hex_name, rgb_name, oklch_name = role_names(role)
        out[hex_name] = rgb_to_hex(rgbs[role])
        out[rgb_name] = format_rgb(rgbs[role])
        out[oklch_name] = format_oklch(colors[role])

    accent = rgbs["accent"]
    out["--sn-accent-hex"] = rgb_to_hex(accent)
    out["--sn-accent-rgb"] = format_rgb(accent)
    out[ON_ACCENT_NAME] = rgb_to_hex(on_color(accent))
    out["--sn-bg-gradient-primary-rgb"] = format_rgb(rgbs["primary"])
    out["--sn-bg-gradient-secondary-rgb"] = format_rgb(rgbs["atmosphere"])
    out["--sn-bg-gradient-accent-rgb"] = format_rgb(accent)
    return out


def surface_variables(tones: SurfaceTones) -> dict[str, str]:
    """Neutral surface variables for one flavor/brightness pair."""
    return {
        "--sn-surface-base-hex": tones.base,
        "--sn-surface-base-rgb": format_rgb(hex_to_rgb(tones.base)),
        "--sn-surface-raised-hex": tones.raised,
        "--sn-surface-raised-rgb": format_rgb(hex_to_rgb(tones.raised)),
        "--sn-surface-text-hex": tones.text,
        "--sn-surface-text-rgb": format_rgb(hex_to_rgb(tones.text)),
    }


def music_variables(
    music: MusicAnalysisSnapshot,
    modulation: MusicModulation,
) -> dict[str, str]:
    """Music signal variables; present (with neutral pulse) even when unapplied."""
    return {
        "--sn-music-energy": f"{music.energy:.3f}",
        "--sn-music-valence": f"{music.valence:.3f}",
        "--sn-music-tempo-bpm": f"{music.tempo_bpm:.1f}",
        "--sn-music-beat-phase": f"{music.beat_phase:.3f}",
        "--sn-music-beat-pulse": f"{modulation.beat_pulse:.3f}",
        "--sn-music-beat-interval-ms": f"{music.beat_interval_ms:.0f}",
        "--sn-music-influence": "1" if modulation.applied else "0",
    }


def state_variables(flavor: Flavor, mode: BrightnessMode, fallback: bool) -> dict[str, str]:
    return {
        "--sn-color-state-flavor": f'"{flavor.value}"',
        "--sn-color-state-brightness": f'"{mode.value}"',
        "--sn-color-state-fallback": "1" if fallback else "0",
    }


def build_variables(
    colors: Mapping[str, OKLCHColor],
    *,
    tones: SurfaceTones,
    music: MusicAnalysisSnapshot,
    modulation: MusicModulation,
    flavor: Flavor,
    mode: BrightnessMode,
    fallback: bool,
) -> dict[str, str]:
    """
    The complete variable map, ordered as ``VARIABLE_NAMES``.

    Raises:
        KeyError: If a registered name was not produced (a programming error)
    """
    values: dict[str, str] = {}
    values.update(role_variables(colors))
    values.update(surface_variables(tones))
    values.update(music_variables(music, modulation))
    values.update(state_variables(flavor, mode, fallback))
    return {name: values[name] for name in VARIABLE_NAMES}


def parse_oklch(value: str) -> OKLCHColor:
    """
    Inverse of ``format_oklch``.

    Raises:
        ValueError: If ``value`` is not an ``oklch(L C H)`` string
    """
    text = value.strip()
    if not (text.startswith("oklch(") and text.endswith(")")):
        raise ValueError(f"Not an oklch() value: {value!r}")
    parts = text[len("oklch("):-1].split()
    if len(parts) != 3:
        raise ValueError(f"Not an oklch() value: {value!r}")
    L, C = float(parts[0]), float(parts[1])
    H = None if parts[2] == "none" else float(parts[2])
    return OKLCHColor(L=L, C=C, H=H)
