# Copyright (c) 2026 Tunetint
# SPDX-License-Identifier: MIT

"""
Color space conversions and gamut handling.

Conversion chain: sRGB → Linear RGB → OKLab → OKLCH

References:
- OKLab: https://bottosson.github.io/posts/oklab/
- OKLCH: Cylindrical form of OKLab (Lightness, Chroma, Hue)

OKLCH is where every adjustment in the pipeline happens. Scaling C or L
there is monotonic and leaves hue alone, which is not true of HSL or raw
RGB. Values that leave the sRGB gamut are brought back by reducing chroma
at fixed lightness and hue (``clamp_to_gamut``), never by wrapping.
"""

from __future__ import annotations

import math
from typing import Optional

import numpy as np
from numpy.typing import NDArray

from tunetint.schema.color_result import RGB, rgb_to_hex

# Chroma below this is treated as achromatic (hue undefined).
ACHROMATIC_CHROMA = 0.02

# Tolerance for the linear-RGB gamut test.
_GAMUT_EPS = 1e-4


def normalize_hue(H: float) -> float:
    """Wrap a hue into [0, 360)."""
    h = float(H) % 360.0
    # -1e-17 % 360.0 rounds up to 360.0
    return 0.0 if h >= 360.0 else h


# =============================================================================
# sRGB ↔ Linear RGB
# =============================================================================


def srgb_to_linear(srgb: NDArray[np.float64]) -> NDArray[np.float64]:
    """
    Convert sRGB values [0,1] to linear RGB.

    sRGB uses a piecewise gamma curve:
    - For values <= 0.04045: linear/12.92
    - For values > 0.04045: ((value + 0.055) / 1.055) ^ 2.4
    """
    srgb = np.asarray(srgb, dtype=np.float64)
    return np.where(
        srgb <= 0.04045,
        srgb / 12.92,
        np.power((srgb + 0.055) / 1.055, 2.4),
    )


def linear_to_srgb(linear: NDArray[np.float64]) -> NDArray[np.float64]:
    """Convert linear RGB to sRGB values, clipped to [0,1]."""
    linear = np.asarray(linear, dtype=np.float64)
    # Negative values would produce NaN in the power function
    linear_safe = np.maximum(linear, 0.0)
    srgb = np.where(
        linear_safe <= 0.0031308,
        linear_safe * 12.92,
        1.055 * np.power(linear_safe, 1.0 / 2.4) - 0.055,
    )
    return np.clip(srgb, 0.0, 1.0)


# =============================================================================
# Linear RGB ↔ OKLab
# =============================================================================

# Matrices from https://bottosson.github.io/posts/oklab/

# Linear sRGB to LMS (cone responses)
_M1 = np.array([
    [0.4122214708, 0.5363325363, 0.0514459929],
    [0.2119034982, 0.6806995451, 0.1073969566],
    [0.0883024619, 0.2817188376, 0.6299787005],
], dtype=np.float64)

# LMS to OKLab
_M2 = np.array([
    [0.2104542553, 0.7936177850, -0.0040720468],
    [1.9779984951, -2.4285922050, 0.4505937099],
    [0.0259040371, 0.7827717662, -0.8086757660],
], dtype=np.float64)

_M1_INV = np.linalg.inv(_M1)
_M2_INV = np.linalg.inv(_M2)


def linear_rgb_to_oklab(rgb: NDArray[np.float64]) -> NDArray[np.float64]:
    """Convert linear RGB (..., 3) to OKLab (..., 3)."""
    rgb = np.asarray(rgb, dtype=np.float64)
    lms = np.einsum('...j,ij->...i', rgb, _M1)
    lms_cbrt = np.cbrt(lms)
    return np.einsum('...j,ij->...i', lms_cbrt, _M2)


def oklab_to_linear_rgb(lab: NDArray[np.float64]) -> NDArray[np.float64]:
    """Convert OKLab (..., 3) to linear RGB (..., 3). Result is not clipped."""
    lab = np.asarray(lab, dtype=np.float64)
    lms = np.einsum('...j,ij->...i', lab, _M2_INV) ** 3
    return np.einsum('...j,ij->...i', lms, _M1_INV)


# =============================================================================
# OKLab ↔ OKLCH
# =============================================================================


def oklab_to_oklch(lab: NDArray[np.float64]) -> NDArray[np.float64]:
    """Convert OKLab to OKLCH. H is in degrees [0, 360)."""
    lab = np.asarray(lab, dtype=np.float64)
    L = lab[..., 0]
    a = lab[..., 1]
    b = lab[..., 2]
    C = np.sqrt(a**2 + b**2)
    H = np.degrees(np.arctan2(b, a)) % 360.0
    return np.stack([L, C, H], axis=-1)


def oklch_to_oklab(lch: NDArray[np.float64]) -> NDArray[np.float64]:
    """Convert OKLCH (H in degrees) to OKLab."""
    lch = np.asarray(lch, dtype=np.float64)
    L = lch[..., 0]
    C = lch[..., 1]
    H_rad = np.radians(lch[..., 2])
    return np.stack([L, C * np.cos(H_rad), C * np.sin(H_rad)], axis=-1)


# =============================================================================
# Integer RGB ↔ OKLCH
# =============================================================================


def rgb_array_to_oklch(pixels: NDArray) -> NDArray[np.float64]:
    """
    Convert an array of 0-255 sRGB triples to OKLCH.

    Args:
        pixels: Array of shape (..., 3) with values in [0, 255]

    Returns:
        Array of shape (..., 3) with (L, C, H) rows
    """
    srgb = np.asarray(pixels, dtype=np.float64) / 255.0
    return oklab_to_oklch(linear_rgb_to_oklab(srgb_to_linear(srgb)))


def rgb_to_oklch(rgb: RGB) -> tuple[float, float, Optional[float]]:
    """
    Convert one 0-255 sRGB triple to OKLCH.

    Returns:
        (L, C, H) where H is None for achromatic colors
    """
    L, C, H = (float(v) for v in rgb_array_to_oklch(np.array(rgb, dtype=np.float64)))
    L = min(1.0, max(0.0, L))
    if C < ACHROMATIC_CHROMA:
        return L, C, None
    return L, C, normalize_hue(H)


def oklch_to_linear(L: float, C: float, H: Optional[float]) -> NDArray[np.float64]:
    """Linear RGB for an OKLCH color (unclipped, may be out of gamut).

    An undefined hue means a neutral color: chroma is ignored.
    """
    if H is None:
        lch = np.array([L, 0.0, 0.0], dtype=np.float64)
    else:
        lch = np.array([L, C, H], dtype=np.float64)
    return oklab_to_linear_rgb(oklch_to_oklab(lch))


def in_gamut(L: float, C: float, H: Optional[float]) -> bool:
    """True if the OKLCH color is representable in sRGB."""
    linear = oklch_to_linear(L, C, H)
    return bool(np.all(linear >= -_GAMUT_EPS) and np.all(linear <= 1.0 + _GAMUT_EPS))


def clamp_to_gamut(
    L: float,
    C: float,
    H: Optional[float],
    *,
    iterations: int = 24,
) -> tuple[float, float, Optional[float]]:
    """
    Bring an OKLCH color into the sRGB gamut.

    Lightness is clamped to [0, 1] and negative chroma to 0. If the color
    is still out of gamut, chroma is reduced by bisection at fixed L and H
    until it fits. Hue is never changed.

    Returns:
        (L, C, H) inside the sRGB gamut
    """
    if not math.isfinite(L):
        L = 0.5
    if not math.isfinite(C):
        C = 0.0
    L = min(1.0, max(0.0, L))
    C = max(0.0, C)
    if H is not None:
        H = normalize_hue(H)
    if H is None or C == 0.0 or in_gamut(L, C, H):
        return L, C, H

    lo, hi = 0.0, C
    for _ in range(iterations):
        mid = (lo + hi) / 2.0
        if in_gamut(L, mid, H):
            lo = mid
        else:
            hi = mid
    return L, lo, H


def oklch_to_rgb(L: float, C: float, H: Optional[float]) -> RGB:
    """
    Convert OKLCH to a 0-255 sRGB triple.

    The color is gamut-mapped first, then any residual rounding error is
    clipped.
    """
    L, C, H = clamp_to_gamut(L, C, H)
    srgb = linear_to_srgb(oklch_to_linear(L, C, H))
    r, g, b = (srgb * 255.0).round().astype(int)
    return int(r), int(g), int(b)


def oklch_to_hex(L: float, C: float, H: Optional[float]) -> str:
    """Convert OKLCH to a hex string like ``#3941C8``."""
    return rgb_to_hex(oklch_to_rgb(L, C, H))


def hex_to_oklch(hex_color: str) -> tuple[float, float, Optional[float]]:
    """Convert a hex string to (L, C, H), H None for achromatic colors."""
    from tunetint.schema.color_result import hex_to_rgb
    return rgb_to_oklch(hex_to_rgb(hex_color))


# =============================================================================
# Distances
# =============================================================================


def hue_distance(h1: Optional[float], h2: Optional[float]) -> float:
    """
    Shortest angular distance between two hues, in degrees [0, 180].

    An undefined hue is maximally distant (180) from anything.
    """
    if h1 is None or h2 is None:
        return 180.0
    d = abs(h1 - h2) % 360.0
    return min(d, 360.0 - d)


# =============================================================================
# Luminance / contrast (WCAG)
# =============================================================================


def relative_luminance(rgb: RGB) -> float:
    """WCAG relative luminance of a 0-255 sRGB triple."""
    linear = srgb_to_linear(np.asarray(rgb, dtype=np.float64) / 255.0)
    return float(np.dot(linear, [0.2126, 0.7152, 0.0722]))


def contrast_ratio(rgb1: RGB, rgb2: RGB) -> float:
    """WCAG contrast ratio between two colors (1.0 - 21.0)."""
    l1 = relative_luminance(rgb1)
    l2 = relative_luminance(rgb2)
    hi, lo = max(l1, l2), min(l1, l2)
    return (hi + 0.05) / (lo + 0.05)
