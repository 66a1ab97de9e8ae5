# Copyright (c) 2026 Tunetint
# SPDX-License-Identifier: MIT

"""
Candidate filtering and semantic role selection.

Swatches are weighted by population, converted to OKLCH, and filtered:
near-achromatic swatches (below the chroma floor) and swatches with too
little contrast (lightness outside the configured band) are dropped.

Survivors are ranked by a configurable comparator. The default order is
population, then chroma, then distance from a preferred hue; candidate
index is always the last key, so ranking never depends on sort stability
or hidden randomness.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

import numpy as np

from tunetint.config import ProcessorSettings
from tunetint.errors import DegenerateInput
from tunetint.process.colorspace import (
    ACHROMATIC_CHROMA,
    hue_distance,
    normalize_hue,
    rgb_array_to_oklch,
)
from tunetint.schema import OKLCHColor, RawSwatchSet, TieBreak, DEFAULT_TIE_BREAK

# Float keys are rounded before comparison so representation noise never
# decides a tie.
_KEY_DECIMALS = 6


@dataclass(frozen=True, slots=True)
class Candidate:
    """
    A swatch that survived filtering.

    Attributes:
        index: Position of the swatch in the input set
        color: OKLCH value of the swatch
        weight: Population normalized over all input swatches (0-1)
    """
    index: int
    color: OKLCHColor
    weight: float


@dataclass(frozen=True, slots=True)
class RoleSelection:
    """Unmodulated OKLCH color for each semantic role."""
    primary: OKLCHColor
    accent: OKLCHColor
    highlight: OKLCHColor
    shadow: OKLCHColor
    atmosphere: OKLCHColor
    accent_derived: bool = False

    def as_dict(self) -> dict[str, OKLCHColor]:
        return {
            "primary": self.primary,
            "accent": self.accent,
            "highlight": self.highlight,
            "shadow": self.shadow,
            "atmosphere": self.atmosphere,
        }


def _weighted_oklch(raw: RawSwatchSet) -> tuple[np.ndarray, np.ndarray]:
    """OKLCH rows and normalized weights for swatches with population > 0."""
    if raw.is_empty:
        return np.empty((0, 3)), np.empty(0)
    pops = np.array([s.population for s in raw.swatches], dtype=np.float64)
    total = pops.sum()
    if total <= 0.0:
        return np.empty((0, 3)), np.empty(0)
    lch = rgb_array_to_oklch(np.array([s.rgb for s in raw.swatches], dtype=np.float64))
    return lch, pops / total


def artwork_lightness(raw: RawSwatchSet) -> float:
    """Population-weighted mean OKLCH lightness, 0.5 when there is no data."""
    lch, weights = _weighted_oklch(raw)
    if len(weights) == 0:
        return 0.5
    return float(np.clip(np.dot(lch[:, 0], weights), 0.0, 1.0))


def select_candidates(
    raw: RawSwatchSet,
    settings: Optional[ProcessorSettings] = None,
) -> tuple[Candidate, ...]:
    """
    Filter swatches down to usable role candidates.

    Returns:
        Up to ``max_candidates`` candidates, most populous first (ties by
        input index). Empty if nothing survives.
    """
    cfg = settings or ProcessorSettings()
    lch, weights = _weighted_oklch(raw)

    survivors: list[Candidate] = []
    for i, ((L, C, H), weight) in enumerate(zip(lch, weights)):
        if weight <= 0.0:
            continue
        if C < cfg.chroma_floor:
            continue
        if not cfg.min_lightness <= L <= cfg.max_lightness:
            continue
        color = OKLCHColor(
            L=float(L),
            C=float(C),
            H=normalize_hue(H) if C >= ACHROMATIC_CHROMA else None,
        )
        survivors.append(Candidate(index=i, color=color, weight=float(weight)))

    survivors.sort(key=lambda c: (-round(c.weight, _KEY_DECIMALS), c.index))
    return tuple(survivors[: cfg.max_candidates])


def ranking_key(
    candidate: Candidate,
    order: Sequence[TieBreak] = DEFAULT_TIE_BREAK,
    preferred_hue: Optional[float] = None,
) -> tuple:
    """
    Sort key for a candidate under a tie-break order.

    Lower sorts first: population and chroma are negated, hue distance is
    ascending. Without a preferred hue the hue-distance key is neutral.
    """
    parts: list[float] = []
    for key in order:
        if key is TieBreak.POPULATION:
            parts.append(-round(candidate.weight, _KEY_DECIMALS))
        elif key is TieBreak.CHROMA:
            parts.append(-round(candidate.color.C, _KEY_DECIMALS))
        elif key is TieBreak.HUE_DISTANCE:
            if preferred_hue is None:
                parts.append(0.0)
            else:
                parts.append(round(hue_distance(candidate.color.H, preferred_hue), _KEY_DECIMALS))
    parts.append(candidate.index)
    return tuple(parts)


def rank_candidates(
    candidates: Sequence[Candidate],
    order: Sequence[TieBreak] = DEFAULT_TIE_BREAK,
    preferred_hue: Optional[float] = None,
) -> tuple[Candidate, ...]:
    """Candidates in role-selection order (best first)."""
    return tuple(sorted(candidates, key=lambda c: ranking_key(c, order, preferred_hue)))


def _variant(color: OKLCHColor, L: float, C: float) -> OKLCHColor:
    L = min(1.0, max(0.0, L))
    C = max(0.0, C)
    return OKLCHColor(L=L, C=C if color.H is not None else 0.0, H=color.H)


def select_roles(
    ranked: Sequence[Candidate],
    *,
    shadow_reduction: float = 0.3,
    settings: Optional[ProcessorSettings] = None,
) -> RoleSelection:
    """
    Assign semantic roles from ranked candidates.

    - primary: the best-ranked candidate
    - accent: the best-ranked remaining candidate at least
      ``accent_min_hue_separation`` degrees from primary; otherwise the
      next candidate; otherwise a lighter, more chromatic primary
    - highlight, shadow, atmosphere: tonal variants of primary at the
      same hue (lighter/softer, darker, deep and muted)

    Raises:
        DegenerateInput: If ``ranked`` is empty (callers fall back first)
    """
    if not ranked:
        raise DegenerateInput("Cannot select roles without candidates")
    cfg = settings or ProcessorSettings()

    primary = ranked[0].color
    accent: Optional[OKLCHColor] = None
    for candidate in ranked[1:]:
        if hue_distance(candidate.color.H, primary.H) >= cfg.accent_min_hue_separation:
            accent = candidate.color
            break
    if accent is None and len(ranked) > 1:
        accent = ranked[1].color

    accent_derived = accent is None
    if accent is None:
        accent = _variant(primary, primary.L + (1.0 - primary.L) * 0.25, primary.C * 1.2)

    return RoleSelection(
        primary=primary,
        accent=accent,
        highlight=_variant(primary, primary.L + (0.95 - primary.L) * 0.6, primary.C * 0.6),
        shadow=_variant(primary, max(0.02, primary.L * shadow_reduction), primary.C * 0.8),
        atmosphere=_variant(primary, min(primary.L, 0.22), primary.C * 0.35),
        accent_derived=accent_derived,
    )
