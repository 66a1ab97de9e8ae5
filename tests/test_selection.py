# Copyright (c) 2026 Tunetint
# SPDX-License-Identifier: MIT

"""Tests for candidate filtering, ranking and role selection."""

import pytest

from tunetint.config import ProcessorSettings
from tunetint.errors import DegenerateInput
from tunetint.process.selection import (
    Candidate,
    artwork_lightness,
    rank_candidates,
    select_candidates,
    select_roles,
)
from tunetint.schema import OKLCHColor, RawSwatch, RawSwatchSet, TieBreak


def _swatches(*pairs):
    return RawSwatchSet(
        content_id="t",
        swatches=tuple(RawSwatch(rgb=rgb, population=p) for rgb, p in pairs),
    )


def _cand(index, weight, C=0.1, H=30.0, L=0.6):
    return Candidate(index=index, color=OKLCHColor(L=L, C=C, H=H), weight=weight)


class TestSelectCandidates:

    def test_drops_achromatic(self):
        cands = select_candidates(_swatches(((200, 50, 50), 3.0), ((128, 128, 128), 5.0)))
        assert [c.index for c in cands] == [0]

    def test_weights_normalized_over_all_swatches(self):
        cands = select_candidates(_swatches(((200, 50, 50), 3.0), ((128, 128, 128), 5.0)))
        assert cands[0].weight == pytest.approx(3.0 / 8.0)

    def test_zero_population_skipped(self):
        cands = select_candidates(_swatches(((200, 50, 50), 1.0), ((40, 90, 180), 0.0)))
        assert [c.index for c in cands] == [0]

    def test_lightness_band(self):
        settings = ProcessorSettings(min_lightness=0.65)
        cands = select_candidates(
            _swatches(((200, 50, 50), 1.0), ((230, 160, 40), 1.0)), settings
        )
        assert [c.index for c in cands] == [1]

    def test_capped_by_population(self):
        raw = _swatches(
            ((200, 50, 50), 1.0),
            ((40, 90, 180), 4.0),
            ((230, 160, 40), 2.0),
            ((60, 150, 90), 3.0),
        )
        cands = select_candidates(raw, ProcessorSettings(max_candidates=2))
        assert [c.index for c in cands] == [1, 3]

    def test_empty_and_all_zero(self):
        assert select_candidates(RawSwatchSet.empty("t")) == ()
        assert select_candidates(_swatches(((200, 50, 50), 0.0))) == ()


class TestRanking:

    def test_population_first(self):
        ranked = rank_candidates([_cand(0, 0.4, C=0.2), _cand(1, 0.6, C=0.05)])
        assert [c.index for c in ranked] == [1, 0]

    def test_chroma_breaks_population_tie(self):
        ranked = rank_candidates([_cand(0, 0.5, C=0.05), _cand(1, 0.5, C=0.15)])
        assert [c.index for c in ranked] == [1, 0]

    def test_hue_distance_breaks_chroma_tie(self):
        ranked = rank_candidates(
            [_cand(0, 0.5, H=30.0), _cand(1, 0.5, H=200.0)], preferred_hue=190.0
        )
        assert [c.index for c in ranked] == [1, 0]

    def test_index_is_final_key(self):
        a, b = _cand(0, 0.5), _cand(1, 0.5)
        assert [c.index for c in rank_candidates([b, a])] == [0, 1]
        assert [c.index for c in rank_candidates([a, b])] == [0, 1]

    def test_float_noise_does_not_decide(self):
        ranked = rank_candidates([_cand(0, 0.5), _cand(1, 0.5 + 1e-12, C=0.05)])
        # Weights tie after rounding, so chroma decides
        assert [c.index for c in ranked] == [0, 1]

    def test_configurable_order(self):
        cands = [_cand(0, 0.6, C=0.05), _cand(1, 0.4, C=0.2)]
        ranked = rank_candidates(cands, order=(TieBreak.CHROMA, TieBreak.POPULATION))
        assert [c.index for c in ranked] == [1, 0]


class TestSelectRoles:

    def test_accent_needs_hue_separation(self):
        ranked = [_cand(0, 0.5, H=30.0), _cand(1, 0.3, H=40.0), _cand(2, 0.2, H=200.0)]
        roles = select_roles(ranked)
        assert roles.primary.H == 30.0
        assert roles.accent.H == 200.0
        assert not roles.accent_derived

    def test_accent_falls_back_to_next_candidate(self):
        roles = select_roles([_cand(0, 0.6, H=30.0), _cand(1, 0.4, H=40.0)])
        assert roles.accent.H == 40.0
        assert not roles.accent_derived

    def test_single_candidate_derives_accent(self):
        roles = select_roles([_cand(0, 1.0, L=0.5, C=0.1, H=30.0)])
        assert roles.accent_derived
        assert roles.accent.H == 30.0
        assert roles.accent.L > roles.primary.L
        assert roles.accent.C > roles.primary.C

    def test_tonal_variants_keep_hue(self):
        roles = select_roles([_cand(0, 1.0, L=0.6, C=0.1, H=120.0)], shadow_reduction=0.3)
        for color in (roles.highlight, roles.shadow, roles.atmosphere):
            assert color.H == 120.0
        assert roles.highlight.L > roles.primary.L
        assert roles.shadow.L == pytest.approx(0.18)
        assert roles.atmosphere.L <= 0.22
        assert roles.atmosphere.C < roles.primary.C

    def test_shadow_has_lightness_floor(self):
        roles = select_roles([_cand(0, 1.0, L=0.05, C=0.05, H=120.0)], shadow_reduction=0.1)
        assert roles.shadow.L == pytest.approx(0.02)

    def test_empty_raises(self):
        with pytest.raises(DegenerateInput):
            select_roles([])

    def test_as_dict_has_every_role(self):
        roles = select_roles([_cand(0, 1.0)])
        assert list(roles.as_dict()) == ["primary", "accent", "highlight", "shadow", "atmosphere"]


class TestArtworkLightness:

    def test_no_data_is_mid(self):
        assert artwork_lightness(RawSwatchSet.empty("t")) == 0.5

    def test_weighted_mean(self):
        raw = _swatches(((255, 255, 255), 1.0), ((0, 0, 0), 1.0))
        assert artwork_lightness(raw) == pytest.approx(0.5, abs=1e-3)

    def test_dark_artwork(self):
        raw = _swatches(((20, 20, 30), 9.0), ((200, 50, 50), 1.0))
        assert artwork_lightness(raw) < 0.35
