# Copyright (c) 2026 Tunetint
# SPDX-License-Identifier: MIT

"""Tests for enhancement and music-reactive modulation."""

import pytest

from tunetint.config import ProcessorSettings
from tunetint.process.colorspace import in_gamut
from tunetint.process.modulation import (
    NO_MODULATION,
    beat_pulse,
    modulate,
    resolve_music,
)
from tunetint.schema import EnhancementConfig, MusicAnalysisSnapshot, OKLCHColor


class TestResolveMusic:

    def test_low_confidence_skips_everything(self):
        music = MusicAnalysisSnapshot(energy=1.0, valence=1.0, confidence=0.1)
        assert resolve_music(music) == NO_MODULATION

    def test_disabled(self):
        music = MusicAnalysisSnapshot(energy=1.0, confidence=1.0)
        assert resolve_music(music, enabled=False) is NO_MODULATION

    def test_factors(self, loud_music):
        mod = resolve_music(loud_music)
        assert mod.applied
        assert mod.chroma_factor == pytest.approx(1.0 + 0.9 * 0.35)
        assert mod.lightness_factor == pytest.approx(1.0 + 0.3 * 0.2)
        assert mod.beat_pulse == pytest.approx(1.0)
        assert mod.lightness_offset == pytest.approx(0.03 * 0.9)

    def test_threshold_is_configurable(self):
        music = MusicAnalysisSnapshot(confidence=0.2)
        assert not resolve_music(music).applied
        assert resolve_music(music, settings=ProcessorSettings(confidence_threshold=0.1)).applied

    def test_confidence_at_threshold_is_skipped(self):
        assert not resolve_music(MusicAnalysisSnapshot(energy=1.0, confidence=0.3)).applied
        assert resolve_music(MusicAnalysisSnapshot(energy=1.0, confidence=0.31)).applied

    def test_low_valence_darkens(self):
        music = MusicAnalysisSnapshot(valence=0.0, confidence=1.0)
        assert resolve_music(music).lightness_factor < 1.0


class TestBeatPulse:

    def test_on_beat(self):
        assert beat_pulse(0.0) == pytest.approx(1.0)
        assert beat_pulse(1.0) == pytest.approx(1.0)

    def test_between_beats(self):
        assert beat_pulse(0.5) == pytest.approx(0.0, abs=1e-12)
        assert beat_pulse(0.25) == pytest.approx(0.5)


class TestModulate:

    def test_enhancement_only(self):
        cfg = EnhancementConfig(chroma_boost=1.2, lightness_boost=1.1)
        out = modulate(OKLCHColor(L=0.5, C=0.03, H=200.0), cfg)
        assert out.L == pytest.approx(0.55)
        assert out.C == pytest.approx(0.036)
        assert out.H == 200.0

    def test_music_boosts_chroma(self, loud_music):
        cfg = EnhancementConfig()
        color = OKLCHColor(L=0.5, C=0.03, H=200.0)
        plain = modulate(color, cfg)
        loud = modulate(color, cfg, resolve_music(loud_music))
        assert loud.C == pytest.approx(plain.C * (1.0 + 0.9 * 0.35))
        assert loud.L > plain.L
        assert loud.H == plain.H

    def test_result_is_in_gamut_with_same_hue(self, loud_music):
        color = OKLCHColor(L=0.6, C=0.3, H=140.0)
        out = modulate(color, EnhancementConfig(chroma_boost=2.0), resolve_music(loud_music))
        assert out.H == 140.0
        assert in_gamut(out.L, out.C, out.H)

    def test_lightness_never_exceeds_one(self, loud_music):
        out = modulate(
            OKLCHColor(L=0.98, C=0.02, H=90.0),
            EnhancementConfig(lightness_boost=1.5),
            resolve_music(loud_music),
        )
        assert out.L <= 1.0

    def test_achromatic_stays_neutral(self, loud_music):
        out = modulate(OKLCHColor(L=0.5, C=0.01), EnhancementConfig(), resolve_music(loud_music))
        assert out.H is None
        assert out.C == 0.0
