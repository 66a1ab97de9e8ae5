# Copyright (c) 2026 Tunetint
# SPDX-License-Identifier: MIT

"""End-to-end tests through the wired pipeline."""

import asyncio
import sys

import pytest

from tunetint.config import PipelineConfig
from tunetint.extractors import StaticAnalysisProvider, StaticSwatchExtractor
from tunetint.pipeline import build_pipeline
from tunetint.process.variables import VARIABLE_NAMES
from tunetint.runtime.events import (
    ColorsApplied,
    ColorsFailed,
    SettingsChanged,
    StyleWriteRequested,
    TrackChanged,
)
from tunetint.runtime.surfaces import InMemoryHostSurface, InMemoryStyleSurface
from tunetint.schema import BrightnessMode, EnhancementConfig, Flavor, RawSwatchSet


@pytest.fixture
def extractor(red_swatches, mixed_swatches):
    return StaticSwatchExtractor(
        {
            "track-red": red_swatches,
            "track-mixed": mixed_swatches,
            "track-empty": RawSwatchSet.empty("track-empty"),
        },
        delays={"track-red": 0.05},
    )


@pytest.fixture
def pipeline(extractor, loud_music):
    p = build_pipeline(
        extractor,
        analysis=StaticAnalysisProvider(loud_music),
        host=InMemoryHostSurface(),
    )
    yield p
    p.close()


def _events(pipeline, event_type):
    seen = []
    pipeline.bus.subscribe(event_type, seen.append)
    return seen


class TestEndToEnd:

    def test_track_to_applied_variables(self, pipeline):
        applied = _events(pipeline, ColorsApplied)
        pipeline.bus.emit(TrackChanged("track-mixed"))

        snapshot = pipeline.surface.snapshot()
        for name in VARIABLE_NAMES:
            assert name in snapshot
        result = pipeline.authority.get_current_color_result()
        assert result.content_id == "track-mixed"
        assert result.metadata.music_influence_applied is True
        assert snapshot["--spice-accent"] == snapshot["--sn-accent-hex"]
        assert len(applied) == 1

    def test_empty_artwork_applies_fallback(self, pipeline):
        failed = _events(pipeline, ColorsFailed)
        pipeline.bus.emit(TrackChanged("track-empty"))
        assert failed == []
        assert pipeline.surface.get_variable("--sn-color-state-fallback") == "1"

    def test_failure_keeps_previous_palette(self, pipeline):
        failed = _events(pipeline, ColorsFailed)
        pipeline.bus.emit(TrackChanged("track-mixed"))
        before = pipeline.surface.snapshot()
        pipeline.bus.emit(TrackChanged("missing"))
        assert len(failed) == 1
        assert pipeline.surface.snapshot() == before

    def test_newer_track_wins(self, pipeline):
        applied = _events(pipeline, ColorsApplied)

        async def scenario():
            pipeline.bus.emit(TrackChanged("track-red"))
            pipeline.bus.emit(TrackChanged("track-mixed"))
            await pipeline.router.drain()

        asyncio.run(scenario())
        assert pipeline.authority.get_current_color_result().content_id == "track-mixed"
        assert [e.generation_id for e in applied] == [2]
        assert pipeline.authority.state.current_generation_id == 2

    def test_processing_settings_reuse_swatches(self, pipeline, extractor):
        pipeline.bus.emit(TrackChanged("track-mixed"))
        pipeline.bus.emit(SettingsChanged(EnhancementConfig(chroma_boost=1.6)))
        assert extractor.calls == ["track-mixed"]
        assert pipeline.authority.state.current_generation_id == 2

    def test_brightness_settings_reapply_only(self, pipeline, extractor):
        pipeline.bus.emit(TrackChanged("track-mixed"))
        pipeline.bus.emit(
            SettingsChanged(
                EnhancementConfig(brightness_mode=BrightnessMode.DARK, flavor=Flavor.LATTE)
            )
        )
        assert extractor.calls == ["track-mixed"]
        assert pipeline.authority.state.current_generation_id == 1
        assert pipeline.surface.get_variable("--sn-color-state-flavor") == '"latte"'
        assert pipeline.surface.get_variable("--sn-color-state-brightness") == '"dark"'

    def test_config_is_honoured(self, extractor):
        config = PipelineConfig(enhancement=EnhancementConfig(flavor=Flavor.LATTE))
        p = build_pipeline(extractor, config=config)
        p.bus.emit(TrackChanged("track-empty"))
        assert p.authority.get_current_color_result().metadata.flavor is Flavor.LATTE
        assert p.surface.get_variable("--sn-surface-base-hex") == "#EFF1F5"
        p.close()

    def test_close_unsubscribes(self, extractor):
        p = build_pipeline(extractor)
        p.close()
        p.bus.emit(TrackChanged("track-mixed"))
        assert extractor.calls == []


class TestSingleWriter:

    def test_only_the_authority_writes(self, pipeline, monkeypatch):
        callers = []
        original = InMemoryStyleSurface.set_variable

        def recording(self, name, value):
            callers.append(sys._getframe(1).f_globals["__name__"])
            return original(self, name, value)

        monkeypatch.setattr(InMemoryStyleSurface, "set_variable", recording)

        pipeline.bus.emit(TrackChanged("track-mixed"))
        pipeline.bus.emit(SettingsChanged(EnhancementConfig(chroma_boost=1.6)))
        pipeline.bus.emit(StyleWriteRequested("--viz-glow", "0.5", source="visualizer"))
        pipeline.authority.set_brightness_mode(BrightnessMode.BRIGHT)

        assert callers
        assert set(callers) == {"tunetint.runtime.authority"}
