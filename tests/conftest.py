# Copyright (c) 2026 Tunetint
# SPDX-License-Identifier: MIT

"""Shared fixtures."""

import pytest

from tunetint.process.processor import ColorProcessor
from tunetint.runtime.events import EventBus
from tunetint.schema import MusicAnalysisSnapshot, RawSwatch, RawSwatchSet


@pytest.fixture
def red_swatches():
    """Saturated red plus a near-neutral dark swatch."""
    return RawSwatchSet(
        content_id="track-red",
        swatches=(
            RawSwatch(rgb=(200, 50, 50), population=0.6),
            RawSwatch(rgb=(40, 40, 45), population=0.4),
        ),
    )


@pytest.fixture
def mixed_swatches():
    """Several chromatic swatches with distinct hues."""
    return RawSwatchSet(
        content_id="track-mixed",
        swatches=(
            RawSwatch(rgb=(40, 90, 180), population=5.0),
            RawSwatch(rgb=(230, 160, 40), population=3.0),
            RawSwatch(rgb=(60, 150, 90), population=2.0),
            RawSwatch(rgb=(128, 128, 128), population=4.0),
        ),
    )


@pytest.fixture
def loud_music():
    return MusicAnalysisSnapshot(
        energy=0.9, valence=0.8, tempo_bpm=128.0, beat_phase=0.0, confidence=0.9
    )


@pytest.fixture
def processor():
    return ColorProcessor()


@pytest.fixture
def bus():
    return EventBus()


@pytest.fixture
def recorder(bus):
    """Record every event of the given types emitted on ``bus``."""

    class Recorder:
        def __init__(self):
            self.events = []

        def watch(self, *event_types):
            for event_type in event_types:
                bus.subscribe(event_type, self.events.append, owner="recorder")
            return self

        def of(self, event_type):
            return [e for e in self.events if isinstance(e, event_type)]

    return Recorder()
