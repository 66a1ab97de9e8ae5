# Copyright (c) 2026 Tunetint
# SPDX-License-Identifier: MIT

"""
Pipeline wiring.

``build_pipeline`` creates one bus, one processor, one router, one
authority and one bridge, and subscribes them in the right order.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from tunetint.config import PipelineConfig
from tunetint.extractors import AnalysisProvider, SwatchExtractor
from tunetint.process.processor import ColorProcessor
from tunetint.runtime.authority import StyleAuthority
from tunetint.runtime.bridge import HostBridge
from tunetint.runtime.events import EventBus
from tunetint.runtime.router import EventRouter
from tunetint.runtime.surfaces import HostSemanticSurface, InMemoryStyleSurface, StyleSurface


@dataclass
class Pipeline:
    """Handles to the wired components."""
    bus: EventBus
    processor: ColorProcessor
    router: EventRouter
    authority: StyleAuthority
    bridge: HostBridge
    surface: StyleSurface

    def close(self) -> None:
        """Unsubscribe every component from the bus."""
        self.router.detach()
        self.authority.detach()


def build_pipeline(
    extractor: SwatchExtractor,
    *,
    analysis: Optional[AnalysisProvider] = None,
    surface: Optional[StyleSurface] = None,
    host: Optional[HostSemanticSurface] = None,
    config: Optional[PipelineConfig] = None,
    bus: Optional[EventBus] = None,
) -> Pipeline:
    """
    Wire a complete pipeline.

    Args:
        extractor: Upstream swatch extractor
        analysis: Audio analysis provider
        surface: Style surface (an InMemoryStyleSurface if omitted)
        host: Host semantic surface for the bridge (bridge idles if omitted)
        config: Pipeline configuration
        bus: Existing bus to attach to

    Returns:
        Pipeline with all components attached
    """
    config = config or PipelineConfig()
    bus = bus or EventBus()
    surface = surface if surface is not None else InMemoryStyleSurface()

    processor = ColorProcessor(config.processor)
    bridge = HostBridge(host)
    authority = StyleAuthority(bus, surface, bridge, config.enhancement)
    router = EventRouter(
        bus,
        processor,
        extractor,
        analysis,
        settings=config.router,
        config=config.enhancement,
    )
    # Authority first, so it sees settings changes before the router
    # republishes colors for them
    authority.attach()
    router.attach()
    return Pipeline(
        bus=bus,
        processor=processor,
        router=router,
        authority=authority,
        bridge=bridge,
        surface=surface,
    )
