# Copyright (c) 2026 Tunetint
# SPDX-License-Identifier: MIT

"""
Event-driven runtime for Tunetint.

Control flows one way::

    Router -> Processor -> (colors:harmonized) -> Authority -> Bridge

Only the StyleAuthority writes to the style surface.
"""

from tunetint.runtime.authority import ApplicationStateView, StyleAuthority
from tunetint.runtime.bridge import SEMANTIC_SLOTS, HostBridge, SemanticSlot
from tunetint.runtime.events import (
    ColorsApplied,
    ColorsFailed,
    ColorsHarmonized,
    Event,
    EventBus,
    RefreshRequested,
    SettingsChanged,
    StyleWriteRequested,
    TrackChanged,
)
from tunetint.runtime.router import EventRouter
from tunetint.runtime.serializers import OutputFormat, to_style_block
from tunetint.runtime.surfaces import (
    HostSemanticSurface,
    InMemoryHostSurface,
    InMemoryStyleSurface,
    StyleSurface,
)

__all__ = [
    # Components
    "EventRouter",
    "StyleAuthority",
    "ApplicationStateView",
    "HostBridge",
    "SemanticSlot",
    "SEMANTIC_SLOTS",
    # Events
    "EventBus",
    "Event",
    "TrackChanged",
    "SettingsChanged",
    "RefreshRequested",
    "ColorsHarmonized",
    "ColorsFailed",
    "ColorsApplied",
    "StyleWriteRequested",
    # Surfaces
    "StyleSurface",
    "InMemoryStyleSurface",
    "HostSemanticSurface",
    "InMemoryHostSurface",
    # Output
    "OutputFormat",
    "to_style_block",
]
