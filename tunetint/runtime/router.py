# Copyright (c) 2026 Tunetint
# SPDX-License-Identifier: MIT

"""
Event router: the thin coordination relay in front of the processor.

Track changes become extraction requests; results are handed to the
processor and published as ``colors:harmonized``. Any failure becomes a
``colors:failed`` event with a reason code. The router does no color
math, keeps no processed output and never writes style state.

The extractor call is the only suspension point in the pipeline. Each
request reserves its generation id when it *starts*, so a slow request
that finishes after a newer one carries the older id and is rejected
downstream.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

from tunetint.config import RouterSettings
from tunetint.errors import ExtractionFailure, FailureReason
from tunetint.extractors import AnalysisProvider, SwatchExtractor
from tunetint.process.processor import ColorProcessor
from tunetint.runtime.events import (
    ColorsFailed,
    ColorsHarmonized,
    EventBus,
    RefreshRequested,
    SettingsChanged,
    TrackChanged,
)
from tunetint.schema import EnhancementConfig, MusicAnalysisSnapshot, RawSwatchSet

logger = logging.getLogger(__name__)


class EventRouter:
    """
    Relays lifecycle events to the processor.

    Args:
        bus: Event bus shared with the rest of the pipeline
        processor: The shared ColorProcessor
        extractor: Upstream swatch extractor
        analysis: Audio analysis provider (None means default snapshots)
        settings: Timeout configuration
        config: Initial enhancement configuration forwarded to the processor
    """

    def __init__(
        self,
        bus: EventBus,
        processor: ColorProcessor,
        extractor: SwatchExtractor,
        analysis: Optional[AnalysisProvider] = None,
        settings: Optional[RouterSettings] = None,
        config: Optional[EnhancementConfig] = None,
    ):
        self.bus = bus
        self.processor = processor
        self.extractor = extractor
        self.analysis = analysis
        self.settings = settings or RouterSettings()
        self._config = config or EnhancementConfig()
        self._content_id: Optional[str] = None
        self._last_raw: Optional[RawSwatchSet] = None
        self._tasks: set[asyncio.Task] = set()

    @property
    def content_id(self) -> Optional[str]:
        """Content of the most recently started request."""
        return self._content_id

    def attach(self) -> None:
        """Subscribe to upstream lifecycle events."""
        self.bus.subscribe(TrackChanged, self.on_track_changed, owner=self)
        self.bus.subscribe(SettingsChanged, self.on_settings_changed, owner=self)
        self.bus.subscribe(RefreshRequested, self.on_refresh_requested, owner=self)

    def detach(self) -> None:
        self.bus.unsubscribe_all(self)

    # =========================================================================
    # Requests
    # =========================================================================

    def _snapshot(self) -> MusicAnalysisSnapshot:
        if self.analysis is None:
            return MusicAnalysisSnapshot()
        try:
            snapshot = self.analysis.get_current_analysis()
        except Exception:
            logger.warning("Analysis provider failed; using default snapshot", exc_info=True)
            return MusicAnalysisSnapshot()
        return snapshot if snapshot is not None else MusicAnalysisSnapshot()

    def _fail(self, reason: FailureReason, content_id: Optional[str], detail: str = "") -> None:
        logger.warning("Color request failed (%s) for %r: %s", reason.value, content_id, detail)
        self.bus.emit(ColorsFailed(reason=reason, content_id=content_id, detail=detail))

    async def request_colors(self, content_id: Optional[str]) -> bool:
        """
        Extract, process and publish colors for one piece of content.

        Emits exactly one ``colors:harmonized`` or ``colors:failed``.

        Returns:
            True if a result was published
        """
        if not content_id:
            self._fail(FailureReason.NO_CONTENT, None, "no content id")
            return False

        self._content_id = content_id
        generation_id = self.processor.reserve_generation()
        timeout = self.settings.extraction_timeout_s

        try:
            raw = await asyncio.wait_for(self.extractor.extract_swatches(content_id), timeout)
        except asyncio.TimeoutError:
            self._fail(FailureReason.TIMEOUT, content_id, f"no swatches after {timeout:g}s")
            return False
        except ExtractionFailure as exc:
            self._fail(exc.reason, content_id, exc.detail)
            return False
        except Exception as exc:
            self._fail(FailureReason.EXTRACTION_FAILED, content_id, repr(exc))
            return False

        if raw is None:
            self._fail(FailureReason.EXTRACTION_FAILED, content_id, "extractor returned nothing")
            return False

        self._last_raw = raw
        return self._process(raw, generation_id)

    def _process(self, raw: RawSwatchSet, generation_id: int) -> bool:
        try:
            result = self.processor.process(
                raw, self._snapshot(), self._config, generation_id=generation_id
            )
        except Exception as exc:
            logger.exception("Processor raised for %r", raw.content_id)
            self._fail(FailureReason.PROCESSING_ERROR, raw.content_id, repr(exc))
            return False
        self.bus.emit(ColorsHarmonized(result=result))
        return True

    def reprocess(self) -> bool:
        """Re-run the processor on the last extracted swatches (no extraction)."""
        if self._last_raw is None or self._last_raw.content_id != self._content_id:
            return False
        return self._process(self._last_raw, self.processor.reserve_generation())

    # =========================================================================
    # Event handlers
    # =========================================================================

    def _schedule(self, content_id: Optional[str]) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            asyncio.run(self.request_colors(content_id))
            return
        task = loop.create_task(self.request_colors(content_id))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    def on_track_changed(self, event: TrackChanged) -> None:
        self._schedule(event.content_id)

    def on_refresh_requested(self, event: RefreshRequested) -> None:
        self._schedule(event.content_id or self._content_id)

    def on_settings_changed(self, event: SettingsChanged) -> None:
        """
        Forward new settings to the processor.

        Only changes that affect processing trigger a new generation, and
        only from the cached swatches. Brightness and flavor are left to
        the style authority.
        """
        previous, self._config = self._config, event.config
        if not previous.requires_reprocessing(event.config):
            return
        if not self.reprocess():
            logger.debug("Settings changed with no cached swatches; waiting for next track")

    async def drain(self) -> None:
        """Wait for every scheduled request to finish."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks))
