# Copyright (c) 2026 Tunetint
# SPDX-License-Identifier: MIT

"""
Style application authority: the single writer.

This module is the only code that calls ``StyleSurface.set_variable``.
Everything else that wants a variable on screen emits an event handled
here.

On ``colors:harmonized`` the authority:
1. Rejects results older than the newest generation it has seen
2. Applies brightness/flavor modifiers to the result's variable map
3. Writes every variable inside one surface batch, skipping (and
   logging) any single value the surface rejects or fails on
4. Syncs the host bridge and applies its overrides in the same batch
5. Records the result and emits ``colors:applied``

Application state is private to this module. Other components see it
only through ``StyleAuthority.state``, a frozen snapshot.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Mapping, Optional

from tunetint.errors import ApplicationPartialFailure, FailureReason, StaleResult
from tunetint.process.modifiers import apply_modifiers
from tunetint.process.variables import VARIABLE_NAMES
from tunetint.runtime.bridge import HostBridge
from tunetint.runtime.events import (
    ColorsApplied,
    ColorsFailed,
    ColorsHarmonized,
    EventBus,
    SettingsChanged,
    StyleWriteRequested,
)
from tunetint.runtime.surfaces import StyleSurface
from tunetint.schema import BrightnessMode, ColorResult, EnhancementConfig, Flavor

logger = logging.getLogger(__name__)

_RESERVED = frozenset(VARIABLE_NAMES)


@dataclass
class _ApplicationState:
    current_generation_id: int = 0
    last_applied_result: Optional[ColorResult] = None
    brightness_mode: BrightnessMode = BrightnessMode.BALANCED
    active_flavor: Flavor = Flavor.MOCHA
    last_failure: Optional[FailureReason] = None


@dataclass(frozen=True)
class ApplicationStateView:
    """Read-only snapshot of the authority's state."""
    current_generation_id: int
    last_applied_result: Optional[ColorResult]
    brightness_mode: BrightnessMode
    active_flavor: Flavor
    last_failure: Optional[FailureReason]


class StyleAuthority:
    """
    Owns every external style write and all derived color state.

    Args:
        bus: Event bus shared with the pipeline
        surface: The host's style-variable surface
        bridge: Host bridge (one shared instance), optional
        config: Initial enhancement configuration
    """

    def __init__(
        self,
        bus: EventBus,
        surface: StyleSurface,
        bridge: Optional[HostBridge] = None,
        config: Optional[EnhancementConfig] = None,
    ):
        self.bus = bus
        self.surface = surface
        self.bridge = bridge
        self._config = config or EnhancementConfig()
        self._state = _ApplicationState(
            brightness_mode=self._config.brightness_mode,
            active_flavor=self._config.flavor,
        )
        self._applied_variables: dict[str, str] = {}

    def attach(self) -> None:
        self.bus.subscribe(ColorsHarmonized, self.on_colors_harmonized, owner=self)
        self.bus.subscribe(ColorsFailed, self.on_colors_failed, owner=self)
        self.bus.subscribe(SettingsChanged, self.on_settings_changed, owner=self)
        self.bus.subscribe(StyleWriteRequested, self.on_style_write_requested, owner=self)

    def detach(self) -> None:
        self.bus.unsubscribe_all(self)

    # =========================================================================
    # Queries
    # =========================================================================

    def get_current_color_result(self) -> Optional[ColorResult]:
        """Last applied result, for consumers that subscribe late."""
        return self._state.last_applied_result

    @property
    def state(self) -> ApplicationStateView:
        s = self._state
        return ApplicationStateView(
            current_generation_id=s.current_generation_id,
            last_applied_result=s.last_applied_result,
            brightness_mode=s.brightness_mode,
            active_flavor=s.active_flavor,
            last_failure=s.last_failure,
        )

    @property
    def current_config(self) -> EnhancementConfig:
        return self._config

    @property
    def applied_variables(self) -> dict[str, str]:
        """Pipeline variables as last written (a copy)."""
        return dict(self._applied_variables)

    # =========================================================================
    # Event handlers
    # =========================================================================

    def on_colors_harmonized(self, event: ColorsHarmonized) -> None:
        result = event.result
        try:
            self._check_fresh(result)
        except StaleResult as stale:
            logger.info("Discarding stale result: %s", stale)
            return
        self._state.current_generation_id = result.generation_id
        self._apply(result)

    def on_colors_failed(self, event: ColorsFailed) -> None:
        # The previous palette stays on screen
        self._state.last_failure = event.reason
        logger.info(
            "Keeping previous palette after %s for %r",
            event.reason.value, event.content_id,
        )

    def on_settings_changed(self, event: SettingsChanged) -> None:
        """Store the new config; re-apply at once if only modifiers changed."""
        changed = (
            event.config.brightness_mode is not self._state.brightness_mode
            or event.config.flavor is not self._state.active_flavor
            or event.config.flavor_blend != self._config.flavor_blend
        )
        self._config = event.config
        self._state.brightness_mode = event.config.brightness_mode
        self._state.active_flavor = event.config.flavor
        if changed:
            self.reapply()

    def on_style_write_requested(self, event: StyleWriteRequested) -> None:
        if event.variable in _RESERVED:
            logger.warning(
                "Rejected write to pipeline variable %s from %r",
                event.variable, event.source or "unknown",
            )
            return
        with self.surface.batch():
            self._write(event.variable, event.value)

    # =========================================================================
    # Toggles
    # =========================================================================

    def set_brightness_mode(self, mode: BrightnessMode) -> None:
        mode = BrightnessMode(mode)
        if mode is self._state.brightness_mode:
            return
        self._state.brightness_mode = mode
        self._config = self._config.with_changes(brightness_mode=mode)
        self.reapply()

    def set_flavor(self, flavor: Flavor) -> None:
        flavor = Flavor(flavor)
        if flavor is self._state.active_flavor:
            return
        self._state.active_flavor = flavor
        self._config = self._config.with_changes(flavor=flavor)
        self.reapply()

    def reapply(self) -> bool:
        """Re-apply the last result under current modifiers. False if there is none."""
        result = self._state.last_applied_result
        if result is None:
            return False
        self._apply(result)
        return True

    # =========================================================================
    # Writing
    # =========================================================================

    def _check_fresh(self, result: ColorResult) -> None:
        if result.generation_id < self._state.current_generation_id:
            raise StaleResult(result.generation_id, self._state.current_generation_id)

    def _write(self, name: str, value: str) -> bool:
        try:
            self.surface.set_variable(name, value)
        except ApplicationPartialFailure as exc:
            logger.warning("Skipped %s: %s", name, exc)
            return False
        except Exception:
            logger.warning("Skipped %s: surface raised", name, exc_info=True)
            return False
        return True

    def _apply(self, result: ColorResult) -> None:
        variables = apply_modifiers(
            result.css_variables,
            self._state.brightness_mode,
            self._state.active_flavor,
            result.metadata.artwork_lightness,
            self._config.flavor_blend,
        )
        applied = 0
        skipped: list[str] = []
        with self.surface.batch():
            for name in VARIABLE_NAMES:
                if name not in variables:
                    continue
                if self._write(name, variables[name]):
                    applied += 1
                else:
                    skipped.append(name)
            for name, value in self._bridge_overrides(result, variables).items():
                if self._write(name, value):
                    applied += 1
                else:
                    skipped.append(name)

        self._state.last_applied_result = result
        self._applied_variables = {n: variables[n] for n in VARIABLE_NAMES if n in variables}
        logger.debug(
            "Applied generation %d: %d written, %d skipped",
            result.generation_id, applied, len(skipped),
        )
        self.bus.emit(
            ColorsApplied(
                generation_id=result.generation_id,
                applied=applied,
                skipped=tuple(skipped),
            )
        )

    def _bridge_overrides(
        self,
        result: ColorResult,
        variables: Mapping[str, str],
    ) -> dict[str, str]:
        if self.bridge is None:
            return {}
        try:
            self.bridge.sync_to_host(result, variables)
            overrides = self.bridge.sync_from_host()
        except Exception:
            logger.warning("Host bridge failed; applying without overrides", exc_info=True)
            return {}
        return {k: v for k, v in overrides.items() if k not in _RESERVED}
