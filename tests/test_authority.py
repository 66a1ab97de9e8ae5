# Copyright (c) 2026 Tunetint
# SPDX-License-Identifier: MIT

"""Tests for the style authority (the single writer)."""

import dataclasses
import logging

import pytest

from tunetint.errors import FailureReason, StyleWriteRejected
from tunetint.process.flavors import PALETTES
from tunetint.process.modifiers import apply_modifiers
from tunetint.process.variables import VARIABLE_NAMES
from tunetint.runtime.authority import StyleAuthority
from tunetint.runtime.bridge import SEMANTIC_SLOTS, HostBridge
from tunetint.runtime.events import (
    ColorsApplied,
    ColorsFailed,
    ColorsHarmonized,
    EventBus,
    SettingsChanged,
    StyleWriteRequested,
)
from tunetint.runtime.surfaces import InMemoryHostSurface, InMemoryStyleSurface
from tunetint.schema import BrightnessMode, EnhancementConfig, Flavor, RawSwatchSet


class _PickySurface(InMemoryStyleSurface):
    """Refuses one variable."""

    def __init__(self, refuse):
        super().__init__()
        self.refuse = refuse

    def set_variable(self, name, value):
        if name == self.refuse:
            raise StyleWriteRejected(name, value, "refused by test surface")
        super().set_variable(name, value)


class _CrashingSurface(InMemoryStyleSurface):
    """Raises an unexpected error for one variable."""

    def __init__(self, crash_on):
        super().__init__()
        self.crash_on = crash_on

    def set_variable(self, name, value):
        if name == self.crash_on:
            raise ValueError("surface backend crashed")
        super().set_variable(name, value)


class _BrokenHost(InMemoryHostSurface):
    def get_semantic_color(self, slot):
        raise RuntimeError("host theme api crashed")

    def set_semantic_color(self, slot, hex_color):
        raise RuntimeError("host theme api crashed")


class _FailingBridge(HostBridge):
    def sync_to_host(self, result, variables=None):
        raise RuntimeError("bridge crashed")


@pytest.fixture
def surface():
    return InMemoryStyleSurface()


@pytest.fixture
def authority(bus, surface, recorder):
    recorder.watch(ColorsApplied)
    a = StyleAuthority(bus, surface)
    a.attach()
    return a


@pytest.fixture
def result(processor, mixed_swatches, loud_music):
    return processor.process(mixed_swatches, loud_music)


class TestApply:

    def test_writes_every_variable(self, authority, bus, surface, result, recorder):
        bus.emit(ColorsHarmonized(result))
        assert set(surface.snapshot()) == set(VARIABLE_NAMES)
        (applied,) = recorder.of(ColorsApplied)
        assert applied.generation_id == result.generation_id
        assert applied.applied == len(VARIABLE_NAMES)
        assert applied.skipped == ()

    def test_records_state(self, authority, bus, result):
        bus.emit(ColorsHarmonized(result))
        assert authority.get_current_color_result() is result
        assert authority.state.current_generation_id == result.generation_id
        assert authority.applied_variables == apply_modifiers(
            result.css_variables,
            BrightnessMode.BALANCED,
            Flavor.MOCHA,
            result.metadata.artwork_lightness,
            EnhancementConfig().flavor_blend,
        )

    def test_one_commit_per_palette(self, authority, bus, surface, result):
        seen = []
        surface.add_observer(seen.append)
        bus.emit(ColorsHarmonized(result))
        assert surface.commit_count == 1
        assert len(seen) == 1
        assert set(seen[0]) == set(VARIABLE_NAMES)

    def test_stale_result_discarded(self, authority, bus, surface, processor, mixed_swatches, red_swatches):
        newer = processor.process(mixed_swatches, generation_id=5)
        older = processor.process(red_swatches, generation_id=3)
        bus.emit(ColorsHarmonized(newer))
        before = surface.snapshot()
        bus.emit(ColorsHarmonized(older))
        assert surface.snapshot() == before
        assert authority.get_current_color_result() is newer
        assert authority.state.current_generation_id == 5

    def test_partial_failure_skips_one(self, bus, result, recorder):
        recorder.watch(ColorsApplied)
        surface = _PickySurface("--sn-color-shadow-hex")
        authority = StyleAuthority(bus, surface)
        authority.attach()
        bus.emit(ColorsHarmonized(result))
        (applied,) = recorder.of(ColorsApplied)
        assert applied.skipped == ("--sn-color-shadow-hex",)
        assert applied.applied == len(VARIABLE_NAMES) - 1
        assert surface.get_variable("--sn-color-shadow-hex") is None
        assert surface.get_variable("--sn-color-shadow-rgb") == authority.applied_variables["--sn-color-shadow-rgb"]

    def test_unexpected_surface_error_skips_one(self, bus, result, recorder, caplog):
        recorder.watch(ColorsApplied)
        surface = _CrashingSurface("--sn-color-shadow-hex")
        authority = StyleAuthority(bus, surface)
        authority.attach()
        with caplog.at_level(logging.WARNING, logger="tunetint.runtime.authority"):
            bus.emit(ColorsHarmonized(result))
        (applied,) = recorder.of(ColorsApplied)
        assert applied.skipped == ("--sn-color-shadow-hex",)
        assert set(surface.snapshot()) == set(VARIABLE_NAMES) - {"--sn-color-shadow-hex"}
        assert surface.get_variable("--sn-accent-hex") == authority.applied_variables["--sn-accent-hex"]
        assert authority.get_current_color_result() is result
        assert "--sn-color-shadow-hex" in caplog.text

    def test_failure_keeps_palette(self, authority, bus, surface, result):
        bus.emit(ColorsHarmonized(result))
        before = surface.snapshot()
        bus.emit(ColorsFailed(FailureReason.TIMEOUT, "next-track"))
        assert surface.snapshot() == before
        assert authority.state.last_failure is FailureReason.TIMEOUT
        assert authority.get_current_color_result() is result


class TestModifiers:

    def test_brightness_toggle_is_idempotent(self, result):
        toggled_surface = InMemoryStyleSurface()
        toggled = StyleAuthority(EventBus(), toggled_surface)
        toggled.on_colors_harmonized(ColorsHarmonized(result))
        toggled.set_brightness_mode(BrightnessMode.DARK)
        toggled.set_brightness_mode(BrightnessMode.BRIGHT)

        fresh_surface = InMemoryStyleSurface()
        fresh = StyleAuthority(
            EventBus(), fresh_surface, config=EnhancementConfig(brightness_mode=BrightnessMode.BRIGHT)
        )
        fresh.on_colors_harmonized(ColorsHarmonized(result))

        assert toggled_surface.snapshot() == fresh_surface.snapshot()

    def test_dark_changes_roles(self, authority, bus, surface, result):
        bus.emit(ColorsHarmonized(result))
        balanced = surface.snapshot()
        authority.set_brightness_mode(BrightnessMode.DARK)
        dark = surface.snapshot()
        assert dark["--sn-color-primary-hex"] != balanced["--sn-color-primary-hex"]
        assert dark["--sn-color-state-brightness"] == '"dark"'
        assert surface.commit_count == 2

    def test_same_mode_is_noop(self, authority, bus, surface, result):
        bus.emit(ColorsHarmonized(result))
        authority.set_brightness_mode(BrightnessMode.BALANCED)
        authority.set_flavor(Flavor.MOCHA)
        assert surface.commit_count == 1

    def test_flavor_toggle(self, authority, bus, surface, result):
        bus.emit(ColorsHarmonized(result))
        authority.set_flavor(Flavor.LATTE)
        assert surface.get_variable("--sn-surface-base-hex") == "#EFF1F5"
        assert authority.state.active_flavor is Flavor.LATTE
        assert authority.current_config.flavor is Flavor.LATTE

    def test_toggle_before_any_result(self, authority, surface):
        authority.set_brightness_mode(BrightnessMode.DARK)
        assert authority.reapply() is False
        assert surface.commit_count == 0
        assert authority.state.brightness_mode is BrightnessMode.DARK

    def test_settings_change_reapplies(self, authority, bus, surface, result):
        bus.emit(ColorsHarmonized(result))
        bus.emit(SettingsChanged(EnhancementConfig(brightness_mode=BrightnessMode.DARK)))
        assert surface.commit_count == 2
        assert surface.get_variable("--sn-color-state-brightness") == '"dark"'

    def test_processing_settings_do_not_reapply(self, authority, bus, surface, result):
        bus.emit(ColorsHarmonized(result))
        bus.emit(SettingsChanged(EnhancementConfig(chroma_boost=1.5)))
        assert surface.commit_count == 1
        assert authority.current_config.chroma_boost == 1.5

    def test_flavor_toggle_harmonizes_roles(self, authority, bus, surface, result):
        bus.emit(ColorsHarmonized(result))
        mocha = surface.get_variable("--sn-color-primary-oklch")
        authority.set_flavor(Flavor.LATTE)
        assert surface.get_variable("--sn-color-primary-oklch") != mocha
        authority.set_flavor(Flavor.MOCHA)
        assert surface.get_variable("--sn-color-primary-oklch") == mocha

    def test_blend_setting_reapplies(self, authority, bus, surface, result):
        bus.emit(ColorsHarmonized(result))
        bus.emit(SettingsChanged(EnhancementConfig(flavor_blend=0.0)))
        assert surface.commit_count == 2
        assert surface.get_variable("--sn-color-primary-hex") == result.role_hex("primary")

    def test_fallback_follows_flavor_toggle(self, authority, bus, surface, processor):
        fallback = processor.process(RawSwatchSet.empty("t"))
        bus.emit(ColorsHarmonized(fallback))
        assert surface.get_variable("--sn-color-primary-hex") == PALETTES[Flavor.MOCHA]["mauve"]
        authority.set_flavor(Flavor.LATTE)
        assert surface.get_variable("--sn-color-primary-hex") == PALETTES[Flavor.LATTE]["blue"]
        assert surface.get_variable("--sn-accent-hex") == PALETTES[Flavor.LATTE]["lavender"]
        assert surface.get_variable("--sn-color-state-flavor") == '"latte"'


class TestStyleWriteRequests:

    def test_other_variables_are_written(self, authority, bus, surface):
        bus.emit(StyleWriteRequested("--viz-glow-opacity", "0.4", source="visualizer"))
        assert surface.get_variable("--viz-glow-opacity") == "0.4"

    def test_pipeline_variables_are_protected(self, authority, bus, surface, result, caplog):
        bus.emit(ColorsHarmonized(result))
        before = surface.get_variable("--sn-accent-hex")
        with caplog.at_level(logging.WARNING, logger="tunetint.runtime.authority"):
            bus.emit(StyleWriteRequested("--sn-accent-hex", "#000000", source="rogue"))
        assert surface.get_variable("--sn-accent-hex") == before
        assert "rogue" in caplog.text

    def test_invalid_value_is_skipped(self, authority, bus, surface):
        bus.emit(StyleWriteRequested("--viz-x", "red; color: blue"))
        assert surface.get_variable("--viz-x") is None


class TestBridgeOverrides:

    def test_overrides_in_same_batch(self, bus, result, recorder):
        recorder.watch(ColorsApplied)
        surface = InMemoryStyleSurface()
        host = InMemoryHostSurface()
        StyleAuthority(bus, surface, HostBridge(host)).attach()
        bus.emit(ColorsHarmonized(result))

        assert surface.commit_count == 1
        assert surface.get_variable("--spice-accent") == surface.get_variable("--sn-accent-hex")
        assert surface.get_variable("--spice-subtext") == "#A5ADCB"
        assert recorder.of(ColorsApplied)[0].applied == len(VARIABLE_NAMES) + 2 * len(SEMANTIC_SLOTS)

    def test_unready_host_only_pipeline_variables(self, bus, surface, result):
        StyleAuthority(bus, surface, HostBridge(InMemoryHostSurface(ready=False))).attach()
        bus.emit(ColorsHarmonized(result))
        assert set(surface.snapshot()) == set(VARIABLE_NAMES)

    def test_broken_host_still_applies(self, bus, surface, result, recorder):
        recorder.watch(ColorsApplied)
        authority = StyleAuthority(bus, surface, HostBridge(_BrokenHost()))
        authority.attach()
        bus.emit(ColorsHarmonized(result))
        assert set(surface.snapshot()) == set(VARIABLE_NAMES)
        assert authority.get_current_color_result() is result
        assert len(recorder.of(ColorsApplied)) == 1

    def test_bridge_error_is_contained(self, bus, surface, result, recorder, caplog):
        recorder.watch(ColorsApplied)
        authority = StyleAuthority(bus, surface, _FailingBridge(InMemoryHostSurface()))
        authority.attach()
        with caplog.at_level(logging.WARNING, logger="tunetint.runtime.authority"):
            bus.emit(ColorsHarmonized(result))
        assert surface.commit_count == 1
        assert set(surface.snapshot()) == set(VARIABLE_NAMES)
        assert authority.get_current_color_result() is result
        assert recorder.of(ColorsApplied)[0].skipped == ()
        assert "bridge failed" in caplog.text


class TestLifecycle:

    def test_state_view_is_frozen(self, authority):
        with pytest.raises(dataclasses.FrozenInstanceError):
            authority.state.current_generation_id = 99

    def test_detach(self, authority, bus, surface, result):
        authority.detach()
        bus.emit(ColorsHarmonized(result))
        assert surface.snapshot() == {}
