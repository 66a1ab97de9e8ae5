# Copyright (c) 2026 Tunetint
# SPDX-License-Identifier: MIT

"""
Host integration bridge.

Maps this pipeline's variables onto the host application's semantic
color slots and back:

- ``sync_to_host``: writes pipeline colors into host slots
- ``sync_from_host``: reads host slots and returns ``--spice-*``
  variable overrides for the style authority to apply

The bridge never writes style variables itself and is only ever called
by the style authority. It is a best-effort layer: if the host surface is
not ready, or fails part way, it logs a warning and the palette is
applied without it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Mapping, Optional

from tunetint.errors import BridgeUnavailable
from tunetint.process.variables import format_rgb
from tunetint.runtime.surfaces import HostSemanticSurface
from tunetint.schema import ColorResult, hex_to_rgb, rgb_to_hex

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SemanticSlot:
    """
    One host semantic color slot.

    Attributes:
        slot: Host slot name (e.g. ``textBase``)
        variable: Host style variable mirroring the slot
        fallback: Color used when the host has no value
        source: Pipeline variable written into the slot, None if the
            pipeline leaves this slot to the host
    """
    slot: str
    variable: str
    fallback: str
    source: Optional[str] = None

    @property
    def rgb_variable(self) -> str:
        return self.variable.replace("--spice-", "--spice-rgb-", 1)


SEMANTIC_SLOTS: tuple[SemanticSlot, ...] = (
    # Text
    SemanticSlot("textBase", "--spice-text", "#CAD3F5", "--sn-surface-text-hex"),
    SemanticSlot("textSubdued", "--spice-subtext", "#A5ADCB"),
    SemanticSlot("textBrightAccent", "--spice-accent", "#C6A0F6", "--sn-accent-hex"),
    SemanticSlot("textNegative", "--spice-red", "#ED8796"),
    SemanticSlot("textWarning", "--spice-yellow", "#EED49F"),
    SemanticSlot("textPositive", "--spice-green", "#A6DA95"),
    SemanticSlot("textAnnouncement", "--spice-blue", "#8AADF4"),
    # Essentials
    SemanticSlot("essentialBase", "--spice-button", "#CAD3F5"),
    SemanticSlot("essentialSubdued", "--spice-button-disabled", "#6E738D"),
    SemanticSlot("essentialBrightAccent", "--spice-button-active", "#C6A0F6", "--sn-accent-hex"),
    SemanticSlot("essentialNegative", "--spice-notification-error", "#ED8796"),
    SemanticSlot("essentialWarning", "--spice-notification-warning", "#EED49F"),
    SemanticSlot("essentialPositive", "--spice-notification-success", "#A6DA95"),
    # Backgrounds
    SemanticSlot("backgroundBase", "--spice-main", "#24273A", "--sn-surface-base-hex"),
    SemanticSlot("backgroundHighlight", "--spice-highlight", "#363A4F", "--sn-surface-raised-hex"),
    SemanticSlot("backgroundPress", "--spice-press", "#494D64", "--sn-color-shadow-hex"),
    SemanticSlot("backgroundElevatedBase", "--spice-card", "#1E2030", "--sn-color-atmosphere-hex"),
    SemanticSlot("backgroundElevatedHighlight", "--spice-card-highlight", "#363A4F"),
    SemanticSlot("backgroundTintedBase", "--spice-sidebar", "#363A4F"),
    SemanticSlot("backgroundTintedHighlight", "--spice-sidebar-highlight", "#494D64"),
    # Decorative
    SemanticSlot("decorativeBase", "--spice-decorative", "#CAD3F5", "--sn-color-primary-hex"),
    SemanticSlot("decorativeSubdued", "--spice-decorative-subdued", "#939AB7", "--sn-color-highlight-hex"),
)


class HostBridge:
    """
    Two-way mapping between pipeline variables and host semantic slots.

    Create one per pipeline and keep it: the write cache that makes
    ``sync_to_host`` idempotent lives on the instance.
    """

    def __init__(
        self,
        host: Optional[HostSemanticSurface] = None,
        slots: tuple[SemanticSlot, ...] = SEMANTIC_SLOTS,
    ):
        self.host = host
        self.slots = slots
        self._written: dict[str, str] = {}

    def _available(self, operation: str) -> bool:
        if self.host is None:
            return False
        try:
            ready = self.host.is_ready()
        except Exception:
            logger.warning("Host readiness check failed; skipping %s", operation, exc_info=True)
            return False
        if not ready:
            logger.warning("Host semantic surface not ready; skipping %s", operation)
            return False
        return True

    def sync_to_host(
        self,
        result: ColorResult,
        variables: Optional[Mapping[str, str]] = None,
    ) -> int:
        """
        Write pipeline colors into host slots.

        Args:
            result: The applied result
            variables: The values actually applied (after modifiers);
                defaults to ``result.css_variables``

        Returns:
            Number of host writes performed (0 when nothing changed)
        """
        if not self._available("sync_to_host"):
            return 0
        values = result.css_variables if variables is None else variables
        writes = 0
        try:
            for slot in self.slots:
                if slot.source is None or slot.source not in values:
                    continue
                value = values[slot.source]
                if self._written.get(slot.slot) == value:
                    continue
                self.host.set_semantic_color(slot.slot, value)
                self._written[slot.slot] = value
                writes += 1
        except BridgeUnavailable as exc:
            logger.warning("Host semantic surface went away during sync: %s", exc)
        except Exception:
            logger.warning("Host rejected semantic color write; sync stopped", exc_info=True)
        if writes:
            logger.debug(
                "Synced %d host slot(s) for generation %d", writes, result.generation_id
            )
        return writes

    def sync_from_host(self) -> dict[str, str]:
        """
        Read host slots as style-variable overrides.

        Returns:
            ``--spice-{name}`` hex and ``--spice-rgb-{name}`` channel values
            for every slot (fallback color when the host has none). Empty
            if the host is unavailable.
        """
        if not self._available("sync_from_host"):
            return {}
        overrides: dict[str, str] = {}
        try:
            for slot in self.slots:
                hex_color = self._read(slot)
                overrides[slot.variable] = hex_color
                overrides[slot.rgb_variable] = format_rgb(hex_to_rgb(hex_color))
        except BridgeUnavailable as exc:
            logger.warning("Host semantic surface went away during read: %s", exc)
            return {}
        except Exception:
            logger.warning("Host semantic color read failed; no overrides", exc_info=True)
            return {}
        return overrides

    def _read(self, slot: SemanticSlot) -> str:
        value = self.host.get_semantic_color(slot.slot)
        if not value:
            return slot.fallback
        try:
            return rgb_to_hex(hex_to_rgb(value))
        except ValueError:
            logger.warning(
                "Host slot %s has unusable color %r; using fallback", slot.slot, value
            )
            return slot.fallback

    def reset(self) -> None:
        """Forget cached writes (e.g. after the host reloads its theme)."""
        self._written.clear()
