# Copyright (c) 2026 Tunetint
# SPDX-License-Identifier: MIT

"""
Typed events and the synchronous event bus.

Every cross-component interaction is an event with a documented payload.
Components never call each other backward; they emit and subscribe.

Event names:
    track:changed          TrackChanged(content_id)
    settings:changed       SettingsChanged(config)
    refresh:requested      RefreshRequested(content_id=None)
    colors:harmonized      ColorsHarmonized(result)
    colors:failed          ColorsFailed(reason, content_id, detail)
    colors:applied         ColorsApplied(generation_id, applied, skipped)
    style:write-requested  StyleWriteRequested(name, value, source)
"""

from __future__ import annotations

import itertools
import logging
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, Callable, ClassVar, Hashable, Optional

from tunetint.errors import FailureReason
from tunetint.schema import ColorResult, EnhancementConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Event:
    """Base class for bus events."""
    name: ClassVar[str] = "event"

    def to_dict(self) -> dict:
        return {"event": self.name}


# =============================================================================
# Upstream lifecycle
# =============================================================================


@dataclass(frozen=True)
class TrackChanged(Event):
    """New content started playing."""
    name: ClassVar[str] = "track:changed"
    content_id: Optional[str] = None

    def to_dict(self) -> dict:
        return {"event": self.name, "content_id": self.content_id}


@dataclass(frozen=True)
class SettingsChanged(Event):
    """The settings store published a new enhancement configuration."""
    name: ClassVar[str] = "settings:changed"
    config: EnhancementConfig = field(default_factory=EnhancementConfig)

    def to_dict(self) -> dict:
        return {"event": self.name, "config": self.config.to_dict()}


@dataclass(frozen=True)
class RefreshRequested(Event):
    """Manual refresh; None means the current content."""
    name: ClassVar[str] = "refresh:requested"
    content_id: Optional[str] = None

    def to_dict(self) -> dict:
        return {"event": self.name, "content_id": self.content_id}


# =============================================================================
# Pipeline output
# =============================================================================


@dataclass(frozen=True)
class ColorsHarmonized(Event):
    """A complete ColorResult is ready. Only the style authority acts on it."""
    name: ClassVar[str] = "colors:harmonized"
    result: ColorResult

    def to_dict(self) -> dict:
        return {"event": self.name, **self.result.to_dict()}


@dataclass(frozen=True)
class ColorsFailed(Event):
    """A request produced no result; the previous palette stays."""
    name: ClassVar[str] = "colors:failed"
    reason: FailureReason
    content_id: Optional[str] = None
    detail: str = ""

    def to_dict(self) -> dict:
        return {
            "event": self.name,
            "reason": self.reason.value,
            "content_id": self.content_id,
            "detail": self.detail,
        }


@dataclass(frozen=True)
class ColorsApplied(Event):
    """The style authority finished writing one batch."""
    name: ClassVar[str] = "colors:applied"
    generation_id: int
    applied: int
    skipped: tuple[str, ...] = ()

    def to_dict(self) -> dict:
        return {
            "event": self.name,
            "generation_id": self.generation_id,
            "applied": self.applied,
            "skipped": list(self.skipped),
        }


@dataclass(frozen=True)
class StyleWriteRequested(Event):
    """Request to the style authority to write one non-pipeline variable."""
    name: ClassVar[str] = "style:write-requested"
    variable: str
    value: str
    source: str = ""

    def to_dict(self) -> dict:
        return {
            "event": self.name,
            "variable": self.variable,
            "value": self.value,
            "source": self.source,
        }


# =============================================================================
# Bus
# =============================================================================

Handler = Callable[[Any], None]


@dataclass(frozen=True)
class _Subscription:
    id: int
    event_type: type
    handler: Handler
    owner: Optional[Hashable]


class EventBus:
    """
    Synchronous publish/subscribe.

    Handlers run in subscription order on the emitter's turn. A handler
    that raises is logged and skipped; the remaining handlers still run and
    the emitter never sees the exception.

    Example::

        bus = EventBus()
        sub = bus.subscribe(ColorsFailed, lambda e: print(e.reason), owner="ui")
        bus.emit(ColorsFailed(FailureReason.TIMEOUT, "track-1"))
        bus.unsubscribe_all("ui")
    """

    def __init__(self) -> None:
        self._subscriptions: dict[type, list[_Subscription]] = defaultdict(list)
        self._ids = itertools.count(1)

    def subscribe(
        self,
        event_type: type,
        handler: Handler,
        owner: Optional[Hashable] = None,
    ) -> int:
        """Register ``handler`` for ``event_type``; returns a subscription id."""
        if not (isinstance(event_type, type) and issubclass(event_type, Event)):
            raise TypeError(f"event_type must be an Event subclass, got {event_type!r}")
        sub = _Subscription(next(self._ids), event_type, handler, owner)
        self._subscriptions[event_type].append(sub)
        return sub.id

    def unsubscribe(self, subscription_id: int) -> bool:
        """Remove one subscription. Returns False if it was not registered."""
        for subs in self._subscriptions.values():
            for i, sub in enumerate(subs):
                if sub.id == subscription_id:
                    del subs[i]
                    return True
        return False

    def unsubscribe_all(self, owner: Hashable) -> int:
        """Remove every subscription registered by ``owner``; returns the count."""
        removed = 0
        for event_type, subs in self._subscriptions.items():
            kept = [s for s in subs if s.owner != owner]
            removed += len(subs) - len(kept)
            self._subscriptions[event_type] = kept
        return removed

    def subscriber_count(self, event_type: type) -> int:
        return len(self._subscriptions.get(event_type, ()))

    def emit(self, event: Event) -> int:
        """
        Dispatch ``event`` to its subscribers.

        Returns:
            Number of handlers that completed without raising
        """
        # Copy so handlers may (un)subscribe while dispatching
        subs = list(self._subscriptions.get(type(event), ()))
        logger.debug("emit %s to %d handler(s)", event.name, len(subs))
        delivered = 0
        for sub in subs:
            try:
                sub.handler(event)
            except Exception:
                logger.exception(
                    "Handler %r for %s raised; continuing dispatch",
                    sub.handler, event.name,
                )
            else:
                delivered += 1
        return delivered
