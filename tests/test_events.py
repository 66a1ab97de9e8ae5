# Copyright (c) 2026 Tunetint
# SPDX-License-Identifier: MIT

"""Tests for typed events and the event bus."""

import logging

import pytest

from tunetint.errors import FailureReason
from tunetint.runtime.events import (
    ColorsApplied,
    ColorsFailed,
    EventBus,
    TrackChanged,
)


class TestEventBus:

    def test_dispatch_in_subscription_order(self, bus):
        calls = []
        bus.subscribe(TrackChanged, lambda e: calls.append("a"))
        bus.subscribe(TrackChanged, lambda e: calls.append("b"))
        bus.emit(TrackChanged("t1"))
        assert calls == ["a", "b"]

    def test_only_matching_type(self, bus):
        calls = []
        bus.subscribe(ColorsFailed, calls.append)
        bus.emit(TrackChanged("t1"))
        assert calls == []

    def test_unsubscribe(self, bus):
        calls = []
        sub = bus.subscribe(TrackChanged, calls.append)
        assert bus.unsubscribe(sub) is True
        assert bus.unsubscribe(sub) is False
        bus.emit(TrackChanged("t1"))
        assert calls == []

    def test_unsubscribe_all_by_owner(self, bus):
        calls = []
        bus.subscribe(TrackChanged, calls.append, owner="ui")
        bus.subscribe(ColorsFailed, calls.append, owner="ui")
        bus.subscribe(TrackChanged, calls.append, owner="other")
        assert bus.unsubscribe_all("ui") == 2
        assert bus.subscriber_count(TrackChanged) == 1
        assert bus.subscriber_count(ColorsFailed) == 0

    def test_handler_error_does_not_stop_dispatch(self, bus, caplog):
        calls = []

        def broken(event):
            raise RuntimeError("boom")

        bus.subscribe(TrackChanged, broken)
        bus.subscribe(TrackChanged, calls.append)
        with caplog.at_level(logging.ERROR, logger="tunetint.runtime.events"):
            delivered = bus.emit(TrackChanged("t1"))
        assert delivered == 1
        assert len(calls) == 1
        assert "boom" in caplog.text

    def test_subscribe_during_dispatch_waits_for_next_event(self, bus):
        calls = []

        def late(event):
            calls.append(event.content_id)

        def first(event):
            bus.subscribe(TrackChanged, late)

        bus.subscribe(TrackChanged, first)
        bus.emit(TrackChanged("t1"))
        bus.emit(TrackChanged("t2"))
        assert calls == ["t2"]

    def test_rejects_non_event_types(self, bus):
        with pytest.raises(TypeError):
            bus.subscribe(str, print)


class TestEventPayloads:

    def test_names(self):
        assert TrackChanged.name == "track:changed"
        assert ColorsFailed.name == "colors:failed"

    def test_failed_payload(self):
        event = ColorsFailed(FailureReason.TIMEOUT, "t1", "slow")
        assert event.to_dict() == {
            "event": "colors:failed",
            "reason": "timeout",
            "content_id": "t1",
            "detail": "slow",
        }

    def test_applied_payload(self):
        event = ColorsApplied(generation_id=3, applied=40, skipped=("--x",))
        assert event.to_dict()["skipped"] == ["--x"]

    def test_events_are_immutable(self):
        event = TrackChanged("t1")
        with pytest.raises(AttributeError):
            event.content_id = "t2"
