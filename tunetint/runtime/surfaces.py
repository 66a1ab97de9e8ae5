# Copyright (c) 2026 Tunetint
# SPDX-License-Identifier: MIT

"""
External surfaces the pipeline writes to.

``StyleSurface`` is the "set style variable" primitive of the host. Only
the style authority may call ``set_variable``. ``HostSemanticSurface`` is
the host's own semantic color store, touched only by the bridge.

In-memory implementations are provided for tests, the CLI and embedding
in hosts that read a plain mapping.
"""

from __future__ import annotations

import logging
import re
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Callable, Iterator, Mapping, Optional, Protocol, runtime_checkable

from tunetint.errors import BridgeUnavailable, StyleWriteRejected

logger = logging.getLogger(__name__)

_NAME_RE = re.compile(r"^--[A-Za-z0-9_-]+$")
# Characters that would break out of a declaration
_FORBIDDEN_VALUE_CHARS = set(";{}")


class StyleSurface(ABC):
    """The host's style-variable store."""

    @abstractmethod
    def set_variable(self, name: str, value: str) -> None:
        """
        Write one variable.

        Raises:
            StyleWriteRejected: If the surface refuses the name or value
        """

    @abstractmethod
    def get_variable(self, name: str) -> Optional[str]:
        """Current value of a variable, None if unset."""

    @contextmanager
    def batch(self) -> Iterator[None]:
        """Group writes so observers see them as one change."""
        yield


class InMemoryStyleSurface(StyleSurface):
    """
    Style surface backed by a dict.

    Writes inside ``batch()`` are buffered and committed together when the
    block exits, so observers are notified once with a consistent snapshot
    and never see a half-applied palette.
    """

    def __init__(self) -> None:
        self._values: dict[str, str] = {}
        self._pending: Optional[dict[str, str]] = None
        self._observers: list[Callable[[Mapping[str, str]], None]] = []
        self.write_count = 0
        self.commit_count = 0

    def validate(self, name: str, value: str) -> None:
        if not _NAME_RE.match(name):
            raise StyleWriteRejected(name, value, "invalid variable name")
        if not isinstance(value, str) or not value.strip():
            raise StyleWriteRejected(name, value, "empty value")
        if _FORBIDDEN_VALUE_CHARS & set(value):
            raise StyleWriteRejected(name, value, "forbidden character in value")

    def set_variable(self, name: str, value: str) -> None:
        self.validate(name, value)
        self.write_count += 1
        if self._pending is not None:
            self._pending[name] = value
        else:
            self._values[name] = value
            self._notify()

    def get_variable(self, name: str) -> Optional[str]:
        return self._values.get(name)

    @contextmanager
    def batch(self) -> Iterator[None]:
        if self._pending is not None:
            # Nested batch joins the outer one
            yield
            return
        self._pending = {}
        try:
            yield
        finally:
            pending, self._pending = self._pending, None
            self._values.update(pending)
            self._notify()

    def snapshot(self) -> dict[str, str]:
        """Committed variables (a copy)."""
        return dict(self._values)

    def add_observer(self, callback: Callable[[Mapping[str, str]], None]) -> None:
        """Call ``callback(snapshot)`` after every commit."""
        self._observers.append(callback)

    def _notify(self) -> None:
        self.commit_count += 1
        snapshot = self.snapshot()
        for callback in self._observers:
            callback(snapshot)


@runtime_checkable
class HostSemanticSurface(Protocol):
    """The host application's semantic color slots (e.g. ``textBase``)."""

    def is_ready(self) -> bool: ...

    def get_semantic_color(self, slot: str) -> Optional[str]: ...

    def set_semantic_color(self, slot: str, hex_color: str) -> None: ...


class InMemoryHostSurface:
    """HostSemanticSurface backed by a dict. ``ready=False`` simulates a host still loading."""

    def __init__(self, colors: Optional[Mapping[str, str]] = None, *, ready: bool = True):
        self.colors: dict[str, str] = dict(colors or {})
        self.ready = ready
        self.write_count = 0

    def is_ready(self) -> bool:
        return self.ready

    def get_semantic_color(self, slot: str) -> Optional[str]:
        if not self.ready:
            raise BridgeUnavailable("host semantic surface is not ready")
        return self.colors.get(slot)

    def set_semantic_color(self, slot: str, hex_color: str) -> None:
        if not self.ready:
            raise BridgeUnavailable("host semantic surface is not ready")
        self.write_count += 1
        self.colors[slot] = hex_color
