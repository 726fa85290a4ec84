"""Observable values — state that tracks its readers.

When an Observable is read inside a tracked run, the running observer is
subscribed automatically. When the Observable changes, every subscriber is
called synchronously.

A subscriber that raises is logged and skipped; the remaining subscribers
still run and set() never raises on their behalf.
"""

from __future__ import annotations

import logging
from typing import Callable, Generic, TypeVar

from wirex._tracking import Tracker, default_tracker

logger = logging.getLogger("wirex.observable")

T = TypeVar("T")


class Observable(Generic[T]):
    """A single observable value with automatic dependency tracking."""

    __slots__ = ("_value", "_subscribers", "_tracker")

    def __init__(self, value: T, *, tracker: Tracker | None = None) -> None:
        self._value = value
        self._subscribers: set[Callable[[], None]] = set()
        self._tracker = tracker if tracker is not None else default_tracker

    def get(self) -> T:
        """Read the value. If inside a tracked run, registers the dependency."""
        observer = self._tracker._record(self)
        if observer is not None:
            self._subscribers.add(observer)
        return self._value

    # Alias kept for call sites that read as "watch this value".
    watch = get

    def read(self) -> T:
        """Read the value without tracking."""
        return self._value

    def set(self, value: T) -> None:
        """Write a new value and notify subscribers if it changed."""
        old = self._value
        if old is value or old == value:
            return
        self._value = value
        self._notify()

    @property
    def value(self) -> T:
        return self.get()

    @value.setter
    def value(self, value: T) -> None:
        self.set(value)

    def _notify(self) -> None:
        # Snapshot: subscribers may dispose observers mid-notification.
        for subscriber in list(self._subscribers):
            try:
                subscriber()
            except Exception:
                logger.exception("Subscriber %r failed", subscriber)
        self._tracker._notify_listeners()

    def remove_subscriber(self, subscriber: Callable[[], None]) -> None:
        self._subscribers.discard(subscriber)

    @property
    def subscribers(self) -> frozenset[Callable[[], None]]:
        return frozenset(self._subscribers)

    def dispose(self) -> None:
        """Drop all subscribers. The value is kept and the cell stays usable."""
        self._subscribers.clear()

    def __repr__(self) -> str:
        return f"Observable({self._value!r})"
