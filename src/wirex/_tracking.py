"""Dependency tracking engine — the heart of wirex.

A Tracker records, for every observer callback, which observables it read
during its most recent tracked run. Re-running an observer first drops all of
its old subscriptions, so dependency sets shrink when a branch stops reading
an observable.

The active observer lives on a stack owned by the tracker. Only reads made
while run_tracked() is on the call stack are attributed; continuations that
run after it returns (callbacks, awaited coroutines) are untracked.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Callable, TypeVar

if TYPE_CHECKING:
    from wirex.observable import Observable

logger = logging.getLogger("wirex.tracking")

R = TypeVar("R")

Callback = Callable[[], None]


class TrackingError(RuntimeError):
    """Raised when an observer's tracked run re-enters itself."""


class Tracker:
    """Maps observer callbacks to the observables they currently depend on."""

    def __init__(self) -> None:
        self._dependencies: dict[Callback, set[Observable]] = {}
        self._active: list[Callback] = []
        self._listeners: list[Callback] = []

    @property
    def current_observer(self) -> Callback | None:
        """The innermost observer whose body is executing, if any."""
        return self._active[-1] if self._active else None

    def run_tracked(self, observer: Callback, body: Callable[[], R]) -> R:
        """Run body with observer active, rebuilding its subscriptions.

        Exceptions from body propagate; reads performed before the error
        stay recorded.
        """
        if observer in self._active:
            raise TrackingError(f"{observer!r} is already running")

        self._release(observer)
        self._dependencies[observer] = set()

        self._active.append(observer)
        try:
            return body()
        finally:
            self._active.pop()

    def dispose_observer(self, observer: Callback) -> None:
        """Unsubscribe observer everywhere and forget it. Safe if unknown."""
        self._release(observer)
        self._dependencies.pop(observer, None)

    def _release(self, observer: Callback) -> None:
        for observable in self._dependencies.get(observer, ()):
            observable.remove_subscriber(observer)

    def _record(self, observable: Observable) -> Callback | None:
        """Called by Observable.get(). Returns the observer to subscribe."""
        observer = self.current_observer
        if observer is None:
            return None
        record = self._dependencies.get(observer)
        if record is None:
            # Disposed during its own run: remaining reads are untracked.
            return None
        record.add(observable)
        return observer

    def dependencies_of(self, observer: Callback) -> frozenset[Observable]:
        return frozenset(self._dependencies.get(observer, ()))

    def is_tracked(self, observer: Callback) -> bool:
        return observer in self._dependencies

    # --- Global listeners ---

    def add_listener(self, listener: Callback) -> None:
        """Call listener after any observable on this tracker changes."""
        self._listeners.append(listener)

    def remove_listener(self, listener: Callback) -> None:
        try:
            self._listeners.remove(listener)
        except ValueError:
            pass  # already removed

    def _notify_listeners(self) -> None:
        for listener in list(self._listeners):
            try:
                listener()
            except Exception:
                logger.exception("Tracker listener %r failed", listener)

    def __repr__(self) -> str:
        return f"Tracker(observers={len(self._dependencies)}, active={len(self._active)})"


# Process-wide tracker used by observables created without an explicit one.
default_tracker = Tracker()
