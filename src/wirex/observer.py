"""Observer — the binding a rendering component uses to stay reactive.

A component owns one Observer for its whole life:

    obs = Observer(lambda: f"Count: {counter.get()}", on_change=widget.refresh)
    text = obs.render()   # tracked; re-call on every refresh
    ...
    obs.dispose()         # once, on teardown

render() runs the builder inside the tracker so exactly the observables it
read become dependencies. When one of them changes, on_change is called;
the component is expected to render() again. A builder that raises is
logged and handed to fallback, which produces the error rendering.
"""

from __future__ import annotations

import logging
from typing import Callable, Generic, TypeVar

from wirex._tracking import Tracker, default_tracker

logger = logging.getLogger("wirex.observer")

T = TypeVar("T")


class Observer(Generic[T]):
    """Tracks one builder function on behalf of a UI component."""

    def __init__(
        self,
        builder: Callable[[], T],
        on_change: Callable[[], None],
        *,
        fallback: Callable[[Exception], T] | None = None,
        tracker: Tracker | None = None,
    ) -> None:
        self._builder = builder
        self._on_change = on_change
        self._fallback = fallback
        self._tracker = tracker if tracker is not None else default_tracker
        self._disposed = False

    @property
    def disposed(self) -> bool:
        return self._disposed

    def _changed(self) -> None:
        # Stable identity: every render keys the tracker on this bound method.
        if not self._disposed:
            self._on_change()

    def render(self) -> T:
        """Run the builder tracked. Errors go to fallback when one is set.

        Once disposed, the builder still runs but subscribes to nothing.
        """
        try:
            if self._disposed:
                return self._builder()
            return self._tracker.run_tracked(self._changed, self._builder)
        except Exception as exc:
            if self._fallback is None:
                raise
            logger.exception("Observer builder %r failed", self._builder)
            return self._fallback(exc)

    def dispose(self) -> None:
        if self._disposed:
            return
        self._disposed = True
        self._tracker.dispose_observer(self._changed)

    def __repr__(self) -> str:
        state = "disposed" if self._disposed else "active"
        return f"Observer({getattr(self._builder, '__name__', self._builder)!r}, {state})"
