"""Reactions: observers that drive side effects instead of a render.

autorun() re-runs a function whenever what it read changes. reaction()
splits the tracked read from the effect and skips the effect while the
derived value stays equal.

Each reaction is an observer on a Tracker: its bound _run method is the
stable callback identity the tracker and observables key on.
"""

from __future__ import annotations

from typing import Callable, TypeVar

from wirex._tracking import Tracker, default_tracker

T = TypeVar("T")


class Reaction:
    """Observer whose change callback re-runs fn under the tracker."""

    __slots__ = ("_fn", "_tracker", "_disposed")

    def __init__(self, fn: Callable[[], None], *, tracker: Tracker | None = None) -> None:
        self._fn = fn
        self._tracker = tracker if tracker is not None else default_tracker
        self._disposed = False

    @property
    def disposed(self) -> bool:
        return self._disposed

    def _run(self) -> None:
        if self._disposed:
            return
        self._tracker.run_tracked(self._run, self._fn)

    def dispose(self) -> None:
        """Unsubscribe everywhere; later changes are ignored."""
        self._disposed = True
        self._tracker.dispose_observer(self._run)

    def __repr__(self) -> str:
        state = "disposed" if self._disposed else "active"
        return f"Reaction({getattr(self._fn, '__name__', self._fn)!r}, {state})"


class _DataReaction:
    """Backs reaction(): data_fn is tracked, effect_fn sees only new values."""

    __slots__ = ("_data_fn", "_effect_fn", "_tracker", "_disposed", "_last_value", "_initialized")

    def __init__(
        self, data_fn: Callable, effect_fn: Callable, *, tracker: Tracker | None = None
    ) -> None:
        self._data_fn = data_fn
        self._effect_fn = effect_fn
        self._tracker = tracker if tracker is not None else default_tracker
        self._disposed = False
        self._last_value = None
        self._initialized = False

    def _track(self):
        return self._tracker.run_tracked(self._run, self._data_fn)

    def _run(self) -> None:
        if self._disposed:
            return
        new_value = self._track()
        if self._disposed:
            return
        if not self._initialized or new_value != self._last_value:
            self._last_value = new_value
            self._initialized = True
            self._effect_fn(new_value)

    def dispose(self) -> None:
        self._disposed = True
        self._tracker.dispose_observer(self._run)

    def __repr__(self) -> str:
        state = "disposed" if self._disposed else "active"
        return f"_DataReaction({getattr(self._data_fn, '__name__', self._data_fn)!r}, {state})"


def autorun(fn: Callable[[], None], *, tracker: Tracker | None = None) -> Reaction:
    """Call fn now and again after every change to an observable it read.

    Suited to side effects with no render target, such as keeping a window
    title in sync with the current document:

        doc_name = Observable("untitled")
        title = autorun(lambda: window.set_title(f"Editor - {doc_name.get()}"))
        doc_name.set("notes.txt")   # title updated
        title.dispose()             # stop following doc_name
    """
    r = Reaction(fn, tracker=tracker)
    r._run()
    return r


def reaction(
    data_fn: Callable[[], T],
    effect_fn: Callable[[T], None],
    *,
    fire_immediately: bool = False,
    tracker: Tracker | None = None,
) -> _DataReaction:
    """Call effect_fn(value) whenever data_fn() returns something new.

    data_fn is the tracked part; effect_fn runs untracked and only when the
    derived value differs from the previous one. The first value is taken
    silently unless fire_immediately is set.

        unread = Observable(0)
        badge = reaction(lambda: unread.get() > 0, lambda on: tray.show_badge(on))
        unread.set(3)   # badge turned on
        unread.set(5)   # still True, effect skipped
    """
    r = _DataReaction(data_fn, effect_fn, tracker=tracker)
    if fire_immediately:
        r._run()
    else:
        r._last_value = r._track()
        r._initialized = True
    return r
