"""Textual integration for wirex. Opt-in — requires textual.

observe() binds a widget to a builder: the builder runs tracked, its output
goes to widget.update(), and any change to what it read re-renders it.
Guarding (paused app, not running, missing widgets, background threads) is
enforced here rather than at each call site.
"""

import logging
import threading
from contextlib import contextmanager

from textual.css.query import NoMatches

from wirex.observer import Observer

logger = logging.getLogger("wirex.textual")

# Module-owned pause state — keyed by id(app) so multiple apps work in tests.
_paused_apps: set[int] = set()


@contextmanager
def pause(app):
    """Suspend re-renders during widget replacement."""
    key = id(app)
    _paused_apps.add(key)
    try:
        yield
    finally:
        _paused_apps.discard(key)


def is_safe(app) -> bool:
    """Is the widget tree in a queryable state?"""
    return app.is_running and id(app) not in _paused_apps


def observe(app, widget, builder, *, fallback=None, tracker=None) -> Observer:
    """Keep widget's content in sync with builder's output.

    The builder runs immediately. Changes from a background thread are
    marshaled with app.call_from_thread. NoMatches raised while updating is
    ignored; other errors go to fallback (or propagate when none is given).
    Call .dispose() on the returned Observer when the widget is removed.
    """
    _main = threading.get_ident()
    observer = None

    def _refresh():
        try:
            widget.update(observer.render())
        except NoMatches:
            logger.debug("Skipped refresh of %r: widget not mounted", widget)

    def _on_change():
        if not is_safe(app):
            return
        if threading.get_ident() != _main:
            app.call_from_thread(_refresh)
        else:
            _refresh()

    observer = Observer(builder, _on_change, fallback=fallback, tracker=tracker)
    _refresh()
    return observer
