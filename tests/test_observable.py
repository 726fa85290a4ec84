"""Tests for Observable."""

import logging

from wirex import Observable, Tracker, autorun


class TestObservable:
    def test_get_set(self):
        o = Observable(42)
        assert o.get() == 42
        o.set(100)
        assert o.get() == 100

    def test_value_property(self):
        o = Observable("a")
        o.value = "b"
        assert o.value == "b"

    def test_dedup(self):
        """Setting an equal value should not trigger subscribers."""
        o = Observable(42)
        log = []
        autorun(lambda: log.append(o.get()))
        assert log == [42]
        o.set(42)
        assert log == [42]  # no re-run

    def test_dedup_by_equality_not_identity(self):
        calls = []
        tracker = Tracker()
        o = Observable([1, 2], tracker=tracker)
        tracker.run_tracked(lambda: calls.append("x"), o.get)
        o.set([1, 2])
        assert calls == []

    def test_notifies_observers(self):
        o = Observable("hello")
        log = []
        autorun(lambda: log.append(o.get()))
        assert log == ["hello"]
        o.set("world")
        assert log == ["hello", "world"]

    def test_untracked_read(self):
        tracker = Tracker()
        o = Observable(1, tracker=tracker)

        def observer():
            pass

        tracker.run_tracked(observer, o.read)
        assert o.subscribers == frozenset()
        assert tracker.dependencies_of(observer) == frozenset()

    def test_get_outside_tracking_subscribes_nothing(self):
        o = Observable(1, tracker=Tracker())
        o.get()
        assert o.subscribers == frozenset()

    def test_subscriber_added_once(self):
        tracker = Tracker()
        o = Observable(1, tracker=tracker)
        calls = []

        def observer():
            calls.append(o.read())

        def body():
            o.get()
            o.watch()
            o.value

        tracker.run_tracked(observer, body)
        assert o.subscribers == frozenset({observer})
        o.set(2)
        assert calls == [2]

    def test_remove_subscriber_idempotent(self):
        tracker = Tracker()
        o = Observable(1, tracker=tracker)

        def observer():
            pass

        tracker.run_tracked(observer, o.get)
        o.remove_subscriber(observer)
        o.remove_subscriber(observer)
        assert o.subscribers == frozenset()

    def test_dispose_keeps_value(self):
        tracker = Tracker()
        o = Observable(1, tracker=tracker)
        calls = []

        def observer():
            calls.append(1)

        tracker.run_tracked(observer, o.get)
        o.dispose()
        o.set(2)
        assert calls == []
        assert o.get() == 2

        # Still usable: a new tracked read subscribes again.
        tracker.run_tracked(observer, o.get)
        o.set(3)
        assert calls == [1]

    def test_failing_subscriber_is_isolated(self, caplog):
        tracker = Tracker()
        o = Observable(1, tracker=tracker)
        calls = []

        def bad():
            raise RuntimeError("boom")

        def good():
            calls.append(o.read())

        tracker.run_tracked(bad, o.get)
        tracker.run_tracked(good, o.get)

        with caplog.at_level(logging.ERROR, logger="wirex.observable"):
            o.set(2)  # must not raise

        assert calls == [2]
        assert "Subscriber" in caplog.text
        assert "boom" in caplog.text

    def test_subscriber_may_set_other_observable(self):
        tracker = Tracker()
        a = Observable(0, tracker=tracker)
        b = Observable(0, tracker=tracker)
        seen = []

        def copy_a_to_b():
            b.set(a.read())

        def watch_b():
            seen.append(b.read())

        tracker.run_tracked(copy_a_to_b, a.get)
        tracker.run_tracked(watch_b, b.get)
        a.set(5)
        assert b.read() == 5
        assert seen == [5]

    def test_notification_uses_snapshot(self):
        """A subscriber disposing another mid-notification does not break iteration."""
        tracker = Tracker()
        o = Observable(0, tracker=tracker)
        calls = []

        def first():
            calls.append("first")
            tracker.dispose_observer(second)

        def second():
            calls.append("second")
            tracker.dispose_observer(first)

        tracker.run_tracked(first, o.get)
        tracker.run_tracked(second, o.get)
        o.set(1)
        # Both were in the snapshot; whichever ran first removed the other
        # from the live set only.
        assert sorted(calls) == ["first", "second"]
        assert o.subscribers == frozenset()

    def test_repr(self):
        o = Observable(5)
        assert "Observable(5)" in repr(o)
