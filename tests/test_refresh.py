"""Tests for refresh listener registration and notification."""

from __future__ import annotations

from supabase_mcp.refresh import RefreshNotifier


def test_listeners_called_in_registration_order():
    notifier = RefreshNotifier()
    order = []
    notifier.on_refresh(lambda: order.append("first"))
    notifier.on_refresh(lambda: order.append("second"))

    notifier.notify()
    assert order == ["first", "second"]


def test_same_callback_registered_once():
    notifier = RefreshNotifier()
    hits = []

    def listener():
        hits.append(1)

    notifier.on_refresh(listener)
    notifier.on_refresh(listener)
    notifier.notify()

    assert len(notifier) == 1
    assert hits == [1]


def test_unregister_is_idempotent():
    notifier = RefreshNotifier()

    def listener():
        pass

    unregister = notifier.on_refresh(listener)
    unregister()
    assert listener not in notifier
    unregister()
    assert len(notifier) == 0


def test_failing_listener_does_not_stop_others():
    notifier = RefreshNotifier()
    hits = []

    def broken():
        raise RuntimeError("boom")

    notifier.on_refresh(broken)
    notifier.on_refresh(lambda: hits.append("ok"))
    notifier.notify()

    assert hits == ["ok"]


def test_listener_may_unregister_itself_during_notify():
    notifier = RefreshNotifier()
    hits = []
    unregister = None

    def once():
        hits.append(1)
        unregister()

    unregister = notifier.on_refresh(once)
    notifier.notify()
    notifier.notify()

    assert hits == [1]
