"""Unit tests for the change notification bus."""

import logging

from teamsite.client.events import CacheEvent, ChangeNotificationBus


def test_listeners_run_in_registration_order():
    bus = ChangeNotificationBus()
    calls: list[tuple[str, object]] = []
    bus.add_listener(CacheEvent.PLAYER_ADDED, lambda p: calls.append(("first", p)))
    bus.add_listener(CacheEvent.PLAYER_ADDED, lambda p: calls.append(("second", p)))

    bus.notify(CacheEvent.PLAYER_ADDED, {"id": "player_1"})

    assert calls == [("first", {"id": "player_1"}), ("second", {"id": "player_1"})]


def test_failing_listener_does_not_stop_the_others(caplog):
    bus = ChangeNotificationBus()
    seen: list[object] = []

    def broken(_payload):
        raise RuntimeError("boom")

    bus.add_listener(CacheEvent.TEAM_DELETED, broken)
    bus.add_listener(CacheEvent.TEAM_DELETED, seen.append)

    with caplog.at_level(logging.ERROR, logger="teamsite.client.events"):
        bus.notify(CacheEvent.TEAM_DELETED, "tigers")

    assert seen == ["tigers"]
    assert "team_deleted" in caplog.text


def test_remove_listener():
    bus = ChangeNotificationBus()
    seen: list[object] = []
    bus.add_listener(CacheEvent.DATA_LOADED, seen.append)

    assert bus.remove_listener(CacheEvent.DATA_LOADED, seen.append) is True
    assert bus.remove_listener(CacheEvent.DATA_LOADED, seen.append) is False
    bus.notify(CacheEvent.DATA_LOADED, {})
    assert seen == []


def test_events_only_reach_their_own_listeners():
    bus = ChangeNotificationBus()
    seen: list[object] = []
    bus.add_listener("player_updated", seen.append)  # type: ignore[arg-type]

    bus.notify(CacheEvent.PLAYER_DELETED, "x")
    bus.notify(CacheEvent.PLAYER_UPDATED, "y")

    assert seen == ["y"]
    assert bus.listener_count(CacheEvent.PLAYER_UPDATED) == 1
