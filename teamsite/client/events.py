"""Change notifications for the client cache."""

import logging
from enum import Enum
from typing import Any, Callable

logger = logging.getLogger(__name__)

Listener = Callable[[Any], None]


class CacheEvent(str, Enum):
    PLAYER_ADDED = "player_added"
    PLAYER_UPDATED = "player_updated"
    PLAYER_DELETED = "player_deleted"
    TEAM_ADDED = "team_added"
    TEAM_UPDATED = "team_updated"
    TEAM_DELETED = "team_deleted"
    SITE_CONFIG_UPDATED = "site_config_updated"
    DATA_LOADED = "data_loaded"
    LOAD_RETRYING = "load_retrying"
    LOAD_FAILED = "load_failed"


class ChangeNotificationBus:
    """Synchronous publish/subscribe keyed by :class:`CacheEvent`.

    Listeners run in registration order. One that raises is logged and
    skipped; the rest still run.
    """

    def __init__(self) -> None:
        self._listeners: dict[CacheEvent, list[Listener]] = {}

    def add_listener(self, event: CacheEvent, callback: Listener) -> None:
        self._listeners.setdefault(CacheEvent(event), []).append(callback)

    def remove_listener(self, event: CacheEvent, callback: Listener) -> bool:
        callbacks = self._listeners.get(CacheEvent(event), [])
        if callback in callbacks:
            callbacks.remove(callback)
            return True
        return False

    def notify(self, event: CacheEvent, payload: Any = None) -> None:
        # iterate a copy so a listener may unsubscribe itself
        for callback in list(self._listeners.get(CacheEvent(event), [])):
            try:
                callback(payload)
            except Exception:
                logger.exception(f"Listener {callback!r} failed on {event.value}")

    def listener_count(self, event: CacheEvent) -> int:
        return len(self._listeners.get(CacheEvent(event), []))
