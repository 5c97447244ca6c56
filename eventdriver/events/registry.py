"""
Listener registry.

Holds, per event key, the insertion-ordered set of subscribed callbacks
and owns every mutation of it. Readers only ever get copies.
"""

from __future__ import annotations

import threading
from collections.abc import Awaitable, Callable, Mapping
from types import MappingProxyType
from typing import Any

from eventdriver.events.errors import InvalidCallbackError, InvalidKeyError, callback_name
from eventdriver.logging_config import get_logger

logger = get_logger(__name__)

# A listener may be a plain function or return an awaitable
EventCallback = Callable[..., None] | Callable[..., Awaitable[Any]]
Unsubscribe = Callable[[], None]


def validate_key(key: Any) -> str:
    """Return ``key`` unchanged or raise InvalidKeyError."""
    if not isinstance(key, str) or not key:
        raise InvalidKeyError(key)
    return key


def validate_callback(callback: Any) -> EventCallback:
    """Return ``callback`` unchanged or raise InvalidCallbackError.

    Listeners live in a dict, so they must be hashable; two listeners that
    compare equal are the same registry member.
    """
    if not callable(callback):
        raise InvalidCallbackError(callback)
    try:
        hash(callback)
    except TypeError as e:
        raise InvalidCallbackError(
            callback,
            f"Invalid callback. {type(callback).__name__!r} is not hashable; "
            "listeners are deduplicated by hash/equality.",
        ) from e
    return callback


class Registry:
    """
    Mapping of event key to its listener set.

    A listener set is a dict used as an ordered set, so the same callback
    registered twice under one key is stored once and dispatch order is
    registration order. Sets are created on first subscribe and dropped
    when their last member leaves.
    """

    def __init__(self):
        self._listeners: dict[str, dict[EventCallback, None]] = {}
        self._lock = threading.RLock()
        # Bumped by cleanup(); handles from an older generation are dead
        self._generation = 0

    # -------------------------------------------------------------------------
    # Mutation
    # -------------------------------------------------------------------------

    def subscribe(self, key: str, callback: EventCallback) -> Unsubscribe:
        """
        Subscribe a callback to an event key.

        Args:
            key: Event key (non-empty string)
            callback: Listener, sync or returning an awaitable

        Returns:
            Idempotent unsubscribe function

        Raises:
            InvalidKeyError: key is not a non-empty string
            InvalidCallbackError: callback is not a hashable callable
        """
        validate_key(key)
        validate_callback(callback)

        with self._lock:
            self._listeners.setdefault(key, {})[callback] = None
            generation = self._generation

        logger.debug("event_subscribed", key=key, callback=callback_name(callback))

        active = True

        def unsubscribe() -> None:
            nonlocal active
            with self._lock:
                if not active:
                    return
                active = False
                if generation != self._generation:
                    return
                self._discard(key, callback)

        return unsubscribe

    def _discard(self, key: str, callback: EventCallback) -> None:
        listeners = self._listeners.get(key)
        if listeners is None or callback not in listeners:
            return
        del listeners[callback]
        if not listeners:
            del self._listeners[key]
        logger.debug("event_unsubscribed", key=key, callback=callback_name(callback))

    def cleanup(self) -> None:
        """Remove every listener and every key."""
        with self._lock:
            keys = len(self._listeners)
            for listeners in self._listeners.values():
                listeners.clear()
            self._listeners.clear()
            self._generation += 1
        logger.debug("event_bus_cleanup", keys=keys)

    # -------------------------------------------------------------------------
    # Introspection
    # -------------------------------------------------------------------------

    def listeners(self, key: str) -> tuple[EventCallback, ...]:
        """Ordered copy of the listeners for ``key`` (empty if none)."""
        with self._lock:
            listeners = self._listeners.get(key)
            return tuple(listeners) if listeners else ()

    def listener_count(self, key: str) -> int:
        with self._lock:
            listeners = self._listeners.get(key)
            return len(listeners) if listeners else 0

    def has_listeners(self, key: str) -> bool:
        return self.listener_count(key) > 0

    def event_keys(self) -> list[str]:
        """Keys with at least one listener, in first-subscription order."""
        with self._lock:
            return list(self._listeners)

    def snapshot(self) -> Mapping[str, tuple[EventCallback, ...]]:
        """Read-only copy of the whole registry."""
        with self._lock:
            return MappingProxyType(
                {key: tuple(listeners) for key, listeners in self._listeners.items()}
            )

    def __len__(self) -> int:
        with self._lock:
            return len(self._listeners)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._listeners
