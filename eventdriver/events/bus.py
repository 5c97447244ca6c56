"""
Event bus for in-process pub/sub.

Provides:
- Subscriptions keyed by event name, deduplicated per callback
- Idempotent unsubscribe handles
- Synchronous and asynchronous listeners in one trigger
- Per-listener error isolation with an optional error hook
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any

from eventdriver.events.dispatcher import Dispatcher, ErrorHandler, TriggerFuture
from eventdriver.events.registry import EventCallback, Registry, Unsubscribe


class EventBus:
    """
    One event bus: a Registry plus the Dispatcher reading from it.

    There is no global instance; whoever creates a bus owns it and
    passes it to its consumers.

    Example:
        bus = EventBus()
        unsubscribe = bus.subscribe("user.logged_in", on_login)

        await bus.trigger("user.logged_in", user_id=42)
        unsubscribe()
    """

    def __init__(self, on_error: ErrorHandler | None = None):
        """
        Initialize event bus.

        Args:
            on_error: Optional hook receiving a CallbackFailure for every
                listener that raises or whose awaitable fails
        """
        self._registry = Registry()
        self._dispatcher = Dispatcher(self._registry, on_error=on_error)

    # -------------------------------------------------------------------------
    # Subscription
    # -------------------------------------------------------------------------

    def subscribe(self, key: str, callback: EventCallback) -> Unsubscribe:
        """
        Subscribe to an event.

        Args:
            key: Event key (non-empty string)
            callback: Listener, sync or returning an awaitable

        Returns:
            Unsubscribe function, safe to call any number of times
        """
        return self._registry.subscribe(key, callback)

    def on(self, key: str) -> Callable[[EventCallback], EventCallback]:
        """
        Subscribe as a decorator.

        Usage:
            @bus.on("model.loaded")
            async def on_loaded(name):
                ...
        """

        def decorator(fn: EventCallback) -> EventCallback:
            self._registry.subscribe(key, fn)
            return fn

        return decorator

    def cleanup(self) -> None:
        """Drop every listener. Handles issued earlier become no-ops."""
        self._registry.cleanup()

    # -------------------------------------------------------------------------
    # Dispatch
    # -------------------------------------------------------------------------

    def trigger(self, key: str, *args: Any, **kwargs: Any) -> TriggerFuture:
        """Trigger ``key``; see Dispatcher.trigger."""
        return self._dispatcher.trigger(key, *args, **kwargs)

    @property
    def pending_tasks(self) -> int:
        return self._dispatcher.pending_tasks

    # -------------------------------------------------------------------------
    # Introspection
    # -------------------------------------------------------------------------

    def listener_count(self, key: str) -> int:
        return self._registry.listener_count(key)

    def has_listeners(self, key: str) -> bool:
        return self._registry.has_listeners(key)

    def event_keys(self) -> list[str]:
        return self._registry.event_keys()

    def snapshot(self) -> Mapping[str, tuple[EventCallback, ...]]:
        return self._registry.snapshot()

    def get_stats(self) -> dict[str, Any]:
        """Get event bus statistics."""
        snapshot = self._registry.snapshot()
        return {
            "keys": len(snapshot),
            "total_subscriptions": sum(len(listeners) for listeners in snapshot.values()),
            "pending_tasks": self._dispatcher.pending_tasks,
        }
