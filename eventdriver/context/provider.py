"""
Event provider.

Facade handing one EventBus to the rest of an application with the
five operations consumers need, plus the informational options from
EventBusConfig (listener limit warning and debug logging).
"""

from __future__ import annotations

from typing import Any

from eventdriver.config import EventBusConfig
from eventdriver.events.bus import EventBus
from eventdriver.events.dispatcher import TriggerFuture
from eventdriver.events.errors import callback_name
from eventdriver.events.registry import EventCallback, Unsubscribe, validate_key
from eventdriver.logging_config import get_logger

logger = get_logger(__name__)


class EventProvider:
    """
    Exposes an EventBus to its consumers.

    The provider owns neither the listeners nor the dispatch rules; it
    forwards to the bus. ``max_listeners`` only produces a warning and
    ``debug`` only produces log records.

    Example:
        provider = EventProvider(EventBus(), EventBusConfig(debug=True))
        unsubscribe = provider.subscribe("cart.updated", refresh)
        await provider.trigger("cart.updated", items=3)
    """

    def __init__(
        self,
        bus: EventBus | None = None,
        config: EventBusConfig | None = None,
    ):
        """
        Initialize provider.

        Args:
            bus: Bus to expose (a new one is created if omitted)
            config: Provider options
        """
        self._bus = bus if bus is not None else EventBus()
        self.config = config or EventBusConfig()

    @property
    def bus(self) -> EventBus:
        return self._bus

    def subscribe(self, key: str, callback: EventCallback) -> Unsubscribe:
        """Subscribe ``callback`` to ``key``; returns the unsubscribe function."""
        unsubscribe = self._bus.subscribe(key, callback)
        count = self._bus.listener_count(key)

        limit = self.config.max_listeners
        if limit and count > limit:
            logger.warning(
                "event_max_listeners_exceeded",
                key=key,
                listeners=count,
                max_listeners=limit,
            )

        if not self.config.debug:
            return unsubscribe

        logger.info(
            "provider_subscribed",
            key=key,
            callback=callback_name(callback),
            listeners=count,
        )

        logged = False

        def unsubscribe_logged() -> None:
            nonlocal logged
            unsubscribe()
            if logged:
                return
            logged = True
            logger.info(
                "provider_unsubscribed",
                key=key,
                callback=callback_name(callback),
                listeners=self._bus.listener_count(key),
            )

        return unsubscribe_logged

    def trigger(self, key: str, *args: Any, **kwargs: Any) -> TriggerFuture:
        """Trigger ``key`` with the given arguments."""
        validate_key(key)
        if self.config.debug:
            logger.info(
                "provider_triggered",
                key=key,
                listeners=self._bus.listener_count(key),
                args=args,
                kwargs=kwargs,
            )
        return self._bus.trigger(key, *args, **kwargs)

    def listener_count(self, key: str) -> int:
        return self._bus.listener_count(key)

    def has_listeners(self, key: str) -> bool:
        return self._bus.has_listeners(key)

    def event_keys(self) -> list[str]:
        return self._bus.event_keys()
