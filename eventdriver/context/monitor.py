"""
Lifecycle-bound subscriptions.

EventMonitor subscribes a set of handlers when its owner starts and
removes every one of them, together with any pending debounce or
throttle timer, when the owner stops.

Example:
    handlers = {
        "search.input": HandlerConfig(perform_search, debounce=0.3),
        "scroll": HandlerConfig(update_position, throttle=0.1),
        "user.logged_out": on_logout,
    }

    async with EventMonitor(provider, handlers):
        await run_view()
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Protocol

from eventdriver.events.errors import EventBusError, EventContextError
from eventdriver.events.registry import EventCallback, Unsubscribe
from eventdriver.logging_config import get_logger
from eventdriver.ratelimit.wrappers import RateWrapper, wrap_callback

logger = get_logger(__name__)


class SupportsSubscribe(Protocol):
    def subscribe(self, key: str, callback: EventCallback) -> Unsubscribe: ...


@dataclass
class HandlerConfig:
    """
    Handler with call-rate options.

    Attributes:
        callback: Listener to subscribe
        debounce: Debounce delay in seconds (wins over throttle)
        throttle: Throttle delay in seconds
    """

    callback: EventCallback
    debounce: float | None = None
    throttle: float | None = None


Handlers = Mapping[str, "EventCallback | HandlerConfig"]


class EventMonitor:
    """
    Subscribes handlers for the lifetime of its owner.

    Invalid entries are skipped with a warning instead of failing the
    whole monitor. Use as a context manager (sync or async) or call
    start()/stop() explicitly; both are idempotent.
    """

    def __init__(self, provider: SupportsSubscribe, handlers: Handlers):
        if not callable(getattr(provider, "subscribe", None)):
            raise EventContextError(
                "EventMonitor must be used with an EventProvider or EventBus"
            )
        self._provider = provider
        self._handlers = dict(handlers)
        self._unsubscribes: list[Unsubscribe] = []
        self._wrappers: list[RateWrapper] = []
        self._keys: list[str] = []
        self._started = False

    @property
    def active(self) -> bool:
        return self._started

    @property
    def keys(self) -> list[str]:
        """Keys that were actually subscribed."""
        return list(self._keys)

    def start(self) -> None:
        """Subscribe every valid handler."""
        if self._started:
            return
        self._started = True

        for key, handler in self._handlers.items():
            if not isinstance(key, str) or not key:
                logger.warning(
                    "monitor_invalid_key",
                    key=key,
                    reason="event keys must be non-empty strings",
                )
                continue

            options: dict[str, Any] = {}
            if isinstance(handler, HandlerConfig):
                callback = handler.callback
                options = {"debounce": handler.debounce, "throttle": handler.throttle}
                if not callable(callback):
                    logger.warning(
                        "monitor_invalid_callback",
                        key=key,
                        reason="callbacks must be callable",
                    )
                    continue
            elif callable(handler):
                callback = handler
            else:
                logger.warning(
                    "monitor_invalid_handler",
                    key=key,
                    reason="expected a callable or HandlerConfig",
                )
                continue

            try:
                listener, wrapper = wrap_callback(callback, key=key, **options)
                unsubscribe = self._provider.subscribe(key, listener)
            except (EventBusError, ValueError) as e:
                logger.warning("monitor_subscribe_failed", key=key, error=str(e))
                continue

            self._unsubscribes.append(unsubscribe)
            if wrapper is not None:
                self._wrappers.append(wrapper)
            self._keys.append(key)

    def stop(self) -> None:
        """Unsubscribe everything and cancel pending wrapper timers."""
        if not self._started:
            return
        self._started = False

        for unsubscribe in self._unsubscribes:
            unsubscribe()
        for wrapper in self._wrappers:
            wrapper.cancel()

        self._unsubscribes.clear()
        self._wrappers.clear()
        self._keys.clear()

    def __enter__(self) -> EventMonitor:
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.stop()
        return False

    async def __aenter__(self) -> EventMonitor:
        self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb):
        self.stop()
        return False
