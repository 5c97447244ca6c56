"""
eventdriver package.

In-process publish/subscribe event bus:
- Events (listener registry and sync/async dispatch)
- Rate limiting (debounce and throttle listener wrappers)
- Context (provider facade and lifecycle-bound subscriptions)
"""

from eventdriver.config import EventBusConfig
from eventdriver.context import EventMonitor, EventProvider, HandlerConfig
from eventdriver.events import (
    CallbackFailure,
    EventBus,
    EventBusError,
    EventContextError,
    InvalidCallbackError,
    InvalidKeyError,
)
from eventdriver.ratelimit import debounce, throttle

__version__ = "0.1.0"

__all__ = [
    "CallbackFailure",
    "EventBus",
    "EventBusConfig",
    "EventBusError",
    "EventContextError",
    "EventMonitor",
    "EventProvider",
    "HandlerConfig",
    "InvalidCallbackError",
    "InvalidKeyError",
    "debounce",
    "throttle",
]
