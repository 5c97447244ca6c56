"""
Event bus module.

Provides the listener registry, the dispatcher and the EventBus
combining them.
"""

from eventdriver.events.bus import EventBus
from eventdriver.events.dispatcher import Dispatcher, ErrorHandler
from eventdriver.events.errors import (
    CallbackFailure,
    EventBusError,
    EventContextError,
    InvalidCallbackError,
    InvalidKeyError,
)
from eventdriver.events.registry import EventCallback, Registry, Unsubscribe

__all__ = [
    "CallbackFailure",
    "Dispatcher",
    "ErrorHandler",
    "EventBus",
    "EventBusError",
    "EventCallback",
    "EventContextError",
    "InvalidCallbackError",
    "InvalidKeyError",
    "Registry",
    "Unsubscribe",
]
