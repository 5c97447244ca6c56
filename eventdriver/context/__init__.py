"""
Provider layer.

Exposes a bus to consumers (EventProvider) and ties subscriptions to
an owner's lifetime (EventMonitor).
"""

from eventdriver.context.monitor import EventMonitor, HandlerConfig
from eventdriver.context.provider import EventProvider

__all__ = [
    "EventMonitor",
    "EventProvider",
    "HandlerConfig",
]
