"""Exceptions raised and reported by the event bus."""

from __future__ import annotations

from typing import Any


class EventBusError(Exception):
    """Base class for event bus errors."""


class InvalidKeyError(EventBusError, ValueError):
    """Raised when an event key is missing, not a string, or empty."""

    def __init__(self, key: Any, message: str | None = None):
        self.key = key
        self.message = message or (
            f"Invalid event key. Expected a non-empty string, got {key!r}."
        )
        super().__init__(self.message)


class InvalidCallbackError(EventBusError, TypeError):
    """
    Raised when a subscribe target cannot be used as a listener.

    Listeners are deduplicated by hash/equality, so a target must be both
    callable and hashable.
    """

    def __init__(self, callback: Any, message: str | None = None):
        self.callback = callback
        self.message = message or (
            f"Invalid callback. Expected a callable, got {type(callback).__name__!r}."
        )
        super().__init__(self.message)


class CallbackFailure(EventBusError):
    """
    Report of a listener that failed during dispatch.

    Never raised to the trigger caller; handed to the bus' ``on_error``
    hook instead.

    Attributes:
        key: Event key being dispatched
        callback: The listener that failed
        error: The exception it raised
        is_async: Whether it failed inside its awaitable
    """

    def __init__(
        self,
        key: str,
        callback: Any,
        error: BaseException,
        is_async: bool = False,
    ):
        self.key = key
        self.callback = callback
        self.error = error
        self.is_async = is_async
        kind = "async" if is_async else "sync"
        super().__init__(f"Error in {kind} callback for event {key!r}: {error!r}")


class EventContextError(EventBusError):
    """Raised when the provider layer is used without a usable provider."""


def callback_name(callback: Any) -> str:
    """Best-effort readable name for a listener, for log records."""
    name = getattr(callback, "__qualname__", None) or getattr(callback, "__name__", None)
    if name is None:
        return type(callback).__name__
    return name
