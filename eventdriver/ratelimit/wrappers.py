"""
Call-rate wrappers for event listeners.

Provides two ways of coalescing calls in time before they reach a
listener:
- Debounce: deliver only the last call of a burst, once the burst has
  been quiet for ``delay`` seconds
- Throttle: deliver at most one call per ``delay`` seconds, with a
  trailing delivery of the latest call made inside the window

The wrappers know nothing about the registry; wrap a callback first,
then subscribe the wrapper. Timers run on the asyncio event loop.

Example:
    from eventdriver.ratelimit import debounce

    search = debounce(perform_search, 0.3)
    unsubscribe = bus.subscribe("search.input", search)
    ...
    unsubscribe()
    search.cancel()
"""

from __future__ import annotations

import asyncio
import inspect
import time
from functools import update_wrapper
from typing import Any

from eventdriver.events.errors import callback_name
from eventdriver.events.registry import EventCallback, validate_callback
from eventdriver.logging_config import get_logger

logger = get_logger(__name__)

PendingCall = tuple[tuple[Any, ...], dict[str, Any]]


def _require_loop() -> asyncio.AbstractEventLoop:
    try:
        return asyncio.get_running_loop()
    except RuntimeError as e:
        raise RuntimeError("call-rate wrappers need a running asyncio event loop") from e


class RateWrapper:
    """
    Base class for debounce and throttle wrappers.

    Holds at most one live timer and one buffered call. Instances hash
    by identity, so every wrapper is its own registry member.
    """

    kind = "rate_wrapper"

    def __init__(self, callback: EventCallback, delay: float):
        validate_callback(callback)
        if delay < 0:
            raise ValueError("delay must be >= 0")

        self.callback = callback
        self.delay = float(delay)
        self._timer: asyncio.TimerHandle | None = None
        self._pending: PendingCall | None = None
        self._tasks: set[asyncio.Future] = set()
        update_wrapper(self, callback, updated=())

    @property
    def pending(self) -> bool:
        """Whether a deferred call is waiting for its timer."""
        return self._pending is not None

    def cancel(self) -> None:
        """Drop the buffered call and release the timer."""
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        self._pending = None

    def _fire(self) -> None:
        self._timer = None
        pending, self._pending = self._pending, None
        if pending is None:
            return
        self._before_deliver()
        args, kwargs = pending
        self._deliver(args, kwargs)

    def _before_deliver(self) -> None:
        pass

    def _deliver(self, args: tuple[Any, ...], kwargs: dict[str, Any]) -> None:
        """Run the callback from a timer, logging rather than raising."""
        try:
            result = self.callback(*args, **kwargs)
        except Exception:
            logger.exception(f"{self.kind}_fire_failed", callback=callback_name(self.callback))
            return

        if inspect.isawaitable(result):
            task = asyncio.ensure_future(result)
            self._tasks.add(task)
            task.add_done_callback(self._task_done)

    def _task_done(self, task: asyncio.Future) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error(
                f"{self.kind}_fire_failed",
                callback=callback_name(self.callback),
                exc_info=error,
            )

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {callback_name(self.callback)} delay={self.delay}>"


class Debounced(RateWrapper):
    """
    Debounced callback.

    Every call cancels the scheduled delivery, remembers its arguments
    and schedules a new delivery ``delay`` seconds later.
    """

    kind = "debounce"

    def __call__(self, *args: Any, **kwargs: Any) -> None:
        loop = _require_loop()
        if self._timer is not None:
            self._timer.cancel()
        self._pending = (args, kwargs)
        self._timer = loop.call_later(self.delay, self._fire)


class Throttled(RateWrapper):
    """
    Throttled callback.

    A call at least ``delay`` seconds after the last delivery goes
    through immediately and its result is returned, so an awaitable is
    awaited by the dispatcher. Calls inside the window are buffered
    (last one wins) and delivered when the window ends.
    """

    kind = "throttle"

    def __init__(self, callback: EventCallback, delay: float):
        super().__init__(callback, delay)
        self._last_fired: float | None = None

    def __call__(self, *args: Any, **kwargs: Any) -> Any:
        now = time.monotonic()
        elapsed = None if self._last_fired is None else now - self._last_fired

        if elapsed is None or elapsed >= self.delay:
            self._last_fired = now
            self.cancel()
            return self.callback(*args, **kwargs)

        if self._timer is None:
            self._timer = _require_loop().call_later(self.delay - elapsed, self._fire)
        self._pending = (args, kwargs)
        return None

    def _before_deliver(self) -> None:
        self._last_fired = time.monotonic()


def debounce(callback: EventCallback, delay: float) -> Debounced:
    """Wrap ``callback`` so only the last call of a burst is delivered."""
    return Debounced(callback, delay)


def throttle(callback: EventCallback, delay: float) -> Throttled:
    """Wrap ``callback`` so it is delivered at most once per ``delay`` seconds."""
    return Throttled(callback, delay)


def wrap_callback(
    callback: EventCallback,
    debounce: float | None = None,
    throttle: float | None = None,
    key: str | None = None,
) -> tuple[EventCallback, RateWrapper | None]:
    """
    Apply debounce or throttle to a listener.

    Debounce wins when both are given. A delay of None or <= 0 leaves the
    callback unwrapped.

    Args:
        callback: Listener to wrap
        debounce: Debounce delay in seconds
        throttle: Throttle delay in seconds
        key: Event key, only used in the conflict warning

    Returns:
        (callable to subscribe, wrapper to cancel on teardown or None)
    """
    if debounce is not None and throttle is not None:
        logger.warning(
            "rate_wrapper_conflict",
            key=key,
            callback=callback_name(callback),
            debounce=debounce,
            throttle=throttle,
            using="debounce",
        )

    if debounce is not None and debounce > 0:
        wrapper: RateWrapper = Debounced(callback, debounce)
    elif throttle is not None and throttle > 0:
        wrapper = Throttled(callback, throttle)
    else:
        return callback, None

    return wrapper, wrapper
