"""
Event dispatch.

Runs every listener registered for a key, isolates listener failures,
and hands back a future that resolves once the asynchronous listeners
have settled.
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import inspect
from collections.abc import Callable
from functools import partial
from typing import Any

from eventdriver.events.errors import CallbackFailure, callback_name
from eventdriver.events.registry import EventCallback, Registry, validate_key
from eventdriver.logging_config import get_logger

logger = get_logger(__name__)

ErrorHandler = Callable[[CallbackFailure], None]

TriggerFuture = asyncio.Future | concurrent.futures.Future


class Dispatcher:
    """
    Dispatches triggers against a Registry.

    Synchronous listeners run to completion, in registration order, before
    ``trigger`` returns. Listeners returning an awaitable are scheduled as
    tasks on the running loop and awaited together; their failures are
    reported but never fail the returned future.
    """

    def __init__(self, registry: Registry, on_error: ErrorHandler | None = None):
        """
        Initialize dispatcher.

        Args:
            registry: Registry to read listeners from (never mutated here)
            on_error: Optional hook receiving a CallbackFailure per failed listener
        """
        self._registry = registry
        self._on_error = on_error
        # Strong references; the loop only keeps weak ones to tasks
        self._tasks: set[asyncio.Future] = set()

    @property
    def pending_tasks(self) -> int:
        """Number of listener tasks still in flight."""
        return len(self._tasks)

    def trigger(self, key: str, *args: Any, **kwargs: Any) -> TriggerFuture:
        """
        Trigger an event.

        Args:
            key: Event key
            *args: Positional arguments passed to every listener
            **kwargs: Keyword arguments passed to every listener

        Returns:
            Future resolving to None once all async listeners have settled.
            Already done if every listener was synchronous.

        Raises:
            InvalidKeyError: key is not a non-empty string
        """
        validate_key(key)

        listeners = self._registry.listeners(key)
        if not listeners:
            return _resolved(_running_loop())

        loop = _running_loop()
        pending: list[tuple[EventCallback, asyncio.Future]] = []

        for callback in listeners:
            try:
                result = callback(*args, **kwargs)
            except Exception as e:
                self._report(key, callback, e, is_async=False)
                continue

            if not inspect.isawaitable(result):
                continue

            if loop is None:
                if inspect.iscoroutine(result):
                    result.close()
                self._report(
                    key,
                    callback,
                    RuntimeError("listener returned an awaitable but no event loop is running"),
                    is_async=True,
                )
                continue

            pending.append((callback, asyncio.ensure_future(result)))

        logger.debug(
            "event_triggered",
            key=key,
            listeners=len(listeners),
            pending=len(pending),
        )

        if not pending:
            return _resolved(loop)
        return self._settle_all(key, pending, loop)

    def _settle_all(
        self,
        key: str,
        pending: list[tuple[EventCallback, asyncio.Future]],
        loop: asyncio.AbstractEventLoop,
    ) -> asyncio.Future:
        done = loop.create_future()
        remaining = len(pending)

        def settle(task: asyncio.Future, callback: EventCallback) -> None:
            nonlocal remaining
            self._tasks.discard(task)
            if task.cancelled():
                self._report(key, callback, asyncio.CancelledError(), is_async=True)
            elif (error := task.exception()) is not None:
                self._report(key, callback, error, is_async=True)

            remaining -= 1
            if remaining == 0 and not done.done():
                done.set_result(None)

        for callback, task in pending:
            self._tasks.add(task)
            task.add_done_callback(partial(settle, callback=callback))

        return done

    def _report(
        self,
        key: str,
        callback: EventCallback,
        error: BaseException,
        is_async: bool,
    ) -> None:
        """Log a listener failure and hand it to the error hook."""
        logger.error(
            "event_callback_failed",
            key=key,
            callback=callback_name(callback),
            is_async=is_async,
            exc_info=error,
        )
        if self._on_error is None:
            return

        try:
            self._on_error(CallbackFailure(key, callback, error, is_async=is_async))
        except Exception:
            logger.exception("event_error_hook_failed", key=key)


def _running_loop() -> asyncio.AbstractEventLoop | None:
    try:
        return asyncio.get_running_loop()
    except RuntimeError:
        return None


def _resolved(loop: asyncio.AbstractEventLoop | None) -> TriggerFuture:
    """An already-completed future, bound to ``loop`` when there is one."""
    if loop is None:
        future: TriggerFuture = concurrent.futures.Future()
    else:
        future = loop.create_future()
    future.set_result(None)
    return future
