import threading
from dataclasses import dataclass

import pytest

from eventdriver.events.bus import EventBus
from eventdriver.events.errors import InvalidCallbackError, InvalidKeyError
from eventdriver.events.registry import Registry


def test_subscribe_same_callback_twice_is_stored_once():
    registry = Registry()

    def handler():
        pass

    registry.subscribe("ping", handler)
    registry.subscribe("ping", handler)

    assert registry.listener_count("ping") == 1
    assert registry.listeners("ping") == (handler,)


def test_listeners_keep_registration_order():
    registry = Registry()
    a, b, c = (lambda: None), (lambda: None), (lambda: None)
    for fn in (b, a, c):
        registry.subscribe("k", fn)

    assert registry.listeners("k") == (b, a, c)


def test_bound_methods_of_same_object_dedupe():
    class Widget:
        def refresh(self):
            pass

    registry = Registry()
    widget = Widget()
    registry.subscribe("k", widget.refresh)
    registry.subscribe("k", widget.refresh)
    registry.subscribe("k", Widget().refresh)

    assert registry.listener_count("k") == 2


def test_unsubscribe_is_idempotent():
    registry = Registry()

    def handler():
        pass

    def other():
        pass

    unsubscribe = registry.subscribe("k", handler)
    registry.subscribe("k", other)

    unsubscribe()
    unsubscribe()
    unsubscribe()

    assert registry.listener_count("k") == 1
    assert registry.listeners("k") == (other,)


def test_last_unsubscribe_removes_key():
    registry = Registry()
    unsubscribe = registry.subscribe("k", lambda: None)
    assert "k" in registry

    unsubscribe()

    assert "k" not in registry
    assert registry.event_keys() == []
    assert registry.listener_count("k") == 0
    assert not registry.has_listeners("k")


def test_stale_handle_does_not_remove_resubscription():
    registry = Registry()

    def handler():
        pass

    first = registry.subscribe("k", handler)
    first()
    registry.subscribe("k", handler)
    first()

    assert registry.listener_count("k") == 1


def test_event_keys_in_first_subscription_order():
    registry = Registry()
    registry.subscribe("b", lambda: None)
    drop = registry.subscribe("a", lambda: None)
    registry.subscribe("c", lambda: None)
    registry.subscribe("b", lambda: None)

    assert registry.event_keys() == ["b", "a", "c"]

    drop()
    assert registry.event_keys() == ["b", "c"]
    assert len(registry) == 2


def test_cleanup_removes_everything_and_old_handles_are_noops():
    registry = Registry()

    def handler():
        pass

    unsubscribe = registry.subscribe("k", handler)
    registry.subscribe("other", lambda: None)

    registry.cleanup()
    assert registry.event_keys() == []
    assert registry.listener_count("k") == 0

    registry.subscribe("k", handler)
    unsubscribe()
    assert registry.listener_count("k") == 1


def test_snapshot_is_a_read_only_copy():
    registry = Registry()

    def handler():
        pass

    registry.subscribe("k", handler)
    snapshot = registry.snapshot()

    assert dict(snapshot) == {"k": (handler,)}
    with pytest.raises(TypeError):
        snapshot["x"] = ()  # type: ignore[index]

    registry.subscribe("k", lambda: None)
    assert len(snapshot["k"]) == 1


@pytest.mark.parametrize("key", [None, "", 0, b"key", ["k"]])
def test_subscribe_rejects_invalid_keys(key):
    registry = Registry()
    with pytest.raises(InvalidKeyError) as exc_info:
        registry.subscribe(key, lambda: None)

    assert exc_info.value.key == key
    assert isinstance(exc_info.value, ValueError)
    assert registry.event_keys() == []


@pytest.mark.parametrize("callback", [None, "handler", 42])
def test_subscribe_rejects_non_callables(callback):
    registry = Registry()
    with pytest.raises(InvalidCallbackError):
        registry.subscribe("k", callback)

    assert not registry.has_listeners("k")


def test_subscribe_rejects_unhashable_callables():
    class Handler:
        __hash__ = None

        def __call__(self):
            pass

    registry = Registry()
    with pytest.raises(InvalidCallbackError, match="hash/equality"):
        registry.subscribe("k", Handler())


def test_equal_callables_are_one_listener():
    @dataclass(frozen=True)
    class Forward:
        target: str

        def __call__(self, *args):
            pass

    registry = Registry()
    registry.subscribe("k", Forward("audit"))
    registry.subscribe("k", Forward("audit"))
    registry.subscribe("k", Forward("metrics"))

    assert registry.listener_count("k") == 2


def test_concurrent_threads_leave_registry_consistent():
    bus = EventBus()
    keys = ["a", "b", "c"]
    errors: list[BaseException] = []
    start = threading.Barrier(8)

    def worker(index):
        try:
            start.wait()
            for i in range(200):
                key = keys[(index + i) % len(keys)]

                def handler(*args):
                    pass

                unsubscribe = bus.subscribe(key, handler)
                bus.trigger(key, index, i)
                assert bus.listener_count(key) >= 1
                bus.snapshot()
                unsubscribe()
                unsubscribe()
        except BaseException as e:  # collected and asserted below
            errors.append(e)

    threads = [threading.Thread(target=worker, args=(n,)) for n in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=30)

    assert not any(thread.is_alive() for thread in threads)
    assert errors == []
    assert bus.event_keys() == []
