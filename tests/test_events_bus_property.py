from hypothesis import given
from hypothesis import strategies as st

import pytest

from eventdriver.events.bus import EventBus
from eventdriver.events.errors import InvalidKeyError

keys = st.text(min_size=1, max_size=30)


@given(keys, st.integers(min_value=1, max_value=10))
def test_repeated_subscribe_stores_one_listener(key: str, times: int):
    bus = EventBus()
    calls = []

    def handler():
        calls.append(1)

    for _ in range(times):
        bus.subscribe(key, handler)

    assert bus.listener_count(key) == 1
    bus.trigger(key)
    assert calls == [1]


@given(keys, st.integers(min_value=2, max_value=10))
def test_unsubscribe_many_times_equals_once(key: str, times: int):
    bus = EventBus()
    unsubscribe = bus.subscribe(key, lambda: None)
    bus.subscribe(key, lambda: None)

    for _ in range(times):
        unsubscribe()
        assert bus.listener_count(key) == 1


@given(st.lists(keys, min_size=1, max_size=8))
def test_event_keys_follow_first_subscription(names: list[str]):
    bus = EventBus()
    for name in names:
        bus.subscribe(name, lambda: None)

    assert bus.event_keys() == list(dict.fromkeys(names))


@given(st.one_of(st.none(), st.just(""), st.integers(), st.floats(), st.binary()))
def test_invalid_keys_always_raise(key):
    bus = EventBus()
    with pytest.raises(InvalidKeyError):
        bus.subscribe(key, lambda: None)
    with pytest.raises(InvalidKeyError):
        bus.trigger(key)
