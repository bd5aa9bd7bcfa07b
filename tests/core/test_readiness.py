"""Readiness state test suite."""
import threading

import pytest

from pinger.core.readiness import TARGET_UP, ReadinessState


def test_checks_start_not_ready():
    state = ReadinessState()
    assert state.get(TARGET_UP) is False
    assert state.is_ready() is False


def test_set_and_get():
    state = ReadinessState()
    state.set(TARGET_UP, True)
    assert state.get(TARGET_UP) is True
    assert state.is_ready() is True


def test_unknown_check_is_rejected():
    state = ReadinessState()
    with pytest.raises(KeyError):
        state.set("database_up", True)
    with pytest.raises(KeyError):
        state.get("database_up")


def test_is_ready_requires_every_check():
    state = ReadinessState(checks=("a", "b"))
    state.set("a", True)
    assert state.is_ready() is False
    state.set("b", True)
    assert state.is_ready() is True


def test_concurrent_readers_see_consistent_values():
    """Verify readers on many threads only ever observe booleans while a writer flips the flag."""
    state = ReadinessState()
    seen: set = set()
    stop = threading.Event()

    def reader():
        while not stop.is_set():
            seen.add(state.get(TARGET_UP))

    readers = [threading.Thread(target=reader) for _ in range(4)]
    for thread in readers:
        thread.start()
    for i in range(1000):
        state.set(TARGET_UP, i % 2 == 0)
    stop.set()
    for thread in readers:
        thread.join()

    assert seen <= {True, False}
