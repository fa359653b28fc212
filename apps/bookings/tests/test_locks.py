import threading

import pytest

from shared.domain.errors import DomainError, ErrorKind

from apps.bookings.infrastructure.locks import PropertyLockRegistry


def test_released_locks_are_dropped():
    registry = PropertyLockRegistry(default_timeout=1.0)

    for property_id in range(50):
        with registry.hold(property_id):
            assert len(registry) == 1

    assert len(registry) == 0


def test_held_lock_times_out_as_conflict_and_is_dropped_afterwards():
    registry = PropertyLockRegistry(default_timeout=0.01)

    with registry.hold(1):
        with pytest.raises(DomainError) as info:
            with registry.hold(1):
                pass
        assert len(registry) == 1

    assert info.value.kind is ErrorKind.CONFLICT
    assert len(registry) == 0


def test_waiter_keeps_the_entry_alive():
    registry = PropertyLockRegistry(default_timeout=2.0)
    holding = threading.Event()
    release = threading.Event()
    entered = []

    def holder():
        with registry.hold(1):
            holding.set()
            release.wait(1.0)

    def waiter():
        with registry.hold(1):
            entered.append("waiter")

    first = threading.Thread(target=holder)
    first.start()
    holding.wait(1.0)
    second = threading.Thread(target=waiter)
    second.start()
    release.set()
    first.join()
    second.join()

    assert entered == ["waiter"]
    assert len(registry) == 0


def test_different_properties_do_not_block_each_other():
    registry = PropertyLockRegistry(default_timeout=0.01)

    with registry.hold(1):
        with registry.hold(2):
            assert len(registry) == 2
