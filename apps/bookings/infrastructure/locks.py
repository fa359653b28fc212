"""Per-property mutual exclusion for single-process deployments."""

import threading
from contextlib import contextmanager
from typing import Dict, Hashable, Optional

from shared.domain.errors import DomainError


class PropertyLockRegistry:
    """
    One lock per property id

    Creations on different properties never wait for each other. A
    caller that cannot get the lock within ``timeout`` seconds fails
    with a conflict instead of queueing indefinitely.

    Entries are reference counted (holder plus waiters) and dropped
    when the last user leaves, so the registry only grows with the
    number of properties being booked at the same moment.
    """

    def __init__(self, default_timeout: Optional[float] = 5.0):
        self._default_timeout = default_timeout
        self._locks: Dict[Hashable, threading.Lock] = {}
        self._users: Dict[Hashable, int] = {}
        self._guard = threading.Lock()

    def __len__(self):
        with self._guard:
            return len(self._locks)

    def _checkout(self, property_id: Hashable) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(property_id)
            if lock is None:
                lock = self._locks[property_id] = threading.Lock()
            self._users[property_id] = self._users.get(property_id, 0) + 1
            return lock

    def _checkin(self, property_id: Hashable) -> None:
        with self._guard:
            remaining = self._users[property_id] - 1
            if remaining:
                self._users[property_id] = remaining
            else:
                del self._users[property_id]
                del self._locks[property_id]

    @contextmanager
    def hold(self, property_id: Hashable, timeout: Optional[float] = None):
        timeout = self._default_timeout if timeout is None else timeout
        lock = self._checkout(property_id)
        try:
            acquired = lock.acquire(timeout=timeout) if timeout is not None else lock.acquire()
            if not acquired:
                raise DomainError.conflict("Property is being booked by another request, retry later")
            try:
                yield
            finally:
                lock.release()
        finally:
            self._checkin(property_id)
