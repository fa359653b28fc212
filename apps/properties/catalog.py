"""Property catalog adapters consumed by the booking engine."""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from typing import Dict, Optional

from django.db import connection  # type: ignore

from apps.bookings.domain.entities import PropertySnapshot


class PropertyCatalog(ABC):
    """Read-only lookup of properties by id."""

    @abstractmethod
    def get(self, property_id, *, lock: bool = False, lock_timeout: Optional[float] = None) -> Optional[PropertySnapshot]:
        """Return the property or None. ``lock`` pins the row until the transaction ends."""


class DjangoPropertyCatalog(PropertyCatalog):
    """Catalog backed by the ``properties.Property`` table."""

    def get(self, property_id, *, lock: bool = False, lock_timeout: Optional[float] = None) -> Optional[PropertySnapshot]:
        from .models import Property

        queryset = Property.objects.filter(pk=property_id)
        if lock:
            if lock_timeout and connection.vendor == "postgresql":
                # Bounded wait on the row lock instead of queueing forever
                with connection.cursor() as cursor:
                    cursor.execute(f"SET LOCAL lock_timeout = '{int(lock_timeout * 1000)}ms'")
            queryset = queryset.select_for_update()
        property_obj = queryset.first()
        return property_obj.to_snapshot() if property_obj else None


class InMemoryPropertyCatalog(PropertyCatalog):
    """Dictionary-backed catalog for single-process runs and tests."""

    def __init__(self):
        self._items: Dict[int, PropertySnapshot] = {}
        self._guard = threading.Lock()

    def put(self, snapshot: PropertySnapshot) -> PropertySnapshot:
        with self._guard:
            self._items[snapshot.id] = snapshot
        return snapshot

    def get(self, property_id, *, lock: bool = False, lock_timeout: Optional[float] = None) -> Optional[PropertySnapshot]:
        # Row locking is the unit of work's job for the in-memory backend
        with self._guard:
            return self._items.get(property_id)
