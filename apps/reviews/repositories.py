"""Review storage used by the review gate and the review API."""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Dict, List, Optional, Tuple
from uuid import UUID

from django.db import IntegrityError, transaction  # type: ignore

from shared.domain.base import utcnow
from shared.domain.errors import DomainError

ALREADY_REVIEWED_MESSAGE = "You have already reviewed this booking"


@dataclass(frozen=True)
class ReviewRecord:
    user_id: int
    property_id: int
    booking_id: UUID
    rating: int
    comment: str = ""
    id: Optional[int] = None
    created_at: datetime = field(default_factory=utcnow)


class ReviewRepository(ABC):

    @abstractmethod
    def exists_for(self, user_id: int, booking_id: UUID) -> bool:
        """True if ``user_id`` already reviewed ``booking_id``."""

    @abstractmethod
    def add(self, review: ReviewRecord) -> ReviewRecord:
        """Store a review; a duplicate (user, booking) pair is a validation error."""


class DjangoReviewRepository(ReviewRepository):

    def exists_for(self, user_id: int, booking_id: UUID) -> bool:
        from .models import Review

        return Review.objects.filter(user_id=user_id, booking_id=booking_id).exists()

    def add(self, review: ReviewRecord) -> ReviewRecord:
        from .models import Review

        try:
            with transaction.atomic():
                row = Review.objects.create(
                    user_id=review.user_id,
                    property_id=review.property_id,
                    booking_id=review.booking_id,
                    rating=review.rating,
                    comment=review.comment,
                )
        except IntegrityError:
            # Unique (user, booking) constraint lost a race with another request
            raise DomainError.validation(ALREADY_REVIEWED_MESSAGE)
        return replace(review, id=row.pk, created_at=row.created_at)


class InMemoryReviewRepository(ReviewRepository):

    def __init__(self):
        self._rows: Dict[Tuple[int, UUID], ReviewRecord] = {}
        self._guard = threading.Lock()

    def exists_for(self, user_id: int, booking_id: UUID) -> bool:
        with self._guard:
            return (user_id, booking_id) in self._rows

    def add(self, review: ReviewRecord) -> ReviewRecord:
        key = (review.user_id, review.booking_id)
        with self._guard:
            if key in self._rows:
                raise DomainError.validation(ALREADY_REVIEWED_MESSAGE)
            stored = replace(review, id=len(self._rows) + 1)
            self._rows[key] = stored
        return stored

    def for_property(self, property_id: int) -> List[ReviewRecord]:
        with self._guard:
            return [r for r in self._rows.values() if r.property_id == property_id]
