"""Celery tasks for the booking domain."""

from __future__ import annotations

import structlog
from celery import shared_task  # type: ignore

from .bootstrap import build_booking_service

logger = structlog.get_logger(__name__)


@shared_task(name="bookings.complete_elapsed_bookings")
def complete_elapsed_bookings() -> dict[str, int]:
    """
    Move CONFIRMED bookings whose stay is over to COMPLETED.

    Runs hourly through Celery Beat. Bookings that cannot be completed
    (for instance cancelled since they were selected) are skipped and
    counted.

    Returns:
        dict: {"completed": ..., "skipped": ...}
    """
    result = build_booking_service().complete_elapsed()
    if result["completed"] or result["skipped"]:
        logger.info("booking.completion_sweep", **result)
    return result
