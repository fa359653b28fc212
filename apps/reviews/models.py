"""Models for the review domain.

A ``Review`` is feedback and a rating left by a guest for a property
they stayed at. It is tied to the completed booking that entitles the
guest to review; a user reviews a given booking at most once.
"""

from __future__ import annotations

from django.conf import settings  # type: ignore
from django.core.validators import MaxValueValidator, MinValueValidator  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


class Review(models.Model):
    """Represents a review left by a guest for a property."""

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='reviews'
    )
    property = models.ForeignKey(
        'properties.Property', on_delete=models.CASCADE, related_name='reviews'
    )
    booking = models.ForeignKey(
        'bookings.Booking',
        on_delete=models.CASCADE,
        related_name='reviews',
        help_text=_('Completed booking the review is based on')
    )
    rating = models.PositiveSmallIntegerField(
        validators=[MinValueValidator(1), MaxValueValidator(5)],
        help_text='Rating from 1 to 5'
    )
    comment = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at']
        constraints = [
            models.UniqueConstraint(fields=['user', 'booking'], name='review_unique_user_booking'),
        ]
        indexes = [
            models.Index(fields=['property', '-created_at'], name='review_property_created_idx'),
            models.Index(fields=['rating'], name='review_rating_idx'),
        ]

    def __str__(self) -> str:
        return f"Review by {self.user_id} for property {self.property_id} (Rating: {self.rating})"
