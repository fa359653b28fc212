"""Serializers for reviews.

The write serializer only checks the shape of the payload; whether the
user may review is decided by the ``ReviewGate`` in the view.
"""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from .models import Review


class ReviewCreateSerializer(serializers.Serializer):
    """Payload for creating a review."""

    property_id = serializers.IntegerField()
    booking_id = serializers.CharField(max_length=64)
    rating = serializers.IntegerField()
    comment = serializers.CharField(required=False, allow_blank=True, default='')

    def validate_rating(self, value: int) -> int:  # type: ignore
        if value < 1 or value > 5:
            raise serializers.ValidationError('Rating must be between 1 and 5.')
        return value


class ReviewSerializer(serializers.ModelSerializer):
    """Read serializer for reviews including related ids."""

    user_id = serializers.ReadOnlyField(source='user.id')
    property_id = serializers.ReadOnlyField(source='property.id')
    property_title = serializers.ReadOnlyField(source='property.title')
    booking_id = serializers.ReadOnlyField(source='booking.id')

    class Meta:
        model = Review
        fields = [
            'id',
            'user_id',
            'property_id',
            'property_title',
            'booking_id',
            'rating',
            'comment',
            'created_at',
        ]
