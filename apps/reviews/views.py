"""API views for reviews."""

from __future__ import annotations

from django.db import transaction  # type: ignore
from rest_framework import mixins, permissions, status, viewsets  # type: ignore
from rest_framework.response import Response  # type: ignore

from apps.bookings.bootstrap import build_booking_service

from .gate import ReviewGate
from .models import Review
from .repositories import DjangoReviewRepository, ReviewRecord
from .serializers import ReviewCreateSerializer, ReviewSerializer


class ReviewViewSet(mixins.CreateModelMixin, mixins.ListModelMixin, viewsets.GenericViewSet):
    """Create reviews for completed bookings and list them."""

    queryset = Review.objects.select_related('property', 'user', 'booking').all()
    permission_classes = [permissions.IsAuthenticatedOrReadOnly]

    def get_serializer_class(self):  # type: ignore
        if self.action == 'create':
            return ReviewCreateSerializer
        return ReviewSerializer

    def get_queryset(self):  # type: ignore
        qs = super().get_queryset()
        property_id = self.request.query_params.get('property')
        if property_id:
            qs = qs.filter(property_id=property_id)
        return qs

    def build_gate(self, reviews: DjangoReviewRepository) -> ReviewGate:
        return ReviewGate(build_booking_service().get_booking, reviews)

    def create(self, request, *args, **kwargs):  # type: ignore
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        reviews = DjangoReviewRepository()
        with transaction.atomic():
            booking = self.build_gate(reviews).ensure_can_review(
                request.user.pk, data['property_id'], data['booking_id']
            )
            record = reviews.add(ReviewRecord(
                user_id=request.user.pk,
                property_id=booking.property_id,
                booking_id=booking.id,
                rating=data['rating'],
                comment=data['comment'],
            ))

        review = self.get_queryset().get(pk=record.id)
        return Response(ReviewSerializer(review).data, status=status.HTTP_201_CREATED)
