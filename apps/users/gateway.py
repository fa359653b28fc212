"""Turns an authenticated request user into the actor the booking engine sees."""

from __future__ import annotations

from shared.domain.errors import DomainError

from apps.bookings.domain.entities import Actor, Role


def actor_for(user) -> Actor:
    if user is None or not getattr(user, "is_authenticated", False):
        raise DomainError.authorization("Authentication required")
    if getattr(user, "is_administrator", False):
        return Actor(id=user.pk, role=Role.ADMIN)
    try:
        role = Role(user.role)
    except (AttributeError, ValueError):
        role = Role.GUEST
    # Admin is only granted through is_administrator; system is never a user role
    if role in (Role.ADMIN, Role.SYSTEM):
        role = Role.GUEST
    return Actor(id=user.pk, role=role)
