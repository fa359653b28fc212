"""Bookings app package.

The booking lifecycle and availability engine: a pure domain layer
(pricing, availability, state machine), the ``BookingService`` use
cases, persistence adapters with per-property locking, the REST API
and the periodic completion task.
"""
