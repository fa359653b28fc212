"""
Shared Kernel

Base classes and utilities shared across the booking, review and
property contexts: domain building blocks, the tagged domain error,
unit of work and message bus.
"""
