"""Properties app package.

Holds the property listing model and the catalog adapters the booking
engine reads nightly rates, owners and listing status from.
"""
