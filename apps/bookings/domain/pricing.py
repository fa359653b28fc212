"""Price computation for a stay."""

from __future__ import annotations

import math
from datetime import datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal

ONE_DAY = timedelta(days=1)
CENT = Decimal("0.01")


def nights(start: datetime, end: datetime) -> int:
    """Whole days between start and end, partial days rounded up."""
    return math.ceil((end - start) / ONE_DAY)


def total(price_per_night, start: datetime, end: datetime) -> Decimal:
    """
    Price of the stay: nights(start, end) * price_per_night

    The result only depends on its arguments, so it can be recomputed
    later to audit a stored total.
    """
    rate = Decimal(str(price_per_night))
    if rate < 0:
        raise ValueError("Nightly rate cannot be negative")
    return (rate * nights(start, end)).quantize(CENT, rounding=ROUND_HALF_UP)
