"""Pricing service.

A court's rate table is five fixed hour buckets. Which bucket a booking
falls in depends only on the hour of its time slot; hours outside the
table are free.
"""

import math

from courtdesk.models.booking import Booking
from courtdesk.models.court import PRICING_FIELDS, Court, Pricing


def slot_hour(time_slot: str) -> int:
    """Hour component of an "HH:MM" slot label."""
    return int(time_slot.split(":")[0])


def price_for_hour(hour: int, pricing: Pricing | None) -> float:
    if pricing is None:
        return 0.0

    if hour == 6:
        price = pricing.six_am
    elif 7 <= hour <= 15:
        price = pricing.seven_to_fifteen
    elif 16 <= hour <= 21:
        price = pricing.sixteen_to_twenty_one
    elif hour == 22:
        price = pricing.twenty_two
    elif hour == 23:
        price = pricing.twenty_three
    else:
        return 0.0

    return price or 0.0


def booking_price(booking: Booking, court: Court | None) -> float:
    """What a booking is worth at its court's current rates."""
    if court is None or not booking.time_slot:
        return 0.0
    return price_for_hour(slot_hour(booking.time_slot), court.pricing)


def to_non_negative(value) -> float:
    """Coerce a submitted price. Anything missing, non-numeric or negative becomes 0."""
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(number) or number < 0:
        return 0.0
    return number


def sanitize_pricing(raw: dict | None, current: Pricing | None = None) -> Pricing:
    """Build a clamped rate table from a request payload.

    Buckets missing from ``raw`` keep their ``current`` value when updating.
    """
    raw = raw or {}
    values = {}
    for field in PRICING_FIELDS:
        submitted = raw.get(field)
        if submitted is None and current is not None:
            submitted = getattr(current, field)
        values[field] = to_non_negative(submitted)
    return Pricing(**values)
