"""Booking rules enforcement.

All booking validation logic lives here, separate from the route handlers.
Each rule returns a clear error message or None if the rule passes.
validate_booking() runs every rule that applies to the actor and collects
the violations.
"""

import re
from datetime import date, datetime, time, timedelta, timezone

from courtdesk.core.config import settings
from courtdesk.models.user import UserRole

# Business wall clock. The club runs on a fixed offset with no DST.
LOCAL_TZ = timezone(timedelta(hours=settings.utc_offset_hours))

FIRST_SLOT_HOUR = 6
LAST_SLOT_HOUR = 23

_SLOT_RE = re.compile(r"^(\d{2}):(\d{2})$")


class BookingViolation(Exception):
    """Raised when a booking rule is violated."""

    def __init__(self, rule: str, message: str):
        self.rule = rule
        self.message = message
        super().__init__(message)


def local_now() -> datetime:
    return datetime.now(LOCAL_TZ)


def parse_time_slot(time_slot: str) -> time:
    """Parse an "HH:MM" slot label. Slots start on the hour between 06:00 and 23:00."""
    match = _SLOT_RE.match(time_slot or "")
    if not match:
        raise BookingViolation("time_slot", f"Invalid time slot '{time_slot}'. Expected HH:MM.")

    hour, minute = int(match.group(1)), int(match.group(2))
    if minute != 0 or not FIRST_SLOT_HOUR <= hour <= LAST_SLOT_HOUR:
        raise BookingViolation(
            "time_slot",
            f"Time slot '{time_slot}' is not bookable. Slots run hourly from "
            f"{FIRST_SLOT_HOUR:02d}:00 to {LAST_SLOT_HOUR:02d}:00.",
        )
    return time(hour, minute)


def combine_slot(booking_date: date, time_slot: str) -> datetime:
    """Absolute start of a slot: calendar date + slot hour on the local clock."""
    return datetime.combine(booking_date, parse_time_slot(time_slot), tzinfo=LOCAL_TZ)


def local_date(moment: datetime) -> date:
    return moment.astimezone(LOCAL_TZ).date()


def local_day_bounds(start_date: date, end_date: date) -> tuple[datetime, datetime]:
    """First and last instant of an inclusive range of local calendar days."""
    start = datetime.combine(start_date, time.min, tzinfo=LOCAL_TZ)
    end = datetime.combine(end_date, time.max, tzinfo=LOCAL_TZ)
    return start, end


def check_not_in_past(starts_at: datetime, now: datetime | None = None) -> BookingViolation | None:
    """Cannot book a past day, or an hour of today that has already gone by.

    The current hour itself is still bookable.
    """
    now = (now or local_now()).astimezone(LOCAL_TZ)
    start = starts_at.astimezone(LOCAL_TZ)

    if start.date() < now.date():
        return BookingViolation(
            "past_booking",
            "Cannot create a booking on a past date. Only administrators can do this.",
        )

    if start.date() == now.date() and start.hour < now.hour:
        return BookingViolation(
            "past_booking",
            "Cannot create a booking for a time slot that has already passed. Only administrators can do this.",
        )

    return None


def validate_booking(
    starts_at: datetime,
    actor_role: UserRole,
    now: datetime | None = None,
) -> list[BookingViolation]:
    """Run all booking rules and return a list of violations (empty = valid).

    Administrators may backfill history, so they skip the time checks.
    """
    violations: list[BookingViolation] = []

    if actor_role == UserRole.ADMIN:
        return violations

    v = check_not_in_past(starts_at, now)
    if v:
        violations.append(v)

    return violations
