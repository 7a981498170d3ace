"""Permanent (weekly recurring) bookings.

Activating permanence copies a booking forward into the same slot every
week for a year. Deactivating it collapses the series around the chosen
occurrence: that week and earlier ones stay as ordinary bookings, later
ones are deleted.

A series is every permanent booking sharing court, time slot and client
name. Matching is by name, not client id, so renaming a client partway
through a series splits it.
"""

import dataclasses
import logging
from collections import defaultdict
from datetime import UTC, datetime, timedelta

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from courtdesk.models.booking import AttendanceStatus, Booking
from courtdesk.services.booking_rules import local_date
from courtdesk.services.client_links import add_bookings_to_client, remove_bookings_from_client

logger = logging.getLogger(__name__)

PERMANENT_WEEKS = 52


@dataclasses.dataclass
class PermanenceCollapse:
    kept: int
    removed: int


def one_year_later(moment: datetime) -> datetime:
    """Same wall-clock instant a year on. 29 February maps to 28 February."""
    try:
        return moment.replace(year=moment.year + 1)
    except ValueError:
        return moment.replace(year=moment.year + 1, day=28)


def weekly_occurrences(starts_at: datetime, weeks: int = PERMANENT_WEEKS) -> list[datetime]:
    """Start instants of the next ``weeks`` weekly repeats, excluding the original."""
    return [starts_at + timedelta(days=7 * week) for week in range(1, weeks + 1)]


async def activate_permanence(
    db: AsyncSession,
    booking: Booking,
    now: datetime | None = None,
) -> list[Booking]:
    """Turn a booking into the first occurrence of a weekly series.

    Weeks whose slot is already taken on the same court are skipped, so
    activating twice does not duplicate anything. Returns the bookings created.
    """
    end_date = one_year_later(now or datetime.now(UTC))
    candidates = weekly_occurrences(booking.starts_at)

    result = await db.execute(
        select(Booking.starts_at).where(
            Booking.court_id == booking.court_id,
            Booking.time_slot == booking.time_slot,
            Booking.starts_at.in_(candidates),
        )
    )
    taken = set(result.scalars().all())

    created = [
        Booking(
            user_id=booking.user_id,
            court_id=booking.court_id,
            starts_at=starts_at,
            time_slot=booking.time_slot,
            client_id=booking.client_id,
            client_name=booking.client_name,
            deposit=booking.deposit,
            deposit_note=booking.deposit_note,
            status=AttendanceStatus.NOT_ARRIVED,
            is_permanent=True,
            permanent_end_date=end_date,
        )
        for starts_at in candidates
        if starts_at not in taken
    ]

    booking.is_permanent = True
    booking.permanent_end_date = end_date

    if created:
        db.add_all(created)
        await db.flush()
        if booking.client_id:
            await add_bookings_to_client(db, booking.client_id, [b.id for b in created])

    logger.info(
        "Booking %s made permanent: %d weekly bookings created, %d weeks already taken",
        booking.id,
        len(created),
        len(candidates) - len(created),
    )
    return created


async def deactivate_permanence(db: AsyncSession, booking: Booking) -> PermanenceCollapse:
    """Collapse the series ``booking`` belongs to around its calendar day.

    Members on or before that day become ordinary bookings; members after it
    are deleted and dropped from their client's booking list.
    """
    anchor_day = local_date(booking.starts_at)

    result = await db.execute(
        select(Booking.id, Booking.starts_at, Booking.client_id).where(
            Booking.court_id == booking.court_id,
            Booking.time_slot == booking.time_slot,
            Booking.client_name == booking.client_name,
            Booking.is_permanent.is_(True),
        )
    )

    keep_ids: list[int] = []
    doomed_by_client: dict[int | None, list[int]] = defaultdict(list)
    for member_id, starts_at, client_id in result.all():
        if local_date(starts_at) <= anchor_day:
            keep_ids.append(member_id)
        else:
            doomed_by_client[client_id].append(member_id)

    if keep_ids:
        await db.execute(
            update(Booking)
            .where(Booking.id.in_(keep_ids))
            .values(is_permanent=False, permanent_end_date=None)
        )

    doomed_ids = [bid for ids in doomed_by_client.values() for bid in ids]
    if doomed_ids:
        for client_id, ids in doomed_by_client.items():
            if client_id:
                await remove_bookings_from_client(db, client_id, ids)
        await db.execute(delete(Booking).where(Booking.id.in_(doomed_ids)))

    # The anchor may not have matched the series filter (e.g. already ordinary)
    booking.is_permanent = False
    booking.permanent_end_date = None

    logger.info(
        "Permanence removed from booking %s: %d kept, %d future bookings deleted",
        booking.id,
        len(keep_ids),
        len(doomed_ids),
    )
    return PermanenceCollapse(kept=len(keep_ids), removed=len(doomed_ids))
