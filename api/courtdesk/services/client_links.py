"""Client resolution and the client <-> booking back-reference.

Every booking that points at a client must appear in that client's booking
list and nothing else may. All code that creates, re-assigns or deletes
bookings goes through the helpers here to keep both sides in step.
"""

from collections.abc import Iterable

from sqlalchemy import delete, insert, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from courtdesk.models.booking import Booking
from courtdesk.models.client import Client, ClientBooking


async def resolve_client_id(
    db: AsyncSession,
    client_id: int | None,
    client_name: str | None,
) -> int | None:
    """Pick the client a booking belongs to.

    An explicit id wins and is trusted as-is. Otherwise the trimmed name is
    matched exactly against existing clients. No match means the booking
    only keeps the free-text name.
    """
    if client_id:
        return client_id

    if not client_name or not client_name.strip():
        return None

    result = await db.execute(select(Client.id).where(Client.name == client_name.strip()))
    return result.scalar_one_or_none()


async def add_bookings_to_client(db: AsyncSession, client_id: int, booking_ids: Iterable[int]) -> None:
    """Add booking ids to a client's list, skipping ones already there."""
    wanted = list(dict.fromkeys(booking_ids))
    if not wanted:
        return

    result = await db.execute(
        select(ClientBooking.booking_id).where(
            ClientBooking.client_id == client_id,
            ClientBooking.booking_id.in_(wanted),
        )
    )
    present = set(result.scalars().all())
    missing = [bid for bid in wanted if bid not in present]
    if missing:
        await db.execute(
            insert(ClientBooking),
            [{"client_id": client_id, "booking_id": bid} for bid in missing],
        )


async def remove_bookings_from_client(db: AsyncSession, client_id: int, booking_ids: Iterable[int]) -> None:
    """Pull booking ids out of a client's list."""
    ids = list(booking_ids)
    if not ids:
        return
    await db.execute(
        delete(ClientBooking).where(
            ClientBooking.client_id == client_id,
            ClientBooking.booking_id.in_(ids),
        )
    )


async def sync_booking_client(
    db: AsyncSession,
    booking_id: int,
    previous_client_id: int | None,
    new_client_id: int | None,
) -> None:
    """Move a booking between client lists after its client reference changed."""
    if previous_client_id == new_client_id:
        return
    if previous_client_id:
        await remove_bookings_from_client(db, previous_client_id, [booking_id])
    if new_client_id:
        await add_bookings_to_client(db, new_client_id, [booking_id])


async def client_booking_ids(db: AsyncSession, client_ids: Iterable[int]) -> dict[int, list[int]]:
    """Booking lists for several clients, each in the order bookings were added."""
    ids = list(client_ids)
    lists: dict[int, list[int]] = {cid: [] for cid in ids}
    if not ids:
        return lists

    result = await db.execute(
        select(ClientBooking.client_id, ClientBooking.booking_id)
        .where(ClientBooking.client_id.in_(ids))
        .order_by(ClientBooking.id)
    )
    for client_id, booking_id in result.all():
        lists[client_id].append(booking_id)
    return lists


async def detach_client(db: AsyncSession, client_id: int) -> None:
    """Drop every edge to a client that is about to be deleted.

    Its bookings stay, keeping only the free-text client name.
    """
    await db.execute(delete(ClientBooking).where(ClientBooking.client_id == client_id))
    await db.execute(update(Booking).where(Booking.client_id == client_id).values(client_id=None))
