"""Booking routes: create, list by court or date range, update, delete, permanence."""

from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from courtdesk.core.database import get_db
from courtdesk.core.dependencies import get_current_user, require_admin
from courtdesk.models.booking import Booking
from courtdesk.models.client import Client
from courtdesk.models.court import Court
from courtdesk.models.user import User
from courtdesk.schemas import BookingCreate, BookingOut, BookingUpdate, PermanenceOut, PermanenceRequest
from courtdesk.services.audit import record_action
from courtdesk.services.booking_rules import BookingViolation, combine_slot, local_day_bounds, validate_booking
from courtdesk.services.client_links import (
    add_bookings_to_client,
    remove_bookings_from_client,
    resolve_client_id,
    sync_booking_client,
)
from courtdesk.services.permanence import activate_permanence, deactivate_permanence

router = APIRouter(prefix="/bookings", tags=["bookings"])


def _rejected(violations: list[BookingViolation]) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail=[{"rule": v.rule, "message": v.message} for v in violations],
    )


async def _get_court(db: AsyncSession, court_id: int) -> Court:
    court = await db.get(Court, court_id)
    if court is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Court not found")
    return court


async def _get_client(db: AsyncSession, client_id: int) -> Client:
    client = await db.get(Client, client_id)
    if client is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Client not found")
    return client


async def _get_booking(db: AsyncSession, booking_id: int) -> Booking:
    booking = await db.get(Booking, booking_id)
    if booking is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Booking not found")
    return booking


@router.post("", response_model=BookingOut, status_code=status.HTTP_201_CREATED)
async def create_booking(
    body: BookingCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    try:
        starts_at = combine_slot(body.booking_date, body.time_slot)
    except BookingViolation as v:
        raise _rejected([v]) from None

    violations = validate_booking(starts_at, user.role)
    if violations:
        raise _rejected(violations)

    await _get_court(db, body.court_id)
    if body.client_id:
        await _get_client(db, body.client_id)
    client_id = await resolve_client_id(db, body.client_id, body.client_name)

    booking = Booking(
        user_id=user.id,
        court_id=body.court_id,
        starts_at=starts_at,
        time_slot=body.time_slot,
        client_id=client_id,
        client_name=body.client_name,
        deposit=body.deposit,
        deposit_note=body.deposit_note,
        status=body.status,
    )
    db.add(booking)
    await db.flush()

    if client_id:
        await add_bookings_to_client(db, client_id, [booking.id])

    await record_action(
        db, user.name, f"Created booking for {body.client_name} on {body.booking_date} at {body.time_slot}"
    )
    await db.refresh(booking)
    return booking


@router.get("/court/{court_id}", response_model=list[BookingOut])
async def list_court_bookings(
    court_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    result = await db.execute(
        select(Booking).where(Booking.court_id == court_id).order_by(Booking.starts_at, Booking.id)
    )
    return result.scalars().all()


@router.get("/court/{court_id}/range", response_model=list[BookingOut])
async def list_court_bookings_in_range(
    court_id: int,
    start_date: date = Query(..., description="First day, YYYY-MM-DD"),
    end_date: date = Query(..., description="Last day (inclusive), YYYY-MM-DD"),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Bookings for a court between two local calendar days, both inclusive."""
    await _get_court(db, court_id)
    start, end = local_day_bounds(start_date, end_date)

    result = await db.execute(
        select(Booking)
        .where(Booking.court_id == court_id, Booking.starts_at >= start, Booking.starts_at <= end)
        .order_by(Booking.starts_at, Booking.id)
    )
    return result.scalars().all()


@router.put("/{booking_id}", response_model=BookingOut)
async def update_booking(
    booking_id: int,
    body: BookingUpdate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    booking = await _get_booking(db, booking_id)
    previous_client_id = booking.client_id
    explicit_client = await _get_client(db, body.client_id) if body.client_id else None

    # The client is only re-resolved when the request says something about it
    if {"client_id", "client_name"} & body.model_fields_set:
        new_client_id = await resolve_client_id(db, body.client_id, body.client_name)
    else:
        new_client_id = previous_client_id

    if body.client_name:
        booking.client_name = body.client_name
    elif explicit_client is not None:
        booking.client_name = explicit_client.name
    if body.deposit is not None:
        booking.deposit = body.deposit
    if body.deposit_note is not None:
        booking.deposit_note = body.deposit_note
    if body.status:
        booking.status = body.status
    booking.client_id = new_client_id
    await db.flush()

    await sync_booking_client(db, booking.id, previous_client_id, new_client_id)

    await record_action(db, user.name, f"Updated booking {booking.id}")
    await db.refresh(booking)
    return booking


@router.delete("/{booking_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_booking(
    booking_id: int,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    booking = await _get_booking(db, booking_id)

    if booking.client_id:
        await remove_bookings_from_client(db, booking.client_id, [booking.id])

    await db.execute(delete(Booking).where(Booking.id == booking.id))
    await record_action(db, admin.name, f"Deleted booking {booking_id}")


@router.put("/{booking_id}/permanent", response_model=PermanenceOut)
async def set_permanence(
    booking_id: int,
    body: PermanenceRequest,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Start a weekly series from this booking, or collapse the series it belongs to."""
    booking = await _get_booking(db, booking_id)

    if body.is_permanent:
        created = await activate_permanence(db, booking)
        await db.flush()
        await record_action(db, admin.name, f"Made booking {booking.id} permanent")
        await db.refresh(booking)
        return PermanenceOut(
            message="Booking made permanent",
            booking=BookingOut.model_validate(booking),
            created=len(created),
        )

    collapse = await deactivate_permanence(db, booking)
    await db.flush()
    await record_action(db, admin.name, f"Removed permanence from booking {booking.id}")
    await db.refresh(booking)
    return PermanenceOut(
        message="Permanence removed",
        booking=BookingOut.model_validate(booking),
        kept=collapse.kept,
        removed=collapse.removed,
    )
