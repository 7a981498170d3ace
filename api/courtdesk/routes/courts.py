"""Court routes. Writes are admin-only."""

import dataclasses

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from courtdesk.core.database import get_db
from courtdesk.core.dependencies import get_current_user, require_admin
from courtdesk.core.errors import ensure_unique, flush_unique
from courtdesk.models.booking import Booking
from courtdesk.models.client import ClientBooking
from courtdesk.models.court import Court
from courtdesk.models.user import User
from courtdesk.schemas import CourtCreate, CourtOut, CourtUpdate
from courtdesk.services.audit import record_action
from courtdesk.services.pricing import sanitize_pricing

router = APIRouter(prefix="/courts", tags=["courts"])

ORIGINAL_SUFFIX = " (Original)"


async def _get_court(db: AsyncSession, court_id: int) -> Court:
    court = await db.get(Court, court_id)
    if court is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Court not found")
    return court


@router.post("", response_model=CourtOut, status_code=status.HTTP_201_CREATED)
async def create_court(
    body: CourtCreate,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Create a bookable court, optionally with its "(Original)" template twin."""
    pricing = sanitize_pricing(body.pricing.model_dump() if body.pricing else None)

    await ensure_unique(db, Court, {"name": body.name})
    court = Court(name=body.name, color=body.color, is_original=False, pricing=pricing)
    db.add(court)

    if body.create_original:
        original_name = f"{body.name}{ORIGINAL_SUFFIX}"
        await ensure_unique(db, Court, {"name": original_name})
        db.add(Court(name=original_name, color=body.color, is_original=True, pricing=dataclasses.replace(pricing)))

    await flush_unique(db, ["name"])
    await record_action(db, admin.name, f"Created court {court.name}")
    return court


@router.get("", response_model=list[CourtOut])
async def list_courts(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    result = await db.execute(select(Court).where(Court.is_original.is_(False)).order_by(Court.id))
    return result.scalars().all()


@router.get("/originals", response_model=list[CourtOut])
async def list_original_courts(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    result = await db.execute(select(Court).where(Court.is_original.is_(True)).order_by(Court.id))
    return result.scalars().all()


@router.put("/{court_id}", response_model=CourtOut)
async def update_court(
    court_id: int,
    body: CourtUpdate,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    court = await _get_court(db, court_id)

    if body.name and body.name != court.name:
        await ensure_unique(db, Court, {"name": body.name}, exclude_id=court.id)
        court.name = body.name
    if body.color:
        court.color = body.color
    if body.pricing is not None:
        court.pricing = sanitize_pricing(body.pricing.model_dump(), current=court.pricing)

    await flush_unique(db, ["name"])
    await record_action(db, admin.name, f"Updated court {court.name}")
    await db.refresh(court)
    return court


@router.delete("/{court_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_court(
    court_id: int,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Delete a court together with its bookings, unlinking them from their clients."""
    court = await _get_court(db, court_id)
    name = court.name

    court_bookings = select(Booking.id).where(Booking.court_id == court.id)
    await db.execute(delete(ClientBooking).where(ClientBooking.booking_id.in_(court_bookings)))
    await db.execute(delete(Booking).where(Booking.court_id == court.id))
    await db.execute(delete(Court).where(Court.id == court.id))
    await record_action(db, admin.name, f"Deleted court {name}")
