"""Client routes: CRUD, per-client summary and booking history."""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import delete, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from courtdesk.core.database import get_db
from courtdesk.core.dependencies import get_current_user, require_admin
from courtdesk.core.errors import ensure_unique, flush_unique
from courtdesk.models.booking import Booking
from courtdesk.models.client import Client
from courtdesk.models.user import User
from courtdesk.schemas import BookingOut, ClientCreate, ClientOut, ClientSummaryOut, ClientUpdate
from courtdesk.services.audit import record_action
from courtdesk.services.client_links import client_booking_ids, detach_client
from courtdesk.services.stats import client_summary

router = APIRouter(prefix="/clients", tags=["clients"])

UNIQUE_FIELDS = ["name", "phone", "email"]


async def _get_client(db: AsyncSession, client_id: int) -> Client:
    client = await db.get(Client, client_id)
    if client is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Client not found")
    return client


async def _client_out(db: AsyncSession, client: Client) -> ClientOut:
    links = await client_booking_ids(db, [client.id])
    return ClientOut(
        id=client.id,
        name=client.name,
        phone=client.phone,
        email=client.email,
        bookings=links[client.id],
    )


@router.post("", response_model=ClientOut, status_code=status.HTTP_201_CREATED)
async def create_client(
    body: ClientCreate,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    await ensure_unique(db, Client, {"name": body.name, "phone": body.phone, "email": body.email})

    client = Client(name=body.name, phone=body.phone, email=body.email)
    db.add(client)
    await flush_unique(db, UNIQUE_FIELDS)

    await record_action(db, admin.name, f"Created client {client.name}")
    return await _client_out(db, client)


@router.get("", response_model=list[ClientOut])
async def list_clients(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    clients = (await db.execute(select(Client).order_by(Client.name))).scalars().all()
    links = await client_booking_ids(db, [c.id for c in clients])
    return [
        ClientOut(id=c.id, name=c.name, phone=c.phone, email=c.email, bookings=links[c.id])
        for c in clients
    ]


@router.get("/{client_id}", response_model=ClientOut)
async def get_client(
    client_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await _client_out(db, await _get_client(db, client_id))


@router.put("/{client_id}", response_model=ClientOut)
async def update_client(
    client_id: int,
    body: ClientUpdate,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    client = await _get_client(db, client_id)
    changes = body.model_dump(exclude_unset=True)

    await ensure_unique(db, Client, {f: changes.get(f) for f in UNIQUE_FIELDS}, exclude_id=client.id)

    for field, value in changes.items():
        if field == "name" and value is None:
            continue
        setattr(client, field, value)
    await flush_unique(db, UNIQUE_FIELDS)

    await record_action(db, admin.name, f"Updated client {client.name}")
    return await _client_out(db, client)


@router.delete("/{client_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_client(
    client_id: int,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    client = await _get_client(db, client_id)
    name = client.name

    await detach_client(db, client.id)
    await db.execute(delete(Client).where(Client.id == client.id))
    await record_action(db, admin.name, f"Deleted client {name}")


@router.get("/{client_id}/stats", response_model=ClientSummaryOut)
async def get_client_stats(
    client_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """All-time totals for a client, including bookings that only carry the client's name."""
    client = await _get_client(db, client_id)
    summary = await client_summary(db, client)

    return ClientSummaryOut(
        client=await _client_out(db, client),
        total_bookings=summary.total_bookings,
        arrived_bookings=summary.arrived_bookings,
        arrival_rate=summary.arrival_rate,
        total_deposit=summary.total_deposit,
        avg_deposit=summary.avg_deposit,
        last_booking=summary.last_booking,
    )


@router.get("/{client_id}/bookings", response_model=list[BookingOut])
async def list_client_bookings(
    client_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    client = await _get_client(db, client_id)
    result = await db.execute(
        select(Booking)
        .where(or_(Booking.client_id == client.id, Booking.client_name == client.name))
        .order_by(Booking.starts_at.desc(), Booking.id.desc())
    )
    return result.scalars().all()
