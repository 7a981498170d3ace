"""Attendance and income statistics.

Income is never stored: it is recomputed from each booking's time slot and
its court's current rate table. Only bookings marked as arrived whose start
has already passed count as income; a future booking marked arrived (e.g.
by a data fix) counts as attended but earns nothing yet.
"""

import calendar
import dataclasses
from datetime import date, datetime, time, timedelta

from sqlalchemy import case, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from courtdesk.models.booking import AttendanceStatus, Booking
from courtdesk.models.client import Client
from courtdesk.models.court import Court
from courtdesk.services.booking_rules import LOCAL_TZ, local_date, local_now
from courtdesk.services.pricing import booking_price, slot_hour

PERIOD_TYPES = ("week", "month", "year")


@dataclasses.dataclass
class ClientPeriodStats:
    client_id: int
    name: str
    email: str | None
    phone: str | None
    bookings_count: int
    attendance_count: int
    attendance_rate: float
    total_calculated_income: float


@dataclasses.dataclass
class ClientSummary:
    total_bookings: int
    arrived_bookings: int
    arrival_rate: float
    total_deposit: float
    avg_deposit: float
    last_booking: datetime | None


@dataclasses.dataclass
class IncomeByDate:
    date: date
    income: float = 0.0
    bookings: int = 0


@dataclasses.dataclass
class IncomeByCourt:
    court_id: int
    court_name: str
    income: float = 0.0
    bookings: int = 0


@dataclasses.dataclass
class IncomeBySchedule:
    hour: int
    income: float = 0.0
    bookings: int = 0


@dataclasses.dataclass
class FinancialSummary:
    total_income: float
    by_period: list[IncomeByDate]
    by_court: list[IncomeByCourt]
    by_schedule: list[IncomeBySchedule]


def _day_span(first: date, last: date) -> tuple[datetime, datetime]:
    return (
        datetime.combine(first, time.min, tzinfo=LOCAL_TZ),
        datetime.combine(last, time.max, tzinfo=LOCAL_TZ),
    )


def period_bounds(period_type: str | None, now: datetime | None = None) -> tuple[datetime, datetime]:
    """Reporting window for a period type, in local time.

    week:  Monday 00:00 to Sunday 23:59:59.999999 of the current week
    month: first to last day of the current month
    year:  1 January to 31 December of the current year
    other: the last 7 days up to the end of today
    """
    today = (now or local_now()).astimezone(LOCAL_TZ).date()

    if period_type == "week":
        monday = today - timedelta(days=today.weekday())
        return _day_span(monday, monday + timedelta(days=6))
    if period_type == "month":
        last_day = calendar.monthrange(today.year, today.month)[1]
        return _day_span(today.replace(day=1), today.replace(day=last_day))
    if period_type == "year":
        return _day_span(date(today.year, 1, 1), date(today.year, 12, 31))
    return _day_span(today - timedelta(days=7), today)


def _is_income(booking: Booking, now: datetime) -> bool:
    return booking.status == AttendanceStatus.ARRIVED and booking.starts_at < now


async def client_period_stats(
    db: AsyncSession,
    period_type: str | None,
    now: datetime | None = None,
) -> list[ClientPeriodStats]:
    """Bookings, attendance and income per client over a reporting period.

    A booking belongs to a client when it references the client or, for
    bookings made before the client existed, carries the client's name.
    """
    now = now or local_now()
    start, end = period_bounds(period_type, now)

    clients = (await db.execute(select(Client).order_by(Client.name))).scalars().all()
    rows = (
        await db.execute(
            select(Booking, Court)
            .join(Court, Booking.court_id == Court.id)
            .where(Booking.starts_at >= start, Booking.starts_at <= end)
        )
    ).all()

    stats: list[ClientPeriodStats] = []
    for client in clients:
        mine = [(b, c) for b, c in rows if b.client_id == client.id or b.client_name == client.name]
        attended = [(b, c) for b, c in mine if b.status == AttendanceStatus.ARRIVED]
        income = sum(booking_price(b, c) for b, c in attended if b.starts_at < now)

        stats.append(
            ClientPeriodStats(
                client_id=client.id,
                name=client.name,
                email=client.email,
                phone=client.phone,
                bookings_count=len(mine),
                attendance_count=len(attended),
                attendance_rate=len(attended) / len(mine) if mine else 0.0,
                total_calculated_income=income,
            )
        )
    return stats


async def income_bookings(
    db: AsyncSession,
    period_type: str | None,
    now: datetime | None = None,
) -> list[tuple[Booking, Court]]:
    """Attended, already elapsed bookings in the period with their courts, oldest first."""
    now = now or local_now()
    start, end = period_bounds(period_type, now)

    result = await db.execute(
        select(Booking, Court)
        .join(Court, Booking.court_id == Court.id)
        .where(
            Booking.starts_at >= start,
            Booking.starts_at <= end,
            Booking.status == AttendanceStatus.ARRIVED,
        )
        .order_by(Booking.starts_at, Booking.id)
    )
    return [(b, c) for b, c in result.all() if _is_income(b, now)]


def summarise_income(rows: list[tuple[Booking, Court]]) -> FinancialSummary:
    """Group priced bookings by local calendar date, by court and by slot hour."""
    by_date: dict[date, IncomeByDate] = {}
    by_court: dict[int, IncomeByCourt] = {}
    by_hour: dict[int, IncomeBySchedule] = {}
    total = 0.0

    for booking, court in rows:
        price = booking_price(booking, court)
        total += price

        day = local_date(booking.starts_at)
        hour = slot_hour(booking.time_slot)
        for bucket in (
            by_date.setdefault(day, IncomeByDate(date=day)),
            by_court.setdefault(court.id, IncomeByCourt(court_id=court.id, court_name=court.name)),
            by_hour.setdefault(hour, IncomeBySchedule(hour=hour)),
        ):
            bucket.income += price
            bucket.bookings += 1

    return FinancialSummary(
        total_income=total,
        by_period=sorted(by_date.values(), key=lambda e: e.date),
        by_court=list(by_court.values()),
        by_schedule=sorted(by_hour.values(), key=lambda e: e.hour),
    )


async def financial_stats(
    db: AsyncSession,
    period_type: str | None,
    now: datetime | None = None,
) -> FinancialSummary:
    return summarise_income(await income_bookings(db, period_type, now))


async def client_summary(db: AsyncSession, client: Client) -> ClientSummary:
    """All-time booking aggregate for one client, computed in the database."""
    result = await db.execute(
        select(
            func.count(Booking.id),
            func.coalesce(func.sum(case((Booking.status == AttendanceStatus.ARRIVED, 1), else_=0)), 0),
            func.coalesce(func.sum(Booking.deposit), 0),
            func.coalesce(func.avg(Booking.deposit), 0),
            func.max(Booking.starts_at),
        ).where(or_(Booking.client_id == client.id, Booking.client_name == client.name))
    )
    total, arrived, total_deposit, avg_deposit, last_booking = result.one()

    return ClientSummary(
        total_bookings=total,
        arrived_bookings=arrived,
        arrival_rate=arrived / total if total else 0.0,
        total_deposit=float(total_deposit),
        avg_deposit=float(avg_deposit),
        last_booking=last_booking,
    )
