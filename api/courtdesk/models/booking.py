"""Booking model.

A booking holds one court for one hour-long time slot. ``starts_at`` is the
absolute instant (calendar date + slot hour at the business UTC offset);
``time_slot`` keeps the "HH:MM" label, which is also the pricing key.
"""

import enum
from datetime import datetime

from sqlalchemy import Boolean, Enum, Float, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from courtdesk.models.base import Base, TimestampMixin, UTCDateTime


class AttendanceStatus(enum.StrEnum):
    ARRIVED = "arrived"
    NOT_ARRIVED = "not-arrived"


class Booking(TimestampMixin, Base):
    __tablename__ = "bookings"

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False)
    court_id: Mapped[int] = mapped_column(ForeignKey("courts.id", ondelete="CASCADE"), nullable=False)

    # When
    starts_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    time_slot: Mapped[str] = mapped_column(String(5), nullable=False)

    # Who
    client_id: Mapped[int | None] = mapped_column(ForeignKey("clients.id", ondelete="SET NULL"))
    client_name: Mapped[str] = mapped_column(String(200), nullable=False)

    # Money and attendance
    deposit: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    deposit_note: Mapped[str] = mapped_column(Text, default="", nullable=False)
    status: Mapped[AttendanceStatus | None] = mapped_column(
        Enum(AttendanceStatus, name="attendance_status", values_callable=lambda e: [x.value for x in e]),
    )

    # Weekly series
    is_permanent: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    permanent_end_date: Mapped[datetime | None] = mapped_column(UTCDateTime)

    # Relationships
    court: Mapped["Court"] = relationship(lazy="raise")
    user: Mapped["User"] = relationship(lazy="raise")

    __table_args__ = (
        # Grid lookups and the permanence collision check
        Index("ix_bookings_court_starts", "court_id", "starts_at"),
        # Series lookups
        Index("ix_bookings_series", "court_id", "time_slot", "client_name", "is_permanent"),
        Index("ix_bookings_client", "client_id"),
    )

    def __repr__(self) -> str:
        return f"<Booking {self.starts_at.isoformat()} {self.time_slot} court={self.court_id}>"


# Import for type hints
from courtdesk.models.court import Court  # noqa: E402
from courtdesk.models.user import User  # noqa: E402
