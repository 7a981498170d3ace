"""Client model and the client -> booking back-reference set.

``Booking.client_id`` is the forward edge. ``ClientBooking`` rows are the
reverse edge: the ordered, duplicate-free list of bookings a client holds.
Both sides are written together by services.client_links.
"""

from sqlalchemy import ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from courtdesk.models.base import Base, TimestampMixin


class Client(TimestampMixin, Base):
    __tablename__ = "clients"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(200), unique=True, nullable=False)
    phone: Mapped[str | None] = mapped_column(String(50), unique=True)
    email: Mapped[str | None] = mapped_column(String(254), unique=True)

    def __repr__(self) -> str:
        return f"<Client {self.name}>"


class ClientBooking(Base):
    __tablename__ = "client_bookings"

    id: Mapped[int] = mapped_column(primary_key=True)
    client_id: Mapped[int] = mapped_column(ForeignKey("clients.id", ondelete="CASCADE"), nullable=False)
    booking_id: Mapped[int] = mapped_column(ForeignKey("bookings.id", ondelete="CASCADE"), nullable=False)

    __table_args__ = (Index("ix_client_bookings_pair", "client_id", "booking_id", unique=True),)

    def __repr__(self) -> str:
        return f"<ClientBooking client={self.client_id} booking={self.booking_id}>"
