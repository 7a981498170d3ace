"""Court model.

A court carries its own rate table: five fixed hour buckets, each a
non-negative price. A court flagged ``is_original`` is the template twin
of a bookable court and never appears in the booking grid.
"""

import dataclasses

from sqlalchemy import Boolean, Float, String
from sqlalchemy.orm import Mapped, composite, mapped_column

from courtdesk.models.base import Base, TimestampMixin


@dataclasses.dataclass
class Pricing:
    six_am: float = 0.0
    seven_to_fifteen: float = 0.0
    sixteen_to_twenty_one: float = 0.0
    twenty_two: float = 0.0
    twenty_three: float = 0.0


PRICING_FIELDS = tuple(f.name for f in dataclasses.fields(Pricing))


class Court(TimestampMixin, Base):
    __tablename__ = "courts"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    color: Mapped[str] = mapped_column(String(30), nullable=False)
    is_original: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    pricing: Mapped[Pricing] = composite(
        mapped_column("price_six_am", Float, default=0.0, nullable=False),
        mapped_column("price_seven_to_fifteen", Float, default=0.0, nullable=False),
        mapped_column("price_sixteen_to_twenty_one", Float, default=0.0, nullable=False),
        mapped_column("price_twenty_two", Float, default=0.0, nullable=False),
        mapped_column("price_twenty_three", Float, default=0.0, nullable=False),
    )

    def __repr__(self) -> str:
        return f"<Court {self.name}{' (template)' if self.is_original else ''}>"
