"""All models imported here so Base.metadata sees every table."""

from courtdesk.models.audit import AuditLog
from courtdesk.models.base import Base
from courtdesk.models.booking import AttendanceStatus, Booking
from courtdesk.models.client import Client, ClientBooking
from courtdesk.models.court import PRICING_FIELDS, Court, Pricing
from courtdesk.models.user import User, UserRole

__all__ = [
    "Base",
    "User",
    "UserRole",
    "Court",
    "Pricing",
    "PRICING_FIELDS",
    "Client",
    "ClientBooking",
    "Booking",
    "AttendanceStatus",
    "AuditLog",
]
