"""Pydantic schemas for API serialisation."""

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field, computed_field, field_validator

from courtdesk.models.booking import AttendanceStatus
from courtdesk.models.user import UserRole
from courtdesk.services.booking_rules import LOCAL_TZ

# --- Auth ---


class TokenResponse(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class RegisterRequest(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(min_length=6)


class RefreshRequest(BaseModel):
    refresh_token: str


class ReAuthRequest(BaseModel):
    password: str


# --- User ---


class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str
    role: UserRole
    is_active: bool
    created_at: datetime


class UserCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(min_length=6)
    role: UserRole = UserRole.USER


class UserUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=100)
    email: EmailStr | None = None
    password: str | None = Field(default=None, min_length=6)
    role: UserRole | None = None
    is_active: bool | None = None


# --- Court ---


class PricingIn(BaseModel):
    six_am: float | None = None
    seven_to_fifteen: float | None = None
    sixteen_to_twenty_one: float | None = None
    twenty_two: float | None = None
    twenty_three: float | None = None


class PricingOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    six_am: float
    seven_to_fifteen: float
    sixteen_to_twenty_one: float
    twenty_two: float
    twenty_three: float


class CourtCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    color: str = Field(min_length=1, max_length=30)
    create_original: bool = False
    pricing: PricingIn | None = None


class CourtUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=100)
    color: str | None = Field(default=None, min_length=1, max_length=30)
    pricing: PricingIn | None = None


class CourtOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    color: str
    is_original: bool
    pricing: PricingOut


# --- Client ---


class ClientCreate(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    phone: str | None = Field(default=None, max_length=50)
    email: EmailStr | None = None

    @field_validator("name", "phone")
    @classmethod
    def _strip(cls, v: str | None) -> str | None:
        return v.strip() if v is not None else v


class ClientUpdate(ClientCreate):
    name: str | None = Field(default=None, min_length=1, max_length=200)


class ClientOut(BaseModel):
    id: int
    name: str
    phone: str | None
    email: str | None
    bookings: list[int]


class ClientSummaryOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    client: ClientOut
    total_bookings: int
    arrived_bookings: int
    arrival_rate: float
    total_deposit: float
    avg_deposit: float
    last_booking: datetime | None


# --- Booking ---


class BookingCreate(BaseModel):
    court_id: int
    booking_date: date
    time_slot: str  # "HH:MM"
    client_name: str = Field(min_length=1, max_length=200)
    client_id: int | None = None
    deposit: float = Field(default=0, ge=0)
    deposit_note: str = ""
    status: AttendanceStatus | None = None


class BookingUpdate(BaseModel):
    client_name: str | None = Field(default=None, min_length=1, max_length=200)
    client_id: int | None = None
    deposit: float | None = Field(default=None, ge=0)
    deposit_note: str | None = None
    status: AttendanceStatus | None = None


class BookingOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    court_id: int
    user_id: int
    starts_at: datetime
    time_slot: str
    client_id: int | None
    client_name: str
    deposit: float
    deposit_note: str
    status: AttendanceStatus | None
    is_permanent: bool
    permanent_end_date: datetime | None
    created_at: datetime
    updated_at: datetime

    @field_validator("starts_at", "permanent_end_date", "created_at", "updated_at")
    @classmethod
    def _local_time(cls, v: datetime | None) -> datetime | None:
        return v.astimezone(LOCAL_TZ) if v is not None else v

    @computed_field
    @property
    def booking_date(self) -> date:
        return self.starts_at.date()


class PermanenceRequest(BaseModel):
    is_permanent: bool


class PermanenceOut(BaseModel):
    message: str
    booking: BookingOut
    created: int = 0
    kept: int = 0
    removed: int = 0


# --- Statistics ---


class ClientPeriodStatsOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    client_id: int
    name: str
    email: str | None
    phone: str | None
    bookings_count: int
    attendance_count: int
    attendance_rate: float
    total_calculated_income: float


class IncomeByDateOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    date: date
    income: float
    bookings: int


class IncomeByCourtOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    court_id: int
    court_name: str
    income: float
    bookings: int


class IncomeByScheduleOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    hour: int
    income: float
    bookings: int


class FinancialStatsOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    total_income: float
    by_period: list[IncomeByDateOut]
    by_court: list[IncomeByCourtOut]
    by_schedule: list[IncomeByScheduleOut]


# --- Audit log ---


class AuditLogOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user: str
    action: str
    created_at: datetime
