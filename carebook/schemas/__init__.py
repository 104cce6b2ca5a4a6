"""Pydantic schemas for API serialisation."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, StrictInt, field_validator

from carebook.core.auth import password_problems
from carebook.models.booking import BookingStatus, PaymentSource, PaymentStatus
from carebook.models.user import UserRole
from carebook.services.catalog import ServiceCategory

# --- Auth ---


class TokenResponse(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class RegisterRequest(BaseModel):
    nid_no: str
    name: str
    email: EmailStr
    contact: str
    password: str

    @field_validator("nid_no", "name", "contact")
    @classmethod
    def _required(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("This field is required")
        return v

    @field_validator("password")
    @classmethod
    def _strong_password(cls, v: str) -> str:
        problems = password_problems(v)
        if problems:
            raise ValueError("; ".join(problems))
        return v


class RefreshRequest(BaseModel):
    refresh_token: str


# --- User ---


class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    nid_no: str
    name: str
    email: str
    contact: str
    role: UserRole


class ProfileUpdate(BaseModel):
    name: str | None = None
    contact: str | None = None


class BookingOwnerOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str
    contact: str


# --- Catalog ---


class ServiceOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    service_id: str
    name: str
    short_description: str
    category: ServiceCategory
    charge_per_hour: int
    charge_per_day: int


# --- Booking ---


class Duration(BaseModel):
    value: StrictInt
    unit: str


class Location(BaseModel):
    division: str
    district: str
    city: str
    area: str
    address: str


class BookingCreate(BaseModel):
    service_id: str
    duration: Duration
    location: Location


class BookingStatusUpdate(BaseModel):
    status: str


class BookingOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    service_id: str
    service_name: str
    duration: Duration
    location: Location
    total_cost: int
    status: BookingStatus
    payment_status: PaymentStatus
    paid_at: datetime | None
    created_at: datetime


class AdminBookingOut(BookingOut):
    user: BookingOwnerOut


# --- Payment ---


class CheckoutRequest(BaseModel):
    booking_id: int


class CheckoutOut(BaseModel):
    url: str
    session_id: str


class PaymentVerifyRequest(BaseModel):
    session_id: str
    booking_id: int


class PaymentOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    service_name: str
    total_cost: int
    status: BookingStatus
    payment_status: PaymentStatus
    paid_at: datetime | None
    payment_source: PaymentSource | None
