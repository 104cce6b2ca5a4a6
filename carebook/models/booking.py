"""Booking model.

A booking is a user's request for a caregiving service for a duration at a
location. Service name and cost are copied from the catalog when the booking is
created and never recomputed.
"""

import enum
from datetime import date, datetime

from sqlalchemy import Date, Enum, ForeignKey, Index, String, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from carebook.models.base import Base, TimestampMixin, UTCDateTime


class BookingStatus(str, enum.Enum):
    PENDING = "Pending"
    CONFIRMED = "Confirmed"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"


class PaymentStatus(str, enum.Enum):
    UNPAID = "Unpaid"
    PAID = "Paid"


class DurationUnit(str, enum.Enum):
    HOURS = "hours"
    DAYS = "days"


class PaymentSource(str, enum.Enum):
    REDIRECT = "redirect"  # User came back from checkout and asked us to verify
    WEBHOOK = "webhook"  # Stripe told us asynchronously


class Booking(TimestampMixin, Base):
    __tablename__ = "bookings"

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False)

    # Catalog snapshot
    service_id: Mapped[str] = mapped_column(String(100), nullable=False)
    service_name: Mapped[str] = mapped_column(String(200), nullable=False)

    # Duration
    duration_value: Mapped[int] = mapped_column(nullable=False)
    duration_unit: Mapped[DurationUnit] = mapped_column(
        Enum(DurationUnit, name="duration_unit", values_callable=lambda e: [x.value for x in e]),
        nullable=False,
    )

    # Where
    location_division: Mapped[str] = mapped_column(String(100), nullable=False)
    location_district: Mapped[str] = mapped_column(String(100), nullable=False)
    location_city: Mapped[str] = mapped_column(String(100), nullable=False)
    location_area: Mapped[str] = mapped_column(String(200), nullable=False)
    location_address: Mapped[str] = mapped_column(String(500), nullable=False)

    # Whole currency units (BDT)
    total_cost: Mapped[int] = mapped_column(nullable=False)

    # Status
    status: Mapped[BookingStatus] = mapped_column(
        Enum(BookingStatus, name="booking_status", values_callable=lambda e: [x.value for x in e]),
        default=BookingStatus.PENDING,
        nullable=False,
    )

    # Payment
    payment_status: Mapped[PaymentStatus] = mapped_column(
        Enum(PaymentStatus, name="payment_status", values_callable=lambda e: [x.value for x in e]),
        default=PaymentStatus.UNPAID,
        nullable=False,
    )
    paid_at: Mapped[datetime | None] = mapped_column(UTCDateTime)
    stripe_session_id: Mapped[str | None] = mapped_column(String(255))
    payment_source: Mapped[PaymentSource | None] = mapped_column(
        Enum(PaymentSource, name="payment_source", values_callable=lambda e: [x.value for x in e]),
    )

    # Local calendar day of created_at, the duplicate-guard bucket
    booking_day: Mapped[date] = mapped_column(Date, nullable=False)

    # Relationships
    user: Mapped["User"] = relationship()

    __table_args__ = (
        # One active booking per user, service and day. Partial: cancelled rows don't count.
        Index(
            "uq_bookings_user_service_day",
            "user_id",
            "service_id",
            "booking_day",
            unique=True,
            postgresql_where=text("status != 'Cancelled'"),
            sqlite_where=text("status != 'Cancelled'"),
        ),
        # My bookings, newest first
        Index("ix_bookings_user_created", "user_id", "created_at"),
        # Duplicate guard range query
        Index("ix_bookings_user_service_created", "user_id", "service_id", "created_at"),
    )

    @property
    def duration(self) -> dict:
        return {"value": self.duration_value, "unit": self.duration_unit.value}

    @property
    def location(self) -> dict:
        return {
            "division": self.location_division,
            "district": self.location_district,
            "city": self.location_city,
            "area": self.location_area,
            "address": self.location_address,
        }

    @property
    def reference(self) -> str:
        """Short human-facing reference used in emails."""
        return f"CB-{self.id:06d}"

    def __repr__(self) -> str:
        return f"<Booking {self.id} {self.service_id} user={self.user_id} {self.status.value}>"


# Import for type hints
from carebook.models.user import User  # noqa: E402
