"""All models imported here so Base.metadata knows every table."""

from carebook.models.base import Base
from carebook.models.booking import Booking, BookingStatus, DurationUnit, PaymentSource, PaymentStatus
from carebook.models.user import User, UserRole

__all__ = [
    "Base",
    "User",
    "UserRole",
    "Booking",
    "BookingStatus",
    "DurationUnit",
    "PaymentSource",
    "PaymentStatus",
]
