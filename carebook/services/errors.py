"""Domain errors raised by the booking and payment services.

Every error knows its HTTP status and a stable machine-readable code; the
application renders them as ``{"error": message, "code": code}``.
"""

import asyncio
from collections.abc import Awaitable
from typing import TypeVar

T = TypeVar("T")


class BookingViolation:
    """One failed booking rule."""

    def __init__(self, rule: str, message: str):
        self.rule = rule
        self.message = message

    def as_dict(self) -> dict:
        return {"rule": self.rule, "message": self.message}

    def __repr__(self) -> str:
        return f"<BookingViolation {self.rule}>"


class BookingError(Exception):
    status_code = 500
    code = "error"
    default_message = "Something went wrong"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def as_dict(self) -> dict:
        return {"error": self.message, "code": self.code}


class Unauthorized(BookingError):
    status_code = 401
    code = "unauthorized"
    default_message = "Unauthorized. Please login."


class Forbidden(BookingError):
    status_code = 403
    code = "forbidden"
    default_message = "You are not allowed to access this booking"


class InvalidInput(BookingError):
    status_code = 400
    code = "invalid_input"
    default_message = "Invalid input"

    def __init__(self, message: str | None = None, violations: list[BookingViolation] | None = None):
        self.violations = violations or []
        if message is None and self.violations:
            message = " ".join(v.message for v in self.violations)
        super().__init__(message)

    def as_dict(self) -> dict:
        body = super().as_dict()
        if self.violations:
            body["violations"] = [v.as_dict() for v in self.violations]
        return body


class NotFound(BookingError):
    status_code = 404
    code = "not_found"
    default_message = "Not found"


class DuplicateBooking(BookingError):
    status_code = 409
    code = "duplicate_booking"
    default_message = "You already have a booking for this service today"


class InvalidState(BookingError):
    status_code = 409
    code = "invalid_state"
    default_message = "This booking cannot be changed in its current state"


class AlreadyPaid(BookingError):
    status_code = 409
    code = "already_paid"
    default_message = "Booking already paid"


class PaymentIncomplete(BookingError):
    status_code = 402
    code = "payment_incomplete"
    default_message = "Payment not completed yet. Please try again shortly."


class UpstreamFailure(BookingError):
    status_code = 502
    code = "upstream_failure"
    default_message = "An upstream service is unavailable"


async def bounded(awaitable: Awaitable[T], timeout: float, upstream: str) -> T:
    """Await an external call, failing with UpstreamFailure past ``timeout`` seconds."""
    try:
        return await asyncio.wait_for(awaitable, timeout)
    except TimeoutError:
        raise UpstreamFailure(f"{upstream} did not respond in time") from None
