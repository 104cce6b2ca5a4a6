"""Booking rules enforcement.

All booking validation logic lives here, separate from the route handlers.
Each rule returns a BookingViolation or None if the rule passes.
validate_booking_request() runs the input rules and collects violations.
"""

from datetime import UTC, date, datetime, time, timedelta
from zoneinfo import ZoneInfo

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from carebook.core.config import settings
from carebook.models.booking import Booking, BookingStatus, DurationUnit
from carebook.services.catalog import CatalogService
from carebook.services.errors import BookingViolation

LOCATION_FIELDS = ("division", "district", "city", "area", "address")

# Status changes an authorised caller may make. Any status may move to any
# other; restrict an entry here to forbid a transition.
STATUS_TRANSITIONS: dict[BookingStatus, frozenset[BookingStatus]] = {
    current: frozenset(BookingStatus) for current in BookingStatus
}

# Statuses an owner may cancel from
CANCELLABLE_STATUSES = frozenset({BookingStatus.PENDING, BookingStatus.CONFIRMED})


def local_timezone() -> ZoneInfo:
    return ZoneInfo(settings.local_timezone)


def local_day(moment: datetime) -> date:
    """Calendar date of ``moment`` on the server's local clock."""
    return moment.astimezone(local_timezone()).date()


def local_day_window(moment: datetime) -> tuple[datetime, datetime]:
    """Half-open [start of day, start of next day) around ``moment``, returned in UTC."""
    tz = local_timezone()
    day = local_day(moment)
    start = datetime.combine(day, time.min, tzinfo=tz)
    end = datetime.combine(day + timedelta(days=1), time.min, tzinfo=tz)
    return start.astimezone(UTC), end.astimezone(UTC)


def validate_booking_request(duration_value: int, duration_unit: str, location: dict) -> list[BookingViolation]:
    """Run all input rules and return a list of violations (empty = valid)."""
    violations: list[BookingViolation] = []

    v = check_duration(duration_value, duration_unit)
    if v:
        violations.append(v)

    v = check_location(location)
    if v:
        violations.append(v)

    return violations


def check_duration(value: int, unit: str) -> BookingViolation | None:
    """Duration must be a positive whole number of hours or days."""
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        return BookingViolation("duration_value", "Duration must be a whole number of at least 1.")
    if unit not in {u.value for u in DurationUnit}:
        return BookingViolation(
            "duration_unit",
            f"Duration unit must be one of: {', '.join(u.value for u in DurationUnit)}.",
        )
    return None


def check_location(location: dict) -> BookingViolation | None:
    """Every location field is required."""
    missing = [f for f in LOCATION_FIELDS if not str(location.get(f) or "").strip()]
    if missing:
        return BookingViolation("location", f"Location is incomplete. Missing: {', '.join(missing)}.")
    return None


def calc_total_cost(service: CatalogService, duration_value: int, duration_unit: DurationUnit) -> int:
    """Cost = duration x the service's hourly or daily rate."""
    return duration_value * service.rate_for(duration_unit)


async def find_duplicate_booking(
    db: AsyncSession, user_id: int, service_id: str, now: datetime
) -> Booking | None:
    """An active booking by this user for this service created today, if any."""
    day_start, day_end = local_day_window(now)
    result = await db.execute(
        select(Booking)
        .where(
            Booking.user_id == user_id,
            Booking.service_id == service_id,
            Booking.created_at >= day_start,
            Booking.created_at < day_end,
            Booking.status != BookingStatus.CANCELLED,
        )
        .limit(1)
    )
    return result.scalar_one_or_none()


def is_transition_allowed(current: BookingStatus, requested: BookingStatus) -> bool:
    return requested in STATUS_TRANSITIONS[current]


def check_cancellable(booking: Booking) -> BookingViolation | None:
    """Owners can only cancel bookings that haven't completed or been cancelled."""
    if booking.status not in CANCELLABLE_STATUSES:
        return BookingViolation(
            "not_cancellable",
            f"A {booking.status.value.lower()} booking cannot be cancelled.",
        )
    return None
