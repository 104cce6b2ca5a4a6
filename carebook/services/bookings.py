"""Booking lifecycle: create, list, change status, cancel, record payment.

Routes stay thin; everything that decides what may happen to a booking lives
here. Payment is recorded through mark_paid() only, whichever path (redirect
verification or Stripe webhook) reports it first.
"""

import logging
from datetime import UTC, datetime

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from carebook.core.config import settings
from carebook.models.booking import Booking, BookingStatus, DurationUnit, PaymentSource, PaymentStatus
from carebook.models.user import User
from carebook.services.booking_rules import (
    LOCATION_FIELDS,
    calc_total_cost,
    check_cancellable,
    find_duplicate_booking,
    is_transition_allowed,
    local_day,
    validate_booking_request,
)
from carebook.services.catalog import ServiceCatalog
from carebook.services.email import notify_booking_created
from carebook.services.errors import (
    BookingViolation,
    DuplicateBooking,
    Forbidden,
    InvalidInput,
    InvalidState,
    NotFound,
    Unauthorized,
    bounded,
)

logger = logging.getLogger(__name__)


async def create_booking(
    db: AsyncSession,
    user: User | None,
    catalog: ServiceCatalog,
    service_id: str,
    duration_value: int,
    duration_unit: str,
    location: dict,
) -> Booking:
    """Create a Pending/Unpaid booking and send a best-effort confirmation email.

    The booking is committed before the email goes out, so a slow or failing
    SMTP server never undoes it.
    """
    if user is None:
        raise Unauthorized()
    user_id = user.id

    service = await bounded(catalog.get(service_id), settings.catalog_timeout_seconds, "Service catalog")

    violations = validate_booking_request(duration_value, duration_unit, location)
    if violations:
        raise InvalidInput(violations=violations)

    now = datetime.now(UTC)
    existing = await find_duplicate_booking(db, user_id, service.service_id, now)
    if existing is not None:
        logger.info(
            "Duplicate booking rejected: user=%s service=%s existing=%s", user_id, service.service_id, existing.id
        )
        raise DuplicateBooking()

    unit = DurationUnit(duration_unit)
    booking = Booking(
        user_id=user_id,
        service_id=service.service_id,
        service_name=service.name,
        duration_value=duration_value,
        duration_unit=unit,
        **{f"location_{field}": str(location[field]).strip() for field in LOCATION_FIELDS},
        total_cost=calc_total_cost(service, duration_value, unit),
        status=BookingStatus.PENDING,
        payment_status=PaymentStatus.UNPAID,
        booking_day=local_day(now),
        created_at=now,
    )
    db.add(booking)

    try:
        await db.flush()
    except IntegrityError:
        # A concurrent request for the same user, service and day got there first
        await db.rollback()
        logger.info("Duplicate booking rejected by index: user=%s service=%s", user_id, service.service_id)
        raise DuplicateBooking() from None

    await db.commit()
    logger.info(
        "Booking %s created: user=%s service=%s total_cost=%s", booking.id, user_id, booking.service_id, booking.total_cost
    )

    await notify_booking_created(user, booking)
    return booking


async def list_bookings(db: AsyncSession, user_id: int) -> list[Booking]:
    """A user's bookings, most recently created first."""
    result = await db.execute(
        select(Booking).where(Booking.user_id == user_id).order_by(Booking.created_at.desc(), Booking.id.desc())
    )
    return list(result.scalars().all())


async def list_all_bookings(db: AsyncSession) -> list[Booking]:
    """Every booking with its owner loaded, most recently created first."""
    result = await db.execute(
        select(Booking).options(selectinload(Booking.user)).order_by(Booking.created_at.desc(), Booking.id.desc())
    )
    return list(result.scalars().all())


async def load_booking(db: AsyncSession, booking_id: int, refresh: bool = False) -> Booking:
    """Fetch a booking by id. ``refresh`` overwrites any copy already in the session."""
    stmt = select(Booking).where(Booking.id == booking_id)
    if refresh:
        stmt = stmt.execution_options(populate_existing=True)
    result = await db.execute(stmt)
    booking = result.scalar_one_or_none()
    if booking is None:
        raise NotFound("Booking not found")
    return booking


def _ensure_owner(booking: Booking, caller: User | None, allow_admin: bool = True) -> None:
    if caller is None:
        raise Unauthorized()
    if booking.user_id == caller.id:
        return
    if allow_admin and caller.is_admin:
        return
    raise Forbidden()


async def get_booking(db: AsyncSession, booking_id: int, caller: User | None) -> Booking:
    booking = await load_booking(db, booking_id)
    _ensure_owner(booking, caller)
    return booking


async def get_owned_booking(db: AsyncSession, booking_id: int, caller: User | None) -> Booking:
    """Load a booking only its owner may act on (admins included in the refusal)."""
    booking = await load_booking(db, booking_id)
    _ensure_owner(booking, caller, allow_admin=False)
    return booking


def parse_status(value: str) -> BookingStatus:
    try:
        return BookingStatus(value)
    except ValueError:
        allowed = ", ".join(s.value for s in BookingStatus)
        raise InvalidInput(
            violations=[BookingViolation("status", f"Invalid status {value!r}. Choose from: {allowed}.")]
        ) from None


async def update_status(db: AsyncSession, booking_id: int, caller: User | None, new_status: str) -> Booking:
    """Set any status on a booking the caller owns (or any booking, for admins).

    Cost and payment fields are never touched.
    """
    requested = parse_status(new_status)
    booking = await load_booking(db, booking_id)
    _ensure_owner(booking, caller)

    if not is_transition_allowed(booking.status, requested):
        raise InvalidState(f"Cannot move a {booking.status.value} booking to {requested.value}")
    if booking.status == requested:
        return booking

    previous = booking.status
    booking.status = requested
    try:
        await db.flush()
    except IntegrityError:
        # Re-activating a cancelled booking collided with another active one that day
        await db.rollback()
        raise DuplicateBooking("Another active booking for this service already exists on that day") from None

    await db.commit()
    logger.info("Booking %s status %s -> %s by user %s", booking_id, previous.value, requested.value, caller.id)
    return booking


async def cancel_booking(db: AsyncSession, booking_id: int, caller: User | None) -> Booking:
    """Cancel a Pending or Confirmed booking. Payment status is left as it is."""
    booking = await load_booking(db, booking_id)
    _ensure_owner(booking, caller)

    violation = check_cancellable(booking)
    if violation:
        raise InvalidState(violation.message)

    booking.status = BookingStatus.CANCELLED
    await db.commit()
    logger.info("Booking %s cancelled by user %s", booking_id, caller.id)
    return booking


async def mark_paid(
    db: AsyncSession, booking_id: int, session_ref: str, source: PaymentSource
) -> tuple[Booking, bool]:
    """Record payment for a booking exactly once.

    Returns (booking, recorded). A booking that is already paid is returned
    unchanged with recorded=False. The paid flag is flipped by a single
    conditional UPDATE, so when a redirect verification races a webhook for the
    same booking only one of them matches the Unpaid row.
    """
    now = datetime.now(UTC)
    result = await db.execute(
        update(Booking)
        .where(
            Booking.id == booking_id,
            Booking.payment_status == PaymentStatus.UNPAID,
            Booking.status != BookingStatus.CANCELLED,
        )
        .values(
            payment_status=PaymentStatus.PAID,
            paid_at=now,
            stripe_session_id=session_ref,
            payment_source=source,
            updated_at=now,
        )
        .execution_options(synchronize_session=False)
    )
    recorded = result.rowcount == 1
    await db.commit()

    booking = await load_booking(db, booking_id, refresh=True)
    if recorded:
        logger.info("Payment recorded for booking %s via %s (session %s)", booking_id, source.value, session_ref)
        return booking, True

    if booking.payment_status == PaymentStatus.PAID:
        logger.info(
            "Booking %s already paid via %s; ignoring %s confirmation for session %s",
            booking_id,
            booking.payment_source.value if booking.payment_source else "unknown",
            source.value,
            session_ref,
        )
        return booking, False

    raise InvalidState("A cancelled booking cannot be paid")
