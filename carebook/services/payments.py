"""Payment flow: start a Stripe Checkout, verify it, and consume Stripe webhooks.

Two entry points can report a payment: the user returning from checkout
(verify_payment) and Stripe's webhook (handle_gateway_event). Both end in
bookings.mark_paid(), which records the payment once; the slower path is a no-op.
"""

import logging
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from carebook.models.booking import Booking, BookingStatus, PaymentSource, PaymentStatus
from carebook.models.user import User
from carebook.services.bookings import get_owned_booking, load_booking, mark_paid
from carebook.services.email import notify_payment_received
from carebook.services.errors import (
    AlreadyPaid,
    InvalidInput,
    InvalidState,
    NotFound,
    PaymentIncomplete,
)
from carebook.services.stripe_service import (
    create_checkout_session,
    retrieve_checkout_session,
    to_minor_units,
)

logger = logging.getLogger(__name__)

# Stripe events that mean a Checkout Session has been paid
PAYMENT_EVENTS = frozenset({"checkout.session.completed", "checkout.session.async_payment_succeeded"})


def _field(obj: Any, key: str) -> Any:
    """Read a key from a Stripe object (or plain mapping), None when absent."""
    try:
        return obj[key]
    except KeyError:
        return None


def _session_booking_id(session: Any) -> int | None:
    metadata = _field(session, "metadata") or {}
    raw = _field(metadata, "booking_id") or _field(session, "client_reference_id")
    try:
        return int(raw)
    except (TypeError, ValueError):
        return None


def _is_fully_paid(session: Any, booking: Booking) -> bool:
    return (
        _field(session, "payment_status") == "paid"
        and _field(session, "amount_total") == to_minor_units(booking.total_cost)
    )


async def start_checkout(db: AsyncSession, booking_id: int, caller: User | None) -> dict:
    """Open a hosted checkout for the booking's full cost. Nothing changes locally."""
    booking = await get_owned_booking(db, booking_id, caller)
    if booking.payment_status == PaymentStatus.PAID:
        raise AlreadyPaid()
    if booking.status == BookingStatus.CANCELLED:
        raise InvalidState("A cancelled booking cannot be paid")

    session = await create_checkout_session(booking, caller.email)
    logger.info("Checkout session %s started for booking %s", session["id"], booking.id)
    return {"url": session["url"], "session_id": session["id"]}


async def verify_payment(db: AsyncSession, session_id: str, booking_id: int, caller: User | None) -> Booking:
    """Confirm a checkout the caller has just returned from.

    Safe to retry: a booking that is already paid is returned as it is.
    """
    booking = await get_owned_booking(db, booking_id, caller)
    if booking.payment_status == PaymentStatus.PAID:
        logger.info("Booking %s already paid; verification for session %s is a no-op", booking.id, session_id)
        return booking

    session = await retrieve_checkout_session(session_id)
    if _session_booking_id(session) != booking.id:
        raise InvalidInput("This checkout session does not belong to this booking")
    if not _is_fully_paid(session, booking):
        logger.info(
            "Session %s for booking %s not fully paid (status=%s, amount=%s)",
            session_id,
            booking.id,
            _field(session, "payment_status"),
            _field(session, "amount_total"),
        )
        raise PaymentIncomplete()

    booking, recorded = await mark_paid(db, booking.id, session_id, PaymentSource.REDIRECT)
    if recorded:
        await notify_payment_received(caller, booking)
    return booking


async def handle_gateway_event(db: AsyncSession, event: Any) -> None:
    """Apply a verified Stripe event. Never raises for bookings it can't act on."""
    event_type = event["type"]
    if event_type not in PAYMENT_EVENTS:
        logger.debug("Ignoring Stripe event %s", event_type)
        return

    session = event["data"]["object"]
    booking_id = _session_booking_id(session)
    if booking_id is None:
        logger.warning("Stripe session %s has no booking reference; ignoring", _field(session, "id"))
        return

    if _field(session, "payment_status") != "paid":
        logger.info(
            "Stripe session %s completed but not paid yet (%s)", _field(session, "id"), _field(session, "payment_status")
        )
        return

    try:
        booking = await load_booking(db, booking_id)
    except NotFound:
        logger.warning("Stripe session %s references unknown booking %s", _field(session, "id"), booking_id)
        return

    if not _is_fully_paid(session, booking):
        logger.warning(
            "Stripe session %s paid %s but booking %s costs %s; not recording",
            _field(session, "id"),
            _field(session, "amount_total"),
            booking_id,
            to_minor_units(booking.total_cost),
        )
        return

    try:
        booking, recorded = await mark_paid(db, booking_id, session["id"], PaymentSource.WEBHOOK)
    except InvalidState as exc:
        logger.warning("Payment for booking %s not recorded: %s", booking_id, exc.message)
        return

    if recorded:
        user = await db.get(User, booking.user_id)
        if user is not None:
            await notify_payment_received(user, booking)
