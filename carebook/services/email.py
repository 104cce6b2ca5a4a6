"""Email sending via SMTP.

Booking emails are best-effort: the notify_* helpers bound the send by a
timeout, log any failure and never raise into the caller.
"""

import logging
from email.message import EmailMessage

import aiosmtplib

from carebook.core.config import settings
from carebook.models.booking import Booking
from carebook.models.user import User
from carebook.services.errors import bounded

logger = logging.getLogger(__name__)


async def send_email(to: str, subject: str, body: str) -> None:
    """Send a plain-text email via SMTP."""
    message = EmailMessage()
    message["From"] = settings.smtp_from
    message["To"] = to
    message["Subject"] = subject
    message.set_content(body)

    await aiosmtplib.send(message, hostname=settings.smtp_host, port=settings.smtp_port)


def _booking_summary(booking: Booking) -> str:
    loc = booking.location
    return (
        f"  Service:      {booking.service_name}\n"
        f"  Duration:     {booking.duration_value} {booking.duration_unit.value}\n"
        f"  Location:     {loc['area']}, {loc['city']}, {loc['district']}, {loc['division']}\n"
        f"  Address:      {loc['address']}\n"
        f"  Booking date: {booking.created_at.strftime('%d %B %Y')}\n"
        f"  Reference:    {booking.reference}\n"
        f"  Status:       {booking.status.value} / {booking.payment_status.value}\n"
        f"  Total cost:   BDT {booking.total_cost:,}\n"
    )


async def send_booking_confirmation_email(to: str, user_name: str, booking: Booking) -> None:
    body = (
        f"Dear {user_name},\n\n"
        f"Thank you for booking with CareBook. We have received your booking and our team "
        f"will contact you within 24 hours to confirm the details.\n\n"
        f"{_booking_summary(booking)}\n"
        f"View your bookings: {settings.frontend_url}/my-bookings\n\n"
        f"CareBook"
    )
    await send_email(to, f"Booking Confirmation - {booking.service_name} {booking.reference}", body)
    logger.info("Booking confirmation email sent to %s for booking %s", to, booking.id)


async def send_payment_receipt_email(to: str, user_name: str, booking: Booking) -> None:
    body = (
        f"Dear {user_name},\n\n"
        f"We have received your payment. Here is your receipt.\n\n"
        f"{_booking_summary(booking)}"
        f"  Paid at:      {booking.paid_at.strftime('%d %B %Y %H:%M UTC')}\n\n"
        f"CareBook"
    )
    await send_email(to, f"Payment Receipt - {booking.service_name} {booking.reference}", body)
    logger.info("Payment receipt email sent to %s for booking %s", to, booking.id)


async def notify_booking_created(user: User, booking: Booking) -> None:
    try:
        await bounded(
            send_booking_confirmation_email(user.email, user.name, booking),
            settings.notifier_timeout_seconds,
            "SMTP server",
        )
    except Exception:
        logger.exception("Could not send booking confirmation for booking %s", booking.id)


async def notify_payment_received(user: User, booking: Booking) -> None:
    try:
        await bounded(
            send_payment_receipt_email(user.email, user.name, booking),
            settings.notifier_timeout_seconds,
            "SMTP server",
        )
    except Exception:
        logger.exception("Could not send payment receipt for booking %s", booking.id)
