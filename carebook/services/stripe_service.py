"""Stripe integration service for hosted checkout.

Wraps the Stripe Python SDK. Booking costs are whole BDT; Stripe wants the
amount in the currency's minor unit (poisha), so everything sent to or read
from Stripe goes through to_minor_units().

The SDK is synchronous, so calls run in a worker thread and are bounded by
settings.gateway_timeout_seconds.
"""

import asyncio
import logging
from typing import Any

import stripe

from carebook.core.config import settings
from carebook.models.booking import Booking
from carebook.services.errors import UpstreamFailure, bounded

logger = logging.getLogger(__name__)


def _configure() -> None:
    """Set the Stripe API key from settings."""
    if not settings.stripe_secret_key:
        raise UpstreamFailure("Payment gateway is not configured")
    stripe.api_key = settings.stripe_secret_key


def to_minor_units(amount: int) -> int:
    return amount * 100


async def _call(fn, **params) -> Any:
    _configure()
    try:
        return await bounded(asyncio.to_thread(fn, **params), settings.gateway_timeout_seconds, "Payment gateway")
    except stripe.StripeError as exc:
        logger.warning("Stripe call %s failed: %s", fn.__qualname__, exc)
        raise UpstreamFailure("Payment gateway error. Please try again.") from exc


async def create_checkout_session(booking: Booking, customer_email: str) -> stripe.checkout.Session:
    """Create a hosted Checkout Session for the full booking cost.

    The booking and user ids travel in metadata so the webhook can find the
    booking without a logged-in caller.
    """
    loc = booking.location
    return await _call(
        stripe.checkout.Session.create,
        mode="payment",
        payment_method_types=["card"],
        line_items=[
            {
                "price_data": {
                    "currency": settings.stripe_currency,
                    "product_data": {
                        "name": booking.service_name,
                        "description": (
                            f"{booking.duration_value} {booking.duration_unit.value} - {loc['city']}, {loc['area']}"
                        ),
                    },
                    "unit_amount": to_minor_units(booking.total_cost),
                },
                "quantity": 1,
            }
        ],
        success_url=(
            f"{settings.frontend_url}/payment/success?session_id={{CHECKOUT_SESSION_ID}}&booking_id={booking.id}"
        ),
        cancel_url=f"{settings.frontend_url}/my-bookings?payment=cancelled",
        client_reference_id=str(booking.id),
        customer_email=customer_email,
        metadata={
            "booking_id": str(booking.id),
            "user_id": str(booking.user_id),
        },
    )


async def retrieve_checkout_session(session_id: str) -> stripe.checkout.Session:
    """Fetch the authoritative state of a Checkout Session."""
    return await _call(stripe.checkout.Session.retrieve, id=session_id)


def construct_webhook_event(payload: bytes, sig_header: str) -> stripe.Event:
    """Verify and construct a Stripe webhook event."""
    return stripe.Webhook.construct_event(
        payload,
        sig_header,
        settings.stripe_webhook_secret,
    )
