"""Stripe webhook handler.

Processes checkout.session.completed and checkout.session.async_payment_succeeded.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status

from carebook.core.database import Database, get_database
from carebook.services.payments import handle_gateway_event
from carebook.services.stripe_service import construct_webhook_event

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/webhooks", tags=["webhooks"])


@router.post("/stripe")
async def stripe_webhook(request: Request, database: Database = Depends(get_database)):
    """Handle Stripe webhook events.

    Uses a dedicated DB session (not the request-scoped one) because webhook
    processing commits on its own. Once the signature checks out, Stripe always
    gets an acknowledgement so it stops retrying.
    """
    payload = await request.body()
    sig_header = request.headers.get("stripe-signature", "")

    try:
        event = construct_webhook_event(payload, sig_header)
    except Exception as exc:
        logger.warning("Rejected Stripe webhook: %s", exc)
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid webhook signature") from None

    try:
        async with database.session() as db:
            await handle_gateway_event(db, event)
    except Exception:
        logger.exception("Failed to process Stripe event %s", event["id"])

    return {"received": True}
