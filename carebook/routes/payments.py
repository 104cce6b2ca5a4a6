"""Payment routes: start a Stripe Checkout and verify it on return."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from carebook.core.database import get_db
from carebook.core.dependencies import get_current_user
from carebook.models.user import User
from carebook.schemas import CheckoutOut, CheckoutRequest, PaymentOut, PaymentVerifyRequest
from carebook.services.payments import start_checkout, verify_payment

router = APIRouter(prefix="/payments", tags=["payments"])


@router.post("/checkout", response_model=CheckoutOut)
async def create_checkout(
    body: CheckoutRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await start_checkout(db, body.booking_id, user)


@router.post("/verify", response_model=PaymentOut)
async def verify(
    body: PaymentVerifyRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await verify_payment(db, body.session_id, body.booking_id, user)
