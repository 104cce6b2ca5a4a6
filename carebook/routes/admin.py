"""Admin dashboard routes: every booking, and status changes on any of them."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from carebook.core.database import get_db
from carebook.core.dependencies import require_admin
from carebook.models.user import User
from carebook.schemas import AdminBookingOut, BookingOut, BookingStatusUpdate
from carebook.services.bookings import list_all_bookings, update_status

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("/bookings", response_model=list[AdminBookingOut])
async def all_bookings(
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await list_all_bookings(db)


@router.put("/bookings/{booking_id}", response_model=BookingOut)
async def set_booking_status(
    booking_id: int,
    body: BookingStatusUpdate,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await update_status(db, booking_id, admin, body.status)
