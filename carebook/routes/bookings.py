"""Booking routes: create, list, view, update status, cancel.

Thin wrappers over carebook.services.bookings; domain errors are rendered by
the application's exception handlers.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from carebook.core.database import get_db
from carebook.core.dependencies import get_current_user
from carebook.models.user import User
from carebook.schemas import BookingCreate, BookingOut, BookingStatusUpdate
from carebook.services import bookings as booking_service
from carebook.services.catalog import ServiceCatalog, get_catalog

router = APIRouter(prefix="/bookings", tags=["bookings"])


@router.post("", response_model=BookingOut, status_code=status.HTTP_201_CREATED)
async def create_booking(
    body: BookingCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    catalog: ServiceCatalog = Depends(get_catalog),
):
    return await booking_service.create_booking(
        db,
        user,
        catalog,
        service_id=body.service_id,
        duration_value=body.duration.value,
        duration_unit=body.duration.unit,
        location=body.location.model_dump(),
    )


@router.get("", response_model=list[BookingOut])
async def list_my_bookings(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await booking_service.list_bookings(db, user.id)


@router.get("/{booking_id}", response_model=BookingOut)
async def get_booking(
    booking_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await booking_service.get_booking(db, booking_id, user)


@router.put("/{booking_id}", response_model=BookingOut)
async def update_booking_status(
    booking_id: int,
    body: BookingStatusUpdate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await booking_service.update_status(db, booking_id, user, body.status)


@router.post("/{booking_id}/cancel", response_model=BookingOut)
async def cancel_booking(
    booking_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await booking_service.cancel_booking(db, booking_id, user)
