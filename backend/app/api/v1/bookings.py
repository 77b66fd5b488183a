"""Bookings API router.

Visibility rule: renters see the bookings they made, hosts see the bookings
made on their properties. All writes go through ``BookingEngine``; domain
errors it raises are rendered by the handlers registered in ``app.main``.
"""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_booking_engine, get_current_actor, get_db
from app.models.booking import Booking
from app.schemas.booking import (
    BookingCancel,
    BookingCreate,
    BookingDetailResponse,
    BookingListResponse,
    BookingResponse,
    BookingStatusUpdate,
)
from app.services.booking_engine import Actor, BookingEngine, BookingRequest

router = APIRouter(prefix="/api/v1/bookings", tags=["bookings"])


@router.post(
    "",
    response_model=BookingResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new booking",
)
async def create_booking(
    body: BookingCreate,
    engine: BookingEngine = Depends(get_booking_engine),
    actor: Actor = Depends(get_current_actor),
) -> Booking:
    """Book a property as the current renter.

    The booking starts ``pending`` with its price computed from the listing's
    nightly rate.
    """
    return await engine.create_booking(
        actor,
        BookingRequest(
            property_id=body.property_id,
            check_in=body.check_in,
            check_out=body.check_out,
            num_guests=body.num_guests,
            special_requests=body.special_requests,
        ),
    )


@router.get(
    "",
    response_model=BookingListResponse,
    summary="List the current user's bookings",
)
async def list_bookings(
    status_filter: str | None = Query(
        None,
        alias="status",
        pattern="^(pending|confirmed|canceled|completed)$",
        description="Filter by booking status",
    ),
    skip: int = Query(0, ge=0, description="Pagination offset"),
    limit: int = Query(10, ge=1, le=100, description="Pagination limit"),
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
) -> dict:
    """Return a page of bookings, newest first."""
    owner_column = Booking.host_id if actor.is_host else Booking.renter_id
    filters = [owner_column == actor.id]
    if status_filter is not None:
        filters.append(Booking.status == status_filter)

    total_result = await db.execute(select(func.count()).select_from(Booking).where(*filters))
    total = total_result.scalar_one()

    items_query = select(Booking).where(*filters).order_by(Booking.created_at.desc()).offset(skip).limit(limit)
    result = await db.execute(items_query)
    items = list(result.scalars().all())

    return {"items": items, "total": total}


@router.get(
    "/{booking_id}",
    response_model=BookingDetailResponse,
    summary="Get booking detail with nested property",
)
async def get_booking(
    booking_id: uuid.UUID,
    engine: BookingEngine = Depends(get_booking_engine),
    actor: Actor = Depends(get_current_actor),
) -> Booking:
    """Retrieve a booking. Only its renter and its host may see it."""
    return await engine.get_booking(actor, booking_id)


@router.put(
    "/{booking_id}/status",
    response_model=BookingResponse,
    summary="Change a booking's status",
)
async def update_booking_status(
    booking_id: uuid.UUID,
    body: BookingStatusUpdate,
    engine: BookingEngine = Depends(get_booking_engine),
    actor: Actor = Depends(get_current_actor),
) -> Booking:
    """Apply a status transition (pending→confirmed/canceled, confirmed→canceled/completed)."""
    return await engine.transition(actor, booking_id, body.status, body.cancellation_reason)


@router.put(
    "/{booking_id}/cancel",
    response_model=BookingResponse,
    summary="Cancel a booking",
)
async def cancel_booking(
    booking_id: uuid.UUID,
    body: BookingCancel | None = None,
    engine: BookingEngine = Depends(get_booking_engine),
    actor: Actor = Depends(get_current_actor),
) -> Booking:
    """Cancel a booking unless check-in is less than the cancellation window away."""
    reason = body.cancellation_reason if body is not None else None
    return await engine.cancel(actor, booking_id, reason)
