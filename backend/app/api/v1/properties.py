"""Properties API routes — public browsing, host-scoped management."""

import logging
import uuid
from decimal import Decimal

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_db, require_role
from app.models.booking import Booking
from app.models.property import Property
from app.models.user import User
from app.schemas.auth import MessageResponse
from app.schemas.property import (
    PropertyCreate,
    PropertyListResponse,
    PropertyResponse,
    PropertyUpdate,
)
from app.services.booking_engine import utc_today
from app.services.booking_store import ACTIVE_STATUSES

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/properties", tags=["properties"])

_require_host = require_role("host")


async def _get_owned_property(db: AsyncSession, property_id: uuid.UUID, host: User) -> Property:
    """Fetch a property owned by ``host`` or raise 404."""
    result = await db.execute(select(Property).where(Property.id == property_id))
    prop = result.scalar_one_or_none()

    if prop is None or prop.host_id != host.id:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Property not found",
        )
    return prop


@router.post(
    "",
    response_model=PropertyResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new listing",
)
async def create_property(
    body: PropertyCreate,
    db: AsyncSession = Depends(get_db),
    host: User = Depends(_require_host),
) -> PropertyResponse:
    """Create a listing owned by the authenticated host."""
    prop = Property(host_id=host.id, **body.model_dump())
    db.add(prop)
    await db.flush()
    await db.refresh(prop)
    return PropertyResponse.model_validate(prop)


@router.get(
    "",
    response_model=PropertyListResponse,
    summary="Browse active listings",
)
async def list_properties(
    location: str | None = Query(None, description="Case-insensitive substring of the location"),
    property_type: str | None = Query(None, pattern="^(apartment|house|villa|condo|studio)$"),
    min_price: Decimal | None = Query(None, ge=0),
    max_price: Decimal | None = Query(None, ge=0),
    guests: int | None = Query(None, ge=1, description="Listings that fit at least this many guests"),
    skip: int = Query(0, ge=0),
    limit: int = Query(12, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
) -> PropertyListResponse:
    """Return paginated active listings. No authentication required."""
    filters = [Property.is_active.is_(True)]
    if location:
        filters.append(Property.location.ilike(f"%{location}%"))
    if property_type is not None:
        filters.append(Property.property_type == property_type)
    if min_price is not None:
        filters.append(Property.price_per_night >= min_price)
    if max_price is not None:
        filters.append(Property.price_per_night <= max_price)
    if guests is not None:
        filters.append(Property.max_guests >= guests)

    count_query = select(func.count()).select_from(Property).where(*filters)
    total = (await db.execute(count_query)).scalar_one()

    items_query = select(Property).where(*filters).order_by(Property.created_at.desc()).offset(skip).limit(limit)
    result = await db.execute(items_query)
    items = list(result.scalars().all())

    return PropertyListResponse(
        items=[PropertyResponse.model_validate(p) for p in items],
        total=total,
    )


@router.get(
    "/host",
    response_model=PropertyListResponse,
    summary="List the current host's listings",
)
async def list_host_properties(
    db: AsyncSession = Depends(get_db),
    host: User = Depends(_require_host),
) -> PropertyListResponse:
    """Return every listing of the current host, active or not."""
    result = await db.execute(
        select(Property).where(Property.host_id == host.id).order_by(Property.created_at.desc())
    )
    items = list(result.scalars().all())
    return PropertyListResponse(
        items=[PropertyResponse.model_validate(p) for p in items],
        total=len(items),
    )


@router.get(
    "/{property_id}",
    response_model=PropertyResponse,
    summary="Get a listing by ID",
)
async def get_property(
    property_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
) -> PropertyResponse:
    """Retrieve a single listing. Returns 404 if it does not exist."""
    result = await db.execute(select(Property).where(Property.id == property_id))
    prop = result.scalar_one_or_none()

    if prop is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Property not found",
        )

    return PropertyResponse.model_validate(prop)


@router.put(
    "/{property_id}",
    response_model=PropertyResponse,
    summary="Update a listing",
)
async def update_property(
    property_id: uuid.UUID,
    body: PropertyUpdate,
    db: AsyncSession = Depends(get_db),
    host: User = Depends(_require_host),
) -> PropertyResponse:
    """Partially update a listing. Existing bookings keep their price and guest count."""
    prop = await _get_owned_property(db, property_id, host)

    update_data = body.model_dump(exclude_unset=True)
    for field, value in update_data.items():
        setattr(prop, field, value)

    db.add(prop)
    await db.flush()
    await db.refresh(prop)

    return PropertyResponse.model_validate(prop)


@router.delete(
    "/{property_id}",
    response_model=MessageResponse,
    summary="Delete a listing",
)
async def delete_property(
    property_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    host: User = Depends(_require_host),
) -> MessageResponse:
    """Delete a listing. Refused while it has pending or confirmed stays that have not ended.

    A listing that has any booking history is deactivated instead of removed,
    so renters and the host keep their past bookings.
    """
    prop = await _get_owned_property(db, property_id, host)

    active_count = (
        await db.execute(
            select(func.count())
            .select_from(Booking)
            .where(
                Booking.property_id == prop.id,
                Booking.status.in_(list(ACTIVE_STATUSES)),
                Booking.check_out >= utc_today(),
            )
        )
    ).scalar_one()
    if active_count:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Cannot delete property with active bookings",
        )

    history_count = (
        await db.execute(select(func.count()).select_from(Booking).where(Booking.property_id == prop.id))
    ).scalar_one()
    if history_count:
        prop.is_active = False
        await db.flush()
        logger.info("Deactivated property %s instead of deleting it (%d past bookings)", prop.id, history_count)
        return MessageResponse(message="Property deactivated; its booking history is kept")

    await db.delete(prop)
    await db.flush()

    return MessageResponse(message="Property deleted")
