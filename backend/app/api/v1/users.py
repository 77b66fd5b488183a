"""Users API routes — public profiles, dashboard stats, account removal."""

import logging
import uuid
from decimal import Decimal

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_active_user, get_db
from app.models.booking import Booking
from app.models.property import Property
from app.models.user import User
from app.schemas.auth import MessageResponse
from app.schemas.user import HostStatsResponse, PublicProfileResponse, RenterStatsResponse
from app.services.booking_engine import utc_today
from app.services.booking_store import ACTIVE_STATUSES

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/users", tags=["users"])


async def _count(db: AsyncSession, model, *criteria) -> int:
    return (await db.execute(select(func.count()).select_from(model).where(*criteria))).scalar_one()


async def _sum_price(db: AsyncSession, *criteria) -> Decimal:
    total = (
        await db.execute(select(func.coalesce(func.sum(Booking.total_price), 0)).where(*criteria))
    ).scalar_one()
    return Decimal(str(total))


# ---------------------------------------------------------------------------
# Current user
# ---------------------------------------------------------------------------


@router.get(
    "/stats",
    response_model=HostStatsResponse | RenterStatsResponse,
    summary="Dashboard numbers for the current user",
)
async def get_stats(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> HostStatsResponse | RenterStatsResponse:
    """Listing and booking counts for a host, or stay counts and spend for a renter.

    Earnings count completed, paid stays. Spend counts every paid booking.
    """
    if current_user.role == "host":
        hosted = Booking.host_id == current_user.id
        return HostStatsResponse(
            total_properties=await _count(db, Property, Property.host_id == current_user.id),
            active_properties=await _count(
                db, Property, Property.host_id == current_user.id, Property.is_active.is_(True)
            ),
            total_bookings=await _count(db, Booking, hosted),
            pending_bookings=await _count(db, Booking, hosted, Booking.status == "pending"),
            confirmed_bookings=await _count(db, Booking, hosted, Booking.status == "confirmed"),
            total_earnings=await _sum_price(
                db, hosted, Booking.status == "completed", Booking.payment_status == "paid"
            ),
        )

    rented = Booking.renter_id == current_user.id
    return RenterStatsResponse(
        total_bookings=await _count(db, Booking, rented),
        upcoming_bookings=await _count(
            db, Booking, rented, Booking.status == "confirmed", Booking.check_in >= utc_today()
        ),
        completed_bookings=await _count(db, Booking, rented, Booking.status == "completed"),
        total_spent=await _sum_price(db, rented, Booking.payment_status == "paid"),
    )


@router.delete(
    "/account",
    response_model=MessageResponse,
    summary="Delete the current user's account",
)
async def delete_account(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> MessageResponse:
    """Close the caller's account. Refused while any stay they book or host is still ahead.

    The user row is deactivated rather than removed because bookings keep
    pointing at it. A host's listings are deactivated with it.
    """
    active_count = await _count(
        db,
        Booking,
        or_(Booking.renter_id == current_user.id, Booking.host_id == current_user.id),
        Booking.status.in_(list(ACTIVE_STATUSES)),
        Booking.check_out >= utc_today(),
    )
    if active_count:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Cannot delete account with active bookings",
        )

    if current_user.role == "host":
        await db.execute(
            update(Property)
            .where(Property.host_id == current_user.id)
            .values(is_active=False)
        )

    current_user.is_active = False
    db.add(current_user)
    await db.flush()

    logger.info("Closed account %s (%s)", current_user.id, current_user.role)
    return MessageResponse(message="Account deleted")


# ---------------------------------------------------------------------------
# Public
# ---------------------------------------------------------------------------


@router.get(
    "/profile/{user_id}",
    response_model=PublicProfileResponse,
    summary="Public profile of a user",
)
async def get_profile(
    user_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
) -> PublicProfileResponse:
    """Public profile. For hosts, includes active listing and booking counts."""
    user = await db.get(User, user_id)
    if user is None or not user.is_active:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

    profile = PublicProfileResponse.model_validate(user)
    if user.role == "host":
        profile.properties_count = await _count(
            db, Property, Property.host_id == user.id, Property.is_active.is_(True)
        )
        profile.total_bookings = await _count(db, Booking, Booking.host_id == user.id)
    return profile
