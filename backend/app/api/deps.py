"""Shared API dependencies — single import point for all routers.

Re-exports database session and authentication dependencies and wires the
booking engine to the request session, so router modules can import
everything they need from one place::

    from app.api.deps import get_db, get_current_actor, get_booking_engine
"""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.dependencies import (
    get_current_active_user,
    get_current_actor,
    get_current_user,
    require_role,
)
from app.config import settings
from app.database import get_db
from app.services.booking_engine import BookingEngine
from app.services.booking_store import SqlBookingStore, SqlPropertyAccessor


async def get_booking_engine(db: AsyncSession = Depends(get_db)) -> BookingEngine:
    """Build a booking engine bound to the request's database session."""
    return BookingEngine(
        bookings=SqlBookingStore(db),
        properties=SqlPropertyAccessor(db),
        cancellation_window_hours=settings.cancellation_window_hours,
    )


__all__ = [
    "get_db",
    "get_current_user",
    "get_current_active_user",
    "get_current_actor",
    "get_booking_engine",
    "require_role",
]
