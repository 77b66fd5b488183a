"""Pydantic v2 request/response schemas for booking endpoints."""

import uuid
from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from app.config import settings
from app.schemas.property import PropertyResponse

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class BookingCreate(BaseModel):
    """Schema for creating a new booking.

    Date ordering and the "not in the past" rule are enforced by the booking
    engine so they map onto its error kinds; only shape is checked here.
    """

    property_id: uuid.UUID
    check_in: date
    check_out: date
    num_guests: int = Field(..., ge=1, le=50)
    special_requests: str | None = Field(None, max_length=settings.max_text_length)


class BookingStatusUpdate(BaseModel):
    """Schema for the general status transition endpoint."""

    status: str = Field(..., pattern="^(pending|confirmed|canceled|completed)$")
    cancellation_reason: str | None = Field(None, max_length=settings.max_text_length)


class BookingCancel(BaseModel):
    """Schema for the dedicated cancel endpoint."""

    cancellation_reason: str | None = Field(None, max_length=settings.max_text_length)


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class BookingResponse(BaseModel):
    """Standard booking response returned from create and status changes."""

    id: uuid.UUID
    property_id: uuid.UUID
    renter_id: uuid.UUID
    host_id: uuid.UUID
    check_in: date
    check_out: date
    number_of_nights: int
    num_guests: int
    total_price: Decimal
    status: str
    payment_status: str
    special_requests: str | None = None
    cancellation_reason: str | None = None
    canceled_at: datetime | None = None
    canceled_by: uuid.UUID | None = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class BookingDetailResponse(BookingResponse):
    """Extended booking response with the nested property."""

    property: PropertyResponse | None = None


class BookingListResponse(BaseModel):
    """Paginated list of bookings."""

    items: list[BookingResponse]
    total: int
