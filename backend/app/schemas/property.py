"""Pydantic v2 request/response schemas for property endpoints."""

import uuid
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

_PROPERTY_TYPES = "^(apartment|house|villa|condo|studio)$"
_CLOCK_TIME = r"^([01]\d|2[0-3]):[0-5]\d$"

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class PropertyCreate(BaseModel):
    """Schema for creating a new listing."""

    title: str = Field(..., min_length=1, max_length=100)
    description: str = Field("", max_length=1000)
    location: str = Field(..., min_length=1, max_length=255)
    property_type: str = Field(..., pattern=_PROPERTY_TYPES)
    bedrooms: int = Field(1, ge=1)
    bathrooms: int = Field(1, ge=1)
    max_guests: int = Field(..., ge=1)
    price_per_night: Decimal = Field(..., ge=1)
    amenities: list[str] = Field(default_factory=list)
    is_active: bool = True
    check_in_time: str = Field("15:00", pattern=_CLOCK_TIME)
    check_out_time: str = Field("11:00", pattern=_CLOCK_TIME)


class PropertyUpdate(BaseModel):
    """Schema for partially updating a listing. All fields optional."""

    title: str | None = Field(None, min_length=1, max_length=100)
    description: str | None = Field(None, max_length=1000)
    location: str | None = Field(None, min_length=1, max_length=255)
    property_type: str | None = Field(None, pattern=_PROPERTY_TYPES)
    bedrooms: int | None = Field(None, ge=1)
    bathrooms: int | None = Field(None, ge=1)
    max_guests: int | None = Field(None, ge=1)
    price_per_night: Decimal | None = Field(None, ge=1)
    amenities: list[str] | None = None
    is_active: bool | None = None
    check_in_time: str | None = Field(None, pattern=_CLOCK_TIME)
    check_out_time: str | None = Field(None, pattern=_CLOCK_TIME)


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class PropertyResponse(BaseModel):
    """Public listing information returned from the API."""

    id: uuid.UUID
    host_id: uuid.UUID
    title: str
    description: str
    location: str
    property_type: str
    bedrooms: int
    bathrooms: int
    max_guests: int
    price_per_night: Decimal
    amenities: list | None = None
    is_active: bool
    check_in_time: str
    check_out_time: str
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class PropertyListResponse(BaseModel):
    """Paginated list of listings."""

    items: list[PropertyResponse]
    total: int
