"""Pydantic v2 response schemas for user profile and dashboard endpoints."""

import uuid
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict


class PublicProfileResponse(BaseModel):
    """Profile visible to anyone. Contact details stay private."""

    id: uuid.UUID
    name: str
    avatar_url: str | None = None
    role: str
    created_at: datetime
    # Hosts only
    properties_count: int | None = None
    total_bookings: int | None = None

    model_config = ConfigDict(from_attributes=True)


class HostStatsResponse(BaseModel):
    """Dashboard numbers for a host."""

    role: str = "host"
    total_properties: int
    active_properties: int
    total_bookings: int
    pending_bookings: int
    confirmed_bookings: int
    total_earnings: Decimal


class RenterStatsResponse(BaseModel):
    """Dashboard numbers for a renter."""

    role: str = "renter"
    total_bookings: int
    upcoming_bookings: int
    completed_bookings: int
    total_spent: Decimal
