"""In-memory storage for exercising ``BookingEngine`` without a database."""

import asyncio
import uuid
from collections import defaultdict
from collections.abc import Iterable
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Any

import pytest

from app.models import Booking
from app.services.booking_engine import Actor, BookingEngine
from app.services.booking_store import (
    ACTIVE_STATUSES,
    BookingStore,
    PropertyAccessor,
    PropertySnapshot,
    overlaps,
)
from app.services.exceptions import DateConflict

# Wednesday noon; tests build dates relative to this.
NOW = datetime(2024, 1, 10, 12, 0, tzinfo=timezone.utc)


class InMemoryPropertyAccessor(PropertyAccessor):
    def __init__(self) -> None:
        self.properties: dict[uuid.UUID, PropertySnapshot] = {}

    def add(self, **overrides: Any) -> PropertySnapshot:
        fields = {
            "id": uuid.uuid4(),
            "host_id": uuid.uuid4(),
            "price_per_night": Decimal("100.00"),
            "max_guests": 4,
            "is_active": True,
        }
        fields.update(overrides)
        snapshot = PropertySnapshot(**fields)
        self.properties[snapshot.id] = snapshot
        return snapshot

    async def get_property(self, property_id: uuid.UUID) -> PropertySnapshot | None:
        return self.properties.get(property_id)


class InMemoryBookingStore(BookingStore):
    """Dict-backed store; inserts for one property are serialised by a per-property lock."""

    def __init__(self) -> None:
        self.bookings: dict[uuid.UUID, Booking] = {}
        self.update_calls: list[tuple[uuid.UUID, dict[str, Any]]] = []
        self._locks: defaultdict[uuid.UUID, asyncio.Lock] = defaultdict(asyncio.Lock)

    def _conflicts(
        self, property_id: uuid.UUID, check_in: date, check_out: date, statuses: Iterable[str]
    ) -> list[Booking]:
        wanted = set(statuses)
        return [
            b
            for b in self.bookings.values()
            if b.property_id == property_id
            and b.status in wanted
            and overlaps(b.check_in, b.check_out, check_in, check_out)
        ]

    async def insert(self, booking: Booking) -> Booking:
        async with self._locks[booking.property_id]:
            if self._conflicts(booking.property_id, booking.check_in, booking.check_out, ACTIVE_STATUSES):
                raise DateConflict()
            if booking.id is None:
                booking.id = uuid.uuid4()
            booking.created_at = booking.updated_at = NOW
            self.bookings[booking.id] = booking
        return booking

    async def get_by_id(self, booking_id: uuid.UUID) -> Booking | None:
        return self.bookings.get(booking_id)

    async def find_conflicting(
        self,
        property_id: uuid.UUID,
        check_in: date,
        check_out: date,
        statuses: Iterable[str] = ACTIVE_STATUSES,
    ) -> list[Booking]:
        conflicts = self._conflicts(property_id, check_in, check_out, statuses)
        # Yield so concurrent creations can interleave between check and insert.
        await asyncio.sleep(0)
        return conflicts

    async def update(self, booking_id: uuid.UUID, patch: dict[str, Any]) -> Booking:
        self.update_calls.append((booking_id, dict(patch)))
        booking = self.bookings[booking_id]
        for field, value in patch.items():
            setattr(booking, field, value)
        return booking


class FakeClock:
    def __init__(self, now: datetime = NOW) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store() -> InMemoryBookingStore:
    return InMemoryBookingStore()


@pytest.fixture
def properties() -> InMemoryPropertyAccessor:
    return InMemoryPropertyAccessor()


@pytest.fixture
def engine(store, properties, clock) -> BookingEngine:
    return BookingEngine(store, properties, clock=clock, cancellation_window_hours=24)


@pytest.fixture
def host() -> Actor:
    return Actor(id=uuid.uuid4(), role="host")


@pytest.fixture
def renter() -> Actor:
    return Actor(id=uuid.uuid4(), role="renter")


@pytest.fixture
def listing(properties, host) -> PropertySnapshot:
    return properties.add(host_id=host.id)
