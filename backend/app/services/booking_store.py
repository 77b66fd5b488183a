"""Persistence seams used by the booking engine.

``BookingStore`` and ``PropertyAccessor`` are the only two things the engine
knows about storage. The SQLAlchemy implementations below run inside the
request's ``AsyncSession`` so every engine call is one transaction.
"""

import logging
import uuid
from abc import ABC, abstractmethod
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.models import Booking, Property
from app.services.exceptions import DateConflict, StorageError

logger = logging.getLogger(__name__)

ACTIVE_STATUSES: frozenset[str] = frozenset({"pending", "confirmed"})


@dataclass(frozen=True)
class PropertySnapshot:
    """The slice of a property the engine needs to price and validate a booking."""

    id: uuid.UUID
    host_id: uuid.UUID
    price_per_night: Decimal
    max_guests: int
    is_active: bool


def overlaps(in_a: date, out_a: date, in_b: date, out_b: date) -> bool:
    """Return True if ``[in_a, out_a)`` and ``[in_b, out_b)`` share at least one night.

    A checkout on day X and a check-in on day X do not overlap.
    """
    return in_a < out_b and in_b < out_a


class PropertyAccessor(ABC):
    @abstractmethod
    async def get_property(self, property_id: uuid.UUID) -> PropertySnapshot | None:
        raise NotImplementedError


class BookingStore(ABC):
    @abstractmethod
    async def insert(self, booking: Booking) -> Booking:
        """Persist ``booking`` unless an active booking on the same property overlaps it.

        Implementations must make the overlap check and the write atomic with
        respect to other inserts for the same property, raising ``DateConflict``
        when they lose the race.
        """
        raise NotImplementedError

    @abstractmethod
    async def get_by_id(self, booking_id: uuid.UUID) -> Booking | None:
        raise NotImplementedError

    @abstractmethod
    async def find_conflicting(
        self,
        property_id: uuid.UUID,
        check_in: date,
        check_out: date,
        statuses: Iterable[str] = ACTIVE_STATUSES,
    ) -> list[Booking]:
        raise NotImplementedError

    @abstractmethod
    async def update(self, booking_id: uuid.UUID, patch: dict[str, Any]) -> Booking:
        raise NotImplementedError


# ---------------------------------------------------------------------------
# SQLAlchemy implementations
# ---------------------------------------------------------------------------


class SqlPropertyAccessor(PropertyAccessor):
    """Read-only property lookups against the ``properties`` table."""

    def __init__(self, db: AsyncSession) -> None:
        self._db = db

    async def get_property(self, property_id: uuid.UUID) -> PropertySnapshot | None:
        try:
            result = await self._db.execute(
                select(
                    Property.id,
                    Property.host_id,
                    Property.price_per_night,
                    Property.max_guests,
                    Property.is_active,
                ).where(Property.id == property_id)
            )
        except SQLAlchemyError as exc:
            raise StorageError(f"Failed to load property {property_id}") from exc

        row = result.one_or_none()
        if row is None:
            return None
        return PropertySnapshot(
            id=row.id,
            host_id=row.host_id,
            price_per_night=Decimal(row.price_per_night),
            max_guests=row.max_guests,
            is_active=row.is_active,
        )


class SqlBookingStore(BookingStore):
    """Booking persistence on the request session.

    ``insert`` takes a row lock on the parent property before re-checking for
    overlaps, so two concurrent creations for the same property serialise and
    the loser sees the winner's row.
    """

    def __init__(self, db: AsyncSession) -> None:
        self._db = db

    def _conflict_query(
        self,
        property_id: uuid.UUID,
        check_in: date,
        check_out: date,
        statuses: Iterable[str],
    ):
        return select(Booking).where(
            Booking.property_id == property_id,
            Booking.status.in_(list(statuses)),
            Booking.check_in < check_out,
            Booking.check_out > check_in,
        )

    async def insert(self, booking: Booking) -> Booking:
        try:
            await self._db.execute(
                select(Property.id).where(Property.id == booking.property_id).with_for_update()
            )
            result = await self._db.execute(
                self._conflict_query(booking.property_id, booking.check_in, booking.check_out, ACTIVE_STATUSES).limit(1)
            )
            if result.scalar_one_or_none() is not None:
                logger.info(
                    "Insert lost race for property %s [%s, %s)",
                    booking.property_id,
                    booking.check_in,
                    booking.check_out,
                )
                raise DateConflict()

            self._db.add(booking)
            await self._db.flush()
            await self._db.refresh(booking)
        except IntegrityError as exc:
            raise DateConflict() from exc
        except SQLAlchemyError as exc:
            raise StorageError("Failed to insert booking") from exc
        return booking

    async def get_by_id(self, booking_id: uuid.UUID) -> Booking | None:
        try:
            result = await self._db.execute(
                select(Booking).options(selectinload(Booking.property)).where(Booking.id == booking_id)
            )
        except SQLAlchemyError as exc:
            raise StorageError(f"Failed to load booking {booking_id}") from exc
        return result.scalar_one_or_none()

    async def find_conflicting(
        self,
        property_id: uuid.UUID,
        check_in: date,
        check_out: date,
        statuses: Iterable[str] = ACTIVE_STATUSES,
    ) -> list[Booking]:
        try:
            result = await self._db.execute(self._conflict_query(property_id, check_in, check_out, statuses))
        except SQLAlchemyError as exc:
            raise StorageError("Failed to query conflicting bookings") from exc
        return list(result.scalars().all())

    async def update(self, booking_id: uuid.UUID, patch: dict[str, Any]) -> Booking:
        try:
            booking = await self._db.get(Booking, booking_id)
            if booking is None:
                raise StorageError(f"Booking {booking_id} vanished during update")
            for field, value in patch.items():
                setattr(booking, field, value)
            await self._db.flush()
            await self._db.refresh(booking)
        except SQLAlchemyError as exc:
            raise StorageError(f"Failed to update booking {booking_id}") from exc
        return booking
