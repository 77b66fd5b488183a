"""Booking engine — creation rules, conflict detection, and the status lifecycle.

Every operation takes the acting user explicitly as an ``Actor`` and talks to
storage only through ``BookingStore`` / ``PropertyAccessor``. Rules are checked
in a fixed order and the first violation is raised; nothing is written until
all of them pass.
"""

import logging
import uuid
from collections.abc import Callable
from dataclasses import dataclass
from datetime import date, datetime, time, timezone
from decimal import Decimal

from app.models import Booking
from app.services.booking_store import ACTIVE_STATUSES, BookingStore, PropertyAccessor
from app.services.exceptions import (
    AlreadyCanceled,
    CancellationWindowClosed,
    CannotCancelCompleted,
    CapacityExceeded,
    DateConflict,
    InvalidDateRange,
    InvalidTransition,
    NotFound,
    PermissionDenied,
    PropertyUnavailable,
)

logger = logging.getLogger(__name__)

PENDING = "pending"
CONFIRMED = "confirmed"
CANCELED = "canceled"
COMPLETED = "completed"

BOOKING_STATUSES: tuple[str, ...] = (PENDING, CONFIRMED, CANCELED, COMPLETED)
PAYMENT_STATUSES: tuple[str, ...] = ("pending", "paid", "refunded")

BOOKING_TRANSITIONS: dict[str, frozenset[str]] = {
    PENDING: frozenset({CONFIRMED, CANCELED}),
    CONFIRMED: frozenset({CANCELED, COMPLETED}),
    CANCELED: frozenset(),
    COMPLETED: frozenset(),
}

DEFAULT_CANCELLATION_WINDOW_HOURS = 24


@dataclass(frozen=True)
class Actor:
    """The authenticated caller. Only ``renter`` and ``host`` roles exist."""

    id: uuid.UUID
    role: str

    @property
    def is_renter(self) -> bool:
        return self.role == "renter"

    @property
    def is_host(self) -> bool:
        return self.role == "host"


@dataclass(frozen=True)
class BookingRequest:
    property_id: uuid.UUID
    check_in: date
    check_out: date
    num_guests: int
    special_requests: str | None = None


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(moment: datetime) -> datetime:
    """Return ``moment`` in UTC. Naive values are read as UTC, not local time."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


def utc_today() -> date:
    """The current calendar date in UTC, the day boundary every booking rule uses."""
    return _utcnow().date()


def count_nights(check_in: date, check_out: date) -> int:
    """Nights between two calendar dates. Dates carry no time part, so this is exact."""
    return (check_out - check_in).days


def compute_total_price(check_in: date, check_out: date, price_per_night: Decimal) -> Decimal:
    return Decimal(count_nights(check_in, check_out)) * Decimal(price_per_night)


def hours_until_check_in(check_in: date, now: datetime) -> float:
    """Hours from ``now`` until midnight UTC at the start of ``check_in``.

    Negative once check-in has passed. Naive ``now`` values are read as UTC.
    """
    now = as_utc(now)
    arrival = datetime.combine(check_in, time.min, tzinfo=timezone.utc)
    return (arrival - now).total_seconds() / 3600


def assert_transition(current: str, target: str) -> None:
    allowed = BOOKING_TRANSITIONS.get(current, frozenset())
    if target not in allowed:
        raise InvalidTransition(f"Cannot change status from {current} to {target}")


class BookingEngine:
    """Owns every rule about creating bookings and moving them through their lifecycle."""

    def __init__(
        self,
        bookings: BookingStore,
        properties: PropertyAccessor,
        clock: Callable[[], datetime] = _utcnow,
        cancellation_window_hours: int = DEFAULT_CANCELLATION_WINDOW_HOURS,
    ) -> None:
        self._bookings = bookings
        self._properties = properties
        self._clock = clock
        self._cancellation_window_hours = cancellation_window_hours

    # ------------------------------------------------------------------
    # Creation
    # ------------------------------------------------------------------

    async def create_booking(self, actor: Actor, request: BookingRequest) -> Booking:
        """Validate ``request`` and persist it as a new pending booking.

        Checks, in order: renter role, check-in not before today, check-in
        before check-out, property exists, property active, guest capacity,
        no overlapping pending/confirmed booking. The price is derived from the
        property snapshot; the caller never supplies it.

        Raises:
            PermissionDenied, InvalidDateRange, NotFound, PropertyUnavailable,
            CapacityExceeded, DateConflict: the first rule that fails.
        """
        if not actor.is_renter:
            raise PermissionDenied("Only renters can create bookings")

        today = as_utc(self._clock()).date()
        if request.check_in < today:
            raise InvalidDateRange("Check-in date cannot be in the past")
        if request.check_in >= request.check_out:
            raise InvalidDateRange("Check-out date must be after check-in date")

        snapshot = await self._properties.get_property(request.property_id)
        if snapshot is None:
            raise NotFound("Property not found")
        if not snapshot.is_active:
            raise PropertyUnavailable()
        if request.num_guests > snapshot.max_guests:
            raise CapacityExceeded(f"Maximum {snapshot.max_guests} guests allowed")

        conflicts = await self._bookings.find_conflicting(
            request.property_id, request.check_in, request.check_out, ACTIVE_STATUSES
        )
        if conflicts:
            logger.info(
                "Rejected booking for property %s [%s, %s): overlaps %d active booking(s)",
                request.property_id,
                request.check_in,
                request.check_out,
                len(conflicts),
            )
            raise DateConflict()

        booking = Booking(
            id=uuid.uuid4(),
            property_id=snapshot.id,
            renter_id=actor.id,
            host_id=snapshot.host_id,
            check_in=request.check_in,
            check_out=request.check_out,
            num_guests=request.num_guests,
            total_price=compute_total_price(request.check_in, request.check_out, snapshot.price_per_night),
            status=PENDING,
            payment_status="pending",
            special_requests=request.special_requests,
        )
        booking = await self._bookings.insert(booking)
        logger.info(
            "Created booking %s for property %s by renter %s (%d nights, total %s)",
            booking.id,
            booking.property_id,
            actor.id,
            booking.number_of_nights,
            booking.total_price,
        )
        return booking

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def get_booking(self, actor: Actor, booking_id: uuid.UUID) -> Booking:
        """Return a booking visible to ``actor`` (its renter or its host)."""
        booking = await self._load(booking_id)
        self._ensure_party(actor, booking, "view")
        return booking

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def transition(
        self,
        actor: Actor,
        booking_id: uuid.UUID,
        new_status: str,
        cancellation_reason: str | None = None,
    ) -> Booking:
        """Move a booking to ``new_status`` if the transition table allows it.

        Only the host may confirm. Moving to ``canceled`` records who canceled
        and when.
        """
        booking = await self._load(booking_id)
        is_host = self._ensure_party(actor, booking, "modify")

        assert_transition(booking.status, new_status)
        if new_status == CONFIRMED and not is_host:
            raise PermissionDenied("Only hosts can confirm bookings")

        return await self._apply(actor, booking, new_status, cancellation_reason)

    async def cancel(
        self,
        actor: Actor,
        booking_id: uuid.UUID,
        cancellation_reason: str | None = None,
    ) -> Booking:
        """Cancel a booking on behalf of its renter or host.

        Stricter than ``transition``: refuses inside the pre-arrival window,
        i.e. when check-in is less than ``cancellation_window_hours`` away but
        still in the future. Bookings whose check-in already passed are not
        blocked by the window.
        """
        booking = await self._load(booking_id)
        self._ensure_party(actor, booking, "cancel")

        if booking.status == CANCELED:
            raise AlreadyCanceled()
        if booking.status == COMPLETED:
            raise CannotCancelCompleted()

        hours_left = hours_until_check_in(booking.check_in, self._clock())
        if 0 < hours_left < self._cancellation_window_hours:
            raise CancellationWindowClosed(
                f"Cannot cancel booking within {self._cancellation_window_hours} hours of check-in"
            )

        assert_transition(booking.status, CANCELED)
        return await self._apply(actor, booking, CANCELED, cancellation_reason)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _load(self, booking_id: uuid.UUID) -> Booking:
        booking = await self._bookings.get_by_id(booking_id)
        if booking is None:
            raise NotFound("Booking not found")
        return booking

    @staticmethod
    def _ensure_party(actor: Actor, booking: Booking, action: str) -> bool:
        """Raise unless ``actor`` is the booking's host or renter. Returns True for the host."""
        is_host = actor.is_host and booking.host_id == actor.id
        is_renter = actor.is_renter and booking.renter_id == actor.id
        if not is_host and not is_renter:
            raise PermissionDenied(f"You do not have permission to {action} this booking")
        return is_host

    async def _apply(
        self,
        actor: Actor,
        booking: Booking,
        new_status: str,
        cancellation_reason: str | None,
    ) -> Booking:
        previous = booking.status
        patch: dict[str, object] = {"status": new_status}
        if new_status == CANCELED:
            patch["canceled_at"] = self._clock()
            patch["canceled_by"] = actor.id
            if cancellation_reason:
                patch["cancellation_reason"] = cancellation_reason

        updated = await self._bookings.update(booking.id, patch)
        logger.info("Booking %s: %s -> %s by %s %s", booking.id, previous, new_status, actor.role, actor.id)
        return updated
