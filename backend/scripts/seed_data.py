"""Seed the database with demo hosts, renters, listings and bookings.

Creates the tables if needed, then (re)creates:
- a demo host owning four listings,
- a demo renter with bookings in every lifecycle status.

Bookings are created through ``BookingEngine`` so the seeded data obeys the
same pricing and overlap rules as the API.

Run:
    python -m scripts.seed_data
"""

import asyncio
import sys
from datetime import date, timedelta
from decimal import Decimal
from pathlib import Path

# Add backend to path so imports work when run as a script
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from sqlalchemy import delete, or_, select

from app.auth.passwords import hash_password
from app.database import Base, async_session_factory, engine
from app.models import Booking, Property, User
from app.services.booking_engine import Actor, BookingEngine, BookingRequest
from app.services.booking_store import SqlBookingStore, SqlPropertyAccessor

# ---------------------------------------------------------------------------
# Seed data definitions
# ---------------------------------------------------------------------------

DEMO_HOST = {
    "email": "host@stayhub.dev",
    "password": "host1234",
    "name": "Demo Host",
    "role": "host",
}

DEMO_RENTER = {
    "email": "renter@stayhub.dev",
    "password": "renter1234",
    "name": "Demo Renter",
    "role": "renter",
}

PROPERTIES = [
    {
        "title": "Sunny Loft in the Old Town",
        "description": "Bright top-floor loft with exposed beams, five minutes from the main square.",
        "location": "Lisbon, Portugal",
        "property_type": "apartment",
        "bedrooms": 1,
        "bathrooms": 1,
        "max_guests": 2,
        "price_per_night": Decimal("85.00"),
        "amenities": ["wifi", "kitchen", "washer"],
    },
    {
        "title": "Family House with Garden",
        "description": "Quiet three-bedroom house with a fenced garden and barbecue.",
        "location": "Porto, Portugal",
        "property_type": "house",
        "bedrooms": 3,
        "bathrooms": 2,
        "max_guests": 6,
        "price_per_night": Decimal("140.00"),
        "amenities": ["wifi", "parking", "garden", "bbq"],
    },
    {
        "title": "Cliffside Villa with Pool",
        "description": "Four-bedroom villa overlooking the ocean with an infinity pool.",
        "location": "Lagos, Portugal",
        "property_type": "villa",
        "bedrooms": 4,
        "bathrooms": 3,
        "max_guests": 8,
        "price_per_night": Decimal("320.00"),
        "amenities": ["wifi", "pool", "ac", "sea_view"],
    },
    {
        "title": "Compact Studio near the Station",
        "description": "Practical studio for short business trips. Currently unlisted.",
        "location": "Coimbra, Portugal",
        "property_type": "studio",
        "bedrooms": 1,
        "bathrooms": 1,
        "max_guests": 1,
        "price_per_night": Decimal("45.00"),
        "amenities": ["wifi"],
        "is_active": False,
    },
]

# (property index, days from today, nights, guests, final status)
BOOKINGS = [
    (0, 14, 3, 2, "pending"),
    (1, 21, 7, 5, "confirmed"),
    (2, 30, 4, 6, "canceled"),
    (0, 40, 2, 1, "completed"),
    (2, 45, 5, 8, "pending"),
]


async def _reset_demo_users(session) -> None:
    emails = [DEMO_HOST["email"], DEMO_RENTER["email"]]
    result = await session.execute(select(User.id).where(User.email.in_(emails)))
    user_ids = list(result.scalars().all())
    if not user_ids:
        return

    print("⚠️  Demo users already exist. Deleting and re-seeding...")
    await session.execute(
        delete(Booking).where(or_(Booking.renter_id.in_(user_ids), Booking.host_id.in_(user_ids)))
    )
    await session.execute(delete(Property).where(Property.host_id.in_(user_ids)))
    await session.execute(delete(User).where(User.id.in_(user_ids)))
    await session.flush()


def _make_user(data: dict) -> User:
    return User(
        email=data["email"],
        hashed_password=hash_password(data["password"]),
        name=data["name"],
        role=data["role"],
        auth_provider="local",
        is_active=True,
    )


# ---------------------------------------------------------------------------
# Main seed function
# ---------------------------------------------------------------------------


async def seed() -> None:
    """Populate the database with demo data. Safe to run repeatedly."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with async_session_factory() as session:
        await _reset_demo_users(session)

        host = _make_user(DEMO_HOST)
        renter = _make_user(DEMO_RENTER)
        session.add_all([host, renter])
        await session.flush()
        print(f"✅ Created host {host.email} and renter {renter.email}")

        created_properties: list[Property] = []
        for prop_data in PROPERTIES:
            prop = Property(host_id=host.id, **prop_data)
            session.add(prop)
            await session.flush()
            created_properties.append(prop)
            print(f"   🏠 {prop.title} — {prop.location} (${prop.price_per_night}/night)")

        booking_engine = BookingEngine(SqlBookingStore(session), SqlPropertyAccessor(session))
        renter_actor = Actor(id=renter.id, role="renter")
        host_actor = Actor(id=host.id, role="host")
        today = date.today()

        for index, offset, nights, guests, final_status in BOOKINGS:
            check_in = today + timedelta(days=offset)
            booking = await booking_engine.create_booking(
                renter_actor,
                BookingRequest(
                    property_id=created_properties[index].id,
                    check_in=check_in,
                    check_out=check_in + timedelta(days=nights),
                    num_guests=guests,
                ),
            )
            if final_status in ("confirmed", "completed"):
                booking = await booking_engine.transition(host_actor, booking.id, "confirmed")
            if final_status == "completed":
                booking = await booking_engine.transition(host_actor, booking.id, "completed")
            if final_status == "canceled":
                booking = await booking_engine.cancel(renter_actor, booking.id, "Plans changed")
            print(f"   📅 {check_in} +{nights}n → {booking.status} (${booking.total_price})")

        await session.commit()

    print()
    print("=" * 60)
    print("📊 Seed Summary")
    print("=" * 60)
    print(f"   Host:       {DEMO_HOST['email']} / {DEMO_HOST['password']}")
    print(f"   Renter:     {DEMO_RENTER['email']} / {DEMO_RENTER['password']}")
    print(f"   Properties: {len(PROPERTIES)}")
    print(f"   Bookings:   {len(BOOKINGS)}")
    print("=" * 60)
    print("🎉 Done! You can now log in at /api/v1/auth/login")


if __name__ == "__main__":
    asyncio.run(seed())
