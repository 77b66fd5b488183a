"""SQLAlchemy models for StayHub.

All models are imported here so that ``Base.metadata`` knows every table and
string-based relationships resolve. If you add a new model, import it in this file.
"""

from app.models.booking import Booking
from app.models.property import Property
from app.models.user import User

__all__ = [
    "Booking",
    "Property",
    "User",
]
