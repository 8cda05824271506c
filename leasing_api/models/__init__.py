"""Expose ORM models."""
from .booking import Booking, BookingStatus
from .community import Community
from .pet_policy import PetPolicy
from .pricing import Pricing
from .request_log import RequestLog
from .tour_slot import TourSlot
from .unit import Unit

__all__ = [
    "Booking",
    "BookingStatus",
    "Community",
    "PetPolicy",
    "Pricing",
    "RequestLog",
    "TourSlot",
    "Unit",
]
