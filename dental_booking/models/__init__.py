from dental_booking.models.user import User, UserCreate, UserPublic
from dental_booking.models.booking import Booking, BookingCreate, BookingPublic
from dental_booking.models.blocked_date import BlockedDate, BlockedDatePublic

__all__ = [
    "User",
    "UserCreate",
    "UserPublic",
    "Booking",
    "BookingCreate",
    "BookingPublic",
    "BlockedDate",
    "BlockedDatePublic",
]
