from coachbook.models.user import User, UserPublic
from coachbook.models.refresh_token import RefreshToken
from coachbook.models.coach import Coach, CoachPublic
from coachbook.models.availability import AvailabilitySlot, AvailabilityStatus
from coachbook.models.appointment import AppointmentPrivate

__all__ = [
    "User",
    "UserPublic",
    "RefreshToken",
    "Coach",
    "CoachPublic",
    "AvailabilitySlot",
    "AvailabilityStatus",
    "AppointmentPrivate",
]
