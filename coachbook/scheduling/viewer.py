from dataclasses import dataclass
from enum import Enum

from coachbook.models.coach import Coach


class ViewerRole(str, Enum):
    PUBLIC = "public"
    AUTHENTICATED_COACH = "authenticated_coach"


@dataclass(frozen=True)
class Viewer:
    role: ViewerRole
    user_id: int | None = None

    def can_manage(self, coach: Coach) -> bool:
        """True only for the signed-in user that owns ``coach``."""
        return (
            self.role is ViewerRole.AUTHENTICATED_COACH
            and self.user_id is not None
            and self.user_id == coach.user_id
        )


PUBLIC_VIEWER = Viewer(ViewerRole.PUBLIC)


def resolve_viewer(user_id: int | None, coach: Coach) -> Viewer:
    """Coach role when the session user owns the coach page, public otherwise."""
    if user_id is not None and user_id == coach.user_id:
        return Viewer(ViewerRole.AUTHENTICATED_COACH, user_id)
    return PUBLIC_VIEWER
