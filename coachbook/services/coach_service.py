import logging

from coachbook.core.exceptions import NotFound
from coachbook.models.coach import Coach, CoachPublic
from coachbook.scheduling.storage import ScheduleStorage

logger = logging.getLogger(__name__)


def normalize_slug(slug: str) -> str:
    return slug.strip().lower()


async def get_coach_by_slug(storage: ScheduleStorage, slug: str) -> Coach:
    """Resolve a coach page slug. Unknown slugs and lookup errors are both NotFound."""
    key = normalize_slug(slug)
    if not key:
        raise NotFound("Coach not found")
    try:
        coach = await storage.resolve_coach_by_slug(key)
    except Exception as e:
        logger.exception("Coach lookup failed for slug %r: %s", key, e)
        raise NotFound("Coach not found") from e
    if coach is None:
        raise NotFound("Coach not found")
    return coach


def coach_to_public(coach: Coach) -> CoachPublic:
    return CoachPublic(
        slug=coach.slug,
        display_name=coach.display_name,
        public_note=coach.public_note,
    )
