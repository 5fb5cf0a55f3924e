"""Pull availability and appointment rows and merge them into one Schedule.

Public viewers only ever cause an open-availability query. The owning coach
gets both tables, fetched concurrently and merged into a single order that
depends only on the rows returned, never on which query finished first.
"""
import asyncio
import itertools
import logging

from coachbook.core.exceptions import InvalidInterval, RefreshFailed
from coachbook.models.appointment import AppointmentPrivate
from coachbook.models.availability import AvailabilitySlot, AvailabilityStatus
from coachbook.models.coach import Coach
from coachbook.scheduling.schedule import Schedule
from coachbook.scheduling.slots import Slot, public_view, slot_from_row
from coachbook.scheduling.storage import ScheduleStorage
from coachbook.scheduling.viewer import Viewer

logger = logging.getLogger(__name__)


class ScheduleMerger:
    def __init__(self, storage: ScheduleStorage) -> None:
        self._storage = storage
        self._generations = itertools.count(1)

    async def refresh(self, coach: Coach, viewer: Viewer) -> Schedule:
        """Fetch and merge ``coach``'s schedule as ``viewer`` may see it.

        Raises RefreshFailed when either query fails; a partial result is
        never returned.
        """
        generation = next(self._generations)
        include_private = viewer.can_manage(coach)
        try:
            if include_private:
                availability_rows, appointment_rows = await asyncio.gather(
                    self._storage.query_availability(coach.id),
                    self._storage.query_appointments(coach.id),
                )
            else:
                availability_rows = await self._storage.query_availability(
                    coach.id, AvailabilityStatus.OPEN
                )
                appointment_rows = []
        except Exception as e:
            logger.exception("Schedule refresh failed for coach %s", coach.id)
            raise RefreshFailed(f"Could not load schedule: {type(e).__name__}: {e}") from e

        if not include_private:
            availability_rows = [
                r for r in availability_rows if r.status == AvailabilityStatus.OPEN.value
            ]

        slots = self._to_slots([*availability_rows, *appointment_rows])
        if not include_private:
            slots = [public_view(s) for s in slots]
        slots.sort(key=lambda s: s.starts_at)
        return Schedule(
            coach_id=coach.id,
            slots=tuple(slots),
            include_private=include_private,
            generation=generation,
        )

    @staticmethod
    def _to_slots(rows: list[AvailabilitySlot | AppointmentPrivate]) -> list[Slot]:
        slots: list[Slot] = []
        for row in rows:
            try:
                slots.append(slot_from_row(row))
            except (InvalidInterval, ValueError) as e:
                logger.warning("Skipping %s row %s: %s", type(row).__name__, row.id, e)
        return slots


class ScheduleHolder:
    """Owns the newest schedule for one coach/viewer pair.

    Refreshes are stamped with a monotonic generation, and a result older than
    the one already held is discarded, so a slow refresh started before a fast
    one cannot overwrite the newer data.
    """

    def __init__(self, merger: ScheduleMerger, coach: Coach, viewer: Viewer) -> None:
        self._merger = merger
        self._coach = coach
        self._viewer = viewer
        self._current: Schedule | None = None

    @property
    def current(self) -> Schedule | None:
        return self._current

    def accept(self, schedule: Schedule) -> bool:
        if self._current is not None and schedule.generation <= self._current.generation:
            logger.debug(
                "Discarding schedule generation %d; holding %d",
                schedule.generation,
                self._current.generation,
            )
            return False
        self._current = schedule
        return True

    async def refresh(self) -> Schedule:
        """Refresh and return the newest accepted schedule."""
        schedule = await self._merger.refresh(self._coach, self._viewer)
        self.accept(schedule)
        return self._current

    async def refresh_or_cached(self) -> Schedule:
        """Like ``refresh``, but fall back to the last good schedule marked stale.

        Re-raises RefreshFailed when nothing has been loaded yet, so "could not
        determine" is never reported as "no slots".
        """
        try:
            return await self.refresh()
        except RefreshFailed:
            if self._current is None:
                raise
            logger.warning(
                "Serving stale schedule for coach %s (generation %d)",
                self._coach.id,
                self._current.generation,
            )
            return self._current.as_stale()
