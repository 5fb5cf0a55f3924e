"""Coach-only schedule mutations.

Every write is checked here before storage is touched: the viewer must be the
signed-in owner of the coach, the interval must be valid, and the target
record must belong to that coach. After a write the schedule is pulled again
and returned; a held Schedule is never patched in place.
"""
import datetime as dt
import logging
from collections.abc import Awaitable
from dataclasses import dataclass
from typing import Any, TypeVar

from coachbook.core.exceptions import (
    InvalidInterval,
    MutationFailed,
    NotFound,
    SchedulingError,
    Unauthorized,
)
from coachbook.models.appointment import AppointmentPrivate
from coachbook.models.availability import AvailabilitySlot, AvailabilityStatus
from coachbook.models.coach import Coach
from coachbook.scheduling.dedupe import find_duplicates
from coachbook.scheduling.ics_import import IcsImportResult, parse
from coachbook.scheduling.merger import ScheduleMerger
from coachbook.scheduling.schedule import Schedule
from coachbook.scheduling.slots import Slot, SlotKind, SourceKind, slot_from_row
from coachbook.scheduling.storage import ScheduleStorage
from coachbook.scheduling.time_normalizer import to_instant
from coachbook.scheduling.viewer import Viewer

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class SlotChanges:
    """Fields to change on an existing slot. ``None`` leaves a field as it is."""

    date: dt.date | None = None
    start_time: float | None = None
    end_time: float | None = None
    kind: SlotKind | None = None
    client_name: str | None = None
    location: str | None = None
    notes: str | None = None


def status_for_kind(kind: SlotKind) -> AvailabilityStatus:
    if kind is SlotKind.AVAILABLE:
        return AvailabilityStatus.OPEN
    if kind is SlotKind.BLOCKED:
        return AvailabilityStatus.CLOSED
    raise ValueError("Availability slots can only be available or blocked")


def interval_instants(day: dt.date, start_time: float, end_time: float) -> tuple[dt.datetime, dt.datetime]:
    """UTC instant pair for a civil interval, rejecting empty or out-of-day ranges."""
    if not 0 <= start_time < 24 or not 0 < end_time <= 24:
        raise InvalidInterval("Times must fall within the day.")
    if end_time <= start_time:
        raise InvalidInterval("End time must be after start time.")
    return to_instant(day, start_time), to_instant(day, end_time)


class ScheduleService:
    def __init__(self, storage: ScheduleStorage, merger: ScheduleMerger | None = None) -> None:
        self._storage = storage
        self._merger = merger or ScheduleMerger(storage)

    async def schedule_for(self, coach: Coach, viewer: Viewer) -> Schedule:
        return await self._merger.refresh(coach, viewer)

    @staticmethod
    def _authorize(viewer: Viewer, coach: Coach) -> None:
        if not viewer.can_manage(coach):
            raise Unauthorized("Coach login required")

    @staticmethod
    async def _write(action: str, call: Awaitable[T]) -> T:
        try:
            return await call
        except SchedulingError:
            raise
        except Exception as e:
            logger.exception("%s failed: %s", action, e)
            raise MutationFailed(f"{action} failed: {type(e).__name__}: {e}") from e

    async def _owned_row(
        self, coach: Coach, source_kind: SourceKind, slot_id: int
    ) -> AvailabilitySlot | AppointmentPrivate:
        if source_kind is SourceKind.AVAILABILITY:
            row = await self._write("Load availability", self._storage.get_availability(slot_id))
        else:
            row = await self._write("Load appointment", self._storage.get_appointment(slot_id))
        if row is None:
            raise NotFound(f"{source_kind.value.capitalize()} {slot_id} not found")
        if row.coach_id != coach.id:
            raise Unauthorized("This slot belongs to another coach")
        return row

    async def create_appointment(
        self,
        viewer: Viewer,
        coach: Coach,
        day: dt.date,
        start_time: float,
        end_time: float,
        client_name: str | None = None,
        location: str | None = None,
        notes: str | None = None,
    ) -> Schedule:
        self._authorize(viewer, coach)
        start_at, end_at = interval_instants(day, start_time, end_time)
        row = AppointmentPrivate(
            coach_id=coach.id,
            start_time=start_at,
            end_time=end_at,
            client_name=client_name or None,
            location=location or None,
            notes=notes or "",
        )
        created = await self._write("Create appointment", self._storage.insert_appointment(row))
        logger.info("Created appointment %s for coach %s on %s", created.id, coach.id, day)
        return await self._merger.refresh(coach, viewer)

    async def create_availability(
        self,
        viewer: Viewer,
        coach: Coach,
        day: dt.date,
        start_time: float,
        end_time: float,
        status: AvailabilityStatus = AvailabilityStatus.OPEN,
    ) -> Schedule:
        self._authorize(viewer, coach)
        start_at, end_at = interval_instants(day, start_time, end_time)
        row = AvailabilitySlot(
            coach_id=coach.id,
            start_time=start_at,
            end_time=end_at,
            status=status.value,
        )
        created = await self._write("Create availability", self._storage.insert_availability(row))
        logger.info("Created availability %s for coach %s on %s", created.id, coach.id, day)
        return await self._merger.refresh(coach, viewer)

    async def update_slot(
        self,
        viewer: Viewer,
        coach: Coach,
        source_kind: SourceKind,
        slot_id: int,
        changes: SlotChanges,
    ) -> Schedule:
        self._authorize(viewer, coach)
        if source_kind is SourceKind.APPOINTMENT and changes.kind is not None:
            raise InvalidInterval("Appointments are always booked; kind cannot be changed")
        row = await self._owned_row(coach, source_kind, slot_id)
        current = slot_from_row(row)

        day = changes.date or current.date
        start_time = current.start_time if changes.start_time is None else changes.start_time
        end_time = current.end_time if changes.end_time is None else changes.end_time
        start_at, end_at = interval_instants(day, start_time, end_time)
        fields: dict[str, Any] = {"start_time": start_at, "end_time": end_at}

        if source_kind is SourceKind.AVAILABILITY:
            if changes.kind is not None:
                fields["status"] = status_for_kind(changes.kind).value
            await self._write("Update availability", self._storage.update_availability(slot_id, fields))
        else:
            for name in ("client_name", "location", "notes"):
                value = getattr(changes, name)
                if value is not None:
                    fields[name] = value
            await self._write("Update appointment", self._storage.update_appointment(slot_id, fields))

        return await self._merger.refresh(coach, viewer)

    async def delete_slot(
        self, viewer: Viewer, coach: Coach, source_kind: SourceKind, slot_id: int
    ) -> Schedule:
        self._authorize(viewer, coach)
        await self._owned_row(coach, source_kind, slot_id)
        await self._delete(source_kind, slot_id)
        return await self._merger.refresh(coach, viewer)

    async def _delete(self, source_kind: SourceKind, slot_id: int) -> None:
        if source_kind is SourceKind.AVAILABILITY:
            await self._write("Delete availability", self._storage.delete_availability(slot_id))
        else:
            await self._write("Delete appointment", self._storage.delete_appointment(slot_id))

    async def import_ics(
        self, viewer: Viewer, coach: Coach, ics_text: str
    ) -> tuple[Schedule, IcsImportResult]:
        """Store every parsed event as an appointment. Imported events are not deduped.

        Events are written one by one; if a write fails, MutationFailed carries
        how many events were already stored.
        """
        self._authorize(viewer, coach)
        result = parse(ics_text)
        rows = []
        for slot in result:
            start_at, end_at = interval_instants(slot.date, slot.start_time, slot.end_time)
            rows.append(
                AppointmentPrivate(
                    coach_id=coach.id,
                    start_time=start_at,
                    end_time=end_at,
                    client_name=slot.client_name,
                    notes=slot.notes,
                )
            )
        for written, row in enumerate(rows):
            try:
                await self._write("Import appointment", self._storage.insert_appointment(row))
            except MutationFailed as e:
                raise MutationFailed(
                    f"Import stopped after {written} of {len(rows)} event(s): {e.detail}",
                    written=written,
                ) from e
        logger.info(
            "Imported %d calendar event(s) for coach %s (%d skipped)",
            len(result),
            coach.id,
            result.skipped,
        )
        return await self._merger.refresh(coach, viewer), result

    async def remove_duplicates(self, viewer: Viewer, coach: Coach) -> tuple[Schedule, int]:
        """Delete records that repeat an earlier (date, start, end, client name).

        Records are only compared with others of the same table and kind, so an
        appointment never goes because an availability slot matched it, nor a
        blocked slot because of an open one.
        """
        self._authorize(viewer, coach)
        schedule = await self._merger.refresh(coach, viewer)
        groups: dict[tuple[SourceKind, SlotKind], list[Slot]] = {}
        for slot in schedule.slots:
            groups.setdefault((slot.source_kind, slot.kind), []).append(slot)
        dropped = [slot for group in groups.values() for slot in find_duplicates(group)]
        if not dropped:
            return schedule, 0
        for removed, slot in enumerate(dropped):
            try:
                await self._delete(slot.source_kind, slot.id)
            except MutationFailed as e:
                raise MutationFailed(
                    f"Dedupe stopped after {removed} of {len(dropped)} record(s): {e.detail}",
                    written=removed,
                ) from e
        logger.info("Removed %d duplicate slot(s) for coach %s", len(dropped), coach.id)
        return await self._merger.refresh(coach, viewer), len(dropped)
