import datetime as dt
from typing import Annotated

from pydantic import AfterValidator, BaseModel, field_validator

from coachbook.models.availability import AvailabilityStatus
from coachbook.models.coach import CoachPublic
from coachbook.scheduling.schedule import Schedule
from coachbook.scheduling.slots import Slot, SlotKind, SourceKind
from coachbook.scheduling.time_normalizer import (
    DISPLAY_TZ_LABEL,
    clock_to_decimal_hour,
    format_clock_12h,
)
from coachbook.scheduling.viewer import ViewerRole


def _check_clock(value: str) -> str:
    clock_to_decimal_hour(value)
    return value


Clock = Annotated[str, AfterValidator(_check_clock)]


class SlotOut(BaseModel):
    id: int | str
    source_kind: SourceKind
    kind: SlotKind
    date: dt.date
    start: str  # HH:MM, display timezone
    end: str
    start_time: float
    end_time: float
    start_label: str  # "9:30 AM"
    end_label: str
    client_name: str | None = None
    client_phone: str | None = None
    client_email: str | None = None
    location: str | None = None
    notes: str | None = None

    @classmethod
    def from_slot(cls, slot: Slot) -> "SlotOut":
        return cls(
            id=slot.id,
            source_kind=slot.source_kind,
            kind=slot.kind,
            date=slot.date,
            start=slot.start_clock,
            end=slot.end_clock,
            start_time=slot.start_time,
            end_time=slot.end_time,
            start_label=format_clock_12h(slot.start_time),
            end_label=format_clock_12h(slot.end_time),
            client_name=slot.client_name,
            client_phone=slot.client_phone,
            client_email=slot.client_email,
            location=slot.location,
            notes=slot.notes,
        )


class ScheduleOut(BaseModel):
    coach: CoachPublic
    viewer_role: ViewerRole
    timezone: str = DISPLAY_TZ_LABEL
    generation: int
    stale: bool = False  # last refresh failed; slots are from the previous pull
    slots: list[SlotOut]

    @classmethod
    def of(cls, coach: CoachPublic, viewer_role: ViewerRole, schedule: Schedule) -> "ScheduleOut":
        return cls(
            coach=coach,
            viewer_role=viewer_role,
            generation=schedule.generation,
            stale=schedule.stale,
            slots=[SlotOut.from_slot(s) for s in schedule.slots],
        )


class CalendarDay(BaseModel):
    date: dt.date
    in_month: bool
    is_today: bool
    slots: list[SlotOut]


class CalendarOut(BaseModel):
    coach: CoachPublic
    viewer_role: ViewerRole
    timezone: str = DISPLAY_TZ_LABEL
    year: int
    month: int
    previous_month: str  # YYYY-MM
    next_month: str
    upcoming_week_index: int
    weeks: list[list[CalendarDay]]


class OverlapOut(BaseModel):
    first: SlotOut
    second: SlotOut


class AppointmentCreateRequest(BaseModel):
    date: dt.date
    start: Clock = "09:00"
    end: Clock | None = None  # defaults to start + default_appointment_minutes
    client_name: str | None = None
    location: str | None = None
    notes: str | None = None


class AvailabilityCreateRequest(BaseModel):
    date: dt.date
    start: Clock
    end: Clock
    status: AvailabilityStatus = AvailabilityStatus.OPEN


class SlotUpdateRequest(BaseModel):
    date: dt.date | None = None
    start: Clock | None = None
    end: Clock | None = None
    kind: SlotKind | None = None
    client_name: str | None = None
    location: str | None = None
    notes: str | None = None

    @field_validator("kind")
    @classmethod
    def kind_settable(cls, value: SlotKind | None) -> SlotKind | None:
        if value is SlotKind.BOOKED:
            raise ValueError("kind can only be set to available or blocked")
        return value


class IcsImportRequest(BaseModel):
    ics_text: str


class ImportOut(BaseModel):
    imported: int
    skipped: int
    schedule: ScheduleOut


class DedupeOut(BaseModel):
    removed: int
    schedule: ScheduleOut
