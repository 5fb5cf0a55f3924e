"""The Slot value and the pure functions that classify, filter and order slots."""
from dataclasses import dataclass, replace
from datetime import date, datetime, timedelta
from enum import Enum
from itertools import combinations

from coachbook.core.exceptions import InvalidInterval
from coachbook.models.appointment import AppointmentPrivate
from coachbook.models.availability import AvailabilitySlot, AvailabilityStatus
from coachbook.scheduling.time_normalizer import (
    decimal_hour_to_clock,
    to_civil,
    to_instant,
)


class SourceKind(str, Enum):
    AVAILABILITY = "availability"
    APPOINTMENT = "appointment"


class SlotKind(str, Enum):
    AVAILABLE = "available"
    BLOCKED = "blocked"
    BOOKED = "booked"


@dataclass(frozen=True)
class Slot:
    id: int | str
    source_kind: SourceKind
    date: date
    start_time: float
    end_time: float
    kind: SlotKind
    client_name: str | None = None
    client_phone: str | None = None
    client_email: str | None = None
    location: str | None = None
    notes: str | None = None

    def __post_init__(self) -> None:
        if not 0 <= self.start_time < 24 or self.end_time > 24:
            raise InvalidInterval(
                f"Slot hours must lie within the day, got {self.start_time}-{self.end_time}"
            )
        if self.end_time <= self.start_time:
            raise InvalidInterval("End time must be after start time.")

    @property
    def start_clock(self) -> str:
        return decimal_hour_to_clock(self.start_time)

    @property
    def end_clock(self) -> str:
        return decimal_hour_to_clock(self.end_time)

    @property
    def starts_at(self) -> datetime:
        return to_instant(self.date, self.start_time)

    @property
    def ends_at(self) -> datetime:
        return to_instant(self.date, self.end_time)


def classify(source_kind: SourceKind, status_or_kind: str | None = None) -> SlotKind:
    """Availability rows are available/blocked by status; appointments are always booked."""
    if source_kind is SourceKind.APPOINTMENT:
        return SlotKind.BOOKED
    if status_or_kind == AvailabilityStatus.OPEN.value:
        return SlotKind.AVAILABLE
    if status_or_kind == AvailabilityStatus.CLOSED.value:
        return SlotKind.BLOCKED
    raise ValueError(f"Unknown availability status: {status_or_kind!r}")


def civil_end_hour(day: date, end_instant: datetime | str) -> float:
    """Decimal end hour relative to ``day``; midnight of the next day is 24."""
    end_day, end_hour = to_civil(end_instant)
    if end_day == day:
        return end_hour
    if end_day == day + timedelta(days=1) and end_hour == 0:
        return 24.0
    raise InvalidInterval(f"Slot must end on the day it starts ({day.isoformat()}).")


def slot_from_row(row: AvailabilitySlot | AppointmentPrivate) -> Slot:
    """Build a Slot from a storage row. The row's class decides the source kind."""
    if not isinstance(row, (AvailabilitySlot, AppointmentPrivate)):
        raise TypeError(f"Not a schedule row: {type(row).__name__}")
    day, start_time = to_civil(row.start_time)
    end_time = civil_end_hour(day, row.end_time)
    if isinstance(row, AvailabilitySlot):
        return Slot(
            id=row.id,
            source_kind=SourceKind.AVAILABILITY,
            date=day,
            start_time=start_time,
            end_time=end_time,
            kind=classify(SourceKind.AVAILABILITY, row.status),
        )
    return Slot(
        id=row.id,
        source_kind=SourceKind.APPOINTMENT,
        date=day,
        start_time=start_time,
        end_time=end_time,
        kind=classify(SourceKind.APPOINTMENT),
        client_name=row.client_name or None,
        location=row.location or None,
        notes=row.notes or None,
    )


def public_view(slot: Slot) -> Slot:
    """Copy of ``slot`` with every client-contact field cleared."""
    return replace(
        slot,
        client_name=None,
        client_phone=None,
        client_email=None,
        location=None,
        notes=None,
    )


def slots_on_date(slots: list[Slot] | tuple[Slot, ...], day: date) -> list[Slot]:
    # sorted() is stable: same-start slots keep their order across refreshes
    return sorted((s for s in slots if s.date == day), key=lambda s: s.start_time)


def overlaps(a: Slot, b: Slot) -> bool:
    """Half-open interval test on the same civil date. Touching slots do not overlap."""
    return a.date == b.date and a.start_time < b.end_time and b.start_time < a.end_time


def find_overlaps(slots: list[Slot] | tuple[Slot, ...]) -> list[tuple[Slot, Slot]]:
    """Every overlapping pair, grouped by date in first-seen order."""
    by_date: dict[date, list[Slot]] = {}
    for slot in slots:
        by_date.setdefault(slot.date, []).append(slot)
    pairs: list[tuple[Slot, Slot]] = []
    for day_slots in by_date.values():
        pairs.extend((a, b) for a, b in combinations(day_slots, 2) if overlaps(a, b))
    return pairs
