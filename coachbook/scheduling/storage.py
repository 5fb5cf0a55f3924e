from typing import Any, Protocol

from coachbook.models.appointment import AppointmentPrivate
from coachbook.models.availability import AvailabilitySlot, AvailabilityStatus
from coachbook.models.coach import Coach


class ScheduleStorage(Protocol):
    """Row store the engine pulls from and writes through.

    Timestamps on rows are UTC instants; the engine never reads any other
    timezone from storage.
    """

    async def query_availability(
        self, coach_id: int, status: AvailabilityStatus | None = None
    ) -> list[AvailabilitySlot]: ...

    async def query_appointments(self, coach_id: int) -> list[AppointmentPrivate]: ...

    async def get_availability(self, slot_id: int) -> AvailabilitySlot | None: ...

    async def get_appointment(self, appointment_id: int) -> AppointmentPrivate | None: ...

    async def insert_availability(self, row: AvailabilitySlot) -> AvailabilitySlot: ...

    async def insert_appointment(self, row: AppointmentPrivate) -> AppointmentPrivate: ...

    async def update_availability(self, slot_id: int, fields: dict[str, Any]) -> None: ...

    async def update_appointment(self, appointment_id: int, fields: dict[str, Any]) -> None: ...

    async def delete_availability(self, slot_id: int) -> None: ...

    async def delete_appointment(self, appointment_id: int) -> None: ...

    async def resolve_coach_by_slug(self, slug: str) -> Coach | None: ...
