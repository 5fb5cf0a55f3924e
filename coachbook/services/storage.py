from datetime import UTC, datetime
from typing import Any

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from coachbook.core.exceptions import NotFound
from coachbook.models.appointment import AppointmentPrivate
from coachbook.models.availability import AvailabilitySlot, AvailabilityStatus
from coachbook.models.coach import Coach


def _naive_utc(dt: datetime) -> datetime:
    """Convert to naive UTC for TIMESTAMP WITHOUT TIME ZONE columns."""
    if dt.tzinfo is not None:
        return dt.astimezone(UTC).replace(tzinfo=None)
    return dt


def _column_values(fields: dict[str, Any]) -> dict[str, Any]:
    return {k: _naive_utc(v) if isinstance(v, datetime) else v for k, v in fields.items()}


class SqlScheduleStorage:
    """ScheduleStorage over the SQLModel tables.

    Every call opens its own session so the merger can run the availability
    and appointment queries concurrently.
    """

    def __init__(self, session_maker: async_sessionmaker[AsyncSession]) -> None:
        self._session_maker = session_maker

    async def query_availability(
        self, coach_id: int, status: AvailabilityStatus | None = None
    ) -> list[AvailabilitySlot]:
        q = (
            select(AvailabilitySlot)
            .where(AvailabilitySlot.coach_id == coach_id)
            .order_by(AvailabilitySlot.start_time, AvailabilitySlot.id)
        )
        if status is not None:
            q = q.where(AvailabilitySlot.status == status.value)
        async with self._session_maker() as session:
            result = await session.execute(q)
            return list(result.scalars().all())

    async def query_appointments(self, coach_id: int) -> list[AppointmentPrivate]:
        q = (
            select(AppointmentPrivate)
            .where(AppointmentPrivate.coach_id == coach_id)
            .order_by(AppointmentPrivate.start_time, AppointmentPrivate.id)
        )
        async with self._session_maker() as session:
            result = await session.execute(q)
            return list(result.scalars().all())

    async def get_availability(self, slot_id: int) -> AvailabilitySlot | None:
        async with self._session_maker() as session:
            return await session.get(AvailabilitySlot, slot_id)

    async def get_appointment(self, appointment_id: int) -> AppointmentPrivate | None:
        async with self._session_maker() as session:
            return await session.get(AppointmentPrivate, appointment_id)

    async def _insert(self, row: AvailabilitySlot | AppointmentPrivate):
        row.start_time = _naive_utc(row.start_time)
        row.end_time = _naive_utc(row.end_time)
        async with self._session_maker() as session:
            session.add(row)
            await session.commit()
            await session.refresh(row)
            return row

    async def insert_availability(self, row: AvailabilitySlot) -> AvailabilitySlot:
        return await self._insert(row)

    async def insert_appointment(self, row: AppointmentPrivate) -> AppointmentPrivate:
        return await self._insert(row)

    async def _update(self, model: type, row_id: int, fields: dict[str, Any]) -> None:
        async with self._session_maker() as session:
            row = await session.get(model, row_id)
            if row is None:
                raise NotFound(f"{model.__tablename__} row {row_id} not found")
            for key, value in _column_values(fields).items():
                setattr(row, key, value)
            session.add(row)
            await session.commit()

    async def update_availability(self, slot_id: int, fields: dict[str, Any]) -> None:
        await self._update(AvailabilitySlot, slot_id, fields)

    async def update_appointment(self, appointment_id: int, fields: dict[str, Any]) -> None:
        await self._update(AppointmentPrivate, appointment_id, fields)

    async def _delete(self, model: type, row_id: int) -> None:
        async with self._session_maker() as session:
            await session.execute(delete(model).where(model.id == row_id))
            await session.commit()

    async def delete_availability(self, slot_id: int) -> None:
        await self._delete(AvailabilitySlot, slot_id)

    async def delete_appointment(self, appointment_id: int) -> None:
        await self._delete(AppointmentPrivate, appointment_id)

    async def resolve_coach_by_slug(self, slug: str) -> Coach | None:
        async with self._session_maker() as session:
            result = await session.execute(select(Coach).where(Coach.slug == slug))
            return result.scalar_one_or_none()
