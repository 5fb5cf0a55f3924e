from datetime import UTC, date, datetime

import pytest

from coachbook.core.exceptions import InvalidInterval, MutationFailed, NotFound, Unauthorized
from coachbook.models.availability import AvailabilityStatus
from coachbook.scheduling.slots import SlotKind, SourceKind
from coachbook.scheduling.viewer import Viewer, ViewerRole
from coachbook.services.schedule_service import (
    ScheduleService,
    SlotChanges,
    interval_instants,
    status_for_kind,
)
from tests.factories import InMemoryStorage, appointment_row, availability_row

DAY = date(2024, 3, 10)

CALENDAR = "\r\n".join(
    [
        "BEGIN:VCALENDAR",
        "BEGIN:VEVENT",
        "SUMMARY:Imported One",
        "DTSTART:20240312T170000Z",
        "DTEND:20240312T180000Z",
        "END:VEVENT",
        "BEGIN:VEVENT",
        "SUMMARY:Broken",
        "DTSTART:20240312T190000Z",
        "END:VEVENT",
        "END:VCALENDAR",
    ]
)


def test_interval_instants():
    start, end = interval_instants(DAY, 9.0, 10.5)
    assert start == datetime(2024, 3, 10, 17, 0, tzinfo=UTC)
    assert end == datetime(2024, 3, 10, 18, 30, tzinfo=UTC)


@pytest.mark.parametrize("start, end", [(10.0, 10.0), (11.0, 9.0), (-1.0, 2.0), (23.0, 25.0)])
def test_interval_instants_rejects_bad_ranges(start, end):
    with pytest.raises(InvalidInterval):
        interval_instants(DAY, start, end)


def test_slot_changes_default_to_no_change():
    changes = SlotChanges()
    assert changes.date is None
    assert changes.kind is None
    assert SlotChanges(date=DAY).date == DAY


def test_status_for_kind():
    assert status_for_kind(SlotKind.AVAILABLE) is AvailabilityStatus.OPEN
    assert status_for_kind(SlotKind.BLOCKED) is AvailabilityStatus.CLOSED
    with pytest.raises(ValueError):
        status_for_kind(SlotKind.BOOKED)


@pytest.mark.anyio
class TestAuthorization:
    async def test_public_viewer_cannot_create(self, storage, coach, public_viewer):
        service = ScheduleService(storage)
        with pytest.raises(Unauthorized):
            await service.create_appointment(public_viewer, coach, DAY, 9.0, 10.0, client_name="X")
        with pytest.raises(Unauthorized):
            await service.create_availability(public_viewer, coach, DAY, 9.0, 10.0)
        assert storage.calls == []

    async def test_owner_of_another_coach_cannot_mutate(self, storage, other_coach, coach_viewer):
        service = ScheduleService(storage)
        with pytest.raises(Unauthorized):
            await service.delete_slot(coach_viewer, other_coach, SourceKind.AVAILABILITY, 3)
        with pytest.raises(Unauthorized):
            await service.import_ics(coach_viewer, other_coach, CALENDAR)
        with pytest.raises(Unauthorized):
            await service.remove_duplicates(coach_viewer, other_coach)
        assert storage.calls == []

    async def test_signed_in_role_without_matching_user_is_rejected(self, storage, coach):
        stranger = Viewer(ViewerRole.AUTHENTICATED_COACH, 999)
        with pytest.raises(Unauthorized):
            await ScheduleService(storage).create_availability(stranger, coach, DAY, 9.0, 10.0)

    async def test_invalid_interval_is_rejected_before_storage(self, storage, coach, coach_viewer):
        with pytest.raises(InvalidInterval):
            await ScheduleService(storage).create_appointment(coach_viewer, coach, DAY, 10.0, 9.0)
        assert storage.calls == []

    async def test_row_of_another_coach_cannot_be_touched(self, storage, coach, coach_viewer):
        # availability 3 belongs to coach "sam"
        with pytest.raises(Unauthorized):
            await ScheduleService(storage).delete_slot(coach_viewer, coach, SourceKind.AVAILABILITY, 3)
        assert "delete_availability" not in storage.calls


@pytest.mark.anyio
class TestMutations:
    async def test_create_appointment(self, storage, coach, coach_viewer):
        schedule = await ScheduleService(storage).create_appointment(
            coach_viewer, coach, date(2024, 3, 11), 14.0, 15.5, client_name="John", location="Online"
        )
        created = next(s for s in schedule.slots if s.id == 1000)
        assert created.kind is SlotKind.BOOKED
        assert (created.date, created.start_time, created.end_time) == (date(2024, 3, 11), 14.0, 15.5)
        assert created.client_name == "John"
        assert storage.appointments[-1].notes == ""

    async def test_create_blocked_availability(self, storage, coach, coach_viewer):
        schedule = await ScheduleService(storage).create_availability(
            coach_viewer, coach, DAY, 15.0, 16.0, status=AvailabilityStatus.CLOSED
        )
        created = next(s for s in schedule.slots if s.id == 1000)
        assert created.kind is SlotKind.BLOCKED
        assert storage.availability[-1].start_time == datetime(2024, 3, 10, 23, 0, tzinfo=UTC)

    async def test_update_availability_times_and_kind(self, storage, coach, coach_viewer):
        schedule = await ScheduleService(storage).update_slot(
            coach_viewer,
            coach,
            SourceKind.AVAILABILITY,
            1,
            SlotChanges(end_time=11.0, kind=SlotKind.BLOCKED),
        )
        updated = next(s for s in schedule.slots if s.source_kind is SourceKind.AVAILABILITY and s.id == 1)
        assert (updated.start_time, updated.end_time) == (9.0, 11.0)
        assert updated.kind is SlotKind.BLOCKED

    async def test_update_appointment_moves_date_and_keeps_unset_fields(self, storage, coach, coach_viewer):
        schedule = await ScheduleService(storage).update_slot(
            coach_viewer,
            coach,
            SourceKind.APPOINTMENT,
            1,
            SlotChanges(date=date(2024, 3, 12), notes="Moved"),
        )
        moved = next(s for s in schedule.slots if s.source_kind is SourceKind.APPOINTMENT)
        assert (moved.date, moved.start_time, moved.end_time) == (date(2024, 3, 12), 9.5, 10.5)
        assert (moved.client_name, moved.location, moved.notes) == ("Jane Doe", "Studio B", "Moved")

    async def test_update_that_empties_the_interval_is_rejected(self, storage, coach, coach_viewer):
        with pytest.raises(InvalidInterval):
            await ScheduleService(storage).update_slot(
                coach_viewer, coach, SourceKind.AVAILABILITY, 1, SlotChanges(start_time=10.0)
            )
        assert "update_availability" not in storage.calls

    async def test_appointment_kind_cannot_change(self, storage, coach, coach_viewer):
        with pytest.raises(InvalidInterval):
            await ScheduleService(storage).update_slot(
                coach_viewer, coach, SourceKind.APPOINTMENT, 1, SlotChanges(kind=SlotKind.BLOCKED)
            )
        assert storage.calls == []

    async def test_update_missing_slot(self, storage, coach, coach_viewer):
        with pytest.raises(NotFound):
            await ScheduleService(storage).update_slot(
                coach_viewer, coach, SourceKind.APPOINTMENT, 404, SlotChanges(notes="x")
            )

    async def test_delete_slot(self, storage, coach, coach_viewer):
        schedule = await ScheduleService(storage).delete_slot(
            coach_viewer, coach, SourceKind.APPOINTMENT, 1
        )
        assert all(s.source_kind is SourceKind.AVAILABILITY for s in schedule.slots)
        assert storage.appointments == []

    async def test_storage_write_failure_is_mutation_failed(self, storage, coach, coach_viewer):
        storage.failing = {"insert_availability"}
        with pytest.raises(MutationFailed):
            await ScheduleService(storage).create_availability(coach_viewer, coach, DAY, 15.0, 16.0)
        assert "query_availability" not in storage.calls

    async def test_schedule_for_viewer(self, storage, coach, public_viewer):
        schedule = await ScheduleService(storage).schedule_for(coach, public_viewer)
        assert [s.id for s in schedule.slots] == [1]


@pytest.mark.anyio
class TestImportAndDedupe:
    async def test_import_stores_parsed_events(self, storage, coach, coach_viewer):
        schedule, result = await ScheduleService(storage).import_ics(coach_viewer, coach, CALENDAR)

        assert len(result) == 1
        assert result.skipped == 1
        assert storage.calls.count("insert_appointment") == 1
        imported = [s for s in schedule.slots if s.date == date(2024, 3, 12)]
        assert len(imported) == 1
        assert imported[0].client_name == "Imported One"
        assert imported[0].notes == "Imported from calendar"

    async def test_importing_twice_keeps_duplicates_until_removed(self, storage, coach, coach_viewer):
        service = ScheduleService(storage)
        await service.import_ics(coach_viewer, coach, CALENDAR)
        schedule, _ = await service.import_ics(coach_viewer, coach, CALENDAR)
        assert len([s for s in schedule.slots if s.date == date(2024, 3, 12)]) == 2

        schedule, removed = await service.remove_duplicates(coach_viewer, coach)

        assert removed == 1
        assert len([s for s in schedule.slots if s.date == date(2024, 3, 12)]) == 1
        assert storage.calls.count("delete_appointment") == 1

    async def test_remove_duplicates_ignores_location(self, storage, coach, coach_viewer):
        storage.appointments.append(
            appointment_row(2, "2024-03-10T17:30:00Z", "2024-03-10T18:30:00Z", location="Elsewhere")
        )
        schedule, removed = await ScheduleService(storage).remove_duplicates(coach_viewer, coach)
        assert removed == 1
        assert [s.id for s in schedule.slots if s.source_kind is SourceKind.APPOINTMENT] == [1]

    async def test_nothing_to_remove(self, storage, coach, coach_viewer):
        schedule, removed = await ScheduleService(storage).remove_duplicates(coach_viewer, coach)
        assert removed == 0
        assert len(schedule) == 3
        assert storage.calls.count("query_availability") == 1

    async def test_appointment_matching_an_availability_slot_is_kept(self, storage, coach, coach_viewer):
        storage.availability.append(availability_row(5, "2024-03-11T17:00:00Z", "2024-03-11T18:00:00Z"))
        storage.appointments.append(
            appointment_row(9, "2024-03-11T17:00:00Z", "2024-03-11T18:00:00Z", client_name=None)
        )
        schedule, removed = await ScheduleService(storage).remove_duplicates(coach_viewer, coach)

        assert removed == 0
        assert [a.id for a in storage.appointments] == [1, 9]
        assert "delete_availability" not in storage.calls
        assert len(schedule) == 5

    async def test_open_and_blocked_slots_at_the_same_time_are_kept(self, storage, coach, coach_viewer):
        storage.availability.append(availability_row(5, "2024-03-11T17:00:00Z", "2024-03-11T18:00:00Z"))
        storage.availability.append(
            availability_row(6, "2024-03-11T17:00:00Z", "2024-03-11T18:00:00Z", status="closed")
        )
        _, removed = await ScheduleService(storage).remove_duplicates(coach_viewer, coach)
        assert removed == 0
        assert {a.id for a in storage.availability} >= {5, 6}

    async def test_repeated_availability_is_removed(self, storage, coach, coach_viewer):
        storage.availability.append(availability_row(5, "2024-03-10T17:00:00Z", "2024-03-10T18:00:00Z"))
        _, removed = await ScheduleService(storage).remove_duplicates(coach_viewer, coach)
        assert removed == 1
        assert 5 not in {a.id for a in storage.availability}

    async def test_failed_import_reports_events_already_stored(self, storage, coach, coach_viewer):
        class FlakyStorage(InMemoryStorage):
            async def insert_appointment(self, row):
                if self.calls.count("insert_appointment") >= 1:
                    self.calls.append("insert_appointment")
                    raise ConnectionError("connection reset")
                return await super().insert_appointment(row)

        flaky = FlakyStorage(storage.coaches, storage.availability, storage.appointments)
        calendar = CALENDAR.replace(
            "BEGIN:VEVENT\r\nSUMMARY:Broken\r\nDTSTART:20240312T190000Z\r\n",
            "BEGIN:VEVENT\r\nSUMMARY:Imported Two\r\nDTSTART:20240312T190000Z\r\n"
            "DTEND:20240312T200000Z\r\n",
        )

        with pytest.raises(MutationFailed) as caught:
            await ScheduleService(flaky).import_ics(coach_viewer, coach, calendar)

        assert caught.value.written == 1
        assert "after 1 of 2" in caught.value.detail
        assert [a.client_name for a in flaky.appointments] == ["Jane Doe", "Imported One"]
