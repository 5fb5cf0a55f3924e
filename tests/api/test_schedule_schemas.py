from datetime import date

from coachbook.api.schemas.schedule import ScheduleOut, SlotOut
from coachbook.models.coach import CoachPublic
from coachbook.scheduling.schedule import Schedule
from coachbook.scheduling.slots import Slot, SlotKind, SourceKind
from coachbook.scheduling.viewer import ViewerRole

COACH = CoachPublic(slug="alex", display_name="Alex Rivera")


def evening_slot() -> Slot:
    return Slot(
        id=7,
        source_kind=SourceKind.AVAILABILITY,
        date=date(2024, 3, 10),
        start_time=12.0,
        end_time=24.0,
        kind=SlotKind.AVAILABLE,
    )


def test_slot_labels_use_twelve_hour_clock():
    out = SlotOut.from_slot(evening_slot())
    assert (out.start, out.end) == ("12:00", "24:00")
    assert (out.start_label, out.end_label) == ("12:00 PM", "12:00 AM")


def test_stale_schedule_is_flagged():
    schedule = Schedule(coach_id=1, slots=(evening_slot(),), generation=4)

    fresh = ScheduleOut.of(COACH, ViewerRole.PUBLIC, schedule)
    cached = ScheduleOut.of(COACH, ViewerRole.PUBLIC, schedule.as_stale())

    assert fresh.stale is False
    assert cached.stale is True
    assert cached.model_dump()["generation"] == 4
