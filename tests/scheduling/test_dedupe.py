import itertools
from datetime import date

from coachbook.scheduling.dedupe import dedupe, duplicate_key, find_duplicates
from coachbook.scheduling.schedule import Schedule
from coachbook.scheduling.slots import Slot, SlotKind, SourceKind

DAY = date(2024, 3, 10)


def booked(id, start=9.0, end=10.0, client_name="Jane Doe", **fields) -> Slot:
    return Slot(
        id=id,
        source_kind=SourceKind.APPOINTMENT,
        date=DAY,
        start_time=start,
        end_time=end,
        kind=SlotKind.BOOKED,
        client_name=client_name,
        **fields,
    )


def test_first_occurrence_wins():
    first, second = booked(1), booked(2)
    assert dedupe([first, second]) == [first]
    assert find_duplicates([first, second]) == [second]


def test_location_and_notes_do_not_distinguish_slots():
    a = booked(1, location="Studio A", notes="x")
    b = booked(2, location="Studio B", notes="y")
    assert duplicate_key(a) == duplicate_key(b)
    assert dedupe([a, b]) == [a]


def test_different_client_or_time_is_kept():
    slots = [booked(1), booked(2, client_name="John"), booked(3, end=11.0), booked(4, client_name=None)]
    assert dedupe(slots) == slots
    assert find_duplicates(slots) == []


def test_order_of_survivors_is_preserved():
    a, b, c, a2, b2 = booked(1), booked(2, start=11.0, end=12.0), booked(3, start=8.0), booked(4), booked(5, start=11.0, end=12.0)
    assert dedupe([a, b, c, a2, b2]) == [a, b, c]
    assert find_duplicates([a, b, c, a2, b2]) == [a2, b2]


def test_schedule_extended_keeps_duplicates_until_deduped():
    schedule = Schedule(coach_id=1, slots=(booked(1),), generation=3)
    extended = schedule.extended([booked(2)])
    assert len(schedule) == 1
    assert len(extended) == 2
    deduped = extended.deduped()
    assert [s.id for s in deduped.slots] == [1]
    assert deduped.generation == 3


def test_dedupe_is_idempotent_and_never_grows():
    mixed = [
        booked(1),
        booked(2, location="Elsewhere"),
        booked(3, client_name=None),
        booked(4, start=10.0, end=11.0),
        booked(5, client_name=None),
        booked(6, start=10.0, end=11.0, notes="again"),
    ]
    for order in itertools.permutations(mixed):
        once = dedupe(order)
        assert dedupe(once) == once
        assert len(once) <= len(order)
        assert find_duplicates(once) == []
        assert len(once) == 3
