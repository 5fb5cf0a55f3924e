from datetime import date

from coachbook.scheduling.slots import Slot

DuplicateKey = tuple[date, float, float, str | None]


def duplicate_key(slot: Slot) -> DuplicateKey:
    # Location and notes are deliberately not part of the key
    return (slot.date, slot.start_time, slot.end_time, slot.client_name)


def find_duplicates(slots: list[Slot] | tuple[Slot, ...]) -> list[Slot]:
    """Slots that repeat an earlier slot's key, in input order."""
    seen: set[DuplicateKey] = set()
    dropped: list[Slot] = []
    for slot in slots:
        key = duplicate_key(slot)
        if key in seen:
            dropped.append(slot)
        else:
            seen.add(key)
    return dropped


def dedupe(slots: list[Slot] | tuple[Slot, ...]) -> list[Slot]:
    """Keep the first slot for every (date, start, end, client name), preserving order."""
    seen: set[DuplicateKey] = set()
    kept: list[Slot] = []
    for slot in slots:
        key = duplicate_key(slot)
        if key not in seen:
            seen.add(key)
            kept.append(slot)
    return kept
