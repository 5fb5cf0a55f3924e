from dataclasses import dataclass, replace
from datetime import date

from coachbook.scheduling.dedupe import dedupe
from coachbook.scheduling.slots import Slot, find_overlaps, slots_on_date


@dataclass(frozen=True)
class Schedule:
    """One coach's slots as of a single refresh. Replaced, never edited."""

    coach_id: int
    slots: tuple[Slot, ...] = ()
    include_private: bool = False
    generation: int = 0
    stale: bool = False

    def on_date(self, day: date) -> list[Slot]:
        return slots_on_date(self.slots, day)

    def overlapping_pairs(self) -> list[tuple[Slot, Slot]]:
        return find_overlaps(self.slots)

    def extended(self, slots: list[Slot] | tuple[Slot, ...]) -> "Schedule":
        """Append ``slots`` as-is; duplicates are only removed by ``deduped``."""
        return replace(self, slots=self.slots + tuple(slots))

    def deduped(self) -> "Schedule":
        return replace(self, slots=tuple(dedupe(self.slots)))

    def as_stale(self) -> "Schedule":
        return replace(self, stale=True)

    def __len__(self) -> int:
        return len(self.slots)
