"""Scheduling engine: time normalization, month grids, slot merging, ICS import, dedupe."""
from coachbook.scheduling.calendar_grid import (
    CalendarWeek,
    first_upcoming_week_index,
    shift_month,
    weeks_for_month,
)
from coachbook.scheduling.dedupe import dedupe, find_duplicates
from coachbook.scheduling.ics_import import IcsImportResult, parse as parse_ics
from coachbook.scheduling.merger import ScheduleHolder, ScheduleMerger
from coachbook.scheduling.schedule import Schedule
from coachbook.scheduling.slots import (
    Slot,
    SlotKind,
    SourceKind,
    classify,
    find_overlaps,
    overlaps,
    slots_on_date,
)
from coachbook.scheduling.storage import ScheduleStorage
from coachbook.scheduling.viewer import PUBLIC_VIEWER, Viewer, ViewerRole, resolve_viewer

__all__ = [
    "CalendarWeek",
    "first_upcoming_week_index",
    "shift_month",
    "weeks_for_month",
    "dedupe",
    "find_duplicates",
    "IcsImportResult",
    "parse_ics",
    "ScheduleHolder",
    "ScheduleMerger",
    "Schedule",
    "Slot",
    "SlotKind",
    "SourceKind",
    "classify",
    "find_overlaps",
    "overlaps",
    "slots_on_date",
    "ScheduleStorage",
    "PUBLIC_VIEWER",
    "Viewer",
    "ViewerRole",
    "resolve_viewer",
]
