from fastapi import APIRouter, Depends, Query

from coachbook.api.deps import get_coach, get_schedule_service, get_viewer
from coachbook.api.schemas.schedule import (
    CalendarDay,
    CalendarOut,
    OverlapOut,
    ScheduleOut,
    SlotOut,
)
from coachbook.core.exceptions import Unauthorized
from coachbook.models.coach import Coach, CoachPublic
from coachbook.scheduling.calendar_grid import (
    first_upcoming_week_index,
    shift_month,
    weeks_for_month,
)
from coachbook.scheduling.time_normalizer import civil_today
from coachbook.scheduling.viewer import Viewer
from coachbook.services.coach_service import coach_to_public
from coachbook.services.schedule_service import ScheduleService

router = APIRouter(prefix="/coaches", tags=["coaches"])


@router.get("/{slug}", response_model=CoachPublic)
async def coach_profile(coach: Coach = Depends(get_coach)) -> CoachPublic:
    return coach_to_public(coach)


@router.get("/{slug}/schedule", response_model=ScheduleOut)
async def coach_schedule(
    coach: Coach = Depends(get_coach),
    viewer: Viewer = Depends(get_viewer),
    service: ScheduleService = Depends(get_schedule_service),
) -> ScheduleOut:
    """Open availability for the public; everything, with client details, for the owning coach."""
    schedule = await service.schedule_for(coach, viewer)
    return ScheduleOut.of(coach_to_public(coach), viewer.role, schedule)


@router.get("/{slug}/calendar", response_model=CalendarOut)
async def coach_calendar(
    year: int | None = Query(None, ge=1, le=9999),
    month: int | None = Query(None, ge=1, le=12),
    coach: Coach = Depends(get_coach),
    viewer: Viewer = Depends(get_viewer),
    service: ScheduleService = Depends(get_schedule_service),
) -> CalendarOut:
    """Sunday-first weeks of the month with each day's slots. Defaults to the current PST month."""
    today = civil_today()
    year = year or today.year
    month = month or today.month
    weeks = weeks_for_month(year, month)
    schedule = await service.schedule_for(coach, viewer)
    grid = [
        [
            CalendarDay(
                date=day,
                in_month=day.month == month,
                is_today=day == today,
                slots=[SlotOut.from_slot(s) for s in schedule.on_date(day)],
            )
            for day in week
        ]
        for week in weeks
    ]
    prev_year, prev_month = shift_month(year, month, -1)
    next_year, next_month = shift_month(year, month, 1)
    return CalendarOut(
        coach=coach_to_public(coach),
        viewer_role=viewer.role,
        year=year,
        month=month,
        previous_month=f"{prev_year:04d}-{prev_month:02d}",
        next_month=f"{next_year:04d}-{next_month:02d}",
        upcoming_week_index=first_upcoming_week_index(weeks, today),
        weeks=grid,
    )


@router.get("/{slug}/overlaps", response_model=list[OverlapOut])
async def coach_overlaps(
    coach: Coach = Depends(get_coach),
    viewer: Viewer = Depends(get_viewer),
    service: ScheduleService = Depends(get_schedule_service),
) -> list[OverlapOut]:
    if not viewer.can_manage(coach):
        raise Unauthorized("Coach login required")
    schedule = await service.schedule_for(coach, viewer)
    return [
        OverlapOut(first=SlotOut.from_slot(a), second=SlotOut.from_slot(b))
        for a, b in schedule.overlapping_pairs()
    ]
