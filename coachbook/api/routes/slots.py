from fastapi import APIRouter, Depends, status

from coachbook.api.deps import get_coach, get_schedule_service, get_viewer
from coachbook.api.schemas.schedule import (
    AvailabilityCreateRequest,
    DedupeOut,
    ScheduleOut,
    SlotUpdateRequest,
)
from coachbook.models.coach import Coach
from coachbook.scheduling.slots import SourceKind
from coachbook.scheduling.time_normalizer import clock_to_decimal_hour
from coachbook.scheduling.viewer import Viewer
from coachbook.services.coach_service import coach_to_public
from coachbook.services.schedule_service import ScheduleService, SlotChanges

router = APIRouter(prefix="/coaches/{slug}", tags=["slots"])


@router.post("/availability", response_model=ScheduleOut, status_code=status.HTTP_201_CREATED)
async def add_availability(
    body: AvailabilityCreateRequest,
    coach: Coach = Depends(get_coach),
    viewer: Viewer = Depends(get_viewer),
    service: ScheduleService = Depends(get_schedule_service),
) -> ScheduleOut:
    schedule = await service.create_availability(
        viewer,
        coach,
        body.date,
        clock_to_decimal_hour(body.start),
        clock_to_decimal_hour(body.end),
        status=body.status,
    )
    return ScheduleOut.of(coach_to_public(coach), viewer.role, schedule)


@router.patch("/slots/{source_kind}/{slot_id}", response_model=ScheduleOut)
async def update_slot(
    source_kind: SourceKind,
    slot_id: int,
    body: SlotUpdateRequest,
    coach: Coach = Depends(get_coach),
    viewer: Viewer = Depends(get_viewer),
    service: ScheduleService = Depends(get_schedule_service),
) -> ScheduleOut:
    changes = SlotChanges(
        date=body.date,
        start_time=clock_to_decimal_hour(body.start) if body.start else None,
        end_time=clock_to_decimal_hour(body.end) if body.end else None,
        kind=body.kind,
        client_name=body.client_name,
        location=body.location,
        notes=body.notes,
    )
    schedule = await service.update_slot(viewer, coach, source_kind, slot_id, changes)
    return ScheduleOut.of(coach_to_public(coach), viewer.role, schedule)


@router.delete("/slots/{source_kind}/{slot_id}", response_model=ScheduleOut)
async def delete_slot(
    source_kind: SourceKind,
    slot_id: int,
    coach: Coach = Depends(get_coach),
    viewer: Viewer = Depends(get_viewer),
    service: ScheduleService = Depends(get_schedule_service),
) -> ScheduleOut:
    schedule = await service.delete_slot(viewer, coach, source_kind, slot_id)
    return ScheduleOut.of(coach_to_public(coach), viewer.role, schedule)


@router.post("/schedule/dedupe", response_model=DedupeOut)
async def remove_duplicates(
    coach: Coach = Depends(get_coach),
    viewer: Viewer = Depends(get_viewer),
    service: ScheduleService = Depends(get_schedule_service),
) -> DedupeOut:
    """Delete slots repeating an earlier slot's date, times and client name."""
    schedule, removed = await service.remove_duplicates(viewer, coach)
    return DedupeOut(
        removed=removed,
        schedule=ScheduleOut.of(coach_to_public(coach), viewer.role, schedule),
    )
