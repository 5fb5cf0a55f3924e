
from fastapi import APIRouter, Depends, status

from coachbook.api.deps import get_coach, get_schedule_service, get_viewer
from coachbook.api.schemas.schedule import (
    AppointmentCreateRequest,
    IcsImportRequest,
    ImportOut,
    ScheduleOut,
)
from coachbook.core.config import settings
from coachbook.models.coach import Coach
from coachbook.scheduling.time_normalizer import clock_to_decimal_hour
from coachbook.scheduling.viewer import Viewer
from coachbook.services.coach_service import coach_to_public
from coachbook.services.schedule_service import ScheduleService

router = APIRouter(prefix="/coaches/{slug}", tags=["appointments"])


@router.post("/appointments", response_model=ScheduleOut, status_code=status.HTTP_201_CREATED)
async def book_appointment(
    body: AppointmentCreateRequest,
    coach: Coach = Depends(get_coach),
    viewer: Viewer = Depends(get_viewer),
    service: ScheduleService = Depends(get_schedule_service),
) -> ScheduleOut:
    start_time = clock_to_decimal_hour(body.start)
    if body.end is not None:
        end_time = clock_to_decimal_hour(body.end)
    else:
        end_time = start_time + settings.default_appointment_minutes / 60
    schedule = await service.create_appointment(
        viewer,
        coach,
        body.date,
        start_time,
        end_time,
        client_name=body.client_name,
        location=body.location,
        notes=body.notes,
    )
    return ScheduleOut.of(coach_to_public(coach), viewer.role, schedule)


@router.post("/schedule/import", response_model=ImportOut)
async def import_calendar(
    body: IcsImportRequest,
    coach: Coach = Depends(get_coach),
    viewer: Viewer = Depends(get_viewer),
    service: ScheduleService = Depends(get_schedule_service),
) -> ImportOut:
    """Import a calendar export (.ics text). Malformed events are skipped and counted."""
    schedule, result = await service.import_ics(viewer, coach, body.ics_text)
    return ImportOut(
        imported=len(result),
        skipped=result.skipped,
        schedule=ScheduleOut.of(coach_to_public(coach), viewer.role, schedule),
    )
