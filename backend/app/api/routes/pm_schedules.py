"""
Preventive Maintenance API Routes.

Schedule management, due status for list and detail screens, generation
history with stale reservation cleanup, and an operator trigger for a due
pass.
"""

from datetime import date

from fastapi import APIRouter, Query, status

from app.api.deps import (
    ClockDep,
    GenerationLedgerDep,
    GenerationServiceDep,
    ReportingServiceDep,
    ScheduleRepositoryDep,
)
from app.application.dtos.pm_dtos import (
    CreateScheduleRequest,
    GenerationRecordResponse,
    ScheduleListResponse,
    ScheduleResponse,
    UpdateScheduleRequest,
)
from app.core.observability import get_logger
from app.domain.maintenance.entities.preventive_schedule import PreventiveSchedule
from app.domain.maintenance.services.schedule_reporting import (
    ScheduleReportingService,
)
from app.domain.maintenance.value_objects.generation import GenerationReport
from app.domain.shared.exceptions import (
    LedgerError,
    ScheduleNotFoundError,
    ValidationError,
)

logger = get_logger(__name__)

router = APIRouter(prefix="/pm", tags=["preventive-maintenance"])


def _describe(
    schedule: PreventiveSchedule,
    reporting: ScheduleReportingService,
    as_of: date,
) -> ScheduleResponse:
    return ScheduleResponse.from_domain(
        schedule, reporting.describe_schedule(schedule, as_of), as_of
    )


def _get_or_404(
    schedule_repo: ScheduleRepositoryDep, schedule_id: str
) -> PreventiveSchedule:
    schedule = schedule_repo.get_by_id(schedule_id)
    if schedule is None:
        raise ScheduleNotFoundError(schedule_id)
    return schedule


@router.get(
    "/schedules",
    summary="List preventive schedules",
    description="List schedules with their due status as of a given day.",
    response_model=ScheduleListResponse,
)
def list_schedules(
    schedule_repo: ScheduleRepositoryDep,
    reporting: ReportingServiceDep,
    clock: ClockDep,
    store_id: str | None = Query(None, description="Filter by store"),
    include_inactive: bool = Query(True, description="Include retired schedules"),
    as_of: date | None = Query(None, description="Evaluate as of this day"),
) -> ScheduleListResponse:
    today = as_of or clock.today()
    schedules = schedule_repo.list_schedules(
        store_id=store_id, include_inactive=include_inactive
    )
    descriptions = reporting.describe_schedules(schedules, today)
    return ScheduleListResponse(
        as_of=today,
        schedules=[
            ScheduleResponse.from_domain(schedule, description, today)
            for schedule, description in zip(schedules, descriptions)
        ],
        status_counts=reporting.summarize(descriptions),
    )


@router.post(
    "/schedules",
    summary="Create preventive schedule",
    response_model=ScheduleResponse,
    status_code=status.HTTP_201_CREATED,
    responses={422: {"description": "Invalid schedule data"}},
)
def create_schedule(
    request: CreateScheduleRequest,
    schedule_repo: ScheduleRepositoryDep,
    reporting: ReportingServiceDep,
    clock: ClockDep,
) -> ScheduleResponse:
    schedule = PreventiveSchedule.create(
        title=request.title,
        asset_id=request.asset_id,
        frequency_days=request.frequency_days,
        next_due_date=request.next_due_date,
        active=request.active,
        store_id=request.store_id,
    )
    schedule = schedule_repo.add(schedule)
    logger.info(
        "Preventive schedule created",
        schedule_id=schedule.id,
        asset_id=schedule.asset_id,
        frequency_days=schedule.frequency_days,
    )
    return _describe(schedule, reporting, clock.today())


@router.get(
    "/schedules/{schedule_id}",
    summary="Get preventive schedule",
    response_model=ScheduleResponse,
    responses={404: {"description": "Schedule not found"}},
)
def get_schedule(
    schedule_id: str,
    schedule_repo: ScheduleRepositoryDep,
    reporting: ReportingServiceDep,
    clock: ClockDep,
    as_of: date | None = Query(None, description="Evaluate as of this day"),
) -> ScheduleResponse:
    schedule = _get_or_404(schedule_repo, schedule_id)
    return _describe(schedule, reporting, as_of or clock.today())


@router.patch(
    "/schedules/{schedule_id}",
    summary="Update preventive schedule",
    description="Change title, frequency, next due date, store or active flag. "
    "Schedules are retired with active=false rather than deleted. Only the "
    "fields sent are written, and next_due_date may not point at an occurrence "
    "that already has a generation record.",
    response_model=ScheduleResponse,
    responses={
        404: {"description": "Schedule not found"},
        422: {"description": "Invalid schedule data"},
    },
)
def update_schedule(
    schedule_id: str,
    request: UpdateScheduleRequest,
    schedule_repo: ScheduleRepositoryDep,
    ledger: GenerationLedgerDep,
    reporting: ReportingServiceDep,
    clock: ClockDep,
) -> ScheduleResponse:
    current = _get_or_404(schedule_repo, schedule_id)
    changes = request.model_dump(exclude_unset=True)
    merged = current.model_dump(include=set(UpdateScheduleRequest.model_fields))
    merged.update(changes)

    # Re-run creation rules so an update cannot produce an invalid schedule
    validated = PreventiveSchedule.create(
        asset_id=current.asset_id, schedule_id=current.id, **merged
    )

    next_due = changes.get("next_due_date")
    if next_due is not None:
        record = ledger.get(schedule_id, next_due)
        if record is not None:
            raise ValidationError(
                "next_due_date",
                next_due.isoformat(),
                f"Occurrence already has a {record.state.value} generation record",
                "OCCURRENCE_ALREADY_GENERATED",
            )

    schedule = schedule_repo.update_fields(
        schedule_id, {name: getattr(validated, name) for name in changes}
    )
    logger.info(
        "Preventive schedule updated",
        schedule_id=schedule.id,
        changed_fields=sorted(changes),
    )
    return _describe(schedule, reporting, clock.today())


@router.get(
    "/schedules/{schedule_id}/generations",
    summary="Generation history",
    description="Ledger records for a schedule, newest occurrence first.",
    response_model=list[GenerationRecordResponse],
    responses={404: {"description": "Schedule not found"}},
)
def list_generations(
    schedule_id: str,
    schedule_repo: ScheduleRepositoryDep,
    ledger: GenerationLedgerDep,
) -> list[GenerationRecordResponse]:
    _get_or_404(schedule_repo, schedule_id)
    return [GenerationRecordResponse.from_domain(r) for r in ledger.history(schedule_id)]


@router.delete(
    "/schedules/{schedule_id}/generations/{occurrence_date}",
    summary="Discard stale reservation",
    description="Remove a reservation left open past the reservation TTL so the "
    "occurrence can be generated again. Check first that no work order exists "
    "for it. Committed records are never removed.",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={
        404: {"description": "Schedule not found"},
        409: {"description": "No stale reservation for this occurrence"},
    },
)
def discard_stale_reservation(
    schedule_id: str,
    occurrence_date: date,
    schedule_repo: ScheduleRepositoryDep,
    ledger: GenerationLedgerDep,
) -> None:
    _get_or_404(schedule_repo, schedule_id)
    if not ledger.discard_stale(schedule_id, occurrence_date):
        raise LedgerError(
            "No stale reservation to discard", schedule_id, occurrence_date
        )
    logger.warning(
        "Stale reservation discarded",
        schedule_id=schedule_id,
        occurrence_date=occurrence_date.isoformat(),
    )


@router.post(
    "/generate-due",
    summary="Run due pass",
    description="Generate one work order for every due occurrence of every "
    "active schedule. Safe to call repeatedly.",
    response_model=GenerationReport,
    responses={503: {"description": "Due pass aborted"}},
)
def generate_due(
    generation_service: GenerationServiceDep,
    as_of: date | None = Query(None, description="Run as of this day"),
    store_id: str | None = Query(None, description="Restrict to one store"),
) -> GenerationReport:
    return generation_service.run_generation_pass(today=as_of, store_id=store_id)
