"""
Data Transfer Objects for the preventive maintenance API.

Request and response shapes for schedule management and due passes. Field
names follow the database models so responses read the same as stored rows.
"""

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.domain.maintenance.entities.preventive_schedule import PreventiveSchedule
from app.domain.maintenance.value_objects.due_evaluation import ScheduleDescription
from app.domain.maintenance.value_objects.enums import (
    DueStatus,
    LedgerRecordState,
    ScheduleHealth,
)
from app.domain.maintenance.value_objects.generation import GenerationRecord


class CreateScheduleRequest(BaseModel):
    """Request to create a preventive schedule."""

    title: str = Field(..., max_length=200, description="Schedule title")
    asset_id: str = Field(..., description="Maintained asset")
    frequency_days: int = Field(..., description="Days between occurrences")
    next_due_date: date | None = Field(None, description="First occurrence")
    active: bool = Field(default=True)
    store_id: str | None = Field(None, description="Owning store")


class UpdateScheduleRequest(BaseModel):
    """Partial schedule update. Only fields that are sent are applied."""

    title: str | None = Field(None, max_length=200)
    frequency_days: int | None = None
    next_due_date: date | None = None
    active: bool | None = None
    store_id: str | None = None

    @field_validator("title", "frequency_days", "active")
    @classmethod
    def reject_null(cls, v):
        """Only next_due_date and store_id may be cleared."""
        if v is None:
            raise ValueError("may not be null")
        return v


class ScheduleResponse(BaseModel):
    """Schedule with its due status as of a given day."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    asset_id: str
    frequency_days: int
    next_due_date: date | None
    active: bool
    store_id: str | None
    created_at: datetime
    updated_at: datetime | None
    as_of: date
    status: DueStatus
    days_until_due: int | None
    health: ScheduleHealth
    due_for_generation: bool

    @classmethod
    def from_domain(
        cls,
        schedule: PreventiveSchedule,
        description: ScheduleDescription,
        as_of: date,
    ) -> "ScheduleResponse":
        return cls(
            id=schedule.id,
            title=schedule.title,
            asset_id=schedule.asset_id,
            frequency_days=schedule.frequency_days,
            next_due_date=schedule.next_due_date,
            active=schedule.active,
            store_id=schedule.store_id,
            created_at=schedule.created_at,
            updated_at=schedule.updated_at,
            as_of=as_of,
            status=description.status,
            days_until_due=description.days_until_due,
            health=description.health,
            due_for_generation=description.due_for_generation,
        )


class ScheduleListResponse(BaseModel):
    """List screen payload with per-status counts."""

    as_of: date
    schedules: list[ScheduleResponse]
    status_counts: dict[DueStatus, int]


class GenerationRecordResponse(BaseModel):
    schedule_id: str
    occurrence_date: date
    state: LedgerRecordState
    work_order_id: str | None
    reserved_at: datetime | None
    committed_at: datetime | None

    @classmethod
    def from_domain(cls, record: GenerationRecord) -> "GenerationRecordResponse":
        return cls(**record.model_dump())
