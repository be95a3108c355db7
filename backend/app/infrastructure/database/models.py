"""
SQLModel table definitions for preventive maintenance.

These models serve as both Pydantic models for API serialization and
SQLAlchemy ORM models for database operations.
"""

from datetime import date, datetime, timezone
from uuid import uuid4

from sqlalchemy import DateTime, UniqueConstraint
from sqlmodel import Field, SQLModel

from app.domain.maintenance.value_objects.enums import (
    LedgerRecordState,
    WorkOrderPriority,
    WorkOrderStatus,
)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime | None) -> datetime | None:
    """Attach UTC to timestamps read back from backends that drop the offset."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def new_id() -> str:
    return uuid4().hex


# Base classes for shared fields
class TimestampedModel(SQLModel):
    """Base model with timestamp fields."""

    created_at: datetime = Field(
        default_factory=utcnow, sa_type=DateTime(timezone=True)
    )
    updated_at: datetime | None = Field(default=None, sa_type=DateTime(timezone=True))


# Preventive schedule tables
class PMScheduleBase(SQLModel):
    """Base preventive schedule model with shared fields."""

    title: str = Field(min_length=1, max_length=200)
    asset_id: str = Field(min_length=1, index=True)
    frequency_days: int = Field(ge=1)
    next_due_date: date | None = Field(default=None, index=True)
    active: bool = Field(default=True, index=True)
    store_id: str | None = Field(default=None, index=True)


class PMSchedule(PMScheduleBase, TimestampedModel, table=True):
    """Preventive schedule table definition."""

    __tablename__ = "preventive_schedules"

    id: str = Field(default_factory=new_id, primary_key=True)


# Work order table
class WorkOrder(TimestampedModel, table=True):
    """Work orders created by the engine."""

    __tablename__ = "work_orders"

    id: str = Field(default_factory=new_id, primary_key=True)
    title: str = Field(max_length=220)
    description: str | None = None
    asset_id: str = Field(index=True)
    store_id: str | None = Field(default=None, index=True)
    status: WorkOrderStatus = Field(default=WorkOrderStatus.OPEN)
    priority: WorkOrderPriority = Field(default=WorkOrderPriority.MEDIUM)
    due_date: date | None = None
    schedule_id: str | None = Field(default=None, index=True)


# Generation ledger table
class PMGenerationRecord(SQLModel, table=True):
    """One row per generated (schedule, occurrence) pair."""

    __tablename__ = "pm_generation_records"
    __table_args__ = (
        UniqueConstraint(
            "schedule_id", "occurrence_date", name="uq_pm_generation_occurrence"
        ),
    )

    id: str = Field(default_factory=new_id, primary_key=True)
    schedule_id: str = Field(index=True)
    occurrence_date: date
    state: LedgerRecordState = Field(default=LedgerRecordState.RESERVED)
    work_order_id: str | None = None
    reserved_at: datetime = Field(
        default_factory=utcnow, sa_type=DateTime(timezone=True)
    )
    committed_at: datetime | None = Field(
        default=None, sa_type=DateTime(timezone=True)
    )
