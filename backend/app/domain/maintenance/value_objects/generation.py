"""
Generation value objects.

Requests sent to the work order collaborator, ledger records, and the report
returned by a due pass.
"""

from datetime import date, datetime, timedelta

from pydantic import BaseModel, Field, computed_field

from ...shared.base import ValueObject
from .enums import (
    GenerationOutcomeCode,
    LedgerRecordState,
    PassOutcome,
    WorkOrderPriority,
)

PM_TITLE_PREFIX = "PM: "


class WorkOrderRequest(ValueObject):
    """Creation parameters for a preventive work order."""

    title: str
    asset_id: str
    store_id: str | None = None
    due_date: date
    priority: WorkOrderPriority = WorkOrderPriority.MEDIUM
    description: str | None = None
    schedule_id: str | None = None


class GenerationRecord(ValueObject):
    """Ledger entry for one (schedule, occurrence) pair."""

    schedule_id: str
    occurrence_date: date
    state: LedgerRecordState = LedgerRecordState.RESERVED
    work_order_id: str | None = None
    reserved_at: datetime | None = None
    committed_at: datetime | None = None

    @property
    def is_committed(self) -> bool:
        return self.state == LedgerRecordState.COMMITTED

    def is_stale(self, now: datetime, ttl_seconds: int) -> bool:
        """An open reservation older than the TTL. A TTL of 0 never goes stale."""
        return (
            ttl_seconds > 0
            and self.state == LedgerRecordState.RESERVED
            and self.reserved_at is not None
            and self.reserved_at < now - timedelta(seconds=ttl_seconds)
        )


class GeneratedOccurrence(ValueObject):
    schedule_id: str
    occurrence_date: date
    work_order_id: str
    next_due_date: date
    missed_occurrences: int = 0


class SkippedSchedule(ValueObject):
    schedule_id: str
    reason: GenerationOutcomeCode
    occurrence_date: date | None = None


class FailedSchedule(ValueObject):
    schedule_id: str
    code: GenerationOutcomeCode
    error: str
    occurrence_date: date | None = None
    work_order_id: str | None = None


class GenerationReport(BaseModel):
    """Outcome of one due pass."""

    as_of: date
    store_id: str | None = None
    generated: list[GeneratedOccurrence] = Field(default_factory=list)
    skipped: list[SkippedSchedule] = Field(default_factory=list)
    failed: list[FailedSchedule] = Field(default_factory=list)
    needs_review: list[FailedSchedule] = Field(default_factory=list)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def processed(self) -> int:
        return (
            len(self.generated)
            + len(self.skipped)
            + len(self.failed)
            + len(self.needs_review)
        )

    @computed_field  # type: ignore[prop-decorator]
    @property
    def success(self) -> bool:
        return not self.failed and not self.needs_review

    @computed_field  # type: ignore[prop-decorator]
    @property
    def outcome(self) -> PassOutcome:
        if self.success:
            return PassOutcome.SUCCESS
        if self.generated or self.skipped:
            return PassOutcome.PARTIAL
        return PassOutcome.FAILURE

    def summary(self) -> str:
        text = (
            f"{len(self.generated)} generated, {len(self.failed)} failed, "
            f"{len(self.skipped)} skipped"
        )
        if self.needs_review:
            text += f", {len(self.needs_review)} need review"
        return text
