"""Preventive maintenance value objects."""

from .due_evaluation import DueEvaluation, ScheduleDescription
from .enums import (
    DueStatus,
    GenerationOutcomeCode,
    LedgerRecordState,
    PassOutcome,
    ScheduleHealth,
    WorkOrderPriority,
    WorkOrderStatus,
)
from .generation import (
    PM_TITLE_PREFIX,
    FailedSchedule,
    GeneratedOccurrence,
    GenerationRecord,
    GenerationReport,
    SkippedSchedule,
    WorkOrderRequest,
)

__all__ = [
    "DueEvaluation",
    "DueStatus",
    "FailedSchedule",
    "GeneratedOccurrence",
    "GenerationOutcomeCode",
    "GenerationRecord",
    "GenerationReport",
    "LedgerRecordState",
    "PM_TITLE_PREFIX",
    "PassOutcome",
    "ScheduleDescription",
    "ScheduleHealth",
    "SkippedSchedule",
    "WorkOrderPriority",
    "WorkOrderRequest",
    "WorkOrderStatus",
]
