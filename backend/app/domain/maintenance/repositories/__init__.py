from .generation_ledger import GenerationLedger
from .schedule_repository import PreventiveScheduleRepository
from .work_order_repository import WorkOrderRepository

__all__ = [
    "GenerationLedger",
    "PreventiveScheduleRepository",
    "WorkOrderRepository",
]
