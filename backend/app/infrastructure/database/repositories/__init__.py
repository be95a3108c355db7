from .base import (
    BaseRepository,
    DatabaseError,
    EntityAlreadyExistsError,
    RepositoryException,
)
from .generation_ledger import SqlGenerationLedger
from .schedule_repository import SqlPreventiveScheduleRepository
from .work_order_repository import SqlWorkOrderRepository

__all__ = [
    "BaseRepository",
    "DatabaseError",
    "EntityAlreadyExistsError",
    "RepositoryException",
    "SqlGenerationLedger",
    "SqlPreventiveScheduleRepository",
    "SqlWorkOrderRepository",
]
