from .repositories import (
    InMemoryGenerationLedger,
    InMemoryPreventiveScheduleRepository,
    InMemoryWorkOrderRepository,
)

__all__ = [
    "InMemoryGenerationLedger",
    "InMemoryPreventiveScheduleRepository",
    "InMemoryWorkOrderRepository",
]
