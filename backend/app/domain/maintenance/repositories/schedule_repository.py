"""
Preventive Schedule Repository Interface

Defines the contract for schedule data access operations.
"""

from abc import ABC, abstractmethod
from datetime import date
from typing import Any

from ..entities.preventive_schedule import PreventiveSchedule

UPDATABLE_FIELDS = frozenset(
    {"title", "frequency_days", "next_due_date", "active", "store_id"}
)


class PreventiveScheduleRepository(ABC):
    """
    Abstract repository interface for PreventiveSchedule entities.

    The due pass only needs ``list_active`` and ``update_next_due_date``; the
    remaining operations serve the schedule management screens.
    """

    @abstractmethod
    def list_active(self, store_id: str | None = None) -> list[PreventiveSchedule]:
        """
        Retrieve all active schedules, optionally scoped to one store.

        Raises:
            RepositoryException: If the store cannot be read
        """
        pass

    @abstractmethod
    def update_next_due_date(self, schedule_id: str, next_due_date: date) -> None:
        """
        Persist a new next due date for a schedule.

        Raises:
            ScheduleNotFoundError: If the schedule does not exist
            RepositoryException: If the write fails
        """
        pass

    @abstractmethod
    def get_by_id(self, schedule_id: str) -> PreventiveSchedule | None:
        """Retrieve a schedule by its ID."""
        pass

    @abstractmethod
    def list_schedules(
        self, store_id: str | None = None, include_inactive: bool = True
    ) -> list[PreventiveSchedule]:
        """Retrieve schedules for list screens."""
        pass

    @abstractmethod
    def add(self, schedule: PreventiveSchedule) -> PreventiveSchedule:
        """Insert a new schedule."""
        pass

    @abstractmethod
    def update_fields(
        self, schedule_id: str, changes: dict[str, Any]
    ) -> PreventiveSchedule:
        """
        Write only the given fields and return the stored schedule.

        Fields not named in ``changes`` keep their stored values, so a due
        pass that advances ``next_due_date`` concurrently is not overwritten.

        Raises:
            ScheduleNotFoundError: If the schedule does not exist
            ValueError: If a field outside ``UPDATABLE_FIELDS`` is named
        """
        pass
