"""
SQLModel implementation of the preventive schedule repository.
"""

from datetime import date
from typing import Any

from sqlmodel import select

from app.domain.maintenance.entities.preventive_schedule import PreventiveSchedule
from app.domain.maintenance.repositories.schedule_repository import (
    UPDATABLE_FIELDS,
    PreventiveScheduleRepository,
)
from app.domain.shared.exceptions import ScheduleNotFoundError
from app.infrastructure.database.models import PMSchedule, utcnow

from .base import BaseRepository
from .mappers.schedule_mapper import ScheduleMapper


class SqlPreventiveScheduleRepository(BaseRepository, PreventiveScheduleRepository):
    """Schedule store backed by the ``preventive_schedules`` table."""

    def list_active(self, store_id: str | None = None) -> list[PreventiveSchedule]:
        return self.list_schedules(store_id=store_id, include_inactive=False)

    def list_schedules(
        self, store_id: str | None = None, include_inactive: bool = True
    ) -> list[PreventiveSchedule]:
        with self._session("list_schedules") as session:
            statement = select(PMSchedule)
            if not include_inactive:
                statement = statement.where(PMSchedule.active == True)  # noqa: E712
            if store_id is not None:
                statement = statement.where(PMSchedule.store_id == store_id)
            statement = statement.order_by(PMSchedule.next_due_date, PMSchedule.id)
            return [ScheduleMapper.sql_to_domain(row) for row in session.exec(statement)]

    def get_by_id(self, schedule_id: str) -> PreventiveSchedule | None:
        with self._session("get_schedule") as session:
            row = session.get(PMSchedule, schedule_id)
            return ScheduleMapper.sql_to_domain(row) if row else None

    def update_next_due_date(self, schedule_id: str, next_due_date: date) -> None:
        with self._session("update_next_due_date") as session:
            row = session.get(PMSchedule, schedule_id)
            if row is None:
                raise ScheduleNotFoundError(schedule_id)
            row.next_due_date = next_due_date
            row.updated_at = utcnow()
            session.add(row)
            session.commit()

    def add(self, schedule: PreventiveSchedule) -> PreventiveSchedule:
        with self._session("add_schedule") as session:
            row = ScheduleMapper.domain_to_sql(schedule)
            session.add(row)
            session.commit()
            session.refresh(row)
            return ScheduleMapper.sql_to_domain(row)

    def update_fields(
        self, schedule_id: str, changes: dict[str, Any]
    ) -> PreventiveSchedule:
        unknown = set(changes) - UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Fields cannot be updated: {sorted(unknown)}")

        with self._session("update_schedule_fields") as session:
            row = session.get(PMSchedule, schedule_id)
            if row is None:
                raise ScheduleNotFoundError(schedule_id)
            for field_name, value in changes.items():
                setattr(row, field_name, value)
            row.updated_at = utcnow()
            session.add(row)
            session.commit()
            session.refresh(row)
            return ScheduleMapper.sql_to_domain(row)
