"""
In-memory adapters.

Thread-safe implementations of the engine's collaborators for embedding the
engine without a database and for tests. The ledger's check-and-set runs
under a single lock, which gives the same at-most-once guarantee as the
unique constraint in the SQL ledger, within one process.
"""

import threading
from collections.abc import Callable
from datetime import date, datetime
from typing import Any

from app.domain.maintenance.entities.preventive_schedule import PreventiveSchedule
from app.domain.maintenance.repositories.generation_ledger import GenerationLedger
from app.domain.maintenance.repositories.schedule_repository import (
    UPDATABLE_FIELDS,
    PreventiveScheduleRepository,
)
from app.domain.maintenance.repositories.work_order_repository import (
    WorkOrderRepository,
)
from app.domain.maintenance.value_objects.enums import LedgerRecordState
from app.domain.maintenance.value_objects.generation import (
    GenerationRecord,
    WorkOrderRequest,
)
from app.domain.shared.exceptions import LedgerError, ScheduleNotFoundError
from app.infrastructure.database.models import new_id, utcnow


class InMemoryPreventiveScheduleRepository(PreventiveScheduleRepository):
    def __init__(self, schedules: list[PreventiveSchedule] | None = None) -> None:
        self._lock = threading.Lock()
        self._schedules: dict[str, PreventiveSchedule] = {}
        for schedule in schedules or []:
            self._schedules[schedule.id] = schedule.model_copy()

    def list_active(self, store_id: str | None = None) -> list[PreventiveSchedule]:
        return self.list_schedules(store_id=store_id, include_inactive=False)

    def list_schedules(
        self, store_id: str | None = None, include_inactive: bool = True
    ) -> list[PreventiveSchedule]:
        with self._lock:
            return [
                schedule.model_copy()
                for schedule in self._schedules.values()
                if (include_inactive or schedule.active)
                and (store_id is None or schedule.store_id == store_id)
            ]

    def get_by_id(self, schedule_id: str) -> PreventiveSchedule | None:
        with self._lock:
            schedule = self._schedules.get(schedule_id)
            return schedule.model_copy() if schedule else None

    def update_next_due_date(self, schedule_id: str, next_due_date: date) -> None:
        with self._lock:
            schedule = self._schedules.get(schedule_id)
            if schedule is None:
                raise ScheduleNotFoundError(schedule_id)
            schedule.next_due_date = next_due_date
            schedule.mark_updated()

    def add(self, schedule: PreventiveSchedule) -> PreventiveSchedule:
        with self._lock:
            self._schedules[schedule.id] = schedule.model_copy()
        return schedule

    def update_fields(
        self, schedule_id: str, changes: dict[str, Any]
    ) -> PreventiveSchedule:
        unknown = set(changes) - UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Fields cannot be updated: {sorted(unknown)}")

        with self._lock:
            schedule = self._schedules.get(schedule_id)
            if schedule is None:
                raise ScheduleNotFoundError(schedule_id)
            updated = schedule.model_copy(update=changes)
            updated.mark_updated()
            self._schedules[schedule_id] = updated
            return updated.model_copy()


class InMemoryWorkOrderRepository(WorkOrderRepository):
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.created: dict[str, WorkOrderRequest] = {}

    def create(self, request: WorkOrderRequest) -> str:
        work_order_id = new_id()
        with self._lock:
            self.created[work_order_id] = request
        return work_order_id

    def for_schedule(self, schedule_id: str) -> list[WorkOrderRequest]:
        with self._lock:
            return [r for r in self.created.values() if r.schedule_id == schedule_id]


class InMemoryGenerationLedger(GenerationLedger):
    def __init__(
        self,
        reservation_ttl_seconds: int = 900,
        now: Callable[[], datetime] = utcnow,
    ) -> None:
        self._lock = threading.Lock()
        self._records: dict[tuple[str, date], GenerationRecord] = {}
        self._ttl = reservation_ttl_seconds
        self._now = now

    def try_reserve(self, schedule_id: str, occurrence_date: date) -> bool:
        key = (schedule_id, occurrence_date)
        now = self._now()
        with self._lock:
            if key in self._records:
                return False
            self._records[key] = GenerationRecord(
                schedule_id=schedule_id,
                occurrence_date=occurrence_date,
                state=LedgerRecordState.RESERVED,
                reserved_at=now,
            )
            return True

    def commit(self, schedule_id: str, occurrence_date: date, work_order_id: str) -> None:
        key = (schedule_id, occurrence_date)
        with self._lock:
            existing = self._records.get(key)
            if existing is None:
                raise LedgerError(
                    "No open reservation to commit", schedule_id, occurrence_date
                )
            if existing.is_committed:
                if existing.work_order_id == work_order_id:
                    return
                raise LedgerError(
                    "Occurrence already committed", schedule_id, occurrence_date
                )
            self._records[key] = existing.model_copy(
                update={
                    "state": LedgerRecordState.COMMITTED,
                    "work_order_id": work_order_id,
                    "committed_at": self._now(),
                }
            )

    def release(self, schedule_id: str, occurrence_date: date) -> None:
        key = (schedule_id, occurrence_date)
        with self._lock:
            existing = self._records.get(key)
            if existing is not None and not existing.is_committed:
                del self._records[key]

    def get(self, schedule_id: str, occurrence_date: date) -> GenerationRecord | None:
        with self._lock:
            return self._records.get((schedule_id, occurrence_date))

    def history(self, schedule_id: str) -> list[GenerationRecord]:
        with self._lock:
            records = [r for r in self._records.values() if r.schedule_id == schedule_id]
        return sorted(records, key=lambda r: r.occurrence_date, reverse=True)

    def find_stale(self, schedule_id: str, occurrence_date: date) -> GenerationRecord | None:
        record = self.get(schedule_id, occurrence_date)
        if record is not None and record.is_stale(self._now(), self._ttl):
            return record
        return None

    def discard_stale(self, schedule_id: str, occurrence_date: date) -> bool:
        key = (schedule_id, occurrence_date)
        now = self._now()
        with self._lock:
            existing = self._records.get(key)
            if existing is None or not existing.is_stale(now, self._ttl):
                return False
            del self._records[key]
            return True
