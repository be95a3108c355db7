"""
SQL generation ledger.

Atomicity comes from the ``uq_pm_generation_occurrence`` unique constraint:
a reservation is an INSERT, and losing the race surfaces as an
``IntegrityError``. A stale reservation is only ever removed by
``discard_stale``, a conditional DELETE scoped to reserved rows older than
the TTL.
"""

from collections.abc import Callable
from datetime import date, datetime, timedelta

from sqlalchemy import delete, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session, select

from app.core.observability import get_logger
from app.domain.maintenance.repositories.generation_ledger import GenerationLedger
from app.domain.maintenance.value_objects.enums import LedgerRecordState
from app.domain.maintenance.value_objects.generation import GenerationRecord
from app.domain.shared.exceptions import LedgerError
from app.infrastructure.database.models import PMGenerationRecord, utcnow

from .base import BaseRepository, DatabaseError
from .mappers.schedule_mapper import GenerationRecordMapper

logger = get_logger(__name__)


class SqlGenerationLedger(BaseRepository, GenerationLedger):
    def __init__(
        self,
        session_factory: Callable[[], Session],
        reservation_ttl_seconds: int = 900,
        now: Callable[[], datetime] = utcnow,
    ) -> None:
        super().__init__(session_factory)
        self._ttl = reservation_ttl_seconds
        self._now = now

    def _occurrence(self, schedule_id: str, occurrence_date: date):
        return (
            PMGenerationRecord.schedule_id == schedule_id,
            PMGenerationRecord.occurrence_date == occurrence_date,
        )

    def try_reserve(self, schedule_id: str, occurrence_date: date) -> bool:
        session = self._session_factory()
        try:
            session.add(
                PMGenerationRecord(
                    schedule_id=schedule_id,
                    occurrence_date=occurrence_date,
                    state=LedgerRecordState.RESERVED,
                    reserved_at=self._now(),
                )
            )
            session.commit()
            return True
        except IntegrityError:
            session.rollback()
            return False
        except SQLAlchemyError as e:
            session.rollback()
            raise DatabaseError(f"Database error during try_reserve: {str(e)}") from e
        finally:
            session.close()

    def commit(self, schedule_id: str, occurrence_date: date, work_order_id: str) -> None:
        with self._session("commit_reservation") as session:
            result = session.execute(
                update(PMGenerationRecord)
                .where(
                    *self._occurrence(schedule_id, occurrence_date),
                    PMGenerationRecord.state == LedgerRecordState.RESERVED,
                )
                .values(
                    state=LedgerRecordState.COMMITTED,
                    work_order_id=work_order_id,
                    committed_at=self._now(),
                )
            )
            session.commit()
            if result.rowcount == 1:
                return

            existing = session.exec(
                select(PMGenerationRecord).where(
                    *self._occurrence(schedule_id, occurrence_date)
                )
            ).first()

        if (
            existing is not None
            and existing.state == LedgerRecordState.COMMITTED
            and existing.work_order_id == work_order_id
        ):
            return
        raise LedgerError(
            "No open reservation to commit", schedule_id, occurrence_date
        )

    def release(self, schedule_id: str, occurrence_date: date) -> None:
        with self._session("release_reservation") as session:
            session.execute(
                delete(PMGenerationRecord).where(
                    *self._occurrence(schedule_id, occurrence_date),
                    PMGenerationRecord.state == LedgerRecordState.RESERVED,
                )
            )
            session.commit()

    def get(self, schedule_id: str, occurrence_date: date) -> GenerationRecord | None:
        with self._session("get_generation_record") as session:
            row = session.exec(
                select(PMGenerationRecord).where(
                    *self._occurrence(schedule_id, occurrence_date)
                )
            ).first()
            return GenerationRecordMapper.sql_to_domain(row) if row else None

    def history(self, schedule_id: str) -> list[GenerationRecord]:
        with self._session("generation_history") as session:
            statement = (
                select(PMGenerationRecord)
                .where(PMGenerationRecord.schedule_id == schedule_id)
                .order_by(PMGenerationRecord.occurrence_date.desc())
            )
            return [
                GenerationRecordMapper.sql_to_domain(row)
                for row in session.exec(statement)
            ]

    def find_stale(self, schedule_id: str, occurrence_date: date) -> GenerationRecord | None:
        record = self.get(schedule_id, occurrence_date)
        if record is not None and record.is_stale(self._now(), self._ttl):
            return record
        return None

    def discard_stale(self, schedule_id: str, occurrence_date: date) -> bool:
        if self._ttl <= 0:
            return False
        cutoff = self._now() - timedelta(seconds=self._ttl)
        with self._session("discard_stale_reservation") as session:
            result = session.execute(
                delete(PMGenerationRecord).where(
                    *self._occurrence(schedule_id, occurrence_date),
                    PMGenerationRecord.state == LedgerRecordState.RESERVED,
                    PMGenerationRecord.reserved_at < cutoff,
                )
            )
            session.commit()
            discarded = result.rowcount == 1

        if discarded:
            logger.warning(
                "Discarded stale reservation",
                schedule_id=schedule_id,
                occurrence_date=occurrence_date.isoformat(),
                ttl_seconds=self._ttl,
            )
        return discarded
