"""
Mapper for converting between PreventiveSchedule domain entities and SQL rows.
"""

from app.domain.maintenance.entities.preventive_schedule import PreventiveSchedule
from app.domain.maintenance.value_objects.generation import GenerationRecord
from app.infrastructure.database.models import PMGenerationRecord, PMSchedule, as_utc


class ScheduleMapper:
    """Translates schedules between the domain and persistence layers."""

    @staticmethod
    def domain_to_sql(schedule: PreventiveSchedule) -> PMSchedule:
        return PMSchedule(
            id=schedule.id,
            title=schedule.title,
            asset_id=schedule.asset_id,
            frequency_days=schedule.frequency_days,
            next_due_date=schedule.next_due_date,
            active=schedule.active,
            store_id=schedule.store_id,
            created_at=as_utc(schedule.created_at),
            updated_at=as_utc(schedule.updated_at),
        )

    @staticmethod
    def sql_to_domain(row: PMSchedule) -> PreventiveSchedule:
        return PreventiveSchedule(
            id=row.id,
            title=row.title,
            asset_id=row.asset_id,
            frequency_days=row.frequency_days,
            next_due_date=row.next_due_date,
            active=row.active,
            store_id=row.store_id,
            created_at=as_utc(row.created_at),
            updated_at=as_utc(row.updated_at),
        )


class GenerationRecordMapper:
    @staticmethod
    def sql_to_domain(row: PMGenerationRecord) -> GenerationRecord:
        return GenerationRecord(
            schedule_id=row.schedule_id,
            occurrence_date=row.occurrence_date,
            state=row.state,
            work_order_id=row.work_order_id,
            reserved_at=as_utc(row.reserved_at),
            committed_at=as_utc(row.committed_at),
        )
