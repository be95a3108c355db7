from .schedule_mapper import GenerationRecordMapper, ScheduleMapper

__all__ = ["GenerationRecordMapper", "ScheduleMapper"]
