from .preventive_schedule import PreventiveSchedule, new_schedule_id

__all__ = ["PreventiveSchedule", "new_schedule_id"]
