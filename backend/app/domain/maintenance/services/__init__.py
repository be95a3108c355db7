from .due_evaluator import DueEvaluator
from .occurrence_advancer import OccurrenceAdvancer
from .pm_generation_service import PMGenerationService
from .schedule_reporting import ScheduleReportingService

__all__ = [
    "DueEvaluator",
    "OccurrenceAdvancer",
    "PMGenerationService",
    "ScheduleReportingService",
]
