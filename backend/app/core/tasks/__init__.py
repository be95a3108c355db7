"""Celery background tasks."""

from app.core.tasks.maintenance import generate_due_pm_work_orders

__all__ = [
    "generate_due_pm_work_orders",
]
