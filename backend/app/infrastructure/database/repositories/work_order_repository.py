"""
SQLModel implementation of the work order collaborator.
"""

from sqlmodel import select

from app.domain.maintenance.repositories.work_order_repository import (
    WorkOrderRepository,
)
from app.domain.maintenance.value_objects.enums import WorkOrderStatus
from app.domain.maintenance.value_objects.generation import WorkOrderRequest
from app.infrastructure.database.models import WorkOrder

from .base import BaseRepository


class SqlWorkOrderRepository(BaseRepository, WorkOrderRepository):
    """Creates work orders in the ``work_orders`` table."""

    def create(self, request: WorkOrderRequest) -> str:
        with self._session("create_work_order") as session:
            row = WorkOrder(
                title=request.title,
                description=request.description,
                asset_id=request.asset_id,
                store_id=request.store_id,
                status=WorkOrderStatus.OPEN,
                priority=request.priority,
                due_date=request.due_date,
                schedule_id=request.schedule_id,
            )
            session.add(row)
            session.commit()
            return row.id

    def get_by_id(self, work_order_id: str) -> WorkOrder | None:
        with self._session("get_work_order") as session:
            return session.get(WorkOrder, work_order_id)

    def list_by_schedule(self, schedule_id: str) -> list[WorkOrder]:
        with self._session("list_work_orders") as session:
            statement = (
                select(WorkOrder)
                .where(WorkOrder.schedule_id == schedule_id)
                .order_by(WorkOrder.due_date)
            )
            return list(session.exec(statement).all())
