"""
Work Order Repository Interface

The engine only creates work orders; their lifecycle afterwards belongs to
the surrounding application.
"""

from abc import ABC, abstractmethod

from ..value_objects.generation import WorkOrderRequest


class WorkOrderRepository(ABC):
    """Creation-only contract for the work order collaborator."""

    @abstractmethod
    def create(self, request: WorkOrderRequest) -> str:
        """
        Create a work order and return its ID.

        Any exception, including a timeout, means no work order was created.
        """
        pass
