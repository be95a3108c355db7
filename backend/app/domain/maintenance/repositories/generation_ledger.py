"""
Generation Ledger Interface

Guarantees at most one work order per (schedule, occurrence date). Every
implementation must make ``try_reserve`` an atomic check-and-set backed by
the storage layer, never a read followed by a separate write.

A reservation is never taken over automatically. One left open longer than
the reservation TTL is reported as stale so an operator can check whether
its work order exists before discarding it.
"""

from abc import ABC, abstractmethod
from datetime import date

from ..value_objects.generation import GenerationRecord


class GenerationLedger(ABC):
    """Abstract ledger of generated occurrences."""

    @abstractmethod
    def try_reserve(self, schedule_id: str, occurrence_date: date) -> bool:
        """
        Claim the right to generate for an occurrence.

        Returns:
            True if this caller now holds the reservation, False if any record
            (reserved or committed) already exists.
        """
        pass

    @abstractmethod
    def commit(self, schedule_id: str, occurrence_date: date, work_order_id: str) -> None:
        """
        Finalize a reservation with the created work order.

        Raises:
            LedgerError: If there is no reservation for the occurrence
        """
        pass

    @abstractmethod
    def release(self, schedule_id: str, occurrence_date: date) -> None:
        """Drop an uncommitted reservation so a later pass can retry."""
        pass

    @abstractmethod
    def get(self, schedule_id: str, occurrence_date: date) -> GenerationRecord | None:
        """Look up the record for an occurrence."""
        pass

    @abstractmethod
    def history(self, schedule_id: str) -> list[GenerationRecord]:
        """All records for a schedule, newest occurrence first."""
        pass

    @abstractmethod
    def find_stale(self, schedule_id: str, occurrence_date: date) -> GenerationRecord | None:
        """Return the occurrence's reservation if it has outlived the TTL."""
        pass

    @abstractmethod
    def discard_stale(self, schedule_id: str, occurrence_date: date) -> bool:
        """
        Delete a stale reservation so the occurrence can be generated again.

        Returns:
            True if a stale reservation was deleted. Fresh reservations and
            committed records are left untouched.
        """
        pass
