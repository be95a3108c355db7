"""Preventive maintenance schedule entity."""

from datetime import date
from uuid import uuid4

from pydantic import Field, field_validator

from ...shared.base import Entity
from ...shared.exceptions import ValidationError
from ..value_objects.generation import PM_TITLE_PREFIX


def new_schedule_id() -> str:
    return uuid4().hex


class PreventiveSchedule(Entity):
    """
    A recurring maintenance plan for exactly one asset.

    ``next_due_date`` always points at the earliest occurrence that has not yet
    produced a work order. The engine only ever moves it forward; retiring a
    schedule is done by clearing ``active``.
    """

    id: str = Field(default_factory=new_schedule_id)
    title: str = Field(min_length=1, max_length=200)
    asset_id: str = Field(min_length=1)
    frequency_days: int
    next_due_date: date | None = None
    active: bool = True
    store_id: str | None = None

    @field_validator("title", "asset_id")
    @classmethod
    def strip_required_text(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v

    @field_validator("frequency_days")
    @classmethod
    def validate_frequency(cls, v: int) -> int:
        """Frequency must be at least one day."""
        if v < 1:
            raise ValueError("frequency_days must be >= 1")
        return v

    @classmethod
    def create(
        cls,
        title: str,
        asset_id: str,
        frequency_days: int,
        next_due_date: date | None,
        active: bool = True,
        store_id: str | None = None,
        schedule_id: str | None = None,
    ) -> "PreventiveSchedule":
        """Create a schedule, raising a domain ``ValidationError`` on bad input."""
        if not title or not title.strip():
            raise ValidationError("title", title, "Title is required", "TITLE_REQUIRED")
        if not asset_id or not asset_id.strip():
            raise ValidationError(
                "asset_id", asset_id, "Asset is required", "ASSET_REQUIRED"
            )
        if frequency_days is None or frequency_days < 1:
            raise ValidationError(
                "frequency_days",
                frequency_days,
                "Frequency must be a positive number of days",
                "FREQUENCY_NOT_POSITIVE",
            )
        if active and next_due_date is None:
            raise ValidationError(
                "next_due_date",
                None,
                "An active schedule needs a next due date",
                "NEXT_DUE_DATE_REQUIRED",
            )

        data = {
            "title": title,
            "asset_id": asset_id,
            "frequency_days": frequency_days,
            "next_due_date": next_due_date,
            "active": active,
            "store_id": store_id,
        }
        if schedule_id:
            data["id"] = schedule_id
        return cls(**data)

    @property
    def work_order_title(self) -> str:
        return f"{PM_TITLE_PREFIX}{self.title}"

    def advance_to(self, next_due_date: date) -> None:
        """Move the next occurrence forward."""
        if self.next_due_date is not None and next_due_date <= self.next_due_date:
            raise ValidationError(
                "next_due_date",
                next_due_date.isoformat(),
                f"Next due date can only move forward from "
                f"{self.next_due_date.isoformat()}",
                "NEXT_DUE_DATE_NOT_FORWARD",
            )
        self.next_due_date = next_due_date
        self.mark_updated()

    def deactivate(self) -> None:
        self.active = False
        self.mark_updated()

    def activate(self, next_due_date: date | None = None) -> None:
        if next_due_date is not None:
            self.next_due_date = next_due_date
        if self.next_due_date is None:
            raise ValidationError(
                "next_due_date",
                None,
                "An active schedule needs a next due date",
                "NEXT_DUE_DATE_REQUIRED",
            )
        self.active = True
        self.mark_updated()

    def is_valid(self) -> bool:
        if self.frequency_days < 1:
            return False
        if not self.title or not self.asset_id:
            return False
        return not (self.active and self.next_due_date is None)
