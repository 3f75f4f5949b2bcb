"""Conflict reporting types."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Optional


class ConflictType(str, Enum):
    BLOCK = "block"
    BOOKING = "booking"


@dataclass(frozen=True)
class ConflictDetail:
    """Something that overlaps a requested window, tagged by its source."""

    type: ConflictType
    start_date: date
    end_date: date
    reason: str = ""
    booking_id: Optional[int] = None
    booking_number: Optional[str] = None
    block_id: Optional[int] = None
    recurring_instance_id: Optional[str] = None
    is_recurring: bool = False

    @classmethod
    def from_block(cls, block) -> "ConflictDetail":
        return cls(
            type=ConflictType.BLOCK,
            start_date=block.start_date,
            end_date=block.end_date,
            reason=block.reason or "",
            block_id=block.pk,
        )

    @classmethod
    def from_instance(cls, instance) -> "ConflictDetail":
        return cls(
            type=ConflictType.BLOCK,
            start_date=instance.date,
            end_date=instance.date,
            reason=instance.reason,
            block_id=instance.pattern_id,
            recurring_instance_id=instance.id,
            is_recurring=True,
        )

    @classmethod
    def from_booking(cls, booking) -> "ConflictDetail":
        return cls(
            type=ConflictType.BOOKING,
            start_date=booking.start_date,
            end_date=booking.end_date,
            booking_id=booking.pk,
            booking_number=booking.booking_number,
        )

    @property
    def is_block(self) -> bool:
        return self.type == ConflictType.BLOCK

    def describe(self) -> str:
        window = f"{self.start_date.isoformat()} to {self.end_date.isoformat()}"
        if self.type == ConflictType.BOOKING:
            suffix = f" ({self.booking_number})" if self.booking_number else ""
            return f"Booking conflict: {window}{suffix}"
        suffix = f" - {self.reason}" if self.reason else ""
        return f"Blocked: {window}{suffix}"

    def as_dict(self) -> dict:
        data = {
            "type": self.type.value,
            "start_date": self.start_date.isoformat(),
            "end_date": self.end_date.isoformat(),
            "reason": self.reason,
            "is_recurring": self.is_recurring,
        }
        if self.type == ConflictType.BOOKING:
            data["booking_id"] = self.booking_id
            data["booking_number"] = self.booking_number
        else:
            data["block_id"] = self.block_id
            if self.recurring_instance_id:
                data["recurring_instance_id"] = self.recurring_instance_id
        return data


@dataclass(frozen=True)
class AvailabilityResult:
    available: bool
    conflicts: list[ConflictDetail] = field(default_factory=list)

    @property
    def block_conflicts(self) -> list[ConflictDetail]:
        return [conflict for conflict in self.conflicts if conflict.is_block]

    @property
    def booking_conflicts(self) -> list[ConflictDetail]:
        return [conflict for conflict in self.conflicts if not conflict.is_block]

    def as_dict(self) -> dict:
        return {
            "available": self.available,
            "conflicts": [conflict.as_dict() for conflict in self.conflicts],
        }
