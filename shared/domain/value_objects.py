"""
Common Value Objects

Value objects used across the availability and booking domains:
- DateRange: an inclusive range of calendar days
- Money: an amount with currency, used for combined booking cost
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from shared.domain.base import ValueObject
from shared.domain.dates import normalize, overlaps

SUPPORTED_CURRENCIES = ('NOK', 'SEK', 'DKK', 'EUR', 'USD')


@dataclass(frozen=True)
class DateRange(ValueObject):
    """
    Inclusive day range

    Both start_date and end_date belong to the range, so a one-day
    block has start_date == end_date.
    """
    start_date: date
    end_date: date

    def __post_init__(self):
        object.__setattr__(self, 'start_date', normalize(self.start_date))
        object.__setattr__(self, 'end_date', normalize(self.end_date))
        if self.start_date > self.end_date:
            raise ValueError(
                f"Start date ({self.start_date}) must not be after end date ({self.end_date})"
            )

    def overlaps_with(self, other: 'DateRange') -> bool:
        if not isinstance(other, DateRange):
            raise TypeError("Can only check overlap with another DateRange")
        return overlaps(self.start_date, self.end_date, other.start_date, other.end_date)

    def contains(self, check_date: date) -> bool:
        return self.start_date <= check_date <= self.end_date

    def as_tuple(self) -> tuple[date, date]:
        return self.start_date, self.end_date

    def __len__(self) -> int:
        """Number of calendar days covered, both ends included."""
        return (self.end_date - self.start_date).days + 1

    def __str__(self):
        return f"{self.start_date.isoformat()} - {self.end_date.isoformat()}"

    def __repr__(self):
        return f"DateRange({self.start_date}, {self.end_date})"


@dataclass(frozen=True)
class Money(ValueObject):
    """
    Money value object

    Immutable; addition requires matching currencies.
    """
    amount: Decimal
    currency: str = 'NOK'

    def __post_init__(self):
        if self.amount < 0:
            raise ValueError("Amount cannot be negative")
        if self.currency not in SUPPORTED_CURRENCIES:
            raise ValueError(f"Unsupported currency: {self.currency}")

    def __add__(self, other: 'Money') -> 'Money':
        if not isinstance(other, Money):
            raise TypeError("Can only add Money to Money")
        if self.currency != other.currency:
            raise ValueError(f"Cannot add different currencies: {self.currency} and {other.currency}")
        return Money(self.amount + other.amount, self.currency)

    def __mul__(self, factor: int | Decimal) -> 'Money':
        if not isinstance(factor, (int, Decimal)):
            raise TypeError("Can only multiply Money by an integer or Decimal")
        return Money(self.amount * Decimal(factor), self.currency)

    def __str__(self):
        return f"{self.amount:,.2f} {self.currency}"

    def __repr__(self):
        return f"Money({self.amount}, '{self.currency}')"
