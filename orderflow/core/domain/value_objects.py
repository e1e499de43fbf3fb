"""
Immutable domain primitives compared by value.
"""

from abc import ABC
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Self


@dataclass(frozen=True)
class ValueObject(ABC):
    """Frozen dataclass base; subclasses check their fields in `_validate`."""

    def __post_init__(self):
        self._validate()

    def _validate(self) -> None:
        return None


class StatusEnum(str, Enum):
    """String enum that serialises as its value and parses case-insensitively."""

    @classmethod
    def values(cls) -> list[str]:
        return [member.value for member in cls]

    @classmethod
    def from_string(cls, value: str) -> Self:
        normalized = value.strip().lower()
        for member in cls:
            if member.value == normalized:
                return member
        raise ValueError(f"Invalid {cls.__name__}: {value!r} (expected one of {', '.join(cls.values())})")

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Percentage(ValueObject):
    """A rate between 0 and 100, applied to integer minor-unit amounts."""

    value: Decimal

    def _validate(self) -> None:
        if not isinstance(self.value, Decimal):
            object.__setattr__(self, "value", Decimal(str(self.value)))
        if not Decimal("0") <= self.value <= Decimal("100"):
            raise ValueError(f"Percentage out of range: {self.value}")

    def of_minor_units(self, amount: int) -> int:
        """Share of `amount`, rounded half-up to a whole minor unit."""
        return int((Decimal(amount) * self.value / Decimal("100")).quantize(Decimal("1"), ROUND_HALF_UP))

    def __str__(self) -> str:
        return f"{self.value}%"
