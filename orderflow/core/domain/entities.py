"""
Identity-bearing domain objects.

Orders and carts keep their identity while their contents change; the
aggregate root also carries the row version used for compare-and-swap saves.
"""

from abc import ABC
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Generic, TypeVar
from uuid import uuid4

TId = TypeVar("TId")


def utc_now() -> datetime:
    return datetime.now(UTC)


def generate_uuid_str() -> str:
    return str(uuid4())


@dataclass
class Entity(ABC, Generic[TId]):
    """Equality and hashing follow the id once one is assigned."""

    id: TId | None = field(default=None)
    created_at: datetime = field(default_factory=utc_now)
    updated_at: datetime = field(default_factory=utc_now)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Entity) or self.id is None or other.id is None:
            return False
        return type(self) is type(other) and self.id == other.id

    def __hash__(self) -> int:
        return hash((type(self).__name__, self.id)) if self.id is not None else id(self)

    def touch(self, at: datetime | None = None) -> None:
        self.updated_at = at or utc_now()


@dataclass
class AggregateRoot(Entity[TId], Generic[TId]):
    """
    Consistency boundary for writes.

    `version` is the value the row held when loaded; repositories only
    write when the stored version still matches and then bump it here.
    """

    version: int = field(default=0)

    def increment_version(self) -> None:
        self.version += 1
