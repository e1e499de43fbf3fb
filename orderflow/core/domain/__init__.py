"""
Domain Layer - Core DDD building blocks

This module provides base classes for Domain-Driven Design:
- Entities: Objects with identity and lifecycle
- Value Objects: Immutable objects compared by value
- Exceptions: Domain-specific error handling
"""

from orderflow.core.domain.entities import (
    AggregateRoot,
    Entity,
    generate_uuid_str,
    utc_now,
)
from orderflow.core.domain.exceptions import (
    BusinessRuleViolationException,
    ConflictingUpdateException,
    DomainException,
    EntityNotFoundException,
    ForbiddenException,
    IntegrationException,
    ValidationException,
)
from orderflow.core.domain.value_objects import (
    Percentage,
    StatusEnum,
    ValueObject,
)

__all__ = [
    # Entities
    "Entity",
    "AggregateRoot",
    "generate_uuid_str",
    "utc_now",
    # Value Objects
    "ValueObject",
    "Percentage",
    "StatusEnum",
    # Exceptions
    "DomainException",
    "ValidationException",
    "EntityNotFoundException",
    "BusinessRuleViolationException",
    "ForbiddenException",
    "ConflictingUpdateException",
    "IntegrationException",
]
