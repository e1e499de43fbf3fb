"""
Request Context Value Object

Who is calling. Passed explicitly into every use case instead of
being read from ambient state.
"""

from dataclasses import dataclass

from orderflow.core.domain import StatusEnum, ValueObject


class ActorRole(StatusEnum):
    """Roles that can act on orders."""

    CUSTOMER = "customer"
    VENDOR = "vendor"
    ADMIN = "admin"


@dataclass(frozen=True)
class RequestContext(ValueObject):
    """
    Caller identity for a single request.

    For vendors `user_id` is the vendor id that order items are attributed to.
    """

    user_id: str
    role: ActorRole

    def _validate(self) -> None:
        if not self.user_id:
            raise ValueError("RequestContext requires a user_id")
        if not isinstance(self.role, ActorRole):
            object.__setattr__(self, "role", ActorRole.from_string(str(self.role)))

    @property
    def is_admin(self) -> bool:
        return self.role == ActorRole.ADMIN

    @property
    def is_vendor(self) -> bool:
        return self.role == ActorRole.VENDOR
