"""
Order Query Service

Read-side projections of orders for admins, vendors and customers.
"""

import logging
from typing import Any

from orderflow.core.domain import ForbiddenException, ValidationException
from orderflow.domains.orders.application.dto import OrderSearchCriteria
from orderflow.domains.orders.application.ports import IOrderRepository
from orderflow.domains.orders.domain.entities import Order
from orderflow.domains.orders.domain.value_objects import ActorRole, OrderStatus, RequestContext

from .order_access import get_visible_order

logger = logging.getLogger(__name__)

SCOPE_ALL = "all"
SCOPE_ADMIN_ONLY = "admin_only"


def project_for_admin(order: Order) -> dict[str, Any]:
    """Full order plus the customer and a per-vendor breakdown."""
    data = order.to_dict()
    address = order.shipping_address
    data["customer"] = {
        "id": order.customer_id,
        "name": address.name if address else None,
        "phone": address.phone if address else None,
    }
    vendors = []
    for vendor_id, items in order.items_by_vendor().items():
        snapshot = items[0].vendor_snapshot
        vendors.append(
            {
                "vendor_id": vendor_id,
                "vendor_name": snapshot.vendor_name,
                "vendor_phone": snapshot.vendor_phone,
                "is_platform": snapshot.is_platform,
                "item_count": len(items),
                "subtotal": sum(item.total_price for item in items),
            }
        )
    data["vendors"] = vendors
    return data


def project_for_vendor(order: Order, vendor_id: str) -> dict[str, Any]:
    """The vendor's own items only; no customer identity or address."""
    items = order.items_for_vendor(vendor_id)
    return {
        "id": order.id,
        "order_number": order.order_number,
        "status": order.status.value,
        "payment_status": order.payment_status.value,
        "currency": order.currency,
        "items": [item.to_dict() for item in items],
        "item_count": len(items),
        "vendor_subtotal": sum(item.total_price for item in items),
        "placed_at": order.placed_at.isoformat(),
        "expected_delivery_date": order.expected_delivery_date.isoformat() if order.expected_delivery_date else None,
        "shipped_date": order.shipped_date.isoformat() if order.shipped_date else None,
        "updated_at": order.updated_at.isoformat(),
    }


def project_for_customer(order: Order) -> dict[str, Any]:
    return order.to_dict()


def project(order: Order, actor: RequestContext) -> dict[str, Any]:
    """Projection matching the caller's role."""
    if actor.role == ActorRole.ADMIN:
        return project_for_admin(order)
    if actor.role == ActorRole.VENDOR:
        return project_for_vendor(order, actor.user_id)
    return project_for_customer(order)


class OrderQueryService:
    """
    Read-only order listings.

    - Admin: every order; `admin_only` scope keeps orders with platform-sold items
    - Vendor: orders containing their items, trimmed to those items
    - Customer: their own orders

    Status, search text (order number, vendor name, product title) and
    paging combine with AND semantics.
    """

    def __init__(self, order_repository: IOrderRepository, max_limit: int = 100):
        self.order_repository = order_repository
        self.max_limit = max_limit

    async def list_orders(
        self,
        actor: RequestContext,
        scope: str = SCOPE_ALL,
        status: OrderStatus | None = None,
        search: str | None = None,
        skip: int = 0,
        limit: int = 20,
    ) -> dict[str, Any]:
        if limit < 1 or limit > self.max_limit:
            raise ValidationException(f"limit must be between 1 and {self.max_limit}", field="limit")
        if skip < 0:
            raise ValidationException("skip cannot be negative", field="skip")
        if scope not in (SCOPE_ALL, SCOPE_ADMIN_ONLY):
            raise ValidationException(f"Unknown scope '{scope}'", field="scope")
        if scope == SCOPE_ADMIN_ONLY and not actor.is_admin:
            raise ForbiddenException("list_orders", "admin_only scope", "admin only")

        criteria = OrderSearchCriteria(
            status=status,
            search=search.strip() if search and search.strip() else None,
            skip=skip,
            limit=limit,
            admin_only=scope == SCOPE_ADMIN_ONLY,
        )
        if actor.role == ActorRole.VENDOR:
            criteria.vendor_id = actor.user_id
        elif actor.role == ActorRole.CUSTOMER:
            criteria.customer_id = actor.user_id

        page = await self.order_repository.search(criteria)
        logger.debug(f"Listed {len(page.orders)}/{page.total} orders for {actor.role.value}:{actor.user_id}")

        return {
            "orders": [project(order, actor) for order in page.orders],
            "total": page.total,
            "skip": skip,
            "limit": limit,
        }

    async def get_order(self, order_id: str, actor: RequestContext) -> dict[str, Any]:
        order = await get_visible_order(self.order_repository, order_id, actor)
        return project(order, actor)
