"""
Orders API Routes

FastAPI routers for checkout, payments, order status, order listings and the cart.
"""

import logging
from typing import Any

from fastapi import APIRouter, Depends, Header, Query, Response, status

from orderflow.api.dependencies import get_request_context, require_roles
from orderflow.config.settings import Settings, get_settings
from orderflow.domains.orders.api.dependencies import (
    get_calculate_order_use_case,
    get_create_order_use_case,
    get_create_payment_intent_use_case,
    get_manage_cart_use_case,
    get_order_query_service,
    get_shipping_config_use_case,
    get_update_delivery_date_use_case,
    get_update_order_status_use_case,
    get_verify_payment_use_case,
)
from orderflow.domains.orders.api.schemas import (
    AddCartItemBody,
    CartResponse,
    CreateOrderBody,
    PaymentDismissedResponse,
    ShippingConfigSchema,
    TransitionsResponse,
    UpdateCartItemBody,
    UpdateDeliveryDateBody,
    UpdateStatusBody,
    VerifyPaymentBody,
)
from orderflow.domains.orders.application.use_cases import (
    CalculateOrderUseCase,
    CreateOrderRequest,
    CreateOrderUseCase,
    CreatePaymentIntentUseCase,
    ManageCartUseCase,
    OrderQueryService,
    ShippingConfigUseCase,
    UpdateDeliveryDateUseCase,
    UpdateOrderStatusUseCase,
    VerifyPaymentRequest,
    VerifyPaymentUseCase,
)
from orderflow.domains.orders.application.use_cases.query_orders import SCOPE_ALL, project
from orderflow.domains.orders.domain.value_objects import ActorRole, OrderStatus, RequestContext

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/orders", tags=["Orders"])
cart_router = APIRouter(prefix="/cart", tags=["Cart"])

require_customer = require_roles(ActorRole.CUSTOMER)
require_admin = require_roles(ActorRole.ADMIN)


# ============================================================================
# Checkout
# ============================================================================


@router.get("/calculate")
async def calculate_order(
    actor: RequestContext = Depends(require_customer),  # noqa: B008
    use_case: CalculateOrderUseCase = Depends(get_calculate_order_use_case),  # noqa: B008
) -> dict[str, Any]:
    """Price the caller's cart with current catalog data."""
    calculation = await use_case.execute(actor.user_id)
    return calculation.to_dict()


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_order(
    body: CreateOrderBody,
    response: Response,
    idempotency_key: str | None = Header(None, alias="Idempotency-Key", max_length=128),
    actor: RequestContext = Depends(require_customer),  # noqa: B008
    use_case: CreateOrderUseCase = Depends(get_create_order_use_case),  # noqa: B008
    settings: Settings = Depends(get_settings),  # noqa: B008
) -> dict[str, Any]:
    """
    Place an order from the caller's cart and open a payment intent.

    `gateway_order` is null with `payment_retryable: true` when the gateway
    could not be reached; the order exists and a new intent can be requested.
    """
    result = await use_case.execute(
        CreateOrderRequest(
            customer_id=actor.user_id,
            shipping_address=body.shipping_address.to_value_object(),
            idempotency_key=idempotency_key,
        )
    )
    if result.replayed:
        response.status_code = status.HTTP_200_OK

    data = result.to_dict()
    data["key_id"] = settings.RAZORPAY_KEY_ID
    return data


# ============================================================================
# Shipping configuration (admin)
# ============================================================================


@router.get("/admin/shipping-config", response_model=ShippingConfigSchema)
async def get_shipping_config(
    actor: RequestContext = Depends(require_admin),  # noqa: B008
    use_case: ShippingConfigUseCase = Depends(get_shipping_config_use_case),  # noqa: B008
):
    config = await use_case.get(actor)
    return ShippingConfigSchema.from_config(config)


@router.put("/admin/shipping-config", response_model=ShippingConfigSchema)
async def update_shipping_config(
    body: ShippingConfigSchema,
    actor: RequestContext = Depends(require_admin),  # noqa: B008
    use_case: ShippingConfigUseCase = Depends(get_shipping_config_use_case),  # noqa: B008
):
    config = await use_case.update(body.to_config(), actor)
    return ShippingConfigSchema.from_config(config)


# ============================================================================
# Listings
# ============================================================================


@router.get("")
async def list_orders(
    scope: str = Query(SCOPE_ALL, description="all | admin_only"),
    order_status: OrderStatus | None = Query(None, alias="status"),
    search: str | None = Query(None, max_length=200),
    limit: int = Query(20),
    skip: int = Query(0),
    actor: RequestContext = Depends(get_request_context),  # noqa: B008
    query: OrderQueryService = Depends(get_order_query_service),  # noqa: B008
) -> dict[str, Any]:
    """Orders visible to the caller, newest first, projected for their role."""
    return await query.list_orders(actor, scope=scope, status=order_status, search=search, skip=skip, limit=limit)


@router.get("/{order_id}")
async def get_order(
    order_id: str,
    actor: RequestContext = Depends(get_request_context),  # noqa: B008
    query: OrderQueryService = Depends(get_order_query_service),  # noqa: B008
) -> dict[str, Any]:
    return await query.get_order(order_id, actor)


# ============================================================================
# Payments
# ============================================================================


@router.post("/{order_id}/payment-intent")
async def create_payment_intent(
    order_id: str,
    actor: RequestContext = Depends(require_customer),  # noqa: B008
    use_case: CreatePaymentIntentUseCase = Depends(get_create_payment_intent_use_case),  # noqa: B008
    settings: Settings = Depends(get_settings),  # noqa: B008
) -> dict[str, Any]:
    """Open (or return the existing) gateway order for an unpaid order."""
    order, gateway_order = await use_case.execute(order_id, actor)
    return {
        "order": order.to_dict(),
        "gateway_order": gateway_order.to_dict(),
        "key_id": settings.RAZORPAY_KEY_ID,
    }


@router.post("/{order_id}/verify-payment")
async def verify_payment(
    order_id: str,
    body: VerifyPaymentBody,
    actor: RequestContext = Depends(get_request_context),  # noqa: B008
    use_case: VerifyPaymentUseCase = Depends(get_verify_payment_use_case),  # noqa: B008
) -> dict[str, Any]:
    """Check the checkout signature and mark the order paid."""
    order = await use_case.execute(
        VerifyPaymentRequest(
            order_id=order_id,
            gateway_order_id=body.gateway_order_id,
            gateway_payment_id=body.gateway_payment_id,
            signature=body.signature,
        ),
        actor,
    )
    return {"order": project(order, actor)}


@router.post("/{order_id}/payment-dismissed", response_model=PaymentDismissedResponse)
async def payment_dismissed(
    order_id: str,
    actor: RequestContext = Depends(require_customer),  # noqa: B008
    query: OrderQueryService = Depends(get_order_query_service),  # noqa: B008
):
    """The customer closed the checkout widget. Nothing changes on the order."""
    await query.get_order(order_id, actor)
    logger.info(f"[PAYMENT] Checkout dismissed for order {order_id} by {actor.user_id}")
    return PaymentDismissedResponse()


# ============================================================================
# Status
# ============================================================================


@router.patch("/{order_id}/status")
async def update_order_status(
    order_id: str,
    body: UpdateStatusBody,
    actor: RequestContext = Depends(get_request_context),  # noqa: B008
    use_case: UpdateOrderStatusUseCase = Depends(get_update_order_status_use_case),  # noqa: B008
) -> dict[str, Any]:
    order = await use_case.execute(order_id, body.status, actor)
    return {"order": project(order, actor)}


@router.get("/{order_id}/transitions", response_model=TransitionsResponse)
async def get_allowed_transitions(
    order_id: str,
    actor: RequestContext = Depends(get_request_context),  # noqa: B008
    use_case: UpdateOrderStatusUseCase = Depends(get_update_order_status_use_case),  # noqa: B008
    query: OrderQueryService = Depends(get_order_query_service),  # noqa: B008
):
    allowed = await use_case.allowed_targets(order_id, actor)
    current = await query.get_order(order_id, actor)
    return TransitionsResponse(order_id=order_id, status=OrderStatus(current["status"]), allowed=allowed)


@router.patch("/{order_id}/delivery-date")
async def update_delivery_date(
    order_id: str,
    body: UpdateDeliveryDateBody,
    actor: RequestContext = Depends(require_admin),  # noqa: B008
    use_case: UpdateDeliveryDateUseCase = Depends(get_update_delivery_date_use_case),  # noqa: B008
) -> dict[str, Any]:
    order = await use_case.execute(order_id, body.delivery_date, actor)
    return {"order": project(order, actor)}


# ============================================================================
# Cart
# ============================================================================


@cart_router.get("", response_model=CartResponse)
async def get_cart(
    actor: RequestContext = Depends(require_customer),  # noqa: B008
    use_case: ManageCartUseCase = Depends(get_manage_cart_use_case),  # noqa: B008
):
    return CartResponse.from_cart(await use_case.get_cart(actor.user_id))


@cart_router.post("/items", response_model=CartResponse)
async def add_cart_item(
    body: AddCartItemBody,
    actor: RequestContext = Depends(require_customer),  # noqa: B008
    use_case: ManageCartUseCase = Depends(get_manage_cart_use_case),  # noqa: B008
):
    return CartResponse.from_cart(await use_case.add_item(actor.user_id, body.product_id, body.quantity))


@cart_router.patch("/items/{product_id}", response_model=CartResponse)
async def update_cart_item(
    product_id: str,
    body: UpdateCartItemBody,
    actor: RequestContext = Depends(require_customer),  # noqa: B008
    use_case: ManageCartUseCase = Depends(get_manage_cart_use_case),  # noqa: B008
):
    return CartResponse.from_cart(await use_case.update_item(actor.user_id, product_id, body.quantity))


@cart_router.delete("/items/{product_id}", response_model=CartResponse)
async def remove_cart_item(
    product_id: str,
    actor: RequestContext = Depends(require_customer),  # noqa: B008
    use_case: ManageCartUseCase = Depends(get_manage_cart_use_case),  # noqa: B008
):
    return CartResponse.from_cart(await use_case.remove_item(actor.user_id, product_id))


@cart_router.delete("", status_code=status.HTTP_204_NO_CONTENT)
async def clear_cart(
    actor: RequestContext = Depends(require_customer),  # noqa: B008
    use_case: ManageCartUseCase = Depends(get_manage_cart_use_case),  # noqa: B008
) -> None:
    await use_case.clear(actor.user_id)


__all__ = ["router", "cart_router"]
