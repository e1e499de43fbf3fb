"""
Orders API Schemas

Pydantic schemas for API request/response validation. Money fields are
integer minor units (paise).
"""

from datetime import date

from pydantic import BaseModel, ConfigDict, Field

from orderflow.domains.orders.domain.entities import Cart
from orderflow.domains.orders.domain.services import ShippingConfig, ShippingStrategy
from orderflow.domains.orders.domain.value_objects import OrderStatus, ShippingAddress


class ShippingAddressSchema(BaseModel):
    """Delivery address captured at checkout."""

    name: str = Field(..., min_length=1, max_length=200)
    phone: str = Field(..., min_length=5, max_length=32)
    line1: str = Field(..., min_length=1, max_length=300)
    line2: str | None = Field(default=None, max_length=300)
    city: str = Field(..., min_length=1, max_length=100)
    state: str = Field(..., min_length=1, max_length=100)
    postal_code: str = Field(..., min_length=3, max_length=12)
    country: str = Field(default="India", max_length=100)

    def to_value_object(self) -> ShippingAddress:
        return ShippingAddress(**self.model_dump())


class CreateOrderBody(BaseModel):
    """Body of POST /orders. Items and prices come from the server-side cart."""

    shipping_address: ShippingAddressSchema


class VerifyPaymentBody(BaseModel):
    """Checkout callback values returned by the payment widget."""

    gateway_order_id: str = Field(..., min_length=1, max_length=64)
    gateway_payment_id: str = Field(..., min_length=1, max_length=64)
    signature: str = Field(..., min_length=1, max_length=256)


class UpdateStatusBody(BaseModel):
    status: OrderStatus


class UpdateDeliveryDateBody(BaseModel):
    """`date: null` clears the expected delivery date."""

    model_config = ConfigDict(populate_by_name=True)

    delivery_date: date | None = Field(..., alias="date")


class ShippingConfigSchema(BaseModel):
    """Store-wide shipping configuration."""

    is_enabled: bool = True
    strategy: ShippingStrategy = ShippingStrategy.FLAT_RATE
    flat_rate: int = Field(default=0, ge=0)
    free_shipping_threshold: int | None = Field(default=None, ge=0)
    per_kg_rate: int = Field(default=0, ge=0)

    def to_config(self) -> ShippingConfig:
        return ShippingConfig(
            is_enabled=self.is_enabled,
            flat_rate=self.flat_rate,
            free_shipping_threshold=self.free_shipping_threshold,
            strategy=self.strategy,
            per_kg_rate=self.per_kg_rate,
        )

    @classmethod
    def from_config(cls, config: ShippingConfig) -> "ShippingConfigSchema":
        return cls(
            is_enabled=config.is_enabled,
            strategy=config.strategy,
            flat_rate=config.flat_rate,
            free_shipping_threshold=config.free_shipping_threshold,
            per_kg_rate=config.per_kg_rate,
        )


class AddCartItemBody(BaseModel):
    product_id: str = Field(..., min_length=1, max_length=64)
    quantity: int = Field(default=1, ge=1)


class UpdateCartItemBody(BaseModel):
    """Zero removes the line."""

    quantity: int = Field(..., ge=0)


class CartLineResponse(BaseModel):
    product_id: str
    quantity: int


class CartResponse(BaseModel):
    customer_id: str
    items: list[CartLineResponse]

    @classmethod
    def from_cart(cls, cart: Cart) -> "CartResponse":
        return cls(
            customer_id=cart.customer_id,
            items=[CartLineResponse(product_id=line.product_id, quantity=line.quantity) for line in cart.lines],
        )


class TransitionsResponse(BaseModel):
    order_id: str
    status: OrderStatus
    allowed: list[OrderStatus]


class PaymentDismissedResponse(BaseModel):
    status: str = "payment_cancelled"
    retryable: bool = True
