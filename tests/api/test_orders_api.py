"""
API tests for the orders, cart and webhook endpoints.

Runs the real FastAPI app with in-memory repositories and the fake gateway.
"""

import json

import pytest

API = "/api/v1"

ADDRESS = {
    "name": "Priya Sharma",
    "phone": "+919876543210",
    "line1": "12 MG Road",
    "city": "Bengaluru",
    "state": "Karnataka",
    "postal_code": "560001",
}


def add_to_cart(client, headers, product_id, quantity):
    response = client.post(f"{API}/cart/items", json={"product_id": product_id, "quantity": quantity}, headers=headers)
    assert response.status_code == 200, response.text
    return response.json()


def checkout(client, headers, lines=(("prod-rice", 12), ("prod-oil", 2)), idempotency_key=None):
    for product_id, quantity in lines:
        add_to_cart(client, headers, product_id, quantity)
    extra = {"Idempotency-Key": idempotency_key} if idempotency_key else {}
    return client.post(f"{API}/orders", json={"shipping_address": ADDRESS}, headers={**headers, **extra})


def webhook_body(gateway_order, event="payment.captured", payment_id="pay_001") -> bytes:
    return json.dumps(
        {
            "entity": "event",
            "event": event,
            "contains": ["payment"],
            "payload": {
                "payment": {
                    "entity": {
                        "id": payment_id,
                        "amount": gateway_order["amount"],
                        "currency": gateway_order["currency"],
                        "status": "captured",
                        "order_id": gateway_order["id"],
                    }
                }
            },
            "created_at": 1760860800,
        }
    ).encode()


# ============================================================================
# Auth and Health
# ============================================================================


@pytest.mark.api
def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok", "environment": "test"}


@pytest.mark.api
def test_missing_token(client):
    response = client.get(f"{API}/cart")

    assert response.status_code == 401
    assert response.json()["error"] is True


@pytest.mark.api
def test_invalid_token(client):
    response = client.get(f"{API}/cart", headers={"Authorization": "Bearer not-a-jwt"})

    assert response.status_code == 401


@pytest.mark.api
def test_unknown_role(client, auth_headers):
    response = client.get(f"{API}/cart", headers=auth_headers("someone", "superuser"))

    assert response.status_code == 403


@pytest.mark.api
def test_cart_is_customer_only(client, vendor_headers):
    response = client.get(f"{API}/cart", headers=vendor_headers)

    assert response.status_code == 403


# ============================================================================
# Cart and Checkout
# ============================================================================


@pytest.mark.api
def test_cart_and_calculate(client, customer_headers):
    """Test cart edits and the authoritative quote."""
    add_to_cart(client, customer_headers, "prod-rice", 10)
    cart = add_to_cart(client, customer_headers, "prod-rice", 2)
    assert cart["items"] == [{"product_id": "prod-rice", "quantity": 12}]
    add_to_cart(client, customer_headers, "prod-oil", 2)

    response = client.get(f"{API}/orders/calculate", headers=customer_headers)

    assert response.status_code == 200
    quote = response.json()
    assert (quote["subtotal"], quote["tax"], quote["shipping_cost"], quote["total"]) == (158000, 14400, 10000, 182400)


@pytest.mark.api
def test_add_unavailable_product(client, customer_headers):
    response = client.post(
        f"{API}/cart/items", json={"product_id": "prod-retired", "quantity": 1}, headers=customer_headers
    )

    assert response.status_code == 422
    assert response.json()["code"] == "PRODUCT_UNAVAILABLE"


@pytest.mark.api
def test_update_and_remove_cart_items(client, customer_headers):
    add_to_cart(client, customer_headers, "prod-rice", 2)
    add_to_cart(client, customer_headers, "prod-oil", 2)

    updated = client.patch(f"{API}/cart/items/prod-rice", json={"quantity": 0}, headers=customer_headers)
    removed = client.delete(f"{API}/cart/items/prod-oil", headers=customer_headers)
    missing = client.delete(f"{API}/cart/items/prod-oil", headers=customer_headers)

    assert updated.json()["items"] == [{"product_id": "prod-oil", "quantity": 2}]
    assert removed.json()["items"] == []
    assert missing.status_code == 404


@pytest.mark.api
def test_create_order_and_replay(client, customer_headers, order_repository):
    """Test checkout answers 201 and a replay with the same key answers 200."""
    # Act
    first = checkout(client, customer_headers, idempotency_key="checkout-1")
    replay = client.post(
        f"{API}/orders",
        json={"shipping_address": ADDRESS},
        headers={**customer_headers, "Idempotency-Key": "checkout-1"},
    )

    # Assert
    assert first.status_code == 201, first.text
    body = first.json()
    assert body["order"]["total"] == 182400
    assert body["gateway_order"]["amount"] == 182400
    assert body["payment_retryable"] is False
    assert body["key_id"] == "rzp_test_key"

    assert replay.status_code == 200
    assert replay.json()["order"]["id"] == body["order"]["id"]
    assert len(order_repository.orders) == 1


@pytest.mark.api
def test_create_order_out_of_stock(client, customer_headers):
    response = checkout(client, customer_headers, lines=(("prod-tea", 2),))

    assert response.status_code == 409
    assert response.json()["code"] == "ORDER_CREATION_FAILED"
    assert response.json()["details"]["reason"] == "OUT_OF_STOCK"


@pytest.mark.api
def test_create_order_invalid_address(client, customer_headers):
    response = client.post(
        f"{API}/orders", json={"shipping_address": {**ADDRESS, "postal_code": ""}}, headers=customer_headers
    )

    assert response.status_code == 422
    assert response.json()["code"] == "REQUEST_VALIDATION_ERROR"


# ============================================================================
# Payments
# ============================================================================


@pytest.mark.api
def test_verify_payment(client, customer_headers, payment_gateway):
    """Test a signed checkout callback marks the order paid."""
    created = checkout(client, customer_headers).json()
    gateway_order_id = created["gateway_order"]["id"]

    response = client.post(
        f"{API}/orders/{created['order']['id']}/verify-payment",
        json={
            "gateway_order_id": gateway_order_id,
            "gateway_payment_id": "pay_001",
            "signature": payment_gateway.sign_payment(gateway_order_id, "pay_001"),
        },
        headers=customer_headers,
    )

    assert response.status_code == 200, response.text
    assert response.json()["order"]["payment_status"] == "paid"


@pytest.mark.api
def test_verify_payment_bad_signature(client, customer_headers):
    created = checkout(client, customer_headers).json()

    response = client.post(
        f"{API}/orders/{created['order']['id']}/verify-payment",
        json={"gateway_order_id": created["gateway_order"]["id"], "gateway_payment_id": "pay_001", "signature": "0" * 64},
        headers=customer_headers,
    )

    assert response.status_code == 400
    assert response.json()["code"] == "SIGNATURE_INVALID"


@pytest.mark.api
def test_payment_intent_is_reused(client, customer_headers):
    created = checkout(client, customer_headers).json()

    response = client.post(f"{API}/orders/{created['order']['id']}/payment-intent", headers=customer_headers)

    assert response.status_code == 200
    assert response.json()["gateway_order"]["id"] == created["gateway_order"]["id"]


@pytest.mark.api
def test_payment_dismissed(client, customer_headers, order_repository):
    created = checkout(client, customer_headers).json()
    order_id = created["order"]["id"]
    version = order_repository.stored(order_id).version

    response = client.post(f"{API}/orders/{order_id}/payment-dismissed", headers=customer_headers)

    assert response.status_code == 200
    assert response.json() == {"status": "payment_cancelled", "retryable": True}
    assert order_repository.stored(order_id).version == version


# ============================================================================
# Webhook
# ============================================================================


@pytest.mark.api
def test_webhook_settles_order(client, customer_headers, payment_gateway, order_repository):
    """Test a signed capture event settles the order and a redelivery is a duplicate."""
    created = checkout(client, customer_headers).json()
    body = webhook_body(created["gateway_order"])
    headers = {
        "X-Razorpay-Signature": payment_gateway.sign_webhook(body),
        "X-Razorpay-Event-Id": "evt_001",
        "Content-Type": "application/json",
    }

    first = client.post(f"{API}/webhooks/razorpay", content=body, headers=headers)
    again = client.post(f"{API}/webhooks/razorpay", content=body, headers=headers)

    assert first.status_code == 200
    assert first.json()["status"] == "settled"
    assert first.json()["order_id"] == created["order"]["id"]
    assert again.json() == {"status": "duplicate", "event": "payment.captured", "previous": "settled"}
    assert order_repository.stored(created["order"]["id"]).payment_status.value == "paid"


@pytest.mark.api
def test_webhook_bad_signature(client, customer_headers):
    created = checkout(client, customer_headers).json()
    body = webhook_body(created["gateway_order"])

    response = client.post(
        f"{API}/webhooks/razorpay", content=body, headers={"X-Razorpay-Signature": "f" * 64}
    )

    assert response.status_code == 400
    assert response.json()["code"] == "SIGNATURE_INVALID"


@pytest.mark.api
def test_webhook_malformed_payload(client, payment_gateway):
    body = b'{"event": "payment.captured", "payload": {"payment": {"entity": {"id": 1}}}}'

    response = client.post(
        f"{API}/webhooks/razorpay", content=body, headers={"X-Razorpay-Signature": payment_gateway.sign_webhook(body)}
    )

    assert response.status_code == 400
    assert response.json()["code"] == "VALIDATION_ERROR"


@pytest.mark.api
def test_webhook_without_payment_is_ignored(client, payment_gateway):
    body = b'{"event": "order.paid", "payload": {}}'

    response = client.post(
        f"{API}/webhooks/razorpay", content=body, headers={"X-Razorpay-Signature": payment_gateway.sign_webhook(body)}
    )

    assert response.status_code == 200
    assert response.json() == {"status": "ignored", "event": "order.paid"}


# ============================================================================
# Status, Listings and Admin
# ============================================================================


@pytest.mark.api
def test_vendor_cannot_ship_unpaid_order(client, customer_headers, vendor_headers):
    created = checkout(client, customer_headers).json()

    response = client.patch(
        f"{API}/orders/{created['order']['id']}/status",
        json={"status": "vendor_shipped_to_warehouse"},
        headers=vendor_headers,
    )

    assert response.status_code == 403
    assert response.json()["code"] == "FORBIDDEN"


@pytest.mark.api
def test_invalid_transition(client, customer_headers, admin_headers):
    created = checkout(client, customer_headers).json()

    response = client.patch(
        f"{API}/orders/{created['order']['id']}/status",
        json={"status": "vendor_shipped_to_warehouse"},
        headers=admin_headers,
    )

    assert response.status_code == 409
    assert response.json()["code"] == "INVALID_TRANSITION"


@pytest.mark.api
def test_customer_cancels_and_sees_transitions(client, customer_headers, catalog_repository):
    created = checkout(client, customer_headers).json()
    order_id = created["order"]["id"]

    transitions = client.get(f"{API}/orders/{order_id}/transitions", headers=customer_headers)
    cancelled = client.patch(f"{API}/orders/{order_id}/status", json={"status": "cancelled"}, headers=customer_headers)

    assert transitions.json() == {"order_id": order_id, "status": "created", "allowed": ["cancelled"]}
    assert cancelled.status_code == 200
    assert cancelled.json()["order"]["status"] == "cancelled"
    assert catalog_repository.stock_of("prod-rice") == 100


@pytest.mark.api
def test_listings_follow_role(client, customer_headers, vendor_headers, auth_headers):
    """Test vendors get their projection and other customers see nothing."""
    created = checkout(client, customer_headers).json()

    vendor_listing = client.get(f"{API}/orders", headers=vendor_headers).json()
    stranger_listing = client.get(f"{API}/orders", headers=auth_headers("cust-2002", "customer")).json()
    stranger_view = client.get(f"{API}/orders/{created['order']['id']}", headers=auth_headers("cust-2002", "customer"))

    assert vendor_listing["total"] == 1
    assert vendor_listing["orders"][0]["vendor_subtotal"] == 108000
    assert "customer_id" not in vendor_listing["orders"][0]
    assert stranger_listing["total"] == 0
    assert stranger_view.status_code == 404


@pytest.mark.api
def test_listing_limit_too_large(client, admin_headers):
    response = client.get(f"{API}/orders", params={"limit": 500}, headers=admin_headers)

    assert response.status_code == 400
    assert response.json()["code"] == "VALIDATION_ERROR"


@pytest.mark.api
def test_shipping_config_admin(client, admin_headers, customer_headers):
    updated = client.put(
        f"{API}/orders/admin/shipping-config",
        json={"is_enabled": True, "strategy": "flat_rate", "flat_rate": 4900, "free_shipping_threshold": None},
        headers=admin_headers,
    )
    fetched = client.get(f"{API}/orders/admin/shipping-config", headers=admin_headers)
    refused = client.get(f"{API}/orders/admin/shipping-config", headers=customer_headers)

    assert updated.status_code == 200
    assert fetched.json()["flat_rate"] == 4900
    assert fetched.json()["free_shipping_threshold"] is None
    assert refused.status_code == 403


@pytest.mark.api
def test_update_delivery_date(client, customer_headers, admin_headers):
    created = checkout(client, customer_headers).json()
    order_id = created["order"]["id"]
    placed_on = created["order"]["placed_at"][:10]

    response = client.patch(f"{API}/orders/{order_id}/delivery-date", json={"date": placed_on}, headers=admin_headers)
    cleared = client.patch(f"{API}/orders/{order_id}/delivery-date", json={"date": None}, headers=admin_headers)
    too_early = client.patch(
        f"{API}/orders/{order_id}/delivery-date", json={"date": "2000-01-01"}, headers=admin_headers
    )

    assert response.status_code == 200
    assert response.json()["order"]["expected_delivery_date"] == placed_on
    assert cleared.json()["order"]["expected_delivery_date"] is None
    assert too_early.status_code == 400
