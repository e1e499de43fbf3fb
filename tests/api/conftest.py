"""
API test fixtures: the FastAPI app wired to the in-memory repositories.
"""

import pytest
from fastapi.testclient import TestClient
from jose import jwt

from orderflow.api.dependencies import get_container
from orderflow.api.routes.razorpay_webhook import get_webhook_deduplicator
from orderflow.core.app_factory import create_app
from orderflow.core.container import OrdersContainer
from orderflow.database.async_db import get_async_db


class InMemoryOrdersContainer(OrdersContainer):
    """OrdersContainer whose repositories are shared in-memory doubles."""

    def __init__(self, settings, payment_gateway, repositories):
        super().__init__(settings, payment_gateway=payment_gateway)
        self.repositories = repositories

    def create_order_repository(self, db):
        return self.repositories["orders"]

    def create_catalog_repository(self, db):
        return self.repositories["catalog"]

    def create_cart_repository(self, db):
        return self.repositories["cart"]

    def create_shipping_config_repository(self, db):
        return self.repositories["shipping"]


@pytest.fixture
def container(
    settings,
    payment_gateway,
    order_repository,
    catalog_repository,
    cart_repository,
    shipping_config_repository,
):
    return InMemoryOrdersContainer(
        settings,
        payment_gateway,
        {
            "orders": order_repository,
            "catalog": catalog_repository,
            "cart": cart_repository,
            "shipping": shipping_config_repository,
        },
    )


@pytest.fixture
def client(settings, container, deduplicator):
    """Test client without lifespan, so no database or Redis is touched."""
    app = create_app(settings)

    async def no_db():
        yield None

    async def in_memory_deduplicator():
        return deduplicator

    app.dependency_overrides[get_async_db] = no_db
    app.dependency_overrides[get_container] = lambda: container
    app.dependency_overrides[get_webhook_deduplicator] = in_memory_deduplicator

    return TestClient(app)


@pytest.fixture
def auth_headers(settings):
    """Build bearer headers for a user id and role."""

    def _headers(user_id: str, role: str) -> dict[str, str]:
        token = jwt.encode({"sub": user_id, "role": role}, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest.fixture
def customer_headers(auth_headers):
    return auth_headers("cust-1001", "customer")


@pytest.fixture
def admin_headers(auth_headers):
    return auth_headers("admin-1", "admin")


@pytest.fixture
def vendor_headers(auth_headers):
    return auth_headers("vendor-anand", "vendor")
