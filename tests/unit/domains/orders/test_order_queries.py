"""
Unit tests for OrderQueryService.

Tests:
- Role scoping of listings
- Vendor and admin projections
- Search, status filter and paging
"""

import pytest

from orderflow.core.domain import EntityNotFoundException, ForbiddenException, ValidationException
from orderflow.domains.orders.domain.value_objects import OrderStatus, PaymentStatus

# ============================================================================
# FIXTURES
# ============================================================================


@pytest.fixture
def seeded_orders(order_repository, make_order, make_item):
    """
    Three orders, newest first:
    - mixed: cust-1001, rice from vendor-anand and oil from vendor-bharat
    - platform: cust-2002, tea sold by the platform
    - packed: cust-1001, rice only, already packed
    """
    mixed = make_order(payment_status=PaymentStatus.PAID)
    platform = make_order(
        customer_id="cust-2002",
        items=[
            make_item(
                "prod-tea", "vendor-platform", "Orderflow Store", qty=3, price_per_unit=5000, title="Assam Tea",
                is_platform=True,
            )
        ],
    )
    packed = make_order(status=OrderStatus.PACKED, items=[make_item(qty=4)])
    for order in (mixed, platform, packed):
        order_repository.orders[order.id] = order
    return {"mixed": mixed, "platform": platform, "packed": packed}


def ids(listing):
    return [order["id"] for order in listing["orders"]]


# ============================================================================
# Listing Scope Tests
# ============================================================================


@pytest.mark.unit
@pytest.mark.use_case
@pytest.mark.asyncio
async def test_customer_sees_only_own_orders(query_service, seeded_orders, customer):
    """Test a customer listing holds only their orders, newest first."""
    # Act
    listing = await query_service.list_orders(customer)

    # Assert
    assert ids(listing) == [seeded_orders["mixed"].id, seeded_orders["packed"].id]
    assert listing["total"] == 2
    assert listing["orders"][0]["customer_id"] == "cust-1001"


@pytest.mark.unit
@pytest.mark.use_case
@pytest.mark.asyncio
async def test_vendor_projection_hides_customer_and_other_vendors(query_service, seeded_orders, vendor_b):
    """Test vendors get their own items only, without customer identity."""
    listing = await query_service.list_orders(vendor_b)

    assert ids(listing) == [seeded_orders["mixed"].id]
    projected = listing["orders"][0]
    assert "customer_id" not in projected
    assert "shipping_address" not in projected
    assert "total" not in projected
    assert [item["product_id"] for item in projected["items"]] == ["prod-oil"]
    assert projected["vendor_subtotal"] == 50000
    assert projected["payment_status"] == "paid"


@pytest.mark.unit
@pytest.mark.use_case
@pytest.mark.asyncio
async def test_admin_projection_includes_customer_and_vendor_breakdown(query_service, seeded_orders, admin):
    listing = await query_service.list_orders(admin)

    assert listing["total"] == 3
    mixed = next(order for order in listing["orders"] if order["id"] == seeded_orders["mixed"].id)
    assert mixed["customer"]["id"] == "cust-1001"
    assert mixed["customer"]["name"] == "Priya Sharma"
    assert [(v["vendor_id"], v["subtotal"]) for v in mixed["vendors"]] == [
        ("vendor-anand", 10000),
        ("vendor-bharat", 50000),
    ]


@pytest.mark.unit
@pytest.mark.use_case
@pytest.mark.asyncio
async def test_admin_only_scope_keeps_platform_orders(query_service, seeded_orders, admin):
    """Test the admin_only scope lists orders holding platform-sold items."""
    listing = await query_service.list_orders(admin, scope="admin_only")

    assert ids(listing) == [seeded_orders["platform"].id]
    assert listing["orders"][0]["vendors"][0]["is_platform"] is True


@pytest.mark.unit
@pytest.mark.use_case
@pytest.mark.asyncio
async def test_admin_only_scope_forbidden_for_others(query_service, vendor_a):
    with pytest.raises(ForbiddenException):
        await query_service.list_orders(vendor_a, scope="admin_only")


@pytest.mark.unit
@pytest.mark.use_case
@pytest.mark.asyncio
async def test_unknown_scope_rejected(query_service, admin):
    with pytest.raises(ValidationException):
        await query_service.list_orders(admin, scope="everything")


@pytest.mark.unit
@pytest.mark.use_case
@pytest.mark.asyncio
@pytest.mark.parametrize("skip,limit", [(0, 0), (0, 101), (-1, 20)])
async def test_paging_bounds(query_service, admin, skip, limit):
    """Test limits above the maximum and negative offsets are refused."""
    with pytest.raises(ValidationException):
        await query_service.list_orders(admin, skip=skip, limit=limit)


# ============================================================================
# Filter Tests
# ============================================================================


@pytest.mark.unit
@pytest.mark.use_case
@pytest.mark.asyncio
async def test_search_by_vendor_name(query_service, seeded_orders, admin):
    """Test search matches vendor names case-insensitively."""
    listing = await query_service.list_orders(admin, search="  bharat ")

    assert ids(listing) == [seeded_orders["mixed"].id]


@pytest.mark.unit
@pytest.mark.use_case
@pytest.mark.asyncio
async def test_search_by_order_number(query_service, seeded_orders, admin):
    number = seeded_orders["packed"].order_number

    listing = await query_service.list_orders(admin, search=number.lower())

    assert ids(listing) == [seeded_orders["packed"].id]


@pytest.mark.unit
@pytest.mark.use_case
@pytest.mark.asyncio
async def test_status_and_search_combine(query_service, seeded_orders, customer):
    """Test filters apply together within the caller's scope."""
    listing = await query_service.list_orders(customer, status=OrderStatus.PACKED, search="rice")

    assert ids(listing) == [seeded_orders["packed"].id]


@pytest.mark.unit
@pytest.mark.use_case
@pytest.mark.asyncio
async def test_paging_keeps_total(query_service, seeded_orders, admin):
    listing = await query_service.list_orders(admin, skip=1, limit=1)

    assert ids(listing) == [seeded_orders["platform"].id]
    assert listing["total"] == 3
    assert (listing["skip"], listing["limit"]) == (1, 1)


# ============================================================================
# Single Order Tests
# ============================================================================


@pytest.mark.unit
@pytest.mark.use_case
@pytest.mark.asyncio
async def test_get_order_for_owner(query_service, seeded_orders, customer):
    order = await query_service.get_order(seeded_orders["mixed"].id, customer)

    assert order["order_number"] == seeded_orders["mixed"].order_number


@pytest.mark.unit
@pytest.mark.use_case
@pytest.mark.asyncio
async def test_get_order_of_another_customer_looks_missing(query_service, seeded_orders, other_customer):
    """Test other customers' orders are reported as not found."""
    with pytest.raises(EntityNotFoundException):
        await query_service.get_order(seeded_orders["mixed"].id, other_customer)


@pytest.mark.unit
@pytest.mark.use_case
@pytest.mark.asyncio
async def test_get_order_for_uninvolved_vendor(query_service, seeded_orders, vendor_b):
    with pytest.raises(EntityNotFoundException):
        await query_service.get_order(seeded_orders["packed"].id, vendor_b)
