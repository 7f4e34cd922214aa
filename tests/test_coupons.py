"""Tests for coupon validation and the coupon API."""
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from app.models.coupon import DiscountType
from app.services.coupon_service import calculate_discount


def test_calculate_discount_percentage():
    discount = calculate_discount(DiscountType.PERCENTAGE, Decimal("10"), Decimal("500000"))
    assert discount == Decimal("50000.00")


def test_calculate_discount_percentage_capped():
    discount = calculate_discount(
        DiscountType.PERCENTAGE, Decimal("20"), Decimal("1000000"), Decimal("50000")
    )
    assert discount == Decimal("50000.00")


def test_calculate_discount_fixed():
    discount = calculate_discount(DiscountType.FIXED, Decimal("25000"), Decimal("100000"))
    assert discount == Decimal("25000.00")


def test_calculate_discount_fixed_never_exceeds_total():
    discount = calculate_discount(DiscountType.FIXED, Decimal("25000"), Decimal("10000"))
    assert discount == Decimal("10000.00")


def test_calculate_discount_rounds_half_up_to_cents():
    discount = calculate_discount(DiscountType.PERCENTAGE, Decimal("15"), Decimal("0.33"))
    assert discount == Decimal("0.05")


def test_create_coupon_uppercases_code(client, create_coupon):
    coupon = create_coupon(code="diskon10")

    assert coupon["code"] == "DISKON10"
    assert coupon["used_count"] == 0


def test_create_coupon_duplicate_code(client, create_coupon, admin_headers):
    create_coupon(code="DISKON10")
    now = datetime.now(timezone.utc)

    response = client.post(
        "/api/v1/coupons/",
        json={
            "code": "Diskon10",
            "discount_type": "fixed",
            "value": "5000",
            "start_date": now.isoformat(),
            "end_date": (now + timedelta(days=1)).isoformat(),
        },
        headers=admin_headers
    )

    assert response.status_code == 409


def test_create_coupon_invalid_window(client, admin_headers):
    now = datetime.now(timezone.utc)

    response = client.post(
        "/api/v1/coupons/",
        json={
            "code": "BACKWARDS",
            "discount_type": "fixed",
            "value": "5000",
            "start_date": now.isoformat(),
            "end_date": (now - timedelta(days=1)).isoformat(),
        },
        headers=admin_headers
    )

    assert response.status_code == 400


def test_create_coupon_percentage_over_100(client, admin_headers):
    now = datetime.now(timezone.utc)

    response = client.post(
        "/api/v1/coupons/",
        json={
            "code": "TOOMUCH",
            "discount_type": "percentage",
            "value": "150",
            "start_date": now.isoformat(),
            "end_date": (now + timedelta(days=1)).isoformat(),
        },
        headers=admin_headers
    )

    assert response.status_code == 422


def test_validate_coupon_percentage_with_minimum(client, create_coupon, customer_headers):
    create_coupon(code="DISKON10", value="10", min_purchase="100000")

    response = client.post(
        "/api/v1/coupons/validate",
        json={"code": "DISKON10", "total_amount": "500000"},
        headers=customer_headers
    )

    assert response.status_code == 200
    data = response.json()
    assert data["valid"] is True
    assert Decimal(data["discount_amount"]) == Decimal("50000")
    assert Decimal(data["final_amount"]) == Decimal("450000")


def test_validate_coupon_percentage_capped(client, create_coupon, customer_headers):
    create_coupon(code="HEMAT20", value="20", max_discount="50000")

    response = client.post(
        "/api/v1/coupons/validate",
        json={"code": "hemat20", "total_amount": "1000000"},
        headers=customer_headers
    )

    assert Decimal(response.json()["discount_amount"]) == Decimal("50000")


def test_validate_coupon_does_not_consume_usage(client, create_coupon, customer_headers, admin_headers):
    coupon = create_coupon(code="ONCE", usage_limit=1)

    for _ in range(3):
        response = client.post(
            "/api/v1/coupons/validate",
            json={"code": "ONCE", "total_amount": "1000"},
            headers=customer_headers
        )
        assert response.status_code == 200

    stored = client.get(f"/api/v1/coupons/{coupon['id']}", headers=admin_headers).json()
    assert stored["used_count"] == 0


def test_validate_coupon_unknown_code(client, customer_headers):
    response = client.post(
        "/api/v1/coupons/validate",
        json={"code": "NOPE", "total_amount": "1000"},
        headers=customer_headers
    )

    assert response.status_code == 404
    assert response.headers["X-Error-Code"] == "CouponNotFound"


def test_validate_coupon_inactive_coupon(client, create_coupon, customer_headers, admin_headers):
    coupon = create_coupon(code="GONE")
    client.delete(f"/api/v1/coupons/{coupon['id']}", headers=admin_headers)

    response = client.post(
        "/api/v1/coupons/validate",
        json={"code": "GONE", "total_amount": "1000"},
        headers=customer_headers
    )

    assert response.status_code == 404


@pytest.mark.parametrize(
    "start_offset, end_offset",
    [(-10, -1), (1, 10)],
    ids=["ended", "not-started"],
)
def test_validate_coupon_outside_window(client, create_coupon, customer_headers, start_offset, end_offset):
    now = datetime.now(timezone.utc)
    create_coupon(
        code="WINDOW",
        start_date=(now + timedelta(days=start_offset)).isoformat(),
        end_date=(now + timedelta(days=end_offset)).isoformat(),
    )

    response = client.post(
        "/api/v1/coupons/validate",
        json={"code": "WINDOW", "total_amount": "1000"},
        headers=customer_headers
    )

    assert response.status_code == 400
    assert response.headers["X-Error-Code"] == "Expired"


def test_validate_coupon_minimum_purchase_not_met(client, create_coupon, customer_headers):
    create_coupon(code="DISKON10", min_purchase="100000")

    response = client.post(
        "/api/v1/coupons/validate",
        json={"code": "DISKON10", "total_amount": "99999"},
        headers=customer_headers
    )

    assert response.status_code == 400
    assert response.headers["X-Error-Code"] == "MinimumPurchaseNotMet"


def test_list_coupons(client, create_coupon, admin_headers):
    create_coupon(code="A1")
    create_coupon(code="B2")

    response = client.get("/api/v1/coupons/?page_size=1", headers=admin_headers)

    data = response.json()
    assert data["total"] == 2
    assert data["total_pages"] == 2
    assert len(data["items"]) == 1


def test_update_coupon(client, create_coupon, admin_headers):
    coupon = create_coupon(code="UPD", value="10")

    response = client.put(
        f"/api/v1/coupons/{coupon['id']}",
        json={"value": "15", "usage_limit": 5},
        headers=admin_headers
    )

    assert response.status_code == 200
    assert Decimal(response.json()["value"]) == Decimal("15")
    assert response.json()["usage_limit"] == 5


def test_coupon_stats(client, create_coupon, admin_headers):
    now = datetime.now(timezone.utc)
    create_coupon(code="LIVE")
    create_coupon(
        code="OLD",
        start_date=(now - timedelta(days=10)).isoformat(),
        end_date=(now - timedelta(days=5)).isoformat(),
    )

    response = client.get("/api/v1/coupons/stats", headers=admin_headers)

    assert response.status_code == 200
    data = response.json()
    assert data["total_coupons"] == 2
    assert data["active_coupons"] == 1
    assert data["expired_coupons"] == 1
    assert data["total_usage"] == 0
