"""Tests for Celery background tasks."""
from decimal import Decimal
from unittest.mock import patch

from sqlalchemy.orm import sessionmaker

from app.models import Order, OrderStatus, User
from app.tasks.order_tasks import send_order_confirmation


def test_send_order_confirmation(db_session):
    user = User(name="Budi", email="budi@storefront.io", hashed_password="x")
    db_session.add(user)
    db_session.commit()
    order = Order(
        order_number="ORD-20260101000000-ABCDEF",
        user_id=user.id,
        subtotal=Decimal("100.00"),
        discount_amount=Decimal("0.00"),
        total_amount=Decimal("100.00"),
        status=OrderStatus.PENDING,
        shipping_address="Jl. Merdeka 5",
    )
    db_session.add(order)
    db_session.commit()

    session_factory = sessionmaker(bind=db_session.get_bind())
    with patch("app.tasks.order_tasks.SessionLocal", session_factory):
        result = send_order_confirmation(order.id)

    assert result["status"] == "sent"
    assert result["order_number"] == "ORD-20260101000000-ABCDEF"
    assert result["email"] == "budi@storefront.io"


def test_send_order_confirmation_unknown_order(db_session):
    session_factory = sessionmaker(bind=db_session.get_bind())
    with patch("app.tasks.order_tasks.SessionLocal", session_factory):
        result = send_order_confirmation(9999)

    assert result["status"] == "failed"
