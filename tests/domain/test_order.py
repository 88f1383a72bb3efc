"""Unit tests for the Order aggregate and its business rules."""

from decimal import Decimal

import pytest

from storefront.domain.exceptions import ValidationError
from storefront.domain.model.order import (
    MIN_CHARGE,
    Order,
    OrderStatus,
    ensure_chargeable,
    payment_sources,
)
from storefront.domain.model.value_objects import Money
from storefront.domain.service.pricing import CartLine, price_cart


def _breakdown(price="100", profit="20", min_qty=10, cartons=1):
    return price_cart([
        CartLine(
            product_id="1",
            unit_price=Decimal(price),
            unit_profit=Decimal(profit),
            min_quantity=min_qty,
            carton_quantity=cartons,
        )
    ])


class TestOrderPlacement:

    def test_happy_path(self):
        order = Order.place(7, "12 Marina Road, Lagos", _breakdown())
        assert order.id is None  # assigned by repository
        assert order.customer_id == 7
        assert order.status == OrderStatus.PENDING
        assert order.subtotal == Money.of("1200")
        assert order.tax == Money.of("15")
        assert order.total == Money.of("1215")

    def test_amount_in_minor_units(self):
        order = Order.place(7, "Lagos", _breakdown())
        assert order.amount_minor_units == 121500

    def test_item_snapshot(self):
        order = Order.place(7, "Lagos", _breakdown(cartons=2))
        [item] = order.items
        assert item.product_id == "1"
        assert item.quantity.value == 2
        assert item.min_quantity == 10
        assert item.price == Money.of("120.00")
        assert item.total == Money.of("2400.00")

    def test_address_is_stripped(self):
        order = Order.place(7, "  Lagos  ", _breakdown())
        assert order.shipping_address == "Lagos"

    def test_blank_address_rejected(self):
        with pytest.raises(ValidationError, match="Shipping address"):
            Order.place(7, "   ", _breakdown())

    def test_timestamps_set(self):
        order = Order.place(7, "Lagos", _breakdown())
        assert order.created_at == order.updated_at
        assert order.created_at.tzinfo is not None


class TestMinimumCharge:

    def test_below_minimum_rejected(self):
        with pytest.raises(ValidationError, match="below minimum charge"):
            Order.place(7, "Lagos", _breakdown(price="0.50", profit="0", min_qty=1))

    def test_zero_total_rejected(self):
        with pytest.raises(ValidationError):
            ensure_chargeable(Money.zero())

    def test_exactly_minimum_accepted(self):
        ensure_chargeable(MIN_CHARGE)
        order = Order.place(7, "Lagos", _breakdown(price="1.00", profit="0", min_qty=1))
        assert order.total == MIN_CHARGE


class TestOrderStatus:

    def test_paid_statuses(self):
        assert OrderStatus.PROCESSING.is_paid
        assert OrderStatus.SHIPPED.is_paid
        assert OrderStatus.DELIVERED.is_paid
        assert not OrderStatus.PENDING.is_paid
        assert not OrderStatus.CANCELLED.is_paid

    def test_pending_can_be_paid_or_cancelled(self):
        assert OrderStatus.PENDING.can_transition_to(OrderStatus.PROCESSING)
        assert OrderStatus.PENDING.can_transition_to(OrderStatus.CANCELLED)

    def test_paid_order_never_returns_to_pending(self):
        for status in (OrderStatus.PROCESSING, OrderStatus.SHIPPED, OrderStatus.DELIVERED):
            assert not status.can_transition_to(OrderStatus.PENDING)

    def test_cancelled_is_terminal(self):
        for target in OrderStatus:
            assert not OrderStatus.CANCELLED.can_transition_to(target)

    def test_payment_moves_only_pending_orders(self):
        assert payment_sources(OrderStatus.PROCESSING) == (OrderStatus.PENDING,)
        assert payment_sources(OrderStatus.CANCELLED) == (OrderStatus.PENDING,)

    def test_payment_never_reopens_or_returns_to_pending(self):
        assert payment_sources(OrderStatus.PENDING) == ()
