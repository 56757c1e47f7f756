"""Unit tests for the Order aggregate and its state machine."""

from decimal import Decimal

import pytest

from freshcart.domain.exceptions import ValidationError
from freshcart.domain.model.cart import Cart, PlateItem, ProductItem
from freshcart.domain.model.order import Order, OrderStatus, PaymentStatus
from freshcart.domain.model.stock import StockLine
from freshcart.domain.model.value_objects import Money


def _order(price: str = "12.00", qty: int = 2) -> Order:
    cart = Cart(id=1, owner_id="alice")
    cart.add(PlateItem("pesto-bowl"), qty, Money.of(price), "Pesto Bowl")
    return Order.from_cart(cart, [StockLine.ingredient("basil", qty)])


class TestOrderCreation:

    def test_snapshot_of_cart(self):
        order = _order()
        assert order.customer_id == "alice"
        assert order.status is OrderStatus.PENDING
        assert order.payment_status is PaymentStatus.PENDING
        assert order.total == Money.of("24.00")
        assert order.lines[0].quantity == 2
        assert order.id is None  # assigned by repository

    def test_snapshot_does_not_follow_cart(self):
        cart = Cart(id=1, owner_id="alice")
        cart.add(PlateItem("pesto-bowl"), 1, Money.of("12.00"), "Pesto Bowl")
        order = Order.from_cart(cart, [])
        cart.set_quantity(1, 5)
        assert order.lines[0].quantity == 1

    def test_empty_cart_rejected(self):
        with pytest.raises(ValidationError, match="Cart is empty"):
            Order.from_cart(Cart(id=1, owner_id="alice"), [])

    def test_below_minimum_rejected(self):
        with pytest.raises(ValidationError, match="below minimum"):
            _order(price="0.50", qty=1)

    def test_weight_from_products(self):
        cart = Cart(id=1, owner_id="alice")
        cart.add(ProductItem("apples"), 2, Money.of("3.00"), "Apples", Decimal("1.500"))
        order = Order.from_cart(cart, [])
        assert order.total_weight_kg == Decimal("3.000")

    def test_creation_recorded_in_history(self):
        assert [r.reason for r in _order().history] == ["created"]


class TestOrderTransitions:

    def test_happy_path(self):
        order = _order()
        order.await_payment("ch_1")
        order.confirm([StockLine.ingredient("basil", 2)], [])

        assert order.status is OrderStatus.CONFIRMED
        assert order.payment_status is PaymentStatus.COMPLETED
        assert order.is_finalized
        assert len(order.history) == 3

    def test_fail_while_awaiting_payment(self):
        order = _order()
        order.await_payment("ch_1")
        order.fail("Payment failed", refund_id="re_1")

        assert order.status is OrderStatus.CANCELLED
        assert order.payment_status is PaymentStatus.FAILED
        assert order.refund_id == "re_1"
        assert order.failure_reason == "Payment failed"

    def test_refund_after_confirmation(self):
        order = _order()
        order.await_payment("ch_1")
        order.confirm([], [])
        order.refund("re_1", "Cancelled by customer")

        assert order.status is OrderStatus.CANCELLED
        assert order.payment_status is PaymentStatus.REFUNDED

    def test_confirm_without_charge_rejected(self):
        with pytest.raises(ValidationError, match="expected awaiting_payment/pending"):
            _order().confirm([], [])

    def test_cannot_fail_confirmed_order(self):
        order = _order()
        order.await_payment("ch_1")
        order.confirm([], [])
        with pytest.raises(ValidationError, match="Cannot fail"):
            order.fail("too late")

    def test_cannot_refund_unpaid_order(self):
        order = _order()
        order.await_payment("ch_1")
        with pytest.raises(ValidationError, match="expected confirmed/completed"):
            order.refund("re_1", "nope")

    def test_late_refund_only_once(self):
        order = _order()
        order.await_payment("ch_1")
        order.fail("Payment capture timed out")
        order.record_refund("re_late")

        assert order.refund_id == "re_late"
        assert order.payment_status is PaymentStatus.FAILED
        with pytest.raises(ValidationError, match="already refunded"):
            order.record_refund("re_again")

    def test_late_refund_needs_failed_order(self):
        with pytest.raises(ValidationError, match="Only failed orders"):
            _order().record_refund("re_1")
