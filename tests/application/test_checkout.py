"""Integration tests for the Checkout use case."""

from decimal import Decimal

import pytest

from freshcart.application.add_to_cart import AddToCartHandler
from freshcart.application.checkout import CheckoutHandler
from freshcart.domain.exceptions import (
    PaymentNotCapturedError,
    StaleCartError,
    ValidationError,
)
from freshcart.domain.model.cart import PlateItem, ProductItem
from freshcart.domain.model.order import OrderStatus, PaymentStatus
from freshcart.domain.model.subscription import Plan
from tests.catalog import checkout, world


def _checkout_handler(w):
    return CheckoutHandler(w.carts, w.orders, w.admission, w.ledger, w.quota, w.gateway, 1.0)


def _add(w, item, quantity, owner="alice"):
    AddToCartHandler(w.carts, w.admission, w.quota).handle(owner, item, quantity)


class TestCheckoutHappyPath:

    def test_order_awaits_payment(self):
        w = world()
        order = checkout(w)

        assert order.status is OrderStatus.AWAITING_PAYMENT
        assert order.payment_status is PaymentStatus.PENDING
        assert order.charge_id.startswith("fake_ch_")
        assert str(order.total) == "$24.00"

    def test_cart_deleted_and_stock_untouched(self):
        w = world()
        checkout(w)

        assert w.carts.get_by_owner("alice") is None
        assert w.ingredients.get_by_id("basil").stock == 10
        assert w.ingredients.get_by_id("parsley").stock == 10

    def test_charge_created_in_minor_units(self):
        w = world()
        order = checkout(w)
        call = w.gateway.calls[0]

        assert call["amount_minor"] == 2400
        assert call["currency"] == "usd"
        assert call["metadata"]["order_id"] == str(order.id)

    def test_requirements_frozen_at_checkout(self):
        w = world()
        order = checkout(w)
        frozen = list(order.requirements)

        w.plates.get_by_id("pesto-bowl").recipe.clear()

        assert order.requirements == frozen
        assert {line.key.item_id for line in frozen} == {"basil", "pasta", "parsley"}

    def test_quota_stays_consumed_by_order(self):
        w = world(plan=Plan.BASIC)
        checkout(w, item=ProductItem("apples"), quantity=2)
        assert w.subscriptions.get("alice").used_kg == Decimal("3.000")


class TestCheckoutRejections:

    def test_empty_cart(self):
        w = world()
        with pytest.raises(ValidationError, match="Cart is empty"):
            _checkout_handler(w).handle("alice")

    def test_stale_cart_writes_nothing(self):
        w = world()
        _add(w, PlateItem("pesto-bowl"), 2)
        w.ingredients.get_by_id("basil").set_stock(1)

        with pytest.raises(StaleCartError) as exc:
            _checkout_handler(w).handle("alice")

        assert any("Basil" in issue for issue in exc.value.issues)
        assert w.orders.get_by_id(1) is None
        assert w.gateway.calls == []
        assert w.ingredients.get_by_id("basil").stock == 1
        assert w.carts.get_by_owner("alice") is not None

    def test_plan_downgrade_makes_product_stale(self):
        w = world(plan=Plan.PREMIUM)
        _add(w, ProductItem("chicken"), 1)
        w.quota.change_plan("alice", Plan.BASIC)

        with pytest.raises(StaleCartError, match="does not allow"):
            _checkout_handler(w).handle("alice")

    def test_plan_downgrade_below_cart_weight_makes_cart_stale(self):
        w = world(plan=Plan.PREMIUM)
        _add(w, ProductItem("apples"), 5)
        w.quota.change_plan("alice", Plan.BASIC)

        with pytest.raises(StaleCartError, match="over the 5.000 kg limit"):
            _checkout_handler(w).handle("alice")
        assert w.orders.get_by_id(1) is None
        assert w.carts.get_by_owner("alice") is not None

    def test_disabled_plate_makes_cart_stale(self):
        w = world()
        _add(w, PlateItem("pesto-bowl"), 1)
        w.plates.get_by_id("pesto-bowl").disable()

        with pytest.raises(StaleCartError, match="no longer available"):
            _checkout_handler(w).handle("alice")


class TestChargeCreationFailure:

    def test_declined_charge_fails_order_and_keeps_cart(self):
        w = world()
        _add(w, PlateItem("pesto-bowl"), 2)
        w.gateway.configure(fail_create=True)

        with pytest.raises(PaymentNotCapturedError):
            _checkout_handler(w).handle("alice")

        order = w.orders.get_by_id(1)
        assert order.status is OrderStatus.CANCELLED
        assert order.payment_status is PaymentStatus.FAILED
        assert w.carts.get_by_owner("alice") is not None
        assert w.ingredients.get_by_id("basil").stock == 10

    def test_charge_creation_timeout(self):
        w = world()
        _add(w, PlateItem("pesto-bowl"), 1)
        w.gateway.configure(time_out={"create_charge"})

        with pytest.raises(PaymentNotCapturedError):
            _checkout_handler(w).handle("alice")
        assert "timed out" in w.orders.get_by_id(1).failure_reason
