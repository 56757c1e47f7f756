"""Integration tests for the AddToCart use case."""

from decimal import Decimal

import pytest

from freshcart.application.add_to_cart import AddToCartHandler
from freshcart.domain.exceptions import (
    CategoryNotAllowedError,
    IngredientUnavailableError,
    InsufficientStockError,
    QuotaExceededError,
    SubscriptionInactiveError,
    ValidationError,
)
from freshcart.domain.model.cart import CustomItem, PlateItem, ProductItem
from freshcart.domain.model.subscription import Plan
from freshcart.domain.model.value_objects import Money
from tests.catalog import world


def _handler(w):
    return AddToCartHandler(w.carts, w.admission, w.quota)


class TestAddToCartHappyPath:

    def test_first_add_creates_cart(self):
        w = world()
        view = _handler(w).handle("alice", PlateItem("pesto-bowl"), 2)

        assert view.cart_id is not None
        assert view.total == "$24.00"
        assert view.items[0].type == "plate"
        assert w.carts.get_by_owner("alice").total == Money.of("24.00")

    def test_add_does_not_touch_stock(self):
        w = world()
        _handler(w).handle("alice", PlateItem("pesto-bowl"), 2)
        assert w.ingredients.get_by_id("basil").stock == 10

    def test_plates_need_no_subscription(self):
        w = world()
        view = _handler(w).handle("bob", CustomItem(frozenset({"basil"})), 1)
        assert view.limit_kg is None
        assert view.total == "$15.00"

    def test_product_consumes_quota(self):
        w = world(plan=Plan.BASIC)
        view = _handler(w).handle("alice", ProductItem("apples"), 2)
        assert view.used_kg == "3.000"
        assert view.remaining_kg == "2.000"


class TestAddToCartMerge:

    def test_two_then_three_equals_five(self):
        split, single = world(), world()
        _handler(split).handle("alice", PlateItem("pesto-bowl"), 2)
        merged = _handler(split).handle("alice", PlateItem("pesto-bowl"), 3)
        once = _handler(single).handle("alice", PlateItem("pesto-bowl"), 5)

        assert len(merged.items) == 1
        assert merged.items[0].quantity == once.items[0].quantity == 5
        assert merged.total == once.total

    def test_merge_validated_against_new_total(self):
        split, single = world(basil=4), world(basil=4)
        _handler(split).handle("alice", PlateItem("pesto-bowl"), 2)

        with pytest.raises(InsufficientStockError) as merged_exc:
            _handler(split).handle("alice", PlateItem("pesto-bowl"), 3)
        with pytest.raises(InsufficientStockError) as single_exc:
            _handler(single).handle("alice", PlateItem("pesto-bowl"), 5)

        assert str(merged_exc.value) == str(single_exc.value)
        assert split.carts.get_by_owner("alice").lines[0].quantity.value == 2

    def test_merge_past_line_maximum_rejected(self):
        w = world()
        _handler(w).handle("alice", PlateItem("pesto-bowl"), 6)
        with pytest.raises(ValidationError, match="Maximum quantity is 10"):
            _handler(w).handle("alice", PlateItem("pesto-bowl"), 5)


class TestAddToCartRejections:

    def test_quota_exceeded_leaves_usage(self):
        w = world(plan=Plan.BASIC, used_kg="4.5")
        with pytest.raises(QuotaExceededError):
            _handler(w).handle("alice", ProductItem("grapes"), 1)

        assert w.subscriptions.get("alice").used_kg == Decimal("4.5")
        assert w.carts.get_by_owner("alice") is None

    def test_category_checked_before_weight(self):
        w = world(plan=Plan.BASIC, used_kg="5")
        with pytest.raises(CategoryNotAllowedError):
            _handler(w).handle("alice", ProductItem("chicken"), 1)

    def test_product_without_subscription(self):
        w = world()
        with pytest.raises(SubscriptionInactiveError):
            _handler(w).handle("bob", ProductItem("apples"), 1)

    def test_disabled_plate(self):
        w = world()
        w.plates.get_by_id("pesto-bowl").disable()
        with pytest.raises(IngredientUnavailableError, match="not available"):
            _handler(w).handle("alice", PlateItem("pesto-bowl"), 1)

    def test_quota_given_back_when_save_fails(self):
        w = world(plan=Plan.BASIC)

        def broken_save(cart):
            raise RuntimeError("disk full")

        w.carts.save = broken_save
        with pytest.raises(RuntimeError):
            _handler(w).handle("alice", ProductItem("apples"), 1)

        assert w.subscriptions.get("alice").used_kg == Decimal("0")
