"""Integration tests for updating, removing and clearing cart lines."""

from decimal import Decimal

import pytest

from freshcart.application.add_to_cart import AddToCartHandler
from freshcart.application.clear_cart import ClearCartHandler
from freshcart.application.remove_cart_item import RemoveCartItemHandler
from freshcart.application.show_cart import ShowCartHandler
from freshcart.application.update_cart_item import UpdateCartItemQuantityHandler
from freshcart.application.validate_cart import ValidateCartAvailabilityHandler
from freshcart.domain.exceptions import (
    EntityNotFoundError,
    InsufficientStockError,
    QuotaExceededError,
    ValidationError,
)
from freshcart.domain.model.cart import PlateItem, ProductItem
from freshcart.domain.model.subscription import Plan
from tests.catalog import world


def _setup(**kwargs):
    w = world(plan=Plan.BASIC, **kwargs)
    add = AddToCartHandler(w.carts, w.admission, w.quota)
    add.handle("alice", PlateItem("pesto-bowl"), 2)
    add.handle("alice", ProductItem("apples"), 2)  # 3 kg
    return w


def _used(w) -> Decimal:
    return w.subscriptions.get("alice").used_kg


class TestUpdateQuantity:

    def test_decrease_releases_weight(self):
        w = _setup()
        view = UpdateCartItemQuantityHandler(w.carts, w.admission, w.quota).handle("alice", 2, 1)
        assert view.items[1].quantity == 1
        assert _used(w) == Decimal("1.500")

    def test_increase_checks_quota_for_delta(self):
        w = _setup()
        handler = UpdateCartItemQuantityHandler(w.carts, w.admission, w.quota)
        with pytest.raises(QuotaExceededError):
            handler.handle("alice", 2, 4)  # +3 kg on top of 3 kg
        assert _used(w) == Decimal("3.000")
        assert w.carts.get_by_owner("alice").get_line(2).quantity.value == 2

    def test_increase_checks_stock_for_new_total(self):
        w = _setup(basil=3)
        handler = UpdateCartItemQuantityHandler(w.carts, w.admission, w.quota)
        with pytest.raises(InsufficientStockError):
            handler.handle("alice", 1, 4)

    def test_zero_removes_line(self):
        w = _setup()
        view = UpdateCartItemQuantityHandler(w.carts, w.admission, w.quota).handle("alice", 2, 0)
        assert [item.line_id for item in view.items] == [1]
        assert _used(w) == Decimal("0")

    def test_negative_rejected(self):
        w = _setup()
        with pytest.raises(ValidationError, match="cannot be negative"):
            UpdateCartItemQuantityHandler(w.carts, w.admission, w.quota).handle("alice", 1, -1)


class TestRemoveAndClear:

    def test_removing_last_line_deletes_cart(self):
        w = _setup()
        handler = RemoveCartItemHandler(w.carts, w.quota)
        handler.handle("alice", 1)
        view = handler.handle("alice", 2)

        assert view.cart_id is None
        assert w.carts.get_by_owner("alice") is None
        assert _used(w) == Decimal("0")

    def test_remove_unknown_line(self):
        w = _setup()
        with pytest.raises(EntityNotFoundError, match="Cart item #7 not found"):
            RemoveCartItemHandler(w.carts, w.quota).handle("alice", 7)

    def test_clear_releases_all_weight(self):
        w = _setup()
        view = ClearCartHandler(w.carts, w.quota).handle("alice")
        assert view.cart_id is None
        assert view.total == "$0.00"
        assert _used(w) == Decimal("0")

    def test_clear_without_cart_is_noop(self):
        w = world()
        assert ClearCartHandler(w.carts, w.quota).handle("alice").cart_id is None


class TestShowAndValidate:

    def test_no_cart_is_distinct_from_cart(self):
        w = world()
        show = ShowCartHandler(w.carts, w.quota, w.propagator)
        assert show.handle("alice").cart_id is None
        assert show.handle("alice").remaining_kg == "10.000"

    def test_show_runs_propagation(self):
        w = _setup()
        w.ingredients.get_by_id("basil").set_stock(0)
        ShowCartHandler(w.carts, w.quota, w.propagator).handle("alice")
        assert w.plates.get_by_id("pesto-bowl").available is False

    def test_validate_reports_stale_lines(self):
        w = _setup()
        w.ingredients.get_by_id("basil").set_stock(1)
        report = ValidateCartAvailabilityHandler(w.carts, w.admission).handle_cart("alice")
        assert not report.valid
        assert any("Basil" in issue for issue in report.issues)
