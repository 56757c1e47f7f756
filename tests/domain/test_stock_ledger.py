"""Unit tests for the StockLedger domain service."""

import threading

import pytest

from freshcart.domain.exceptions import (
    EntityNotFoundError,
    IngredientUnavailableError,
    InsufficientStockError,
)
from freshcart.domain.model.cart import CustomItem, PlateItem, ProductItem
from freshcart.domain.model.stock import StockLine, aggregate_lines
from tests.catalog import world


class TestChecks:

    def test_enough_stock(self):
        assert world().ledger.check_availability("basil", 10).ok

    def test_insufficient_stock_reason(self):
        check = world(basil=1).ledger.check_availability("basil", 2)
        assert not check.ok
        assert check.reason == 'Insufficient stock for "Basil". Required: 2, Available: 1'
        with pytest.raises(InsufficientStockError):
            check.raise_for_failure()

    def test_unavailable_ingredient(self):
        w = world()
        w.ingredients.get_by_id("basil").set_available(False)
        check = w.ledger.check_availability("basil", 1)
        assert check.error is IngredientUnavailableError

    def test_missing_ingredient(self):
        check = world().ledger.check_availability("saffron", 1)
        assert check.error is EntityNotFoundError

    def test_product_shortage_message(self):
        check = world().ledger.check_product("apples", 21)
        assert check.reason == 'Only 20 units of "Apples" available'


class TestRequirements:

    def test_plate_edges_times_quantity(self):
        lines = world().ledger.requirements_for(PlateItem("pesto-bowl"), 3)
        assert StockLine.ingredient("basil", 3) in lines
        assert StockLine.ingredient("parsley", 3, required=False) in lines

    def test_extras_are_required(self):
        item = PlateItem("pesto-bowl", frozenset({"tomato"}))
        lines = world().ledger.requirements_for(item, 2)
        assert StockLine.ingredient("tomato", 2) in lines

    def test_custom_and_product(self):
        ledger = world().ledger
        custom = ledger.requirements_for(CustomItem(frozenset({"basil", "tomato"})), 2)
        assert custom == [StockLine.ingredient("basil", 2), StockLine.ingredient("tomato", 2)]
        assert ledger.requirements_for(ProductItem("apples"), 4) == [StockLine.product("apples", 4)]

    def test_aggregation_sums_per_key(self):
        lines = aggregate_lines(
            [
                StockLine.ingredient("basil", 1),
                StockLine.ingredient("basil", 2, required=False),
                StockLine.ingredient("pasta", 0),
            ]
        )
        assert lines == [StockLine.ingredient("basil", 3)]


class TestReserveAndDecrement:

    def test_all_applied(self):
        w = world()
        reservation = w.ledger.reserve_and_decrement(
            [StockLine.ingredient("basil", 2), StockLine.product("apples", 3)]
        )
        assert len(reservation.applied) == 2
        assert w.ingredients.get_by_id("basil").stock == 8
        assert w.products.get_by_id("apples").stock == 17

    def test_all_or_nothing(self):
        w = world(basil=5, pasta=1)
        with pytest.raises(InsufficientStockError):
            w.ledger.reserve_and_decrement(
                [StockLine.ingredient("basil", 2), StockLine.ingredient("pasta", 2)]
            )
        assert w.ingredients.get_by_id("basil").stock == 5
        assert w.ingredients.get_by_id("pasta").stock == 1

    def test_lines_sharing_a_key_are_checked_together(self):
        w = world(basil=3)
        with pytest.raises(InsufficientStockError):
            w.ledger.reserve_and_decrement(
                [StockLine.ingredient("basil", 2), StockLine.ingredient("basil", 2)]
            )
        assert w.ingredients.get_by_id("basil").stock == 3

    def test_short_garnish_is_skipped(self):
        w = world(parsley=0)
        reservation = w.ledger.reserve_and_decrement(
            [StockLine.ingredient("basil", 1), StockLine.ingredient("parsley", 1, required=False)]
        )
        assert reservation.skipped == [StockLine.ingredient("parsley", 1, required=False)]
        assert w.ingredients.get_by_id("basil").stock == 9

    def test_release_restores(self):
        w = world()
        reservation = w.ledger.reserve_and_decrement([StockLine.ingredient("basil", 4)])
        w.ledger.release(reservation.applied)
        assert w.ingredients.get_by_id("basil").stock == 10

    def test_concurrent_batches_never_go_negative(self):
        w = world(basil=7)
        barrier = threading.Barrier(20)
        outcomes: list[bool] = []

        def buy():
            barrier.wait()
            try:
                w.ledger.reserve_and_decrement([StockLine.ingredient("basil", 1)])
                outcomes.append(True)
            except InsufficientStockError:
                outcomes.append(False)

        threads = [threading.Thread(target=buy) for _ in range(20)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert outcomes.count(True) == 7
        assert w.ingredients.get_by_id("basil").stock == 0
