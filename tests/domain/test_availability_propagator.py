"""Unit tests for the AvailabilityPropagator domain service."""

from tests.catalog import world


class TestPropagation:

    def test_depletion_then_restock(self):
        w = world(basil=0)

        changes = w.propagator.propagate()
        assert [(c.plate_id, c.available) for c in changes] == [("pesto-bowl", False)]
        assert w.plates.get_by_id("pesto-bowl").available is False

        w.ingredients.get_by_id("basil").set_stock(5)
        changes = w.propagator.propagate_for_ingredients({"basil"})
        assert [(c.plate_id, c.available) for c in changes] == [("pesto-bowl", True)]
        assert w.plates.get_by_id("pesto-bowl").available is True

    def test_garnish_depletion_never_flips(self):
        w = world(parsley=0)
        assert w.propagator.propagate() == []
        assert w.plates.get_by_id("pesto-bowl").available is True

    def test_idempotent_and_writes_only_changes(self):
        w = world(basil=0)
        w.propagator.propagate()
        w.propagator.propagate()
        assert w.plates.writes == [("pesto-bowl", False)]

    def test_unrelated_ingredient_touches_nothing(self):
        w = world(basil=0)
        assert w.propagator.propagate_for_ingredients({"tomato"}) == []
        assert w.propagator.propagate_for_ingredients(set()) == []

    def test_never_touches_admin_switch(self):
        w = world()
        w.plates.get_by_id("pesto-bowl").disable()
        w.propagator.propagate()
        plate = w.plates.get_by_id("pesto-bowl")
        assert plate.admin_disabled is True
        assert plate.computed_available is True
