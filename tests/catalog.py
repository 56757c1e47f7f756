"""A small catalog shared by the tests.

Pesto Bowl needs basil and pasta; parsley is a garnish.
"""

from __future__ import annotations

from decimal import Decimal

from freshcart.application.add_to_cart import AddToCartHandler
from freshcart.application.checkout import CheckoutHandler
from freshcart.domain.model.cart import CartItem, PlateItem
from freshcart.domain.model.ingredient import Ingredient
from freshcart.domain.model.plate import Plate, RecipeEdge
from freshcart.domain.model.product import Product
from freshcart.domain.model.subscription import Plan
from freshcart.domain.model.value_objects import Money
from tests.fakes import World, make_world, subscription


def ingredients(basil: int = 10, pasta: int = 10, parsley: int = 10) -> list[Ingredient]:
    return [
        Ingredient("basil", "Basil", basil, Money.of("1.00")),
        Ingredient("pasta", "Pasta", pasta, Money.of("2.00")),
        Ingredient("parsley", "Parsley", parsley, Money.of("0.50")),
        Ingredient("tomato", "Tomato", 10, Money.of("1.50")),
    ]


def pesto_bowl() -> Plate:
    return Plate(
        id="pesto-bowl",
        name="Pesto Bowl",
        price=Money.of("12.00"),
        recipe=[
            RecipeEdge("basil", 1),
            RecipeEdge("pasta", 1),
            RecipeEdge("parsley", 1, required=False),
        ],
    )


def products() -> list[Product]:
    return [
        Product("apples", "Apples", Money.of("3.00"), Decimal("1.500"), "FRUITS", 20),
        Product("beans", "Black Beans", Money.of("2.50"), Decimal("0.500"), "LEGUMES", 20),
        Product("chicken", "Chicken Breast", Money.of("9.00"), Decimal("0.600"), "PROTEINS", 20),
        Product("grapes", "Grapes", Money.of("4.00"), Decimal("0.600"), "FRUITS", 20),
    ]


def world(
    basil: int = 10,
    pasta: int = 10,
    parsley: int = 10,
    plan: Plan = Plan.PREMIUM,
    used_kg: str = "0",
) -> World:
    return make_world(
        ingredients=ingredients(basil, pasta, parsley),
        plates=[pesto_bowl()],
        products=products(),
        subscriptions=[subscription("alice", plan, used_kg)],
    )


def checkout(w: World, owner: str = "alice", item: CartItem | None = None, quantity: int = 2):
    """Fill ``owner``'s cart and check it out; returns the new order."""
    AddToCartHandler(w.carts, w.admission, w.quota).handle(
        owner, item or PlateItem("pesto-bowl"), quantity
    )
    result = CheckoutHandler(
        w.carts, w.orders, w.admission, w.ledger, w.quota, w.gateway, 1.0
    ).handle(owner)
    return w.orders.get_by_id(result.order_id)
