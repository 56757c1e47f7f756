"""Product aggregate: a discrete, weighed product sold by subscription.

Products live independently of carts and orders. Carts capture a price
and weight snapshot when the product is added.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from freshcart.domain.exceptions import ValidationError
from freshcart.domain.model.value_objects import Money


@dataclass
class Product:
    """A weighed product in a category (FRUITS, PROTEINS, ...)."""

    id: str
    name: str
    price: Money
    weight_kg: Decimal
    category: str
    stock: int
    available: bool = True

    def can_supply(self, quantity: int) -> bool:
        return self.available and self.stock >= quantity

    def update_price(self, new_price: Money) -> None:
        """Change the product price.

        This does NOT affect any existing carts or orders because they
        capture a price snapshot.
        """
        if new_price.amount <= 0:
            raise ValidationError("Product price must be greater than zero")
        self.price = new_price
