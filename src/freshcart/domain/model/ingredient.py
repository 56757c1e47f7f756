"""Ingredient: the atomic stocked component plates are built from."""

from __future__ import annotations

from dataclasses import dataclass

from freshcart.domain.exceptions import ValidationError
from freshcart.domain.model.value_objects import Money


@dataclass
class Ingredient:
    """Aggregate root for a stocked ingredient.

    Invariants:
    - ``stock`` is never negative
    - ``available`` is set by an administrator and is independent of stock;
      ``available=False`` makes every plate using this ingredient unavailable
    """

    id: str
    name: str
    stock: int
    price: Money
    available: bool = True

    def __post_init__(self) -> None:
        if self.stock < 0:
            raise ValidationError(f"Stock for {self.name} cannot be negative")

    def can_supply(self, quantity: int) -> bool:
        return self.available and self.stock >= quantity

    def set_stock(self, stock: int) -> None:
        if stock < 0:
            raise ValidationError("Stock cannot be negative")
        self.stock = stock

    def set_available(self, available: bool) -> None:
        self.available = available
