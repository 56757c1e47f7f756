"""Plate aggregate: a composite catalog item built from ingredients.

A plate's availability is two separate facts: an administrative switch
(``admin_disabled``) that only an administrator may flip, and a derived
flag (``computed_available``) that only propagation may write. Readers
combine them through ``available``.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from freshcart.domain.exceptions import ValidationError
from freshcart.domain.model.ingredient import Ingredient
from freshcart.domain.model.value_objects import Money


@dataclass(frozen=True)
class RecipeEdge:
    """One ingredient of a plate and how many units a single plate uses."""

    ingredient_id: str
    quantity: int
    required: bool = True

    def __post_init__(self) -> None:
        if self.quantity <= 0:
            raise ValidationError("Recipe quantity must be positive")


@dataclass
class Plate:

    id: str
    name: str
    price: Money
    recipe: list[RecipeEdge] = field(default_factory=list)
    admin_disabled: bool = False
    computed_available: bool = True

    @property
    def available(self) -> bool:
        return not self.admin_disabled and self.computed_available

    @property
    def ingredient_ids(self) -> set[str]:
        return {edge.ingredient_id for edge in self.recipe}

    def derive_availability(self, ingredients: dict[str, Ingredient]) -> bool:
        """Recompute availability from ingredient state.

        Only required edges count. A plate with no required edges is
        vacuously available. The administrative switch is not consulted
        here; it is layered on top at read time.
        """
        for edge in self.recipe:
            if not edge.required:
                continue
            ingredient = ingredients.get(edge.ingredient_id)
            if ingredient is None or not ingredient.can_supply(edge.quantity):
                return False
        return True

    def enable(self) -> None:
        self.admin_disabled = False

    def disable(self) -> None:
        self.admin_disabled = True
