"""Application service: Set Ingredient Stock use case (administrative).

Sets an ingredient's stock level and/or availability flag, then
re-derives the availability of every plate that uses it.
"""

from __future__ import annotations

import structlog

from freshcart.domain.exceptions import EntityNotFoundError, ValidationError
from freshcart.domain.repository.ingredient_repository import IngredientRepository
from freshcart.domain.service.availability_propagator import (
    AvailabilityChange,
    AvailabilityPropagator,
)

logger = structlog.get_logger(__name__)


class SetIngredientStockHandler:

    def __init__(
        self,
        ingredient_repo: IngredientRepository,
        propagator: AvailabilityPropagator,
    ) -> None:
        self._ingredient_repo = ingredient_repo
        self._propagator = propagator

    def handle(
        self,
        ingredient_id: str,
        stock: int | None = None,
        available: bool | None = None,
    ) -> list[AvailabilityChange]:
        if stock is None and available is None:
            raise ValidationError("Nothing to change: give a stock level or availability")

        ingredient = self._ingredient_repo.get_by_id(ingredient_id)
        if ingredient is None:
            raise EntityNotFoundError(f"Ingredient '{ingredient_id}' not found")

        if stock is not None:
            ingredient.set_stock(stock)
        if available is not None:
            ingredient.set_available(available)
        self._ingredient_repo.save(ingredient)

        logger.info(
            "Ingredient updated",
            ingredient_id=ingredient_id,
            stock=ingredient.stock,
            available=ingredient.available,
        )
        return self._propagator.propagate_for_ingredients({ingredient_id})
