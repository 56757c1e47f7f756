"""Application service: catalog administration use cases.

Ids are chosen by the administrator (slugs such as ``basil``), so adding
an id that already exists is rejected rather than auto-numbered.
"""

from __future__ import annotations

from decimal import Decimal

import structlog

from freshcart.domain.exceptions import EntityNotFoundError, ValidationError
from freshcart.domain.model.ingredient import Ingredient
from freshcart.domain.model.plate import Plate, RecipeEdge
from freshcart.domain.model.product import Product
from freshcart.domain.model.value_objects import Money, to_kg
from freshcart.domain.repository.ingredient_repository import IngredientRepository
from freshcart.domain.repository.plate_repository import PlateRepository
from freshcart.domain.repository.product_repository import ProductRepository
from freshcart.domain.service.availability_propagator import AvailabilityPropagator

logger = structlog.get_logger(__name__)


def _require_name(name: str, what: str) -> str:
    if not name or not name.strip():
        raise ValidationError(f"{what} name is required")
    return name.strip()


class AddIngredientHandler:

    def __init__(self, ingredient_repo: IngredientRepository) -> None:
        self._ingredient_repo = ingredient_repo

    def handle(self, ingredient_id: str, name: str, stock: int, price: str) -> Ingredient:
        if self._ingredient_repo.get_by_id(ingredient_id) is not None:
            raise ValidationError(f"Ingredient '{ingredient_id}' already exists")
        ingredient = Ingredient(
            id=ingredient_id,
            name=_require_name(name, "Ingredient"),
            stock=stock,
            price=Money.of(price),
        )
        self._ingredient_repo.save(ingredient)
        logger.info("Ingredient added", ingredient_id=ingredient_id, stock=stock)
        return ingredient


class AddPlateHandler:

    def __init__(
        self,
        plate_repo: PlateRepository,
        ingredient_repo: IngredientRepository,
        propagator: AvailabilityPropagator,
    ) -> None:
        self._plate_repo = plate_repo
        self._ingredient_repo = ingredient_repo
        self._propagator = propagator

    def handle(
        self, plate_id: str, name: str, price: str, recipe: list[RecipeEdge]
    ) -> Plate:
        """Add a plate; its derived availability is computed right away."""
        if self._plate_repo.get_by_id(plate_id) is not None:
            raise ValidationError(f"Plate '{plate_id}' already exists")

        ids = {edge.ingredient_id for edge in recipe}
        missing = sorted(ids - set(self._ingredient_repo.get_many(ids)))
        if missing:
            raise EntityNotFoundError(f"Ingredient '{missing[0]}' not found")

        plate = Plate(
            id=plate_id,
            name=_require_name(name, "Plate"),
            price=Money.of(price),
            recipe=list(recipe),
        )
        self._plate_repo.save(plate)
        self._propagator.propagate_for_ingredients(ids)
        logger.info("Plate added", plate_id=plate_id, ingredients=len(recipe))
        return self._plate_repo.get_by_id(plate_id) or plate


class AddProductHandler:

    def __init__(self, product_repo: ProductRepository) -> None:
        self._product_repo = product_repo

    def handle(
        self,
        product_id: str,
        name: str,
        price: str,
        weight_kg: str,
        category: str,
        stock: int,
    ) -> Product:
        if self._product_repo.get_by_id(product_id) is not None:
            raise ValidationError(f"Product '{product_id}' already exists")
        weight = to_kg(weight_kg)
        if weight <= Decimal("0"):
            raise ValidationError("Product weight must be greater than zero")
        if stock < 0:
            raise ValidationError("Stock cannot be negative")

        product = Product(
            id=product_id,
            name=_require_name(name, "Product"),
            price=Money.of(price),
            weight_kg=weight,
            category=category.strip().upper(),
            stock=stock,
        )
        self._product_repo.save(product)
        logger.info("Product added", product_id=product_id, category=product.category)
        return product


class UpdateProductPriceHandler:
    """Reprice a product. Carts and orders keep the price they captured."""

    def __init__(self, product_repo: ProductRepository) -> None:
        self._product_repo = product_repo

    def handle(self, product_id: str, price: str) -> Product:
        product = self._product_repo.get_by_id(product_id)
        if product is None:
            raise EntityNotFoundError(f"Product '{product_id}' not found")
        product.update_price(Money.of(price))
        self._product_repo.save(product)
        return product
