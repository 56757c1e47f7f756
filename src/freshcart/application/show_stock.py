"""Application service: stock queries and on-demand propagation."""

from __future__ import annotations

from freshcart.application.dto import IngredientDTO, PlateDTO, ProductDTO, StockView
from freshcart.domain.repository.ingredient_repository import IngredientRepository
from freshcart.domain.repository.plate_repository import PlateRepository
from freshcart.domain.repository.product_repository import ProductRepository
from freshcart.domain.service.availability_propagator import (
    AvailabilityChange,
    AvailabilityPropagator,
)


class PropagateAvailabilityHandler:

    def __init__(self, propagator: AvailabilityPropagator) -> None:
        self._propagator = propagator

    def handle(self) -> list[AvailabilityChange]:
        return self._propagator.propagate()


class ShowStockHandler:

    def __init__(
        self,
        ingredient_repo: IngredientRepository,
        plate_repo: PlateRepository,
        product_repo: ProductRepository,
        propagator: AvailabilityPropagator,
    ) -> None:
        self._ingredient_repo = ingredient_repo
        self._plate_repo = plate_repo
        self._product_repo = product_repo
        self._propagator = propagator

    def handle(self) -> StockView:
        self._propagator.propagate()
        return StockView(
            ingredients=[
                IngredientDTO(
                    id=ingredient.id,
                    name=ingredient.name,
                    stock=ingredient.stock,
                    available=ingredient.available,
                    price=str(ingredient.price),
                )
                for ingredient in self._ingredient_repo.list_all()
            ],
            plates=[
                PlateDTO(
                    id=plate.id,
                    name=plate.name,
                    price=str(plate.price),
                    available=plate.available,
                    admin_disabled=plate.admin_disabled,
                )
                for plate in self._plate_repo.list_all()
            ],
            products=[
                ProductDTO(
                    id=product.id,
                    name=product.name,
                    category=product.category,
                    weight_kg=str(product.weight_kg),
                    stock=product.stock,
                    available=product.available,
                    price=str(product.price),
                )
                for product in self._product_repo.list_all()
            ],
        )
