"""Domain service: Stock Ledger.

The single authority over ingredient and product stock. Reads are plain
repository lookups; every mutation is delegated to the StockRepository,
which applies a whole batch as one atomic unit so two concurrent order
confirmations can never jointly overdraw an item below zero.
"""

from __future__ import annotations

from dataclasses import dataclass, field

import structlog

from freshcart.domain.exceptions import (
    DomainException,
    EntityNotFoundError,
    IngredientUnavailableError,
    InsufficientStockError,
)
from freshcart.domain.model.cart import CartItem, CustomItem, PlateItem, ProductItem
from freshcart.domain.model.stock import StockKind, StockLine, aggregate_lines
from freshcart.domain.repository.ingredient_repository import IngredientRepository
from freshcart.domain.repository.plate_repository import PlateRepository
from freshcart.domain.repository.product_repository import ProductRepository
from freshcart.domain.repository.stock_repository import StockRepository

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class StockCheck:
    ok: bool
    reason: str | None = None
    error: type[DomainException] | None = None

    def raise_for_failure(self) -> None:
        if not self.ok and self.error is not None:
            raise self.error(self.reason or "Stock check failed")


_OK = StockCheck(ok=True)


@dataclass(frozen=True)
class Reservation:
    """Outcome of a committed decrement batch."""

    applied: list[StockLine] = field(default_factory=list)
    skipped: list[StockLine] = field(default_factory=list)


class StockLedger:

    def __init__(
        self,
        ingredient_repo: IngredientRepository,
        product_repo: ProductRepository,
        plate_repo: PlateRepository,
        stock_repo: StockRepository,
    ) -> None:
        self._ingredient_repo = ingredient_repo
        self._product_repo = product_repo
        self._plate_repo = plate_repo
        self._stock_repo = stock_repo

    # --- Reads ----------------------------------------------------------------

    def check_availability(self, ingredient_id: str, required_qty: int) -> StockCheck:
        """ok iff the ingredient exists, is available and has enough stock."""
        ingredient = self._ingredient_repo.get_by_id(ingredient_id)
        if ingredient is None:
            return StockCheck(
                False, f"Ingredient '{ingredient_id}' not found", EntityNotFoundError
            )
        if not ingredient.available:
            return StockCheck(
                False,
                f"Ingredient \"{ingredient.name}\" is not available",
                IngredientUnavailableError,
            )
        if ingredient.stock < required_qty:
            return StockCheck(
                False,
                f"Insufficient stock for \"{ingredient.name}\". "
                f"Required: {required_qty}, Available: {ingredient.stock}",
                InsufficientStockError,
            )
        return _OK

    def check_product(self, product_id: str, required_qty: int) -> StockCheck:
        product = self._product_repo.get_by_id(product_id)
        if product is None:
            return StockCheck(
                False, f"Product '{product_id}' not found", EntityNotFoundError
            )
        if not product.available:
            return StockCheck(
                False,
                f"Product \"{product.name}\" is not available",
                IngredientUnavailableError,
            )
        if product.stock < required_qty:
            return StockCheck(
                False,
                f"Only {product.stock} units of \"{product.name}\" available",
                InsufficientStockError,
            )
        return _OK

    def check_line(self, line: StockLine) -> StockCheck:
        if line.key.kind is StockKind.PRODUCT:
            return self.check_product(line.key.item_id, line.quantity)
        return self.check_availability(line.key.item_id, line.quantity)

    def requirements_for(self, item: CartItem, quantity: int) -> list[StockLine]:
        """Expand a cart item into the stock it consumes.

        Plates consume each recipe edge times the quantity (garnish edges
        stay optional); extra and custom ingredients consume one unit per
        plate; products consume themselves.
        """
        if isinstance(item, ProductItem):
            return [StockLine.product(item.product_id, quantity)]
        if isinstance(item, CustomItem):
            return [
                StockLine.ingredient(ingredient_id, quantity)
                for ingredient_id in sorted(item.ingredient_ids)
            ]
        if isinstance(item, PlateItem):
            plate = self._plate_repo.get_by_id(item.plate_id)
            if plate is None:
                raise EntityNotFoundError(f"Plate '{item.plate_id}' not found")
            lines = [
                StockLine.ingredient(edge.ingredient_id, edge.quantity * quantity, edge.required)
                for edge in plate.recipe
            ]
            lines.extend(
                StockLine.ingredient(ingredient_id, quantity)
                for ingredient_id in sorted(item.extra_ingredient_ids)
            )
            return lines
        raise TypeError(f"Unknown cart item {item!r}")

    # --- Mutations ------------------------------------------------------------

    def reserve_and_decrement(self, lines: list[StockLine]) -> Reservation:
        """Apply all decrements as one all-or-nothing unit.

        Raises InsufficientStockError (nothing applied) if any required
        line cannot be covered.
        """
        batch = aggregate_lines(lines)
        if not batch:
            return Reservation()
        try:
            applied, skipped = self._stock_repo.decrement(batch)
        except InsufficientStockError as exc:
            logger.info("Stock reservation rejected", reason=str(exc), lines=len(batch))
            raise
        logger.info(
            "Stock decremented",
            applied=[str(line.key) for line in applied],
            skipped=[str(line.key) for line in skipped],
        )
        return Reservation(applied=applied, skipped=skipped)

    def release(self, lines: list[StockLine]) -> None:
        """Compensating increment for previously decremented lines."""
        batch = aggregate_lines(lines)
        if not batch:
            return
        self._stock_repo.increment(batch)
        logger.info("Stock released", lines=[str(line.key) for line in batch])
