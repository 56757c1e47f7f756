"""Domain service: Cart Admission.

Decides whether cart items are obtainable right now. Used both when a
single item is admitted to a cart (fails fast with the first problem)
and when a whole cart is re-validated before checkout (collects every
problem, checking stock against the combined need of all lines).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal

from freshcart.domain.exceptions import (
    EntityNotFoundError,
    IngredientUnavailableError,
)
from freshcart.domain.model.cart import CartItem, CustomItem, PlateItem, ProductItem
from freshcart.domain.model.stock import StockLine, aggregate_lines
from freshcart.domain.model.value_objects import Money
from freshcart.domain.repository.ingredient_repository import IngredientRepository
from freshcart.domain.repository.plate_repository import PlateRepository
from freshcart.domain.repository.product_repository import ProductRepository
from freshcart.domain.service.stock_ledger import StockLedger

CUSTOM_INGREDIENT_PRICE = Money(Decimal("15.00"))


@dataclass(frozen=True)
class ResolvedItem:
    """Catalog facts captured when an item enters a cart."""

    name: str
    unit_price: Money
    unit_weight_kg: Decimal = Decimal("0")
    category: str | None = None


@dataclass(frozen=True)
class AvailabilityReport:
    valid: bool
    issues: list[str] = field(default_factory=list)


class CartAdmissionService:

    def __init__(
        self,
        ledger: StockLedger,
        plate_repo: PlateRepository,
        product_repo: ProductRepository,
        ingredient_repo: IngredientRepository,
    ) -> None:
        self._ledger = ledger
        self._plate_repo = plate_repo
        self._product_repo = product_repo
        self._ingredient_repo = ingredient_repo

    def resolve(self, item: CartItem) -> ResolvedItem:
        """Look up name, price and weight for a new cart line."""
        if isinstance(item, ProductItem):
            product = self._product_repo.get_by_id(item.product_id)
            if product is None:
                raise EntityNotFoundError(f"Product '{item.product_id}' not found")
            return ResolvedItem(
                product.name, product.price, product.weight_kg, product.category
            )

        if isinstance(item, CustomItem):
            ingredients = self._ingredients(item.ingredient_ids)
            count = len(ingredients)
            price = Money(CUSTOM_INGREDIENT_PRICE.amount * count)
            return ResolvedItem(f"Custom plate ({count} ingredients)", price)

        plate = self._plate(item.plate_id)
        price = plate.price
        for extra in self._ingredients(item.extra_ingredient_ids).values():
            price = price + extra.price
        name = plate.name
        if item.extra_ingredient_ids:
            name = f"{plate.name} (+{len(item.extra_ingredient_ids)} extras)"
        return ResolvedItem(name, price)

    def check_item(self, item: CartItem, total_quantity: int) -> None:
        """Raise the first reason ``total_quantity`` of ``item`` is not obtainable.

        Callers pass the quantity the cart line would hold *after* the
        mutation, not the delta.
        """
        if isinstance(item, PlateItem):
            plate = self._plate(item.plate_id)
            if plate.admin_disabled:
                raise IngredientUnavailableError(f"Plate \"{plate.name}\" is not available")
        for line in self._ledger.requirements_for(item, total_quantity):
            if line.required:
                self._ledger.check_line(line).raise_for_failure()

    def validate_items(self, items: list[tuple[CartItem, int]]) -> AvailabilityReport:
        """Check a whole set of items against current stock.

        Stock is checked against the summed need of all items so that two
        lines sharing an ingredient cannot each pass on their own while
        jointly exceeding the stock.
        """
        issues: list[str] = []
        requirements: list[StockLine] = []

        for item, quantity in items:
            try:
                if isinstance(item, PlateItem):
                    plate = self._plate(item.plate_id)
                    if plate.admin_disabled:
                        issues.append(f"\"{plate.name}\" is no longer available")
                        continue
                requirements.extend(self._ledger.requirements_for(item, quantity))
            except EntityNotFoundError as exc:
                issues.append(str(exc))

        for line in aggregate_lines(requirements):
            if not line.required:
                continue
            check = self._ledger.check_line(line)
            if not check.ok and check.reason not in issues:
                issues.append(check.reason or f"{line.key} is not available")

        return AvailabilityReport(valid=not issues, issues=issues)

    # --- Internal helpers -----------------------------------------------------

    def _plate(self, plate_id: str):
        plate = self._plate_repo.get_by_id(plate_id)
        if plate is None:
            raise EntityNotFoundError(f"Plate '{plate_id}' not found")
        return plate

    def _ingredients(self, ingredient_ids: frozenset[str]):
        found = self._ingredient_repo.get_many(set(ingredient_ids))
        missing = sorted(set(ingredient_ids) - set(found))
        if missing:
            raise EntityNotFoundError(f"Ingredient '{missing[0]}' not found")
        return found
