"""Cart aggregate: the mutable, pre-checkout collection of line items.

Cart items are a closed tagged union: a line is either a catalog plate
(optionally with extra ingredients), a freeform custom plate built from
ingredient ids, or a discrete weighed product. Every variant knows its
``kind`` discriminant and a ``merge_key`` used to detect identical items.

The aggregate never validates stock or quota itself; the application
handlers run those checks *before* mutating the cart.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import ClassVar, Union

from freshcart.domain.exceptions import EntityNotFoundError, ValidationError
from freshcart.domain.model.value_objects import Money, Quantity


class ItemKind(Enum):
    PLATE = "plate"
    CUSTOM = "custom"
    PRODUCT = "product"


@dataclass(frozen=True)
class PlateItem:
    kind: ClassVar[ItemKind] = ItemKind.PLATE

    plate_id: str
    extra_ingredient_ids: frozenset[str] = frozenset()

    @property
    def merge_key(self) -> tuple:
        return (self.kind, self.plate_id, self.extra_ingredient_ids)


@dataclass(frozen=True)
class CustomItem:
    kind: ClassVar[ItemKind] = ItemKind.CUSTOM

    ingredient_ids: frozenset[str]

    def __post_init__(self) -> None:
        if not self.ingredient_ids:
            raise ValidationError("A custom plate needs at least one ingredient")

    @property
    def merge_key(self) -> tuple:
        return (self.kind, self.ingredient_ids)


@dataclass(frozen=True)
class ProductItem:
    kind: ClassVar[ItemKind] = ItemKind.PRODUCT

    product_id: str

    @property
    def merge_key(self) -> tuple:
        return (self.kind, self.product_id)


CartItem = Union[PlateItem, CustomItem, ProductItem]


def item_to_raw(item: CartItem) -> dict:
    if isinstance(item, PlateItem):
        return {
            "type": item.kind.value,
            "plate_id": item.plate_id,
            "extra_ingredients": sorted(item.extra_ingredient_ids),
        }
    if isinstance(item, CustomItem):
        return {"type": item.kind.value, "custom_ingredients": sorted(item.ingredient_ids)}
    return {"type": item.kind.value, "product_id": item.product_id}


def item_from_raw(raw: dict) -> CartItem:
    kind = ItemKind(raw["type"])
    if kind is ItemKind.PLATE:
        return PlateItem(raw["plate_id"], frozenset(raw.get("extra_ingredients", [])))
    if kind is ItemKind.CUSTOM:
        return CustomItem(frozenset(raw["custom_ingredients"]))
    return ProductItem(raw["product_id"])


@dataclass
class CartLine:
    """One line of the cart with its add-time price and weight snapshot."""

    line_id: int
    item: CartItem
    quantity: Quantity
    unit_price: Money  # locked at add time
    name: str
    unit_weight_kg: Decimal = Decimal("0")

    @property
    def line_total(self) -> Money:
        return self.unit_price * self.quantity.value

    @property
    def weight_kg(self) -> Decimal:
        return self.unit_weight_kg * self.quantity.value


@dataclass
class Cart:

    id: int | None
    owner_id: str
    lines: list[CartLine] = field(default_factory=list)
    currency: str = "USD"

    # --- Queries --------------------------------------------------------------

    @property
    def total(self) -> Money:
        """Always recomputed from the lines, never cached."""
        result = Money.zero(self.currency)
        for line in self.lines:
            result = result + line.line_total
        return result

    @property
    def total_weight_kg(self) -> Decimal:
        return sum((line.weight_kg for line in self.lines), Decimal("0"))

    @property
    def total_items(self) -> int:
        return sum(line.quantity.value for line in self.lines)

    @property
    def is_empty(self) -> bool:
        return not self.lines

    def find_line(self, item: CartItem) -> CartLine | None:
        for line in self.lines:
            if line.item.merge_key == item.merge_key:
                return line
        return None

    def get_line(self, line_id: int) -> CartLine:
        for line in self.lines:
            if line.line_id == line_id:
                return line
        raise EntityNotFoundError(f"Cart item #{line_id} not found")

    # --- Mutations ------------------------------------------------------------

    def add(
        self,
        item: CartItem,
        quantity: int,
        unit_price: Money,
        name: str,
        unit_weight_kg: Decimal = Decimal("0"),
    ) -> CartLine:
        """Add an item, merging into an identical existing line.

        On a merge the line keeps its original price snapshot.
        """
        existing = self.find_line(item)
        if existing is not None:
            existing.quantity = Quantity(existing.quantity.value + quantity)
            return existing

        line = CartLine(
            line_id=self._next_line_id(),
            item=item,
            quantity=Quantity(quantity),
            unit_price=unit_price,
            name=name,
            unit_weight_kg=unit_weight_kg,
        )
        self.lines.append(line)
        return line

    def set_quantity(self, line_id: int, quantity: int) -> CartLine:
        line = self.get_line(line_id)
        line.quantity = Quantity(quantity)
        return line

    def remove(self, line_id: int) -> CartLine:
        line = self.get_line(line_id)
        self.lines.remove(line)
        return line

    def clear(self) -> list[CartLine]:
        removed = list(self.lines)
        self.lines.clear()
        return removed

    # --- Internal helpers -----------------------------------------------------

    def _next_line_id(self) -> int:
        return max((line.line_id for line in self.lines), default=0) + 1
