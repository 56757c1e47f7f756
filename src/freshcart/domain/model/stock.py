"""Stock lines: the unit of work for the stock ledger.

A StockLine names one stocked thing (an ingredient or a discrete product)
and how many units of it an operation needs.
"""

from __future__ import annotations

from collections import OrderedDict
from dataclasses import dataclass
from enum import Enum


class StockKind(Enum):
    INGREDIENT = "ingredient"
    PRODUCT = "product"


@dataclass(frozen=True)
class StockKey:
    kind: StockKind
    item_id: str

    def __str__(self) -> str:
        return f"{self.kind.value}:{self.item_id}"


@dataclass(frozen=True)
class StockLine:
    """``quantity`` units of ``key``.

    ``required=False`` marks a garnish: it is decremented when stock allows
    and skipped otherwise, never failing the batch.
    """

    key: StockKey
    quantity: int
    required: bool = True

    @staticmethod
    def ingredient(ingredient_id: str, quantity: int, required: bool = True) -> StockLine:
        return StockLine(StockKey(StockKind.INGREDIENT, ingredient_id), quantity, required)

    @staticmethod
    def product(product_id: str, quantity: int) -> StockLine:
        return StockLine(StockKey(StockKind.PRODUCT, product_id), quantity)

    def to_raw(self) -> dict:
        return {
            "kind": self.key.kind.value,
            "item_id": self.key.item_id,
            "quantity": self.quantity,
            "required": self.required,
        }

    @staticmethod
    def from_raw(raw: dict) -> StockLine:
        return StockLine(
            StockKey(StockKind(raw["kind"]), raw["item_id"]),
            raw["quantity"],
            raw.get("required", True),
        )


def aggregate_lines(lines: list[StockLine]) -> list[StockLine]:
    """Sum quantities per (key, required) so a batch checks the combined need.

    A key that appears both required and optional is treated as required
    for the whole amount.
    """
    totals: OrderedDict[StockKey, list] = OrderedDict()
    for line in lines:
        if line.quantity <= 0:
            continue
        entry = totals.setdefault(line.key, [0, False])
        entry[0] += line.quantity
        entry[1] = entry[1] or line.required
    return [StockLine(key, qty, required) for key, (qty, required) in totals.items()]
