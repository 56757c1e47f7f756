"""Conversions between domain values and their stored column forms."""

from __future__ import annotations

import json
from decimal import Decimal

from freshcart.domain.model.cart import CartItem, item_from_raw, item_to_raw
from freshcart.domain.model.value_objects import Money, to_kg

_GRAMS_PER_KG = Decimal("1000")


def to_minor(money: Money) -> int:
    return money.minor_units


def from_minor(minor: int, currency: str = "USD") -> Money:
    return Money((Decimal(minor) / 100).quantize(Decimal("0.01")), currency)


def to_grams(kg: Decimal) -> int:
    return int(to_kg(kg) * _GRAMS_PER_KG)


def from_grams(grams: int) -> Decimal:
    return to_kg(Decimal(grams) / _GRAMS_PER_KG)


def dump_item(item: CartItem) -> str:
    return json.dumps(item_to_raw(item), sort_keys=True)


def load_item(raw: str) -> CartItem:
    return item_from_raw(json.loads(raw))
