"""Views and results returned by the application handlers.

Money and weight are pre-formatted strings so the CLI never touches
Money or Decimal values directly.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class CartLineDTO:
    """Output: a single cart line as displayed to the user."""

    line_id: int
    type: str
    name: str
    quantity: int
    unit_price: str  # formatted, e.g. "$15.00"
    line_total: str
    weight_kg: str


@dataclass(frozen=True)
class CartView:
    """Output: a cart, or the absence of one (``cart_id is None``)."""

    cart_id: int | None
    owner_id: str
    items: list[CartLineDTO]
    total: str
    total_items: int
    limit_kg: str | None = None
    used_kg: str | None = None
    remaining_kg: str | None = None


@dataclass(frozen=True)
class CheckoutResult:
    order_id: int
    charge_id: str
    client_secret: str
    total: str


@dataclass(frozen=True)
class OrderResult:
    """Output of payment confirmation and cancellation."""

    order_id: int
    status: str
    payment_status: str
    total: str
    already_finalized: bool = False
    refund_id: str | None = None
    failure_reason: str | None = None


@dataclass(frozen=True)
class OrderLineDTO:
    type: str
    name: str
    quantity: int
    unit_price: str
    line_total: str


@dataclass(frozen=True)
class OrderDTO:
    """Output: a complete order as displayed to the user."""

    id: int
    customer_id: str
    status: str
    payment_status: str
    items: list[OrderLineDTO]
    total: str
    charge_id: str | None
    refund_id: str | None
    failure_reason: str | None
    omitted: list[str] = field(default_factory=list)
    history: list[str] = field(default_factory=list)
    created_at: str = ""


@dataclass(frozen=True)
class SubscriptionDTO:
    subscriber_id: str
    plan: str
    limit_kg: str
    used_kg: str
    remaining_kg: str
    renewal_date: str
    warning: str | None = None


@dataclass(frozen=True)
class IngredientDTO:
    id: str
    name: str
    stock: int
    available: bool
    price: str


@dataclass(frozen=True)
class PlateDTO:
    id: str
    name: str
    price: str
    available: bool
    admin_disabled: bool


@dataclass(frozen=True)
class ProductDTO:
    id: str
    name: str
    category: str
    weight_kg: str
    stock: int
    available: bool
    price: str


@dataclass(frozen=True)
class StockView:
    """Output: catalog stock state after an on-demand propagation."""

    ingredients: list[IngredientDTO]
    plates: list[PlateDTO]
    products: list[ProductDTO]
