"""Order aggregate: the immutable record a cart is converted into.

The Order is an aggregate root that owns a frozen snapshot of the cart
lines and the stock requirements derived from them at checkout time.
Nothing on an order is ever re-derived from the current catalog.

State machine (status / payment status)::

    PENDING/PENDING
      -> AWAITING_PAYMENT/PENDING        charge created
      -> CONFIRMED/COMPLETED             capture + stock decremented
      -> CANCELLED/FAILED                declined, timed out or stale
    CONFIRMED/COMPLETED
      -> CANCELLED/REFUNDED              cancelled after capture

Every transition is appended to ``history``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum

from freshcart.domain.exceptions import ValidationError
from freshcart.domain.model.cart import Cart, CartItem
from freshcart.domain.model.stock import StockLine
from freshcart.domain.model.value_objects import Money


class OrderStatus(Enum):
    PENDING = "pending"
    AWAITING_PAYMENT = "awaiting_payment"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


class PaymentStatus(Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"
    REFUNDED = "refunded"


@dataclass(frozen=True)
class OrderLine:
    """Snapshot of a cart line at checkout."""

    item: CartItem
    name: str
    quantity: int
    unit_price: Money
    unit_weight_kg: Decimal = Decimal("0")

    @property
    def line_total(self) -> Money:
        return self.unit_price * self.quantity


@dataclass(frozen=True)
class TransitionRecord:
    status: OrderStatus
    payment_status: PaymentStatus
    reason: str | None
    at: datetime


# ---------------------------------------------------------------------------
# Constants for business rules
# ---------------------------------------------------------------------------
MIN_ORDER_TOTAL = Money(Decimal("1.00"))


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Order:
    """Aggregate root for customer orders.

    Use the ``Order.from_cart()`` factory for new orders; it enforces all
    business rules. The ``__init__`` is intentionally simple so the
    repository can reconstitute persisted orders without re-validating.
    """

    id: int | None
    customer_id: str
    lines: list[OrderLine]
    requirements: list[StockLine]
    status: OrderStatus = OrderStatus.PENDING
    payment_status: PaymentStatus = PaymentStatus.PENDING
    charge_id: str | None = None
    refund_id: str | None = None
    reserved: list[StockLine] = field(default_factory=list)
    omitted: list[StockLine] = field(default_factory=list)
    failure_reason: str | None = None
    history: list[TransitionRecord] = field(default_factory=list)
    created_at: datetime = field(default_factory=_now)

    # --- Factory (used for NEW orders only) -----------------------------------

    @staticmethod
    def from_cart(cart: Cart, requirements: list[StockLine]) -> Order:
        """Freeze a cart into a new pending order."""
        if cart.is_empty:
            raise ValidationError("Cart is empty")

        lines = [
            OrderLine(
                item=line.item,
                name=line.name,
                quantity=line.quantity.value,
                unit_price=line.unit_price,
                unit_weight_kg=line.unit_weight_kg,
            )
            for line in cart.lines
        ]
        order = Order(
            id=None,
            customer_id=cart.owner_id,
            lines=lines,
            requirements=list(requirements),
        )

        minimum = Money(MIN_ORDER_TOTAL.amount, order.total.currency)
        if order.total < minimum:
            raise ValidationError(
                f"Order total {order.total} below minimum {minimum}"
            )

        order._record("created")
        return order

    # --- State transitions ----------------------------------------------------

    def await_payment(self, charge_id: str) -> None:
        """PENDING -> AWAITING_PAYMENT once a charge exists at the provider."""
        self._require(OrderStatus.PENDING, PaymentStatus.PENDING, "await payment")
        self.charge_id = charge_id
        self.status = OrderStatus.AWAITING_PAYMENT
        self._record(f"charge {charge_id} created")

    def confirm(self, reserved: list[StockLine], omitted: list[StockLine]) -> None:
        """AWAITING_PAYMENT -> CONFIRMED/COMPLETED.

        The stock decrement must have happened *before* calling this; the
        lines actually decremented are kept so a later refund can release
        exactly them.
        """
        self._require(OrderStatus.AWAITING_PAYMENT, PaymentStatus.PENDING, "confirm")
        self.reserved = list(reserved)
        self.omitted = list(omitted)
        self.status = OrderStatus.CONFIRMED
        self.payment_status = PaymentStatus.COMPLETED
        self._record("payment captured")

    def fail(self, reason: str, refund_id: str | None = None) -> None:
        """PENDING|AWAITING_PAYMENT -> CANCELLED/FAILED.

        ``refund_id`` is set when money had already been captured and was
        returned because the order could not be fulfilled.
        """
        if self.payment_status is not PaymentStatus.PENDING or self.status not in (
            OrderStatus.PENDING,
            OrderStatus.AWAITING_PAYMENT,
        ):
            raise ValidationError(
                f"Cannot fail order in {self.status.value}/"
                f"{self.payment_status.value} state"
            )
        self.refund_id = refund_id
        self.failure_reason = reason
        self.status = OrderStatus.CANCELLED
        self.payment_status = PaymentStatus.FAILED
        self._record(reason)

    def refund(self, refund_id: str, reason: str) -> None:
        """CONFIRMED/COMPLETED -> CANCELLED/REFUNDED.

        Stock release must happen alongside this (coordinated by the
        application handler).
        """
        self._require(OrderStatus.CONFIRMED, PaymentStatus.COMPLETED, "refund")
        self.refund_id = refund_id
        self.failure_reason = reason
        self.status = OrderStatus.CANCELLED
        self.payment_status = PaymentStatus.REFUNDED
        self._record(reason)

    def record_refund(self, refund_id: str) -> None:
        """Note a refund for a charge captured after the order had failed."""
        if self.payment_status is not PaymentStatus.FAILED:
            raise ValidationError("Only failed orders take a late refund")
        if self.refund_id is not None:
            raise ValidationError(f"Order already refunded ({self.refund_id})")
        self.refund_id = refund_id
        self._record(f"late capture refunded ({refund_id})")

    # --- Computed properties --------------------------------------------------

    @property
    def total(self) -> Money:
        currency = self.lines[0].unit_price.currency if self.lines else "USD"
        result = Money.zero(currency)
        for line in self.lines:
            result = result + line.line_total
        return result

    @property
    def total_weight_kg(self) -> Decimal:
        return sum(
            (line.unit_weight_kg * line.quantity for line in self.lines), Decimal("0")
        )

    @property
    def is_finalized(self) -> bool:
        return self.payment_status is not PaymentStatus.PENDING

    # --- Internal helpers -----------------------------------------------------

    def _require(self, status: OrderStatus, payment: PaymentStatus, action: str) -> None:
        if self.status is not status or self.payment_status is not payment:
            raise ValidationError(
                f"Cannot {action} order: current state is "
                f"{self.status.value}/{self.payment_status.value}, "
                f"expected {status.value}/{payment.value}"
            )

    def _record(self, reason: str | None) -> None:
        self.history.append(
            TransitionRecord(self.status, self.payment_status, reason, _now())
        )
