"""Application service: Cancel Order use case.

Before the charge is captured no stock was decremented, so the order
simply fails and its weight is given back to the subscriber. A confirmed
order is refunded and its decremented stock released.
"""

from __future__ import annotations

from freshcart.application.dto import OrderResult
from freshcart.application.payment_reconciler import PaymentReconciler
from freshcart.application.show_order import load_order, to_order_result
from freshcart.domain.repository.order_repository import OrderRepository


class CancelOrderHandler:

    def __init__(self, order_repo: OrderRepository, reconciler: PaymentReconciler) -> None:
        self._order_repo = order_repo
        self._reconciler = reconciler

    def handle(self, order_id: int, reason: str = "Cancelled by customer") -> OrderResult:
        order = load_order(self._order_repo, order_id)
        return to_order_result(self._reconciler.cancel(order, reason))
