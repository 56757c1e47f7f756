"""Application service: Confirm Payment use case.

Called by the client after it completed the charge with the provider.
Asks the provider for the charge's status and hands the outcome to the
reconciler. Confirming an order that was already reconciled (for example
by the webhook) is not an error; the current state is returned with
``already_finalized`` set.
"""

from __future__ import annotations

from freshcart.application.dto import OrderResult
from freshcart.application.payment_reconciler import PaymentReconciler
from freshcart.application.show_order import load_order, to_order_result
from freshcart.domain.exceptions import PaymentAlreadyFinalized, ValidationError
from freshcart.domain.repository.order_repository import OrderRepository


class ConfirmPaymentHandler:

    def __init__(self, order_repo: OrderRepository, reconciler: PaymentReconciler) -> None:
        self._order_repo = order_repo
        self._reconciler = reconciler

    def handle(self, order_id: int, charge_id: str) -> OrderResult:
        order = load_order(self._order_repo, order_id)
        if order.charge_id != charge_id:
            raise ValidationError(
                f"Charge {charge_id} does not belong to order #{order_id}"
            )
        if order.is_finalized:
            return to_order_result(order, already_finalized=True)

        status = self._reconciler.fetch_status(charge_id)
        try:
            order = self._reconciler.reconcile(order, status)
        except PaymentAlreadyFinalized:
            return to_order_result(
                load_order(self._order_repo, order_id), already_finalized=True
            )
        return to_order_result(order)
