"""Application service: Handle Payment Webhook use case.

The provider delivers charge events at least once and in any order
relative to the client's own confirmation. Unknown event types and
charges that match no order are logged and acknowledged; duplicates are
absorbed by the reconciler's idempotency claim.
"""

from __future__ import annotations

from dataclasses import dataclass

import structlog

from freshcart.application.payment_reconciler import PaymentReconciler
from freshcart.domain.exceptions import PaymentAlreadyFinalized
from freshcart.domain.gateway.payment_gateway import ChargeStatus
from freshcart.domain.repository.order_repository import OrderRepository

logger = structlog.get_logger(__name__)

EVENT_STATUSES = {
    "charge.succeeded": ChargeStatus.SUCCEEDED,
    "charge.failed": ChargeStatus.FAILED,
}


@dataclass(frozen=True)
class PaymentEvent:
    """A verified provider event. Signature checks happen upstream."""

    type: str
    charge_id: str
    order_id: int | None = None


class HandlePaymentWebhookHandler:

    def __init__(self, order_repo: OrderRepository, reconciler: PaymentReconciler) -> None:
        self._order_repo = order_repo
        self._reconciler = reconciler

    def handle(self, event: PaymentEvent) -> None:
        status = EVENT_STATUSES.get(event.type)
        if status is None:
            logger.info("Ignoring payment event", event_type=event.type, charge_id=event.charge_id)
            return

        order = self._order_repo.get_by_charge_id(event.charge_id)
        if order is None and event.order_id is not None:
            candidate = self._order_repo.get_by_id(event.order_id)
            if candidate is not None and candidate.charge_id == event.charge_id:
                order = candidate
        if order is None:
            logger.warning("Payment event for unknown charge", charge_id=event.charge_id)
            return

        try:
            self._reconciler.reconcile(order, status)
        except PaymentAlreadyFinalized:
            logger.info(
                "Payment event already reconciled",
                event_type=event.type,
                order_id=order.id,
                charge_id=event.charge_id,
            )
