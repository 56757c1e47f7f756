"""Application service: Payment Reconciler.

Bridges a charge outcome from the payment provider to the order state
machine and the stock ledger. The client confirmation call and the
provider webhook both end up here, so the outcome of a charge is applied
once no matter how many times, or by how many callers, it is delivered.

Idempotency is keyed by the provider's charge id: before any side effect
the reconciler claims ``capture:<charge id>`` (or ``refund:<charge id>``)
in the claim repository. Losing the claim, or finding the order already
finalized, raises PaymentAlreadyFinalized and changes nothing. When a later
step raises before the outcome is stored, the claim is handed back so the
charge can be reconciled again.

Outcomes:

- succeeded: re-validate the frozen snapshot and decrement its stock in
  one batch. If either fails, the charge is refunded and the order fails.
- failed: the order fails; stock is never touched.
- timed out: treated as failed, with a best-effort refund first.
"""

from __future__ import annotations

from typing import Callable

import structlog

from freshcart.domain.exceptions import (
    InsufficientStockError,
    PaymentAlreadyFinalized,
    PaymentNotCapturedError,
    ValidationError,
)
from freshcart.domain.gateway.payment_gateway import (
    ChargeStatus,
    PaymentGateway,
    PaymentGatewayError,
    PaymentGatewayTimeout,
)
from freshcart.domain.model.order import Order, OrderStatus, PaymentStatus
from freshcart.domain.model.stock import StockKind, StockLine
from freshcart.domain.repository.order_repository import OrderRepository
from freshcart.domain.repository.payment_claim_repository import PaymentClaimRepository
from freshcart.domain.service.availability_propagator import AvailabilityPropagator
from freshcart.domain.service.cart_admission import CartAdmissionService
from freshcart.domain.service.quota_tracker import QuotaTracker
from freshcart.domain.service.stock_ledger import StockLedger

logger = structlog.get_logger(__name__)


class PaymentReconciler:

    def __init__(
        self,
        order_repo: OrderRepository,
        claim_repo: PaymentClaimRepository,
        ledger: StockLedger,
        admission: CartAdmissionService,
        propagator: AvailabilityPropagator,
        quota: QuotaTracker,
        gateway: PaymentGateway,
        timeout: float,
    ) -> None:
        self._order_repo = order_repo
        self._claim_repo = claim_repo
        self._ledger = ledger
        self._admission = admission
        self._propagator = propagator
        self._quota = quota
        self._gateway = gateway
        self._timeout = timeout

    # --- Capture ----------------------------------------------------------------

    def fetch_status(self, charge_id: str) -> ChargeStatus | None:
        """Ask the provider for a charge's status; None means it timed out."""
        try:
            return self._gateway.get_charge(charge_id, timeout=self._timeout)
        except PaymentGatewayTimeout:
            logger.warning("Charge status timed out", charge_id=charge_id)
            return None
        except PaymentGatewayError as exc:
            raise PaymentNotCapturedError(
                f"Payment status unavailable: {exc}", details={"charge_id": charge_id}
            ) from exc

    def reconcile(self, order: Order, status: ChargeStatus | None) -> Order:
        """Apply a charge outcome to an order awaiting payment.

        ``status=None`` stands for a capture that timed out.
        """
        if order.is_finalized:
            if status is ChargeStatus.SUCCEEDED:
                self._refund_late_capture(order)
            raise PaymentAlreadyFinalized(
                f"Order #{order.id} is already {order.payment_status.value}"
            )
        if order.charge_id is None:
            raise ValidationError(f"Order #{order.id} has no charge awaiting payment")
        if status is ChargeStatus.PENDING:
            raise PaymentNotCapturedError(
                f"Payment for order #{order.id} not completed. Status: pending"
            )

        key = f"capture:{order.charge_id}"
        if not self._claim_repo.claim(key, order.id):
            raise PaymentAlreadyFinalized(
                f"Charge {order.charge_id} is already being reconciled"
            )
        try:
            if status is ChargeStatus.SUCCEEDED:
                return self._complete(order)
            if status is None:
                self._try_refund(order, "capture timed out")
                return self._fail(order, "Payment capture timed out")
            return self._fail(order, "Payment failed")
        except BaseException:
            self._release_unless_stored(key, order, _finalized)
            raise

    # --- Cancellation -----------------------------------------------------------

    def cancel(self, order: Order, reason: str) -> Order:
        """Cancel an order, compensating whatever already happened.

        Before capture nothing was decremented, so the order simply fails.
        After capture the charge is refunded and the reserved stock
        released.
        """
        if order.status in (OrderStatus.PENDING, OrderStatus.AWAITING_PAYMENT):
            if order.charge_id is None:
                return self._fail(order, reason)
            key = f"capture:{order.charge_id}"
            if not self._claim_repo.claim(key, order.id):
                raise PaymentAlreadyFinalized(
                    f"Charge {order.charge_id} is already being reconciled"
                )
            try:
                return self._fail(order, reason)
            except BaseException:
                self._release_unless_stored(key, order, _finalized)
                raise

        if order.status is not OrderStatus.CONFIRMED:
            raise ValidationError(
                f"Cannot cancel order in {order.status.value}/"
                f"{order.payment_status.value} state"
            )

        key = f"refund:{order.charge_id}"
        if not self._claim_repo.claim(key, order.id):
            raise PaymentAlreadyFinalized(f"Order #{order.id} is already being refunded")
        try:
            refund_id = self._gateway.refund(
                order.charge_id, order.total.minor_units, timeout=self._timeout
            )
            order.refund(refund_id, reason)
            self._order_repo.save(order)
        except BaseException:
            self._release_unless_stored(key, order, _refunded)
            raise

        self._ledger.release(order.reserved)
        self._quota.release(order.customer_id, order.total_weight_kg)
        self._propagator.propagate_for_ingredients(_ingredient_ids(order.reserved))
        logger.info("Order refunded", order_id=order.id, refund_id=refund_id, reason=reason)
        return order

    # --- Internal helpers -------------------------------------------------------

    def _complete(self, order: Order) -> Order:
        report = self._admission.validate_items(
            [(line.item, line.quantity) for line in order.lines]
        )
        if not report.valid:
            return self._refund_and_fail(order, "; ".join(report.issues))

        try:
            reservation = self._ledger.reserve_and_decrement(order.requirements)
        except InsufficientStockError as exc:
            return self._refund_and_fail(order, str(exc))

        order.confirm(reservation.applied, reservation.skipped)
        try:
            self._order_repo.save(order)
        except Exception:
            self._ledger.release(reservation.applied)
            raise

        self._propagator.propagate_for_ingredients(_ingredient_ids(reservation.applied))
        logger.info(
            "Order confirmed",
            order_id=order.id,
            charge_id=order.charge_id,
            omitted=[str(line.key) for line in reservation.skipped],
        )
        return order

    def _refund_and_fail(self, order: Order, reason: str) -> Order:
        """Money moved but the goods are gone: refund, then fail the order."""
        logger.warning("Captured order failed re-validation", order_id=order.id, reason=reason)
        refund_id = None
        if self._claim_repo.claim(f"refund:{order.charge_id}", order.id):
            try:
                refund_id = self._gateway.refund(
                    order.charge_id, order.total.minor_units, timeout=self._timeout
                )
            except PaymentGatewayError as exc:
                self._claim_repo.release(f"refund:{order.charge_id}")
                logger.error(
                    "Refund failed; manual refund required",
                    order_id=order.id,
                    charge_id=order.charge_id,
                    error=str(exc),
                )
                self._fail(order, f"{reason} (refund failed: {exc})")
                raise
        return self._fail(order, reason, refund_id)

    def _try_refund(self, order: Order, why: str) -> None:
        """Best-effort refund for a charge whose capture state is unknown."""
        if not self._claim_repo.claim(f"refund:{order.charge_id}", order.id):
            return
        try:
            refund_id = self._gateway.refund(order.charge_id, None, timeout=self._timeout)
        except PaymentGatewayError as exc:
            self._claim_repo.release(f"refund:{order.charge_id}")
            logger.warning("Refund attempt failed", order_id=order.id, why=why, error=str(exc))
            return
        order.refund_id = refund_id

    def _refund_late_capture(self, order: Order) -> None:
        """A failed order whose charge went through after all gets its money back."""
        if order.payment_status is not PaymentStatus.FAILED or order.refund_id is not None:
            return
        key = f"refund:{order.charge_id}"
        if not self._claim_repo.claim(key, order.id):
            return
        try:
            refund_id = self._gateway.refund(
                order.charge_id, order.total.minor_units, timeout=self._timeout
            )
            order.record_refund(refund_id)
            self._order_repo.save(order)
        except BaseException:
            self._release_unless_stored(key, order, _refunded)
            raise
        logger.warning("Late capture refunded", order_id=order.id, refund_id=refund_id)

    def _release_unless_stored(
        self, key: str, order: Order, settled: Callable[[Order], bool]
    ) -> None:
        """Give a claim back unless the stored order already carries its outcome.

        A step after the claim raised. If the outcome never reached the
        order store, a retry must be able to claim the charge again.
        """
        try:
            stored = self._order_repo.get_by_id(order.id) if order.id is not None else None
            if stored is None or not settled(stored):
                self._claim_repo.release(key)
        except Exception as exc:
            logger.error(
                "Payment claim still held; manual release required",
                key=key,
                order_id=order.id,
                error=str(exc),
            )

    def _fail(self, order: Order, reason: str, refund_id: str | None = None) -> Order:
        order.fail(reason, refund_id=refund_id or order.refund_id)
        self._order_repo.save(order)
        self._quota.release(order.customer_id, order.total_weight_kg)
        logger.info(
            "Order failed",
            order_id=order.id,
            reason=reason,
            refund_id=order.refund_id,
        )
        return order


def _ingredient_ids(lines: list[StockLine]) -> set[str]:
    return {line.key.item_id for line in lines if line.key.kind is StockKind.INGREDIENT}


def _finalized(order: Order) -> bool:
    return order.is_finalized


def _refunded(order: Order) -> bool:
    return order.refund_id is not None
