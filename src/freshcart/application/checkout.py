"""Application service: Checkout use case.

Converts the owner's cart into an order awaiting payment:

1. Re-validate the whole cart against current stock and, for weighed
   products, against the subscriber's current plan. Any problem aborts
   with StaleCartError before anything is written.
2. Freeze the lines and their stock requirements into a pending order.
3. Create a charge at the payment provider. If that fails the order is
   failed and the cart is kept so the customer can retry.
4. Delete the cart. Stock is *not* decremented here; that happens once,
   when the charge is reconciled.
"""

from __future__ import annotations

import structlog

from freshcart.application.dto import CheckoutResult
from freshcart.application.show_order import saved_id
from freshcart.domain.exceptions import (
    CategoryNotAllowedError,
    EntityNotFoundError,
    PaymentNotCapturedError,
    StaleCartError,
    SubscriptionInactiveError,
    ValidationError,
)
from freshcart.domain.gateway.payment_gateway import PaymentGateway, PaymentGatewayError
from freshcart.domain.model.cart import Cart, ProductItem
from freshcart.domain.model.order import Order
from freshcart.domain.model.stock import StockLine, aggregate_lines
from freshcart.domain.repository.cart_repository import CartRepository
from freshcart.domain.repository.order_repository import OrderRepository
from freshcart.domain.service.cart_admission import CartAdmissionService
from freshcart.domain.service.quota_tracker import QuotaTracker
from freshcart.domain.service.stock_ledger import StockLedger

logger = structlog.get_logger(__name__)


class CheckoutHandler:

    def __init__(
        self,
        cart_repo: CartRepository,
        order_repo: OrderRepository,
        admission: CartAdmissionService,
        ledger: StockLedger,
        quota: QuotaTracker,
        gateway: PaymentGateway,
        timeout: float,
    ) -> None:
        self._cart_repo = cart_repo
        self._order_repo = order_repo
        self._admission = admission
        self._ledger = ledger
        self._quota = quota
        self._gateway = gateway
        self._timeout = timeout

    def handle(self, owner_id: str) -> CheckoutResult:
        cart = self._cart_repo.get_by_owner(owner_id)
        if cart is None or cart.is_empty:
            raise ValidationError("Cart is empty")

        issues = self._plan_issues(cart)
        report = self._admission.validate_items(
            [(line.item, line.quantity.value) for line in cart.lines]
        )
        for issue in report.issues:
            if issue not in issues:
                issues.append(issue)
        if issues:
            logger.info("Checkout rejected, cart is stale", owner_id=owner_id, issues=issues)
            raise StaleCartError(issues)

        requirements: list[StockLine] = []
        for line in cart.lines:
            requirements.extend(self._ledger.requirements_for(line.item, line.quantity.value))
        order = Order.from_cart(cart, aggregate_lines(requirements))
        self._order_repo.save(order)

        try:
            charge = self._gateway.create_charge(
                order.total.minor_units,
                order.total.currency.lower(),
                metadata={"order_id": str(order.id), "customer_id": owner_id},
                timeout=self._timeout,
            )
        except PaymentGatewayError as exc:
            order.fail(f"Payment could not be initiated: {exc}")
            self._order_repo.save(order)
            logger.warning("Charge creation failed", order_id=order.id, error=str(exc))
            raise PaymentNotCapturedError(
                f"Payment could not be initiated for order #{order.id}",
                details={"order_id": order.id},
            ) from exc

        order.await_payment(charge.charge_id)
        self._order_repo.save(order)
        self._cart_repo.delete(cart)

        logger.info(
            "Checkout completed",
            order_id=order.id,
            charge_id=charge.charge_id,
            total=str(order.total),
        )
        return CheckoutResult(
            order_id=saved_id(order),
            charge_id=charge.charge_id,
            client_secret=charge.client_secret,
            total=str(order.total),
        )

    def _plan_issues(self, cart: Cart) -> list[str]:
        """Weighed products must still fit the subscriber's current plan."""
        products = [line for line in cart.lines if isinstance(line.item, ProductItem)]
        if not products:
            return []
        try:
            sub = self._quota.subscription(cart.owner_id)
        except SubscriptionInactiveError as exc:
            return [str(exc)]

        issues: list[str] = []
        for line in products:
            try:
                resolved = self._admission.resolve(line.item)
                self._quota.check_category(cart.owner_id, resolved.category or "")
            except (CategoryNotAllowedError, EntityNotFoundError) as exc:
                issues.append(str(exc))
        if cart.total_weight_kg > sub.limit_kg:
            issues.append(
                f"Cart weighs {cart.total_weight_kg} kg, over the "
                f"{sub.limit_kg} kg limit of your {sub.plan.value} plan"
            )
        return issues
