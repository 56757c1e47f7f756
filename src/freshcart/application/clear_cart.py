"""Application service: Clear Cart use case."""

from __future__ import annotations

from decimal import Decimal

import structlog

from freshcart.application.dto import CartView
from freshcart.application.show_cart import current_subscription, to_cart_view
from freshcart.domain.model.cart import ProductItem
from freshcart.domain.repository.cart_repository import CartRepository
from freshcart.domain.service.quota_tracker import QuotaTracker

logger = structlog.get_logger(__name__)


class ClearCartHandler:

    def __init__(self, cart_repo: CartRepository, quota: QuotaTracker) -> None:
        self._cart_repo = cart_repo
        self._quota = quota

    def handle(self, owner_id: str) -> CartView:
        """Remove every line and the cart; clearing no cart is a no-op."""
        cart = self._cart_repo.get_by_owner(owner_id)
        if cart is not None:
            removed = cart.clear()
            self._cart_repo.delete(cart)
            weight = sum(
                (line.weight_kg for line in removed if isinstance(line.item, ProductItem)),
                Decimal("0"),
            )
            self._quota.release(owner_id, weight)
            logger.info("Cart cleared", owner_id=owner_id, lines=len(removed))

        return to_cart_view(owner_id, None, current_subscription(self._quota, owner_id))
