"""Application service: Remove Cart Item use case.

Removing the last line deletes the cart itself.
"""

from __future__ import annotations

import structlog

from freshcart.application.dto import CartView
from freshcart.application.show_cart import current_subscription, to_cart_view
from freshcart.domain.exceptions import EntityNotFoundError
from freshcart.domain.model.cart import ProductItem
from freshcart.domain.repository.cart_repository import CartRepository
from freshcart.domain.service.quota_tracker import QuotaTracker

logger = structlog.get_logger(__name__)


class RemoveCartItemHandler:

    def __init__(self, cart_repo: CartRepository, quota: QuotaTracker) -> None:
        self._cart_repo = cart_repo
        self._quota = quota

    def handle(self, owner_id: str, line_id: int) -> CartView:
        cart = self._cart_repo.get_by_owner(owner_id)
        if cart is None:
            raise EntityNotFoundError(f"No cart for '{owner_id}'")

        line = cart.remove(line_id)
        if cart.is_empty:
            self._cart_repo.delete(cart)
            remaining = None
        else:
            self._cart_repo.save(cart)
            remaining = cart

        if isinstance(line.item, ProductItem):
            self._quota.release(owner_id, line.weight_kg)

        logger.info("Cart item removed", owner_id=owner_id, line_id=line_id, cart_deleted=remaining is None)
        return to_cart_view(owner_id, remaining, current_subscription(self._quota, owner_id))
