"""Application service: Update Cart Item Quantity use case.

A new quantity of zero removes the line. Raising the quantity is
validated exactly like merging the difference into the line: stock is
checked for the new total and quota for the added weight. Lowering it
always succeeds and gives the weight back.
"""

from __future__ import annotations

import structlog

from freshcart.application.dto import CartView
from freshcart.application.remove_cart_item import RemoveCartItemHandler
from freshcart.application.show_cart import current_subscription, to_cart_view
from freshcart.domain.exceptions import EntityNotFoundError, ValidationError
from freshcart.domain.model.cart import ProductItem
from freshcart.domain.model.value_objects import Quantity
from freshcart.domain.repository.cart_repository import CartRepository
from freshcart.domain.service.cart_admission import CartAdmissionService
from freshcart.domain.service.quota_tracker import QuotaTracker

logger = structlog.get_logger(__name__)


class UpdateCartItemQuantityHandler:

    def __init__(
        self,
        cart_repo: CartRepository,
        admission: CartAdmissionService,
        quota: QuotaTracker,
    ) -> None:
        self._cart_repo = cart_repo
        self._admission = admission
        self._quota = quota

    def handle(self, owner_id: str, line_id: int, quantity: int) -> CartView:
        if quantity < 0:
            raise ValidationError("Quantity cannot be negative")
        if quantity == 0:
            remove = RemoveCartItemHandler(self._cart_repo, self._quota)
            return remove.handle(owner_id, line_id)

        cart = self._cart_repo.get_by_owner(owner_id)
        if cart is None:
            raise EntityNotFoundError(f"No cart for '{owner_id}'")
        line = cart.get_line(line_id)
        previous = line.quantity.value
        Quantity(quantity)

        is_product = isinstance(line.item, ProductItem)
        delta_weight = line.unit_weight_kg * (quantity - previous)

        if quantity > previous:
            self._admission.check_item(line.item, quantity)
            if is_product:
                resolved = self._admission.resolve(line.item)
                self._quota.check_category(owner_id, resolved.category or "")
                self._quota.apply(owner_id, delta_weight)

        cart.set_quantity(line_id, quantity)
        try:
            self._cart_repo.save(cart)
        except Exception:
            if is_product and delta_weight > 0:
                self._quota.release(owner_id, delta_weight)
            raise

        if is_product and delta_weight < 0:
            self._quota.release(owner_id, -delta_weight)

        logger.info(
            "Cart item quantity updated",
            owner_id=owner_id,
            line_id=line_id,
            previous=previous,
            quantity=quantity,
        )
        return to_cart_view(owner_id, cart, current_subscription(self._quota, owner_id))
