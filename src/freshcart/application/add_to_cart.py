"""Application service: Add To Cart use case.

Every check runs *before* the cart is touched:

1. Resolve the item against the catalog (name, price and weight snapshot).
2. Check stock for the quantity the line will hold after the add; for an
   identical item already in the cart that is the merged total, because
   the delta alone can pass while the cumulative total fails.
3. For weighed products: plan category gate, then the atomic quota
   adjustment for the added weight.
4. Mutate and persist the cart. If persisting fails after the quota was
   adjusted, the adjustment is given back.
"""

from __future__ import annotations

from decimal import Decimal

import structlog

from freshcart.application.dto import CartView
from freshcart.application.show_cart import current_subscription, to_cart_view
from freshcart.domain.model.cart import Cart, CartItem, ProductItem
from freshcart.domain.model.value_objects import Quantity
from freshcart.domain.repository.cart_repository import CartRepository
from freshcart.domain.service.cart_admission import CartAdmissionService
from freshcart.domain.service.quota_tracker import QuotaTracker

logger = structlog.get_logger(__name__)


class AddToCartHandler:

    def __init__(
        self,
        cart_repo: CartRepository,
        admission: CartAdmissionService,
        quota: QuotaTracker,
    ) -> None:
        self._cart_repo = cart_repo
        self._admission = admission
        self._quota = quota

    def handle(self, owner_id: str, item: CartItem, quantity: int) -> CartView:
        requested = Quantity(quantity)
        cart = self._cart_repo.get_by_owner(owner_id)
        existing = cart.find_line(item) if cart is not None else None

        new_total = requested.value + (existing.quantity.value if existing else 0)
        Quantity(new_total)

        resolved = self._admission.resolve(item)
        self._admission.check_item(item, new_total)

        unit_weight = existing.unit_weight_kg if existing else resolved.unit_weight_kg
        added_weight = Decimal("0")
        if isinstance(item, ProductItem):
            self._quota.check_category(owner_id, resolved.category or "")
            added_weight = unit_weight * requested.value
            self._quota.apply(owner_id, added_weight)

        if cart is None:
            cart = Cart(id=None, owner_id=owner_id)
        line = cart.add(
            item,
            requested.value,
            unit_price=resolved.unit_price,
            name=resolved.name,
            unit_weight_kg=resolved.unit_weight_kg,
        )
        try:
            self._cart_repo.save(cart)
        except Exception:
            self._quota.release(owner_id, added_weight)
            raise

        logger.info(
            "Cart item added",
            owner_id=owner_id,
            item=line.name,
            quantity=line.quantity.value,
            merged=existing is not None,
        )
        return to_cart_view(owner_id, cart, current_subscription(self._quota, owner_id))
