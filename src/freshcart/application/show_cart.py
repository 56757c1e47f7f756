"""Application service: Show Cart use case (query)."""

from __future__ import annotations

from freshcart.application.dto import CartLineDTO, CartView
from freshcart.domain.exceptions import SubscriptionInactiveError
from freshcart.domain.model.cart import Cart
from freshcart.domain.model.subscription import Subscription
from freshcart.domain.repository.cart_repository import CartRepository
from freshcart.domain.service.availability_propagator import AvailabilityPropagator
from freshcart.domain.service.quota_tracker import QuotaTracker


class ShowCartHandler:

    def __init__(
        self,
        cart_repo: CartRepository,
        quota: QuotaTracker,
        propagator: AvailabilityPropagator | None = None,
    ) -> None:
        self._cart_repo = cart_repo
        self._quota = quota
        self._propagator = propagator

    def handle(self, owner_id: str) -> CartView:
        if self._propagator is not None:
            self._propagator.propagate()
        cart = self._cart_repo.get_by_owner(owner_id)
        return to_cart_view(owner_id, cart, current_subscription(self._quota, owner_id))


def current_subscription(quota: QuotaTracker, owner_id: str) -> Subscription | None:
    try:
        return quota.subscription(owner_id)
    except SubscriptionInactiveError:
        return None


def to_cart_view(
    owner_id: str,
    cart: Cart | None,
    subscription: Subscription | None,
) -> CartView:
    """Map a cart (or no cart) to its view. An emptied cart no longer exists."""
    quota_fields = {}
    if subscription is not None:
        quota_fields = {
            "limit_kg": str(subscription.limit_kg),
            "used_kg": str(subscription.used_kg),
            "remaining_kg": str(subscription.remaining_kg),
        }

    if cart is None:
        return CartView(
            cart_id=None,
            owner_id=owner_id,
            items=[],
            total="$0.00",
            total_items=0,
            **quota_fields,
        )

    return CartView(
        cart_id=cart.id,
        owner_id=owner_id,
        items=[
            CartLineDTO(
                line_id=line.line_id,
                type=line.item.kind.value,
                name=line.name,
                quantity=line.quantity.value,
                unit_price=str(line.unit_price),
                line_total=str(line.line_total),
                weight_kg=str(line.weight_kg),
            )
            for line in cart.lines
        ],
        total=str(cart.total),
        total_items=cart.total_items,
        **quota_fields,
    )
