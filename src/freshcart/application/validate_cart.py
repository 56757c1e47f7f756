"""Application service: Validate Cart Availability use case (query)."""

from __future__ import annotations

from freshcart.domain.model.cart import CartItem
from freshcart.domain.repository.cart_repository import CartRepository
from freshcart.domain.service.cart_admission import AvailabilityReport, CartAdmissionService


class ValidateCartAvailabilityHandler:

    def __init__(self, cart_repo: CartRepository, admission: CartAdmissionService) -> None:
        self._cart_repo = cart_repo
        self._admission = admission

    def handle(self, items: list[tuple[CartItem, int]]) -> AvailabilityReport:
        """Check arbitrary items against current stock."""
        return self._admission.validate_items(items)

    def handle_cart(self, owner_id: str) -> AvailabilityReport:
        """Check the owner's current cart; no cart is trivially valid."""
        cart = self._cart_repo.get_by_owner(owner_id)
        if cart is None:
            return AvailabilityReport(valid=True)
        return self._admission.validate_items(
            [(line.item, line.quantity.value) for line in cart.lines]
        )
