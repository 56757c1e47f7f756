"""Abstract repository for Cart aggregate."""

from __future__ import annotations

from abc import ABC, abstractmethod

from freshcart.domain.model.cart import Cart


class CartRepository(ABC):

    @abstractmethod
    def get_by_owner(self, owner_id: str) -> Cart | None:
        """Return the owner's cart, or None if they have none."""

    @abstractmethod
    def save(self, cart: Cart) -> None:
        """Persist a new or updated cart with all of its lines."""

    @abstractmethod
    def delete(self, cart: Cart) -> None:
        """Remove the cart and its lines."""
