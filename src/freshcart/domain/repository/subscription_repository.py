"""Abstract repository for Subscription aggregate."""

from __future__ import annotations

from abc import ABC, abstractmethod
from decimal import Decimal

from freshcart.domain.model.subscription import Plan, Subscription


class SubscriptionRepository(ABC):

    @abstractmethod
    def get(self, subscriber_id: str) -> Subscription | None:
        """Return the subscriber's subscription, or None."""

    @abstractmethod
    def save(self, subscription: Subscription) -> None:
        """Persist a new or updated subscription (administrative path)."""

    @abstractmethod
    def adjust_usage(self, subscriber_id: str, delta_kg: Decimal) -> bool:
        """Atomically add ``delta_kg`` to usage.

        Returns False, changing nothing, when the result would exceed the
        limit. Negative deltas never take usage below zero.
        """

    @abstractmethod
    def change_plan(self, subscriber_id: str, plan: Plan, limit_kg: Decimal) -> None:
        """Atomically set plan and limit, clamping usage to the new limit."""
