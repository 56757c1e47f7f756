"""Domain service: Quota Tracker.

Admission control on the weight axis, independent of stock. Usage is
changed only through the repository's atomic conditional update so two
concurrent cart mutations cannot jointly exceed the plan limit.
"""

from __future__ import annotations

from decimal import Decimal

import structlog

from freshcart.domain.exceptions import (
    CategoryNotAllowedError,
    QuotaExceededError,
    SubscriptionInactiveError,
)
from freshcart.domain.model.subscription import Plan, Subscription
from freshcart.domain.repository.subscription_repository import SubscriptionRepository

logger = structlog.get_logger(__name__)


class QuotaTracker:

    def __init__(self, subscription_repo: SubscriptionRepository) -> None:
        self._subscription_repo = subscription_repo

    def subscription(self, subscriber_id: str) -> Subscription:
        """Return the active subscription or raise SubscriptionInactiveError."""
        sub = self._subscription_repo.get(subscriber_id)
        if sub is None or not sub.is_active:
            raise SubscriptionInactiveError(
                f"No active subscription for '{subscriber_id}'"
            )
        return sub

    def remaining(self, subscriber_id: str) -> Decimal:
        return self.subscription(subscriber_id).remaining_kg

    def can_add(self, subscriber_id: str, weight_kg: Decimal) -> bool:
        return self.subscription(subscriber_id).can_add(weight_kg)

    def check_category(self, subscriber_id: str, category: str) -> None:
        sub = self.subscription(subscriber_id)
        if not sub.allows_category(category):
            raise CategoryNotAllowedError(
                f"Your {sub.plan.value} plan does not allow products "
                f"in category {category}",
                details={"category": category, "plan": sub.plan.value},
            )

    def apply(self, subscriber_id: str, delta_kg: Decimal) -> None:
        """Adjust usage by ``delta_kg``; rejects anything past the limit."""
        if delta_kg == 0:
            return
        sub = self.subscription(subscriber_id)
        if not self._subscription_repo.adjust_usage(subscriber_id, delta_kg):
            raise QuotaExceededError(
                f"Adding {delta_kg} kg would exceed your limit of "
                f"{sub.limit_kg} kg. You have {sub.remaining_kg} kg left.",
                details={
                    "weight_to_add": str(delta_kg),
                    "remaining_kg": str(sub.remaining_kg),
                    "limit_kg": str(sub.limit_kg),
                },
            )
        logger.info("Quota usage adjusted", subscriber_id=subscriber_id, delta_kg=str(delta_kg))

    def release(self, subscriber_id: str, weight_kg: Decimal) -> None:
        """Give usage back. Missing or inactive subscriptions are ignored."""
        if weight_kg <= 0:
            return
        if self._subscription_repo.get(subscriber_id) is None:
            return
        self._subscription_repo.adjust_usage(subscriber_id, -weight_kg)
        logger.info("Quota usage released", subscriber_id=subscriber_id, weight_kg=str(weight_kg))

    def change_plan(self, subscriber_id: str, plan: Plan) -> str | None:
        """Administrative plan change; clamps usage to the new limit.

        Returns a warning when the subscriber had already used part of the
        previous allowance.
        """
        sub = self._subscription_repo.get(subscriber_id)
        if sub is None:
            raise SubscriptionInactiveError(f"No subscription for '{subscriber_id}'")
        previous_used = sub.used_kg
        sub.change_plan(plan)
        self._subscription_repo.change_plan(subscriber_id, plan, sub.limit_kg)
        sub = self._subscription_repo.get(subscriber_id) or sub
        logger.info(
            "Subscription plan changed",
            subscriber_id=subscriber_id,
            plan=plan.value,
            limit_kg=str(sub.limit_kg),
            used_kg=str(sub.used_kg),
        )
        if previous_used > 0:
            return (
                f"You have already used {previous_used} kg of your current plan. "
                f"The new limit is {sub.limit_kg} kg."
            )
        return None
