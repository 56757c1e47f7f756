"""Application service: subscription plan use cases (administrative)."""

from __future__ import annotations

from datetime import date, timedelta

import structlog

from freshcart.application.dto import SubscriptionDTO
from freshcart.domain.exceptions import ValidationError
from freshcart.domain.model.subscription import Subscription, parse_plan
from freshcart.domain.repository.subscription_repository import SubscriptionRepository
from freshcart.domain.service.quota_tracker import QuotaTracker

logger = structlog.get_logger(__name__)

RENEWAL_PERIOD = timedelta(days=30)


class ChangePlanHandler:

    def __init__(self, quota: QuotaTracker) -> None:
        self._quota = quota

    def handle(self, subscriber_id: str, plan: str) -> SubscriptionDTO:
        warning = self._quota.change_plan(subscriber_id, parse_plan(plan))
        return to_subscription_dto(self._quota.subscription(subscriber_id), warning)


class StartSubscriptionHandler:
    """Open a subscription with zero usage, renewing in thirty days."""

    def __init__(self, subscription_repo: SubscriptionRepository) -> None:
        self._subscription_repo = subscription_repo

    def handle(self, subscriber_id: str, plan: str, today: date | None = None) -> SubscriptionDTO:
        existing = self._subscription_repo.get(subscriber_id)
        if existing is not None and existing.is_active:
            raise ValidationError(f"'{subscriber_id}' already has an active subscription")

        start = today or date.today()
        subscription = Subscription.start(subscriber_id, parse_plan(plan), start + RENEWAL_PERIOD)
        self._subscription_repo.save(subscription)
        logger.info(
            "Subscription started",
            subscriber_id=subscriber_id,
            plan=subscription.plan.value,
        )
        return to_subscription_dto(subscription)


def to_subscription_dto(sub: Subscription, warning: str | None = None) -> SubscriptionDTO:
    return SubscriptionDTO(
        subscriber_id=sub.subscriber_id,
        plan=sub.plan.value,
        limit_kg=str(sub.limit_kg),
        used_kg=str(sub.used_kg),
        remaining_kg=str(sub.remaining_kg),
        renewal_date=sub.renewal_date.isoformat(),
        warning=warning,
    )
