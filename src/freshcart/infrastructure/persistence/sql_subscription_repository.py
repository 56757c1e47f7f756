"""SQL implementation of SubscriptionRepository.

Usage only ever changes through single conditional UPDATE statements,
so concurrent adjustments cannot jointly push usage past the limit.
"""

from __future__ import annotations

from decimal import Decimal

from sqlalchemy import case, update

from freshcart.domain.model.subscription import Plan, Subscription
from freshcart.domain.repository.subscription_repository import SubscriptionRepository
from freshcart.infrastructure.persistence.database import Database
from freshcart.infrastructure.persistence.mapping import from_grams, to_grams
from freshcart.infrastructure.persistence.tables import SubscriptionRow


class SqlSubscriptionRepository(SubscriptionRepository):

    def __init__(self, db: Database) -> None:
        self._db = db

    def get(self, subscriber_id: str) -> Subscription | None:
        with self._db.transaction() as session:
            row = session.get(SubscriptionRow, subscriber_id)
            if row is None:
                return None
            return Subscription(
                subscriber_id=row.subscriber_id,
                plan=Plan(row.plan),
                limit_kg=from_grams(row.limit_g),
                used_kg=from_grams(row.used_g),
                renewal_date=row.renewal_date,
                is_active=row.is_active,
            )

    def save(self, subscription: Subscription) -> None:
        with self._db.transaction() as session:
            row = session.get(SubscriptionRow, subscription.subscriber_id)
            if row is None:
                row = SubscriptionRow(subscriber_id=subscription.subscriber_id)
                session.add(row)
            row.plan = subscription.plan.value
            row.limit_g = to_grams(subscription.limit_kg)
            row.used_g = to_grams(subscription.used_kg)
            row.renewal_date = subscription.renewal_date
            row.is_active = subscription.is_active

    def adjust_usage(self, subscriber_id: str, delta_kg: Decimal) -> bool:
        delta_g = to_grams(abs(delta_kg))
        if delta_kg < 0:
            delta_g = -delta_g
        new_used = SubscriptionRow.used_g + delta_g
        with self._db.transaction() as session:
            result = session.execute(
                update(SubscriptionRow)
                .where(
                    SubscriptionRow.subscriber_id == subscriber_id,
                    new_used <= SubscriptionRow.limit_g,
                )
                .values(used_g=case((new_used < 0, 0), else_=new_used))
            )
            return result.rowcount == 1

    def change_plan(self, subscriber_id: str, plan: Plan, limit_kg: Decimal) -> None:
        limit_g = to_grams(limit_kg)
        with self._db.transaction() as session:
            session.execute(
                update(SubscriptionRow)
                .where(SubscriptionRow.subscriber_id == subscriber_id)
                .values(
                    plan=plan.value,
                    limit_g=limit_g,
                    used_g=case(
                        (SubscriptionRow.used_g > limit_g, limit_g),
                        else_=SubscriptionRow.used_g,
                    ),
                )
            )
