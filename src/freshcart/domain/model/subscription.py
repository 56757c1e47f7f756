"""Subscription aggregate: a subscriber's plan and consumed weight quota."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum

from freshcart.domain.exceptions import ValidationError


class Plan(Enum):
    BASIC = "BASIC"
    STANDARD = "STANDARD"
    PREMIUM = "PREMIUM"


@dataclass(frozen=True)
class PlanPolicy:
    limit_kg: Decimal
    categories: frozenset[str]


_BASIC_CATEGORIES = frozenset({"FRUITS", "VEGETABLES"})
_STANDARD_CATEGORIES = _BASIC_CATEGORIES | {
    "LEGUMES", "HERBS", "SNACKS", "COFFEE", "CHOCOLATE",
}
_PREMIUM_CATEGORIES = _STANDARD_CATEGORIES | {"PROTEINS"}

PLAN_POLICIES: dict[Plan, PlanPolicy] = {
    Plan.BASIC: PlanPolicy(Decimal("5.000"), _BASIC_CATEGORIES),
    Plan.STANDARD: PlanPolicy(Decimal("8.000"), _STANDARD_CATEGORIES),
    Plan.PREMIUM: PlanPolicy(Decimal("10.000"), _PREMIUM_CATEGORIES),
}


def parse_plan(raw: str) -> Plan:
    try:
        return Plan(raw.strip().upper())
    except ValueError:
        raise ValidationError(
            f"Invalid plan '{raw}'. Must be BASIC, STANDARD or PREMIUM"
        )


@dataclass
class Subscription:
    """Aggregate root for subscription usage.

    Invariants:
    - ``0 <= used_kg <= limit_kg`` after every committed mutation
    """

    subscriber_id: str
    plan: Plan
    limit_kg: Decimal
    used_kg: Decimal
    renewal_date: date
    is_active: bool = True

    @property
    def remaining_kg(self) -> Decimal:
        return max(Decimal("0"), self.limit_kg - self.used_kg)

    def allows_category(self, category: str) -> bool:
        return category.upper() in PLAN_POLICIES[self.plan].categories

    def can_add(self, weight_kg: Decimal) -> bool:
        return weight_kg <= self.remaining_kg

    def apply(self, delta_kg: Decimal) -> None:
        """Adjust usage in memory, enforcing the limit.

        Persistent adjustments go through the repository's conditional
        update; this method mirrors the same rule for in-memory copies.
        """
        new_used = self.used_kg + delta_kg
        if new_used > self.limit_kg:
            raise ValidationError(
                f"Usage {new_used} kg would exceed limit {self.limit_kg} kg"
            )
        self.used_kg = max(Decimal("0"), new_used)

    def change_plan(self, plan: Plan) -> None:
        """Administrative plan change; usage is clamped to the new limit."""
        self.plan = plan
        self.limit_kg = PLAN_POLICIES[plan].limit_kg
        self.used_kg = min(self.used_kg, self.limit_kg)

    @staticmethod
    def start(subscriber_id: str, plan: Plan, renewal_date: date) -> Subscription:
        return Subscription(
            subscriber_id=subscriber_id,
            plan=plan,
            limit_kg=PLAN_POLICIES[plan].limit_kg,
            used_kg=Decimal("0.000"),
            renewal_date=renewal_date,
        )
