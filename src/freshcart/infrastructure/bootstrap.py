"""Composition root for the CLI.

Builds the SQL repositories, the domain services and the payment gateway
from the current settings. The database and gateway are created once per
process; ``reset()`` drops them after the environment changed.
"""

from __future__ import annotations

from functools import lru_cache

from freshcart.application.payment_reconciler import PaymentReconciler
from freshcart.domain.service.availability_propagator import AvailabilityPropagator
from freshcart.domain.service.cart_admission import CartAdmissionService
from freshcart.domain.service.quota_tracker import QuotaTracker
from freshcart.domain.service.stock_ledger import StockLedger
from freshcart.infrastructure.config import get_settings
from freshcart.infrastructure.payment.fake_gateway import FakeGateway
from freshcart.infrastructure.persistence.database import Database
from freshcart.infrastructure.persistence.sql_cart_repository import SqlCartRepository
from freshcart.infrastructure.persistence.sql_ingredient_repository import (
    SqlIngredientRepository,
)
from freshcart.infrastructure.persistence.sql_order_repository import SqlOrderRepository
from freshcart.infrastructure.persistence.sql_payment_claim_repository import (
    SqlPaymentClaimRepository,
)
from freshcart.infrastructure.persistence.sql_plate_repository import SqlPlateRepository
from freshcart.infrastructure.persistence.sql_product_repository import (
    SqlProductRepository,
)
from freshcart.infrastructure.persistence.sql_stock_repository import SqlStockRepository
from freshcart.infrastructure.persistence.sql_subscription_repository import (
    SqlSubscriptionRepository,
)


@lru_cache
def database() -> Database:
    settings = get_settings()
    db = Database(
        settings.database_url,
        echo=settings.db_echo,
        busy_timeout=settings.sqlite_busy_timeout_seconds,
    )
    db.init_schema()
    return db


@lru_cache
def payment_gateway() -> FakeGateway:
    return FakeGateway()


def reset() -> None:
    """Forget cached settings, database and gateway (after env changes)."""
    if database.cache_info().currsize:
        database().dispose()
    database.cache_clear()
    payment_gateway.cache_clear()
    get_settings.cache_clear()


# --- Repositories ---------------------------------------------------------------

def ingredient_repository() -> SqlIngredientRepository:
    return SqlIngredientRepository(database())


def product_repository() -> SqlProductRepository:
    return SqlProductRepository(database())


def plate_repository() -> SqlPlateRepository:
    return SqlPlateRepository(database())


def subscription_repository() -> SqlSubscriptionRepository:
    return SqlSubscriptionRepository(database())


def cart_repository() -> SqlCartRepository:
    return SqlCartRepository(database())


def order_repository() -> SqlOrderRepository:
    return SqlOrderRepository(database())


# --- Domain services ------------------------------------------------------------

def stock_ledger() -> StockLedger:
    return StockLedger(
        ingredient_repo=ingredient_repository(),
        product_repo=product_repository(),
        plate_repo=plate_repository(),
        stock_repo=SqlStockRepository(database()),
    )


def availability_propagator() -> AvailabilityPropagator:
    return AvailabilityPropagator(plate_repository(), ingredient_repository())


def quota_tracker() -> QuotaTracker:
    return QuotaTracker(subscription_repository())


def cart_admission() -> CartAdmissionService:
    return CartAdmissionService(
        ledger=stock_ledger(),
        plate_repo=plate_repository(),
        product_repo=product_repository(),
        ingredient_repo=ingredient_repository(),
    )


def payment_reconciler() -> PaymentReconciler:
    return PaymentReconciler(
        order_repo=order_repository(),
        claim_repo=SqlPaymentClaimRepository(database()),
        ledger=stock_ledger(),
        admission=cart_admission(),
        propagator=availability_propagator(),
        quota=quota_tracker(),
        gateway=payment_gateway(),
        timeout=get_settings().payment_timeout_seconds,
    )
