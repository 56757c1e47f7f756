"""In-memory fake repositories for testing.

These implement the same abstract interfaces as the SQL repositories
but keep everything in dicts. Every mutation the real stores perform
atomically is guarded here by one shared lock, so the fakes can stand in
for the database in concurrency tests.
"""

from __future__ import annotations

import copy
import threading
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal

from freshcart.application.payment_reconciler import PaymentReconciler
from freshcart.domain.exceptions import InsufficientStockError, PersistenceUnavailableError
from freshcart.domain.model.cart import Cart
from freshcart.domain.model.ingredient import Ingredient
from freshcart.domain.model.order import Order
from freshcart.domain.model.plate import Plate
from freshcart.domain.model.product import Product
from freshcart.domain.model.stock import StockKind, StockLine
from freshcart.domain.model.subscription import Plan, Subscription
from freshcart.domain.repository.cart_repository import CartRepository
from freshcart.domain.repository.ingredient_repository import IngredientRepository
from freshcart.domain.repository.order_repository import OrderRepository
from freshcart.domain.repository.payment_claim_repository import PaymentClaimRepository
from freshcart.domain.repository.plate_repository import PlateRepository
from freshcart.domain.repository.product_repository import ProductRepository
from freshcart.domain.repository.stock_repository import StockRepository
from freshcart.domain.repository.subscription_repository import SubscriptionRepository
from freshcart.domain.service.availability_propagator import AvailabilityPropagator
from freshcart.domain.service.cart_admission import CartAdmissionService
from freshcart.domain.service.quota_tracker import QuotaTracker
from freshcart.domain.service.stock_ledger import StockLedger
from freshcart.infrastructure.payment.fake_gateway import FakeGateway


class FakeIngredientRepository(IngredientRepository):

    def __init__(self, ingredients: list[Ingredient] | None = None) -> None:
        self._store: dict[str, Ingredient] = {}
        for i in ingredients or []:
            self._store[i.id] = i

    def get_by_id(self, ingredient_id: str) -> Ingredient | None:
        return self._store.get(ingredient_id)

    def get_many(self, ingredient_ids: set[str]) -> dict[str, Ingredient]:
        return {i: self._store[i] for i in ingredient_ids if i in self._store}

    def list_all(self) -> list[Ingredient]:
        return list(self._store.values())

    def save(self, ingredient: Ingredient) -> None:
        self._store[ingredient.id] = ingredient


class FakeProductRepository(ProductRepository):

    def __init__(self, products: list[Product] | None = None) -> None:
        self._store: dict[str, Product] = {}
        for p in products or []:
            self._store[p.id] = p

    def get_by_id(self, product_id: str) -> Product | None:
        return self._store.get(product_id)

    def list_all(self) -> list[Product]:
        return list(self._store.values())

    def save(self, product: Product) -> None:
        self._store[product.id] = product


class FakePlateRepository(PlateRepository):

    def __init__(self, plates: list[Plate] | None = None) -> None:
        self._store: dict[str, Plate] = {}
        self.writes: list[tuple[str, bool]] = []
        for p in plates or []:
            self._store[p.id] = p

    def get_by_id(self, plate_id: str) -> Plate | None:
        return self._store.get(plate_id)

    def list_all(self) -> list[Plate]:
        return list(self._store.values())

    def list_using(self, ingredient_ids: set[str]) -> list[Plate]:
        return [p for p in self._store.values() if p.ingredient_ids & ingredient_ids]

    def save(self, plate: Plate) -> None:
        self._store[plate.id] = plate

    def set_computed_available(self, plate_id: str, available: bool) -> None:
        self.writes.append((plate_id, available))
        self._store[plate_id].computed_available = available


class FakeStockRepository(StockRepository):
    """Applies batches under a lock against the ingredient/product fakes."""

    def __init__(
        self,
        ingredient_repo: FakeIngredientRepository,
        product_repo: FakeProductRepository,
    ) -> None:
        self._ingredient_repo = ingredient_repo
        self._product_repo = product_repo
        self._lock = threading.Lock()

    def decrement(self, lines: list[StockLine]) -> tuple[list[StockLine], list[StockLine]]:
        with self._lock:
            applied: list[StockLine] = []
            skipped: list[StockLine] = []
            for line in lines:
                target = self._target(line)
                if target is not None and target.can_supply(line.quantity):
                    applied.append(line)
                elif line.required:
                    raise InsufficientStockError(f"Insufficient stock for {line.key}")
                else:
                    skipped.append(line)
            for line in applied:
                self._target(line).stock -= line.quantity
            return applied, skipped

    def increment(self, lines: list[StockLine]) -> None:
        with self._lock:
            for line in lines:
                target = self._target(line)
                if target is not None:
                    target.stock += line.quantity

    def _target(self, line: StockLine):
        if line.key.kind is StockKind.PRODUCT:
            return self._product_repo.get_by_id(line.key.item_id)
        return self._ingredient_repo.get_by_id(line.key.item_id)


class FakeSubscriptionRepository(SubscriptionRepository):

    def __init__(self, subscriptions: list[Subscription] | None = None) -> None:
        self._store: dict[str, Subscription] = {}
        self._lock = threading.Lock()
        for s in subscriptions or []:
            self._store[s.subscriber_id] = s

    def get(self, subscriber_id: str) -> Subscription | None:
        return self._store.get(subscriber_id)

    def save(self, subscription: Subscription) -> None:
        self._store[subscription.subscriber_id] = subscription

    def adjust_usage(self, subscriber_id: str, delta_kg: Decimal) -> bool:
        with self._lock:
            sub = self._store.get(subscriber_id)
            if sub is None or sub.used_kg + delta_kg > sub.limit_kg:
                return False
            sub.used_kg = max(Decimal("0"), sub.used_kg + delta_kg)
            return True

    def change_plan(self, subscriber_id: str, plan: Plan, limit_kg: Decimal) -> None:
        with self._lock:
            sub = self._store[subscriber_id]
            sub.plan = plan
            sub.limit_kg = limit_kg
            sub.used_kg = min(sub.used_kg, limit_kg)


class FakeCartRepository(CartRepository):

    def __init__(self) -> None:
        self._store: dict[str, Cart] = {}
        self._next_id = 1

    def get_by_owner(self, owner_id: str) -> Cart | None:
        return self._store.get(owner_id)

    def save(self, cart: Cart) -> None:
        if cart.id is None:
            cart.id = self._next_id
            self._next_id += 1
        self._store[cart.owner_id] = cart

    def delete(self, cart: Cart) -> None:
        self._store.pop(cart.owner_id, None)


class FakeOrderRepository(OrderRepository):
    """Stores copies, so an order changed in memory but never saved stays unsaved.

    Set ``failing_saves`` to make that many following saves raise.
    """

    def __init__(self) -> None:
        self._store: dict[int, Order] = {}
        self._next_id = 1
        self._lock = threading.Lock()
        self.failing_saves = 0

    def get_by_id(self, order_id: int) -> Order | None:
        order = self._store.get(order_id)
        return copy.deepcopy(order) if order is not None else None

    def get_by_charge_id(self, charge_id: str) -> Order | None:
        for order in self._store.values():
            if order.charge_id == charge_id:
                return copy.deepcopy(order)
        return None

    def save(self, order: Order) -> None:
        with self._lock:
            if self.failing_saves:
                self.failing_saves -= 1
                raise PersistenceUnavailableError("database is locked")
            if order.id is None:
                order.id = self._next_id
                self._next_id += 1
            self._store[order.id] = copy.deepcopy(order)


class FakePaymentClaimRepository(PaymentClaimRepository):

    def __init__(self) -> None:
        self.claims: dict[str, int] = {}
        self._lock = threading.Lock()

    def claim(self, key: str, order_id: int) -> bool:
        with self._lock:
            if key in self.claims:
                return False
            self.claims[key] = order_id
            return True

    def release(self, key: str) -> None:
        with self._lock:
            self.claims.pop(key, None)


# ---------------------------------------------------------------------------
# Wiring
# ---------------------------------------------------------------------------

@dataclass
class World:
    """Every fake repository and the real services built on top of them."""

    ingredients: FakeIngredientRepository
    products: FakeProductRepository
    plates: FakePlateRepository
    subscriptions: FakeSubscriptionRepository
    carts: FakeCartRepository = field(default_factory=FakeCartRepository)
    orders: FakeOrderRepository = field(default_factory=FakeOrderRepository)
    claims: FakePaymentClaimRepository = field(default_factory=FakePaymentClaimRepository)
    gateway: FakeGateway = field(default_factory=FakeGateway)

    def __post_init__(self) -> None:
        self.stock = FakeStockRepository(self.ingredients, self.products)
        self.ledger = StockLedger(self.ingredients, self.products, self.plates, self.stock)
        self.propagator = AvailabilityPropagator(self.plates, self.ingredients)
        self.quota = QuotaTracker(self.subscriptions)
        self.admission = CartAdmissionService(
            self.ledger, self.plates, self.products, self.ingredients
        )
        self.reconciler = PaymentReconciler(
            order_repo=self.orders,
            claim_repo=self.claims,
            ledger=self.ledger,
            admission=self.admission,
            propagator=self.propagator,
            quota=self.quota,
            gateway=self.gateway,
            timeout=1.0,
        )


def make_world(
    ingredients: list[Ingredient] | None = None,
    plates: list[Plate] | None = None,
    products: list[Product] | None = None,
    subscriptions: list[Subscription] | None = None,
) -> World:
    return World(
        ingredients=FakeIngredientRepository(ingredients),
        products=FakeProductRepository(products),
        plates=FakePlateRepository(plates),
        subscriptions=FakeSubscriptionRepository(subscriptions),
    )


def subscription(subscriber_id: str, plan: Plan, used_kg: str = "0") -> Subscription:
    sub = Subscription.start(subscriber_id, plan, date(2030, 1, 1))
    sub.used_kg = Decimal(used_kg)
    return sub
