"""SQL implementation of ProductRepository."""

from __future__ import annotations

from sqlalchemy import select

from freshcart.domain.model.product import Product
from freshcart.domain.repository.product_repository import ProductRepository
from freshcart.infrastructure.persistence.database import Database
from freshcart.infrastructure.persistence.mapping import (
    from_grams,
    from_minor,
    to_grams,
    to_minor,
)
from freshcart.infrastructure.persistence.tables import ProductRow


class SqlProductRepository(ProductRepository):

    def __init__(self, db: Database) -> None:
        self._db = db

    def get_by_id(self, product_id: str) -> Product | None:
        with self._db.transaction() as session:
            row = session.get(ProductRow, product_id)
            return self._to_domain(row) if row is not None else None

    def list_all(self) -> list[Product]:
        with self._db.transaction() as session:
            rows = session.scalars(select(ProductRow).order_by(ProductRow.id))
            return [self._to_domain(row) for row in rows]

    def save(self, product: Product) -> None:
        with self._db.transaction() as session:
            row = session.get(ProductRow, product.id)
            if row is None:
                row = ProductRow(id=product.id)
                session.add(row)
            row.name = product.name
            row.price_minor = to_minor(product.price)
            row.currency = product.price.currency
            row.weight_g = to_grams(product.weight_kg)
            row.category = product.category
            row.stock = product.stock
            row.available = product.available

    @staticmethod
    def _to_domain(row: ProductRow) -> Product:
        return Product(
            id=row.id,
            name=row.name,
            price=from_minor(row.price_minor, row.currency),
            weight_kg=from_grams(row.weight_g),
            category=row.category,
            stock=row.stock,
            available=row.available,
        )
