"""SQL implementation of IngredientRepository."""

from __future__ import annotations

from sqlalchemy import select

from freshcart.domain.model.ingredient import Ingredient
from freshcart.domain.repository.ingredient_repository import IngredientRepository
from freshcart.infrastructure.persistence.database import Database
from freshcart.infrastructure.persistence.mapping import from_minor, to_minor
from freshcart.infrastructure.persistence.tables import IngredientRow


class SqlIngredientRepository(IngredientRepository):

    def __init__(self, db: Database) -> None:
        self._db = db

    def get_by_id(self, ingredient_id: str) -> Ingredient | None:
        with self._db.transaction() as session:
            row = session.get(IngredientRow, ingredient_id)
            return self._to_domain(row) if row is not None else None

    def get_many(self, ingredient_ids: set[str]) -> dict[str, Ingredient]:
        if not ingredient_ids:
            return {}
        with self._db.transaction() as session:
            rows = session.scalars(
                select(IngredientRow).where(IngredientRow.id.in_(ingredient_ids))
            )
            return {row.id: self._to_domain(row) for row in rows}

    def list_all(self) -> list[Ingredient]:
        with self._db.transaction() as session:
            rows = session.scalars(select(IngredientRow).order_by(IngredientRow.id))
            return [self._to_domain(row) for row in rows]

    def save(self, ingredient: Ingredient) -> None:
        with self._db.transaction() as session:
            row = session.get(IngredientRow, ingredient.id)
            if row is None:
                row = IngredientRow(id=ingredient.id)
                session.add(row)
            row.name = ingredient.name
            row.stock = ingredient.stock
            row.price_minor = to_minor(ingredient.price)
            row.currency = ingredient.price.currency
            row.available = ingredient.available

    @staticmethod
    def _to_domain(row: IngredientRow) -> Ingredient:
        return Ingredient(
            id=row.id,
            name=row.name,
            stock=row.stock,
            price=from_minor(row.price_minor, row.currency),
            available=row.available,
        )
