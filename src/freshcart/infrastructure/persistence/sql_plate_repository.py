"""SQL implementation of PlateRepository."""

from __future__ import annotations

from sqlalchemy import select, update

from freshcart.domain.model.plate import Plate, RecipeEdge
from freshcart.domain.repository.plate_repository import PlateRepository
from freshcart.infrastructure.persistence.database import Database
from freshcart.infrastructure.persistence.mapping import from_minor, to_minor
from freshcart.infrastructure.persistence.tables import PlateIngredientRow, PlateRow


class SqlPlateRepository(PlateRepository):

    def __init__(self, db: Database) -> None:
        self._db = db

    def get_by_id(self, plate_id: str) -> Plate | None:
        with self._db.transaction() as session:
            row = session.get(PlateRow, plate_id)
            return self._to_domain(row) if row is not None else None

    def list_all(self) -> list[Plate]:
        with self._db.transaction() as session:
            rows = session.scalars(select(PlateRow).order_by(PlateRow.id))
            return [self._to_domain(row) for row in rows]

    def list_using(self, ingredient_ids: set[str]) -> list[Plate]:
        if not ingredient_ids:
            return []
        with self._db.transaction() as session:
            using = select(PlateIngredientRow.plate_id).where(
                PlateIngredientRow.ingredient_id.in_(ingredient_ids)
            )
            rows = session.scalars(
                select(PlateRow).where(PlateRow.id.in_(using)).order_by(PlateRow.id)
            )
            return [self._to_domain(row) for row in rows]

    def save(self, plate: Plate) -> None:
        with self._db.transaction() as session:
            row = session.get(PlateRow, plate.id)
            if row is None:
                row = PlateRow(id=plate.id)
                session.add(row)
            row.name = plate.name
            row.price_minor = to_minor(plate.price)
            row.currency = plate.price.currency
            row.admin_disabled = plate.admin_disabled
            row.computed_available = plate.computed_available
            self._sync_edges(row, plate.recipe)

    def set_computed_available(self, plate_id: str, available: bool) -> None:
        with self._db.transaction() as session:
            session.execute(
                update(PlateRow)
                .where(PlateRow.id == plate_id)
                .values(computed_available=available)
            )

    @staticmethod
    def _sync_edges(row: PlateRow, recipe: list[RecipeEdge]) -> None:
        """Update edges in place; replacing them would re-insert existing keys."""
        wanted = {edge.ingredient_id: edge for edge in recipe}
        for existing in list(row.edges):
            if existing.ingredient_id not in wanted:
                row.edges.remove(existing)
        current = {existing.ingredient_id: existing for existing in row.edges}
        for ingredient_id, edge in wanted.items():
            target = current.get(ingredient_id)
            if target is None:
                target = PlateIngredientRow(plate_id=row.id, ingredient_id=ingredient_id)
                row.edges.append(target)
            target.quantity = edge.quantity
            target.required = edge.required

    @staticmethod
    def _to_domain(row: PlateRow) -> Plate:
        return Plate(
            id=row.id,
            name=row.name,
            price=from_minor(row.price_minor, row.currency),
            recipe=[
                RecipeEdge(edge.ingredient_id, edge.quantity, edge.required)
                for edge in row.edges
            ],
            admin_disabled=row.admin_disabled,
            computed_available=row.computed_available,
        )
