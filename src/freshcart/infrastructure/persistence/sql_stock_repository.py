"""SQL implementation of StockRepository.

A batch runs in one transaction of conditional updates::

    UPDATE ingredients SET stock = stock - :q
     WHERE id = :id AND available AND stock >= :q

A required line that matches no row raises, rolling back every line
already applied in the batch. An optional line that matches no row is
skipped.
"""

from __future__ import annotations

from sqlalchemy import update

from freshcart.domain.exceptions import InsufficientStockError
from freshcart.domain.model.stock import StockKind, StockLine
from freshcart.domain.repository.stock_repository import StockRepository
from freshcart.infrastructure.persistence.database import Database
from freshcart.infrastructure.persistence.tables import IngredientRow, ProductRow

_TABLES = {
    StockKind.INGREDIENT: IngredientRow,
    StockKind.PRODUCT: ProductRow,
}


class SqlStockRepository(StockRepository):

    def __init__(self, db: Database) -> None:
        self._db = db

    def decrement(self, lines: list[StockLine]) -> tuple[list[StockLine], list[StockLine]]:
        applied: list[StockLine] = []
        skipped: list[StockLine] = []
        with self._db.transaction() as session:
            for line in lines:
                table = _TABLES[line.key.kind]
                result = session.execute(
                    update(table)
                    .where(
                        table.id == line.key.item_id,
                        table.available.is_(True),
                        table.stock >= line.quantity,
                    )
                    .values(stock=table.stock - line.quantity)
                )
                if result.rowcount == 1:
                    applied.append(line)
                elif line.required:
                    row = session.get(table, line.key.item_id)
                    raise InsufficientStockError(
                        self._shortage_message(row, line),
                        details={"item": str(line.key), "required": line.quantity},
                    )
                else:
                    skipped.append(line)
        return applied, skipped

    def increment(self, lines: list[StockLine]) -> None:
        with self._db.transaction() as session:
            for line in lines:
                table = _TABLES[line.key.kind]
                session.execute(
                    update(table)
                    .where(table.id == line.key.item_id)
                    .values(stock=table.stock + line.quantity)
                )

    @staticmethod
    def _shortage_message(row, line: StockLine) -> str:
        if row is None:
            return f"{line.key} no longer exists"
        if not row.available:
            return f"\"{row.name}\" is not available"
        return (
            f"Insufficient stock for \"{row.name}\". "
            f"Required: {line.quantity}, Available: {row.stock}"
        )
