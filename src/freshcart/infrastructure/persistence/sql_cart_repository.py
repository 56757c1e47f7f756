"""SQL implementation of CartRepository."""

from __future__ import annotations

from sqlalchemy import select

from freshcart.domain.model.cart import Cart, CartLine
from freshcart.domain.model.value_objects import Quantity
from freshcart.domain.repository.cart_repository import CartRepository
from freshcart.infrastructure.persistence.database import Database
from freshcart.infrastructure.persistence.mapping import (
    dump_item,
    from_grams,
    from_minor,
    load_item,
    to_grams,
    to_minor,
)
from freshcart.infrastructure.persistence.tables import CartLineRow, CartRow


class SqlCartRepository(CartRepository):

    def __init__(self, db: Database) -> None:
        self._db = db

    def get_by_owner(self, owner_id: str) -> Cart | None:
        with self._db.transaction() as session:
            row = session.scalar(select(CartRow).where(CartRow.owner_id == owner_id))
            return self._to_domain(row) if row is not None else None

    def save(self, cart: Cart) -> None:
        with self._db.transaction() as session:
            row = session.get(CartRow, cart.id) if cart.id is not None else None
            if row is None:
                row = CartRow(owner_id=cart.owner_id, currency=cart.currency)
                session.add(row)
                session.flush()
                cart.id = row.id
            self._sync_lines(row, cart.lines)

    def delete(self, cart: Cart) -> None:
        if cart.id is None:
            return
        with self._db.transaction() as session:
            row = session.get(CartRow, cart.id)
            if row is not None:
                session.delete(row)

    @staticmethod
    def _sync_lines(row: CartRow, lines: list[CartLine]) -> None:
        wanted = {line.line_id: line for line in lines}
        for existing in list(row.lines):
            if existing.line_id not in wanted:
                row.lines.remove(existing)
        current = {existing.line_id: existing for existing in row.lines}
        for line_id, line in wanted.items():
            target = current.get(line_id)
            if target is None:
                target = CartLineRow(cart_id=row.id, line_id=line_id)
                row.lines.append(target)
            target.item = dump_item(line.item)
            target.quantity = line.quantity.value
            target.name = line.name
            target.unit_price_minor = to_minor(line.unit_price)
            target.unit_weight_g = to_grams(line.unit_weight_kg)

    @staticmethod
    def _to_domain(row: CartRow) -> Cart:
        return Cart(
            id=row.id,
            owner_id=row.owner_id,
            currency=row.currency,
            lines=[
                CartLine(
                    line_id=line.line_id,
                    item=load_item(line.item),
                    quantity=Quantity(line.quantity),
                    unit_price=from_minor(line.unit_price_minor, row.currency),
                    name=line.name,
                    unit_weight_kg=from_grams(line.unit_weight_g),
                )
                for line in row.lines
            ],
        )
