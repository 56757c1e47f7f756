"""SQL implementation of OrderRepository.

Queryable fields get their own columns; the frozen line snapshot, the
stock lines and the transition history are stored as one JSON document.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import select

from freshcart.domain.model.cart import item_from_raw, item_to_raw
from freshcart.domain.model.order import (
    Order,
    OrderLine,
    OrderStatus,
    PaymentStatus,
    TransitionRecord,
)
from freshcart.domain.model.stock import StockLine
from freshcart.domain.model.value_objects import Money
from freshcart.domain.repository.order_repository import OrderRepository
from freshcart.infrastructure.persistence.database import Database
from freshcart.infrastructure.persistence.mapping import to_minor
from freshcart.infrastructure.persistence.tables import OrderRow


class SqlOrderRepository(OrderRepository):

    def __init__(self, db: Database) -> None:
        self._db = db

    def get_by_id(self, order_id: int) -> Order | None:
        with self._db.transaction() as session:
            row = session.get(OrderRow, order_id)
            return self._to_domain(row) if row is not None else None

    def get_by_charge_id(self, charge_id: str) -> Order | None:
        with self._db.transaction() as session:
            row = session.scalar(select(OrderRow).where(OrderRow.charge_id == charge_id))
            return self._to_domain(row) if row is not None else None

    def save(self, order: Order) -> None:
        with self._db.transaction() as session:
            row = session.get(OrderRow, order.id) if order.id is not None else None
            if row is None:
                row = OrderRow(created_at=order.created_at)
                session.add(row)
            row.customer_id = order.customer_id
            row.status = order.status.value
            row.payment_status = order.payment_status.value
            row.charge_id = order.charge_id
            row.refund_id = order.refund_id
            row.total_minor = to_minor(order.total)
            row.currency = order.total.currency
            row.failure_reason = order.failure_reason
            row.snapshot = json.dumps(self._snapshot(order))
            session.flush()
            order.id = row.id

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _snapshot(order: Order) -> dict:
        return {
            "lines": [
                {
                    "item": item_to_raw(line.item),
                    "name": line.name,
                    "quantity": line.quantity,
                    "unit_price": str(line.unit_price.amount),
                    "currency": line.unit_price.currency,
                    "unit_weight_kg": str(line.unit_weight_kg),
                }
                for line in order.lines
            ],
            "requirements": [line.to_raw() for line in order.requirements],
            "reserved": [line.to_raw() for line in order.reserved],
            "omitted": [line.to_raw() for line in order.omitted],
            "history": [
                {
                    "status": record.status.value,
                    "payment_status": record.payment_status.value,
                    "reason": record.reason,
                    "at": record.at.isoformat(),
                }
                for record in order.history
            ],
        }

    @staticmethod
    def _to_domain(row: OrderRow) -> Order:
        raw = json.loads(row.snapshot)
        created_at = row.created_at
        if created_at.tzinfo is None:
            # SQLite drops the offset; everything is written in UTC
            created_at = created_at.replace(tzinfo=timezone.utc)
        return Order(
            id=row.id,
            customer_id=row.customer_id,
            lines=[
                OrderLine(
                    item=item_from_raw(line["item"]),
                    name=line["name"],
                    quantity=line["quantity"],
                    unit_price=Money(Decimal(line["unit_price"]), line.get("currency", "USD")),
                    unit_weight_kg=Decimal(line["unit_weight_kg"]),
                )
                for line in raw["lines"]
            ],
            requirements=[StockLine.from_raw(line) for line in raw["requirements"]],
            status=OrderStatus(row.status),
            payment_status=PaymentStatus(row.payment_status),
            charge_id=row.charge_id,
            refund_id=row.refund_id,
            reserved=[StockLine.from_raw(line) for line in raw["reserved"]],
            omitted=[StockLine.from_raw(line) for line in raw["omitted"]],
            failure_reason=row.failure_reason,
            history=[
                TransitionRecord(
                    status=OrderStatus(record["status"]),
                    payment_status=PaymentStatus(record["payment_status"]),
                    reason=record["reason"],
                    at=datetime.fromisoformat(record["at"]),
                )
                for record in raw["history"]
            ],
            created_at=created_at,
        )
