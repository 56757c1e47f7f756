"""Application service: Show Order use case (query)."""

from __future__ import annotations

from freshcart.application.dto import OrderDTO, OrderLineDTO, OrderResult
from freshcart.domain.exceptions import EntityNotFoundError, ValidationError
from freshcart.domain.model.order import Order
from freshcart.domain.repository.order_repository import OrderRepository


class ShowOrderHandler:

    def __init__(self, order_repo: OrderRepository) -> None:
        self._order_repo = order_repo

    def handle(self, order_id: int) -> OrderDTO:
        return self._to_dto(load_order(self._order_repo, order_id))

    @staticmethod
    def _to_dto(order: Order) -> OrderDTO:
        return OrderDTO(
            id=saved_id(order),
            customer_id=order.customer_id,
            status=order.status.value,
            payment_status=order.payment_status.value,
            items=[
                OrderLineDTO(
                    type=line.item.kind.value,
                    name=line.name,
                    quantity=line.quantity,
                    unit_price=str(line.unit_price),
                    line_total=str(line.line_total),
                )
                for line in order.lines
            ],
            total=str(order.total),
            charge_id=order.charge_id,
            refund_id=order.refund_id,
            failure_reason=order.failure_reason,
            omitted=[str(line.key) for line in order.omitted],
            history=[
                f"{record.at:%Y-%m-%d %H:%M:%S} {record.status.value}/"
                f"{record.payment_status.value}"
                + (f" ({record.reason})" if record.reason else "")
                for record in order.history
            ],
            created_at=order.created_at.strftime("%Y-%m-%d %H:%M UTC"),
        )


def load_order(order_repo: OrderRepository, order_id: int) -> Order:
    order = order_repo.get_by_id(order_id)
    if order is None:
        raise EntityNotFoundError(f"Order #{order_id} not found")
    return order


def to_order_result(order: Order, already_finalized: bool = False) -> OrderResult:
    return OrderResult(
        order_id=saved_id(order),
        status=order.status.value,
        payment_status=order.payment_status.value,
        total=str(order.total),
        already_finalized=already_finalized,
        refund_id=order.refund_id,
        failure_reason=order.failure_reason,
    )


def saved_id(order: Order) -> int:
    if order.id is None:
        raise ValidationError("Order has not been saved yet")
    return order.id
