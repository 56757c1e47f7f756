"""CLI commands for payment reconciliation."""

from __future__ import annotations

import click

from freshcart.application.confirm_payment import ConfirmPaymentHandler
from freshcart.application.handle_payment_webhook import (
    EVENT_STATUSES,
    HandlePaymentWebhookHandler,
    PaymentEvent,
)
from freshcart.domain.exceptions import DomainException
from freshcart.domain.gateway.payment_gateway import ChargeStatus
from freshcart.infrastructure.bootstrap import (
    order_repository,
    payment_gateway,
    payment_reconciler,
)
from freshcart.infrastructure.cli.order_commands import display_result

_OUTCOMES = [status.value for status in ChargeStatus]


@click.command("confirm")
@click.option("--order", "order_id", required=True, type=int, help="Order ID.")
@click.option("--charge", "charge_id", required=True, help="Charge ID from checkout.")
@click.option(
    "--simulate",
    type=click.Choice(_OUTCOMES),
    default=ChargeStatus.SUCCEEDED.value,
    show_default=True,
    help="Charge status the fake provider reports.",
)
def payment_confirm(order_id: int, charge_id: str, simulate: str) -> None:
    """Confirm payment for an order and decrement its stock."""
    payment_gateway().set_status(charge_id, ChargeStatus(simulate))
    handler = ConfirmPaymentHandler(
        order_repo=order_repository(),
        reconciler=payment_reconciler(),
    )

    try:
        result = handler.handle(order_id, charge_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    display_result(result)


@click.command("webhook")
@click.option("--type", "event_type", required=True, help=f"One of {sorted(EVENT_STATUSES)}.")
@click.option("--charge", "charge_id", required=True, help="Charge ID.")
@click.option("--order", "order_id", default=None, type=int, help="Order ID from metadata.")
def payment_webhook(event_type: str, charge_id: str, order_id: int | None) -> None:
    """Deliver a (verified) provider event."""
    handler = HandlePaymentWebhookHandler(
        order_repo=order_repository(),
        reconciler=payment_reconciler(),
    )

    try:
        handler.handle(PaymentEvent(type=event_type, charge_id=charge_id, order_id=order_id))
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Event {event_type} for {charge_id} processed.")
