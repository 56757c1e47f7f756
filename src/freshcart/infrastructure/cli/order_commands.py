"""CLI commands for the Order aggregate."""

from __future__ import annotations

import click

from freshcart.application.cancel_order import CancelOrderHandler
from freshcart.application.checkout import CheckoutHandler
from freshcart.application.dto import OrderDTO, OrderResult
from freshcart.application.show_order import ShowOrderHandler
from freshcart.domain.exceptions import DomainException, StaleCartError
from freshcart.infrastructure.bootstrap import (
    cart_admission,
    cart_repository,
    order_repository,
    payment_gateway,
    payment_reconciler,
    quota_tracker,
    stock_ledger,
)
from freshcart.infrastructure.config import get_settings


def display_result(result: OrderResult) -> None:
    """Shared one-line summary after a payment or cancellation."""
    prefix = "Already finalized: " if result.already_finalized else ""
    click.echo(
        f"{prefix}Order #{result.order_id}  "
        f"(status={result.status}, payment={result.payment_status}, total={result.total})"
    )
    if result.refund_id:
        click.echo(f"Refund: {result.refund_id}")
    if result.failure_reason:
        click.echo(f"Reason: {result.failure_reason}")


def _display_order(dto: OrderDTO) -> None:
    click.echo(f"Order #{dto.id}  (status={dto.status}, payment={dto.payment_status})")
    click.echo(f"Customer: {dto.customer_id}")
    click.echo(f"Created:  {dto.created_at}")
    if dto.charge_id:
        click.echo(f"Charge:   {dto.charge_id}")
    if dto.refund_id:
        click.echo(f"Refund:   {dto.refund_id}")
    if dto.failure_reason:
        click.echo(f"Reason:   {dto.failure_reason}")
    click.echo()
    click.echo(f"  {'Item':<30} {'Qty':>5} {'Price':>10} {'Total':>10}")
    click.echo(f"  {'-'*58}")
    for item in dto.items:
        click.echo(
            f"  {item.name:<30} {item.quantity:>5} {item.unit_price:>10} {item.line_total:>10}"
        )
    click.echo(f"  {'-'*58}")
    click.echo(f"  {'Order Total':<35} {dto.total:>22}")

    if dto.omitted:
        click.echo()
        click.echo("Omitted garnish: " + ", ".join(dto.omitted))
    click.echo()
    click.echo("History:")
    for entry in dto.history:
        click.echo(f"  {entry}")


@click.command("checkout")
@click.option("--owner", required=True, help="Customer / subscriber id.")
def order_checkout(owner: str) -> None:
    """Turn the cart into an order awaiting payment."""
    handler = CheckoutHandler(
        cart_repo=cart_repository(),
        order_repo=order_repository(),
        admission=cart_admission(),
        ledger=stock_ledger(),
        quota=quota_tracker(),
        gateway=payment_gateway(),
        timeout=get_settings().payment_timeout_seconds,
    )

    try:
        result = handler.handle(owner)
    except StaleCartError as exc:
        click.echo("Cart is no longer valid:", err=True)
        for issue in exc.issues:
            click.echo(f"  - {issue}", err=True)
        raise click.ClickException("Update the cart and try again.")
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order #{result.order_id} awaiting payment  (total={result.total})")
    click.echo(f"Charge:        {result.charge_id}")
    click.echo(f"Client secret: {result.client_secret}")


@click.command("show")
@click.option("--id", "order_id", required=True, type=int, help="Order ID to display.")
def order_show(order_id: int) -> None:
    """Show details of an existing order."""
    handler = ShowOrderHandler(order_repo=order_repository())

    try:
        dto = handler.handle(order_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _display_order(dto)


@click.command("cancel")
@click.option("--id", "order_id", required=True, type=int, help="Order ID to cancel.")
@click.option("--reason", default="Cancelled by customer", show_default=True)
def order_cancel(order_id: int, reason: str) -> None:
    """Cancel an order (refunds and restocks if already paid)."""
    handler = CancelOrderHandler(
        order_repo=order_repository(),
        reconciler=payment_reconciler(),
    )

    try:
        result = handler.handle(order_id, reason)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    display_result(result)
