import click

from freshcart.infrastructure.cli.cart_commands import (
    cart_add,
    cart_clear,
    cart_remove,
    cart_show,
    cart_update,
    cart_validate,
)
from freshcart.infrastructure.cli.order_commands import (
    order_cancel,
    order_checkout,
    order_show,
)
from freshcart.infrastructure.cli.payment_commands import payment_confirm, payment_webhook
from freshcart.infrastructure.cli.plate_commands import plate_add, plate_disable, plate_enable
from freshcart.infrastructure.cli.stock_commands import (
    stock_add_ingredient,
    stock_add_product,
    stock_price,
    stock_propagate,
    stock_set,
    stock_show,
)
from freshcart.infrastructure.cli.subscription_commands import (
    subscription_change_plan,
    subscription_show,
    subscription_start,
)
from freshcart.infrastructure.config import get_settings
from freshcart.infrastructure.logging import add_context, configure_logging


@click.group()
@click.pass_context
def cli(ctx: click.Context) -> None:
    """FreshCart: cart, stock and order consistency engine"""
    configure_logging(get_settings())
    add_context(command=ctx.invoked_subcommand)


@cli.group()
def cart() -> None:
    """Manage a customer's cart."""


@cli.group()
def order() -> None:
    """Check out and manage orders."""


@cli.group()
def payment() -> None:
    """Reconcile payments."""


@cli.group()
def stock() -> None:
    """Manage ingredient and product stock."""


@cli.group()
def plate() -> None:
    """Manage plates."""


@cli.group()
def subscription() -> None:
    """Manage subscriptions."""


# Register subcommands
cart.add_command(cart_add)
cart.add_command(cart_clear)
cart.add_command(cart_remove)
cart.add_command(cart_show)
cart.add_command(cart_update)
cart.add_command(cart_validate)
order.add_command(order_cancel)
order.add_command(order_checkout)
order.add_command(order_show)
payment.add_command(payment_confirm)
payment.add_command(payment_webhook)
plate.add_command(plate_add)
plate.add_command(plate_disable)
plate.add_command(plate_enable)
stock.add_command(stock_add_ingredient)
stock.add_command(stock_add_product)
stock.add_command(stock_price)
stock.add_command(stock_propagate)
stock.add_command(stock_set)
stock.add_command(stock_show)
subscription.add_command(subscription_change_plan)
subscription.add_command(subscription_show)
subscription.add_command(subscription_start)
