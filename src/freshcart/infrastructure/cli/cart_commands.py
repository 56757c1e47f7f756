"""CLI commands for the Cart aggregate."""

from __future__ import annotations

import click

from freshcart.application.add_to_cart import AddToCartHandler
from freshcart.application.clear_cart import ClearCartHandler
from freshcart.application.dto import CartView
from freshcart.application.remove_cart_item import RemoveCartItemHandler
from freshcart.application.show_cart import ShowCartHandler
from freshcart.application.update_cart_item import UpdateCartItemQuantityHandler
from freshcart.application.validate_cart import ValidateCartAvailabilityHandler
from freshcart.domain.exceptions import DomainException
from freshcart.domain.model.cart import CartItem, CustomItem, PlateItem, ProductItem
from freshcart.infrastructure.bootstrap import (
    availability_propagator,
    cart_admission,
    cart_repository,
    quota_tracker,
)


def _parse_item(
    plate_id: str | None,
    extras: tuple[str, ...],
    custom: str | None,
    product_id: str | None,
) -> CartItem:
    """Build exactly one cart item from the mutually exclusive options."""
    given = [option for option in (plate_id, custom, product_id) if option]
    if len(given) != 1:
        raise click.BadParameter("Give exactly one of --plate, --custom or --product.")
    if extras and not plate_id:
        raise click.BadParameter("--extra only applies to --plate.")

    if plate_id:
        return PlateItem(plate_id, frozenset(extras))
    if custom:
        ids = frozenset(part.strip() for part in custom.split(",") if part.strip())
        return CustomItem(ids)
    if product_id:
        return ProductItem(product_id)
    raise click.BadParameter("Give exactly one of --plate, --custom or --product.")


def _display_cart(view: CartView) -> None:
    if view.cart_id is None:
        click.echo(f"No cart for {view.owner_id}.")
    else:
        click.echo(f"Cart #{view.cart_id}  ({view.owner_id})")
        click.echo()
        click.echo(f"  {'#':>3} {'Item':<30} {'Qty':>5} {'Price':>10} {'Total':>10}")
        click.echo(f"  {'-'*62}")
        for line in view.items:
            click.echo(
                f"  {line.line_id:>3} {line.name:<30} {line.quantity:>5} "
                f"{line.unit_price:>10} {line.line_total:>10}"
            )
        click.echo(f"  {'-'*62}")
        click.echo(f"  {'Cart Total':<39} {view.total:>22}")

    if view.limit_kg is not None:
        click.echo(
            f"Quota: {view.used_kg} / {view.limit_kg} kg used, "
            f"{view.remaining_kg} kg remaining"
        )


@click.command("add")
@click.option("--owner", required=True, help="Customer / subscriber id.")
@click.option("--plate", "plate_id", default=None, help="Plate id.")
@click.option("--extra", "extras", multiple=True, help="Extra ingredient id for a plate.")
@click.option("--custom", default=None, help="Custom plate as 'ingredient,ingredient'.")
@click.option("--product", "product_id", default=None, help="Product id.")
@click.option("--quantity", default=1, show_default=True, type=int, help="Quantity to add.")
def cart_add(
    owner: str,
    plate_id: str | None,
    extras: tuple[str, ...],
    custom: str | None,
    product_id: str | None,
    quantity: int,
) -> None:
    """Add an item to the cart (merges with an identical line)."""
    handler = AddToCartHandler(
        cart_repo=cart_repository(),
        admission=cart_admission(),
        quota=quota_tracker(),
    )

    try:
        item = _parse_item(plate_id, extras, custom, product_id)
        view = handler.handle(owner, item, quantity)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _display_cart(view)


@click.command("update")
@click.option("--owner", required=True, help="Customer / subscriber id.")
@click.option("--line", "line_id", required=True, type=int, help="Cart line number.")
@click.option("--quantity", required=True, type=int, help="New quantity (0 removes).")
def cart_update(owner: str, line_id: int, quantity: int) -> None:
    """Change the quantity of a cart line."""
    handler = UpdateCartItemQuantityHandler(
        cart_repo=cart_repository(),
        admission=cart_admission(),
        quota=quota_tracker(),
    )

    try:
        view = handler.handle(owner, line_id, quantity)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _display_cart(view)


@click.command("remove")
@click.option("--owner", required=True, help="Customer / subscriber id.")
@click.option("--line", "line_id", required=True, type=int, help="Cart line number.")
def cart_remove(owner: str, line_id: int) -> None:
    """Remove a line from the cart."""
    handler = RemoveCartItemHandler(cart_repo=cart_repository(), quota=quota_tracker())

    try:
        view = handler.handle(owner, line_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _display_cart(view)


@click.command("clear")
@click.option("--owner", required=True, help="Customer / subscriber id.")
def cart_clear(owner: str) -> None:
    """Empty and delete the cart."""
    handler = ClearCartHandler(cart_repo=cart_repository(), quota=quota_tracker())
    view = handler.handle(owner)
    _display_cart(view)


@click.command("show")
@click.option("--owner", required=True, help="Customer / subscriber id.")
def cart_show(owner: str) -> None:
    """Show the cart with quota usage."""
    handler = ShowCartHandler(
        cart_repo=cart_repository(),
        quota=quota_tracker(),
        propagator=availability_propagator(),
    )
    _display_cart(handler.handle(owner))


@click.command("validate")
@click.option("--owner", required=True, help="Customer / subscriber id.")
def cart_validate(owner: str) -> None:
    """Check the cart against current stock."""
    handler = ValidateCartAvailabilityHandler(
        cart_repo=cart_repository(),
        admission=cart_admission(),
    )
    report = handler.handle_cart(owner)

    if report.valid:
        click.echo("Cart is valid.")
        return
    click.echo("Cart has problems:")
    for issue in report.issues:
        click.echo(f"  - {issue}")
    click.get_current_context().exit(1)
