"""CLI commands for stock management."""

from __future__ import annotations

import click

from freshcart.application.catalog import (
    AddIngredientHandler,
    AddProductHandler,
    UpdateProductPriceHandler,
)
from freshcart.application.set_ingredient_stock import SetIngredientStockHandler
from freshcart.application.show_stock import PropagateAvailabilityHandler, ShowStockHandler
from freshcart.domain.exceptions import DomainException
from freshcart.domain.service.availability_propagator import AvailabilityChange
from freshcart.infrastructure.bootstrap import (
    availability_propagator,
    ingredient_repository,
    plate_repository,
    product_repository,
)


def _display_changes(changes: list[AvailabilityChange]) -> None:
    if not changes:
        click.echo("No plate availability changed.")
        return
    for change in changes:
        state = "available" if change.available else "unavailable"
        click.echo(f"  {change.plate_name} is now {state}")


@click.command("add-ingredient")
@click.option("--id", "ingredient_id", required=True, help="Ingredient id (slug).")
@click.option("--name", required=True, help="Ingredient name.")
@click.option("--stock", required=True, type=int, help="Units in stock.")
@click.option("--price", default="0.00", show_default=True, help="Price as a plate extra.")
def stock_add_ingredient(ingredient_id: str, name: str, stock: int, price: str) -> None:
    """Add an ingredient."""
    handler = AddIngredientHandler(ingredient_repo=ingredient_repository())

    try:
        ingredient = handler.handle(ingredient_id, name, stock, price)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Ingredient '{ingredient.id}' ({ingredient.name}) added with {ingredient.stock} in stock")


@click.command("add-product")
@click.option("--id", "product_id", required=True, help="Product id (slug).")
@click.option("--name", required=True, help="Product name.")
@click.option("--price", required=True, help="Price (e.g. 4.50).")
@click.option("--weight", required=True, help="Weight per unit in kg.")
@click.option("--category", required=True, help="Category, e.g. FRUITS.")
@click.option("--stock", required=True, type=int, help="Units in stock.")
def stock_add_product(
    product_id: str, name: str, price: str, weight: str, category: str, stock: int
) -> None:
    """Add a weighed product."""
    handler = AddProductHandler(product_repo=product_repository())

    try:
        product = handler.handle(product_id, name, price, weight, category, stock)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Product '{product.id}' '{product.name}' added at {product.price}")


@click.command("price")
@click.option("--product", "product_id", required=True, help="Product id.")
@click.option("--price", required=True, help="New price (e.g. 29.99).")
def stock_price(product_id: str, price: str) -> None:
    """Reprice a product."""
    handler = UpdateProductPriceHandler(product_repo=product_repository())

    try:
        product = handler.handle(product_id, price)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Product '{product.id}' price updated to {product.price}")


@click.command("set")
@click.option("--ingredient", "ingredient_id", required=True, help="Ingredient id.")
@click.option("--stock", default=None, type=int, help="New stock level.")
@click.option("--available/--unavailable", default=None, help="Availability switch.")
def stock_set(ingredient_id: str, stock: int | None, available: bool | None) -> None:
    """Set an ingredient's stock or availability and propagate to plates."""
    handler = SetIngredientStockHandler(
        ingredient_repo=ingredient_repository(),
        propagator=availability_propagator(),
    )

    try:
        changes = handler.handle(ingredient_id, stock=stock, available=available)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Ingredient '{ingredient_id}' updated")
    _display_changes(changes)


@click.command("propagate")
def stock_propagate() -> None:
    """Re-derive availability for every plate."""
    handler = PropagateAvailabilityHandler(propagator=availability_propagator())
    _display_changes(handler.handle())


@click.command("show")
def stock_show() -> None:
    """Show current stock levels and plate availability."""
    handler = ShowStockHandler(
        ingredient_repo=ingredient_repository(),
        plate_repo=plate_repository(),
        product_repo=product_repository(),
        propagator=availability_propagator(),
    )
    view = handler.handle()

    if not (view.ingredients or view.plates or view.products):
        click.echo("No catalog records found.")
        return

    if view.ingredients:
        click.echo(f"{'Ingredient':<24} {'Stock':>8} {'Available':>10}")
        click.echo("-" * 44)
        for ingredient in view.ingredients:
            flag = "yes" if ingredient.available else "no"
            click.echo(f"{ingredient.name:<24} {ingredient.stock:>8} {flag:>10}")
        click.echo()
    if view.plates:
        click.echo(f"{'Plate':<24} {'Price':>8} {'Available':>10}")
        click.echo("-" * 44)
        for plate in view.plates:
            flag = "disabled" if plate.admin_disabled else ("yes" if plate.available else "no")
            click.echo(f"{plate.name:<24} {plate.price:>8} {flag:>10}")
        click.echo()
    if view.products:
        click.echo(f"{'Product':<24} {'Category':<12} {'Kg':>7} {'Stock':>8} {'Price':>8}")
        click.echo("-" * 63)
        for product in view.products:
            click.echo(
                f"{product.name:<24} {product.category:<12} {product.weight_kg:>7} "
                f"{product.stock:>8} {product.price:>8}"
            )
