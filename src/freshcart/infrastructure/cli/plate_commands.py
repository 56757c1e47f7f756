"""CLI commands for the Plate aggregate."""

from __future__ import annotations

import click

from freshcart.application.catalog import AddPlateHandler
from freshcart.application.set_plate_enabled import SetPlateEnabledHandler
from freshcart.domain.exceptions import DomainException
from freshcart.domain.model.plate import RecipeEdge
from freshcart.infrastructure.bootstrap import (
    availability_propagator,
    ingredient_repository,
    plate_repository,
)


def _parse_recipe(raw: str) -> list[RecipeEdge]:
    """Parse 'basil:1,pasta:2,parsley:1?' into recipe edges.

    A trailing '?' marks a garnish (non-required) ingredient.
    """
    edges: list[RecipeEdge] = []
    for pair in raw.split(","):
        pair = pair.strip()
        if ":" not in pair:
            raise click.BadParameter(
                f"Invalid recipe entry '{pair}'. Expected 'ingredient:quantity'."
            )
        ingredient_id, qty_str = pair.rsplit(":", 1)
        required = not qty_str.endswith("?")
        try:
            qty = int(qty_str.rstrip("?"))
        except ValueError:
            raise click.BadParameter(
                f"Invalid quantity '{qty_str}' for ingredient '{ingredient_id}'."
            )
        edges.append(RecipeEdge(ingredient_id.strip(), qty, required))
    return edges


@click.command("add")
@click.option("--id", "plate_id", required=True, help="Plate id (slug).")
@click.option("--name", required=True, help="Plate name.")
@click.option("--price", required=True, help="Price (e.g. 12.00).")
@click.option("--recipe", required=True, help="Ingredients as 'id:qty,id:qty?'.")
def plate_add(plate_id: str, name: str, price: str, recipe: str) -> None:
    """Add a plate with its recipe."""
    handler = AddPlateHandler(
        plate_repo=plate_repository(),
        ingredient_repo=ingredient_repository(),
        propagator=availability_propagator(),
    )

    try:
        plate = handler.handle(plate_id, name, price, _parse_recipe(recipe))
    except DomainException as exc:
        raise click.ClickException(str(exc))

    state = "available" if plate.available else "unavailable"
    click.echo(f"Plate '{plate.id}' '{plate.name}' added at {plate.price} ({state})")


def _switch(plate_id: str, enabled: bool) -> None:
    handler = SetPlateEnabledHandler(plate_repo=plate_repository())

    try:
        dto = handler.handle(plate_id, enabled)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Plate '{dto.id}' {'enabled' if enabled else 'disabled'}")


@click.command("enable")
@click.option("--id", "plate_id", required=True, help="Plate id.")
def plate_enable(plate_id: str) -> None:
    """Lift the administrative switch on a plate."""
    _switch(plate_id, True)


@click.command("disable")
@click.option("--id", "plate_id", required=True, help="Plate id.")
def plate_disable(plate_id: str) -> None:
    """Take a plate off sale regardless of stock."""
    _switch(plate_id, False)
