"""CLI commands for subscriptions."""

from __future__ import annotations

import click

from freshcart.application.change_plan import (
    ChangePlanHandler,
    StartSubscriptionHandler,
    to_subscription_dto,
)
from freshcart.application.dto import SubscriptionDTO
from freshcart.domain.exceptions import DomainException
from freshcart.infrastructure.bootstrap import quota_tracker, subscription_repository

_PLANS = click.Choice(["BASIC", "STANDARD", "PREMIUM"], case_sensitive=False)


def _display(dto: SubscriptionDTO) -> None:
    click.echo(f"Subscription {dto.subscriber_id}: {dto.plan}")
    click.echo(f"  Used {dto.used_kg} of {dto.limit_kg} kg ({dto.remaining_kg} kg remaining)")
    click.echo(f"  Renews {dto.renewal_date}")
    if dto.warning:
        click.echo(f"Warning: {dto.warning}")


@click.command("start")
@click.option("--subscriber", required=True, help="Subscriber id.")
@click.option("--plan", required=True, type=_PLANS, help="Plan.")
def subscription_start(subscriber: str, plan: str) -> None:
    """Start a subscription."""
    handler = StartSubscriptionHandler(subscription_repo=subscription_repository())

    try:
        dto = handler.handle(subscriber, plan)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _display(dto)


@click.command("change-plan")
@click.option("--subscriber", required=True, help="Subscriber id.")
@click.option("--plan", required=True, type=_PLANS, help="New plan.")
def subscription_change_plan(subscriber: str, plan: str) -> None:
    """Change a subscriber's plan (usage is clamped to the new limit)."""
    handler = ChangePlanHandler(quota=quota_tracker())

    try:
        dto = handler.handle(subscriber, plan)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _display(dto)


@click.command("show")
@click.option("--subscriber", required=True, help="Subscriber id.")
def subscription_show(subscriber: str) -> None:
    """Show a subscriber's quota usage."""
    try:
        sub = quota_tracker().subscription(subscriber)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _display(to_subscription_dto(sub))
