"""CLI commands for the payment pipeline."""

from __future__ import annotations

import click

from storefront.domain.exceptions import DomainException
from storefront.domain.port.payment_gateway import GatewayError
from storefront.infrastructure.bootstrap import (
    initialize_payment_handler,
    verify_payment_handler,
)


@click.command("initialize")
@click.option("--order-id", required=True, type=int, help="Pending order to pay for.")
def payment_initialize(order_id: int) -> None:
    """Open a new payment attempt for a pending order."""
    try:
        init = initialize_payment_handler().handle(order_id)
    except (DomainException, GatewayError) as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Reference: {init.reference}")
    click.echo(f"Pay at:    {init.authorization_url}")


@click.command("verify")
@click.option("--reference", required=True, help="Payment reference to reconcile.")
def payment_verify(reference: str) -> None:
    """Fetch the gateway verdict and apply it to the order."""
    try:
        result = verify_payment_handler().handle(reference)
    except (DomainException, GatewayError) as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order #{result.order_id}: {result.message} (status={result.order_status})")
    if not result.success:
        raise SystemExit(1)
