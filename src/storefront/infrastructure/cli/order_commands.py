"""CLI commands for the Order aggregate."""

from __future__ import annotations

import click

from storefront.application.dto import CartItemSpec, CheckoutRequest, OrderDTO
from storefront.domain.exceptions import DomainException, PaymentInitializationFailed
from storefront.domain.port.payment_gateway import GatewayError
from storefront.infrastructure.bootstrap import (
    initialize_payment_handler,
    place_order_handler,
    show_order_handler,
)


def _parse_items(raw: str) -> list[CartItemSpec]:
    """Parse '1:3,2:5' (product id : cartons) into CartItemSpec list."""
    specs: list[CartItemSpec] = []
    for pair in raw.split(","):
        pair = pair.strip()
        if ":" not in pair:
            raise click.BadParameter(
                f"Invalid item format '{pair}'. Expected 'ProductId:Cartons'."
            )
        product_id, qty_str = pair.rsplit(":", 1)
        try:
            qty = int(qty_str)
        except ValueError:
            raise click.BadParameter(
                f"Invalid quantity '{qty_str}' for product '{product_id}'."
            )
        specs.append(CartItemSpec(product_id=product_id.strip(), quantity=qty))
    return specs


@click.command("checkout")
@click.option("--email", required=True, help="Customer email.")
@click.option("--name", "customer_name", default="", help="Customer display name.")
@click.option("--address", required=True, help="Shipping address.")
@click.option("--phone", required=True, help="Contact number.")
@click.option("--items", required=True, help="Items as 'ProductId:Cartons,ProductId:Cartons'.")
def order_checkout(email: str, customer_name: str, address: str, phone: str, items: str) -> None:
    """Place an order and open a payment for it."""
    request = CheckoutRequest(
        email=email,
        customer_name=customer_name,
        shipping_address=address,
        contact_number=phone,
        items=_parse_items(items),
    )

    try:
        # built first so a missing gateway key fails before anything is stored
        initialize = initialize_payment_handler()
        placed = place_order_handler().handle(request)
    except (DomainException, GatewayError) as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order #{placed.order_id} created  (status=pending)")
    click.echo(f"  {'Subtotal':<12} {placed.subtotal:>16}")
    click.echo(f"  {'Tax':<12} {placed.tax:>16}")
    click.echo(f"  {'Shipping':<12} {placed.shipping:>16}")
    click.echo(f"  {'Total':<12} {placed.total:>16}")

    try:
        init = initialize.handle(placed.order_id)
    except PaymentInitializationFailed as exc:
        raise click.ClickException(f"{exc}; order #{placed.order_id} was cancelled")
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo()
    click.echo(f"Reference: {init.reference}")
    click.echo(f"Pay at:    {init.authorization_url}")


def _display_order(dto: OrderDTO) -> None:
    """Shared formatting for displaying an order."""
    click.echo(f"Order #{dto.id}  (status={dto.status})")
    click.echo(f"Customer: #{dto.customer_id}")
    click.echo(f"Ship to:  {dto.shipping_address}")
    click.echo(f"Created:  {dto.created_at}   Updated: {dto.updated_at}")
    click.echo()

    click.echo(f"  {'Product':<10} {'Cartons':>8} {'Per ctn':>8} {'Unit price':>14} {'Total':>16}")
    click.echo(f"  {'-'*60}")
    for item in dto.items:
        click.echo(
            f"  {item.product_id:<10} {item.quantity:>8} {item.min_quantity:>8} "
            f"{item.unit_price:>14} {item.line_total:>16}"
        )
    click.echo(f"  {'-'*60}")
    click.echo(f"  {'Subtotal':<44} {dto.subtotal:>16}")
    click.echo(f"  {'Tax':<44} {dto.tax:>16}")
    click.echo(f"  {'Shipping':<44} {dto.shipping:>16}")
    click.echo(f"  {'Order Total':<44} {dto.total:>16}")


@click.command("show")
@click.option("--id", "order_id", required=True, type=int, help="Order ID to display.")
def order_show(order_id: int) -> None:
    """Show details of an existing order."""
    handler = show_order_handler()

    try:
        dto = handler.handle(order_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _display_order(dto)
