"""CLI commands for the Product aggregate."""

from __future__ import annotations

import click

from storefront.application.catalog import AddProductHandler, UpdateProductHandler
from storefront.domain.exceptions import DomainException
from storefront.infrastructure.bootstrap import product_repository


@click.command("add")
@click.option("--name", required=True, help="Product name.")
@click.option("--price", required=True, help="Base price per unit (e.g. 100.00).")
@click.option("--profit", default="0", show_default=True, help="Margin per unit.")
@click.option("--min-quantity", default=1, show_default=True, type=int, help="Units per carton.")
def product_add(name: str, price: str, profit: str, min_quantity: int) -> None:
    """Add a new product to the catalog."""
    handler = AddProductHandler(product_repo=product_repository())

    try:
        product = handler.handle(name=name, price=price, profit=profit, min_quantity=min_quantity)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(
        f"Product #{product.id} '{product.name}' added at {product.price} "
        f"+ {product.profit} profit, {product.min_quantity} per carton"
    )


@click.command("list")
def product_list() -> None:
    """List all products in the catalog."""
    repo = product_repository()
    try:
        products = repo.list_all()
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not products:
        click.echo("No products found.")
        return

    click.echo(f"{'ID':<6} {'Name':<24} {'Price':>12} {'Profit':>12} {'Carton':>7}")
    click.echo("-" * 65)
    for p in products:
        click.echo(
            f"{p.id:<6} {p.name:<24} {str(p.price):>12} {str(p.profit):>12} {p.min_quantity:>7}"
        )


@click.command("update")
@click.option("--id", "product_id", required=True, help="Product ID.")
@click.option("--price", required=True, help="New base price (e.g. 29.99).")
@click.option("--profit", default=None, help="New margin per unit.")
def product_update(product_id: str, price: str, profit: str | None) -> None:
    """Update a product's price (existing orders keep their snapshot)."""
    handler = UpdateProductHandler(product_repo=product_repository())

    try:
        product = handler.handle(product_id=product_id, new_price=price, new_profit=profit)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Product #{product.id} now sells at {product.unit_sale_price} per unit")
