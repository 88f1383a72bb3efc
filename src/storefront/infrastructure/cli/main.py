import click

from storefront.infrastructure.cli.order_commands import order_checkout, order_show
from storefront.infrastructure.cli.payment_commands import payment_initialize, payment_verify
from storefront.infrastructure.cli.product_commands import product_add, product_list, product_update
from storefront.utils import settings
from storefront.utils.logging import configure_logging


@click.group()
@click.option("--log-level", default=None, help="Override LOG_LEVEL.")
def cli(log_level: str | None) -> None:
    """Storefront — orders and payments"""
    configure_logging(log_level or settings.LOG_LEVEL)


@cli.group()
def order() -> None:
    """Place and inspect orders."""


@cli.group()
def product() -> None:
    """Manage the product catalog."""


@cli.group()
def payment() -> None:
    """Start and verify payments."""


@cli.group()
def db() -> None:
    """Database maintenance."""


@db.command("init")
def db_init() -> None:
    """Create all tables."""
    from storefront.infrastructure.bootstrap import engine

    engine()
    click.echo(f"Schema ready at {settings.DATABASE_URL}")


@cli.command("serve")
@click.option("--host", default="127.0.0.1", show_default=True)
@click.option("--port", default=8000, show_default=True, type=int)
def serve(host: str, port: int) -> None:
    """Run the HTTP API."""
    import uvicorn

    uvicorn.run("storefront.infrastructure.api.app:app", host=host, port=port)


# Register subcommands
order.add_command(order_checkout)
order.add_command(order_show)
product.add_command(product_add)
product.add_command(product_list)
product.add_command(product_update)
payment.add_command(payment_initialize)
payment.add_command(payment_verify)
