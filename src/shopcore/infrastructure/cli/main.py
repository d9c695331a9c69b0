import click

from shopcore.infrastructure.cli.inventory_commands import inventory_set, inventory_show
from shopcore.infrastructure.cli.order_commands import (
    order_cancel,
    order_list,
    order_show,
    order_status,
)
from shopcore.infrastructure.cli.product_commands import (
    product_add,
    product_list,
    product_update,
)
from shopcore.infrastructure.logging import configure_logging


@click.group()
def cli() -> None:
    """shopcore: carts, orders and stock"""
    configure_logging()


@cli.group()
def order() -> None:
    """Manage orders."""


@cli.group()
def product() -> None:
    """Manage products."""


@cli.group()
def inventory() -> None:
    """Manage stock levels."""


@cli.command()
@click.option("--host", default="127.0.0.1", show_default=True)
@click.option("--port", default=8000, show_default=True, type=int)
def serve(host: str, port: int) -> None:
    """Run the HTTP API."""
    import uvicorn

    from shopcore.infrastructure.web.app import create_app

    uvicorn.run(create_app(), host=host, port=port, log_config=None)


# Register subcommands
order.add_command(order_cancel)
order.add_command(order_list)
order.add_command(order_show)
order.add_command(order_status)
product.add_command(product_add)
product.add_command(product_list)
product.add_command(product_update)
inventory.add_command(inventory_set)
inventory.add_command(inventory_show)
