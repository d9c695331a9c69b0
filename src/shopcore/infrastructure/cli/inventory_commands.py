"""CLI commands for stock levels."""

from __future__ import annotations

import click

from shopcore.application.set_stock import SetStockHandler
from shopcore.application.show_inventory import ShowInventoryHandler
from shopcore.domain.exceptions import DomainException
from shopcore.infrastructure.bootstrap import container


@click.command("set")
@click.option("--product", "product_id", required=True, help="Product ID.")
@click.option("--quantity", required=True, type=int, help="Units on hand.")
def inventory_set(product_id: str, quantity: int) -> None:
    """Set the stock level for a product."""
    handler = SetStockHandler(product_repo=container().product_repo)

    try:
        handler.handle(product_id=product_id, quantity=quantity)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Stock for '{product_id}' set to {quantity}")


@click.command("show")
def inventory_show() -> None:
    """Show current stock levels."""
    handler = ShowInventoryHandler(product_repo=container().product_repo)
    lines = handler.handle()

    if not lines:
        click.echo("No products found.")
        return

    click.echo(f"{'ID':<12} {'Product':<20} {'Price':>10} {'Stock':>8}")
    click.echo("-" * 53)
    for line in lines:
        click.echo(
            f"{line.product_id:<12} {line.product_name:<20} {line.price:>10} {line.stock_qty:>8}"
        )
