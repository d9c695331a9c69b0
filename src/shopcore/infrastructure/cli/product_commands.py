"""CLI commands for the Product catalog."""

from __future__ import annotations

import click

from shopcore.application.add_product import AddProductHandler
from shopcore.application.update_product import UpdateProductHandler
from shopcore.domain.exceptions import DomainException
from shopcore.infrastructure.bootstrap import container


@click.command("add")
@click.option("--id", "product_id", required=True, help="Product ID (e.g. sku-001).")
@click.option("--name", required=True, help="Product name.")
@click.option("--price", required=True, help="Price (e.g. 15.00).")
@click.option("--stock", default=0, show_default=True, type=int, help="Initial stock.")
def product_add(product_id: str, name: str, price: str, stock: int) -> None:
    """Add a new product to the catalog."""
    handler = AddProductHandler(product_repo=container().product_repo)

    try:
        product = handler.handle(
            product_id=product_id, name=name, price=price, stock_qty=stock
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(
        f"Product {product.id} '{product.name}' added at {product.price} "
        f"(stock {product.stock_qty})"
    )


@click.command("list")
def product_list() -> None:
    """List all products in the catalog."""
    products = container().product_repo.list_all()

    if not products:
        click.echo("No products found.")
        return

    click.echo(f"{'ID':<12} {'Name':<20} {'Price':>10}")
    click.echo("-" * 44)
    for p in products:
        click.echo(f"{p.id:<12} {p.name:<20} {str(p.price):>10}")


@click.command("update")
@click.option("--id", "product_id", required=True, help="Product ID.")
@click.option("--price", required=True, help="New price (e.g. 29.99).")
def product_update(product_id: str, price: str) -> None:
    """Update a product's price."""
    handler = UpdateProductHandler(product_repo=container().product_repo)

    try:
        handler.handle(product_id=product_id, new_price=price)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Product {product_id} price updated to ${price}")
