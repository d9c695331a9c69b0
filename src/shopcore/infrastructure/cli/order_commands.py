"""CLI commands for orders.

An operator acts on behalf of a customer, so every command takes the
owning identity explicitly with ``--owner``.
"""

from __future__ import annotations

import click

from shopcore.application.dto import OrderDTO
from shopcore.domain.exceptions import DomainException
from shopcore.domain.model.order import OrderStatus
from shopcore.infrastructure.bootstrap import container


def _display_order(dto: OrderDTO) -> None:
    """Shared formatting for displaying an order."""
    click.echo(f"Order #{dto.id}  (status={dto.status})")
    click.echo(f"Owner:   {dto.owner_id}")
    click.echo(f"Created: {dto.created_at.strftime('%Y-%m-%d %H:%M UTC')}")
    click.echo()
    click.echo(f"  {'Product':<20} {'Qty':>5} {'Price':>10} {'Total':>10}")
    click.echo(f"  {'-'*47}")
    for item in dto.items:
        click.echo(
            f"  {item.product_name:<20} {item.quantity:>5} {item.unit_price:>10} {item.line_total:>10}"
        )
    click.echo(f"  {'-'*47}")
    click.echo(f"  {'Order Total':<27} {dto.total:>20}")


@click.command("list")
@click.option("--owner", required=True, help="Owner identity.")
def order_list(owner: str) -> None:
    """List an owner's orders, most recent first."""
    dtos = container().order_engine().list_orders(owner)

    if not dtos:
        click.echo("No orders found.")
        return

    click.echo(f"{'ID':>6} {'Status':<10} {'Items':>6} {'Total':>10}")
    click.echo("-" * 35)
    for dto in dtos:
        click.echo(f"{dto.id:>6} {dto.status:<10} {len(dto.items):>6} {dto.total:>10}")


@click.command("show")
@click.option("--id", "order_id", required=True, type=int, help="Order ID to display.")
@click.option("--owner", required=True, help="Owner identity.")
def order_show(order_id: int, owner: str) -> None:
    """Show details of an existing order."""
    try:
        dto = container().order_engine().get_order(order_id, owner)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _display_order(dto)


@click.command("status")
@click.option("--id", "order_id", required=True, type=int, help="Order ID.")
@click.option("--owner", required=True, help="Owner identity.")
@click.option(
    "--to",
    "target",
    required=True,
    type=click.Choice([s.value for s in OrderStatus]),
    help="Target status.",
)
def order_status(order_id: int, owner: str, target: str) -> None:
    """Move an order to a new status."""
    try:
        dto = container().order_engine().update_status(order_id, owner, target)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order #{dto.id} is now {dto.status}.")


@click.command("cancel")
@click.option("--id", "order_id", required=True, type=int, help="Order ID to cancel.")
@click.option("--owner", required=True, help="Owner identity.")
def order_cancel(order_id: int, owner: str) -> None:
    """Cancel an order (returns its reserved stock)."""
    try:
        container().order_engine().cancel_order(order_id, owner)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order #{order_id} cancelled, stock released.")
