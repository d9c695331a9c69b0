"""Data Transfer Objects: plain containers that cross layer boundaries.

DTOs carry data between the application layer and its callers (HTTP
routes, CLI) without exposing domain aggregates to the outside world.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from shopcore.domain.model.cart import Cart
from shopcore.domain.model.order import Order


@dataclass(frozen=True)
class CartItemDTO:
    product_id: str
    quantity: int


@dataclass(frozen=True)
class CartDTO:
    owner_id: str
    items: list[CartItemDTO]
    updated_at: datetime


@dataclass(frozen=True)
class OrderLineItemDTO:
    """Output: a single line item as shown to the customer."""

    product_id: str
    product_name: str
    quantity: int
    unit_price: str  # decimal string, e.g. "15.00"
    line_total: str
    currency: str


@dataclass(frozen=True)
class OrderDTO:
    """Output: a complete order as shown to the customer."""

    id: int
    owner_id: str
    status: str
    items: list[OrderLineItemDTO]
    total: str
    created_at: datetime
    updated_at: datetime


# --- Mapping ------------------------------------------------------------------


def cart_to_dto(cart: Cart) -> CartDTO:
    return CartDTO(
        owner_id=cart.owner_id,
        items=[
            CartItemDTO(product_id=item.product_id, quantity=item.quantity.value)
            for item in cart.items
        ],
        updated_at=cart.updated_at,
    )


def order_to_dto(order: Order) -> OrderDTO:
    return OrderDTO(
        id=order.id,  # type: ignore[arg-type]
        owner_id=order.owner_id,
        status=order.status.value,
        items=[
            OrderLineItemDTO(
                product_id=item.product_id,
                product_name=item.product_name,
                quantity=item.quantity.value,
                unit_price=f"{item.unit_price.amount:.2f}",
                line_total=f"{item.line_total.amount:.2f}",
                currency=item.unit_price.currency,
            )
            for item in order.items
        ],
        total=f"{order.total.amount:.2f}",
        created_at=order.created_at,
        updated_at=order.updated_at,  # type: ignore[arg-type]
    )
