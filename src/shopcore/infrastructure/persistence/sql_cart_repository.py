"""SQL-backed implementation of CartRepository."""

from __future__ import annotations

from sqlalchemy import delete, insert, select
from sqlalchemy.engine import Engine

from shopcore.domain.model.cart import Cart, CartItem
from shopcore.domain.model.value_objects import Quantity
from shopcore.domain.repository.cart_repository import CartRepository
from shopcore.infrastructure.persistence.database import (
    as_utc,
    cart_items,
    carts,
    upsert,
)


class SqlCartRepository(CartRepository):

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    def get(self, owner_id: str) -> Cart | None:
        with self._engine.connect() as conn:
            head = conn.execute(
                select(carts).where(carts.c.owner_id == owner_id)
            ).first()
            if head is None:
                return None
            rows = conn.execute(
                select(cart_items)
                .where(cart_items.c.owner_id == owner_id)
                .order_by(cart_items.c.position)
            ).all()

        return Cart(
            owner_id=head.owner_id,
            items=[
                CartItem(product_id=row.product_id, quantity=Quantity(row.quantity))
                for row in rows
            ],
            updated_at=as_utc(head.updated_at),
        )

    def save(self, cart: Cart) -> None:
        with self._engine.begin() as conn:
            # The upsert comes first so it holds the cart row for the rest.
            upsert(conn, carts, {"owner_id": cart.owner_id, "updated_at": cart.updated_at})

            # Replace the lines wholesale; a cart is single-owner.
            conn.execute(delete(cart_items).where(cart_items.c.owner_id == cart.owner_id))
            if cart.items:
                conn.execute(
                    insert(cart_items),
                    [
                        {
                            "owner_id": cart.owner_id,
                            "product_id": item.product_id,
                            "quantity": item.quantity.value,
                            "position": position,
                        }
                        for position, item in enumerate(cart.items)
                    ],
                )
