"""SQL-backed implementation of OrderRepository."""

from __future__ import annotations

from collections import defaultdict
from datetime import datetime
from decimal import Decimal

from sqlalchemy import insert, select, update
from sqlalchemy.engine import Connection, Engine, Row

from shopcore.domain.model.order import Order, OrderLineItem, OrderStatus
from shopcore.domain.model.value_objects import Money, Quantity
from shopcore.domain.repository.order_repository import OrderRepository
from shopcore.infrastructure.persistence.database import as_utc, order_items, orders


class SqlOrderRepository(OrderRepository):

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    # --- OrderRepository interface --------------------------------------------

    def get_by_id(self, order_id: int) -> Order | None:
        with self._engine.connect() as conn:
            head = conn.execute(select(orders).where(orders.c.id == order_id)).first()
            if head is None:
                return None
            lines = self._load_lines(conn, [head.id])
        return self._to_domain(head, lines[head.id])

    def list_by_owner(self, owner_id: str) -> list[Order]:
        with self._engine.connect() as conn:
            heads = conn.execute(
                select(orders)
                .where(orders.c.owner_id == owner_id)
                .order_by(orders.c.created_at.desc(), orders.c.id.desc())
            ).all()
            lines = self._load_lines(conn, [head.id for head in heads])
        return [self._to_domain(head, lines[head.id]) for head in heads]

    def add(self, order: Order) -> None:
        with self._engine.begin() as conn:
            result = conn.execute(
                insert(orders).values(
                    owner_id=order.owner_id,
                    status=order.status.value,
                    reservation_id=order.reservation_id,
                    created_at=order.created_at,
                    updated_at=order.updated_at,
                )
            )
            order_id = result.inserted_primary_key[0]
            conn.execute(insert(order_items), self._items_to_raw(order_id, order))
        order.id = order_id

    def compare_and_set_status(
        self,
        order_id: int,
        expected: OrderStatus,
        new: OrderStatus,
        updated_at: datetime,
    ) -> bool:
        with self._engine.begin() as conn:
            result = conn.execute(
                update(orders)
                .where(orders.c.id == order_id)
                .where(orders.c.status == expected.value)
                .values(status=new.value, updated_at=updated_at)
            )
        return result.rowcount == 1

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _items_to_raw(order_id: int, order: Order) -> list[dict]:
        return [
            {
                "order_id": order_id,
                "position": position,
                "product_id": item.product_id,
                "product_name": item.product_name,
                "quantity": item.quantity.value,
                "unit_price": str(item.unit_price.amount),
                "currency": item.unit_price.currency,
            }
            for position, item in enumerate(order.items)
        ]

    @staticmethod
    def _load_lines(conn: Connection, order_ids: list[int]) -> dict[int, list[OrderLineItem]]:
        lines: dict[int, list[OrderLineItem]] = defaultdict(list)
        if not order_ids:
            return lines
        rows = conn.execute(
            select(order_items)
            .where(order_items.c.order_id.in_(order_ids))
            .order_by(order_items.c.order_id, order_items.c.position)
        ).all()
        for row in rows:
            lines[row.order_id].append(
                OrderLineItem(
                    product_id=row.product_id,
                    product_name=row.product_name,
                    quantity=Quantity(row.quantity),
                    unit_price=Money(Decimal(row.unit_price), row.currency),
                )
            )
        return lines

    @staticmethod
    def _to_domain(head: Row, items: list[OrderLineItem]) -> Order:
        return Order(
            id=head.id,
            owner_id=head.owner_id,
            items=items,
            reservation_id=head.reservation_id,
            status=OrderStatus(head.status),
            created_at=as_utc(head.created_at),
            updated_at=as_utc(head.updated_at),
        )
